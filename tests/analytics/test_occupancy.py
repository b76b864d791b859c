from __future__ import annotations

from groundops.analytics.occupancy import OccupancySource, ever_occupants
from groundops.trace.domain_types import Flight, LineKind, Passenger
from groundops.trace.run_config import RunConfig
from groundops.trace.simulation_trace import SimulationTrace

FLIGHT = Flight.from_hhmm("UA100", "08:00", 100, 0.9)


def _make_passenger(pid: int, **kwargs) -> Passenger:
    return Passenger(passenger_id=pid, flight=FLIGHT, **kwargs)


def test_passengers_leaving_before_the_end_are_still_counted():
    a, b = _make_passenger(1), _make_passenger(2)
    trace = SimulationTrace.from_histories(RunConfig(), hold_rooms=[[[a, b]], [[]]])

    occupants = ever_occupants(trace, LineKind.HOLD_ROOM)

    assert len(occupants) == 2
    assert occupants.source is OccupancySource.HISTORY
    assert occupants.history_complete


def test_duplicates_keep_first_seen_order():
    a, b, c = _make_passenger(1), _make_passenger(2), _make_passenger(3)
    trace = SimulationTrace.from_histories(
        RunConfig(), hold_rooms=[[[b], [a]], [[a, c], [b]]]
    )

    occupants = ever_occupants(trace, LineKind.HOLD_ROOM)

    assert [p.passenger_id for p in occupants] == [2, 1, 3]


def test_identical_attributes_with_distinct_ids_are_distinct():
    twins = [_make_passenger(1, arrival_minute=5), _make_passenger(2, arrival_minute=5)]
    trace = SimulationTrace.from_histories(RunConfig(), hold_rooms=[[twins]])

    assert len(ever_occupants(trace, LineKind.HOLD_ROOM)) == 2


def test_live_lines_used_when_history_is_empty():
    a = _make_passenger(1)
    trace = SimulationTrace.from_histories(RunConfig(), live_hold_rooms=[[a]])

    occupants = ever_occupants(trace, LineKind.HOLD_ROOM)

    assert occupants.source is OccupancySource.LIVE_LINES
    assert not occupants.history_complete
    assert [p.passenger_id for p in occupants] == [1]


def test_no_history_and_no_live_lines_is_unavailable():
    occupants = ever_occupants(SimulationTrace(config=RunConfig()), LineKind.HOLD_ROOM)

    assert len(occupants) == 0
    assert occupants.source is OccupancySource.UNAVAILABLE


def test_count_by_flight_skips_missed_and_flightless():
    passengers = [
        _make_passenger(1),
        _make_passenger(2, missed=True),
        Passenger(passenger_id=3, flight=None),
        _make_passenger(4),
    ]
    trace = SimulationTrace.from_histories(RunConfig(), hold_rooms=[[passengers]])

    occupants = ever_occupants(trace, LineKind.HOLD_ROOM)

    assert occupants.count_by_flight() == {FLIGHT: 2}
    assert len(occupants.not_missed()) == 3
