from __future__ import annotations

import pytest

from groundops.analytics.dwell_times import dwell_averages
from groundops.analytics.summary_report import NO_CURVE_NOTE, SIZING_NOTE, SummaryComposer, compose_summary
from groundops.trace.domain_types import (
    ArrivalCurveConfig,
    CheckpointConfig,
    Flight,
    HoldRoomConfig,
    LineKind,
    Passenger,
    SeriesKind,
    TicketCounterConfig,
)
from groundops.trace.run_config import RunConfig
from groundops.trace.simulation_trace import SimulationTrace


def _make_config(**overrides) -> RunConfig:
    values = dict(
        flights=(Flight.from_hhmm("UA100", "08:00", 100, 0.9),),
        ticket_counters=(TicketCounterConfig(id=1),),
        checkpoints=(CheckpointConfig(id=1, rate_per_hour=120),),
        hold_rooms=(HoldRoomConfig(id=1),),
    )
    values.update(overrides)
    return RunConfig(**values)


def _make_passengers(flight, count: int, start_id: int = 0, **kwargs):
    return [Passenger(passenger_id=start_id + i, flight=flight, **kwargs) for i in range(count)]


def test_missed_passengers_per_flight():
    config = _make_config()
    flight = config.flights[0]
    reached = _make_passengers(flight, 85)
    trace = SimulationTrace.from_histories(
        config,
        hold_rooms=[[reached[:40]], [reached], [[]]],
        minute_arrivals={"UA100": [50, 40]},
    )

    report = SummaryComposer(trace).compose()

    row = report.flights[0]
    assert row.expected_passengers == 90
    assert row.reached_hold == 85
    assert row.missed == 5
    assert row.generated_passengers == 90
    assert row.boarding_close == "07:40"
    assert report.overview.reached_hold == 85
    assert report.overview.missed_passengers == 5
    assert report.overview.total_generated == 90
    assert report.overview.hold_history_complete


def test_missed_is_floored_at_zero_per_flight():
    early = Flight.from_hhmm("UA100", "08:00", 2, 1.0)
    late = Flight.from_hhmm("DL200", "09:00", 10, 1.0)
    config = _make_config(flights=(early, late))
    passengers = _make_passengers(early, 3) + _make_passengers(late, 6, start_id=10)
    trace = SimulationTrace.from_histories(config, hold_rooms=[[passengers]])

    report = compose_summary(trace)

    assert [row.missed for row in report.flights] == [0, 4]
    assert report.overview.missed_passengers == 4


def test_missed_passengers_do_not_count_as_reached():
    config = _make_config()
    flight = config.flights[0]
    passengers = _make_passengers(flight, 3) + _make_passengers(flight, 2, start_id=3, missed=True)
    trace = SimulationTrace.from_histories(config, hold_rooms=[[passengers]])

    report = compose_summary(trace)

    assert report.overview.reached_hold == 3
    assert report.flights[0].reached_hold == 3


def test_sizing_uses_per_line_maxima():
    config = _make_config(
        sqft_per_passenger=15,
        ticket_counters=(TicketCounterConfig(id=1), TicketCounterConfig(id=2)),
    )
    flight = config.flights[0]
    counter_one = _make_passengers(flight, 4)
    counter_two = _make_passengers(flight, 6, start_id=100)
    trace = SimulationTrace.from_histories(
        config,
        ticket=[[counter_one, counter_two[:2]], [counter_one[:1], counter_two]],
    )

    section = compose_summary(trace).sizing[LineKind.TICKET]

    assert [row.max_sqft for row in section.rows] == [60, 90]
    assert [row.label for row in section.rows] == ["Counter 1", "Counter 2"]
    assert section.total_max_passengers == 10
    assert section.total_sqft == 150


def test_peak_time_labels_follow_run_start():
    config = _make_config()
    trace = SimulationTrace.from_histories(
        config,
        series={SeriesKind.TICKET_QUEUED: {0: 5, 1: 2}},
    )

    overview = compose_summary(trace).overview
    peak = overview.peak(SeriesKind.TICKET_QUEUED)

    assert peak.value == 5
    assert peak.time_label == "06:01"
    assert peak.interval_label == "1"
    empty = overview.peak(SeriesKind.HELD_UP)
    assert (empty.value, empty.time_label, empty.interval_label) == (0, "", "")


def test_arrival_curve_widens_run_start():
    config = _make_config(
        arrival_curve=ArrivalCurveConfig(legacy_mode=False, window_start_minutes_before_departure=180),
    )
    trace = SimulationTrace.from_histories(config, series={SeriesKind.HELD_UP: {2: 1}})

    report = compose_summary(trace)

    assert report.inputs.arrival_curve.available
    assert report.inputs.general.effective_arrival_span_minutes == 180
    assert report.overview.peak(SeriesKind.HELD_UP).time_label == "05:03"


def test_report_without_curve_or_history_still_has_every_section():
    trace = SimulationTrace(config=_make_config())

    report = compose_summary(trace)

    assert report.inputs.arrival_curve.available is False
    assert report.inputs.arrival_curve.note == NO_CURVE_NOTE
    assert len(report.overview.peaks) == len(SeriesKind)
    assert set(report.sizing) == set(LineKind)
    assert report.sizing[LineKind.TICKET].rows[0].max_passengers == 0
    assert report.sizing[LineKind.TICKET].rows[0].time_label == ""
    assert report.flights[0].missed == 90
    assert report.overview.hold_history_complete is False
    assert report.sizing_note == SIZING_NOTE


def test_passenger_mix_rounds_in_person_share():
    config = _make_config(percent_in_person=0.4)
    trace = SimulationTrace.from_histories(config, minute_arrivals={"UA100": [3, 2, 2]})

    mix = compose_summary(trace).overview.mix

    assert mix.in_person == 3
    assert mix.online == 4
    assert mix.percent_in_person == pytest.approx(0.4)


def test_dwell_averages_drop_unreached_stages():
    flight = Flight.from_hhmm("UA100", "08:00", 100, 0.9)
    passengers = [
        Passenger(0, flight, arrival_minute=0, in_person=True, ticket_completion_minute=10,
                  checkpoint_completion_minute=20, hold_room_entry_minute=30),
        Passenger(1, flight, arrival_minute=5, in_person=True, ticket_completion_minute=-1,
                  checkpoint_completion_minute=-1, hold_room_entry_minute=-1),
        Passenger(2, flight, arrival_minute=0, in_person=False, checkpoint_completion_minute=7,
                  hold_room_entry_minute=15),
    ]

    averages = dwell_averages(passengers)

    assert averages.ticket == 10
    assert averages.checkpoint_in_person == 10
    assert averages.checkpoint_online == 7
    assert averages.arrival_to_hold == 23
    assert dwell_averages([]).ticket == 0


def test_compose_twice_gives_equal_reports():
    config = _make_config()
    passengers = _make_passengers(config.flights[0], 5)
    trace = SimulationTrace.from_histories(
        config,
        ticket=[[passengers[:2]], [passengers[2:]]],
        hold_rooms=[[[]], [passengers]],
        series={SeriesKind.HOLD_ROOM_TOTAL: {1: 5}},
    )
    composer = SummaryComposer(trace)

    assert composer.compose() == composer.compose()
    assert trace.line_history(LineKind.HOLD_ROOM)[1][0] == tuple(passengers)
