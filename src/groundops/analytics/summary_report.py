"""Summary report composed from a finished simulation trace.

This module provides :class:`SummaryComposer`, which turns the interval-indexed
trace published by the simulation engine into the figures a ground-operations
engineer reviews after a run.

Sections
--------
1. **Inputs**: the run configuration echoed back (general values, arrival
   curve, ticket counters, checkpoints, hold rooms, flights). A run without an
   arrival curve yields an :class:`ArrivalCurveSection` with
   ``available=False``.

2. **Overview**: flight count, passengers generated, passengers that reached a
   hold room, missed passengers, the in-person/online mix, stage dwell
   averages and the four system-wide peaks.

3. **Flights**: expected, generated, reached and missed passengers per flight.

4. **Sizing**: per line maximum occupancy and square footage for ticket
   counters, checkpoints and hold rooms, plus per-kind totals.

Notes
-----
- Hold rooms are emptied at departure, so "reached hold" is read from every
  interval of the hold-room history (:func:`ever_occupants`).
- Missed passengers are floored at zero per flight before summing, so a flight
  with surplus arrivals never hides another flight's shortfall.
- Sizing totals add each line's own maximum. The lines rarely peak together,
  so the totals are a conservative worst case and can overstate the floor
  space needed at any single instant.
- Composing never mutates the trace; running it twice gives equal reports.

Example
-------
>>> config = RunConfig.from_yaml("run.yaml")
>>> trace = load_trace("trace.json", config)
>>> report = SummaryComposer(trace).compose()
>>> report.overview.missed_passengers
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from groundops.trace.domain_types import ArrivalCurveConfig, LineKind, SeriesKind, format_hhmm, round_half_up
from groundops.trace.simulation_trace import SimulationTrace

from .dwell_times import DwellAverages, dwell_averages
from .occupancy import EverOccupants, ever_occupants
from .peaks import PeakResult, line_maxima, series_peak, sum_peaks
from .time_labels import IntervalLabeler

logger = logging.getLogger(__name__)

SIZING_NOTE = (
    "Totals are sums of per-unit maxima, not a simultaneous peak; "
    "they can overstate concurrent floor-space demand."
)
NO_CURVE_NOTE = "No arrival curve config available."

PEAK_TITLES = {
    SeriesKind.TICKET_QUEUED: "Peak Ticket Queue",
    SeriesKind.CHECKPOINT_QUEUED: "Peak Checkpoint Queue",
    SeriesKind.HOLD_ROOM_TOTAL: "Peak Hold Rooms Total",
    SeriesKind.HELD_UP: "Peak Held-Up (ticket+checkpoint)",
}
LINE_LABEL_PREFIX = {
    LineKind.TICKET: "Counter",
    LineKind.CHECKPOINT: "Checkpoint",
    LineKind.HOLD_ROOM: "Hold Room",
}


# ----------------------------------------------------------------- inputs --
@dataclass(frozen=True)
class GeneralInputs:
    percent_in_person: float
    arrival_span_minutes: int
    effective_arrival_span_minutes: int
    transit_delay_minutes: int
    hold_delay_minutes: int
    interval_minutes: int
    sqft_per_passenger: int


@dataclass(frozen=True)
class ArrivalCurveSection:
    available: bool
    config: Optional[ArrivalCurveConfig] = None
    note: str = ""


@dataclass(frozen=True)
class CounterInputRow:
    counter_id: int
    rate_per_hour: float
    allowed_flights: str


@dataclass(frozen=True)
class CheckpointInputRow:
    checkpoint_id: int
    rate_per_hour: float


@dataclass(frozen=True)
class HoldRoomInputRow:
    room_id: int
    walk_minutes: int
    walk_seconds: int
    allowed_flights: str


@dataclass(frozen=True)
class FlightInputRow:
    flight_number: str
    departure: str
    seats: int
    fill_percent: float


@dataclass(frozen=True)
class InputsSection:
    general: GeneralInputs
    arrival_curve: ArrivalCurveSection
    ticket_counters: Tuple[CounterInputRow, ...]
    checkpoints: Tuple[CheckpointInputRow, ...]
    hold_rooms: Tuple[HoldRoomInputRow, ...]
    flights: Tuple[FlightInputRow, ...]


# --------------------------------------------------------------- outputs --
@dataclass(frozen=True)
class PassengerMix:
    in_person: int
    online: int
    percent_in_person: float


@dataclass(frozen=True)
class PeakCount:
    series: SeriesKind
    title: str
    value: int
    interval_label: str
    time_label: str


@dataclass(frozen=True)
class OverviewSection:
    flights_count: int
    total_generated: int
    reached_hold: int
    missed_passengers: int
    mix: PassengerMix
    dwell: DwellAverages
    peaks: Tuple[PeakCount, ...]
    hold_history_complete: bool

    def peak(self, series: SeriesKind) -> PeakCount:
        for peak in self.peaks:
            if peak.series is series:
                return peak
        raise KeyError(f"No peak recorded for series '{series.value}'")


@dataclass(frozen=True)
class FlightRow:
    flight_number: str
    departure: str
    boarding_close: str
    expected_passengers: int
    generated_passengers: int
    reached_hold: int
    missed: int


@dataclass(frozen=True)
class SizingRow:
    label: str
    resource_id: int
    line_index: int
    max_passengers: int
    max_sqft: int
    time_label: str
    interval_label: str


@dataclass(frozen=True)
class SizingSection:
    kind: LineKind
    rows: Tuple[SizingRow, ...]
    total_max_passengers: int
    total_sqft: int


@dataclass(frozen=True)
class SummaryReport:
    """Structured payload returned by :meth:`SummaryComposer.compose`."""

    inputs: InputsSection
    overview: OverviewSection
    flights: Tuple[FlightRow, ...]
    sizing: Dict[LineKind, SizingSection]
    sizing_note: str = SIZING_NOTE


class SummaryComposer:
    """Builds a :class:`SummaryReport` from one immutable trace."""

    def __init__(self, trace: SimulationTrace) -> None:
        self._trace = trace
        self._config = trace.config
        self._labeler = IntervalLabeler.from_config(trace.config)

    def compose(self) -> SummaryReport:
        ever_held = ever_occupants(self._trace, LineKind.HOLD_ROOM)
        if not ever_held.history_complete:
            logger.warning(
                "Hold-room history incomplete (source=%s); reached and missed counts are best-effort",
                ever_held.source.value,
            )
        self._warn_on_misaligned_lines()

        report = SummaryReport(
            inputs=self._build_inputs(),
            overview=self._build_overview(ever_held),
            flights=self._build_flight_rows(ever_held),
            sizing={kind: self._build_sizing(kind) for kind in LineKind},
        )
        logger.info(
            "Composed summary over %d intervals: generated=%d reached_hold=%d missed=%d",
            self._trace.num_intervals,
            report.overview.total_generated,
            report.overview.reached_hold,
            report.overview.missed_passengers,
        )
        return report

    # ---------------------------------------------------------------- inputs
    def _build_inputs(self) -> InputsSection:
        config = self._config
        general = GeneralInputs(
            percent_in_person=config.percent_in_person,
            arrival_span_minutes=config.arrival_span_minutes,
            effective_arrival_span_minutes=config.effective_arrival_span_minutes,
            transit_delay_minutes=config.transit_delay_minutes,
            hold_delay_minutes=config.hold_delay_minutes,
            interval_minutes=config.interval_minutes,
            sqft_per_passenger=config.sqft_per_passenger,
        )
        if config.arrival_curve is None:
            logger.info("Run has no arrival curve config; curve section marked unavailable")
            curve = ArrivalCurveSection(available=False, note=NO_CURVE_NOTE)
        else:
            curve = ArrivalCurveSection(available=True, config=config.arrival_curve)
        return InputsSection(
            general=general,
            arrival_curve=curve,
            ticket_counters=tuple(
                CounterInputRow(
                    counter_id=counter.id,
                    rate_per_hour=counter.rate_per_hour,
                    allowed_flights=", ".join(sorted(counter.allowed_flights)) or "ALL",
                )
                for counter in config.ticket_counters
            ),
            checkpoints=tuple(
                CheckpointInputRow(checkpoint_id=cp.id, rate_per_hour=float(cp.rate_per_hour))
                for cp in config.checkpoints
            ),
            hold_rooms=tuple(
                HoldRoomInputRow(
                    room_id=room.id,
                    walk_minutes=room.walk_minutes,
                    walk_seconds=room.walk_seconds_part,
                    allowed_flights=room.allowed_flights_text,
                )
                for room in config.hold_rooms
            ),
            flights=tuple(
                FlightInputRow(
                    flight_number=flight.flight_number,
                    departure=flight.departure_str,
                    seats=flight.seats,
                    fill_percent=flight.fill_percent,
                )
                for flight in config.flights
            ),
        )

    # -------------------------------------------------------------- overview
    def _build_overview(self, ever_held: EverOccupants) -> OverviewSection:
        total_generated = self._trace.total_generated()
        fraction = self._config.percent_in_person
        in_person = round_half_up(total_generated * fraction)
        mix = PassengerMix(
            in_person=in_person,
            online=max(0, total_generated - in_person),
            percent_in_person=fraction,
        )
        return OverviewSection(
            flights_count=len(self._config.flights),
            total_generated=total_generated,
            reached_hold=len(ever_held.not_missed()),
            missed_passengers=sum(row.missed for row in self._build_flight_rows(ever_held)),
            mix=mix,
            dwell=dwell_averages(ever_held),
            peaks=tuple(self._peak_count(kind) for kind in SeriesKind),
            hold_history_complete=ever_held.history_complete,
        )

    def _peak_count(self, kind: SeriesKind) -> PeakCount:
        result: PeakResult = series_peak(self._trace.series_for(kind))
        return PeakCount(
            series=kind,
            title=PEAK_TITLES[kind],
            value=result.value,
            interval_label=self._labeler.interval_label(result.interval),
            time_label=self._labeler.time_label(result.interval),
        )

    # --------------------------------------------------------------- flights
    def _build_flight_rows(self, ever_held: EverOccupants) -> Tuple[FlightRow, ...]:
        reached_by_flight = ever_held.count_by_flight()
        close_minutes = self._config.boarding_close_minutes
        rows = []
        for flight in self._config.flights:
            expected = flight.expected_passengers
            reached = reached_by_flight.get(flight, 0)
            rows.append(
                FlightRow(
                    flight_number=flight.flight_number,
                    departure=flight.departure_str,
                    boarding_close=format_hhmm(flight.departure_minutes - close_minutes),
                    expected_passengers=expected,
                    generated_passengers=self._trace.generated_for(flight.flight_number),
                    reached_hold=reached,
                    missed=max(0, expected - reached),
                )
            )
        return tuple(rows)

    # ---------------------------------------------------------------- sizing
    def _build_sizing(self, kind: LineKind) -> SizingSection:
        configs = self._trace.resource_configs(kind)
        maxima = line_maxima(self._trace.line_history(kind), len(configs))
        sqft = self._config.sqft_per_passenger
        rows = []
        for line_index, (resource, peak) in enumerate(zip(configs, maxima)):
            rows.append(
                SizingRow(
                    label=f"{LINE_LABEL_PREFIX[kind]} {resource.id}",
                    resource_id=resource.id,
                    line_index=line_index,
                    max_passengers=peak.value,
                    max_sqft=peak.value * sqft,
                    time_label=self._labeler.time_label(peak.interval),
                    interval_label=self._labeler.interval_label(peak.interval),
                )
            )
            logger.debug(
                "%s line %d peaked at %d passengers (interval %d)",
                kind.value,
                line_index,
                peak.value,
                peak.interval,
            )
        total = sum_peaks(maxima)
        return SizingSection(
            kind=kind,
            rows=tuple(rows),
            total_max_passengers=total,
            total_sqft=total * sqft,
        )

    def _warn_on_misaligned_lines(self) -> None:
        for kind in LineKind:
            expected = len(self._trace.resource_configs(kind))
            short = sum(
                1 for lines in self._trace.line_history(kind) if len(lines) < expected
            )
            if short and expected:
                logger.warning(
                    "%d of %d %s snapshots hold fewer than %d lines; missing lines are skipped",
                    short,
                    self._trace.num_intervals,
                    kind.value,
                    expected,
                )


def compose_summary(trace: SimulationTrace) -> SummaryReport:
    return SummaryComposer(trace).compose()


__all__ = [
    "ArrivalCurveSection",
    "CheckpointInputRow",
    "CounterInputRow",
    "FlightInputRow",
    "FlightRow",
    "GeneralInputs",
    "HoldRoomInputRow",
    "InputsSection",
    "NO_CURVE_NOTE",
    "OverviewSection",
    "PassengerMix",
    "PeakCount",
    "SIZING_NOTE",
    "SizingRow",
    "SizingSection",
    "SummaryComposer",
    "SummaryReport",
    "compose_summary",
]
