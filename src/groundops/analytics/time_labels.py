"""Wall-clock and interval labels for history indices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from groundops.trace.domain_types import Flight, format_hhmm
from groundops.trace.run_config import RunConfig


def run_start_minutes(flights: Iterable[Flight], arrival_span_minutes: int) -> int:
    """Earliest departure minus the arrival span; midnight when no flights exist."""
    departures = [flight.departure_minutes for flight in flights]
    first_departure = min(departures) if departures else 0
    return first_departure - int(arrival_span_minutes)


def time_for_index(run_start: int, interval_minutes: int, history_index: int) -> str:
    # Snapshot i is recorded at the end of interval i.
    if history_index < 0:
        return ""
    return format_hhmm(run_start + (history_index + 1) * interval_minutes)


def interval_for_index(history_index: int) -> str:
    if history_index < 0:
        return ""
    return str(history_index + 1)


@dataclass(frozen=True)
class IntervalLabeler:
    run_start: int
    interval_minutes: int

    @classmethod
    def from_config(cls, config: RunConfig) -> "IntervalLabeler":
        start = run_start_minutes(config.flights, config.effective_arrival_span_minutes)
        return cls(run_start=start, interval_minutes=config.interval_minutes)

    def time_label(self, history_index: int) -> str:
        return time_for_index(self.run_start, self.interval_minutes, history_index)

    def interval_label(self, history_index: int) -> str:
        return interval_for_index(history_index)


__all__ = ["IntervalLabeler", "interval_for_index", "run_start_minutes", "time_for_index"]
