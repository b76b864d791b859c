"""Passengers that ever occupied a resource kind across the whole run.

Hold rooms are emptied when their flight departs, so the final snapshot
undercounts everyone who reached them. The full interval history is walked
instead, keeping the first sighting of each passenger id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Tuple

from groundops.trace.domain_types import Flight, LineKind, Passenger
from groundops.trace.simulation_trace import LineSet, SimulationTrace

logger = logging.getLogger(__name__)


class OccupancySource(str, Enum):
    HISTORY = "history"
    LIVE_LINES = "live_lines"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class EverOccupants:
    """Deduplicated passengers in first-seen order, tagged with where they came from."""

    kind: LineKind
    passengers: Tuple[Passenger, ...]
    source: OccupancySource

    def __len__(self) -> int:
        return len(self.passengers)

    def __iter__(self) -> Iterator[Passenger]:
        return iter(self.passengers)

    @property
    def history_complete(self) -> bool:
        """False when the set is a best-effort read of the live lines only."""
        return self.source is OccupancySource.HISTORY

    def not_missed(self) -> Tuple[Passenger, ...]:
        return tuple(p for p in self.passengers if not p.missed)

    def count_by_flight(self) -> Dict[Flight, int]:
        """Non-missed occupants per flight; passengers without a flight are ignored."""
        counts: Dict[Flight, int] = {}
        for passenger in self.not_missed():
            if passenger.flight is None:
                continue
            counts[passenger.flight] = counts.get(passenger.flight, 0) + 1
        return counts


def ever_occupants(trace: SimulationTrace, kind: LineKind) -> EverOccupants:
    """Collect every passenger seen in any line of ``kind`` at any interval.

    Falls back to the live lines when the history yields nobody; the result's
    ``source`` tells the two cases apart.
    """
    found = _collect_unique(
        passenger for snapshot_lines in trace.line_history(kind) for passenger in _iter_lines(snapshot_lines)
    )
    if found:
        return EverOccupants(kind=kind, passengers=found, source=OccupancySource.HISTORY)

    live = _collect_unique(_iter_lines(trace.current_lines(kind)))
    if live:
        logger.warning(
            "No %s history recorded; using %d passengers from the live lines",
            kind.value,
            len(live),
        )
        return EverOccupants(kind=kind, passengers=live, source=OccupancySource.LIVE_LINES)

    source = OccupancySource.HISTORY if trace.has_history else OccupancySource.UNAVAILABLE
    return EverOccupants(kind=kind, passengers=(), source=source)


def _iter_lines(lines: LineSet) -> Iterable[Passenger]:
    for line in lines:
        yield from line


def _collect_unique(passengers: Iterable[Passenger]) -> Tuple[Passenger, ...]:
    seen: Dict[int, Passenger] = {}
    for passenger in passengers:
        if passenger.passenger_id not in seen:
            seen[passenger.passenger_id] = passenger
    return tuple(seen.values())


__all__ = ["EverOccupants", "OccupancySource", "ever_occupants"]
