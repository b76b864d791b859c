from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from groundops.trace.domain_types import Passenger, round_half_up


@dataclass(frozen=True)
class DwellAverages:
    """Average minutes spent per stage, rounded to whole minutes."""

    ticket: int = 0
    checkpoint_online: int = 0
    checkpoint_in_person: int = 0
    arrival_to_hold: int = 0


def _average_minutes(spans: Iterable[Tuple[int, int]]) -> int:
    # A stage minute of -1 was never reached; such spans are dropped, not zero-filled.
    durations = np.fromiter(
        (end - start for start, end in spans if start >= 0 and end >= 0 and end >= start),
        dtype=np.int64,
    )
    if durations.size == 0:
        return 0
    return round_half_up(float(durations.mean()))


def average_ticket_minutes(passengers: Iterable[Passenger]) -> int:
    return _average_minutes(
        (p.arrival_minute, p.ticket_completion_minute) for p in passengers if p.in_person
    )


def average_checkpoint_online_minutes(passengers: Iterable[Passenger]) -> int:
    return _average_minutes(
        (p.arrival_minute, p.checkpoint_completion_minute) for p in passengers if not p.in_person
    )


def average_checkpoint_in_person_minutes(passengers: Iterable[Passenger]) -> int:
    return _average_minutes(
        (p.ticket_completion_minute, p.checkpoint_completion_minute)
        for p in passengers
        if p.in_person
    )


def average_arrival_to_hold_minutes(passengers: Iterable[Passenger]) -> int:
    return _average_minutes((p.arrival_minute, p.hold_room_entry_minute) for p in passengers)


def dwell_averages(passengers: Iterable[Passenger]) -> DwellAverages:
    population = tuple(passengers)
    return DwellAverages(
        ticket=average_ticket_minutes(population),
        checkpoint_online=average_checkpoint_online_minutes(population),
        checkpoint_in_person=average_checkpoint_in_person_minutes(population),
        arrival_to_hold=average_arrival_to_hold_minutes(population),
    )


__all__ = [
    "DwellAverages",
    "average_arrival_to_hold_minutes",
    "average_checkpoint_in_person_minutes",
    "average_checkpoint_online_minutes",
    "average_ticket_minutes",
    "dwell_averages",
]
