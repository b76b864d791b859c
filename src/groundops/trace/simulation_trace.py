"""Immutable view over a finished simulation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import zip_longest
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .domain_types import Flight, LineKind, Passenger, SeriesKind
from .run_config import RunConfig


Line = Tuple[Passenger, ...]
LineSet = Tuple[Line, ...]
LineHistory = Tuple[LineSet, ...]


def _freeze_lines(lines: Optional[Iterable[Optional[Iterable[Passenger]]]]) -> LineSet:
    if not lines:
        return ()
    return tuple(tuple(p for p in (line or ()) if p is not None) for line in lines)


def _freeze_series(raw: Optional[Mapping[object, object]]) -> Mapping[int, int]:
    return MappingProxyType({int(key): int(value or 0) for key, value in (raw or {}).items()})


@dataclass(frozen=True)
class Snapshot:
    """Passengers present in every line of every resource kind at one interval."""

    ticket_lines: LineSet = ()
    checkpoint_lines: LineSet = ()
    hold_room_lines: LineSet = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ticket_lines", _freeze_lines(self.ticket_lines))
        object.__setattr__(self, "checkpoint_lines", _freeze_lines(self.checkpoint_lines))
        object.__setattr__(self, "hold_room_lines", _freeze_lines(self.hold_room_lines))

    def lines(self, kind: LineKind) -> LineSet:
        if kind is LineKind.TICKET:
            return self.ticket_lines
        if kind is LineKind.CHECKPOINT:
            return self.checkpoint_lines
        return self.hold_room_lines


@dataclass(frozen=True)
class SimulationTrace:
    """Interval-indexed snapshots, aggregate series and the run configuration.

    ``snapshots[i].lines(kind)[j]`` always denotes the resource at position
    ``j`` of the matching config list. Every accessor returns an empty
    container for a run that recorded no history.
    """

    config: RunConfig
    snapshots: Tuple[Snapshot, ...] = ()
    series: Mapping[SeriesKind, Mapping[int, int]] = field(default_factory=dict)
    live_lines: Mapping[LineKind, LineSet] = field(default_factory=dict)
    minute_arrivals: Mapping[str, Tuple[int, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "snapshots", tuple(self.snapshots or ()))
        raw_series = self.series or {}
        object.__setattr__(
            self,
            "series",
            MappingProxyType({kind: _freeze_series(raw_series.get(kind)) for kind in SeriesKind}),
        )
        raw_live = self.live_lines or {}
        object.__setattr__(
            self,
            "live_lines",
            MappingProxyType({kind: _freeze_lines(raw_live.get(kind)) for kind in LineKind}),
        )
        object.__setattr__(
            self,
            "minute_arrivals",
            MappingProxyType(
                {
                    str(number): tuple(int(count or 0) for count in (counts or ()))
                    for number, counts in (self.minute_arrivals or {}).items()
                }
            ),
        )

    # ---------------------------------------------------------------- builders
    @classmethod
    def from_histories(
        cls,
        config: RunConfig,
        *,
        ticket: Sequence[Sequence[Iterable[Passenger]]] = (),
        checkpoint: Sequence[Sequence[Iterable[Passenger]]] = (),
        hold_rooms: Sequence[Sequence[Iterable[Passenger]]] = (),
        series: Optional[Mapping[SeriesKind, Mapping[int, int]]] = None,
        live_hold_rooms: Optional[Sequence[Iterable[Passenger]]] = None,
        minute_arrivals: Optional[Mapping[str, Sequence[int]]] = None,
    ) -> "SimulationTrace":
        """Build a trace from three per-kind histories of equal or ragged length."""
        snapshots = tuple(
            Snapshot(ticket_lines=t, checkpoint_lines=c, hold_room_lines=h)
            for t, c, h in zip_longest(ticket, checkpoint, hold_rooms, fillvalue=())
        )
        live = {LineKind.HOLD_ROOM: live_hold_rooms} if live_hold_rooms else {}
        return cls(
            config=config,
            snapshots=snapshots,
            series=series or {},
            live_lines=live,
            minute_arrivals=minute_arrivals or {},
        )

    # ---------------------------------------------------------------- accessors
    @property
    def num_intervals(self) -> int:
        return len(self.snapshots)

    @property
    def has_history(self) -> bool:
        return bool(self.snapshots)

    def line_history(self, kind: LineKind) -> LineHistory:
        return tuple(snapshot.lines(kind) for snapshot in self.snapshots)

    def current_lines(self, kind: LineKind) -> LineSet:
        return self.live_lines.get(kind, ())

    def series_for(self, kind: SeriesKind) -> Dict[int, int]:
        return dict(self.series.get(kind, {}))

    def resource_configs(self, kind: LineKind) -> tuple:
        if kind is LineKind.TICKET:
            return self.config.ticket_counters
        if kind is LineKind.CHECKPOINT:
            return self.config.checkpoints
        return self.config.hold_rooms

    @property
    def flights(self) -> Tuple[Flight, ...]:
        return self.config.flights

    @property
    def interval_minutes(self) -> int:
        return self.config.interval_minutes

    @property
    def sqft_per_passenger(self) -> int:
        return self.config.sqft_per_passenger

    def generated_for(self, flight_number: str) -> int:
        return sum(self.minute_arrivals.get(str(flight_number), ()))

    def total_generated(self) -> int:
        return sum(sum(counts) for counts in self.minute_arrivals.values())


__all__ = ["Line", "LineHistory", "LineSet", "SimulationTrace", "Snapshot"]
