from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import yaml

from .domain_types import (
    ArrivalCurveConfig,
    CheckpointConfig,
    ConfigurationError,
    Flight,
    HoldRoomConfig,
    TicketCounterConfig,
    _require_count,
    _require_fraction,
)

logger = logging.getLogger(__name__)

_ALL_FLIGHTS_MARKERS = {"", "*", "ALL"}


@dataclass(frozen=True)
class RunConfig:
    """Global inputs and resource lists for one simulation run.

    List order is significant: the position of a counter, checkpoint or hold
    room in its list is the line index used by every snapshot of the trace.
    """

    percent_in_person: float = 0.4
    arrival_span_minutes: int = 120
    transit_delay_minutes: int = 2
    hold_delay_minutes: int = 5
    interval_minutes: int = 1
    sqft_per_passenger: int = 15
    flights: Tuple[Flight, ...] = ()
    ticket_counters: Tuple[TicketCounterConfig, ...] = ()
    checkpoints: Tuple[CheckpointConfig, ...] = ()
    hold_rooms: Tuple[HoldRoomConfig, ...] = ()
    arrival_curve: Optional[ArrivalCurveConfig] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "percent_in_person", _require_fraction(self.percent_in_person, "percent_in_person")
        )
        for name in (
            "arrival_span_minutes",
            "transit_delay_minutes",
            "hold_delay_minutes",
            "sqft_per_passenger",
        ):
            object.__setattr__(self, name, _require_count(getattr(self, name), name))
        interval = _require_count(self.interval_minutes, "interval_minutes")
        if interval <= 0:
            raise ConfigurationError("interval_minutes", "must be positive")
        object.__setattr__(self, "interval_minutes", interval)
        object.__setattr__(self, "flights", tuple(self.flights))
        object.__setattr__(self, "ticket_counters", tuple(self.ticket_counters))
        object.__setattr__(self, "checkpoints", tuple(self.checkpoints))
        object.__setattr__(self, "hold_rooms", tuple(self.hold_rooms))
        _require_unique_flight_numbers(self.flights)
        _require_unique_ids(self.ticket_counters, "ticket_counters")
        _require_unique_ids(self.checkpoints, "checkpoints")
        _require_unique_ids(self.hold_rooms, "hold_rooms")

    # ---------------------------------------------------------------- derived
    @property
    def effective_arrival_span_minutes(self) -> int:
        """Arrival span widened to cover the configured curve window."""
        if self.arrival_curve is None:
            return self.arrival_span_minutes
        return max(self.arrival_span_minutes, self.arrival_curve.curve_start_minutes)

    @property
    def boarding_close_minutes(self) -> int:
        curve = self.arrival_curve
        if curve is not None and curve.boarding_close_minutes_before_departure > 0:
            return curve.boarding_close_minutes_before_departure
        return ArrivalCurveConfig.DEFAULT_BOARDING_CLOSE

    def check_runnable(self) -> None:
        """Raise if the configuration lacks a resource every run needs."""
        for name, items in (
            ("flights", self.flights),
            ("ticket_counters", self.ticket_counters),
            ("checkpoints", self.checkpoints),
            ("hold_rooms", self.hold_rooms),
        ):
            if not items:
                raise ConfigurationError(name, "at least one entry is required to start a run")

    # ---------------------------------------------------------------------- IO
    @classmethod
    def from_yaml(cls, path: str | Path) -> "RunConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Run configuration YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise TypeError("Run configuration YAML must contain a mapping at the top level")
        config = cls.from_mapping(data)
        logger.info(
            "Loaded run configuration from %s: %d flights, %d counters, %d checkpoints, %d hold rooms",
            config_path,
            len(config.flights),
            len(config.ticket_counters),
            len(config.checkpoints),
            len(config.hold_rooms),
        )
        return config

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "RunConfig":
        flights = [
            Flight.from_hhmm(
                str(raw.get("number", idx + 1)),
                raw.get("departure", "00:00"),
                raw.get("seats", 180),
                raw.get("fill", 0.85),
            )
            for idx, raw in enumerate(_section(data, "flights"))
        ]
        counters = [
            TicketCounterConfig(
                id=int(raw.get("id", idx + 1)),
                rate_per_minute=raw.get("rate_per_minute", 1.0),
                allowed_flights=_parse_allowed(raw.get("allowed_flights")),
            )
            for idx, raw in enumerate(_section(data, "ticket_counters"))
        ]
        checkpoints = [
            CheckpointConfig(id=int(raw.get("id", idx + 1)), rate_per_hour=raw.get("rate_per_hour", 0.0))
            for idx, raw in enumerate(_section(data, "checkpoints"))
        ]
        hold_rooms = []
        for idx, raw in enumerate(_section(data, "hold_rooms")):
            walk_minutes = _require_count(raw.get("walk_minutes", 0), f"hold_rooms[{idx}].walk_minutes")
            walk_seconds = _require_count(raw.get("walk_seconds", 0), f"hold_rooms[{idx}].walk_seconds")
            hold_rooms.append(
                HoldRoomConfig(
                    id=int(raw.get("id", idx + 1)),
                    walk_seconds=walk_minutes * 60 + walk_seconds,
                    allowed_flight_numbers=_parse_allowed(raw.get("allowed_flights")),
                )
            )
        curve_raw = data.get("arrival_curve")
        curve = None
        if curve_raw is not None:
            if not isinstance(curve_raw, Mapping):
                raise TypeError("'arrival_curve' must be a mapping")
            curve = ArrivalCurveConfig(**{str(key): value for key, value in curve_raw.items()})
        return cls(
            percent_in_person=data.get("percent_in_person", 0.4),
            arrival_span_minutes=data.get("arrival_span_minutes", 120),
            transit_delay_minutes=data.get("transit_delay_minutes", 2),
            hold_delay_minutes=data.get("hold_delay_minutes", 5),
            interval_minutes=data.get("interval_minutes", 1),
            sqft_per_passenger=data.get("sqft_per_passenger", 15),
            flights=tuple(flights),
            ticket_counters=tuple(counters),
            checkpoints=tuple(checkpoints),
            hold_rooms=tuple(hold_rooms),
            arrival_curve=curve,
        )

    def to_mapping(self) -> Dict[str, object]:
        output: Dict[str, object] = {
            "percent_in_person": float(self.percent_in_person),
            "arrival_span_minutes": self.arrival_span_minutes,
            "transit_delay_minutes": self.transit_delay_minutes,
            "hold_delay_minutes": self.hold_delay_minutes,
            "interval_minutes": self.interval_minutes,
            "sqft_per_passenger": self.sqft_per_passenger,
            "flights": [
                {
                    "number": flight.flight_number,
                    "departure": flight.departure_str,
                    "seats": flight.seats,
                    "fill": float(flight.fill_percent),
                }
                for flight in self.flights
            ],
            "ticket_counters": [
                {
                    "id": counter.id,
                    "rate_per_minute": float(counter.rate_per_minute),
                    "allowed_flights": sorted(counter.allowed_flights) or "*",
                }
                for counter in self.ticket_counters
            ],
            "checkpoints": [
                {"id": checkpoint.id, "rate_per_hour": float(checkpoint.rate_per_hour)}
                for checkpoint in self.checkpoints
            ],
            "hold_rooms": [
                {
                    "id": room.id,
                    "walk_minutes": room.walk_minutes,
                    "walk_seconds": room.walk_seconds_part,
                    "allowed_flights": sorted(room.allowed_flight_numbers) or "*",
                }
                for room in self.hold_rooms
            ],
        }
        if self.arrival_curve is not None:
            curve = self.arrival_curve
            output["arrival_curve"] = {
                "legacy_mode": curve.legacy_mode,
                "window_start_minutes_before_departure": curve.window_start_minutes_before_departure,
                "peak_minutes_before_departure": curve.peak_minutes_before_departure,
                "left_sigma_minutes": curve.left_sigma_minutes,
                "right_sigma_minutes": curve.right_sigma_minutes,
                "late_clamp_enabled": curve.late_clamp_enabled,
                "late_clamp_minutes_before_departure": curve.late_clamp_minutes_before_departure,
                "boarding_close_minutes_before_departure": curve.boarding_close_minutes_before_departure,
            }
        return output

    def to_yaml(self, path: str | Path) -> None:
        dest = Path(path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(self.to_mapping(), handle, sort_keys=False)


def _section(data: Mapping[str, object], key: str) -> List[Mapping[str, object]]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise TypeError(f"'{key}' must be a list of mappings")
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise TypeError(f"Entries of '{key}' must be mappings")
    return raw


def _parse_allowed(raw: object) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        if raw.strip().upper() in _ALL_FLIGHTS_MARKERS:
            return ()
        return tuple(token.strip() for token in raw.split(",") if token.strip())
    if isinstance(raw, Sequence):
        return tuple(str(token).strip() for token in raw if str(token).strip())
    raise TypeError(f"allowed_flights must be a list or comma-separated string, got {raw!r}")


def _require_unique_ids(items: Iterable[object], label: str) -> None:
    seen = set()
    for item in items:
        item_id = item.id
        if item_id in seen:
            raise ConfigurationError(label, f"duplicate id {item_id}")
        seen.add(item_id)


def _require_unique_flight_numbers(flights: Iterable[Flight]) -> None:
    # Flight number joins trace passengers and arrivals to the config.
    seen = set()
    for flight in flights:
        if flight.flight_number in seen:
            raise ConfigurationError("flights", f"duplicate flight number {flight.flight_number}")
        seen.add(flight.flight_number)


__all__ = ["RunConfig"]
