"""Core dataclasses shared between the run configuration, the trace and the reports."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional

MINUTES_PER_DAY = 1440
UNSET_MINUTE = -1


class ConfigurationError(ValueError):
    """Invalid run configuration value, labelled with the offending field."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field = field_name


class LineKind(str, Enum):
    """Resource kind whose per-line history is recorded in every snapshot."""

    TICKET = "ticket"
    CHECKPOINT = "checkpoint"
    HOLD_ROOM = "hold_room"


class SeriesKind(str, Enum):
    """Sparse interval -> count aggregates published by the engine."""

    TICKET_QUEUED = "ticket_queued"
    CHECKPOINT_QUEUED = "checkpoint_queued"
    HOLD_ROOM_TOTAL = "hold_room_total"
    HELD_UP = "held_up"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(float(value) + 0.5))


def parse_hhmm(token: object, label: str) -> int:
    """
    Parse an HH:MM string into minutes since midnight.

    Args:
        token: Raw value from the configuration.
        label: Field label used in error messages.
    Returns:
        Minutes since midnight (0-1439).
    """
    if not isinstance(token, str) or not token.strip():
        raise ConfigurationError(label, "time of day must be a non-empty HH:MM string")
    text = token.strip()
    parts = text.split(":")
    if len(parts) != 2:
        raise ConfigurationError(label, f"time of day must be in HH:MM format: {text!r}")
    hour_str, minute_str = parts
    if not hour_str.isdigit() or not minute_str.isdigit():
        raise ConfigurationError(label, f"time of day must be numeric HH:MM: {text!r}")
    hour = int(hour_str)
    minute = int(minute_str)
    if hour > 23 or minute > 59:
        raise ConfigurationError(label, f"time of day out of range: {text!r}")
    return hour * 60 + minute


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as HH:MM, wrapping around the clock."""
    hours, mins = divmod(int(minutes) % MINUTES_PER_DAY, 60)
    return f"{hours:02d}:{mins:02d}"


def _require_fraction(value: float, label: str) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(label, f"expected a number, got {value!r}") from exc
    if math.isnan(numeric) or numeric < 0.0 or numeric > 1.0:
        raise ConfigurationError(label, f"must be within [0, 1], got {value!r}")
    return numeric


def _require_non_negative(value: float, label: str) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(label, f"expected a number, got {value!r}") from exc
    if math.isnan(numeric) or numeric < 0:
        raise ConfigurationError(label, f"cannot be negative, got {value!r}")
    return numeric


def _require_count(value: object, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(label, f"expected an integer, got {value!r}")
    if not math.isfinite(float(value)) or float(value) != int(value):
        raise ConfigurationError(label, f"expected an integer, got {value!r}")
    count = int(value)
    if count < 0:
        raise ConfigurationError(label, f"cannot be negative, got {value!r}")
    return count


def _normalize_flight_numbers(values: Optional[Iterable[object]]) -> FrozenSet[str]:
    return frozenset(str(value).strip() for value in (values or ()) if str(value).strip())


@dataclass(frozen=True)
class Flight:
    """Scheduled departure with its seat count and expected load factor."""

    flight_number: str
    departure_minutes: int
    seats: int
    fill_percent: float

    def __post_init__(self) -> None:
        number = str(self.flight_number or "").strip()
        if not number:
            raise ConfigurationError("flight_number", "flights need a non-empty number")
        object.__setattr__(self, "flight_number", number)
        departure = _require_count(self.departure_minutes, f"{number}.departure")
        if departure >= MINUTES_PER_DAY:
            raise ConfigurationError(f"{number}.departure", "must fall within one day")
        object.__setattr__(self, "departure_minutes", departure)
        object.__setattr__(self, "seats", _require_count(self.seats, f"{number}.seats"))
        object.__setattr__(
            self, "fill_percent", _require_fraction(self.fill_percent, f"{number}.fill_percent")
        )

    @classmethod
    def from_hhmm(
        cls, flight_number: str, departure: str | int, seats: int, fill_percent: float
    ) -> "Flight":
        # YAML 1.1 reads an unquoted 8:30 as the base-60 integer 510.
        if isinstance(departure, int) and not isinstance(departure, bool):
            minutes = departure
        else:
            minutes = parse_hhmm(departure, f"{flight_number}.departure")
        return cls(flight_number, minutes, seats, fill_percent)

    @property
    def departure_str(self) -> str:
        return format_hhmm(self.departure_minutes)

    @property
    def expected_passengers(self) -> int:
        return round_half_up(self.seats * self.fill_percent)


@dataclass(frozen=True)
class Passenger:
    """Engine record for one simulated passenger.

    Two passengers may share every attribute; ``passenger_id`` is the only
    identity. Stage minutes equal to ``UNSET_MINUTE`` mean the stage was never
    reached.
    """

    passenger_id: int
    flight: Optional[Flight]
    arrival_minute: int = UNSET_MINUTE
    in_person: bool = False
    ticket_completion_minute: int = UNSET_MINUTE
    checkpoint_completion_minute: int = UNSET_MINUTE
    hold_room_entry_minute: int = UNSET_MINUTE
    missed: bool = False


@dataclass(frozen=True)
class TicketCounterConfig:
    id: int
    rate_per_minute: float = 1.0
    allowed_flights: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        label = f"ticket_counters[{self.id}]"
        _require_non_negative(self.rate_per_minute, f"{label}.rate_per_minute")
        object.__setattr__(self, "allowed_flights", _normalize_flight_numbers(self.allowed_flights))

    @property
    def rate_per_hour(self) -> float:
        return float(self.rate_per_minute) * 60.0


@dataclass(frozen=True)
class CheckpointConfig:
    id: int
    rate_per_hour: float = 0.0

    def __post_init__(self) -> None:
        _require_non_negative(self.rate_per_hour, f"checkpoints[{self.id}].rate_per_hour")

    @property
    def rate_per_minute(self) -> float:
        return float(self.rate_per_hour) / 60.0


@dataclass(frozen=True)
class HoldRoomConfig:
    id: int
    walk_seconds: int = 0
    allowed_flight_numbers: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        label = f"hold_rooms[{self.id}]"
        object.__setattr__(self, "walk_seconds", _require_count(self.walk_seconds, f"{label}.walk_seconds"))
        object.__setattr__(
            self, "allowed_flight_numbers", _normalize_flight_numbers(self.allowed_flight_numbers)
        )

    @property
    def walk_minutes(self) -> int:
        return self.walk_seconds // 60

    @property
    def walk_seconds_part(self) -> int:
        return self.walk_seconds % 60

    @property
    def allowed_flights_text(self) -> str:
        if not self.allowed_flight_numbers:
            return "ALL"
        return ", ".join(sorted(self.allowed_flight_numbers))


@dataclass(frozen=True)
class ArrivalCurveConfig:
    """Shape parameters for the passenger arrival curve (minutes before departure)."""

    DEFAULT_WINDOW_START = 120
    MAX_WINDOW_START = 240
    DEFAULT_BOARDING_CLOSE = 20

    legacy_mode: bool = True
    window_start_minutes_before_departure: int = DEFAULT_WINDOW_START
    peak_minutes_before_departure: int = 70
    left_sigma_minutes: int = 25
    right_sigma_minutes: int = 12
    late_clamp_enabled: bool = False
    late_clamp_minutes_before_departure: int = 30
    boarding_close_minutes_before_departure: int = DEFAULT_BOARDING_CLOSE

    def __post_init__(self) -> None:
        for name in (
            "window_start_minutes_before_departure",
            "peak_minutes_before_departure",
            "left_sigma_minutes",
            "right_sigma_minutes",
            "late_clamp_minutes_before_departure",
            "boarding_close_minutes_before_departure",
        ):
            object.__setattr__(self, name, _require_count(getattr(self, name), f"arrival_curve.{name}"))
        if self.window_start_minutes_before_departure > self.MAX_WINDOW_START:
            raise ConfigurationError(
                "arrival_curve.window_start_minutes_before_departure",
                f"cannot exceed {self.MAX_WINDOW_START} minutes",
            )
        if self.peak_minutes_before_departure > self.window_start_minutes_before_departure:
            raise ConfigurationError(
                "arrival_curve.peak_minutes_before_departure",
                "peak must fall inside the arrival window",
            )

    @property
    def curve_start_minutes(self) -> int:
        """Arrival window start actually used by the generator."""
        if self.legacy_mode:
            return self.DEFAULT_WINDOW_START
        return self.window_start_minutes_before_departure


__all__ = [
    "ArrivalCurveConfig",
    "CheckpointConfig",
    "ConfigurationError",
    "Flight",
    "HoldRoomConfig",
    "LineKind",
    "MINUTES_PER_DAY",
    "Passenger",
    "SeriesKind",
    "TicketCounterConfig",
    "UNSET_MINUTE",
    "format_hhmm",
    "parse_hhmm",
    "round_half_up",
]
