"""Reader for the JSON document the simulation engine writes after a run.

The document carries an explicit ``schema_version``; one adapter per version
turns it into a :class:`SimulationTrace`. Version 1 layout::

    {
      "schema_version": 1,
      "passengers": [
        {"id": 0, "flight": "UA100", "arrival_minute": 3, "in_person": true,
         "ticket_completion_minute": 9, "checkpoint_completion_minute": 20,
         "hold_room_entry_minute": 24, "missed": false}
      ],
      "snapshots": [
        {"ticket": [[0]], "checkpoint": [[]], "hold_rooms": [[]]}
      ],
      "live_hold_rooms": [[]],
      "series": {"ticket_queued": {"0": 1}, "checkpoint_queued": {},
                 "hold_room_total": {}, "held_up": {"0": 1}},
      "minute_arrivals": {"UA100": [1, 0, 0]}
    }

Snapshot lines list passenger ids; line order follows the resource lists of
the run configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Mapping

from .domain_types import UNSET_MINUTE, Flight, LineKind, Passenger, SeriesKind
from .run_config import RunConfig
from .simulation_trace import LineSet, SimulationTrace, Snapshot

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1

_SNAPSHOT_KEYS = {
    LineKind.TICKET: "ticket",
    LineKind.CHECKPOINT: "checkpoint",
    LineKind.HOLD_ROOM: "hold_rooms",
}


class TraceFormatError(ValueError):
    """Engine output that does not follow the declared schema."""


def load_trace(path: str | Path, config: RunConfig) -> SimulationTrace:
    trace_path = Path(path)
    if not trace_path.exists():
        raise FileNotFoundError(f"Simulation trace JSON not found at {trace_path}")
    with trace_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    trace = trace_from_payload(payload, config)
    logger.info(
        "Loaded trace with %d intervals and %d flights with arrivals from %s",
        trace.num_intervals,
        len(trace.minute_arrivals),
        trace_path,
    )
    return trace


def trace_from_payload(payload: object, config: RunConfig) -> SimulationTrace:
    if not isinstance(payload, Mapping):
        raise TypeError("Simulation trace JSON must contain an object at the top level")
    version = payload.get("schema_version", CURRENT_SCHEMA_VERSION)
    adapter = _ADAPTERS.get(version)
    if adapter is None:
        raise TraceFormatError(
            f"Unsupported trace schema_version {version!r}; known versions: {sorted(_ADAPTERS)}"
        )
    return adapter(payload, config)


def _parse_v1(payload: Mapping[str, object], config: RunConfig) -> SimulationTrace:
    flights_by_number = {flight.flight_number: flight for flight in config.flights}
    passengers = _parse_passengers(payload.get("passengers") or [], flights_by_number)

    snapshots: List[Snapshot] = []
    for interval, raw in enumerate(payload.get("snapshots") or []):
        if not isinstance(raw, Mapping):
            raise TraceFormatError(f"Snapshot {interval} must be an object")
        lines = {
            kind: _resolve_lines(raw.get(key), passengers, f"snapshots[{interval}].{key}")
            for kind, key in _SNAPSHOT_KEYS.items()
        }
        snapshots.append(
            Snapshot(
                ticket_lines=lines[LineKind.TICKET],
                checkpoint_lines=lines[LineKind.CHECKPOINT],
                hold_room_lines=lines[LineKind.HOLD_ROOM],
            )
        )

    live = {
        LineKind.HOLD_ROOM: _resolve_lines(
            payload.get("live_hold_rooms"), passengers, "live_hold_rooms"
        )
    }

    raw_series = payload.get("series") or {}
    if not isinstance(raw_series, Mapping):
        raise TypeError("'series' must be an object keyed by series name")
    series = {}
    for kind in SeriesKind:
        values = raw_series.get(kind.value) or {}
        if not isinstance(values, Mapping):
            raise TypeError(f"Series '{kind.value}' must map interval index to count")
        label = f"series.{kind.value}"
        series[kind] = {
            _as_int(key, f"{label} key"): _as_int(value, f"{label}[{key}]")
            for key, value in values.items()
        }

    raw_arrivals = payload.get("minute_arrivals") or {}
    if not isinstance(raw_arrivals, Mapping):
        raise TypeError("'minute_arrivals' must map flight numbers to per-minute counts")
    minute_arrivals = {}
    for number, counts in raw_arrivals.items():
        if counts is not None and not isinstance(counts, list):
            raise TraceFormatError(f"minute_arrivals.{number} must be a list of counts")
        minute_arrivals[str(number)] = tuple(
            _as_int(count, f"minute_arrivals.{number}[{minute}]")
            for minute, count in enumerate(counts or ())
        )
    unknown = sorted(set(minute_arrivals) - set(flights_by_number))
    if unknown:
        logger.warning("Arrivals recorded for flights missing from the configuration: %s", unknown)

    return SimulationTrace(
        config=config,
        snapshots=tuple(snapshots),
        series=series,
        live_lines=live,
        minute_arrivals=minute_arrivals,
    )


def _parse_passengers(
    records: object, flights_by_number: Mapping[str, Flight]
) -> Dict[int, Passenger]:
    if not isinstance(records, list):
        raise TypeError("'passengers' must be a list of objects")
    passengers: Dict[int, Passenger] = {}
    for index, record in enumerate(records):
        if not isinstance(record, Mapping) or "id" not in record:
            raise TraceFormatError("Passenger records must be objects with an 'id'")
        passenger_id = _as_int(record["id"], f"passengers[{index}].id")
        if passenger_id in passengers:
            raise TraceFormatError(f"Duplicate passenger id {passenger_id}")
        flight_number = record.get("flight")
        flight = flights_by_number.get(str(flight_number)) if flight_number is not None else None
        if flight_number is not None and flight is None:
            logger.warning(
                "Passenger %d references unknown flight %s", passenger_id, flight_number
            )
        passengers[passenger_id] = Passenger(
            passenger_id=passenger_id,
            flight=flight,
            arrival_minute=_stage_minute(record, "arrival_minute", index),
            in_person=bool(record.get("in_person", False)),
            ticket_completion_minute=_stage_minute(record, "ticket_completion_minute", index),
            checkpoint_completion_minute=_stage_minute(record, "checkpoint_completion_minute", index),
            hold_room_entry_minute=_stage_minute(record, "hold_room_entry_minute", index),
            missed=bool(record.get("missed", False)),
        )
    return passengers


def _stage_minute(record: Mapping[str, object], key: str, index: int) -> int:
    return _as_int(record.get(key, UNSET_MINUTE), f"passengers[{index}].{key}")


def _as_int(value: object, label: str) -> int:
    if isinstance(value, bool):
        raise TraceFormatError(f"{label} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise TraceFormatError(f"{label} must be an integer, got {value!r}") from exc


def _resolve_lines(raw: object, passengers: Mapping[int, Passenger], label: str) -> LineSet:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise TraceFormatError(f"{label} must be a list of passenger-id lists")
    lines = []
    for line_index, line in enumerate(raw):
        resolved = []
        for passenger_id in line or []:
            try:
                resolved.append(passengers[_as_int(passenger_id, f"{label}[{line_index}]")])
            except KeyError as exc:
                raise TraceFormatError(
                    f"{label}[{line_index}] references unknown passenger id {passenger_id}"
                ) from exc
        lines.append(tuple(resolved))
    return tuple(lines)


_ADAPTERS: Dict[object, Callable[[Mapping[str, object], RunConfig], SimulationTrace]] = {
    1: _parse_v1,
}


__all__ = ["CURRENT_SCHEMA_VERSION", "TraceFormatError", "load_trace", "trace_from_payload"]
