"""
Run configuration and the read-only simulation trace consumed by the reports.
"""

from .domain_types import (
    ArrivalCurveConfig,
    CheckpointConfig,
    ConfigurationError,
    Flight,
    HoldRoomConfig,
    LineKind,
    Passenger,
    SeriesKind,
    TicketCounterConfig,
)
from .run_config import RunConfig
from .simulation_trace import SimulationTrace, Snapshot
from .trace_loader import TraceFormatError, load_trace, trace_from_payload

__all__ = [
    "ArrivalCurveConfig",
    "CheckpointConfig",
    "ConfigurationError",
    "Flight",
    "HoldRoomConfig",
    "LineKind",
    "Passenger",
    "RunConfig",
    "SeriesKind",
    "SimulationTrace",
    "Snapshot",
    "TicketCounterConfig",
    "TraceFormatError",
    "load_trace",
    "trace_from_payload",
]
