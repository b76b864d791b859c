"""Peak finders shared by every series and resource kind.

Both finders scan intervals in ascending order and only move the peak on a
strictly greater count, so the earliest interval reaching the maximum wins.
``numpy.argmax`` returns the first maximal position, which gives exactly that
rule. A maximum of zero reports no interval.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

import numpy as np

from groundops.trace.simulation_trace import LineHistory

NO_INTERVAL = -1


@dataclass(frozen=True)
class PeakResult:
    value: int = 0
    interval: int = NO_INTERVAL

    @property
    def found(self) -> bool:
        return self.interval != NO_INTERVAL


def _first_strict_peak(counts: np.ndarray, intervals: np.ndarray) -> PeakResult:
    if counts.size == 0:
        return PeakResult()
    pos = int(np.argmax(counts))
    best = int(counts[pos])
    if best <= 0:
        return PeakResult()
    return PeakResult(value=best, interval=int(intervals[pos]))


def series_peak(series: Mapping[int, int] | None) -> PeakResult:
    """Return the peak of a sparse interval -> count mapping."""
    if not series:
        return PeakResult()
    items = sorted((int(key), int(value or 0)) for key, value in series.items())
    intervals = np.array([key for key, _ in items], dtype=np.int64)
    counts = np.array([value for _, value in items], dtype=np.int64)
    return _first_strict_peak(counts, intervals)


def line_max(history: LineHistory | Sequence, line_index: int) -> PeakResult:
    """Return the highest occupancy of one line across the history.

    Intervals whose snapshot is missing or has fewer lines than
    ``line_index + 1`` are skipped.
    """
    if not history or line_index < 0:
        return PeakResult()
    counts = np.full(len(history), -1, dtype=np.int64)
    for interval, lines in enumerate(history):
        if lines is None or line_index >= len(lines):
            continue
        line = lines[line_index]
        if line is None:
            continue
        counts[interval] = len(line)
    return _first_strict_peak(counts, np.arange(len(history), dtype=np.int64))


def line_maxima(history: LineHistory | Sequence, line_count: int) -> List[PeakResult]:
    return [line_max(history, line_index) for line_index in range(line_count)]


def sum_peaks(peaks: Iterable[PeakResult]) -> int:
    """Sum of independent per-line maxima; not a simultaneous peak."""
    return sum(result.value for result in peaks)


def sum_line_maxima(history: LineHistory | Sequence, line_count: int) -> int:
    return sum_peaks(line_maxima(history, line_count))


__all__ = [
    "NO_INTERVAL",
    "PeakResult",
    "line_max",
    "line_maxima",
    "series_peak",
    "sum_line_maxima",
    "sum_peaks",
]
