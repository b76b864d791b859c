"""Post-run analytics: occupancy, peaks, dwell times and the summary report."""

from .dwell_times import DwellAverages, dwell_averages
from .occupancy import EverOccupants, OccupancySource, ever_occupants
from .peaks import NO_INTERVAL, PeakResult, line_max, line_maxima, series_peak, sum_line_maxima, sum_peaks
from .summary_report import SummaryComposer, SummaryReport, compose_summary
from .time_labels import IntervalLabeler, interval_for_index, run_start_minutes, time_for_index

__all__ = [
    "DwellAverages",
    "EverOccupants",
    "IntervalLabeler",
    "NO_INTERVAL",
    "OccupancySource",
    "PeakResult",
    "SummaryComposer",
    "SummaryReport",
    "compose_summary",
    "dwell_averages",
    "ever_occupants",
    "interval_for_index",
    "line_max",
    "line_maxima",
    "run_start_minutes",
    "series_peak",
    "sum_line_maxima",
    "sum_peaks",
    "time_for_index",
    "write_report_csvs",
]


def __getattr__(name):
    if name == "write_report_csvs":
        from .report_frames import write_report_csvs

        return write_report_csvs
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
