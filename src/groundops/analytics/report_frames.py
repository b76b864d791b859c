"""Tidy pandas views over a :class:`SummaryReport` for tables and CSV export."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict

import pandas as pd

from groundops.trace.domain_types import LineKind

from .summary_report import SummaryReport

logger = logging.getLogger(__name__)

FLIGHT_COLUMNS = [
    "flight_number",
    "departure",
    "boarding_close",
    "expected_passengers",
    "generated_passengers",
    "reached_hold",
    "missed",
]
SIZING_COLUMNS = [
    "kind",
    "label",
    "resource_id",
    "line_index",
    "max_passengers",
    "max_sqft",
    "time_label",
    "interval_label",
]


def flights_dataframe(report: SummaryReport) -> pd.DataFrame:
    rows = [asdict(row) for row in report.flights]
    return pd.DataFrame(rows, columns=FLIGHT_COLUMNS)


def sizing_dataframe(report: SummaryReport) -> pd.DataFrame:
    rows = []
    for kind in LineKind:
        section = report.sizing.get(kind)
        if section is None:
            continue
        for row in section.rows:
            rows.append({"kind": kind.value, **asdict(row)})
    return pd.DataFrame(rows, columns=SIZING_COLUMNS)


def sizing_totals_dataframe(report: SummaryReport) -> pd.DataFrame:
    rows = [
        {
            "kind": kind.value,
            "lines": len(section.rows),
            "total_max_passengers": section.total_max_passengers,
            "total_sqft": section.total_sqft,
        }
        for kind, section in report.sizing.items()
    ]
    return pd.DataFrame(rows, columns=["kind", "lines", "total_max_passengers", "total_sqft"])


def peaks_dataframe(report: SummaryReport) -> pd.DataFrame:
    rows = [
        {
            "series": peak.series.value,
            "title": peak.title,
            "value": peak.value,
            "interval_label": peak.interval_label,
            "time_label": peak.time_label,
        }
        for peak in report.overview.peaks
    ]
    return pd.DataFrame(rows, columns=["series", "title", "value", "interval_label", "time_label"])


def overview_dataframe(report: SummaryReport) -> pd.DataFrame:
    overview = report.overview
    metrics = [
        ("flights", overview.flights_count),
        ("total_generated", overview.total_generated),
        ("reached_hold", overview.reached_hold),
        ("missed_passengers", overview.missed_passengers),
        ("in_person", overview.mix.in_person),
        ("online", overview.mix.online),
        ("percent_in_person", overview.mix.percent_in_person),
        ("avg_ticket_minutes", overview.dwell.ticket),
        ("avg_checkpoint_online_minutes", overview.dwell.checkpoint_online),
        ("avg_checkpoint_in_person_minutes", overview.dwell.checkpoint_in_person),
        ("avg_arrival_to_hold_minutes", overview.dwell.arrival_to_hold),
        ("hold_history_complete", overview.hold_history_complete),
    ]
    return pd.DataFrame(metrics, columns=["metric", "value"])


def report_frames(report: SummaryReport) -> Dict[str, pd.DataFrame]:
    return {
        "overview": overview_dataframe(report),
        "peaks": peaks_dataframe(report),
        "flights": flights_dataframe(report),
        "sizing": sizing_dataframe(report),
        "sizing_totals": sizing_totals_dataframe(report),
    }


def write_report_csvs(report: SummaryReport, output_dir: str | Path) -> Dict[str, Path]:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}
    for name, frame in report_frames(report).items():
        path = out_dir / f"{name}.csv"
        frame.to_csv(path, index=False)
        written[name] = path
    logger.info("Wrote %d report tables to %s", len(written), out_dir)
    return written


__all__ = [
    "flights_dataframe",
    "overview_dataframe",
    "peaks_dataframe",
    "report_frames",
    "sizing_dataframe",
    "sizing_totals_dataframe",
    "write_report_csvs",
]
