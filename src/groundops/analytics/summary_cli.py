"""CLI that prints the post-run summary for a run configuration and its trace."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from rich.console import Console
from rich.table import Table

from groundops.trace.domain_types import ConfigurationError, LineKind
from groundops.trace.run_config import RunConfig
from groundops.trace.trace_loader import TraceFormatError, load_trace

from .report_frames import write_report_csvs
from .summary_report import SummaryComposer, SummaryReport

logger = logging.getLogger(__name__)

SIZING_TITLES = {
    LineKind.TICKET: "Ticket Counters",
    LineKind.CHECKPOINT: "Checkpoints",
    LineKind.HOLD_ROOM: "Hold Rooms",
}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        required=True,
        help="Run configuration YAML (flights, counters, checkpoints, hold rooms).",
    )
    parser.add_argument(
        "--trace",
        required=True,
        help="Simulation trace JSON written by the engine after the run.",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Optional directory receiving the report tables as CSV files.",
    )
    parser.add_argument(
        "--require-runnable",
        action="store_true",
        help="Fail when the configuration lacks flights, counters, checkpoints or hold rooms.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        config = RunConfig.from_yaml(args.config)
        if args.require_runnable:
            config.check_runnable()
        trace = load_trace(args.trace, config)
    except (ConfigurationError, TraceFormatError) as exc:
        raise SystemExit(str(exc)) from exc

    report = SummaryComposer(trace).compose()
    print_report(report, Console())
    if args.output_dir:
        write_report_csvs(report, args.output_dir)
    return 0


def print_report(report: SummaryReport, console: Console) -> None:
    """Render every report section as rich tables."""
    overview = report.overview

    totals = Table(title="Run Totals", show_header=True, header_style="bold cyan")
    totals.add_column("Metric", style="bold")
    totals.add_column("Value", justify="right", style="green")
    totals.add_row("Flights", f"{overview.flights_count:,}")
    totals.add_row("Total Passengers Generated", f"{overview.total_generated:,}")
    totals.add_row("Reached Hold Rooms", f"{overview.reached_hold:,}")
    totals.add_row("Missed Passengers", f"{overview.missed_passengers:,}")
    totals.add_row("", "")
    totals.add_row("In Person", f"{overview.mix.in_person:,}")
    totals.add_row("Online", f"{overview.mix.online:,}")
    totals.add_row("In Person %", f"{overview.mix.percent_in_person * 100.0:.1f}%")
    totals.add_row("", "")
    totals.add_row("Ticket (arrival -> done)", f"{overview.dwell.ticket} min")
    totals.add_row("Checkpoint (online)", f"{overview.dwell.checkpoint_online} min")
    totals.add_row("Checkpoint (in-person)", f"{overview.dwell.checkpoint_in_person} min")
    totals.add_row("Arrival -> Hold Room", f"{overview.dwell.arrival_to_hold} min")
    console.print(totals)
    if not overview.hold_history_complete:
        console.print(
            "[bold yellow]Hold-room history incomplete: reached and missed counts are best-effort.[/bold yellow]"
        )

    peaks = Table(title="Peak Counts", show_header=True, header_style="bold cyan")
    for column in ("Series", "Peak", "Interval", "Time"):
        peaks.add_column(column)
    for peak in overview.peaks:
        peaks.add_row(peak.title, str(peak.value), peak.interval_label, peak.time_label)
    console.print(peaks)

    curve = report.inputs.arrival_curve
    if not curve.available:
        console.print(f"[dim]{curve.note}[/dim]")

    flights = Table(title="Flights", show_header=True, header_style="bold cyan")
    for column in ("Flight #", "Departure", "Close", "Expected", "Generated", "Reached Hold", "Missed"):
        flights.add_column(column)
    for row in report.flights:
        flights.add_row(
            row.flight_number,
            row.departure,
            row.boarding_close,
            str(row.expected_passengers),
            str(row.generated_passengers),
            str(row.reached_hold),
            str(row.missed),
        )
    console.print(flights)

    for kind, section in report.sizing.items():
        table = Table(title=f"{SIZING_TITLES[kind]} Square Footage", show_header=True, header_style="bold cyan")
        for column in ("Line", "Max Passengers", "Max Sq Ft", "Time", "Interval"):
            table.add_column(column)
        for row in section.rows:
            table.add_row(
                row.label,
                str(row.max_passengers),
                f"{row.max_sqft:,}",
                row.time_label,
                row.interval_label,
            )
        table.add_row("Total", str(section.total_max_passengers), f"{section.total_sqft:,}", "", "", style="bold yellow")
        console.print(table)
    console.print(f"[italic]{report.sizing_note}[/italic]")


if __name__ == "__main__":
    raise SystemExit(main())
