from __future__ import annotations

import json
import textwrap

import pandas as pd
import pytest

from groundops.analytics import summary_cli


def _write_inputs(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        textwrap.dedent(
            """
            sqft_per_passenger: 10
            flights:
              - number: UA100
                departure: '08:00'
                seats: 4
                fill: 1.0
            ticket_counters:
              - rate_per_minute: 1.0
            checkpoints:
              - rate_per_hour: 120
            hold_rooms:
              - walk_minutes: 1
            """
        ).strip(),
        encoding="utf-8",
    )
    trace_path = tmp_path / "trace.json"
    trace_path.write_text(
        json.dumps(
            {
                "schema_version": 1,
                "passengers": [
                    {"id": i, "flight": "UA100", "arrival_minute": i, "hold_room_entry_minute": i + 10}
                    for i in range(3)
                ],
                "snapshots": [
                    {"ticket": [[0, 1]], "checkpoint": [[]], "hold_rooms": [[]]},
                    {"ticket": [[]], "checkpoint": [[2]], "hold_rooms": [[0, 1, 2]]},
                ],
                "series": {"ticket_queued": {"0": 2}, "hold_room_total": {"1": 3}},
                "minute_arrivals": {"UA100": [2, 1]},
            }
        ),
        encoding="utf-8",
    )
    return config_path, trace_path


def test_main_prints_report_and_writes_csvs(tmp_path, capsys):
    config_path, trace_path = _write_inputs(tmp_path)
    out_dir = tmp_path / "report"

    exit_code = summary_cli.main(
        ["--config", str(config_path), "--trace", str(trace_path), "--output-dir", str(out_dir)]
    )

    assert exit_code == 0
    assert "Run Totals" in capsys.readouterr().out
    flights = pd.read_csv(out_dir / "flights.csv")
    assert flights.loc[0, "flight_number"] == "UA100"
    assert flights.loc[0, "reached_hold"] == 3
    assert flights.loc[0, "missed"] == 1
    totals = pd.read_csv(out_dir / "sizing_totals.csv").set_index("kind")
    assert totals.loc["hold_room", "total_sqft"] == 30
    assert totals.loc["ticket", "total_max_passengers"] == 2
    for name in ("overview", "peaks", "sizing"):
        assert (out_dir / f"{name}.csv").exists()


def test_main_exits_on_invalid_configuration(tmp_path):
    config_path, trace_path = _write_inputs(tmp_path)
    config_path.write_text("percent_in_person: 1.5\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        summary_cli.main(["--config", str(config_path), "--trace", str(trace_path)])
    assert "percent_in_person" in str(excinfo.value)


def test_require_runnable_rejects_missing_resources(tmp_path):
    config_path, trace_path = _write_inputs(tmp_path)
    config_path.write_text("flights: []\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        summary_cli.main(
            ["--config", str(config_path), "--trace", str(trace_path), "--require-runnable"]
        )
    assert "flights" in str(excinfo.value)
