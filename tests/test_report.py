import asyncio
import json

import pytest

from ffhistory.cli.history_report import build_history_context, generate_history_report
from ffhistory.config import HistoryConfig
from ffhistory.constants import SCHEMA_VERSION
from ffhistory.history import HistoryService
from ffhistory.report import format_json, format_markdown
from ffhistory.report.formatters import md_table

from tests.fakes import roster


def test_md_table_escapes_pipes_and_none():
    lines = md_table(["a", "b"], [["x|y", None]])
    assert lines[0] == "| a | b |"
    assert lines[1] == "| :--- | :--- |"
    assert lines[2] == "| x\\|y | - |"


def test_stats_context_markdown_sections(three_season_port):
    three_season_port.rosters["S2"].append(roster(4, None))
    ctx = asyncio.run(
        build_history_context(HistoryService(three_season_port), league_id="S3", view="stats")
    )
    md = format_markdown(ctx)
    lines = md.splitlines()
    assert lines[0] == "# League History S3"
    assert "## Season Chain" in lines
    idx = lines.index("## All-Time Standings")
    assert lines[idx + 1].startswith("| rank | user | seasons | record |")
    assert lines[idx + 3].startswith("| 1 | cara | 3 | 23-19 |")
    assert "## Skipped Records" in lines
    assert "| S2 | roster 4 |" in lines


def test_metrics_context_json_payload(three_season_port):
    ctx = asyncio.run(
        build_history_context(HistoryService(three_season_port), league_id="S3", view="metrics", season="2024")
    )
    payload = json.loads(format_json(ctx, SCHEMA_VERSION))
    assert payload["schema_version"] == SCHEMA_VERSION
    assert payload["metadata"]["season"] == "2024"
    assert [c["season"] for c in payload["chain"]] == ["2024", "2023", "2022"]
    assert len(payload["team_metrics"]) == 4
    first = payload["team_metrics"][0]
    assert set(first) >= {"record", "points", "consistency", "explosiveness", "clutch", "weeks_played"}
    assert "weekly_scores" not in first


def test_unknown_view_rejected(three_season_port):
    with pytest.raises(ValueError):
        asyncio.run(build_history_context(HistoryService(three_season_port), league_id="S3", view="bracket"))


def test_generate_report_writes_files(three_season_port, tmp_path):
    summary = generate_history_report(
        config=HistoryConfig(),
        league_id="S3",
        view="chain",
        out_dir=str(tmp_path),
        output_formats=["markdown", "json"],
        json_pretty=False,
        service=HistoryService(three_season_port),
    )
    assert summary["written"] is True
    assert summary["entries"]["chain"] == 3
    md_path = tmp_path / "S3" / "chain.md"
    json_path = tmp_path / "S3" / "chain.json"
    assert md_path.read_text(encoding="utf-8").startswith("# League History S3")
    assert json.loads(json_path.read_text(encoding="utf-8"))["metadata"]["chain_length"] == "3"


def test_generate_report_dry_run_writes_nothing(three_season_port, tmp_path):
    summary = generate_history_report(
        config=HistoryConfig(),
        league_id="S3",
        view="metrics",
        out_dir=str(tmp_path),
        dry_run=True,
        service=HistoryService(three_season_port),
    )
    assert summary["written"] is False
    assert summary["formats"]["markdown"]["path"].endswith("metrics-all-time.md")
    assert not any(tmp_path.iterdir())
