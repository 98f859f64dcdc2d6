"""Output format helpers for history report contexts.

Markdown output is a sequence of sections (metadata, chain, then whichever of
aggregated stats / team metrics the context carries), each a deterministic table.
JSON output is the context payload with numbers left numeric.
"""

from __future__ import annotations
import json
from typing import Any

from ffhistory.compute.core import format_record

from .models import HistoryContext


def _cell(value: Any) -> str:
    return ("-" if value is None else str(value)).replace("|", "\\|")


def md_table(headers: list[str], rows: list[list[Any]]) -> list[str]:
    """Header, left-aligned separator, then one line per row. None cells render as ``-``."""
    def line(cells) -> str:
        return "| " + " | ".join(cells) + " |"

    out = [line(_cell(h) for h in headers), line(":---" for _ in headers)]
    out += [line(_cell(c) for c in row) for row in rows]
    return out


def _f(value: float, places: int = 2) -> str:
    return f"{value:.{places}f}"


def _chain_section(ctx: HistoryContext) -> list[str]:
    rows = [[i + 1, season or "-", lid] for i, (lid, season) in enumerate(ctx.chain)]
    return ["## Season Chain", *md_table(["#", "season", "league_id"], rows), ""]


def _stats_section(ctx: HistoryContext) -> list[str]:
    headers = [
        "rank", "user", "seasons", "record", "win_pct", "points_for", "points_against",
        "ppg", "best_finish", "playoffs", "titles",
    ]
    rows = []
    for i, s in enumerate(ctx.stats or []):
        rows.append([
            i + 1,
            s.username,
            s.seasons,
            format_record(s.wins, s.losses, s.ties),
            _f(s.win_percentage),
            _f(s.points_for),
            _f(s.points_against),
            _f(s.average_points_per_game),
            s.best_finish,
            s.playoff_appearances,
            s.championships,
        ])
    return ["## All-Time Standings", *md_table(headers, rows), ""]


def _metrics_section(ctx: HistoryContext) -> list[str]:
    label = ctx.season or "all-time"
    headers = [
        "team", "owner", "record", "win_pct", "total", "avg", "high", "low", "std_dev",
        "consistency", "margin", "explosive", "explosive_games", "clutch", "close_wins",
    ]
    rows = []
    for m in ctx.metrics or []:
        rows.append([
            m.team_name,
            m.username,
            format_record(m.record.wins, m.record.losses, m.record.ties),
            _f(m.record.win_pct),
            _f(m.points.total),
            _f(m.points.average),
            _f(m.points.high),
            _f(m.points.low),
            _f(m.points.std_dev),
            _f(m.consistency.score, 1),
            _f(m.consistency.average_margin),
            _f(m.explosiveness.score, 1),
            m.explosiveness.explosive_games,
            _f(m.clutch.score, 1),
            f"{m.clutch.close_wins}/{m.clutch.close_games}",
        ])
    lines = [f"## Team Metrics ({label})", *md_table(headers, rows)]
    if ctx.league_average is not None:
        lines.append("")
        lines.append(f"League average score: {_f(ctx.league_average)}")
    lines.append("")
    return lines


def build_markdown_lines(ctx: HistoryContext) -> list[str]:
    lines = [f"# League History {ctx.league_id}", ""]
    lines += ["## Metadata", *md_table(["key", "value"], ctx.meta_rows), ""]
    lines += _chain_section(ctx)
    if ctx.stats is not None:
        lines += _stats_section(ctx)
    if ctx.metrics is not None:
        lines += _metrics_section(ctx)
    if ctx.skipped:
        rows = [[k, ", ".join(str(x) for x in v)] for k, v in sorted(ctx.skipped.items())]
        lines += ["## Skipped Records", *md_table(["season", "ids"], rows), ""]
    return lines


def format_markdown(ctx: HistoryContext) -> str:
    return "\n".join(build_markdown_lines(ctx)).rstrip("\n") + "\n"


def format_json(ctx: HistoryContext, schema_version: str, *, pretty: bool = False) -> str:
    """Render context to JSON (indented when ``pretty``)."""
    payload = ctx.to_json_payload(schema_version)
    if pretty:
        return json.dumps(payload, indent=2)
    return json.dumps(payload, separators=(",", ":"))
