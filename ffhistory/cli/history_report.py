from __future__ import annotations

import argparse
import asyncio
import datetime
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from ffhistory.config import HistoryConfig
from ffhistory.constants import ALL_TIME, SCHEMA_VERSION
from ffhistory.errors import SeasonNotFound, UpstreamFetchFailure
from ffhistory.history.service import HistoryService
from ffhistory.report.formatters import format_json, format_markdown
from ffhistory.report.models import HistoryContext

VIEWS = ("chain", "stats", "metrics")


def _skipped(rosters: dict[str, list[int]], users: dict[str, list[str]]) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for sid, ids in rosters.items():
        out.setdefault(sid, []).extend(f"roster {rid}" for rid in ids)
    for sid, ids in users.items():
        out.setdefault(sid, []).extend(f"user {uid}" for uid in ids)
    return out


async def build_history_context(
    service: HistoryService,
    *,
    league_id: str,
    view: str,
    season: str | None = None,
) -> HistoryContext:
    if view not in VIEWS:
        raise ValueError(f"Unsupported view: {view}")
    links = await service.resolver.resolve_links(league_id)
    ctx = HistoryContext(league_id=league_id, view=view, chain=links)
    if view == "stats":
        report = await service.aggregation_report(league_id)
        ctx.stats = report.stats
        ctx.skipped = _skipped(report.skipped_rosters, report.skipped_users)
    elif view == "metrics":
        ctx.season = season or ALL_TIME
        mreport = await service.team_metrics_report(league_id, ctx.season)
        ctx.metrics = mreport.metrics
        ctx.league_average = round(mreport.league_average, 2)
        if mreport.skipped_roster_ids or mreport.skipped_user_ids:
            ctx.skipped = _skipped(
                {ctx.season: mreport.skipped_roster_ids}, {ctx.season: mreport.skipped_user_ids}
            )
    ctx.meta_rows = [
        ["schema_version", SCHEMA_VERSION],
        ["generated_at", datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds")],
        ["league_id", league_id],
        ["view", view],
        ["season", ctx.season or "-"],
        ["chain_length", str(len(links))],
        ["seasons", ",".join(s for _, s in links if s) or "-"],
    ]
    return ctx


def generate_history_report(
    *,
    config: HistoryConfig,
    league_id: str,
    view: str = "stats",
    season: str | None = None,
    out_dir: str = "reports/history",
    output_formats: Sequence[str] | None = None,
    json_pretty: bool = True,
    verbose: bool = False,
    dry_run: bool = False,
    service: HistoryService | None = None,
) -> dict:
    formats = list(output_formats) if output_formats else ["markdown"]
    svc = service if service is not None else HistoryService.from_config(config)
    ctx = asyncio.run(build_history_context(svc, league_id=league_id, view=view, season=season))
    dest_dir = Path(out_dir) / league_id
    if not dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)
    stem = view if view != "metrics" else f"metrics-{ctx.season}"

    results: dict[str, dict[str, Any]] = {}
    for fmt in formats:
        fmt_norm = fmt.lower()
        if fmt_norm in {"md", "markdown"}:
            content = format_markdown(ctx)
            path = dest_dir / f"{stem}.md"
        elif fmt_norm == "json":
            content = format_json(ctx, SCHEMA_VERSION, pretty=json_pretty)
            path = dest_dir / f"{stem}.json"
        else:
            raise ValueError(f"Unsupported format: {fmt}")
        if not dry_run:
            path.write_text(content, encoding="utf-8")
        if verbose:
            print(f"[history_report] wrote {fmt_norm} -> {path} ({len(content)} bytes)")
        key = "markdown" if fmt_norm in {"md", "markdown"} else fmt_norm
        results[key] = {"path": str(path), "bytes": len(content), "written": not dry_run}

    return {
        "formats": results,
        "meta": {"schema_version": SCHEMA_VERSION, "league_id": league_id, "view": view, "season": ctx.season},
        "written": not dry_run,
        "entries": {
            "chain": len(ctx.chain),
            "stats": len(ctx.stats or []),
            "metrics": len(ctx.metrics or []),
        },
    }


def main(argv: list[str] | None = None) -> int:  # pragma: no cover
    config = HistoryConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Generate multi-season Sleeper league history reports"
    )
    parser.add_argument(
        "--league-id", default=config.league_id, help="Starting Sleeper league_id (default from env)"
    )
    parser.add_argument("--view", choices=VIEWS, default="stats", help="Report view")
    parser.add_argument(
        "--season",
        type=str,
        default=None,
        help=f"Season for --view metrics (e.g., 2024). Default: {ALL_TIME}",
    )
    parser.add_argument("--out-dir", default="reports/history", help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--dry-run", action="store_true", help="Build report but do not write files")
    parser.add_argument(
        "--formats",
        default="markdown",
        help="Comma-separated list of output formats (markdown,json)",
    )
    parser.set_defaults(json_pretty=True)
    parser.add_argument(
        "--json-pretty",
        dest="json_pretty",
        action="store_true",
        help="(Default) Pretty-print JSON output when using --formats json",
    )
    parser.add_argument(
        "--json-compact",
        dest="json_pretty",
        action="store_false",
        help="Use compact JSON (no whitespace)",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.league_id:
        parser.error("--league-id is required (or set SLEEPER_LEAGUE_ID)")
    formats = [f.strip() for f in args.formats.split(",") if f.strip()]

    try:
        summary = generate_history_report(
            config=config,
            league_id=args.league_id,
            view=args.view,
            season=args.season,
            out_dir=args.out_dir,
            output_formats=formats,
            json_pretty=args.json_pretty,
            verbose=args.verbose,
            dry_run=args.dry_run,
        )
    except UpstreamFetchFailure as e:
        print(f"Upstream fetch failed: {e}", file=sys.stderr)
        return 1
    except SeasonNotFound as e:
        print(str(e), file=sys.stderr)
        return 1
    for fmt, info in summary["formats"].items():
        state = "wrote" if info["written"] else "built"
        print(f"{state} {fmt}: {info['path']} ({info['bytes']} bytes)")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
