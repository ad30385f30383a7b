"""
Command line entry point for activity insights.

Reads an activity snapshot from a JSON export or from the activity API, runs
the insight engine, and prints the rankings or one of the exports.

Usage:
    activity-insights summary --input activity.json --format text
    activity-insights summary --api --admin --workspace-id 7 --format csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from activity_insights.anomaly.engine import InsightEngine
from activity_insights.anomaly.schema import InsightSummary
from activity_insights.core.config import InsightConfig, config
from activity_insights.core.exceptions import InsightError
from activity_insights.core.logging_config import setup_logging
from activity_insights.data.normalizers import NormalizationError, normalize_timestamp
from activity_insights.data.schema import ActivityFilter
from activity_insights.data.source import BaseEventSource, HttpEventSource, StaticEventSource, load_events_file
from activity_insights.export.labels import format_type_label
from activity_insights.export.summary import render_events_csv, render_raw_json, render_summary_csv_from
from activity_insights.service import InsightService

logger = logging.getLogger("activity_insights.cli")


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return normalize_timestamp(value)
    except NormalizationError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def format_summary_text(summary: InsightSummary) -> str:
    """Plain-text rendering of an insight run."""
    lines = [
        f"Window: {summary.current_window.start.isoformat()} to {summary.current_window.end.isoformat()}",
        f"Events: current={summary.current_total} previous={summary.previous_total} "
        f"outside={summary.discarded}",
        "",
        "Top activity types:",
    ]
    if not summary.volume_ranking:
        lines.append("  (no activity in the current window)")
    for entry in summary.volume_ranking:
        lines.append(
            f"  {format_type_label(entry.type)}: {entry.current_count} (prev {entry.previous_count})"
        )

    lines.append("")
    lines.append("Spikes:")
    if not summary.anomalies:
        lines.append("  No spikes detected.")
    for entry in summary.anomalies:
        ratio = f"x{entry.ratio:.1f}" if entry.ratio is not None else "new"
        lines.append(f"  {format_type_label(entry.type)}: +{entry.delta} ({ratio})")

    lines.append("")
    lines.append("Top actors:")
    if not summary.actor_ranking:
        lines.append("  (none)")
    for actor in summary.actor_ranking:
        lines.append(f"  {actor.key}: {actor.count}")

    return "\n".join(lines)


def _build_source(args: argparse.Namespace) -> BaseEventSource:
    if args.input:
        return StaticEventSource(load_events_file(args.input))
    if args.admin:
        return HttpEventSource.for_admin(base_url=args.base_url)
    return HttpEventSource.for_workspace(base_url=args.base_url)


def _run_summary(args: argparse.Namespace) -> int:
    settings = config.insights
    if args.window_hours is not None:
        settings = InsightConfig.model_validate(
            {**settings.model_dump(), "window_hours": args.window_hours}
        )
    engine = InsightEngine(settings=settings)

    filters = ActivityFilter(
        type=args.type,
        actor_user_id=args.actor_user_id,
        workspace_id=args.workspace_id,
        since=args.since,
        until=args.until,
    )
    service = InsightService(_build_source(args), engine)

    if args.format == "json":
        output = render_raw_json(service.fetch_snapshot(filters, settings.export_page_size).items)
        sys.stdout.write(output.decode("utf-8") + "\n")
        return 0
    if args.format == "events-csv":
        sys.stdout.write(render_events_csv(service.fetch_snapshot(filters).items).decode("utf-8"))
        return 0

    summary = engine.run(service.fetch_snapshot(filters).items, now=args.now)
    if args.format == "csv":
        sys.stdout.write(render_summary_csv_from(summary).decode("utf-8"))
    else:
        print(format_summary_text(summary))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Activity insight and spike detection")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--no-log-file", action="store_true", help="Log to stderr only")
    sub = parser.add_subparsers(dest="command", required=True)

    summary = sub.add_parser("summary", help="Summarize an activity snapshot")
    src = summary.add_mutually_exclusive_group(required=True)
    src.add_argument("--input", help="JSON or NDJSON activity export")
    src.add_argument("--api", action="store_true", help="Fetch from the activity API")
    summary.add_argument("--base-url", default=None, help="Activity API root (default from config)")
    summary.add_argument("--admin", action="store_true", help="Use the cross-workspace endpoint")
    summary.add_argument("--workspace-id", type=int, default=None)
    summary.add_argument("--type", default=None, help="Restrict to one event type")
    summary.add_argument("--actor-user-id", type=int, default=None)
    summary.add_argument("--since", default=None, help="Inclusive ISO date/time")
    summary.add_argument("--until", default=None, help="Exclusive ISO date/time")
    summary.add_argument("--window-hours", type=float, default=None)
    summary.add_argument("--now", type=_parse_now, default=None, help="Reference instant (ISO 8601)")
    summary.add_argument(
        "--format",
        choices=["text", "csv", "json", "events-csv"],
        default="text",
    )
    summary.set_defaults(handler=_run_summary)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level, log_to_file=not args.no_log_file)

    try:
        return args.handler(args)
    except ValidationError as e:
        logger.error("Invalid arguments: %s", e)
        return 2
    except InsightError as e:
        logger.error("Failed to load insights: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
