"""
Summary and raw exports.

Renders insight output as bytes for the caller to deliver (file download,
HTTP response, ...):

- Summary CSV: section,label,count rows for the type and actor rankings
- Raw JSON: the filtered event list itself, pretty-printed, nothing dropped
- Events CSV: time,user,type,details rows for the raw feed

CSV fields are quoted as needed so labels with commas, quotes, or newlines
survive a round trip through any CSV reader.
"""

import csv
import io
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from activity_insights.anomaly.schema import InsightSummary
from activity_insights.data.aggregation import actor_label, count_by_actor, count_by_type
from activity_insights.data.schema import RAW_CREATED_AT_FIELD, ActivityEvent, AggregatedCount

from .labels import format_type_label

SUMMARY_HEADER = ("section", "label", "count")
EVENTS_HEADER = ("time", "user", "type", "details")

SummaryRow = Tuple[str, str, int]


def summary_rows(
    volume_ranking: Sequence[Any],
    actor_ranking: Sequence[AggregatedCount],
    label_map: Optional[Mapping[str, str]] = None,
) -> List[SummaryRow]:
    """
    Build summary rows: one "type" row per volume entry, then one "user" row
    per actor entry.

    Args:
        volume_ranking: AnomalyEntry objects (type, current_count)
        actor_ranking: AggregatedCount objects (actor label, count)
        label_map: Optional label overrides for event types

    Returns:
        List of (section, label, count) tuples
    """
    rows: List[SummaryRow] = []
    for entry in volume_ranking:
        label = format_type_label(entry.type, label_map, raw_fallback=True)
        rows.append(("type", label, entry.current_count))
    for actor in actor_ranking:
        rows.append(("user", actor.key, actor.count))
    return rows


def _write_csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_summary_csv_from(
    summary: InsightSummary,
    label_map: Optional[Mapping[str, str]] = None,
) -> bytes:
    """Render the summary CSV of a finished insight run."""
    return _write_csv(
        SUMMARY_HEADER,
        summary_rows(summary.volume_ranking, summary.actor_ranking, label_map),
    )


def render_summary_csv(
    current: Iterable[ActivityEvent],
    previous: Iterable[ActivityEvent],
    label_map: Optional[Mapping[str, str]] = None,
    engine: Optional[Any] = None,
) -> bytes:
    """
    Render the summary CSV from two already-partitioned buckets.

    Args:
        current: Events of the current window
        previous: Events of the previous window
        label_map: Optional label overrides for event types
        engine: InsightEngine supplying ranking caps (default settings)

    Returns:
        UTF-8 CSV bytes with a section,label,count header
    """
    if engine is None:
        from activity_insights.anomaly.engine import InsightEngine

        engine = InsightEngine()

    current = list(current)
    volume, _ = engine.detect(count_by_type(current), count_by_type(previous))
    actors = engine.rank_actors(count_by_actor(current))
    return _write_csv(SUMMARY_HEADER, summary_rows(volume, actors, label_map))


def parse_summary_csv(data: Union[bytes, str]) -> List[SummaryRow]:
    """
    Parse summary CSV back into (section, label, count) tuples.

    The header row is skipped; blank lines are ignored.
    """
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    reader = csv.reader(io.StringIO(text, newline=""))
    rows: List[SummaryRow] = []
    for idx, row in enumerate(reader):
        if not row:
            continue
        if idx == 0 and tuple(row) == SUMMARY_HEADER:
            continue
        section, label, count = row
        rows.append((section, label, int(count)))
    return rows


def _export_record(event: ActivityEvent) -> Dict[str, Any]:
    record = event.model_dump(mode="json")
    if RAW_CREATED_AT_FIELD in record:
        record["created_at"] = record.pop(RAW_CREATED_AT_FIELD)
    return record


def render_raw_json(events: Iterable[ActivityEvent]) -> bytes:
    """
    Render the raw event list as pretty-printed JSON.

    Every field is kept, including the full meta payload and any extra fields
    the source returned. Timestamps are ISO 8601 UTC; a created_at that could
    not be parsed is written back exactly as the source sent it.
    """
    payload = [_export_record(event) for event in events]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def _display_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def meta_snippet(meta: Any, max_keys: int = 2) -> str:
    """
    Short "key: value | key: value" rendering of the first meta entries.

    Returns "-" for empty or non-mapping meta.
    """
    if not isinstance(meta, Mapping) or not meta:
        return "-"
    keys = list(meta)[:max_keys]
    return " | ".join(f"{k}: {_display_value(meta[k])}" for k in keys)


def render_events_csv(events: Iterable[ActivityEvent]) -> bytes:
    """
    Render the raw feed as CSV with time,user,type,details columns.
    """
    rows = (
        (
            event.created_at.isoformat() if event.created_at else "",
            actor_label(event),
            event.type,
            meta_snippet(event.meta),
        )
        for event in events
    )
    return _write_csv(EVENTS_HEADER, rows)
