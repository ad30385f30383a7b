"""
Unit tests for CSV and JSON exports.
"""

import csv
import io
import json
from datetime import datetime, timezone

from activity_insights.anomaly.engine import InsightEngine
from activity_insights.data.normalizers import normalize_events
from activity_insights.data.schema import ActivityEvent, AggregatedCount
from activity_insights.data.windowing import partition_events
from activity_insights.export.summary import (
    meta_snippet,
    parse_summary_csv,
    render_events_csv,
    render_raw_json,
    render_summary_csv,
    render_summary_csv_from,
    summary_rows,
)


class TestSummaryCsv:
    """Test section,label,count rendering."""
    
    def test_rows_from_sample_run(self, sample_events, now, insight_settings):
        summary = InsightEngine(settings=insight_settings).run(sample_events, now=now)
        
        rows = parse_summary_csv(render_summary_csv_from(summary))
        
        assert rows[:4] == [
            ("type", "Lead created", 6),
            ("type", "Campaign sent", 5),
            ("type", "Job completed", 4),
            ("type", "Email found", 2),
        ]
        assert rows[4:] == [
            ("user", "User #1", 6),
            ("user", "User #2", 5),
            ("user", "System", 4),
            ("user", "User #3", 2),
        ]
    
    def test_header_first(self, now, insight_settings):
        summary = InsightEngine(settings=insight_settings).run([], now=now)
        
        data = render_summary_csv_from(summary)
        
        assert data.decode("utf-8").splitlines() == ["section,label,count"]
    
    def test_from_buckets_matches_summary(self, sample_events, now, insight_settings):
        engine = InsightEngine(settings=insight_settings)
        parts = partition_events(sample_events, engine.window_size, now=now)
        
        from_buckets = render_summary_csv(parts.current, parts.previous, engine=engine)
        
        assert from_buckets == render_summary_csv_from(engine.run(sample_events, now=now))
    
    def test_unmapped_type_uses_raw_token(self, make_event, now):
        events = [make_event("webhook_retry")]
        
        rows = parse_summary_csv(render_summary_csv(events, []))
        
        assert rows[0] == ("type", "webhook_retry", 1)
    
    def test_label_map_applied(self, make_event):
        rows = parse_summary_csv(render_summary_csv([make_event("job_failed")], [], {"job_failed": "Failed, retried"}))
        
        assert rows[0] == ("type", "Failed, retried", 1)
    
    def test_round_trip_with_special_characters(self, make_event):
        label_map = {"a": 'Lead, "hot"', "b": "multi\nline"}
        current = [make_event("a") for _ in range(3)] + [make_event("b", actor=4) for _ in range(2)]
        
        data = render_summary_csv(current, [], label_map)
        
        assert b'"Lead, ""hot"""' in data
        assert parse_summary_csv(data) == [
            ("type", 'Lead, "hot"', 3),
            ("type", "multi\nline", 2),
            ("user", "System", 3),
            ("user", "User #4", 2),
        ]
    
    def test_summary_rows_types_then_users(self):
        volume, _ = InsightEngine().detect({"job_failed": 2, "lead_created": 3}, {})
        
        rows = summary_rows(volume, [AggregatedCount(key="System", count=5)])
        
        assert rows == [
            ("type", "Lead created", 3),
            ("type", "Job failed", 2),
            ("user", "System", 5),
        ]
    
    def test_output_is_readable_by_csv_module(self, sample_events, now):
        summary = InsightEngine().run(sample_events, now=now)
        
        reader = csv.reader(io.StringIO(render_summary_csv_from(summary).decode("utf-8")))
        
        assert next(reader) == ["section", "label", "count"]
        assert all(len(row) == 3 for row in reader)


class TestRawJson:
    """Test raw event JSON export."""
    
    def test_all_fields_round_trip(self):
        event = ActivityEvent(
            id=5,
            type="lead_score_updated",
            actor_user_id=2,
            workspace_id=11,
            created_at=datetime(2025, 2, 7, 10, 0, tzinfo=timezone.utc),
            meta={"lead_id": 9, "old": 40, "new": 72.5, "note": "x" * 500, "flag": True},
            workspace_name="Acme",
        )
        
        payload = json.loads(render_raw_json([event]))
        
        assert payload[0]["meta"] == event.meta
        assert payload[0]["workspace_name"] == "Acme"
        assert ActivityEvent.model_validate(payload[0]) == event
    
    def test_unparseable_timestamp_exported_verbatim(self):
        events, _ = normalize_events([
            {"id": 1, "type": "lead_created", "created_at": "not-a-date"},
            {"id": 2, "type": "lead_created", "created_at": 10**30},
        ])
        
        payload = json.loads(render_raw_json(events))
        
        assert [item["created_at"] for item in payload] == ["not-a-date", 10**30]
        assert all("raw_created_at" not in item for item in payload)
    
    def test_export_of_unparseable_timestamp_is_stable(self):
        events, _ = normalize_events([{"id": 1, "type": "x", "created_at": "yesterday"}])
        first = render_raw_json(events)
        
        reloaded, _ = normalize_events(json.loads(first))
        
        assert reloaded[0].created_at is None
        assert render_raw_json(reloaded) == first
    
    def test_pretty_printed(self, make_event):
        text = render_raw_json([make_event("lead_created")]).decode("utf-8")
        
        assert text.startswith("[\n  {")
    
    def test_empty_list(self):
        assert json.loads(render_raw_json([])) == []


class TestEventsCsv:
    """Test raw feed CSV and meta snippets."""
    
    def test_meta_snippet(self):
        assert meta_snippet({"a": 1, "b": True, "c": 3}) == "a: 1 | b: true"
        assert meta_snippet({}) == "-"
        assert meta_snippet(None) == "-"
        assert meta_snippet("text") == "-"
    
    def test_rows(self, make_event):
        events = [
            make_event("job_failed", actor=None, meta={"job_id": 3, "error": "timeout, retry"}),
            make_event("lead_created", hours_ago=None, actor=8),
        ]
        
        rows = list(csv.reader(io.StringIO(render_events_csv(events).decode("utf-8"))))
        
        assert rows[0] == ["time", "user", "type", "details"]
        assert rows[1] == ["2025-02-07T11:00:00+00:00", "System", "job_failed", "job_id: 3 | error: timeout, retry"]
        assert rows[2] == ["", "User #8", "lead_created", "-"]
