"""
Unit tests for the insight engine.
"""

from datetime import timedelta

import pytest

from activity_insights.anomaly.engine import InsightEngine, compare_buckets
from activity_insights.core.config import InsightConfig
from activity_insights.export.labels import TYPE_LABELS


def test_compare_buckets_covers_union():
    entries = compare_buckets({"a": 3, "b": 1}, {"b": 4, "c": 2})
    
    by_type = {e.type: e for e in entries}
    assert [e.type for e in entries] == ["a", "b", "c"]
    assert by_type["a"].previous_count == 0
    assert by_type["c"].current_count == 0
    assert by_type["c"].delta == -2


def test_detect_volume_and_anomaly_rankings(insight_settings):
    engine = InsightEngine(settings=insight_settings)
    
    volume, anomalies = engine.detect(
        {"lead_created": 6, "job_completed": 4, "campaign_sent": 5},
        {"lead_created": 1, "job_completed": 2, "job_failed": 9},
    )
    
    assert [e.type for e in volume] == ["lead_created", "campaign_sent", "job_completed"]
    assert [e.type for e in anomalies] == ["lead_created", "campaign_sent"]
    assert anomalies[0].ratio == pytest.approx(6.0)


def test_type_absent_from_current_never_reported(insight_settings):
    """A sharp drop to zero is not a candidate."""
    engine = InsightEngine(settings=insight_settings)
    
    volume, anomalies = engine.detect({}, {"job_failed": 50})
    
    assert volume == []
    assert anomalies == []


def test_anomalies_limited_to_volume_candidates():
    """A spiking type outside the top volume ranking is not flagged."""
    engine = InsightEngine(settings=InsightConfig(volume_limit=2))
    current = {"big_a": 50, "big_b": 40, "small_spike": 6}
    
    volume, anomalies = engine.detect(current, {"big_a": 50, "big_b": 40})
    
    assert [e.type for e in volume] == ["big_a", "big_b"]
    assert anomalies == []


def test_caps_are_configurable():
    engine = InsightEngine(settings=InsightConfig(volume_limit=3, anomaly_limit=1, actor_limit=2))
    current = {f"type_{i}": 10 + i for i in range(6)}
    
    volume, anomalies = engine.detect(current, {})
    actors = engine.rank_actors({"System": 3, "User #1": 5, "User #2": 1})
    
    assert len(volume) == 3
    assert len(anomalies) == 1
    assert anomalies[0].type == "type_5"
    assert [a.key for a in actors] == ["User #1", "System"]


def test_default_caps(insight_settings):
    engine = InsightEngine(settings=insight_settings)
    current = {f"type_{i}": 20 - i for i in range(12)}
    
    volume, anomalies = engine.detect(current, {})
    
    assert len(volume) == 8
    assert len(anomalies) == 4


def test_run_on_sample_snapshot(sample_events, now, insight_settings):
    summary = InsightEngine(settings=insight_settings).run(sample_events, now=now)
    
    assert summary.current_total == 17
    assert summary.previous_total == 6
    assert summary.discarded == 2
    assert [(e.type, e.current_count) for e in summary.volume_ranking] == [
        ("lead_created", 6),
        ("campaign_sent", 5),
        ("job_completed", 4),
        ("email_found", 2),
    ]
    assert [(e.type, e.delta) for e in summary.anomalies] == [
        ("lead_created", 5),
        ("campaign_sent", 5),
    ]
    assert [(a.key, a.count) for a in summary.actor_ranking] == [
        ("User #1", 6),
        ("User #2", 5),
        ("System", 4),
        ("User #3", 2),
    ]
    assert [c.key for c in summary.category_counts] == ["lead", "campaign", "job", "email"]


def test_bucket_totals_match_in_window_events(sample_events, now, insight_settings):
    summary = InsightEngine(settings=insight_settings).run(sample_events, now=now)
    
    assert summary.current_total + summary.previous_total + summary.discarded == len(sample_events)
    assert sum(e.current_count for e in summary.volume_ranking) == summary.current_total


def test_actor_scope_snapshot(sample_events, now):
    engine = InsightEngine(settings=InsightConfig(actor_scope="snapshot"))
    
    summary = engine.run(sample_events, now=now)
    
    counts = {a.key: a.count for a in summary.actor_ranking}
    assert counts["User #1"] == 7
    assert counts["User #5"] == 2
    assert counts["System"] == 6
    assert {c.key: c.count for c in summary.category_counts} == {
        "lead": 9, "job": 9, "campaign": 5, "email": 2
    }


def test_run_is_idempotent(sample_events, now, insight_settings):
    engine = InsightEngine(settings=insight_settings)
    
    first = engine.run(sample_events, now=now)
    second = engine.run(sample_events, now=now)
    
    assert first == second


def test_empty_input_yields_empty_rankings(now, insight_settings):
    summary = InsightEngine(settings=insight_settings).run([], now=now)
    
    assert summary.volume_ranking == []
    assert summary.anomalies == []
    assert summary.actor_ranking == []
    assert summary.is_empty


def test_window_hours_setting(make_event, now):
    events = [make_event("lead_created", hours_ago=2), make_event("lead_created", hours_ago=5)]
    engine = InsightEngine(settings=InsightConfig(window_hours=3))
    
    summary = engine.run(events, now=now)
    
    assert engine.window_size == timedelta(hours=3)
    assert summary.current_total == 1
    assert summary.previous_total == 1


def test_top_summary_labels_and_limit(sample_events, now, insight_settings):
    top = InsightEngine(settings=insight_settings).top_summary(sample_events, now=now)
    
    assert [(t.key, t.count) for t in top.types] == [
        ("Lead Created", 6),
        ("Campaign Sent", 5),
        ("Job Completed", 4),
    ]
    assert [a.key for a in top.actors] == ["User #1", "User #2", "System"]


def test_top_summary_label_map_override(make_event, now, insight_settings):
    events = [make_event("lead_score_updated"), make_event("lead_created")]
    engine = InsightEngine(settings=insight_settings)
    
    default = engine.top_summary(events, now=now)
    curated = engine.top_summary(events, now=now, label_map=TYPE_LABELS)
    
    assert [t.key for t in default.types] == ["Lead Score Updated", "Lead Created"]
    assert [t.key for t in curated.types] == [TYPE_LABELS["lead_score_updated"], "Lead created"]
