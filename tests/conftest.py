"""
Pytest configuration and shared fixtures.

Provides a fixed reference instant, an event factory, and sample activity
snapshots for unit and integration tests.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from activity_insights.core.config import InsightConfig
from activity_insights.data.schema import ActivityEvent


NOW = datetime(2025, 2, 7, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant so window boundaries are deterministic."""
    return NOW


@pytest.fixture
def insight_settings() -> InsightConfig:
    """
    Fixture providing insight settings with the production defaults.

    Built explicitly (not from the environment) so that .env overrides never
    change test outcomes.
    """
    return InsightConfig()


@pytest.fixture
def make_event(now) -> Callable[..., ActivityEvent]:
    """
    Factory fixture building ActivityEvent objects relative to `now`.

    Usage:
        make_event("lead_created", hours_ago=1, actor=3)
    """
    counter = {"next_id": 1}

    def _make(
        event_type: str,
        hours_ago: Optional[float] = 1.0,
        actor: Optional[int] = None,
        workspace_id: Optional[int] = None,
        meta: Optional[Dict[str, Any]] = None,
        **extra: Any,
    ) -> ActivityEvent:
        event_id = counter["next_id"]
        counter["next_id"] += 1
        created_at = None if hours_ago is None else now - timedelta(hours=hours_ago)
        return ActivityEvent(
            id=event_id,
            type=event_type,
            actor_user_id=actor,
            workspace_id=workspace_id,
            created_at=created_at,
            meta=meta or {},
            **extra,
        )

    return _make


@pytest.fixture
def sample_events(make_event) -> List[ActivityEvent]:
    """
    Realistic two-day snapshot.

    Current window (last 24h):
        lead_created x6 (previous x1) -> spike, delta 5
        job_completed x4 (previous x2) -> ratio 2.0 but delta 2, no spike
        campaign_sent x5 (previous x0) -> spike, delta 5
        email_found x2 (previous x0) -> no spike
    Previous window only:
        job_failed x3
    Outside both windows:
        lead_updated x2 (60h ago)
    """
    events: List[ActivityEvent] = []
    events += [make_event("lead_created", hours_ago=1 + i, actor=1) for i in range(6)]
    events += [make_event("job_completed", hours_ago=2 + i, actor=None) for i in range(4)]
    events += [make_event("campaign_sent", hours_ago=3 + i, actor=2) for i in range(5)]
    events += [make_event("email_found", hours_ago=5, actor=3) for _ in range(2)]

    events.append(make_event("lead_created", hours_ago=30, actor=1))
    events += [make_event("job_completed", hours_ago=26 + i) for i in range(2)]
    events += [make_event("job_failed", hours_ago=40, actor=4) for _ in range(3)]

    events += [make_event("lead_updated", hours_ago=60, actor=5) for _ in range(2)]
    return events


@pytest.fixture
def sample_event_dataframe(sample_events) -> pd.DataFrame:
    """
    Fixture providing the sample snapshot as a pandas DataFrame.

    Used to cross-check aggregation against an independent groupby.
    """
    df = pd.DataFrame([e.model_dump() for e in sample_events])
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
    return df


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
