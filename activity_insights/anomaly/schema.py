"""
Schema definitions for spike detection output.

All outputs are deterministic and explainable: every anomaly entry carries
the two counts it was derived from, the delta, and the ratio.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from activity_insights.data.schema import AggregatedCount, Window


class AnomalyEntry(BaseModel):
    """
    Period-over-period comparison for one event type.

    Fields:
    - type: event type tag
    - current_count: events of this type in the current window
    - previous_count: events of this type in the previous window
    - delta: current_count - previous_count
    - ratio: current_count / previous_count, None when previous_count is 0
    - is_spike: True if the spike rule flags this type
    """

    type: str
    current_count: int = Field(ge=0)
    previous_count: int = Field(ge=0)
    delta: int
    ratio: Optional[float] = None
    is_spike: bool = False


class InsightSummary(BaseModel):
    """
    Result of one insight run over an event snapshot.

    Fields:
    - generated_at: reference instant the windows end at
    - current_window / previous_window: the compared windows
    - volume_ranking: busiest types in the current window (capped)
    - anomalies: spiking types among volume_ranking, largest delta first (capped)
    - actor_ranking: most active actors (capped)
    - category_counts: current-window counts per type category
    - current_total / previous_total: events in each window
    - discarded: events outside both windows or without a timestamp
    """

    generated_at: datetime
    current_window: Window
    previous_window: Window
    volume_ranking: List[AnomalyEntry] = Field(default_factory=list)
    anomalies: List[AnomalyEntry] = Field(default_factory=list)
    actor_ranking: List[AggregatedCount] = Field(default_factory=list)
    category_counts: List[AggregatedCount] = Field(default_factory=list)
    current_total: int = Field(0, ge=0)
    previous_total: int = Field(0, ge=0)
    discarded: int = Field(0, ge=0)

    @property
    def is_empty(self) -> bool:
        return not (self.volume_ranking or self.actor_ranking)


class TopSummary(BaseModel):
    """Compact top-N types and actors for the current window (dashboard widget)."""

    types: List[AggregatedCount] = Field(default_factory=list)
    actors: List[AggregatedCount] = Field(default_factory=list)
