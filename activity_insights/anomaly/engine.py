"""
Activity insight engine.

Consumes an already-fetched event snapshot, partitions it into current and
previous windows, counts both buckets, flags spiking event types, and ranks
types and actors. One engine serves both the workspace view and the admin
cross-workspace view; scope is decided by what the caller fetched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from activity_insights.core.config import InsightConfig, config
from activity_insights.data.aggregation import count_by_actor, count_by_category, count_by_type
from activity_insights.data.schema import ActivityEvent, AggregatedCount
from activity_insights.data.windowing import WindowPartition, partition_events, resolve_now
from activity_insights.export.labels import format_type_label

from .detectors import SpikeRule
from .ranking import rank_by_volume, rank_counts, rank_spikes
from .schema import AnomalyEntry, InsightSummary, TopSummary

logger = logging.getLogger(__name__)


def compare_buckets(
    current_counts: Dict[str, int],
    previous_counts: Dict[str, int],
    rule: Optional[SpikeRule] = None,
) -> List[AnomalyEntry]:
    """
    Compare per-type counts of two buckets.

    Covers the union of types: current-window types in first-occurrence order,
    then types seen only in the previous window. A type missing from a bucket
    counts as 0 there.
    """
    rule = rule or SpikeRule()
    types = list(current_counts)
    types.extend(t for t in previous_counts if t not in current_counts)
    return [
        rule.compare(t, current_counts.get(t, 0), previous_counts.get(t, 0))
        for t in types
    ]


@dataclass
class InsightEngine:
    """
    Deterministic spike detection and ranking engine.

    Notes:
    - Stateless between runs; the same snapshot always gives the same result.
    - Anomaly candidates are limited to the volume ranking, so a type with no
      current activity is never reported even if it dropped sharply.
    - Empty input yields empty rankings, never an error.
    """

    settings: InsightConfig = field(default_factory=lambda: config.insights)

    def __post_init__(self) -> None:
        self._rule = SpikeRule.from_thresholds(self.settings.spike)

    @property
    def rule(self) -> SpikeRule:
        return self._rule

    @property
    def window_size(self) -> timedelta:
        return timedelta(hours=self.settings.window_hours)

    def partition(
        self, events: Iterable[ActivityEvent], now: Optional[datetime] = None
    ) -> WindowPartition:
        return partition_events(events, window_size=self.window_size, now=now)

    def detect(
        self,
        current_counts: Dict[str, int],
        previous_counts: Dict[str, int],
    ) -> Tuple[List[AnomalyEntry], List[AnomalyEntry]]:
        """
        Build the volume ranking and the anomaly ranking.

        Returns:
            Tuple of (volume_ranking, anomalies)
        """
        entries = compare_buckets(current_counts, previous_counts, self._rule)
        active = [e for e in entries if e.current_count > 0]
        volume = rank_by_volume(active, self.settings.volume_limit)
        anomalies = rank_spikes(volume, self.settings.anomaly_limit)
        return volume, anomalies

    def rank_actors(self, actor_counts: Dict[str, int]) -> List[AggregatedCount]:
        return rank_counts(actor_counts, self.settings.actor_limit)

    def run(
        self, events: Iterable[ActivityEvent], now: Optional[datetime] = None
    ) -> InsightSummary:
        """
        Run the full pipeline over one snapshot.

        Args:
            events: Pre-fetched, bounded event snapshot
            now: Reference instant; defaults to the current UTC time

        Returns:
            InsightSummary with rankings for the current window
        """
        snapshot = list(events)
        now = resolve_now(now)
        parts = self.partition(snapshot, now)

        current_counts = count_by_type(parts.current)
        previous_counts = count_by_type(parts.previous)
        volume, anomalies = self.detect(current_counts, previous_counts)

        breakdown_events = snapshot if self.settings.actor_scope == "snapshot" else parts.current
        actors = self.rank_actors(count_by_actor(breakdown_events))
        categories = rank_counts(count_by_category(breakdown_events))

        if parts.discarded:
            logger.debug("%d events outside the comparison windows", len(parts.discarded))
        logger.info(
            "Insight run: current=%d previous=%d types=%d spikes=%d",
            len(parts.current),
            len(parts.previous),
            len(volume),
            len(anomalies),
        )

        return InsightSummary(
            generated_at=now,
            current_window=parts.current_window,
            previous_window=parts.previous_window,
            volume_ranking=volume,
            anomalies=anomalies,
            actor_ranking=actors,
            category_counts=categories,
            current_total=len(parts.current),
            previous_total=len(parts.previous),
            discarded=len(parts.discarded),
        )

    def top_summary(
        self,
        events: Iterable[ActivityEvent],
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
        label_map: Optional[Mapping[str, str]] = None,
    ) -> TopSummary:
        """
        Compact top types and top actors of the current window.

        Type labels are the title-cased token ("Lead Score Updated") unless a
        label_map is given.
        """
        limit = limit or self.settings.mini_limit
        label_map = {} if label_map is None else label_map
        parts = self.partition(events, now)
        types = [
            AggregatedCount(key=format_type_label(c.key, label_map), count=c.count)
            for c in rank_counts(count_by_type(parts.current), limit)
        ]
        actors = rank_counts(count_by_actor(parts.current), limit)
        return TopSummary(types=types, actors=actors)
