"""
Ranking helpers.

Sorting is stable: entries with equal keys keep the order they were first
seen in, which for count dicts is first occurrence in the event list.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, TypeVar

from activity_insights.data.schema import AggregatedCount

from .schema import AnomalyEntry

T = TypeVar("T")


def _truncate(items: List[T], limit: Optional[int]) -> List[T]:
    if limit is None:
        return items
    return items[:max(limit, 0)]


def rank_counts(counts: Dict[str, int], limit: Optional[int] = None) -> List[AggregatedCount]:
    """Rank a count dict by count descending, capped at limit (None = no cap)."""
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return _truncate([AggregatedCount(key=k, count=c) for k, c in ordered], limit)


def rank_by_volume(entries: Sequence[AnomalyEntry], limit: Optional[int] = None) -> List[AnomalyEntry]:
    """Rank entries by current-window count descending."""
    return _truncate(sorted(entries, key=lambda e: -e.current_count), limit)


def rank_spikes(entries: Sequence[AnomalyEntry], limit: Optional[int] = None) -> List[AnomalyEntry]:
    """Keep spiking entries, largest delta first."""
    spikes = [e for e in entries if e.is_spike]
    return _truncate(sorted(spikes, key=lambda e: -e.delta), limit)
