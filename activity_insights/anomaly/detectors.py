"""
Spike rule for period-over-period comparison.

A fixed, explainable heuristic:
- No previous activity: spike when the current count reaches a minimum volume
- Otherwise: spike when both the ratio and the absolute increase clear their
  thresholds (both inclusive)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from activity_insights.core.config import SpikeThresholds

from .schema import AnomalyEntry


@dataclass(frozen=True)
class SpikeRule:
    """
    Spike classifier with the production defaults (5, 1.6, 3).
    """

    zero_baseline_min: int = 5
    min_ratio: float = 1.6
    min_delta: int = 3

    @classmethod
    def from_thresholds(cls, thresholds: SpikeThresholds) -> "SpikeRule":
        return cls(
            zero_baseline_min=thresholds.zero_baseline_min,
            min_ratio=thresholds.min_ratio,
            min_delta=thresholds.min_delta,
        )

    @staticmethod
    def ratio(current: int, previous: int) -> Optional[float]:
        if previous <= 0:
            return None
        return current / previous

    def is_spike(self, current: int, previous: int) -> bool:
        if previous == 0:
            return current >= self.zero_baseline_min
        ratio = self.ratio(current, previous)
        delta = current - previous
        return ratio is not None and ratio >= self.min_ratio and delta >= self.min_delta

    def compare(self, event_type: str, current: int, previous: int) -> AnomalyEntry:
        return AnomalyEntry(
            type=event_type,
            current_count=current,
            previous_count=previous,
            delta=current - previous,
            ratio=self.ratio(current, previous),
            is_spike=self.is_spike(current, previous),
        )
