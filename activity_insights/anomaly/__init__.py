"""
Anomaly module: period-over-period spike detection and rankings.

Implements the fixed-threshold spike rule, stable rankings, and the engine
that runs the whole pipeline over one event snapshot.
"""

from .detectors import SpikeRule
from .engine import InsightEngine, compare_buckets
from .ranking import rank_by_volume, rank_counts, rank_spikes
from .schema import AnomalyEntry, InsightSummary, TopSummary

__all__ = [
	"InsightEngine",
	"InsightSummary",
	"TopSummary",
	"AnomalyEntry",
	"SpikeRule",
	"compare_buckets",
	"rank_counts",
	"rank_by_volume",
	"rank_spikes",
]
