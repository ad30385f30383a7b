"""
Data module: Activity events, normalization, windowing, aggregation, and sources.

Responsible for turning a fetched activity snapshot into counted buckets.
Pipeline:

    Event source (activity API / JSON export)
        ↓
    Normalization (normalizers.py) → ActivityEvent
        ↓
    Window partitioning (windowing.py) → current / previous buckets
        ↓
    Aggregation (aggregation.py) → counts by type / actor / category
        ↓
    Ready for spike detection (anomaly module)
"""

from activity_insights.data.aggregation import (
    actor_label,
    count_by_actor,
    count_by_category,
    count_by_type,
    to_counts,
    type_category,
)
from activity_insights.data.normalizers import (
    NormalizationError,
    normalize_event,
    normalize_events,
    normalize_timestamp,
)
from activity_insights.data.presets import (
    InMemoryPresetStore,
    JsonFilePresetStore,
    PresetStore,
)
from activity_insights.data.schema import (
    SYSTEM_ACTOR,
    ActivityEvent,
    ActivityFilter,
    AggregatedCount,
    EventPage,
    FilterPreset,
    Window,
)
from activity_insights.data.source import (
    BaseEventSource,
    HttpEventSource,
    StaticEventSource,
    load_events_file,
)
from activity_insights.data.windowing import (
    DEFAULT_WINDOW_SIZE,
    WindowPartition,
    build_windows,
    partition_events,
)

__all__ = [
    # Schema
    "ActivityEvent",
    "ActivityFilter",
    "AggregatedCount",
    "EventPage",
    "FilterPreset",
    "Window",
    "SYSTEM_ACTOR",

    # Normalization
    "normalize_event",
    "normalize_events",
    "normalize_timestamp",
    "NormalizationError",

    # Windowing
    "build_windows",
    "partition_events",
    "WindowPartition",
    "DEFAULT_WINDOW_SIZE",

    # Aggregation
    "actor_label",
    "type_category",
    "count_by_type",
    "count_by_actor",
    "count_by_category",
    "to_counts",

    # Sources
    "BaseEventSource",
    "HttpEventSource",
    "StaticEventSource",
    "load_events_file",

    # Presets
    "PresetStore",
    "InMemoryPresetStore",
    "JsonFilePresetStore",
]
