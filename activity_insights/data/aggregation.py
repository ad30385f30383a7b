"""
Count aggregation over an event bucket.

Produces plain dict counts keyed by event type, actor label, or type
category. Dicts keep first-occurrence insertion order, which the ranking step
uses as its tie-break, so fixtures stay reproducible.
"""

from typing import Dict, Iterable, List

from activity_insights.data.schema import SYSTEM_ACTOR, ActivityEvent, AggregatedCount


def actor_label(event: ActivityEvent) -> str:
    """
    Display label for the actor of an event.

    Returns:
        "System" for system-generated events, otherwise "User #<id>"
    """
    if event.is_system:
        return SYSTEM_ACTOR
    return f"User #{event.actor_user_id}"


def type_category(event_type: str) -> str:
    """
    Category of an event type: the prefix before the first underscore.

    Example:
        "lead_score_updated" -> "lead", "workspace_created" -> "workspace"
    """
    return event_type.split("_", 1)[0] if event_type else "other"


def count_by_type(events: Iterable[ActivityEvent]) -> Dict[str, int]:
    """
    Count events per type.

    Args:
        events: Event bucket

    Returns:
        Dict mapping type -> count, in order of first occurrence
    """
    counts: Dict[str, int] = {}
    for event in events:
        counts[event.type] = counts.get(event.type, 0) + 1
    return counts


def count_by_actor(events: Iterable[ActivityEvent]) -> Dict[str, int]:
    """
    Count events per actor label ("System" or "User #<id>").

    Args:
        events: Event bucket

    Returns:
        Dict mapping actor label -> count, in order of first occurrence
    """
    counts: Dict[str, int] = {}
    for event in events:
        label = actor_label(event)
        counts[label] = counts.get(label, 0) + 1
    return counts


def count_by_category(events: Iterable[ActivityEvent]) -> Dict[str, int]:
    """
    Count events per type category (lead, email, campaign, job, ...).

    Args:
        events: Event bucket

    Returns:
        Dict mapping category -> count, in order of first occurrence
    """
    counts: Dict[str, int] = {}
    for event in events:
        category = type_category(event.type)
        counts[category] = counts.get(category, 0) + 1
    return counts


def to_counts(counts: Dict[str, int]) -> List[AggregatedCount]:
    """Convert a count dict into AggregatedCount objects, preserving order."""
    return [AggregatedCount(key=key, count=count) for key, count in counts.items()]
