"""
Window partitioning for activity events.

Splits a flat event snapshot into two adjacent, equally sized windows ending
at a reference instant:

    previous = (now - 2*size, now - size]
    current  = (now - size,   now]

Both windows are half-open at the start, so there are no gaps or overlaps: an
event at exactly now - size belongs to previous, an event at now to current. Events outside both windows, and events
without a usable timestamp, are discarded from the computation.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from activity_insights.core.exceptions import ConfigurationError
from activity_insights.data.schema import ActivityEvent, Window

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = timedelta(hours=24)


@dataclass(frozen=True)
class WindowPartition:
    """
    Result of partitioning a snapshot.

    Attributes:
        current_window: Most recent window
        previous_window: Window immediately before it
        current: Events in current_window, in input order
        previous: Events in previous_window, in input order
        discarded: Events outside both windows or without created_at
    """

    current_window: Window
    previous_window: Window
    current: List[ActivityEvent] = field(default_factory=list)
    previous: List[ActivityEvent] = field(default_factory=list)
    discarded: List[ActivityEvent] = field(default_factory=list)

    @property
    def in_window_count(self) -> int:
        return len(self.current) + len(self.previous)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Return now as an aware UTC datetime, defaulting to the wall clock."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def build_windows(
    now: datetime,
    window_size: timedelta = DEFAULT_WINDOW_SIZE
) -> Tuple[Window, Window]:
    """
    Build the current and previous windows ending at now.

    Args:
        now: Reference instant (inclusive end of the current window)
        window_size: Length of each window

    Returns:
        Tuple of (current_window, previous_window)

    Raises:
        ConfigurationError: If window_size is not positive
    """
    if window_size <= timedelta(0):
        raise ConfigurationError(f"Window size must be positive, got {window_size}")

    now = resolve_now(now)
    boundary = now - window_size
    current = Window(start=boundary, end=now)
    previous = Window(start=boundary - window_size, end=boundary)
    return current, previous


def partition_events(
    events: Iterable[ActivityEvent],
    window_size: timedelta = DEFAULT_WINDOW_SIZE,
    now: Optional[datetime] = None,
) -> WindowPartition:
    """
    Partition events into current and previous windows.

    Args:
        events: Event snapshot (any order)
        window_size: Length of each window (default 24h)
        now: Reference instant; defaults to the current UTC time

    Returns:
        WindowPartition with both buckets and the discarded remainder
    """
    current_window, previous_window = build_windows(resolve_now(now), window_size)

    current: List[ActivityEvent] = []
    previous: List[ActivityEvent] = []
    discarded: List[ActivityEvent] = []

    for event in events:
        if current_window.contains(event.created_at):
            current.append(event)
        elif previous_window.contains(event.created_at):
            previous.append(event)
        else:
            discarded.append(event)

    logger.debug(
        "Partitioned snapshot: current=%d previous=%d discarded=%d",
        len(current),
        len(previous),
        len(discarded),
    )

    return WindowPartition(
        current_window=current_window,
        previous_window=previous_window,
        current=current,
        previous=previous,
        discarded=discarded,
    )
