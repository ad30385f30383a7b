"""
Canonical activity event schema for the insight pipeline.

This module defines the standardized representation of a single activity
event as read from the activity listing API, plus the small value types the
rest of the pipeline passes around (filters, windows, counts).

Design rationale:
- Events are frozen: the engine reads a snapshot and never mutates it
- All timestamps in UTC for consistency
- Event types are an open set; unknown tags are carried through untouched
- Unknown payload fields are kept so raw exports round-trip losslessly
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

SYSTEM_ACTOR = "System"

# Extra field holding a created_at value that could not be parsed, verbatim
RAW_CREATED_AT_FIELD = "raw_created_at"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ActivityEvent(BaseModel):
    """
    Canonical representation of a single activity event.

    Attributes:
        id: Unique identifier (integer or string)
        type: Event type tag, e.g. "job_completed" (open-ended set)
        actor_user_id: User who triggered the event; None for system events
        workspace_id: Owning workspace, only present in cross-workspace mode
        created_at: UTC timestamp used for windowing; None when the source
            record had a missing or unparseable timestamp
        meta: Arbitrary scalar details, used only for display snippets

    Notes:
        - Instances are immutable once read
        - Events with created_at=None are excluded from windowing
        - Extra fields from the source are preserved for raw export
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: Union[int, str] = Field(
        ...,
        description="Unique event identifier"
    )

    type: str = Field(
        ...,
        description="Event type tag (snake_case)"
    )

    actor_user_id: Optional[int] = Field(
        default=None,
        description="Acting user; None means system-generated"
    )

    workspace_id: Optional[int] = Field(
        default=None,
        description="Workspace the event belongs to (admin mode only)"
    )

    created_at: Optional[datetime] = Field(
        default=None,
        description="UTC creation timestamp"
    )

    meta: Dict[str, Any] = Field(
        default_factory=dict,
        description="Display-only details"
    )

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @property
    def is_system(self) -> bool:
        """True when no user is attributed to the event."""
        # 0 is not a valid user id; the listing API uses it interchangeably with null
        return not self.actor_user_id


class ActivityFilter(BaseModel):
    """
    Filter accepted by the event source and stored in presets.

    Attributes:
        type: Restrict to one event type ("all" is accepted and means no filter)
        actor_user_id: Restrict to one acting user
        workspace_id: Restrict to one workspace (admin mode)
        since: Inclusive lower bound on created_at
        until: Exclusive upper bound on created_at
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None
    actor_user_id: Optional[int] = None
    workspace_id: Optional[int] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None

    @field_validator("type", mode="before")
    @classmethod
    def _blank_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() in {"", "all"}:
            return None
        return value

    @field_validator("actor_user_id", "workspace_id", mode="before")
    @classmethod
    def _blank_id(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("since", "until", mode="before")
    @classmethod
    def _parse_bound(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            # Accepts date-only values from date pickers as well as full ISO 8601
            return datetime.fromisoformat(value)
        return value

    @field_validator("since", "until")
    @classmethod
    def _bound_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def to_query_params(self) -> Dict[str, str]:
        """
        Render the set fields as query-string parameters.

        Returns:
            Ordered dict of stringified values; unset fields are omitted
        """
        params: Dict[str, str] = {}
        if self.type is not None:
            params["type"] = self.type
        if self.actor_user_id is not None:
            params["actor_user_id"] = str(self.actor_user_id)
        if self.workspace_id is not None:
            params["workspace_id"] = str(self.workspace_id)
        if self.since is not None:
            params["since"] = self.since.isoformat()
        if self.until is not None:
            params["until"] = self.until.isoformat()
        return params

    def matches(self, event: ActivityEvent) -> bool:
        """Check whether an event satisfies every set field of this filter."""
        if self.type is not None and event.type != self.type:
            return False
        if self.actor_user_id is not None and event.actor_user_id != self.actor_user_id:
            return False
        if self.workspace_id is not None and event.workspace_id != self.workspace_id:
            return False
        if self.since is not None or self.until is not None:
            if event.created_at is None:
                return False
            if self.since is not None and event.created_at < self.since:
                return False
            if self.until is not None and event.created_at >= self.until:
                return False
        return True


class Window(BaseModel):
    """
    Half-open time interval (start, end] used to bucket events.

    The end is inclusive so that an event exactly on the boundary between two
    adjacent windows belongs to the earlier one.
    """

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="Exclusive UTC start")
    end: datetime = Field(..., description="Inclusive UTC end")

    def contains(self, ts: Optional[datetime]) -> bool:
        if ts is None:
            return False
        return self.start < ts <= self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class AggregatedCount(BaseModel):
    """A single (label, count) pair produced by the aggregator."""

    key: str
    count: int = Field(..., ge=0)


class EventPage(BaseModel):
    """
    One page of events returned by the event source.

    Attributes:
        items: Events on this page, newest first
        total: Total matching events on the server (may exceed len(items))
    """

    items: List[ActivityEvent] = Field(default_factory=list)
    total: int = Field(0, ge=0)


class FilterPreset(BaseModel):
    """Named, reusable snapshot of filter parameters."""

    name: str = Field(..., min_length=1, max_length=128)
    filters: ActivityFilter = Field(default_factory=ActivityFilter)
