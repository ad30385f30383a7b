"""
Event normalization: turn raw activity records into ActivityEvent objects.

Raw records come from the activity listing API or from exported JSON files,
so timestamps and ids may arrive as strings, numbers, or datetimes.

Design:
- Timestamp normalization to UTC datetime
- A bad timestamp marks the event as unwindowable instead of failing it
- Records that cannot be identified at all are skipped and counted
- One bad record never fails the batch
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from activity_insights.data.schema import RAW_CREATED_AT_FIELD, ActivityEvent

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "unknown"

# Epoch values above this are treated as milliseconds (year 3000 in seconds)
_EPOCH_MILLIS_CUTOFF = 32503680000


class NormalizationError(Exception):
    """Raised when an activity record cannot be normalized."""
    pass


def normalize_timestamp(value: Any) -> datetime:
    """
    Normalize a timestamp value to a UTC datetime.

    Supports:
    - datetime objects (naive values are assumed UTC)
    - ISO 8601: 2025-02-07T10:30:45Z, 2025-02-07T10:30:45.123+02:00
    - Date-time: 2025-02-07 10:30:45
    - Epoch seconds: 1707315045
    - Epoch millis: 1707315045000

    Args:
        value: Timestamp value

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        NormalizationError: If the value is empty or not recognized
    """
    if value is None or value == "":
        raise NormalizationError("Empty timestamp")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise NormalizationError(f"Unrecognized timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        dt = _from_epoch(float(value))
    else:
        text = str(value).strip()
        try:
            dt = _from_epoch(float(text))
        except ValueError:
            try:
                dt = datetime.fromisoformat(text)
            except ValueError as e:
                raise NormalizationError(f"Unrecognized timestamp: {text[:64]!r}") from e

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _from_epoch(seconds_or_millis: float) -> datetime:
    try:
        if seconds_or_millis < _EPOCH_MILLIS_CUTOFF:
            return datetime.fromtimestamp(seconds_or_millis, tz=timezone.utc)
        return datetime.fromtimestamp(seconds_or_millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise NormalizationError(f"Epoch timestamp out of range: {seconds_or_millis}") from e


def normalize_event(raw: Dict[str, Any]) -> ActivityEvent:
    """
    Build an ActivityEvent from a raw record.

    Args:
        raw: Record as returned by the activity API

    Returns:
        ActivityEvent; created_at is None when the timestamp was missing or
        unparseable, and an unparseable value is kept in raw_created_at

    Raises:
        NormalizationError: If the record has no id or its fields cannot be
            coerced
    """
    if not isinstance(raw, dict):
        raise NormalizationError(f"Expected a mapping, got {type(raw).__name__}")

    if raw.get("id") in (None, ""):
        raise NormalizationError("Activity record has no id")

    data = dict(raw)
    data["created_at"] = _safe_timestamp(raw)
    if data["created_at"] is None and raw.get("created_at") is not None:
        data[RAW_CREATED_AT_FIELD] = raw["created_at"]

    event_type = data.get("type")
    if not isinstance(event_type, str) or not event_type.strip():
        data["type"] = UNKNOWN_TYPE

    meta = data.get("meta")
    if meta is None:
        data["meta"] = {}
    elif not isinstance(meta, dict):
        data["meta"] = {"value": meta}

    try:
        return ActivityEvent.model_validate(data)
    except ValidationError as e:
        raise NormalizationError(f"Invalid activity record {raw.get('id')!r}: {e}") from e


def _safe_timestamp(raw: Dict[str, Any]) -> Optional[datetime]:
    try:
        return normalize_timestamp(raw.get("created_at"))
    except NormalizationError as e:
        logger.warning(
            "Activity %r has no usable created_at (%s); excluded from windowing",
            raw.get("id"),
            e,
        )
        return None


def normalize_events(raws: Iterable[Dict[str, Any]]) -> Tuple[List[ActivityEvent], int]:
    """
    Normalize a batch of raw records.

    Args:
        raws: Raw activity records

    Returns:
        Tuple of (events, skipped_count)
    """
    events: List[ActivityEvent] = []
    skipped = 0

    for raw in raws:
        try:
            events.append(normalize_event(raw))
        except NormalizationError as e:
            logger.warning("Skipping activity record: %s", e)
            skipped += 1

    if skipped:
        logger.info("Normalized %d activity records, skipped %d", len(events), skipped)

    return events, skipped
