"""
Event sources: where activity snapshots come from.

The insight engine never fetches on its own; callers obtain one bounded page
of events from a source and hand it over. Sources:

- HttpEventSource: the paginated activity listing API (workspace or admin)
- StaticEventSource: an in-memory snapshot with the same filter semantics
- load_events_file: JSON array / NDJSON exports read from disk

Any failure to read a source surfaces as SourceFetchError. Sources do not
retry beyond the bounded connection retries of the HTTP transport.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import httpx

from activity_insights.core.config import config
from activity_insights.core.exceptions import SourceFetchError
from activity_insights.data.normalizers import normalize_events
from activity_insights.data.schema import ActivityEvent, ActivityFilter, EventPage

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class BaseEventSource(ABC):
    """
    Abstract base class for event sources.

    fetch() returns events matching a filter, newest first, bounded to a
    page size.
    """

    @abstractmethod
    def fetch(
        self,
        filters: Optional[ActivityFilter] = None,
        page: int = 1,
        page_size: int = 200,
    ) -> EventPage:
        """
        Fetch one page of events.

        Args:
            filters: Optional filter (type, actor, workspace, time range)
            page: 1-based page number
            page_size: Maximum number of events to return

        Returns:
            EventPage with items and the server-side total

        Raises:
            SourceFetchError: If the source cannot be read
        """
        pass


class HttpEventSource(BaseEventSource):
    """
    Reads events from the activity listing API.

    Example:
        with HttpEventSource.for_admin() as source:
            page = source.fetch(ActivityFilter(workspace_id=7), page_size=200)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        path: Optional[str] = None,
        token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the HTTP source.

        Args:
            base_url: API root (default from config)
            path: Listing endpoint path (default: workspace activity)
            token: Bearer token (default from config)
            timeout_seconds: Per-request timeout, so a fetch never hangs
            max_retries: Connection retries on the transport
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        settings = config.source
        self.path = path or settings.workspace_path
        retries = settings.max_retries if max_retries is None else max_retries
        token = token if token is not None else settings.token

        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=base_url or settings.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds or settings.timeout_seconds),
            transport=transport or httpx.HTTPTransport(retries=retries),
        )

    @classmethod
    def for_workspace(cls, **kwargs: Any) -> "HttpEventSource":
        """Source scoped to the caller's workspace."""
        kwargs.setdefault("path", config.source.workspace_path)
        return cls(**kwargs)

    @classmethod
    def for_admin(cls, **kwargs: Any) -> "HttpEventSource":
        """Cross-workspace source; accepts workspace_id in filters."""
        kwargs.setdefault("path", config.source.admin_path)
        return cls(**kwargs)

    def fetch(
        self,
        filters: Optional[ActivityFilter] = None,
        page: int = 1,
        page_size: int = 200,
    ) -> EventPage:
        params: Dict[str, Union[str, int]] = {"page": page, "page_size": page_size}
        if filters is not None:
            params.update(filters.to_query_params())

        try:
            response = self._client.get(self.path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error("Activity fetch from %s failed: %s", self.path, e)
            raise SourceFetchError(f"Failed to fetch activity: {e}") from e
        except ValueError as e:
            logger.error("Activity response from %s is not JSON: %s", self.path, e)
            raise SourceFetchError(f"Invalid activity response: {e}") from e

        return _page_from_payload(payload)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpEventSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _page_from_payload(payload: Any) -> EventPage:
    if isinstance(payload, list):
        raw_items, total = payload, None
    elif isinstance(payload, dict) and isinstance(payload.get("items"), list):
        raw_items, total = payload["items"], payload.get("total")
    else:
        raise SourceFetchError("Activity response must be a list or an object with 'items'")

    events, _ = normalize_events(raw_items)
    if not isinstance(total, int) or total < len(events):
        total = len(events)
    return EventPage(items=events, total=total)


class StaticEventSource(BaseEventSource):
    """
    In-memory event source over a fixed snapshot.

    Applies the same filter semantics as the listing API: since is
    inclusive, until is exclusive, results are newest first.
    """

    def __init__(self, events: Iterable[ActivityEvent]):
        self._events = sorted(
            events, key=lambda e: e.created_at or _OLDEST, reverse=True
        )

    def fetch(
        self,
        filters: Optional[ActivityFilter] = None,
        page: int = 1,
        page_size: int = 200,
    ) -> EventPage:
        if page < 1 or page_size < 1:
            raise SourceFetchError(f"Invalid page request: page={page} page_size={page_size}")

        matching = [e for e in self._events if filters is None or filters.matches(e)]
        start = (page - 1) * page_size
        return EventPage(items=matching[start:start + page_size], total=len(matching))


def load_events_file(filepath: Union[str, Path]) -> List[ActivityEvent]:
    """
    Load events from a JSON export.

    Supports:
    - JSON array of events (the raw JSON export format)
    - An API response object with an "items" array
    - NDJSON (one event object per line)

    Args:
        filepath: Path to the export file

    Returns:
        Normalized events; unusable records are skipped with a warning

    Raises:
        SourceFetchError: If the file cannot be read or is not valid JSON
    """
    filepath = Path(filepath)
    try:
        content = filepath.read_text(encoding="utf-8").lstrip("\ufeff").strip()
    except OSError as e:
        raise SourceFetchError(f"Cannot read activity file {filepath}: {e}") from e

    if not content:
        return []

    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        payload = None

    if isinstance(payload, list) or (isinstance(payload, dict) and "items" in payload):
        return _page_from_payload(payload).items

    # Fall back to NDJSON (one object per line)
    raws: List[Dict[str, Any]] = []
    for line_num, line in enumerate(content.split("\n"), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            raws.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise SourceFetchError(f"Invalid JSON at {filepath}:{line_num}: {e}") from e

    events, _ = normalize_events(raws)
    return events
