from __future__ import annotations

import threading
import time
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple

from ..core.constants import EVENT_CACHE_MAX_ENTRIES, EVENT_CACHE_TTL_SECONDS
from ..core.enums import EventStatus, EventType
from .model import AttendanceDeclaration, Event
from .repository import EventRepository


class CachedEventRepository(EventRepository):
    """Write-through cache of events by id in front of another repository.

    Every write goes to the backing store first and the cached copy is then
    re-read, so a successful write is always visible to the next read. List
    queries always hit the store and refresh the entries they return.

    The cache is local to one process. Entries expire after ``ttl_seconds``
    and at most ``max_entries`` are kept (least recently used go first);
    ``get_current`` always reads the store and is what state checks use.
    """

    def __init__(
        self,
        backend: EventRepository,
        *,
        ttl_seconds: float = EVENT_CACHE_TTL_SECONDS,
        max_entries: int = EVENT_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._backend = backend
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._cache: "OrderedDict[str, Tuple[float, Event]]" = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _cache_get(self, event_id: str) -> Optional[Event]:
        with self._lock:
            entry = self._cache.get(event_id)
            if entry is None:
                return None
            stored_at, event = entry
            if self._clock() - stored_at > self._ttl:
                del self._cache[event_id]
                return None
            self._cache.move_to_end(event_id)
            return event

    def _cache_set(self, event: Event) -> Event:
        with self._lock:
            self._cache[event.event_id] = (self._clock(), event)
            self._cache.move_to_end(event.event_id)
            while len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)
        return event

    def _refresh(self, event_id: str) -> Optional[Event]:
        event = self._backend.get_current(event_id)
        if event is None:
            self.invalidate(event_id)
            return None
        return self._cache_set(event)

    def _remember(self, events: Sequence[Event]) -> Sequence[Event]:
        for e in events:
            self._cache_set(e)
        return events

    def invalidate(self, event_id: Optional[str] = None) -> None:
        with self._lock:
            if event_id is None:
                self._cache.clear()
            else:
                self._cache.pop(event_id, None)

    def get_by_id(self, event_id: str) -> Optional[Event]:
        cached = self._cache_get(event_id)
        if cached is not None:
            return cached
        return self._refresh(event_id)

    def get_current(self, event_id: str) -> Optional[Event]:
        return self._refresh(event_id)

    def create(self, event: Event) -> str:
        event_id = self._backend.create(event)
        self._refresh(event_id)
        return event_id

    def update(self, event: Event) -> bool:
        ok = self._backend.update(event)
        self._refresh(event.event_id)
        return ok

    def delete(self, event_id: str) -> bool:
        ok = self._backend.delete(event_id)
        self.invalidate(event_id)
        return ok

    def list_all(self) -> Sequence[Event]:
        return self._remember(self._backend.list_all())

    def list_by_team(self, team_id: str) -> Sequence[Event]:
        return self._remember(self._backend.list_by_team(team_id))

    def list_by_type(self, event_type: EventType) -> Sequence[Event]:
        return self._remember(self._backend.list_by_type(event_type))

    def list_by_date_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        return self._remember(self._backend.list_by_date_range(start, end))

    def list_upcoming(self, now: datetime, limit: Optional[int] = None) -> Sequence[Event]:
        return self._remember(self._backend.list_upcoming(now, limit))

    def list_open(self) -> Sequence[Event]:
        return self._remember(self._backend.list_open())

    def update_status(self, event_id: str, status: EventStatus, updated_at: datetime) -> bool:
        ok = self._backend.update_status(event_id, status, updated_at)
        self._refresh(event_id)
        return ok

    def set_participants(self, event_id: str, participant_ids: Sequence[str], updated_at: datetime) -> bool:
        ok = self._backend.set_participants(event_id, participant_ids, updated_at)
        self._refresh(event_id)
        return ok

    def set_declaration(
        self,
        event_id: str,
        player_id: str,
        declaration: AttendanceDeclaration,
        *,
        only_if_status: Optional[EventStatus] = None,
    ) -> bool:
        ok = self._backend.set_declaration(event_id, player_id, declaration, only_if_status=only_if_status)
        self._refresh(event_id)
        return ok

    def remove_declaration(self, event_id: str, player_id: str, updated_at: datetime) -> bool:
        ok = self._backend.remove_declaration(event_id, player_id, updated_at)
        self._refresh(event_id)
        return ok
