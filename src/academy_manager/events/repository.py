from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EventStatus, EventType
from .model import AttendanceDeclaration, Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def get_current(self, event_id: str) -> Optional[Event]:
        """Read the event straight from the store, skipping any cached copy."""

        raise NotImplementedError

    def create(self, event: Event) -> str:
        """Insert an event; the store generates the id, which is returned."""

        raise NotImplementedError

    def update(self, event: Event) -> bool:
        """Overwrite the editable fields. Declarations are left untouched."""

        raise NotImplementedError

    def delete(self, event_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Event]:
        """All events, newest start date first."""

        raise NotImplementedError

    def list_by_team(self, team_id: str) -> Sequence[Event]:
        raise NotImplementedError

    def list_by_type(self, event_type: EventType) -> Sequence[Event]:
        raise NotImplementedError

    def list_by_date_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        """Events starting in ``[start, end]``, oldest first."""

        raise NotImplementedError

    def list_upcoming(self, now: datetime, limit: Optional[int] = None) -> Sequence[Event]:
        """Non-cancelled events starting at or after ``now``, oldest first.

        ``limit=None`` returns all of them.
        """

        raise NotImplementedError

    def list_open(self) -> Sequence[Event]:
        """Events that are not in a terminal status (sweep candidates)."""

        raise NotImplementedError

    def update_status(self, event_id: str, status: EventStatus, updated_at: datetime) -> bool:
        raise NotImplementedError

    def set_participants(self, event_id: str, participant_ids: Sequence[str], updated_at: datetime) -> bool:
        raise NotImplementedError

    def set_declaration(
        self,
        event_id: str,
        player_id: str,
        declaration: AttendanceDeclaration,
        *,
        only_if_status: Optional[EventStatus] = None,
    ) -> bool:
        """Write exactly one player's declaration, leaving the others as they are.

        The event's updatedAt becomes the declaration timestamp. With
        ``only_if_status`` the write happens only while the stored event has
        that status; False otherwise.
        """

        raise NotImplementedError

    def remove_declaration(self, event_id: str, player_id: str, updated_at: datetime) -> bool:
        """Drop one player's declaration; False when there was none."""

        raise NotImplementedError
