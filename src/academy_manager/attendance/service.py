from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import clean_text, parse_choice
from ..core.enums import ATTENDANCE_STATUS_LABELS, Action, AttendanceStatus, EventStatus, Resource, Role
from ..core.exceptions import AuthorizationError, NotFoundError, PreconditionError
from ..core.permissions import require
from ..events.model import AttendanceDeclaration, AttendanceSummary, Event
from ..events.repository import EventRepository
from ..events.service import EventService
from ..players.model import Player
from ..players.repository import PlayerRepository
from ..users.model import SessionUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantAttendance:
    """One participant of an event joined with their declaration (if any)."""

    player: Player
    declaration: Optional[AttendanceDeclaration]

    def to_dict(self) -> dict:
        data = self.player.to_dict()
        data["attendanceStatus"] = None
        if self.declaration:
            data["attendanceStatus"] = self.declaration.to_dict()
            data["attendanceStatus"]["label"] = ATTENDANCE_STATUS_LABELS[self.declaration.status]
        return data


def _attendance_closed() -> PreconditionError:
    return PreconditionError(
        "Οι δηλώσεις παρουσίας κλείνουν όταν ξεκινήσει η εκδήλωση",
        code="attendance_closed",
    )


def summarize(event: Event) -> AttendanceSummary:
    """Counts per status; only declarations of current participants count."""
    counts = {s: 0 for s in AttendanceStatus}
    for player_id in event.participant_ids:
        declaration = event.attendance_declarations.get(player_id)
        if declaration is not None:
            counts[declaration.status] += 1

    total = len(event.participant_ids)
    declared = sum(counts.values())
    return AttendanceSummary(
        present=counts[AttendanceStatus.PRESENT],
        absent=counts[AttendanceStatus.ABSENT],
        maybe=counts[AttendanceStatus.MAYBE],
        undeclared=total - declared,
        total=total,
    )


class AttendanceService:
    def __init__(self, events: EventRepository, players: PlayerRepository, event_service: EventService):
        self._events = events
        self._players = players
        self._event_service = event_service

    def _get_event(self, event_id: str) -> Event:
        # Commands check state against the store, never a cached copy.
        event = self._events.get_current(event_id)
        if not event:
            raise NotFoundError("Η εκδήλωση δεν βρέθηκε")
        return event

    def _get_player(self, player_id: str) -> Player:
        player = self._players.get_by_id(player_id)
        if not player:
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        return player

    def _ensure_guardian(self, actor: SessionUser, player: Player) -> None:
        # Superadmin may act for anyone; parents only for their own children.
        if actor.role == Role.PARENT and player.user_id != actor.user_id:
            raise AuthorizationError("Μπορείτε να δηλώσετε παρουσία μόνο για τα παιδιά σας")

    # --- commands ----------------------------------------------------------

    def submit(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        player_id: str,
        status: AttendanceStatus | str,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceDeclaration:
        """Declare attendance for one player, replacing any earlier answer."""
        require(actor.role, Action.SUBMIT_ATTENDANCE, Resource.ATTENDANCE)
        answer = parse_choice(AttendanceStatus, status, "status")
        event = self._get_event(event_id)
        if event.status != EventStatus.SCHEDULED:
            raise _attendance_closed()

        player = self._get_player(player_id)
        self._ensure_guardian(actor, player)
        if not event.has_participant(player_id):
            raise PreconditionError("Ο παίκτης δεν συμμετέχει στην εκδήλωση", code="not_participant")

        declaration = AttendanceDeclaration(
            parent_id=actor.user_id,
            status=answer,
            timestamp=now or now_utc(),
            notes=clean_text(notes, "Σημειώσεις"),
        )
        if not self._events.set_declaration(
            event_id, player_id, declaration, only_if_status=EventStatus.SCHEDULED
        ):
            # Deleted, or moved past scheduled since it was read.
            self._get_event(event_id)
            raise _attendance_closed()
        logger.info("Attendance %s for player %s on event %s", answer.value, player_id, event_id)
        return declaration

    def update(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        player_id: str,
        status: AttendanceStatus | str,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceDeclaration:
        """Change an existing declaration.

        Any parent linked to the player may update it; ``notes=None`` keeps
        the previous notes.
        """
        require(actor.role, Action.SUBMIT_ATTENDANCE, Resource.ATTENDANCE)
        answer = parse_choice(AttendanceStatus, status, "status")
        event = self._get_event(event_id)
        player = self._get_player(player_id)
        self._ensure_guardian(actor, player)

        existing = event.attendance_declarations.get(player_id)
        if existing is None:
            raise PreconditionError("Δεν υπάρχει δήλωση παρουσίας για αυτόν τον παίκτη", code="no_declaration")

        declaration = AttendanceDeclaration(
            parent_id=existing.parent_id,
            status=answer,
            timestamp=now or now_utc(),
            notes=existing.notes if notes is None else clean_text(notes, "Σημειώσεις"),
        )
        if not self._events.set_declaration(event_id, player_id, declaration):
            raise NotFoundError("Η εκδήλωση δεν βρέθηκε")
        return declaration

    def delete(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        player_id: str,
        now: Optional[datetime] = None,
    ) -> None:
        require(actor.role, Action.DELETE, Resource.ATTENDANCE)
        event = self._get_event(event_id)
        player = self._get_player(player_id)
        self._ensure_guardian(actor, player)
        if player_id not in event.attendance_declarations:
            raise NotFoundError("Δεν υπάρχει δήλωση παρουσίας για αυτόν τον παίκτη")
        if not self._events.remove_declaration(event_id, player_id, now or now_utc()):
            raise NotFoundError("Δεν υπάρχει δήλωση παρουσίας για αυτόν τον παίκτη")

    # --- queries -----------------------------------------------------------

    def read(self, *, actor: SessionUser, event_id: str) -> Dict[str, AttendanceDeclaration]:
        require(actor.role, Action.VIEW_ATTENDANCE, Resource.ATTENDANCE)
        event = self._event_service.get_event(actor=actor, event_id=event_id)
        return dict(event.attendance_declarations)

    def read_hydrated(self, *, actor: SessionUser, event_id: str) -> List[ParticipantAttendance]:
        """Participants in event order, each with their declaration or None.

        Participants whose player record no longer exists are skipped.
        """
        require(actor.role, Action.VIEW_ATTENDANCE, Resource.ATTENDANCE)
        event = self._event_service.get_event(actor=actor, event_id=event_id)
        players = {p.player_id: p for p in self._players.list_by_ids(event.participant_ids)}

        rows: List[ParticipantAttendance] = []
        for player_id in event.participant_ids:
            player = players.get(player_id)
            if player is None:
                logger.warning("Event %s lists missing player %s", event_id, player_id)
                continue
            rows.append(ParticipantAttendance(player=player, declaration=event.attendance_declarations.get(player_id)))
        return rows

    def summary(self, *, actor: SessionUser, event_id: str) -> AttendanceSummary:
        require(actor.role, Action.VIEW_ATTENDANCE, Resource.ATTENDANCE)
        return summarize(self._event_service.get_event(actor=actor, event_id=event_id))
