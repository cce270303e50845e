from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..common.datetime_utils import now_utc
from ..common.validators import clean_text, optional_instant, parse_choice, require_instant, require_non_empty
from ..core.constants import DEFAULT_UPCOMING_LIMIT
from ..core.enums import Action, EventStatus, EventType, ParticipantMode, Resource, Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PartialBatchError,
    ValidationError,
)
from ..core.permissions import require
from ..players.repository import PlayerRepository
from ..teams.model import Team
from ..teams.repository import TeamRepository
from ..users.model import SessionUser
from .formatting import EventFormatter
from .model import Event, Score
from .participants import add_participant, remove_participant, resolve_participants
from .repository import EventRepository
from .status import ensure_manual_transition

logger = logging.getLogger(__name__)


def _parse_score(value: Any) -> Optional[Score]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError("Μη έγκυρο σκορ")
    try:
        home, away = int(value["home"]), int(value["away"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Το σκορ χρειάζεται ακέραιες τιμές home και away")
    if home < 0 or away < 0:
        raise ValidationError("Το σκορ δεν μπορεί να είναι αρνητικό")
    return Score(home=home, away=away)


def _ensure_order(start: datetime, end: Optional[datetime]) -> None:
    if end is not None and end <= start:
        raise ValidationError("Η λήξη πρέπει να είναι μετά την έναρξη")


class EventService:
    def __init__(
        self,
        events: EventRepository,
        teams: TeamRepository,
        players: PlayerRepository,
        formatter: Optional[EventFormatter] = None,
    ):
        self._events = events
        self._teams = teams
        self._players = players
        self._formatter = formatter or EventFormatter()

    # --- scope helpers -----------------------------------------------------

    def _coach_team_ids(self, actor: SessionUser) -> Set[str]:
        return {t.team_id for t in self._teams.list_by_coach(actor.user_id)}

    def _linked_player_ids(self, actor: SessionUser) -> Set[str]:
        return {p.player_id for p in self._players.list_by_user(actor.user_id)}

    def _scope(self, actor: SessionUser, events: Iterable[Event]) -> List[Event]:
        """Keep only the events the actor may see."""
        if actor.role == Role.SUPERADMIN:
            return list(events)
        if actor.role == Role.COACH:
            team_ids = self._coach_team_ids(actor)
            return [e for e in events if team_ids & set(e.team_ids) or e.created_by == actor.user_id]

        children = self._linked_player_ids(actor)
        return [e for e in events if children & set(e.participant_ids)]

    def _get_or_404(self, event_id: str, *, current: bool = False) -> Event:
        # Commands pass current=True so state checks see the store, not a cached copy.
        event = self._events.get_current(event_id) if current else self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Η εκδήλωση δεν βρέθηκε")
        return event

    def _ensure_can_manage(self, actor: SessionUser, event: Event) -> None:
        if actor.role != Role.COACH:
            return
        if not (self._coach_team_ids(actor) & set(event.team_ids)) and event.created_by != actor.user_id:
            raise AuthorizationError("Η εκδήλωση δεν ανήκει στις ομάδες σας")

    def _load_teams(self, actor: SessionUser, team_ids: Sequence[str]) -> List[Team]:
        if not team_ids:
            raise ValidationError("Επιλέξτε τουλάχιστον μία ομάδα")
        by_id = {t.team_id: t for t in self._teams.list_by_ids(team_ids)}
        missing = [t for t in team_ids if t not in by_id]
        if missing:
            raise NotFoundError(f"Άγνωστες ομάδες: {', '.join(missing)}")
        if actor.role == Role.COACH:
            outside = [t for t in team_ids if not by_id[t].has_coach(actor.user_id)]
            if outside:
                raise AuthorizationError("Μπορείτε να δημιουργήσετε εκδηλώσεις μόνο για τις ομάδες σας")
        return [by_id[t] for t in team_ids]

    # --- queries -----------------------------------------------------------

    def get_event(self, *, actor: SessionUser, event_id: str) -> Event:
        require(actor.role, Action.VIEW, Resource.EVENT)
        event = self._get_or_404(event_id)
        if not self._scope(actor, [event]):
            raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτή την εκδήλωση")
        return event

    def list_events(
        self,
        *,
        actor: SessionUser,
        team_id: Optional[str] = None,
        event_type: Optional[EventType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Event]:
        """Events visible to the actor, optionally filtered.

        One filter is pushed to the store; the rest are applied here.
        """
        require(actor.role, Action.VIEW, Resource.EVENT)

        if team_id is not None:
            events = self._events.list_by_team(team_id)
        elif start is not None and end is not None:
            events = self._events.list_by_date_range(start, end)
        elif event_type is not None:
            events = self._events.list_by_type(event_type)
        else:
            events = self._events.list_all()

        if event_type is not None:
            events = [e for e in events if e.type == event_type]
        if start is not None:
            events = [e for e in events if e.start_date >= start]
        if end is not None:
            events = [e for e in events if e.start_date <= end]
        return self._scope(actor, events)

    def upcoming(
        self,
        *,
        actor: SessionUser,
        now: Optional[datetime] = None,
        limit: int = DEFAULT_UPCOMING_LIMIT,
    ) -> List[Event]:
        require(actor.role, Action.VIEW, Resource.EVENT)
        now = now or now_utc()
        if actor.role == Role.SUPERADMIN:
            return list(self._events.list_upcoming(now, limit))
        return self._scope(actor, self._events.list_upcoming(now))[:limit]

    # --- commands ----------------------------------------------------------

    def create_events(
        self,
        *,
        actor: SessionUser,
        event_type: EventType | str,
        team_ids: Sequence[str],
        start_date: datetime | str,
        end_date: datetime | str | None = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        opponent: Optional[str] = None,
        notes: Optional[str] = None,
        participant_mode: ParticipantMode | str = ParticipantMode.ALL_ROSTER,
        participant_ids: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> List[Event]:
        """Create one independent event per team.

        With a single team any failure is raised as is. With several teams
        each event is written on its own; if some fail, the rest stay
        created and ``PartialBatchError`` lists both.
        """
        require(actor.role, Action.CREATE, Resource.EVENT)
        now = now or now_utc()

        kind = parse_choice(EventType, event_type, "type")
        mode = parse_choice(ParticipantMode, participant_mode, "participantMode")
        start = require_instant(start_date, "startDate")
        end = optional_instant(end_date, "endDate")
        _ensure_order(start, end)

        title = clean_text(title, "Τίτλος")
        description = clean_text(description, "Περιγραφή")
        location = clean_text(location, "Τοποθεσία")
        opponent = clean_text(opponent, "Αντίπαλος")
        notes = clean_text(notes, "Σημειώσεις")

        teams = self._load_teams(actor, list(dict.fromkeys(team_ids)))
        selected = list(dict.fromkeys(participant_ids or []))
        rosters = {t.team_id: self._players.list_by_team(t.team_id) for t in teams}

        if mode == ParticipantMode.EXPLICIT and len(teams) > 1:
            known = {p.player_id for roster in rosters.values() for p in roster}
            outside = [pid for pid in selected if pid not in known]
            if outside:
                raise ValidationError(f"Οι παίκτες δεν ανήκουν στις ομάδες: {', '.join(outside)}")

        def _build(team: Team) -> Event:
            roster = rosters[team.team_id]
            chosen = selected
            if mode == ParticipantMode.EXPLICIT and len(teams) > 1:
                ids = {p.player_id for p in roster}
                chosen = [pid for pid in selected if pid in ids]
            participants = resolve_participants(roster=roster, mode=mode, selected_ids=chosen)

            return Event(
                event_id="",
                title=title
                or self._formatter.title(event_type=kind, team_name=team.name, start=start, opponent=opponent),
                description=description
                or self._formatter.description(
                    event_type=kind, team_name=team.name, start=start, end=end, location=location
                ),
                type=kind,
                start_date=start,
                end_date=end,
                location=location or self._formatter.default_location,
                team_ids=(team.team_id,),
                participant_ids=participants,
                opponent=opponent,
                status=EventStatus.SCHEDULED,
                notes=notes,
                created_by=actor.user_id,
                created_at=now,
                updated_at=now,
            )

        if len(teams) == 1:
            event = _build(teams[0])
            event_id = self._events.create(event)
            logger.info("Event %s created for team %s by %s", event_id, teams[0].team_id, actor.user_id)
            return [replace(event, event_id=event_id)]

        created: List[Event] = []
        failed: List[Dict[str, Any]] = []
        for team in teams:
            try:
                event = _build(team)
                event_id = self._events.create(event)
                created.append(replace(event, event_id=event_id))
                logger.info("Event %s created for team %s by %s", event_id, team.team_id, actor.user_id)
            except DomainError as e:
                logger.warning("Event creation for team %s failed: %s", team.team_id, e.message)
                failed.append({"teamId": team.team_id, **e.to_dict()})

        if failed:
            raise PartialBatchError(
                f"Δημιουργήθηκαν {len(created)} από {len(teams)} εκδηλώσεις",
                succeeded=created,
                failed=failed,
            )
        return created

    def update_event(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        changes: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Event:
        """Apply a partial update.

        Accepted keys: title, description, type, startDate, endDate, location,
        opponent, notes, score, teamIds, participantIds. Status changes go
        through ``set_status``.
        """
        require(actor.role, Action.UPDATE, Resource.EVENT)
        event = self._get_or_404(event_id, current=True)
        self._ensure_can_manage(actor, event)

        team_ids = event.team_ids
        if "teamIds" in changes:
            team_ids = tuple(dict.fromkeys(changes.get("teamIds") or []))
            if len(team_ids) != 1:
                raise ValidationError("Μια εκδήλωση ανήκει σε ακριβώς μία ομάδα")
            self._load_teams(actor, list(team_ids))

        participant_ids = event.participant_ids
        if "participantIds" in changes:
            roster = [p for tid in team_ids for p in self._players.list_by_team(tid)]
            participant_ids = resolve_participants(
                roster=roster,
                mode=ParticipantMode.EXPLICIT,
                selected_ids=changes.get("participantIds") or [],
            )
        elif team_ids != event.team_ids:
            # Moved to another team without a selection: take the new team's whole roster.
            roster = [p for tid in team_ids for p in self._players.list_by_team(tid)]
            participant_ids = resolve_participants(roster=roster, mode=ParticipantMode.ALL_ROSTER)

        start = require_instant(changes["startDate"], "startDate") if "startDate" in changes else event.start_date
        end = optional_instant(changes.get("endDate"), "endDate") if "endDate" in changes else event.end_date
        _ensure_order(start, end)

        updated = replace(
            event,
            title=require_non_empty(changes["title"], "Τίτλος") if "title" in changes else event.title,
            description=clean_text(changes["description"], "Περιγραφή") if "description" in changes else event.description,
            type=parse_choice(EventType, changes["type"], "type") if "type" in changes else event.type,
            start_date=start,
            end_date=end,
            location=clean_text(changes["location"], "Τοποθεσία") if "location" in changes else event.location,
            team_ids=team_ids,
            participant_ids=participant_ids,
            opponent=clean_text(changes["opponent"], "Αντίπαλος") if "opponent" in changes else event.opponent,
            notes=clean_text(changes["notes"], "Σημειώσεις") if "notes" in changes else event.notes,
            score=_parse_score(changes.get("score")) if "score" in changes else event.score,
            updated_at=now or now_utc(),
        )
        if not self._events.update(updated):
            raise NotFoundError("Η εκδήλωση δεν βρέθηκε")
        return self._events.get_by_id(event_id) or updated

    def delete_event(self, *, actor: SessionUser, event_id: str) -> None:
        require(actor.role, Action.DELETE, Resource.EVENT)
        event = self._get_or_404(event_id, current=True)
        self._ensure_can_manage(actor, event)
        if not self._events.delete(event_id):
            raise NotFoundError("Η εκδήλωση δεν βρέθηκε")
        logger.info("Event %s deleted by %s", event_id, actor.user_id)

    def set_status(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        status: EventStatus | str,
        now: Optional[datetime] = None,
    ) -> Event:
        """Manual status change, e.g. cancelling a scheduled event."""
        require(actor.role, Action.UPDATE, Resource.EVENT)
        target = parse_choice(EventStatus, status, "status")
        event = self._get_or_404(event_id, current=True)
        self._ensure_can_manage(actor, event)
        ensure_manual_transition(event.status, target)
        if event.status == target:
            return event

        now = now or now_utc()
        if not self._events.update_status(event_id, target, now):
            raise NotFoundError("Η εκδήλωση δεν βρέθηκε")
        logger.info("Event %s: %s -> %s by %s", event_id, event.status.value, target.value, actor.user_id)
        return self._events.get_by_id(event_id) or replace(event, status=target, updated_at=now)

    def add_participant(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        player_id: str,
        now: Optional[datetime] = None,
    ) -> Event:
        require(actor.role, Action.UPDATE, Resource.EVENT)
        event = self._get_or_404(event_id, current=True)
        self._ensure_can_manage(actor, event)
        player = self._players.get_by_id(player_id)
        if not player:
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        if not set(player.team_ids) & set(event.team_ids):
            raise ValidationError("Ο παίκτης δεν ανήκει στην ομάδα της εκδήλωσης")
        if event.has_participant(player_id):
            return event

        participants = add_participant(event.participant_ids, player_id)
        self._events.set_participants(event_id, participants, now or now_utc())
        return self._events.get_by_id(event_id) or replace(event, participant_ids=participants)

    def remove_participant(
        self,
        *,
        actor: SessionUser,
        event_id: str,
        player_id: str,
        now: Optional[datetime] = None,
    ) -> Event:
        require(actor.role, Action.UPDATE, Resource.EVENT)
        event = self._get_or_404(event_id, current=True)
        self._ensure_can_manage(actor, event)
        if not event.has_participant(player_id):
            return event

        participants = remove_participant(event.participant_ids, player_id)
        self._events.set_participants(event_id, participants, now or now_utc())
        return self._events.get_by_id(event_id) or replace(event, participant_ids=participants)
