"""In-memory repositories used across the test suite."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Sequence, Set

from werkzeug.security import generate_password_hash

from academy_manager.container import Container, wire
from academy_manager.core.enums import EventStatus, EventType, Role
from academy_manager.core.exceptions import BackendUnavailableError
from academy_manager.events.cache import CachedEventRepository
from academy_manager.events.formatting import EventFormatter
from academy_manager.events.model import AttendanceDeclaration, Event
from academy_manager.players.model import Player
from academy_manager.teams.model import Team
from academy_manager.users.model import SessionUser, User

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class InMemoryUsers:
    def __init__(self):
        self.users: Dict[str, User] = {}

    def add(self, user_id: str, role: Role, *, name: Optional[str] = None, password: str = "secret123") -> SessionUser:
        user = User(
            user_id=user_id,
            name=name or user_id,
            email=f"{user_id}@example.com",
            password_hash=generate_password_hash(password),
            role=role,
            created_at=NOW,
        )
        self.users[user_id] = user
        return SessionUser(user_id=user.user_id, name=user.name, email=user.email, role=role)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email.lower()), None)

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> str:
        user_id = f"u{len(self.users) + 1}"
        self.users[user_id] = User(user_id, name, email, password_hash, role, NOW)
        return user_id

    def list_by_role(self, role: Optional[Role] = None) -> Sequence[User]:
        return [u for u in self.users.values() if role is None or u.role == role]


class InMemoryTeams:
    def __init__(self):
        self.teams: Dict[str, Team] = {}

    def get_by_id(self, team_id: str) -> Optional[Team]:
        return self.teams.get(team_id)

    def create(self, team: Team) -> bool:
        if team.team_id in self.teams:
            return False
        self.teams[team.team_id] = team
        return True

    def update(self, *, team_id, name, description, coach_ids, updated_at) -> bool:
        team = self.teams.get(team_id)
        if not team:
            return False
        self.teams[team_id] = replace(
            team, name=name, description=description, coach_ids=tuple(coach_ids), updated_at=updated_at
        )
        return True

    def delete(self, team_id: str) -> bool:
        return self.teams.pop(team_id, None) is not None

    def list_all(self) -> Sequence[Team]:
        return sorted(self.teams.values(), key=lambda t: t.name)

    def list_by_coach(self, coach_id: str) -> Sequence[Team]:
        return [t for t in self.list_all() if coach_id in t.coach_ids]

    def list_by_ids(self, team_ids: Iterable[str]) -> Sequence[Team]:
        wanted = set(team_ids)
        return [t for t in self.list_all() if t.team_id in wanted]


class InMemoryPlayers:
    def __init__(self):
        self.players: Dict[str, Player] = {}
        self._seq = 0

    def add(self, player_id: str, *, team_ids=(), user_id=None, name=None) -> Player:
        player = Player(
            player_id=player_id,
            name=name or player_id,
            surname="Test",
            team_ids=tuple(team_ids),
            main_team_id=team_ids[0] if team_ids else None,
            user_id=user_id,
            parent_name=None if user_id else "Γονέας",
            parent_email=None if user_id else "parent@example.com",
            created_at=NOW,
            updated_at=NOW,
        )
        self.players[player_id] = player
        return player

    def get_by_id(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def list_by_ids(self, player_ids: Iterable[str]) -> Sequence[Player]:
        wanted = set(player_ids)
        return [p for p in self.players.values() if p.player_id in wanted]

    def create(self, player: Player) -> str:
        self._seq += 1
        player_id = f"new{self._seq}"
        self.players[player_id] = replace(player, player_id=player_id)
        return player_id

    def update(self, player: Player) -> bool:
        if player.player_id not in self.players:
            return False
        self.players[player.player_id] = player
        return True

    def delete(self, player_id: str) -> bool:
        return self.players.pop(player_id, None) is not None

    def list_all(self) -> Sequence[Player]:
        return list(self.players.values())

    def list_by_team(self, team_id: str) -> Sequence[Player]:
        return [p for p in self.players.values() if team_id in p.team_ids]

    def list_by_user(self, user_id: str) -> Sequence[Player]:
        return [p for p in self.players.values() if p.user_id == user_id]


class InMemoryEvents:
    """Event store. ``fail_status_for`` / ``fail_create_for_team`` simulate backend errors."""

    def __init__(self):
        self.events: Dict[str, Event] = {}
        self.fail_status_for: Set[str] = set()
        self.fail_create_for_team: Set[str] = set()
        self.reads = 0
        self._seq = 0

    def add(self, event: Event) -> Event:
        self.events[event.event_id] = event
        return event

    def get_by_id(self, event_id: str) -> Optional[Event]:
        self.reads += 1
        return self.events.get(event_id)

    def get_current(self, event_id: str) -> Optional[Event]:
        return self.get_by_id(event_id)

    def create(self, event: Event) -> str:
        if set(event.team_ids) & self.fail_create_for_team:
            raise BackendUnavailableError("store offline")
        self._seq += 1
        event_id = f"e{self._seq}"
        self.events[event_id] = replace(event, event_id=event_id)
        return event_id

    def update(self, event: Event) -> bool:
        current = self.events.get(event.event_id)
        if current is None:
            return False
        self.events[event.event_id] = replace(event, attendance_declarations=current.attendance_declarations)
        return True

    def delete(self, event_id: str) -> bool:
        return self.events.pop(event_id, None) is not None

    def list_all(self) -> Sequence[Event]:
        return sorted(self.events.values(), key=lambda e: e.start_date, reverse=True)

    def list_by_team(self, team_id: str) -> Sequence[Event]:
        return [e for e in self.list_all() if team_id in e.team_ids]

    def list_by_type(self, event_type: EventType) -> Sequence[Event]:
        return [e for e in self.list_all() if e.type == event_type]

    def list_by_date_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        return sorted((e for e in self.events.values() if start <= e.start_date <= end), key=lambda e: e.start_date)

    def list_upcoming(self, now: datetime, limit: Optional[int] = None) -> Sequence[Event]:
        items = sorted(
            (e for e in self.events.values() if e.start_date >= now and e.status != EventStatus.CANCELLED),
            key=lambda e: e.start_date,
        )
        return items if limit is None else items[:limit]

    def list_open(self) -> Sequence[Event]:
        return sorted((e for e in self.events.values() if not e.status.is_terminal), key=lambda e: e.start_date)

    def update_status(self, event_id: str, status: EventStatus, updated_at: datetime) -> bool:
        if event_id in self.fail_status_for:
            raise BackendUnavailableError("write rejected")
        event = self.events.get(event_id)
        if event is None:
            return False
        self.events[event_id] = replace(event, status=status, updated_at=updated_at)
        return True

    def set_participants(self, event_id: str, participant_ids: Sequence[str], updated_at: datetime) -> bool:
        event = self.events.get(event_id)
        if event is None:
            return False
        self.events[event_id] = replace(event, participant_ids=tuple(participant_ids), updated_at=updated_at)
        return True

    def set_declaration(
        self,
        event_id: str,
        player_id: str,
        declaration: AttendanceDeclaration,
        *,
        only_if_status: Optional[EventStatus] = None,
    ) -> bool:
        event = self.events.get(event_id)
        if event is None:
            return False
        if only_if_status is not None and event.status != only_if_status:
            return False
        declarations = dict(event.attendance_declarations)
        declarations[player_id] = declaration
        self.events[event_id] = replace(
            event, attendance_declarations=declarations, updated_at=declaration.timestamp
        )
        return True

    def remove_declaration(self, event_id: str, player_id: str, updated_at: datetime) -> bool:
        event = self.events.get(event_id)
        if event is None or player_id not in event.attendance_declarations:
            return False
        declarations = dict(event.attendance_declarations)
        del declarations[player_id]
        self.events[event_id] = replace(event, attendance_declarations=declarations, updated_at=updated_at)
        return True


def make_team(team_id: str, *, coach_ids=(), name: Optional[str] = None) -> Team:
    age_group, _, group_name = team_id.partition("-")
    return Team(
        team_id=team_id,
        name=name or f"{age_group.upper()} {group_name.upper()}",
        age_group=age_group.upper(),
        group_name=group_name.upper(),
        coach_ids=tuple(coach_ids),
        created_at=NOW,
        updated_at=NOW,
    )


def make_event(event_id: str, **kwargs) -> Event:
    defaults = dict(
        title=f"Event {event_id}",
        type=EventType.TRAINING,
        start_date=NOW,
        team_ids=("k10-a",),
        created_at=NOW,
        updated_at=NOW,
    )
    defaults.update(kwargs)
    return Event(event_id=event_id, **defaults)


class World:
    """A small academy: one coach with team k10-a, a parent with two children."""

    def __init__(self):
        self.users = InMemoryUsers()
        self.teams = InMemoryTeams()
        self.players = InMemoryPlayers()
        self.events = InMemoryEvents()

        self.admin = self.users.add("admin", Role.SUPERADMIN)
        self.coach = self.users.add("coach", Role.COACH)
        self.other_coach = self.users.add("coach2", Role.COACH)
        self.parent = self.users.add("parent", Role.PARENT)
        self.other_parent = self.users.add("parent2", Role.PARENT)

        self.teams.create(make_team("k10-a", coach_ids=["coach"]))
        self.teams.create(make_team("k12-b", coach_ids=["coach2"]))

        self.players.add("p1", team_ids=["k10-a"], user_id="parent")
        self.players.add("p2", team_ids=["k10-a"], user_id="parent")
        self.players.add("p3", team_ids=["k10-a"], user_id="parent2")
        self.players.add("p4", team_ids=["k12-b"], user_id="parent2")

    def container(self, *, cached: bool = False) -> Container:
        """Services over the shared stores; ``cached`` gives the container its own
        event cache, like one app process of several."""
        events = CachedEventRepository(self.events) if cached else self.events
        return wire(
            users_repo=self.users,
            teams_repo=self.teams,
            players_repo=self.players,
            events_repo=events,
            formatter=EventFormatter(timezone_name="UTC"),
        )
