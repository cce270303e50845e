from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.constants import DASHBOARD_EVENT_LIMIT
from ..core.enums import Role
from ..events.model import Event
from ..events.service import EventService
from ..players.model import Player
from ..players.service import PlayerService
from ..teams.model import Team
from ..teams.service import TeamService
from ..users.model import SessionUser


@dataclass(frozen=True)
class DashboardView:
    user: SessionUser
    teams: Sequence[Team]
    players: Sequence[Player]
    upcoming_events: Sequence[Event]

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "teams": [t.to_dict() for t in self.teams],
            "players": [p.to_dict() for p in self.players],
            "upcomingEvents": [e.to_dict(include_declarations=False) for e in self.upcoming_events],
            "stats": {
                "teams": len(self.teams),
                "players": len(self.players),
                "upcomingEvents": len(self.upcoming_events),
            },
        }


class DashboardService:
    """Landing page summary, shaped by the caller's role."""

    def __init__(self, teams: TeamService, players: PlayerService, events: EventService):
        self._teams = teams
        self._players = players
        self._events = events

    def build(self, *, actor: SessionUser, now: Optional[datetime] = None) -> DashboardView:
        now = now or now_utc()
        if actor.role == Role.PARENT:
            players = self._players.linked_players(actor)
        else:
            players = self._players.list_players(actor=actor)

        # For parents the event scope already means "a child participates".
        upcoming = self._events.upcoming(actor=actor, now=now, limit=DASHBOARD_EVENT_LIMIT)
        return DashboardView(
            user=actor,
            teams=self._teams.visible_teams(actor),
            players=players,
            upcoming_events=upcoming,
        )
