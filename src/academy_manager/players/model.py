from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from ..common.datetime_utils import isoformat


@dataclass(frozen=True)
class Player:
    """Domain entity: player.

    ``main_team_id`` is the team shown as primary and is always one of
    ``team_ids`` when the player belongs to any team.
    """

    player_id: str
    name: str
    surname: str = ""
    birth_date: Optional[date] = None
    team_ids: Tuple[str, ...] = field(default_factory=tuple)
    main_team_id: Optional[str] = None
    user_id: Optional[str] = None
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    jersey_number: Optional[int] = None
    position: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    def in_team(self, team_id: str) -> bool:
        return team_id in self.team_ids

    def to_dict(self) -> dict:
        return {
            "id": self.player_id,
            "name": self.name,
            "surname": self.surname,
            "birthDate": self.birth_date.isoformat() if self.birth_date else None,
            "teamIds": list(self.team_ids),
            "mainTeamId": self.main_team_id,
            "userId": self.user_id,
            "parentName": self.parent_name,
            "parentEmail": self.parent_email,
            "jerseyNumber": self.jersey_number,
            "position": self.position,
            "createdBy": self.created_by,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


def pick_main_team(team_ids: Tuple[str, ...], requested: Optional[str]) -> Optional[str]:
    """Keep the requested main team if it is still a member, else fall back to the first team."""
    if not team_ids:
        return None
    if requested and requested in team_ids:
        return requested
    return team_ids[0]
