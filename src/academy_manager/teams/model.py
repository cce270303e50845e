from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..common.datetime_utils import isoformat


@dataclass(frozen=True)
class Team:
    """Domain entity: team.

    ``team_id`` is the slug of ``age_group-group_name`` and never changes.
    """

    team_id: str
    name: str
    age_group: str
    group_name: str
    description: Optional[str] = None
    coach_ids: Tuple[str, ...] = field(default_factory=tuple)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_coach(self, user_id: str) -> bool:
        return user_id in self.coach_ids

    def to_dict(self) -> dict:
        return {
            "id": self.team_id,
            "name": self.name,
            "ageGroup": self.age_group,
            "groupName": self.group_name,
            "description": self.description or "",
            "coachIds": list(self.coach_ids),
            "createdBy": self.created_by,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
