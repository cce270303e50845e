from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import Team


class TeamRepository(Protocol):
    def get_by_id(self, team_id: str) -> Optional[Team]:
        raise NotImplementedError

    def create(self, team: Team) -> bool:
        """Insert a team under its slug id.

        Returns False when a team with the same id already exists.
        """

        raise NotImplementedError

    def update(
        self,
        *,
        team_id: str,
        name: str,
        description: Optional[str],
        coach_ids: Sequence[str],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def delete(self, team_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Team]:
        raise NotImplementedError

    def list_by_coach(self, coach_id: str) -> Sequence[Team]:
        raise NotImplementedError

    def list_by_ids(self, team_ids: Iterable[str]) -> Sequence[Team]:
        raise NotImplementedError
