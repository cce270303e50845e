from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Player


class PlayerRepository(Protocol):
    def get_by_id(self, player_id: str) -> Optional[Player]:
        raise NotImplementedError

    def list_by_ids(self, player_ids: Iterable[str]) -> Sequence[Player]:
        raise NotImplementedError

    def create(self, player: Player) -> str:
        """Insert a player; the store generates the id, which is returned."""

        raise NotImplementedError

    def update(self, player: Player) -> bool:
        raise NotImplementedError

    def delete(self, player_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Player]:
        raise NotImplementedError

    def list_by_team(self, team_id: str) -> Sequence[Player]:
        """The team's roster: players whose team_ids contain ``team_id``."""

        raise NotImplementedError

    def list_by_user(self, user_id: str) -> Sequence[Player]:
        raise NotImplementedError
