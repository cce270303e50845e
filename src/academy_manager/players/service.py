from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Set

from ..common.datetime_utils import now_utc
from ..common.validators import clean_text, optional_date, optional_text, require_email, require_non_empty
from ..core.enums import Action, Resource, Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PartialBatchError,
    ValidationError,
)
from ..core.permissions import require
from ..teams.repository import TeamRepository
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .model import Player, pick_main_team
from .repository import PlayerRepository

logger = logging.getLogger(__name__)


def _parse_jersey(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Ο αριθμός φανέλας πρέπει να είναι ακέραιος")
    if number < 0:
        raise ValidationError("Ο αριθμός φανέλας δεν μπορεί να είναι αρνητικός")
    return number


class PlayerService:
    def __init__(self, players: PlayerRepository, teams: TeamRepository, users: Optional[UserRepository] = None):
        self._players = players
        self._teams = teams
        self._users = users

    # --- scope helpers -----------------------------------------------------

    def _coach_team_ids(self, actor: SessionUser) -> Set[str]:
        return {t.team_id for t in self._teams.list_by_coach(actor.user_id)}

    def _can_see(self, actor: SessionUser, player: Player) -> bool:
        if actor.role == Role.SUPERADMIN:
            return True
        if actor.role == Role.PARENT:
            return player.user_id == actor.user_id
        return bool(self._coach_team_ids(actor) & set(player.team_ids)) or player.created_by == actor.user_id

    def _ensure_teams(self, actor: SessionUser, team_ids: Sequence[str]) -> None:
        if not team_ids:
            return
        found = {t.team_id for t in self._teams.list_by_ids(team_ids)}
        missing = [t for t in team_ids if t not in found]
        if missing:
            raise ValidationError(f"Άγνωστες ομάδες: {', '.join(missing)}")
        if actor.role == Role.COACH:
            outside = set(team_ids) - self._coach_team_ids(actor)
            if outside:
                raise AuthorizationError("Μπορείτε να προσθέσετε παίκτες μόνο στις ομάδες σας")

    def _ensure_linked_user(self, user_id: Optional[str]) -> None:
        if user_id and self._users is not None and not self._users.get_by_id(user_id):
            raise ValidationError("Ο συνδεδεμένος λογαριασμός γονέα δεν υπάρχει")

    def _get_or_404(self, player_id: str) -> Player:
        player = self._players.get_by_id(player_id)
        if not player:
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        return player

    # --- queries -----------------------------------------------------------

    def linked_players(self, actor: SessionUser) -> Sequence[Player]:
        return self._players.list_by_user(actor.user_id)

    def list_players(self, *, actor: SessionUser, team_id: Optional[str] = None) -> Sequence[Player]:
        require(actor.role, Action.VIEW, Resource.PLAYER)

        if actor.role == Role.PARENT:
            players = self._players.list_by_user(actor.user_id)
            return [p for p in players if team_id is None or p.in_team(team_id)]

        if team_id is not None:
            if actor.role == Role.COACH and team_id not in self._coach_team_ids(actor):
                raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτή την ομάδα")
            return self._players.list_by_team(team_id)

        if actor.role == Role.SUPERADMIN:
            return self._players.list_all()

        seen: Dict[str, Player] = {}
        for tid in sorted(self._coach_team_ids(actor)):
            for p in self._players.list_by_team(tid):
                seen.setdefault(p.player_id, p)
        return list(seen.values())

    def get_player(self, *, actor: SessionUser, player_id: str) -> Player:
        require(actor.role, Action.VIEW, Resource.PLAYER)
        player = self._get_or_404(player_id)
        if not self._can_see(actor, player):
            raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτόν τον παίκτη")
        return player

    # --- commands ----------------------------------------------------------

    def create_player(
        self,
        *,
        actor: SessionUser,
        name: str,
        surname: str = "",
        birth_date: date | str | None = None,
        team_ids: Optional[Sequence[str]] = None,
        main_team_id: Optional[str] = None,
        user_id: Optional[str] = None,
        parent_name: Optional[str] = None,
        parent_email: Optional[str] = None,
        jersey_number: Any = None,
        position: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Player:
        require(actor.role, Action.CREATE, Resource.PLAYER)
        now = now or now_utc()

        name = require_non_empty(name, "Όνομα")
        birth = optional_date(birth_date, "Ημερομηνία γέννησης")
        if birth is None:
            raise ValidationError("Η ημερομηνία γέννησης είναι υποχρεωτική")

        if actor.role == Role.PARENT:
            # Parents add their own children: auto-linked, no team placement.
            user_id = actor.user_id
            surname = clean_text(surname, "Επώνυμο")
            teams: tuple[str, ...] = ()
            parent_name = parent_email = None
        else:
            surname = require_non_empty(surname, "Επώνυμο")
            teams = tuple(dict.fromkeys(team_ids or []))
            self._ensure_teams(actor, teams)
            user_id = optional_text(user_id)
            self._ensure_linked_user(user_id)
            if user_id:
                parent_name = parent_email = None
            else:
                parent_name = require_non_empty(parent_name, "Όνομα γονέα")
                parent_email = require_email(parent_email, "Email γονέα")

        player = Player(
            player_id="",
            name=name,
            surname=surname,
            birth_date=birth,
            team_ids=teams,
            main_team_id=pick_main_team(teams, main_team_id),
            user_id=user_id,
            parent_name=parent_name,
            parent_email=parent_email,
            jersey_number=_parse_jersey(jersey_number),
            position=optional_text(position),
            created_by=actor.user_id,
            created_at=now,
            updated_at=now,
        )
        player_id = self._players.create(player)
        logger.info("Player %s created by %s", player_id, actor.user_id)
        return replace(player, player_id=player_id)

    def update_player(
        self,
        *,
        actor: SessionUser,
        player_id: str,
        changes: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Player:
        """Apply a partial update.

        Accepted keys: name, surname, birthDate, teamIds, mainTeamId, userId,
        parentName, parentEmail, jerseyNumber, position.
        """
        require(actor.role, Action.UPDATE, Resource.PLAYER)
        player = self._get_or_404(player_id)
        if not self._can_see(actor, player):
            raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτόν τον παίκτη")

        team_ids = player.team_ids
        if "teamIds" in changes:
            team_ids = tuple(dict.fromkeys(changes.get("teamIds") or []))
            added = [t for t in team_ids if t not in player.team_ids]
            self._ensure_teams(actor, added)

        user_id = player.user_id
        if "userId" in changes:
            user_id = optional_text(changes.get("userId"))
            self._ensure_linked_user(user_id)

        parent_name = player.parent_name
        parent_email = player.parent_email
        if "parentName" in changes:
            parent_name = optional_text(changes.get("parentName"))
        if "parentEmail" in changes:
            parent_email = optional_text(changes.get("parentEmail"))
            if parent_email:
                parent_email = require_email(parent_email, "Email γονέα")
        if not user_id and (not parent_name or not parent_email):
            raise ValidationError("Τα στοιχεία γονέα είναι υποχρεωτικά αν δεν υπάρχει συνδεδεμένος λογαριασμός")

        updated = replace(
            player,
            name=require_non_empty(changes["name"], "Όνομα") if "name" in changes else player.name,
            surname=clean_text(changes["surname"], "Επώνυμο") if "surname" in changes else player.surname,
            birth_date=optional_date(changes.get("birthDate"), "Ημερομηνία γέννησης") if "birthDate" in changes else player.birth_date,
            team_ids=team_ids,
            main_team_id=pick_main_team(team_ids, changes.get("mainTeamId", player.main_team_id)),
            user_id=user_id,
            parent_name=parent_name,
            parent_email=parent_email,
            jersey_number=_parse_jersey(changes.get("jerseyNumber")) if "jerseyNumber" in changes else player.jersey_number,
            position=optional_text(changes.get("position")) if "position" in changes else player.position,
            updated_at=now or now_utc(),
        )
        if not self._players.update(updated):
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        return updated

    def delete_player(self, *, actor: SessionUser, player_id: str) -> None:
        require(actor.role, Action.DELETE, Resource.PLAYER)
        player = self._get_or_404(player_id)
        if not self._can_see(actor, player):
            raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτόν τον παίκτη")
        if not self._players.delete(player_id):
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        logger.info("Player %s deleted by %s", player_id, actor.user_id)

    def assign_to_team(self, *, actor: SessionUser, player_id: str, team_id: str, now: Optional[datetime] = None) -> Player:
        """Add an existing player to a team's roster."""
        require(actor.role, Action.UPDATE, Resource.PLAYER)
        player = self._get_or_404(player_id)
        self._ensure_teams(actor, [team_id])
        if player.in_team(team_id):
            return player

        team_ids = player.team_ids + (team_id,)
        updated = replace(
            player,
            team_ids=team_ids,
            main_team_id=pick_main_team(team_ids, player.main_team_id),
            updated_at=now or now_utc(),
        )
        if not self._players.update(updated):
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        return updated

    def remove_from_team(self, *, actor: SessionUser, player_id: str, team_id: str, now: Optional[datetime] = None) -> Player:
        require(actor.role, Action.UPDATE, Resource.PLAYER)
        player = self._get_or_404(player_id)
        if actor.role == Role.COACH and team_id not in self._coach_team_ids(actor):
            raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτή την ομάδα")
        if not player.in_team(team_id):
            return player

        team_ids = tuple(t for t in player.team_ids if t != team_id)
        updated = replace(
            player,
            team_ids=team_ids,
            main_team_id=pick_main_team(team_ids, player.main_team_id),
            updated_at=now or now_utc(),
        )
        if not self._players.update(updated):
            raise NotFoundError("Ο παίκτης δεν βρέθηκε")
        return updated

    def reassign_players(
        self,
        *,
        actor: SessionUser,
        player_ids: Sequence[str],
        team_ids: Sequence[str],
        main_team_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Player]:
        """Set the same team list on several players.

        Each player is written independently. When some writes fail the
        successful ones stay committed and ``PartialBatchError`` reports both.
        """
        require(actor.role, Action.UPDATE, Resource.PLAYER)
        teams = tuple(dict.fromkeys(team_ids))
        self._ensure_teams(actor, teams)
        now = now or now_utc()

        succeeded: List[Player] = []
        failed: List[Dict[str, Any]] = []
        for pid in dict.fromkeys(player_ids):
            try:
                player = self._get_or_404(pid)
                if not self._can_see(actor, player):
                    raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτόν τον παίκτη")
                updated = replace(
                    player,
                    team_ids=teams,
                    main_team_id=pick_main_team(teams, main_team_id or player.main_team_id),
                    updated_at=now,
                )
                if not self._players.update(updated):
                    raise NotFoundError("Ο παίκτης δεν βρέθηκε")
                succeeded.append(updated)
            except DomainError as e:
                logger.warning("Reassign of player %s failed: %s", pid, e.message)
                failed.append({"id": pid, **e.to_dict()})

        if failed:
            raise PartialBatchError(
                f"Ενημερώθηκαν {len(succeeded)} από {len(succeeded) + len(failed)} παίκτες",
                succeeded=succeeded,
                failed=failed,
            )
        return succeeded
