from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.slug import team_slug
from ..common.validators import clean_text, optional_text, require_non_empty
from ..core.constants import DEFAULT_AGE_GROUP
from ..core.enums import Action, Resource, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import require
from ..players.model import pick_main_team
from ..players.repository import PlayerRepository
from ..users.model import SessionUser
from .model import Team
from .repository import TeamRepository

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, teams: TeamRepository, players: PlayerRepository):
        self._teams = teams
        self._players = players

    def _get_or_404(self, team_id: str) -> Team:
        team = self._teams.get_by_id(team_id)
        if not team:
            raise NotFoundError("Η ομάδα δεν βρέθηκε")
        return team

    def _ensure_can_manage(self, actor: SessionUser, team: Team) -> None:
        if actor.role == Role.COACH and not team.has_coach(actor.user_id):
            raise AuthorizationError("Η ομάδα δεν ανήκει στους προπονητές της")

    def visible_teams(self, actor: SessionUser) -> Sequence[Team]:
        """Teams the actor may see.

        Parents see teams of their linked players, coaches the teams they
        coach, superadmins everything.
        """
        if actor.role == Role.SUPERADMIN:
            return self._teams.list_all()
        if actor.role == Role.COACH:
            return self._teams.list_by_coach(actor.user_id)

        team_ids: list[str] = []
        for p in self._players.list_by_user(actor.user_id):
            team_ids.extend(p.team_ids)
        return self._teams.list_by_ids(team_ids)

    def list_teams(self, *, actor: SessionUser) -> Sequence[Team]:
        require(actor.role, Action.VIEW, Resource.TEAM)
        return self.visible_teams(actor)

    def get_team(self, *, actor: SessionUser, team_id: str) -> Team:
        require(actor.role, Action.VIEW, Resource.TEAM)
        team = self._get_or_404(team_id)
        if actor.role != Role.SUPERADMIN and team.team_id not in {t.team_id for t in self.visible_teams(actor)}:
            raise AuthorizationError("Δεν έχετε πρόσβαση σε αυτή την ομάδα")
        return team

    def create_team(
        self,
        *,
        actor: SessionUser,
        age_group: str,
        group_name: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        coach_ids: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> Team:
        require(actor.role, Action.CREATE, Resource.TEAM)
        now = now or now_utc()

        age_group = clean_text(age_group, "Ηλικιακή κατηγορία") or DEFAULT_AGE_GROUP
        group_name = require_non_empty(group_name, "Τμήμα")
        team_id = team_slug(age_group, group_name)

        coaches = list(dict.fromkeys(coach_ids or []))
        if actor.role == Role.COACH and actor.user_id not in coaches:
            coaches.insert(0, actor.user_id)

        team = Team(
            team_id=team_id,
            name=optional_text(name) or f"{age_group} {group_name}",
            age_group=age_group,
            group_name=group_name,
            description=optional_text(description),
            coach_ids=tuple(coaches),
            created_by=actor.user_id,
            created_at=now,
            updated_at=now,
        )
        if not self._teams.create(team):
            raise ConflictError(f"Υπάρχει ήδη ομάδα {age_group} {group_name}")

        logger.info("Team %s created by %s", team_id, actor.user_id)
        return team

    def update_team(
        self,
        *,
        actor: SessionUser,
        team_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        coach_ids: Optional[Sequence[str]] = None,
        age_group: Optional[str] = None,
        group_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Team:
        require(actor.role, Action.UPDATE, Resource.TEAM)
        team = self._get_or_404(team_id)
        self._ensure_can_manage(actor, team)

        # ageGroup/groupName form the team id, so they are frozen after creation.
        if age_group is not None and clean_text(age_group, "Ηλικιακή κατηγορία") != team.age_group:
            raise ValidationError("Η ηλικιακή κατηγορία δεν μπορεί να αλλάξει")
        if group_name is not None and clean_text(group_name, "Τμήμα") != team.group_name:
            raise ValidationError("Το τμήμα δεν μπορεί να αλλάξει")

        updated = replace(
            team,
            name=require_non_empty(name, "Όνομα") if name is not None else team.name,
            description=optional_text(description) if description is not None else team.description,
            coach_ids=tuple(dict.fromkeys(coach_ids)) if coach_ids is not None else team.coach_ids,
            updated_at=now or now_utc(),
        )
        if not self._teams.update(
            team_id=team.team_id,
            name=updated.name,
            description=updated.description,
            coach_ids=updated.coach_ids,
            updated_at=updated.updated_at,
        ):
            raise NotFoundError("Η ομάδα δεν βρέθηκε")
        return updated

    def delete_team(self, *, actor: SessionUser, team_id: str, now: Optional[datetime] = None) -> int:
        """Delete a team and drop it from every player's team list.

        Returns the number of players that were detached.
        """
        require(actor.role, Action.DELETE, Resource.TEAM)
        team = self._get_or_404(team_id)
        self._ensure_can_manage(actor, team)
        now = now or now_utc()

        detached = 0
        for player in self._players.list_by_team(team_id):
            team_ids = tuple(t for t in player.team_ids if t != team_id)
            self._players.update(
                replace(
                    player,
                    team_ids=team_ids,
                    main_team_id=pick_main_team(team_ids, player.main_team_id),
                    updated_at=now,
                )
            )
            detached += 1

        if not self._teams.delete(team_id):
            raise NotFoundError("Η ομάδα δεν βρέθηκε")

        logger.info("Team %s deleted, %d player(s) detached", team_id, detached)
        return detached
