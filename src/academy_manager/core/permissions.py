"""Role based authorization predicate.

Ownership (which team, which player) is checked by the services; this
module only answers whether a role may perform an action on a kind of
resource at all.
"""

from __future__ import annotations

from typing import FrozenSet, Mapping, Tuple

from .enums import Action, Resource, Role
from .exceptions import AuthorizationError

_Rule = Tuple[Action, Resource]

_PARENT: FrozenSet[_Rule] = frozenset(
    {
        (Action.VIEW, Resource.TEAM),
        (Action.VIEW, Resource.PLAYER),
        (Action.CREATE, Resource.PLAYER),
        (Action.VIEW, Resource.EVENT),
        (Action.VIEW_ATTENDANCE, Resource.ATTENDANCE),
        (Action.SUBMIT_ATTENDANCE, Resource.ATTENDANCE),
        (Action.DELETE, Resource.ATTENDANCE),
    }
)

_COACH: FrozenSet[_Rule] = frozenset(
    {
        (Action.VIEW, Resource.TEAM),
        (Action.CREATE, Resource.TEAM),
        (Action.UPDATE, Resource.TEAM),
        (Action.DELETE, Resource.TEAM),
        (Action.VIEW, Resource.PLAYER),
        (Action.CREATE, Resource.PLAYER),
        (Action.UPDATE, Resource.PLAYER),
        (Action.DELETE, Resource.PLAYER),
        (Action.VIEW, Resource.EVENT),
        (Action.CREATE, Resource.EVENT),
        (Action.UPDATE, Resource.EVENT),
        (Action.DELETE, Resource.EVENT),
        (Action.VIEW_ATTENDANCE, Resource.ATTENDANCE),
        (Action.VIEW, Resource.USER),
    }
)

_RULES: Mapping[Role, FrozenSet[_Rule]] = {
    Role.PARENT: _PARENT,
    Role.COACH: _COACH,
}


def can_perform(role: Role, action: Action, resource: Resource) -> bool:
    if role == Role.SUPERADMIN:
        return True
    return (Action(action), Resource(resource)) in _RULES.get(Role(role), frozenset())


def require(role: Role, action: Action, resource: Resource) -> None:
    if not can_perform(role, action, resource):
        raise AuthorizationError("Δεν έχετε δικαίωμα για αυτή την ενέργεια")
