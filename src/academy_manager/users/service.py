from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import clean_text, require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Action, Resource, Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import require
from .model import SessionUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _to_session_user(user: User) -> SessionUser:
    return SessionUser(user_id=user.user_id, name=user.name, email=user.email, role=user.role)


class AuthService:
    """Use case: sign up and authenticate users."""

    def __init__(self, users: UserRepository):
        self._users = users

    def signup(self, *, name: str, email: str, password: str, role: Role = Role.PARENT) -> SessionUser:
        name = require_non_empty(name, "Ονοματεπώνυμο")
        email = require_email(email)
        require_min_length(password, "Κωδικός", MIN_PASSWORD_LENGTH)

        if role == Role.SUPERADMIN:
            raise ValidationError("Δεν επιτρέπεται η δημιουργία superadmin από την εγγραφή")
        if self._users.get_by_email(email):
            raise ConflictError("Υπάρχει ήδη λογαριασμός με αυτό το email")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        logger.info("New %s account %s", role.value, user_id)
        return SessionUser(user_id=user_id, name=name, email=email, role=role)

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email(clean_text(email, "email").lower())
        if not user:
            raise AuthenticationError("Λάθος email ή κωδικός")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Λάθος email ή κωδικός")

        return _to_session_user(user)

    def load_session_user(self, user_id: Optional[str]) -> SessionUser:
        if not user_id:
            raise AuthenticationError("Απαιτείται σύνδεση")
        user = self._users.get_by_id(str(user_id))
        if not user:
            raise AuthenticationError("Ο λογαριασμός δεν υπάρχει")
        return _to_session_user(user)


class UserService:
    """Use case: look up user profiles (e.g. to link a parent account to a player)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Ο χρήστης δεν βρέθηκε")
        return user

    def list_users(self, *, actor: SessionUser, role: Optional[Role] = None) -> Sequence[User]:
        require(actor.role, Action.VIEW, Resource.USER)
        return self._users.list_by_role(role)
