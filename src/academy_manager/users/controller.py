from __future__ import annotations

from datetime import timedelta

from flask import Flask, g, request, session

from ..common.validators import parse_choice
from ..common.web import json_body, login_required, ok
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _start_session(s_user, *, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        session["user_id"] = s_user.user_id
        session["role"] = s_user.role.value

    @app.route("/api/auth/signup", methods=["POST"], endpoint="signup")
    def signup():
        data = json_body()
        try:
            role = Role((data.get("role") or Role.PARENT.value).lower())
        except ValueError:
            raise ValidationError("Μη έγκυρος ρόλος")

        if data.get("password") != data.get("confirmPassword", data.get("password")):
            raise ValidationError("Οι κωδικοί δεν ταιριάζουν")

        s_user = container.auth_service.signup(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
        )
        _start_session(s_user, remember=False)
        return ok(s_user.to_dict(), 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _start_session(s_user, remember=bool(data.get("rememberMe")))
        app.logger.info("User %s logged in", s_user.user_id)
        return ok(s_user.to_dict())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(g.actor.to_dict())

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @login_required
    def list_users():
        role_s = request.args.get("role")
        role = parse_choice(Role, role_s, "role") if role_s else None
        users = container.user_service.list_users(actor=g.actor, role=role)
        return ok([u.to_public_dict() for u in users])
