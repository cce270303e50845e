from __future__ import annotations

from flask import Flask, g, request

from ..common.validators import optional_instant, parse_choice
from ..common.web import json_body, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_UPCOMING_LIMIT
from ..core.enums import EventType, ParticipantMode
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _limit() -> int:
        raw = request.args.get("limit")
        if not raw:
            return DEFAULT_UPCOMING_LIMIT
        if not raw.isdigit() or int(raw) <= 0:
            raise ValidationError("Το όριο πρέπει να είναι θετικός ακέραιος")
        return int(raw)

    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    @login_required
    def list_events():
        type_s = request.args.get("type")
        events = container.event_service.list_events(
            actor=g.actor,
            team_id=request.args.get("teamId") or None,
            event_type=parse_choice(EventType, type_s, "type") if type_s else None,
            start=optional_instant(request.args.get("from"), "from"),
            end=optional_instant(request.args.get("to"), "to"),
        )
        return ok([e.to_dict(include_declarations=False) for e in events])

    @app.route("/api/events/upcoming", methods=["GET"], endpoint="upcoming_events")
    @login_required
    def upcoming_events():
        events = container.event_service.upcoming(actor=g.actor, limit=_limit())
        return ok([e.to_dict(include_declarations=False) for e in events])

    @app.route("/api/events", methods=["POST"], endpoint="create_events")
    @login_required
    def create_events():
        data = json_body()
        team_ids = data.get("teamIds")
        if team_ids is None and data.get("teamId"):
            team_ids = [data["teamId"]]

        events = container.event_service.create_events(
            actor=g.actor,
            event_type=data.get("type") or EventType.TRAINING.value,
            team_ids=team_ids or [],
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            title=data.get("title"),
            description=data.get("description"),
            location=data.get("location"),
            opponent=data.get("opponent"),
            notes=data.get("notes"),
            participant_mode=data.get("participantMode") or ParticipantMode.ALL_ROSTER.value,
            participant_ids=data.get("participantIds"),
        )
        app.logger.info("%d event(s) created by %s", len(events), g.actor.user_id)
        return ok([e.to_dict() for e in events], 201)

    @app.route("/api/events/<event_id>", methods=["GET"], endpoint="get_event")
    @login_required
    def get_event(event_id: str):
        return ok(container.event_service.get_event(actor=g.actor, event_id=event_id).to_dict())

    @app.route("/api/events/<event_id>", methods=["PATCH"], endpoint="update_event")
    @login_required
    def update_event(event_id: str):
        event = container.event_service.update_event(actor=g.actor, event_id=event_id, changes=json_body())
        return ok(event.to_dict())

    @app.route("/api/events/<event_id>", methods=["DELETE"], endpoint="delete_event")
    @login_required
    def delete_event(event_id: str):
        container.event_service.delete_event(actor=g.actor, event_id=event_id)
        return ok({"id": event_id})

    @app.route("/api/events/<event_id>/status", methods=["POST"], endpoint="set_event_status")
    @login_required
    def set_event_status(event_id: str):
        data = json_body()
        event = container.event_service.set_status(actor=g.actor, event_id=event_id, status=data.get("status"))
        return ok(event.to_dict())

    @app.route(
        "/api/events/<event_id>/participants/<player_id>",
        methods=["POST"],
        endpoint="add_event_participant",
    )
    @login_required
    def add_event_participant(event_id: str, player_id: str):
        event = container.event_service.add_participant(actor=g.actor, event_id=event_id, player_id=player_id)
        return ok(event.to_dict())

    @app.route(
        "/api/events/<event_id>/participants/<player_id>",
        methods=["DELETE"],
        endpoint="remove_event_participant",
    )
    @login_required
    def remove_event_participant(event_id: str, player_id: str):
        event = container.event_service.remove_participant(actor=g.actor, event_id=event_id, player_id=player_id)
        return ok(event.to_dict())
