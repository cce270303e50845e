from __future__ import annotations

from flask import Flask, g, request

from ..common.web import json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/events/<event_id>/attendance", methods=["GET"], endpoint="event_attendance")
    @login_required
    def event_attendance(event_id: str):
        # ?hydrate=0 returns the raw map keyed by player id.
        if request.args.get("hydrate", "1") == "0":
            declarations = service.read(actor=g.actor, event_id=event_id)
            return ok({pid: d.to_dict() for pid, d in declarations.items()})
        rows = service.read_hydrated(actor=g.actor, event_id=event_id)
        return ok([r.to_dict() for r in rows])

    @app.route("/api/events/<event_id>/attendance/summary", methods=["GET"], endpoint="event_attendance_summary")
    @login_required
    def event_attendance_summary(event_id: str):
        return ok(service.summary(actor=g.actor, event_id=event_id).to_dict())

    @app.route("/api/events/<event_id>/attendance/<player_id>", methods=["PUT"], endpoint="submit_attendance")
    @login_required
    def submit_attendance(event_id: str, player_id: str):
        data = json_body()
        declaration = service.submit(
            actor=g.actor,
            event_id=event_id,
            player_id=player_id,
            status=data.get("status"),
            notes=data.get("notes"),
        )
        return ok({"playerId": player_id, **declaration.to_dict()})

    @app.route("/api/events/<event_id>/attendance/<player_id>", methods=["PATCH"], endpoint="update_attendance")
    @login_required
    def update_attendance(event_id: str, player_id: str):
        data = json_body()
        declaration = service.update(
            actor=g.actor,
            event_id=event_id,
            player_id=player_id,
            status=data.get("status"),
            notes=data.get("notes"),
        )
        return ok({"playerId": player_id, **declaration.to_dict()})

    @app.route("/api/events/<event_id>/attendance/<player_id>", methods=["DELETE"], endpoint="delete_attendance")
    @login_required
    def delete_attendance(event_id: str, player_id: str):
        service.delete(actor=g.actor, event_id=event_id, player_id=player_id)
        return ok({"playerId": player_id})
