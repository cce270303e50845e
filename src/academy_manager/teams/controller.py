from __future__ import annotations

from flask import Flask, g

from ..common.web import json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teams", methods=["GET"], endpoint="list_teams")
    @login_required
    def list_teams():
        teams = container.team_service.list_teams(actor=g.actor)
        return ok([t.to_dict() for t in teams])

    @app.route("/api/teams", methods=["POST"], endpoint="create_team")
    @login_required
    def create_team():
        data = json_body()
        team = container.team_service.create_team(
            actor=g.actor,
            age_group=data.get("ageGroup", ""),
            group_name=data.get("groupName", ""),
            name=data.get("name"),
            description=data.get("description"),
            coach_ids=data.get("coachIds"),
        )
        return ok(team.to_dict(), 201)

    @app.route("/api/teams/<team_id>", methods=["GET"], endpoint="get_team")
    @login_required
    def get_team(team_id: str):
        return ok(container.team_service.get_team(actor=g.actor, team_id=team_id).to_dict())

    @app.route("/api/teams/<team_id>", methods=["PATCH"], endpoint="update_team")
    @login_required
    def update_team(team_id: str):
        data = json_body()
        team = container.team_service.update_team(
            actor=g.actor,
            team_id=team_id,
            name=data.get("name"),
            description=data.get("description"),
            coach_ids=data.get("coachIds"),
            age_group=data.get("ageGroup"),
            group_name=data.get("groupName"),
        )
        return ok(team.to_dict())

    @app.route("/api/teams/<team_id>", methods=["DELETE"], endpoint="delete_team")
    @login_required
    def delete_team(team_id: str):
        detached = container.team_service.delete_team(actor=g.actor, team_id=team_id)
        app.logger.info("Team %s deleted by %s", team_id, g.actor.user_id)
        return ok({"id": team_id, "playersDetached": detached})

    @app.route("/api/teams/<team_id>/players", methods=["GET"], endpoint="team_players")
    @login_required
    def team_players(team_id: str):
        container.team_service.get_team(actor=g.actor, team_id=team_id)
        players = container.player_service.list_players(actor=g.actor, team_id=team_id)
        return ok([p.to_dict() for p in players])
