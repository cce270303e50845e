from __future__ import annotations

from flask import Flask, g, request

from ..common.web import json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/players", methods=["GET"], endpoint="list_players")
    @login_required
    def list_players():
        players = container.player_service.list_players(actor=g.actor, team_id=request.args.get("teamId") or None)
        return ok([p.to_dict() for p in players])

    @app.route("/api/players", methods=["POST"], endpoint="create_player")
    @login_required
    def create_player():
        data = json_body()
        player = container.player_service.create_player(
            actor=g.actor,
            name=data.get("name", ""),
            surname=data.get("surname", ""),
            birth_date=data.get("birthDate"),
            team_ids=data.get("teamIds"),
            main_team_id=data.get("mainTeamId"),
            user_id=data.get("userId"),
            parent_name=data.get("parentName"),
            parent_email=data.get("parentEmail"),
            jersey_number=data.get("jerseyNumber"),
            position=data.get("position"),
        )
        return ok(player.to_dict(), 201)

    @app.route("/api/players/reassign", methods=["POST"], endpoint="reassign_players")
    @login_required
    def reassign_players():
        data = json_body()
        players = container.player_service.reassign_players(
            actor=g.actor,
            player_ids=data.get("playerIds") or [],
            team_ids=data.get("teamIds") or [],
            main_team_id=data.get("mainTeamId"),
        )
        return ok([p.to_dict() for p in players])

    @app.route("/api/players/<player_id>", methods=["GET"], endpoint="get_player")
    @login_required
    def get_player(player_id: str):
        return ok(container.player_service.get_player(actor=g.actor, player_id=player_id).to_dict())

    @app.route("/api/players/<player_id>", methods=["PATCH"], endpoint="update_player")
    @login_required
    def update_player(player_id: str):
        player = container.player_service.update_player(actor=g.actor, player_id=player_id, changes=json_body())
        return ok(player.to_dict())

    @app.route("/api/players/<player_id>", methods=["DELETE"], endpoint="delete_player")
    @login_required
    def delete_player(player_id: str):
        container.player_service.delete_player(actor=g.actor, player_id=player_id)
        return ok({"id": player_id})

    @app.route("/api/players/<player_id>/teams/<team_id>", methods=["POST"], endpoint="assign_player_team")
    @login_required
    def assign_player_team(player_id: str, team_id: str):
        player = container.player_service.assign_to_team(actor=g.actor, player_id=player_id, team_id=team_id)
        return ok(player.to_dict())

    @app.route("/api/players/<player_id>/teams/<team_id>", methods=["DELETE"], endpoint="remove_player_team")
    @login_required
    def remove_player_team(player_id: str, team_id: str):
        player = container.player_service.remove_from_team(actor=g.actor, player_id=player_id, team_id=team_id)
        return ok(player.to_dict())
