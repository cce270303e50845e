from __future__ import annotations

import uuid
from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    from_db_instant,
    load_json,
    to_db_instant,
)
from .model import Player
from .repository import PlayerRepository

_COLUMNS = (
    "id, name, surname, birth_date, team_ids, main_team_id, user_id, parent_name, parent_email, "
    "jersey_number, position, created_by, created_at, updated_at"
)
_ORDER = "ORDER BY surname ASC, name ASC"


def _row_to_player(r: dict) -> Player:
    jersey = r.get("jersey_number")
    return Player(
        player_id=str(r["id"]),
        name=r["name"],
        surname=r.get("surname") or "",
        birth_date=r.get("birth_date"),
        team_ids=tuple(load_json(r.get("team_ids"), [])),
        main_team_id=r.get("main_team_id"),
        user_id=r.get("user_id"),
        parent_name=r.get("parent_name"),
        parent_email=r.get("parent_email"),
        jersey_number=int(jersey) if jersey is not None else None,
        position=r.get("position"),
        created_by=r.get("created_by"),
        created_at=from_db_instant(r.get("created_at")),
        updated_at=from_db_instant(r.get("updated_at")),
    )


class MySQLPlayerRepository(PlayerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, player_id: str) -> Optional[Player]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM players WHERE id=%s", (player_id,))
            r = fetchone(cur)
            return _row_to_player(r) if r else None

    def list_by_ids(self, player_ids: Iterable[str]) -> Sequence[Player]:
        ids = list(dict.fromkeys(player_ids))
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM players WHERE id IN ({placeholders}) {_ORDER}", tuple(ids))
            return [_row_to_player(r) for r in fetchall(cur)]

    def create(self, player: Player) -> str:
        player_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO players({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    player_id,
                    player.name,
                    player.surname,
                    player.birth_date,
                    dump_json(list(player.team_ids)),
                    player.main_team_id,
                    player.user_id,
                    player.parent_name,
                    player.parent_email,
                    player.jersey_number,
                    player.position,
                    player.created_by,
                    to_db_instant(player.created_at),
                    to_db_instant(player.updated_at),
                ),
            )
        return player_id

    def update(self, player: Player) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE players
                SET name=%s, surname=%s, birth_date=%s, team_ids=%s, main_team_id=%s, user_id=%s,
                    parent_name=%s, parent_email=%s, jersey_number=%s, position=%s, updated_at=%s
                WHERE id=%s
                """,
                (
                    player.name,
                    player.surname,
                    player.birth_date,
                    dump_json(list(player.team_ids)),
                    player.main_team_id,
                    player.user_id,
                    player.parent_name,
                    player.parent_email,
                    player.jersey_number,
                    player.position,
                    to_db_instant(player.updated_at),
                    player.player_id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, player_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM players WHERE id=%s", (player_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Player]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM players {_ORDER}")
            return [_row_to_player(r) for r in fetchall(cur)]

    def list_by_team(self, team_id: str) -> Sequence[Player]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM players WHERE JSON_CONTAINS(team_ids, JSON_QUOTE(%s)) {_ORDER}",
                (team_id,),
            )
            return [_row_to_player(r) for r in fetchall(cur)]

    def list_by_user(self, user_id: str) -> Sequence[Player]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM players WHERE user_id=%s {_ORDER}", (user_id,))
            return [_row_to_player(r) for r in fetchall(cur)]
