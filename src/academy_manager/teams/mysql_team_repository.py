from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

import mysql.connector

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
from .model import Team
from .repository import TeamRepository

_COLUMNS = "id, name, age_group, group_name, description, coach_ids, created_by, created_at, updated_at"


def _row_to_team(r: dict) -> Team:
    return Team(
        team_id=str(r["id"]),
        name=r["name"],
        age_group=r["age_group"],
        group_name=r["group_name"],
        description=r.get("description"),
        coach_ids=tuple(load_json(r.get("coach_ids"), [])),
        created_by=r.get("created_by"),
        created_at=from_db_instant(r.get("created_at")),
        updated_at=from_db_instant(r.get("updated_at")),
    )


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, team_id: str) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teams WHERE id=%s", (team_id,))
            r = fetchone(cur)
            return _row_to_team(r) if r else None

    def create(self, team: Team) -> bool:
        conn = self._conn_factory.connect()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO teams({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    team.team_id,
                    team.name,
                    team.age_group,
                    team.group_name,
                    team.description,
                    dump_json(list(team.coach_ids)),
                    team.created_by,
                    to_db_instant(team.created_at),
                    to_db_instant(team.updated_at),
                ),
            )
            conn.commit()
            return True
        except mysql.connector.IntegrityError:
            # Duplicate primary key: a team with the same slug already exists.
            conn.rollback()
            return False
        finally:
            conn.close()

    def update(
        self,
        *,
        team_id: str,
        name: str,
        description: Optional[str],
        coach_ids: Sequence[str],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teams
                SET name=%s, description=%s, coach_ids=%s, updated_at=%s
                WHERE id=%s
                """,
                (name, description, dump_json(list(coach_ids)), to_db_instant(updated_at), team_id),
            )
            return cur.rowcount > 0

    def delete(self, team_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teams WHERE id=%s", (team_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teams ORDER BY age_group ASC, group_name ASC")
            return [_row_to_team(r) for r in fetchall(cur)]

    def list_by_coach(self, coach_id: str) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM teams
                WHERE JSON_CONTAINS(coach_ids, JSON_QUOTE(%s))
                ORDER BY age_group ASC, group_name ASC
                """,
                (coach_id,),
            )
            return [_row_to_team(r) for r in fetchall(cur)]

    def list_by_ids(self, team_ids: Iterable[str]) -> Sequence[Team]:
        ids = list(dict.fromkeys(team_ids))
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teams WHERE id IN ({placeholders}) ORDER BY age_group ASC, group_name ASC",
                tuple(ids),
            )
            return [_row_to_team(r) for r in fetchall(cur)]
