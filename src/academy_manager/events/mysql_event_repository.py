from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EventStatus, EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    from_db_instant,
    json_member_path,
    load_json,
    to_db_instant,
)
from .model import AttendanceDeclaration, Event, Score, declarations_from_dict
from .repository import EventRepository

_COLUMNS = (
    "id, title, description, type, start_date, end_date, location, team_ids, participant_ids, opponent, "
    "status, notes, score, attendance_declarations, created_by, created_at, updated_at"
)
_TERMINAL = tuple(s.value for s in EventStatus if s.is_terminal)


def _row_to_event(r: dict) -> Event:
    score = load_json(r.get("score"), None)
    return Event(
        event_id=str(r["id"]),
        title=r["title"],
        description=r.get("description") or "",
        type=EventType(r["type"]),
        start_date=from_db_instant(r["start_date"]),
        end_date=from_db_instant(r.get("end_date")),
        location=r.get("location") or "",
        team_ids=tuple(load_json(r.get("team_ids"), [])),
        participant_ids=tuple(load_json(r.get("participant_ids"), [])),
        opponent=r.get("opponent") or "",
        status=EventStatus(r["status"]),
        notes=r.get("notes") or "",
        score=Score(home=int(score["home"]), away=int(score["away"])) if score else None,
        created_by=r.get("created_by"),
        created_at=from_db_instant(r.get("created_at")),
        updated_at=from_db_instant(r.get("updated_at")),
        attendance_declarations=declarations_from_dict(load_json(r.get("attendance_declarations"), {})),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str = "", params: tuple = (), order: str = "ORDER BY start_date DESC") -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events {where} {order}", params)
            return [_row_to_event(r) for r in fetchall(cur)]

    def get_by_id(self, event_id: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE id=%s", (event_id,))
            r = fetchone(cur)
            return _row_to_event(r) if r else None

    def get_current(self, event_id: str) -> Optional[Event]:
        return self.get_by_id(event_id)

    def create(self, event: Event) -> str:
        event_id = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO events({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event_id,
                    event.title,
                    event.description,
                    event.type.value,
                    to_db_instant(event.start_date),
                    to_db_instant(event.end_date),
                    event.location,
                    dump_json(list(event.team_ids)),
                    dump_json(list(event.participant_ids)),
                    event.opponent,
                    event.status.value,
                    event.notes,
                    dump_json(event.score.to_dict()) if event.score else None,
                    dump_json({pid: d.to_dict() for pid, d in event.attendance_declarations.items()}),
                    event.created_by,
                    to_db_instant(event.created_at),
                    to_db_instant(event.updated_at),
                ),
            )
        return event_id

    def update(self, event: Event) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events
                SET title=%s, description=%s, type=%s, start_date=%s, end_date=%s, location=%s,
                    team_ids=%s, participant_ids=%s, opponent=%s, status=%s, notes=%s, score=%s, updated_at=%s
                WHERE id=%s
                """,
                (
                    event.title,
                    event.description,
                    event.type.value,
                    to_db_instant(event.start_date),
                    to_db_instant(event.end_date),
                    event.location,
                    dump_json(list(event.team_ids)),
                    dump_json(list(event.participant_ids)),
                    event.opponent,
                    event.status.value,
                    event.notes,
                    dump_json(event.score.to_dict()) if event.score else None,
                    to_db_instant(event.updated_at),
                    event.event_id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE id=%s", (event_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Event]:
        return self._select()

    def list_by_team(self, team_id: str) -> Sequence[Event]:
        return self._select("WHERE JSON_CONTAINS(team_ids, JSON_QUOTE(%s))", (team_id,))

    def list_by_type(self, event_type: EventType) -> Sequence[Event]:
        return self._select("WHERE type=%s", (EventType(event_type).value,))

    def list_by_date_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        return self._select(
            "WHERE start_date BETWEEN %s AND %s",
            (to_db_instant(start), to_db_instant(end)),
            order="ORDER BY start_date ASC",
        )

    def list_upcoming(self, now: datetime, limit: Optional[int] = None) -> Sequence[Event]:
        order = "ORDER BY start_date ASC"
        if limit is not None:
            order += f" LIMIT {int(limit)}"
        return self._select(
            "WHERE start_date >= %s AND status <> %s",
            (to_db_instant(now), EventStatus.CANCELLED.value),
            order=order,
        )

    def list_open(self) -> Sequence[Event]:
        placeholders = ",".join(["%s"] * len(_TERMINAL))
        return self._select(
            f"WHERE status NOT IN ({placeholders})",
            _TERMINAL,
            order="ORDER BY start_date ASC",
        )

    def update_status(self, event_id: str, status: EventStatus, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE events SET status=%s, updated_at=%s WHERE id=%s",
                (EventStatus(status).value, to_db_instant(updated_at), event_id),
            )
            return cur.rowcount > 0

    def set_participants(self, event_id: str, participant_ids: Sequence[str], updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE events SET participant_ids=%s, updated_at=%s WHERE id=%s",
                (dump_json(list(participant_ids)), to_db_instant(updated_at), event_id),
            )
            return cur.rowcount > 0

    def set_declaration(
        self,
        event_id: str,
        player_id: str,
        declaration: AttendanceDeclaration,
        *,
        only_if_status: Optional[EventStatus] = None,
    ) -> bool:
        # Single-member JSON_SET: concurrent writes for other players are not overwritten.
        where = "WHERE id=%s"
        params = [
            json_member_path(player_id),
            dump_json(declaration.to_dict()),
            to_db_instant(declaration.timestamp),
            event_id,
        ]
        if only_if_status is not None:
            # Status is checked in the same statement so a concurrent sweep or cancel wins.
            where += " AND status=%s"
            params.append(EventStatus(only_if_status).value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE events
                SET attendance_declarations = JSON_SET(attendance_declarations, %s, CAST(%s AS JSON)),
                    updated_at=%s
                {where}
                """,
                tuple(params),
            )
            return cur.rowcount > 0

    def remove_declaration(self, event_id: str, player_id: str, updated_at: datetime) -> bool:
        path = json_member_path(player_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events
                SET attendance_declarations = JSON_REMOVE(attendance_declarations, %s), updated_at=%s
                WHERE id=%s AND JSON_CONTAINS_PATH(attendance_declarations, 'one', %s)
                """,
                (path, to_db_instant(updated_at), event_id, path),
            )
            return cur.rowcount > 0
