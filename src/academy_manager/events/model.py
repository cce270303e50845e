from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping, Optional, Tuple

from ..common.datetime_utils import isoformat, to_instant
from ..core.enums import EVENT_STATUS_LABELS, EVENT_TYPE_LABELS, AttendanceStatus, EventStatus, EventType


@dataclass(frozen=True)
class AttendanceDeclaration:
    """A parent's answer for one player on one event."""

    parent_id: str
    status: AttendanceStatus
    timestamp: datetime
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "parentId": self.parent_id,
            "status": self.status.value,
            "timestamp": isoformat(self.timestamp),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Score:
    home: int
    away: int

    def to_dict(self) -> dict:
        return {"home": self.home, "away": self.away}


@dataclass(frozen=True)
class Event:
    """Domain entity: training, match or other academy event.

    ``attendance_declarations`` is embedded (player id -> declaration) so one
    declaration per (event, player) is always a single document write.
    """

    event_id: str
    title: str
    type: EventType
    start_date: datetime
    end_date: Optional[datetime] = None
    description: str = ""
    location: str = ""
    team_ids: Tuple[str, ...] = field(default_factory=tuple)
    participant_ids: Tuple[str, ...] = field(default_factory=tuple)
    opponent: str = ""
    status: EventStatus = EventStatus.SCHEDULED
    notes: str = ""
    score: Optional[Score] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attendance_declarations: Mapping[str, AttendanceDeclaration] = field(default_factory=dict)

    @property
    def duration_minutes(self) -> Optional[int]:
        if self.end_date is None:
            return None
        return int((self.end_date - self.start_date).total_seconds() // 60)

    def has_participant(self, player_id: str) -> bool:
        return player_id in self.participant_ids

    def to_dict(self, *, include_declarations: bool = True) -> dict:
        data = {
            "id": self.event_id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "typeLabel": EVENT_TYPE_LABELS[self.type],
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "location": self.location,
            "teamIds": list(self.team_ids),
            "participantIds": list(self.participant_ids),
            "opponent": self.opponent,
            "status": self.status.value,
            "statusLabel": EVENT_STATUS_LABELS[self.status],
            "notes": self.notes,
            "score": self.score.to_dict() if self.score else None,
            "createdBy": self.created_by,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_declarations:
            data["attendanceDeclarations"] = {
                pid: d.to_dict() for pid, d in self.attendance_declarations.items()
            }
        return data


@dataclass(frozen=True)
class AttendanceSummary:
    """Derived counts for an event, recomputed on every read."""

    present: int
    absent: int
    maybe: int
    undeclared: int
    total: int

    def to_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "maybe": self.maybe,
            "undeclared": self.undeclared,
            "total": self.total,
        }


def declarations_from_dict(raw: Optional[Mapping[str, Mapping]]) -> Dict[str, AttendanceDeclaration]:
    """Build declarations from their stored (camelCase) shape."""
    out: Dict[str, AttendanceDeclaration] = {}
    for player_id, d in (raw or {}).items():
        out[str(player_id)] = AttendanceDeclaration(
            parent_id=str(d.get("parentId") or ""),
            status=AttendanceStatus(d["status"]),
            timestamp=to_instant(d.get("timestamp")),
            notes=d.get("notes") or "",
        )
    return out
