from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Ρόλος χρήστη, χρησιμοποιείται για τον έλεγχο πρόσβασης."""

    PARENT = "parent"
    COACH = "coach"
    SUPERADMIN = "superadmin"


class EventType(str, Enum):
    TRAINING = "training"
    MATCH = "match"
    EVENT = "event"


class EventStatus(str, Enum):
    """Lifecycle of an event.

    COMPLETED and CANCELLED are terminal.
    """

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (EventStatus.COMPLETED, EventStatus.CANCELLED)


class AttendanceStatus(str, Enum):
    """Δήλωση παρουσίας γονέα για έναν παίκτη."""

    PRESENT = "present"
    ABSENT = "absent"
    MAYBE = "maybe"


class ParticipantMode(str, Enum):
    """How participantIds are chosen when an event is created."""

    ALL_ROSTER = "all"
    EXPLICIT = "explicit"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SUBMIT_ATTENDANCE = "submit_attendance"
    VIEW_ATTENDANCE = "view_attendance"
    RUN_SWEEP = "run_sweep"


class Resource(str, Enum):
    TEAM = "team"
    PLAYER = "player"
    EVENT = "event"
    ATTENDANCE = "attendance"
    USER = "user"
    SWEEP = "sweep"


EVENT_TYPE_LABELS = {
    EventType.TRAINING: "Προπόνηση",
    EventType.MATCH: "Αγώνας",
    EventType.EVENT: "Εκδήλωση",
}

EVENT_STATUS_LABELS = {
    EventStatus.SCHEDULED: "Προγραμματισμένο",
    EventStatus.IN_PROGRESS: "Σε Εξέλιξη",
    EventStatus.COMPLETED: "Ολοκληρωμένο",
    EventStatus.CANCELLED: "Ακυρωμένο",
}

ATTENDANCE_STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Παρών",
    AttendanceStatus.ABSENT: "Απών",
    AttendanceStatus.MAYBE: "Ίσως",
}
