"""Event status state machine.

scheduled -> in-progress -> completed, with cancelled reachable from
scheduled or in-progress by hand only. The time rule below is shared by
the periodic sweep and by on-demand re-derivation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional, Set

from ..core.enums import EventStatus
from ..core.exceptions import PreconditionError
from .model import Event

MANUAL_TRANSITIONS: Mapping[EventStatus, Set[EventStatus]] = {
    EventStatus.SCHEDULED: {EventStatus.IN_PROGRESS, EventStatus.COMPLETED, EventStatus.CANCELLED},
    EventStatus.IN_PROGRESS: {EventStatus.COMPLETED, EventStatus.CANCELLED},
    EventStatus.COMPLETED: set(),
    EventStatus.CANCELLED: set(),
}


@dataclass(frozen=True)
class StatusTransition:
    event_id: str
    title: str
    from_status: EventStatus
    to_status: EventStatus
    at: datetime


def next_status(event: Event, now: datetime) -> Optional[EventStatus]:
    """Status the time rule moves ``event`` to, or None when nothing changes."""
    # End time has priority: a finished event completes even if it never started.
    if event.end_date is not None and event.end_date <= now:
        if event.status.is_terminal:
            return None
        return EventStatus.COMPLETED

    if event.status == EventStatus.SCHEDULED and event.start_date <= now:
        return EventStatus.IN_PROGRESS

    return None


def evaluate(event: Event, now: datetime) -> Optional[StatusTransition]:
    target = next_status(event, now)
    if target is None:
        return None
    return StatusTransition(
        event_id=event.event_id,
        title=event.title,
        from_status=event.status,
        to_status=target,
        at=now,
    )


def ensure_manual_transition(current: EventStatus, target: EventStatus) -> None:
    if current == target:
        return
    if target not in MANUAL_TRANSITIONS[current]:
        raise PreconditionError(
            f"Δεν επιτρέπεται η αλλαγή κατάστασης από {current.value} σε {target.value}",
            code="invalid_status_transition",
        )
