from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..common.datetime_utils import now_utc
from ..core.enums import Action, Resource
from ..core.exceptions import DomainError
from ..core.permissions import require
from ..events.repository import EventRepository
from ..events.status import StatusTransition, evaluate
from ..users.model import SessionUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    checked: int
    transitions: List[StatusTransition] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return len(self.transitions)

    def to_dict(self) -> dict:
        return {
            "updated": self.updated,
            "checked": self.checked,
            "transitions": [
                {
                    "eventId": t.event_id,
                    "title": t.title,
                    "from": t.from_status.value,
                    "to": t.to_status.value,
                }
                for t in self.transitions
            ],
            "failed": self.failed,
        }


class EventStatusSweeper:
    """Applies the time-based status rule to every open event."""

    def __init__(self, events: EventRepository):
        self._events = events

    def run(self, now: Optional[datetime] = None) -> SweepResult:
        """One pass. Events are written one by one; a failed write is logged
        and the pass moves on to the next event."""
        now = now or now_utc()
        candidates = self._events.list_open()

        transitions: List[StatusTransition] = []
        failed: List[Dict[str, Any]] = []
        for event in candidates:
            transition = evaluate(event, now)
            if transition is None:
                continue
            try:
                if not self._events.update_status(event.event_id, transition.to_status, now):
                    logger.warning("Event %s disappeared during sweep", event.event_id)
                    continue
            except DomainError as e:
                logger.error("Sweep failed for event %s: %s", event.event_id, e.message)
                failed.append({"eventId": event.event_id, **e.to_dict()})
                continue

            logger.info(
                "Event %s (%s): %s -> %s",
                event.event_id,
                event.title,
                transition.from_status.value,
                transition.to_status.value,
            )
            transitions.append(transition)

        logger.info("Updated %d event(s) of %d checked", len(transitions), len(candidates))
        return SweepResult(checked=len(candidates), transitions=transitions, failed=failed)

    def run_on_demand(self, *, actor: SessionUser, now: Optional[datetime] = None) -> SweepResult:
        require(actor.role, Action.RUN_SWEEP, Resource.SWEEP)
        logger.info("Manual sweep requested by %s", actor.user_id)
        return self.run(now)
