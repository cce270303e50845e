"""Default titles and descriptions for events created without them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_ACADEMY_NAME, DEFAULT_EVENT_DURATION_MINUTES, DEFAULT_LOCATION
from ..core.enums import EVENT_TYPE_LABELS, EventType

WEEKDAYS = ("Δευτέρα", "Τρίτη", "Τετάρτη", "Πέμπτη", "Παρασκευή", "Σάββατο", "Κυριακή")


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def format_duration(minutes: int) -> str:
    """e.g. 90 -> '1 ώρα 30 λεπτά (90 λεπτά)'."""
    minutes = max(int(minutes), 0)
    hours, rest = divmod(minutes, 60)

    def _min(n: int) -> str:
        return "1 λεπτό" if n == 1 else f"{n} λεπτά"

    if hours == 0:
        return _min(rest)

    parts = ["1 ώρα" if hours == 1 else f"{hours} ώρες"]
    if rest:
        parts.append(_min(rest))
    return f"{' '.join(parts)} ({minutes} λεπτά)"


@dataclass(frozen=True)
class EventFormatter:
    academy_name: str = DEFAULT_ACADEMY_NAME
    default_location: str = DEFAULT_LOCATION
    default_duration_minutes: int = DEFAULT_EVENT_DURATION_MINUTES
    timezone_name: str = "Europe/Athens"

    def _local(self, value: datetime) -> datetime:
        return value.astimezone(_zone(self.timezone_name))

    def _when(self, start: datetime) -> str:
        local = self._local(start)
        return f"{WEEKDAYS[local.weekday()]} {local.strftime('%d/%m/%Y')} {local.strftime('%H:%M')}"

    def title(self, *, event_type: EventType, team_name: str, start: datetime, opponent: Optional[str] = None) -> str:
        base = f"{EVENT_TYPE_LABELS[EventType(event_type)]} {team_name} - {self._when(start)}"
        if EventType(event_type) == EventType.MATCH and opponent:
            return f"{self.academy_name} - {opponent} | {base}"
        return base

    def description(
        self,
        *,
        event_type: EventType,
        team_name: str,
        start: datetime,
        end: Optional[datetime],
        location: Optional[str],
    ) -> str:
        if end is not None:
            minutes = int((end - start).total_seconds() // 60)
        else:
            minutes = self.default_duration_minutes
        local = self._local(start)
        return (
            f"{EVENT_TYPE_LABELS[EventType(event_type)]} για την ομάδα {team_name}. "
            f"Ημέρα: {WEEKDAYS[local.weekday()]} {local.strftime('%d/%m/%Y')}, "
            f"ώρα: {local.strftime('%H:%M')}. "
            f"Διάρκεια: {format_duration(minutes)}. "
            f"Τοποθεσία: {(location or '').strip() or self.default_location}."
        )
