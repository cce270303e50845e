from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from ..core.enums import ParticipantMode
from ..core.exceptions import PreconditionError, ValidationError
from ..players.model import Player


def resolve_participants(
    *,
    roster: Sequence[Player],
    mode: ParticipantMode,
    selected_ids: Optional[Iterable[str]] = None,
) -> Tuple[str, ...]:
    """Participant ids for a new event of one team.

    ``roster`` is the team's roster at creation time; the result is a
    snapshot and later roster changes do not touch it.
    """
    roster_ids = [p.player_id for p in roster]

    if ParticipantMode(mode) == ParticipantMode.ALL_ROSTER:
        return tuple(roster_ids)

    selected = list(dict.fromkeys(selected_ids or []))
    if not selected:
        raise PreconditionError("Επιλέξτε τουλάχιστον έναν συμμετέχοντα", code="no_participants")

    allowed = set(roster_ids)
    outside = [pid for pid in selected if pid not in allowed]
    if outside:
        raise ValidationError(f"Οι παίκτες δεν ανήκουν στην ομάδα: {', '.join(outside)}")
    return tuple(selected)


def add_participant(participant_ids: Sequence[str], player_id: str) -> Tuple[str, ...]:
    return tuple(dict.fromkeys([*participant_ids, player_id]))


def remove_participant(participant_ids: Sequence[str], player_id: str) -> Tuple[str, ...]:
    return tuple(pid for pid in participant_ids if pid != player_id)
