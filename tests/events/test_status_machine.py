from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from academy_manager.core.enums import EventStatus
from academy_manager.core.exceptions import PreconditionError
from academy_manager.events.status import ensure_manual_transition, evaluate, next_status

from fakes import NOW, make_event


def test_end_time_has_priority_over_start():
    # Never moved to in-progress, but already over: goes straight to completed.
    event = make_event("e1", start_date=NOW - timedelta(hours=2), end_date=NOW - timedelta(minutes=30))

    assert next_status(event, NOW) == EventStatus.COMPLETED


def test_in_progress_completes_when_end_passes():
    event = make_event(
        "e1",
        start_date=NOW - timedelta(hours=2),
        end_date=NOW,
        status=EventStatus.IN_PROGRESS,
    )

    assert next_status(event, NOW) == EventStatus.COMPLETED


def test_started_event_without_end_goes_in_progress():
    event = make_event("e1", start_date=NOW - timedelta(minutes=1))

    assert next_status(event, NOW) == EventStatus.IN_PROGRESS


def test_future_event_does_not_change():
    event = make_event("e1", start_date=NOW + timedelta(days=1), end_date=NOW + timedelta(days=1, hours=1))

    assert next_status(event, NOW) is None
    assert evaluate(event, NOW) is None


def test_terminal_events_are_left_alone():
    past = dict(start_date=NOW - timedelta(hours=3), end_date=NOW - timedelta(hours=2))

    assert next_status(make_event("e1", status=EventStatus.CANCELLED, **past), NOW) is None
    assert next_status(make_event("e2", status=EventStatus.COMPLETED, **past), NOW) is None


def test_rule_is_idempotent():
    event = make_event("e1", start_date=NOW - timedelta(minutes=5), end_date=NOW + timedelta(minutes=85))

    transition = evaluate(event, NOW)
    assert transition is not None
    assert transition.from_status == EventStatus.SCHEDULED
    assert transition.to_status == EventStatus.IN_PROGRESS

    applied = replace(event, status=transition.to_status)
    assert evaluate(applied, NOW) is None


def test_manual_cancel_allowed_from_scheduled_and_in_progress():
    ensure_manual_transition(EventStatus.SCHEDULED, EventStatus.CANCELLED)
    ensure_manual_transition(EventStatus.IN_PROGRESS, EventStatus.CANCELLED)


def test_manual_transition_out_of_terminal_is_rejected():
    with pytest.raises(PreconditionError) as exc:
        ensure_manual_transition(EventStatus.COMPLETED, EventStatus.SCHEDULED)

    assert exc.value.code == "invalid_status_transition"

    with pytest.raises(PreconditionError):
        ensure_manual_transition(EventStatus.CANCELLED, EventStatus.IN_PROGRESS)
