from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from academy_manager.core.enums import AttendanceStatus, EventStatus
from academy_manager.core.exceptions import AuthorizationError, NotFoundError, PreconditionError, ValidationError
from academy_manager.events.model import AttendanceDeclaration
from academy_manager.sweep.service import EventStatusSweeper

from fakes import NOW, InMemoryEvents, make_event


def _scheduled(world, **kwargs):
    defaults = dict(start_date=NOW + timedelta(days=1), participant_ids=("p1", "p2", "p3"))
    defaults.update(kwargs)
    return world.events.add(make_event("e1", **defaults))


def test_submit_on_scheduled_event(world, container):
    _scheduled(world)

    declaration = container.attendance_service.submit(
        actor=world.parent, event_id="e1", player_id="p1", status="present", notes="  θα αργήσει  ", now=NOW
    )

    stored = world.events.events["e1"].attendance_declarations["p1"]
    assert declaration == stored
    assert stored.parent_id == "parent"
    assert stored.status == AttendanceStatus.PRESENT
    assert stored.notes == "θα αργήσει"
    assert stored.timestamp == NOW


def test_submit_rejected_once_event_started(world, container):
    _scheduled(world, status=EventStatus.IN_PROGRESS)

    with pytest.raises(PreconditionError) as exc:
        container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present")

    assert exc.value.code == "attendance_closed"
    assert world.events.events["e1"].attendance_declarations == {}


def test_submit_requires_participant(world, container):
    _scheduled(world, participant_ids=("p2",))

    with pytest.raises(PreconditionError):
        container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="absent")


def test_parent_cannot_declare_for_other_child(world, container):
    _scheduled(world)

    with pytest.raises(AuthorizationError):
        container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p3", status="present")


def test_coach_cannot_submit(world, container):
    _scheduled(world)

    with pytest.raises(AuthorizationError):
        container.attendance_service.submit(actor=world.coach, event_id="e1", player_id="p1", status="present")


def test_second_submit_overwrites_first(world, container):
    _scheduled(world)
    service = container.attendance_service

    service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present", now=NOW)
    service.submit(actor=world.parent, event_id="e1", player_id="p1", status="absent", now=NOW + timedelta(minutes=1))

    stored = world.events.events["e1"].attendance_declarations
    assert len(stored) == 1
    assert stored["p1"].status == AttendanceStatus.ABSENT


def test_update_requires_existing_declaration(world, container):
    _scheduled(world)

    with pytest.raises(PreconditionError):
        container.attendance_service.update(actor=world.parent, event_id="e1", player_id="p1", status="maybe")


def test_update_keeps_notes_unless_given(world, container):
    _scheduled(world)
    service = container.attendance_service
    service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present", notes="με λεωφορείο", now=NOW)

    later = NOW + timedelta(hours=1)
    declaration = service.update(actor=world.parent, event_id="e1", player_id="p1", status="maybe", now=later)

    assert declaration.status == AttendanceStatus.MAYBE
    assert declaration.notes == "με λεωφορείο"
    assert declaration.timestamp == later


def test_delete_removes_entry(world, container):
    _scheduled(world)
    service = container.attendance_service
    service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present", now=NOW)

    service.delete(actor=world.parent, event_id="e1", player_id="p1", now=NOW)

    assert "p1" not in world.events.events["e1"].attendance_declarations
    with pytest.raises(NotFoundError):
        service.delete(actor=world.parent, event_id="e1", player_id="p1", now=NOW)


def test_summary_counts_undeclared(world, container):
    for pid in ("p5", "p6"):
        world.players.add(pid, team_ids=["k10-a"])
    declarations = {
        "p1": AttendanceDeclaration("parent", AttendanceStatus.PRESENT, NOW),
        "p2": AttendanceDeclaration("parent", AttendanceStatus.PRESENT, NOW),
        "p3": AttendanceDeclaration("parent2", AttendanceStatus.ABSENT, NOW),
    }
    _scheduled(world, participant_ids=("p1", "p2", "p3", "p5", "p6"), attendance_declarations=declarations)

    summary = container.attendance_service.summary(actor=world.coach, event_id="e1")

    assert (summary.present, summary.absent, summary.maybe, summary.undeclared, summary.total) == (2, 1, 0, 2, 5)


def test_read_hydrated_joins_players_with_declarations(world, container):
    _scheduled(world, participant_ids=("p2", "p1"))
    container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present", now=NOW)

    rows = container.attendance_service.read_hydrated(actor=world.parent, event_id="e1")

    assert [r.player.player_id for r in rows] == ["p2", "p1"]
    assert rows[0].declaration is None
    assert rows[1].declaration.status == AttendanceStatus.PRESENT
    assert rows[1].to_dict()["attendanceStatus"]["status"] == "present"
    assert rows[1].to_dict()["attendanceStatus"]["label"] == "Παρών"


def test_submit_sees_cancel_made_by_another_process(world):
    _scheduled(world)
    first, second = world.container(cached=True), world.container(cached=True)
    second.event_service.get_event(actor=world.parent, event_id="e1")

    first.event_service.set_status(actor=world.admin, event_id="e1", status="cancelled", now=NOW)

    with pytest.raises(PreconditionError) as exc:
        second.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present")
    assert exc.value.code == "attendance_closed"
    assert world.events.events["e1"].attendance_declarations == {}


def test_submit_sees_sweep_made_by_another_process(world):
    _scheduled(world, start_date=NOW - timedelta(minutes=5))
    web = world.container(cached=True)
    web.event_service.get_event(actor=world.parent, event_id="e1")

    EventStatusSweeper(world.events).run(NOW)

    with pytest.raises(PreconditionError) as exc:
        web.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present")
    assert exc.value.code == "attendance_closed"


class _StartsRightAfterRead(InMemoryEvents):
    """The event leaves ``scheduled`` between the service's read and its write."""

    def get_current(self, event_id):
        event = super().get_current(event_id)
        if event is not None and event.status == EventStatus.SCHEDULED:
            self.events[event_id] = replace(event, status=EventStatus.IN_PROGRESS)
        return event


def test_submit_write_is_guarded_by_status(world):
    world.events = _StartsRightAfterRead()
    _scheduled(world)
    container = world.container()

    with pytest.raises(PreconditionError) as exc:
        container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present")

    assert exc.value.code == "attendance_closed"
    assert world.events.events["e1"].attendance_declarations == {}


def test_non_text_notes_are_a_validation_error(world, container):
    _scheduled(world)

    with pytest.raises(ValidationError):
        container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present", notes=5)
