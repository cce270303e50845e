from __future__ import annotations

from datetime import timedelta

import pytest

from academy_manager.core.enums import EventStatus, EventType, ParticipantMode
from academy_manager.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PartialBatchError,
    PreconditionError,
    ValidationError,
)

from fakes import NOW, make_event

START = (NOW + timedelta(days=2)).isoformat()


def test_create_single_team_event_with_all_roster(world, container):
    [event] = container.event_service.create_events(
        actor=world.coach,
        event_type="training",
        team_ids=["k10-a"],
        start_date=START,
        now=NOW,
    )

    assert event.event_id
    assert event.team_ids == ("k10-a",)
    assert event.participant_ids == ("p1", "p2", "p3")
    assert event.status == EventStatus.SCHEDULED
    assert event.title.startswith("Προπόνηση K10 A - ")
    assert "(90 λεπτά)" in event.description
    assert event.location == "Γήπεδο Ακαδημίας"
    assert world.events.events[event.event_id].created_by == "coach"


def test_create_keeps_given_title_and_explicit_participants(world, container):
    [event] = container.event_service.create_events(
        actor=world.coach,
        event_type=EventType.MATCH,
        team_ids=["k10-a"],
        start_date=START,
        title="  Φιλικό  ",
        opponent="Άρης",
        participant_mode=ParticipantMode.EXPLICIT,
        participant_ids=["p2"],
        now=NOW,
    )

    assert event.title == "Φιλικό"
    assert event.participant_ids == ("p2",)
    assert event.opponent == "Άρης"


def test_create_rejects_end_before_start(world, container):
    with pytest.raises(ValidationError):
        container.event_service.create_events(
            actor=world.admin,
            event_type="training",
            team_ids=["k10-a"],
            start_date=START,
            end_date=START,
            now=NOW,
        )


def test_coach_cannot_create_for_other_team(world, container):
    with pytest.raises(AuthorizationError):
        container.event_service.create_events(
            actor=world.coach, event_type="training", team_ids=["k12-b"], start_date=START, now=NOW
        )


def test_parent_cannot_create_events(world, container):
    with pytest.raises(AuthorizationError):
        container.event_service.create_events(
            actor=world.parent, event_type="training", team_ids=["k10-a"], start_date=START, now=NOW
        )


def test_multi_team_creation_makes_one_event_per_team(world, container):
    events = container.event_service.create_events(
        actor=world.admin,
        event_type="event",
        team_ids=["k10-a", "k12-b"],
        start_date=START,
        location="Κλειστό",
        now=NOW,
    )

    assert [e.team_ids for e in events] == [("k10-a",), ("k12-b",)]
    assert events[0].participant_ids == ("p1", "p2", "p3")
    assert events[1].participant_ids == ("p4",)
    assert events[0].title != events[1].title
    assert {e.location for e in events} == {"Κλειστό"}


def test_multi_team_partial_failure_keeps_successful_events(world, container):
    world.events.fail_create_for_team.add("k12-b")

    with pytest.raises(PartialBatchError) as exc:
        container.event_service.create_events(
            actor=world.admin, event_type="training", team_ids=["k10-a", "k12-b"], start_date=START, now=NOW
        )

    assert len(exc.value.succeeded) == 1
    assert exc.value.failed[0]["teamId"] == "k12-b"
    assert exc.value.failed[0]["code"] == "backend_unavailable"
    assert len(world.events.events) == 1


def test_update_rejects_more_than_one_team(world, container):
    world.events.add(make_event("e1"))

    with pytest.raises(ValidationError):
        container.event_service.update_event(
            actor=world.admin, event_id="e1", changes={"teamIds": ["k10-a", "k12-b"]}, now=NOW
        )


def test_moving_event_to_another_team_takes_its_roster(world, container):
    [event] = container.event_service.create_events(
        actor=world.admin, event_type="training", team_ids=["k10-a"], start_date=START, now=NOW
    )

    moved = container.event_service.update_event(
        actor=world.admin, event_id=event.event_id, changes={"teamIds": ["k12-b"]}, now=NOW
    )

    assert moved.team_ids == ("k12-b",)
    assert moved.participant_ids == ("p4",)


def test_moving_event_with_selection_keeps_only_new_team_players(world, container):
    world.events.add(make_event("e1", participant_ids=("p1", "p2")))

    with pytest.raises(ValidationError):
        container.event_service.update_event(
            actor=world.admin, event_id="e1", changes={"teamIds": ["k12-b"], "participantIds": ["p1"]}, now=NOW
        )

    moved = container.event_service.update_event(
        actor=world.admin, event_id="e1", changes={"teamIds": ["k12-b"], "participantIds": ["p4"]}, now=NOW
    )
    assert moved.participant_ids == ("p4",)


def test_non_text_fields_are_validation_errors(world, container):
    with pytest.raises(ValidationError):
        container.event_service.create_events(
            actor=world.coach, event_type="training", team_ids=["k10-a"], start_date=START, title=123
        )
    with pytest.raises(ValidationError):
        container.event_service.create_events(
            actor=world.coach, event_type="training", team_ids=["k10-a"], start_date=START, location=["x"]
        )

    world.events.add(make_event("e1"))
    with pytest.raises(ValidationError):
        container.event_service.update_event(actor=world.coach, event_id="e1", changes={"notes": 7}, now=NOW)


def test_participants_are_a_snapshot_of_the_roster(world, container):
    [event] = container.event_service.create_events(
        actor=world.coach, event_type="training", team_ids=["k10-a"], start_date=START, now=NOW
    )

    container.player_service.remove_from_team(actor=world.coach, player_id="p3", team_id="k10-a", now=NOW)

    assert world.players.get_by_id("p3").team_ids == ()
    stored = container.event_service.get_event(actor=world.coach, event_id=event.event_id)
    assert stored.participant_ids == ("p1", "p2", "p3")


def test_update_changes_fields_and_keeps_declarations(world, container):
    world.events.add(make_event("e1", participant_ids=("p1",)))
    container.attendance_service.submit(actor=world.parent, event_id="e1", player_id="p1", status="present", now=NOW)

    event = container.event_service.update_event(
        actor=world.coach,
        event_id="e1",
        changes={"location": "Γήπεδο 2", "score": {"home": 3, "away": 1}},
        now=NOW,
    )

    assert event.location == "Γήπεδο 2"
    assert event.score.home == 3
    assert "p1" in event.attendance_declarations


def test_get_missing_event_is_not_found(world, container):
    with pytest.raises(NotFoundError):
        container.event_service.get_event(actor=world.admin, event_id="nope")


def test_parent_sees_only_events_with_own_children(world, container):
    world.events.add(make_event("e1", participant_ids=("p1",)))
    world.events.add(make_event("e2", participant_ids=("p3",)))
    world.events.add(make_event("e3", team_ids=("k12-b",), participant_ids=("p4",)))

    ids = {e.event_id for e in container.event_service.list_events(actor=world.parent)}

    assert ids == {"e1"}
    with pytest.raises(AuthorizationError):
        container.event_service.get_event(actor=world.parent, event_id="e2")


def test_coach_sees_events_of_own_teams(world, container):
    world.events.add(make_event("e1"))
    world.events.add(make_event("e3", team_ids=("k12-b",)))

    ids = {e.event_id for e in container.event_service.list_events(actor=world.coach)}

    assert ids == {"e1"}


def test_list_filters_by_type_and_range(world, container):
    world.events.add(make_event("e1", type=EventType.MATCH, start_date=NOW + timedelta(days=1)))
    world.events.add(make_event("e2", type=EventType.TRAINING, start_date=NOW + timedelta(days=1)))
    world.events.add(make_event("e3", type=EventType.MATCH, start_date=NOW + timedelta(days=10)))

    events = container.event_service.list_events(
        actor=world.admin,
        event_type=EventType.MATCH,
        start=NOW,
        end=NOW + timedelta(days=5),
    )

    assert [e.event_id for e in events] == ["e1"]


def test_upcoming_excludes_cancelled_and_is_ascending(world, container):
    world.events.add(make_event("late", start_date=NOW + timedelta(days=3)))
    world.events.add(make_event("soon", start_date=NOW + timedelta(days=1)))
    world.events.add(make_event("off", start_date=NOW + timedelta(hours=1), status=EventStatus.CANCELLED))
    world.events.add(make_event("past", start_date=NOW - timedelta(days=1)))

    events = container.event_service.upcoming(actor=world.admin, now=NOW, limit=10)

    assert [e.event_id for e in events] == ["soon", "late"]


def test_set_status_follows_manual_graph(world, container):
    world.events.add(make_event("e1", start_date=NOW + timedelta(days=1)))

    event = container.event_service.set_status(actor=world.coach, event_id="e1", status="cancelled", now=NOW)
    assert event.status == EventStatus.CANCELLED
    assert event.updated_at == NOW

    with pytest.raises(PreconditionError):
        container.event_service.set_status(actor=world.coach, event_id="e1", status="scheduled", now=NOW)


def test_add_and_remove_participant(world, container):
    world.events.add(make_event("e1", participant_ids=("p1",)))

    event = container.event_service.add_participant(actor=world.coach, event_id="e1", player_id="p2", now=NOW)
    assert event.participant_ids == ("p1", "p2")

    with pytest.raises(ValidationError):
        container.event_service.add_participant(actor=world.coach, event_id="e1", player_id="p4", now=NOW)

    event = container.event_service.remove_participant(actor=world.coach, event_id="e1", player_id="p1", now=NOW)
    assert event.participant_ids == ("p2",)


def test_delete_event(world, container):
    world.events.add(make_event("e1"))
    world.events.add(make_event("e2", team_ids=("k12-b",)))

    container.event_service.delete_event(actor=world.coach, event_id="e1")

    assert "e1" not in world.events.events
    with pytest.raises(AuthorizationError):
        container.event_service.delete_event(actor=world.coach, event_id="e2")
