from __future__ import annotations

import pytest

from academy_manager.common.slug import slugify, team_slug
from academy_manager.core.exceptions import AuthorizationError, ConflictError, ValidationError

from fakes import NOW


def test_slug_transliterates_greek():
    assert team_slug("Κ10", "Α") == "k10-a"
    assert slugify("Παμπαίδες Β'") == "pampaides-v"


def test_slug_of_symbols_only_is_rejected():
    with pytest.raises(ValidationError):
        slugify("!!!")


def test_create_team_uses_slug_and_default_name(world, container):
    team = container.team_service.create_team(actor=world.coach, age_group="Κ14", group_name="Γ", now=NOW)

    assert team.team_id == "k14-g"
    assert team.name == "Κ14 Γ"
    assert team.coach_ids == ("coach",)
    assert world.teams.get_by_id("k14-g") == team


def test_blank_age_group_defaults_to_open(world, container):
    team = container.team_service.create_team(actor=world.admin, age_group=" ", group_name="Α", now=NOW)

    assert team.team_id == "open-a"
    assert team.age_group == "Open"


def test_duplicate_team_is_rejected(world, container):
    container.team_service.create_team(actor=world.admin, age_group="Κ14", group_name="Α", now=NOW)

    with pytest.raises(ConflictError):
        container.team_service.create_team(actor=world.admin, age_group="Κ14", group_name="Α", now=NOW)


def test_parent_cannot_create_team(world, container):
    with pytest.raises(AuthorizationError):
        container.team_service.create_team(actor=world.parent, age_group="Κ14", group_name="Α")


def test_rename_of_identity_fields_is_rejected(world, container):
    with pytest.raises(ValidationError):
        container.team_service.update_team(actor=world.coach, team_id="k10-a", group_name="Β")

    team = container.team_service.update_team(actor=world.coach, team_id="k10-a", name="Μικροί", now=NOW)
    assert team.name == "Μικροί"


def test_coach_cannot_edit_other_team(world, container):
    with pytest.raises(AuthorizationError):
        container.team_service.update_team(actor=world.coach, team_id="k12-b", name="x")


def test_delete_team_detaches_players(world, container):
    world.players.add("p9", team_ids=["k10-a", "k12-b"])

    detached = container.team_service.delete_team(actor=world.admin, team_id="k10-a", now=NOW)

    assert detached == 4
    assert world.teams.get_by_id("k10-a") is None
    p9 = world.players.get_by_id("p9")
    assert p9.team_ids == ("k12-b",)
    assert p9.main_team_id == "k12-b"
    assert world.players.get_by_id("p1").main_team_id is None


def test_parent_sees_teams_of_own_children(world, container):
    teams = container.team_service.list_teams(actor=world.other_parent)

    assert {t.team_id for t in teams} == {"k10-a", "k12-b"}
    assert [t.team_id for t in container.team_service.list_teams(actor=world.parent)] == ["k10-a"]
