from __future__ import annotations

import pytest

from fakes import World


@pytest.fixture
def world() -> World:
    return World()


@pytest.fixture
def container(world):
    return world.container()
