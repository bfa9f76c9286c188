import itertools

import pytest

from qlab.domain.types import Position, ACTIONS
from qlab.domain.qlearning import next_position
from conftest import make_grid


def test_move_into_open_cell() -> None:
    grid = make_grid(3, 3)
    assert next_position(Position(1, 1), "up", grid) == (1, 0)
    assert next_position(Position(1, 1), "down", grid) == (1, 2)
    assert next_position(Position(1, 1), "left", grid) == (0, 1)
    assert next_position(Position(1, 1), "right", grid) == (2, 1)


def test_boundary_keeps_agent_in_place() -> None:
    grid = make_grid(3, 4)
    assert next_position(Position(0, 0), "up", grid) == (0, 0)
    assert next_position(Position(0, 0), "left", grid) == (0, 0)
    assert next_position(Position(3, 2), "right", grid) == (3, 2)
    assert next_position(Position(3, 2), "down", grid) == (3, 2)
    # Clamping one axis leaves the other untouched
    assert next_position(Position(2, 0), "up", grid) == (2, 0)


def test_wall_bounces_back_from_every_side() -> None:
    grid = make_grid(3, 3, **{"1_1": ("wall", 0.0)})
    assert next_position(Position(1, 0), "down", grid) == (1, 0)
    assert next_position(Position(1, 2), "up", grid) == (1, 2)
    assert next_position(Position(0, 1), "right", grid) == (0, 1)
    assert next_position(Position(2, 1), "left", grid) == (2, 1)


def test_traps_and_goals_are_passable() -> None:
    grid = make_grid(2, 3, **{"1_0": ("trap", -10.0), "2_0": ("goal", 100.0)})
    assert next_position(Position(0, 0), "right", grid) == (1, 0)
    assert next_position(Position(1, 0), "right", grid) == (2, 0)


def test_transition_is_deterministic() -> None:
    grid = make_grid(3, 3, **{"1_1": ("wall", 0.0), "2_2": ("trap", -10.0)})
    for x, y, action in itertools.product(range(3), range(3), ACTIONS):
        pos = Position(x, y)
        assert next_position(pos, action, grid) == next_position(pos, action, grid)


def test_returns_position_tuple() -> None:
    grid = make_grid(2, 2)
    result = next_position((0, 0), "right", grid)
    assert isinstance(result, Position)
    assert result.x == 1 and result.y == 0


def test_unknown_action_raises() -> None:
    grid = make_grid(2, 2)
    with pytest.raises(KeyError):
        next_position(Position(0, 0), "jump", grid)
