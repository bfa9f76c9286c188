import random

import numpy as np
import pytest

from qlab.app.session import LabSession
from qlab.domain.types import LabConfig, Position, ACTION_TO_INT, DISPLAY_ACTIONS
from qlab.domain.qlearning import GOAL_LOG_LINE, format_number


@pytest.fixture
def session():
    return LabSession(LabConfig(rows=4, cols=4, seed=7))


def test_initial_state(session) -> None:
    assert session.grid.rows == 4 and session.grid.cols == 4
    assert session.agent_pos == (0, 0)
    assert session.reference_table.shape == (4, 4, 4)
    assert session.user_table.shape == (4, 4, 4)
    assert session.log == []
    assert session.last_step is None
    assert not session.can_undo


def test_goal_step_restarts_at_start(session) -> None:
    session.set_cell_type((0, 1), "start")
    session.set_cell_type((1, 1), "goal")
    assert session.agent_pos == (0, 1)

    trace = session.perform_action("right")

    assert trace.terminal
    assert session.agent_pos == (0, 1)
    assert session.reference_table[1, 0, ACTION_TO_INT["right"]] == 50.0
    assert session.log[0] == GOAL_LOG_LINE
    assert session.log[1] == "S(0,1) + A(RIGHT) -> R(100) -> S'(1,1)"


def test_trap_step_continues_episode(session) -> None:
    session.set_cell_type((1, 0), "trap")

    session.perform_action("right")
    assert session.agent_pos == (1, 0)
    assert session.reference_table[0, 0, ACTION_TO_INT["right"]] == -5.0

    session.perform_action("right")
    assert session.agent_pos == (2, 0)
    assert GOAL_LOG_LINE not in session.log


def test_log_is_newest_first(session) -> None:
    session.perform_action("right")
    session.perform_action("down")
    assert session.log[0].startswith("S(1,0) + A(DOWN)")
    assert session.log[1].startswith("S(0,0) + A(RIGHT)")


def test_undo_round_trip(session) -> None:
    session.set_cell_type((1, 0), "goal")
    session.perform_action("down")
    session.set_user_entry((0, 0), "down", "1.5")

    agent = session.agent_pos
    reference = session.reference_table.copy()
    user = session.user_table.copy()
    log = list(session.log)
    last_step = session.last_step

    session.perform_action("up")
    session.set_user_entry((0, 1), "up", "oops")
    assert session.undo()

    assert session.agent_pos == agent
    assert np.array_equal(session.reference_table, reference)
    assert np.array_equal(session.user_table, user)
    assert session.log == log
    assert session.last_step == last_step


def test_undo_walks_back_every_step(session) -> None:
    session.set_cell_type((2, 0), "goal")
    for action in ["right", "right", "down", "left"]:
        session.perform_action(action)
    assert session.history_depth == 4

    while session.undo():
        pass

    assert session.agent_pos == (0, 0)
    assert np.all(session.reference_table == 0.0)
    assert session.log == []
    assert session.last_step is None
    assert not session.can_undo


def test_undo_with_empty_history_is_noop(session) -> None:
    assert session.undo() is False
    assert session.agent_pos == (0, 0)


def test_history_snapshot_is_not_aliased(session) -> None:
    session.perform_action("right")
    # Mutating the live table must not leak into the stored snapshot
    session.reference_table[0, 0, :] = 99.0
    session.log.append("tampered")

    session.undo()

    assert np.all(session.reference_table == 0.0)
    assert session.log == []


def test_reset_tables_clears_everything(session) -> None:
    session.perform_action("right")
    session.set_user_entry((0, 0), "right", "3")

    session.reset_tables()

    assert np.all(session.reference_table == 0.0)
    assert all(value == 0.0 for value in session.user_table.flat)
    assert session.log == []
    assert session.last_step is None
    assert not session.can_undo
    assert session.agent_pos == session.start_pos


def test_resize_preserves_cells_and_resets(session) -> None:
    session.set_cell_type((1, 1), "wall")
    session.set_cell_type((3, 3), "goal")
    session.set_cell_type((2, 2), "start")
    session.perform_action("up")

    session.resize(3, 5)

    assert (session.grid.rows, session.grid.cols) == (3, 5)
    assert session.grid.cell_at((1, 1)).cell_type == "wall"
    assert session.grid.cell_at((2, 2)).cell_type == "start"
    assert session.grid.cell_at((4, 0)).cell_type == "empty"
    assert session.grid.count("goal") == 0
    assert session.reference_table.shape == (3, 5, 4)
    assert session.user_table.shape == (3, 5, 4)
    assert session.start_pos == (0, 0)
    assert session.agent_pos == (0, 0)
    assert not session.can_undo
    assert session.log == []


def test_resize_clamps_to_bounds(session) -> None:
    session.resize(1, 20)
    assert (session.grid.rows, session.grid.cols) == (2, 8)
    assert session.reference_table.shape[:2] == (2, 8)


def test_rotation_cycle_and_rewards(session) -> None:
    pos = (2, 1)
    expected = [("wall", 0.0), ("trap", -10.0), ("goal", 100.0), ("start", 0.0), ("empty", 0.0)]
    for cell_type, reward in expected:
        assert session.rotate_cell_at(pos) == cell_type
        cell = session.grid.cell_at(pos)
        assert cell.cell_type == cell_type
        assert cell.reward == reward


def test_rotation_resets_tables(session) -> None:
    session.perform_action("right")
    session.rotate_cell_at((3, 3))
    assert not session.can_undo
    assert np.all(session.reference_table == 0.0)
    assert session.log == []


def test_single_start_invariant(session) -> None:
    for _ in range(4):
        session.rotate_cell_at((1, 1))
    assert session.grid.cell_at((1, 1)).cell_type == "start"

    for _ in range(4):
        session.rotate_cell_at((3, 2))

    assert session.grid.count("start") == 1
    assert session.grid.cell_at((1, 1)).cell_type == "empty"
    assert session.start_pos == (3, 2)
    assert session.agent_pos == (3, 2)

    session.set_cell_type((0, 3), "start")
    assert session.grid.count("start") == 1
    assert session.start_pos == (0, 3)


def test_set_cell_type_with_explicit_reward(session) -> None:
    session.set_cell_type((2, 2), "goal", 25.0)
    assert session.grid.cell_at((2, 2)).reward == 25.0


def test_set_cell_type_outside_grid(session) -> None:
    with pytest.raises(ValueError):
        session.set_cell_type((4, 0), "wall")


def test_reward_resync_keeps_tables(session) -> None:
    session.set_cell_type((1, 0), "trap")
    session.set_cell_type((2, 1), "trap")
    session.set_cell_type((3, 3), "goal")
    session.perform_action("right")
    reference = session.reference_table.copy()

    session.apply_reward_config("trap", -50.0)

    assert session.rewards.trap == -50.0
    assert session.grid.cell_at((1, 0)).reward == -50.0
    assert session.grid.cell_at((2, 1)).reward == -50.0
    assert session.grid.cell_at((3, 3)).reward == 100.0
    assert session.grid.cell_at((0, 0)).reward == 0.0
    assert session.grid.cell_at((1, 0)).cell_type == "trap"
    assert np.array_equal(session.reference_table, reference)
    assert session.can_undo


def test_new_rewards_apply_to_later_placements(session) -> None:
    session.apply_reward_config("goal", 10.0)
    session.set_cell_type((1, 0), "goal")
    assert session.grid.cell_at((1, 0)).reward == 10.0


def test_unknown_reward_kind(session) -> None:
    with pytest.raises(ValueError):
        session.apply_reward_config("wall", 1.0)


def test_settings_are_read_each_step(session) -> None:
    session.set_cell_type((1, 0), "goal")
    session.set_learning_rate(0.1)
    session.perform_action("right")
    assert session.reference_table[0, 0, ACTION_TO_INT["right"]] == 10.0

    session.set_learning_rate(1.0)
    session.perform_action("right")
    assert session.reference_table[0, 0, ACTION_TO_INT["right"]] == 100.0


def test_user_entries_are_stored_raw(session) -> None:
    session.set_user_entry((1, 2), "left", " 4.2 ")
    assert session.user_entry((1, 2), "left") == " 4.2 "
    assert not session.can_undo


def test_user_table_is_never_written_by_steps(session) -> None:
    session.set_cell_type((1, 0), "goal")
    session.perform_action("right")
    assert all(value == 0.0 for value in session.user_table.flat)


def test_discrepancies(session) -> None:
    assert session.discrepancies() == []

    session.set_cell_type((1, 0), "goal")
    session.perform_action("right")
    wrong = session.discrepancies()
    assert wrong == [(Position(0, 0), "right", 0.0, 50.0)]
    assert not session.is_user_entry_correct((0, 0), "right")

    session.set_user_entry((0, 0), "right", "50")
    assert session.is_user_entry_correct((0, 0), "right")
    assert session.discrepancies() == []

    session.set_user_entry((3, 3), "up", "abc")
    assert session.discrepancies() == [(Position(3, 3), "up", "abc", 0.0)]
    assert session.correctness_mask().sum() == 4 * 4 * 4 - 1


def test_random_step_uses_action_path(session) -> None:
    trace = session.random_step()
    assert trace.action in DISPLAY_ACTIONS
    assert session.can_undo
    assert session.last_step == trace
    assert session.undo()
    assert session.agent_pos == (0, 0)


def test_random_step_matches_manual_action(session, monkeypatch) -> None:
    manual = LabSession(LabConfig(rows=4, cols=4))
    for target in (session, manual):
        target.set_cell_type((1, 0), "goal")

    monkeypatch.setattr(session._rng, "choice", lambda seq: "right")
    session.random_step()
    manual.perform_action("right")

    assert session.agent_pos == manual.agent_pos
    assert np.array_equal(session.reference_table, manual.reference_table)
    assert session.log == manual.log
    assert session.last_step == manual.last_step
    assert session.history_depth == manual.history_depth == 1


def test_seeded_random_steps_repeat() -> None:
    first = LabSession(LabConfig(seed=3))
    second = LabSession(LabConfig(seed=3))
    assert [first.random_step().action for _ in range(10)] == \
        [second.random_step().action for _ in range(10)]


def test_unknown_action_rejected_without_history(session) -> None:
    with pytest.raises(ValueError):
        session.perform_action("jump")
    assert not session.can_undo


def test_unknown_cell_type_rejected(session) -> None:
    session.perform_action("right")
    with pytest.raises(ValueError):
        session.set_cell_type((1, 1), "lava")
    assert session.grid.cell_at((1, 1)).cell_type == "empty"
    assert session.can_undo


def test_large_reward_entry_checks_against_shown_value(session) -> None:
    session.apply_reward_config("goal", 24691.34)
    session.set_cell_type((1, 0), "goal")
    session.perform_action("right")

    shown = format_number(session.reference_value((0, 0), "right"))
    assert shown == "12345.67"
    assert "R(24691.34)" in session.log[1]
    session.set_user_entry((0, 0), "right", shown)
    assert session.is_user_entry_correct((0, 0), "right")


def test_seeded_session_leaves_global_generators_alone() -> None:
    random.seed(0)
    np.random.seed(0)
    expected = (random.random(), np.random.random())

    random.seed(0)
    np.random.seed(0)
    LabSession(LabConfig(seed=5)).random_step()

    assert (random.random(), np.random.random()) == expected
