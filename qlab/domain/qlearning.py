"""Grid transitions and the Q-learning update engine."""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List

from .types import (
    Action, Grid, LearningSettings, Position, QTable, StepTrace, ACTION_DELTAS
)
from . import qtable


GOAL_LOG_LINE = "--- GOAL REACHED (restarting) ---"


@dataclass(frozen=True)
class StepOutcome:
    """Result of applying one step to the reference table."""
    next_pos: Position
    reward: float
    terminal: bool
    table: QTable
    trace: StepTrace


def next_position(pos: Position, action: Action, grid: Grid) -> Position:
    """
    Compute the agent's position after taking an action.

    The move is clamped to the grid. Moving into a wall bounces the agent
    back to ``pos`` on both axes.
    """
    dx, dy = ACTION_DELTAS[action]
    x = min(max(pos[0] + dx, 0), grid.cols - 1)
    y = min(max(pos[1] + dy, 0), grid.rows - 1)

    if grid.cell_at((x, y)).cell_type == "wall":
        return Position(*pos)

    return Position(x, y)


def weighted_update(current_q: float, target: float, alpha: float) -> float:
    """Q(s,a) = (1 - alpha) * Q(s,a) + alpha * target."""
    return (1 - alpha) * current_q + alpha * target


def round_display(value: float, digits: int = 2) -> float:
    """Round half away from zero on the exact binary value, as a fixed-point display would."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def compute_target(reward: float, max_next_q: float, gamma: float, terminal: bool) -> float:
    """Terminal steps bootstrap nothing: the target is just the reward."""
    if terminal:
        return reward
    return reward + gamma * max_next_q


def apply_step(grid: Grid, settings: LearningSettings, table: QTable,
               current_pos: Position, action: Action, digits: int = 2) -> StepOutcome:
    """
    Apply one Q-learning step to the reference table.

    Args:
        grid: Environment the agent moves in
        settings: Learning rate and discount factor
        table: Reference Q-table (not modified)
        current_pos: Agent position before the step
        action: Action taken
        digits: Decimal places the stored Q-value is rounded to

    Returns:
        StepOutcome holding the destination, reward, terminal flag, the
        updated table and the trace of the computation
    """
    next_pos = next_position(current_pos, action, grid)
    cell = grid.cell_at(next_pos)
    reward = cell.reward

    current_q = qtable.q_value(table, current_pos, action)
    max_next_q = qtable.max_value(table, next_pos)

    # Only goals end an episode; traps can be walked over repeatedly
    terminal = cell.cell_type == "goal"

    target = compute_target(reward, max_next_q, settings.discount_factor, terminal)
    new_q = round_display(weighted_update(current_q, target, settings.learning_rate), digits)

    trace = StepTrace(
        state=Position(*current_pos),
        action=action,
        reward=reward,
        next_state=next_pos,
        old_q=current_q,
        max_next_q=max_next_q,
        target=round_display(target, digits),
        result=new_q,
        learning_rate=settings.learning_rate,
        discount_factor=settings.discount_factor,
        terminal=terminal
    )

    return StepOutcome(
        next_pos=next_pos,
        reward=reward,
        terminal=terminal,
        table=qtable.update(table, current_pos, action, new_q),
        trace=trace
    )


def format_number(value: float) -> str:
    """Shortest text that reads back as the same float, without a trailing '.0'."""
    value = float(value)
    if value == 0:
        return "0"  # also covers -0.0
    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def decimals_for(value: float, minimum: int = 2) -> int:
    """Decimal places needed to show a value without losing digits."""
    if not math.isfinite(value):
        return minimum
    exponent = Decimal(repr(float(value))).as_tuple().exponent
    return max(minimum, -exponent)


def format_transition(trace: StepTrace) -> str:
    """Log line describing a transition."""
    return (f"S{trace.state} + A({trace.action.upper()}) -> "
            f"R({format_number(trace.reward)}) -> S'{trace.next_state}")


def explain_step(trace: StepTrace) -> List[str]:
    """Spell out the arithmetic behind the last update."""
    alpha = format_number(trace.learning_rate)
    gamma = format_number(trace.discount_factor)
    lines = [
        f"State {trace.state}, action {trace.action.upper()} -> {trace.next_state}",
        f"Reward r = {format_number(trace.reward)}",
        f"Old Q(s,a) = {format_number(trace.old_q)}",
    ]
    if trace.terminal:
        lines.append(f"Target = r = {format_number(trace.target)} (goal, no future value)")
    else:
        lines.append(f"max Q(s',a') = {format_number(trace.max_next_q)}")
        lines.append(
            f"Target = r + {gamma} * {format_number(trace.max_next_q)} = {format_number(trace.target)}"
        )
    lines.append(
        f"New Q = (1 - {alpha}) * {format_number(trace.old_q)} + {alpha} * "
        f"{format_number(trace.target)} = {format_number(trace.result)}"
    )
    return lines
