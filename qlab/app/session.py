"""Lab session: the single owner of grid, tables, agent and history state."""

from typing import List, Optional, Tuple, Any

import numpy as np

from ..domain.types import (
    Action, Cell, CellType, Grid, HistoryEntry, LabConfig, LearningSettings,
    Position, QTable, RewardConfig, RewardKind, StepTrace, ACTION_TO_INT, DISPLAY_ACTIONS,
    CELL_ROTATION
)
from ..domain import qtable
from ..domain.qlearning import apply_step, format_transition, GOAL_LOG_LINE
from ..utils.grid_factory import (
    create_empty_grid, clamp_dimension, resize_grid, next_cell_type, reward_for
)
from ..utils.rng import SeededRNG


class LabSession:
    """
    Explicit state of one learner session.

    Every mutation goes through a method here. Steps push a snapshot before
    they change anything so they can be undone; structural edits (resize,
    cell edits, manual reset) clear the whole history.
    """

    def __init__(self, config: Optional[LabConfig] = None):
        self.config = config or LabConfig()
        self.settings = LearningSettings(self.config.learning_rate, self.config.discount_factor)
        self.rewards = RewardConfig(self.config.goal_reward, self.config.trap_reward)
        self._rng = SeededRNG(self.config.seed)

        rows = clamp_dimension(self.config.rows, self.config.min_size, self.config.max_size)
        cols = clamp_dimension(self.config.cols, self.config.min_size, self.config.max_size)
        self.grid: Grid = create_empty_grid(rows, cols)
        self.start_pos = Position(0, 0)
        self.agent_pos = Position(0, 0)

        self.reference_table: QTable = qtable.init_table(rows, cols)
        self.user_table: QTable = qtable.init_table(rows, cols, dtype=object)
        self.log: List[str] = []
        self.last_step: Optional[StepTrace] = None
        self._history: List[HistoryEntry] = []

    # Properties

    @property
    def can_undo(self) -> bool:
        """Whether there is a step to revert."""
        return bool(self._history)

    @property
    def history_depth(self) -> int:
        return len(self._history)

    # Resets

    def reset_tables(self):
        """Zero both tables, clear log and history, return the agent to start."""
        self.reference_table = qtable.init_table(self.grid.rows, self.grid.cols)
        self.user_table = qtable.init_table(self.grid.rows, self.grid.cols, dtype=object)
        self.log = []
        self._history = []
        self.agent_pos = self.start_pos
        self.last_step = None

    # Grid editing

    def resize(self, rows: int, cols: int):
        """Resize the grid, keeping overlapping cells, then reset everything."""
        rows = clamp_dimension(rows, self.config.min_size, self.config.max_size)
        cols = clamp_dimension(cols, self.config.min_size, self.config.max_size)
        self.grid = resize_grid(self.grid, rows, cols)
        self.start_pos = Position(0, 0)
        self.reset_tables()

    def set_cell_type(self, pos: Tuple[int, int], cell_type: CellType,
                      reward: Optional[float] = None):
        """
        Place a cell of the given type, then reset tables and history.

        Placing a START clears any other START cell and moves both the
        start position and the agent there.
        """
        pos = Position(*pos)
        if not self.grid.is_valid_coord(pos):
            raise ValueError(f"Position {pos} is outside the {self.grid.rows}x{self.grid.cols} grid")
        if cell_type not in CELL_ROTATION:
            raise ValueError(f"Unknown cell type: {cell_type!r}")

        if reward is None:
            reward = reward_for(cell_type, self.rewards)

        if cell_type == "start":
            self.grid.clear_start_cells()
            self.start_pos = pos

        self.grid.set_cell(pos, Cell(cell_type, reward))
        self.reset_tables()

    def rotate_cell_at(self, pos: Tuple[int, int]) -> CellType:
        """Advance a cell through the editor rotation and return its new type."""
        if not self.grid.is_valid_coord(pos):
            raise ValueError(f"Position {tuple(pos)} is outside the grid")
        new_type = next_cell_type(self.grid.cell_at(pos).cell_type)
        self.set_cell_type(pos, new_type)
        return new_type

    def apply_reward_config(self, kind: RewardKind, value: float):
        """
        Change the goal or trap reward and re-sync every matching cell.

        Tables and history are left alone so a learner can change reward
        magnitudes mid-exercise.
        """
        if kind == "goal":
            self.rewards.goal = value
        elif kind == "trap":
            self.rewards.trap = value
        else:
            raise ValueError(f"Unknown reward kind: {kind!r}")
        self.grid.apply_reward(kind, value)

    # Settings

    def set_learning_rate(self, value: float):
        self.settings.learning_rate = float(value)

    def set_discount_factor(self, value: float):
        self.settings.discount_factor = float(value)

    # Simulation

    def _snapshot(self) -> HistoryEntry:
        return HistoryEntry(
            agent_pos=self.agent_pos,
            reference_table=self.reference_table.copy(),
            user_table=self.user_table.copy(),
            log=tuple(self.log),
            last_step=self.last_step
        )

    def perform_action(self, action: Action) -> StepTrace:
        """
        Apply one step from the agent's position and commit it.

        Returns:
            Trace of the update that was applied
        """
        if action not in ACTION_TO_INT:
            raise ValueError(f"Unknown action: {action!r}")

        self._history.append(self._snapshot())

        outcome = apply_step(
            self.grid, self.settings, self.reference_table,
            self.agent_pos, action, self.config.display_digits
        )

        self.last_step = outcome.trace
        self.reference_table = outcome.table
        self.log.insert(0, format_transition(outcome.trace))

        if outcome.terminal:
            self.log.insert(0, GOAL_LOG_LINE)
            self.agent_pos = self.start_pos
        else:
            self.agent_pos = outcome.next_pos

        return outcome.trace

    def random_step(self) -> StepTrace:
        """Take a uniformly random action through the same path as a manual one."""
        return self.perform_action(self._rng.choice(DISPLAY_ACTIONS))

    def undo(self) -> bool:
        """Restore the state from before the most recent step."""
        if not self._history:
            return False

        entry = self._history.pop()
        self.agent_pos = entry.agent_pos
        self.reference_table = entry.reference_table.copy()
        self.user_table = entry.user_table.copy()
        self.log = list(entry.log)
        self.last_step = entry.last_step
        return True

    # Learner table

    def set_user_entry(self, pos: Tuple[int, int], action: Action, raw: Any):
        """Store a learner entry exactly as typed."""
        if not self.grid.is_valid_coord(pos):
            raise ValueError(f"Position {tuple(pos)} is outside the grid")
        x, y = pos
        self.user_table[y, x, ACTION_TO_INT[action]] = raw

    def user_entry(self, pos: Tuple[int, int], action: Action) -> Any:
        x, y = pos
        return self.user_table[y, x, ACTION_TO_INT[action]]

    def reference_value(self, pos: Tuple[int, int], action: Action) -> float:
        return qtable.q_value(self.reference_table, pos, action)

    def is_user_entry_correct(self, pos: Tuple[int, int], action: Action) -> bool:
        return qtable.is_entry_correct(
            self.user_entry(pos, action), self.reference_value(pos, action), self.config.tolerance
        )

    def correctness_mask(self) -> np.ndarray:
        """Boolean (rows, cols, 4) array of learner entries matching the reference."""
        return qtable.correctness_mask(self.user_table, self.reference_table, self.config.tolerance)

    def discrepancies(self) -> List[Tuple[Position, Action, Any, float]]:
        """Learner entries that differ from the reference, in row-major order."""
        mask = self.correctness_mask()
        wrong = []
        for pos in self.grid.positions():
            for action in DISPLAY_ACTIONS:
                if not mask[pos.y, pos.x, ACTION_TO_INT[action]]:
                    wrong.append((pos, action, self.user_entry(pos, action),
                                  self.reference_value(pos, action)))
        return wrong
