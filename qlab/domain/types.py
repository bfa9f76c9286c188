"""Core type definitions for the Q-learning lab."""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Literal, Dict, List, Iterator, NamedTuple
import numpy as np


class Position(NamedTuple):
    """Grid position: x is the column, y is the row (both 0-indexed)."""
    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


# Cell types a learner can place on the grid
CellType = Literal["empty", "wall", "trap", "goal", "start"]

# Actions the agent can take
Action = Literal["up", "down", "left", "right"]
ActionInt = Literal[0, 1, 2, 3]  # Index into the action axis of a Q-table

# Reward kinds that can be configured globally
RewardKind = Literal["goal", "trap"]

# Q-table array: shape (rows, cols, 4), indexed [y, x, action]
QTable = np.ndarray


@dataclass(frozen=True)
class Cell:
    """A single grid cell."""
    cell_type: CellType = "empty"
    reward: float = 0.0


@dataclass
class Grid:
    """The grid world: dimensions plus a row-major 2D list of cells."""
    rows: int
    cols: int
    cells: List[List[Cell]]

    def is_valid_coord(self, pos: Tuple[int, int]) -> bool:
        """Check if coordinate is within grid bounds."""
        x, y = pos
        return 0 <= x < self.cols and 0 <= y < self.rows

    def cell_at(self, pos: Tuple[int, int]) -> Cell:
        """Get the cell at a position."""
        x, y = pos
        return self.cells[y][x]

    def set_cell(self, pos: Tuple[int, int], cell: Cell):
        """Replace the cell at a position."""
        x, y = pos
        self.cells[y][x] = cell

    def positions(self) -> Iterator[Position]:
        """Iterate positions in row-major order (by y, then x)."""
        for y in range(self.rows):
            for x in range(self.cols):
                yield Position(x, y)

    def count(self, cell_type: CellType) -> int:
        """Count cells of the given type."""
        return sum(1 for row in self.cells for cell in row if cell.cell_type == cell_type)

    def clear_start_cells(self):
        """Turn every START cell back into an EMPTY cell."""
        for pos in self.positions():
            if self.cell_at(pos).cell_type == "start":
                self.set_cell(pos, Cell("empty", 0.0))

    def apply_reward(self, cell_type: CellType, reward: float):
        """Rewrite the reward of every cell of the given type."""
        for pos in self.positions():
            cell = self.cell_at(pos)
            if cell.cell_type == cell_type:
                self.set_cell(pos, Cell(cell_type, reward))


@dataclass
class LearningSettings:
    """Global settings read by the update engine on every step."""
    learning_rate: float = 0.5  # alpha
    discount_factor: float = 0.9  # gamma


@dataclass
class RewardConfig:
    """Global rewards for goal and trap cells."""
    goal: float = 100.0
    trap: float = -10.0


@dataclass
class LabConfig:
    """Configuration for a lab session."""
    rows: int = 4
    cols: int = 4
    min_size: int = 2
    max_size: int = 8
    learning_rate: float = 0.5
    discount_factor: float = 0.9
    goal_reward: float = 100.0
    trap_reward: float = -10.0
    display_digits: int = 2  # Rounding applied to stored Q-values
    tolerance: float = 0.01  # Absolute tolerance when checking user entries
    seed: Optional[int] = None


@dataclass(frozen=True)
class StepTrace:
    """Record of the most recent update, kept for display."""
    state: Position
    action: Action
    reward: float
    next_state: Position
    old_q: float
    max_next_q: float
    target: float
    result: float
    learning_rate: float
    discount_factor: float
    terminal: bool = False


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot taken immediately before a step is applied.

    The tables are private copies owned by the entry; the log is a tuple so
    it cannot be appended to after the fact.
    """
    agent_pos: Position
    reference_table: QTable = field(repr=False)
    user_table: QTable = field(repr=False)
    log: Tuple[str, ...]
    last_step: Optional[StepTrace]


# Action mappings
ACTIONS: Tuple[Action, ...] = ("up", "down", "left", "right")

# Column order of the Q-table exercise, also the pool for random steps
DISPLAY_ACTIONS: Tuple[Action, ...] = ("left", "right", "up", "down")

ACTION_TO_INT: Dict[Action, ActionInt] = {
    "up": 0,
    "down": 1,
    "left": 2,
    "right": 3
}

ACTION_DELTAS: Dict[Action, Tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0)
}

# Editor rotation: empty -> wall -> trap -> goal -> start -> empty
CELL_ROTATION: Dict[CellType, CellType] = {
    "empty": "wall",
    "wall": "trap",
    "trap": "goal",
    "goal": "start",
    "start": "empty"
}
