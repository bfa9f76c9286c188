"""Grid factory for creating, resizing and editing lab grids."""

from typing import List
from ..domain.types import Cell, CellType, Grid, RewardConfig, CELL_ROTATION


def create_empty_grid(rows: int, cols: int) -> Grid:
    """
    Create a new empty grid with the specified dimensions.

    Args:
        rows: Number of rows (must be > 0)
        cols: Number of columns (must be > 0)

    Returns:
        New Grid instance with all cells EMPTY and reward 0

    Raises:
        ValueError: If rows or cols <= 0
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")

    cells: List[List[Cell]] = [[Cell() for _ in range(cols)] for _ in range(rows)]
    return Grid(rows=rows, cols=cols, cells=cells)


def clamp_dimension(value: int, minimum: int = 2, maximum: int = 8) -> int:
    """Clamp a requested grid dimension to the supported range."""
    return max(minimum, min(maximum, int(value)))


def resize_grid(grid: Grid, rows: int, cols: int) -> Grid:
    """
    Create a grid of new dimensions from an existing one.

    Cells inside both the old and the new bounds keep their type and
    reward; every other cell is EMPTY.
    """
    resized = create_empty_grid(rows, cols)
    for pos in resized.positions():
        if grid.is_valid_coord(pos):
            resized.set_cell(pos, grid.cell_at(pos))
    return resized


def next_cell_type(cell_type: CellType) -> CellType:
    """Next type in the editor rotation."""
    return CELL_ROTATION.get(cell_type, "empty")


def reward_for(cell_type: CellType, rewards: RewardConfig) -> float:
    """Reward a freshly placed cell of the given type carries."""
    if cell_type == "goal":
        return rewards.goal
    if cell_type == "trap":
        return rewards.trap
    return 0.0
