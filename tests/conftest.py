import pytest

from qlab.domain.types import Cell, LearningSettings
from qlab.utils.grid_factory import create_empty_grid


def make_grid(rows=3, cols=3, **cells):
    """Build a grid; keyword arguments map "x_y" to (cell_type, reward)."""
    grid = create_empty_grid(rows, cols)
    for key, (cell_type, reward) in cells.items():
        x, y = (int(part) for part in key.split("_"))
        grid.set_cell((x, y), Cell(cell_type, reward))
    return grid


@pytest.fixture
def settings():
    return LearningSettings(learning_rate=0.5, discount_factor=0.9)
