"""Q-table storage backed by numpy arrays.

A table is an array of shape ``(rows, cols, 4)`` indexed ``[y, x, action]``.
The reference table holds floats; the learner's table uses ``object`` dtype so
entries are kept exactly as typed and only parsed when compared.
"""

import math
import numpy as np
from typing import Any, Dict, Iterator, Tuple

from .types import Action, QTable, ACTION_TO_INT, DISPLAY_ACTIONS, Position


def init_table(rows: int, cols: int, dtype=float) -> QTable:
    """Create a table with one zeroed action vector per grid cell."""
    if dtype is object:
        table = np.empty((rows, cols, len(ACTION_TO_INT)), dtype=object)
        table.fill(0.0)
        return table
    return np.zeros((rows, cols, len(ACTION_TO_INT)), dtype=dtype)


def has_entry(table: QTable, pos: Tuple[int, int]) -> bool:
    """Check whether the table holds a vector for the position."""
    x, y = pos
    rows, cols = table.shape[:2]
    return 0 <= x < cols and 0 <= y < rows


def q_value(table: QTable, pos: Tuple[int, int], action: Action) -> float:
    """Get Q-value for state-action pair, 0.0 when the position is absent."""
    if not has_entry(table, pos):
        return 0.0
    x, y = pos
    return float(table[y, x, ACTION_TO_INT[action]])


def max_value(table: QTable, pos: Tuple[int, int]) -> float:
    """Get the maximum of the four action values, 0.0 when the position is absent."""
    if not has_entry(table, pos):
        return 0.0
    x, y = pos
    return float(np.max(table[y, x]))


def update(table: QTable, pos: Tuple[int, int], action: Action, value: Any) -> QTable:
    """Return a copy of ``table`` with the single (pos, action) entry replaced."""
    new_table = table.copy()
    x, y = pos
    new_table[y, x, ACTION_TO_INT[action]] = value
    return new_table


def table_entries(table: QTable) -> Iterator[Tuple[Position, Dict[Action, Any]]]:
    """Yield each cell's action values in row-major order."""
    rows, cols = table.shape[:2]
    for y in range(rows):
        for x in range(cols):
            yield Position(x, y), {
                action: table[y, x, ACTION_TO_INT[action]] for action in DISPLAY_ACTIONS
            }


def parse_entry(raw: Any) -> float:
    """Parse a learner-entered value.

    Blank input counts as zero. Anything that cannot be read as a finite
    number, including digit separators and words such as "inf" or "nan",
    becomes NaN, which never compares equal to a reference value.
    """
    if raw is None:
        return math.nan
    if isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float, np.number)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        try:
            value = float(text)
        except ValueError:
            return math.nan
    return value if math.isfinite(value) else math.nan


def is_entry_correct(raw: Any, reference: float, tolerance: float = 0.01) -> bool:
    """Check a learner entry against the reference value."""
    return abs(parse_entry(raw) - reference) < tolerance


def parse_table(user_table: QTable) -> np.ndarray:
    """Parse every entry of a learner table into a float array."""
    return np.vectorize(parse_entry, otypes=[float])(user_table)


def correctness_mask(user_table: QTable, reference_table: QTable,
                     tolerance: float = 0.01) -> np.ndarray:
    """Boolean array marking which learner entries match the reference."""
    parsed = parse_table(user_table)
    # NaN differences compare False, so unparsable entries are never correct
    with np.errstate(invalid="ignore"):
        return np.abs(parsed - reference_table) < tolerance
