"""Grid tiles for the Q-learning lab."""

from typing import Dict
from PySide6.QtWidgets import QGraphicsRectItem, QGraphicsTextItem, QGraphicsEllipseItem
from PySide6.QtGui import QBrush, QPen, QColor, QFont

from ..domain.types import Cell, CellType
from ..domain.qlearning import format_number


# Fill and border colors per cell type
CELL_COLORS: Dict[CellType, tuple] = {
    "empty": (QColor(255, 255, 255), QColor(203, 213, 225)),
    "wall": (QColor(30, 41, 59), QColor(15, 23, 42)),
    "trap": (QColor(254, 226, 226), QColor(252, 165, 165)),
    "goal": (QColor(209, 250, 229), QColor(110, 231, 183)),
    "start": (QColor(239, 246, 255), QColor(191, 219, 254)),
}

CELL_LABELS: Dict[CellType, str] = {
    "empty": "",
    "wall": "WALL",
    "trap": "TRAP",
    "goal": "GOAL",
    "start": "START",
}


class GridTile(QGraphicsRectItem):
    """Graphics item representing a single grid cell."""

    def __init__(self, x: int, y: int, size: float, cell: Cell):
        super().__init__(0, 0, size, size)
        self.grid_x = x
        self.grid_y = y
        self.size = size
        self.cell = cell
        self.has_agent = False

        # Position the tile
        self.setPos(x * size, y * size)

        self._coord_text = QGraphicsTextItem(f"{x},{y}", parent=self)
        self._type_text = QGraphicsTextItem(parent=self)
        self._reward_text = QGraphicsTextItem(parent=self)
        self._agent_marker = QGraphicsEllipseItem(
            size * 0.3, size * 0.3, size * 0.4, size * 0.4, parent=self
        )

        self._setup_items()
        self.update_appearance()

    def _setup_items(self):
        """Setup text items and the agent marker."""
        small_font = QFont("Arial", max(6, int(self.size * 0.12)))
        self._coord_text.setFont(small_font)
        self._coord_text.setDefaultTextColor(QColor(148, 163, 184))
        self._coord_text.setPos(1, 0)

        self._type_text.setFont(QFont("Arial", max(6, int(self.size * 0.14)), QFont.Bold))
        self._reward_text.setFont(small_font)

        self._agent_marker.setBrush(QBrush(QColor(37, 99, 235)))
        self._agent_marker.setPen(QPen(QColor(29, 78, 216), 2))
        self._agent_marker.setVisible(False)

    def set_agent(self, present: bool):
        self.has_agent = present
        self._agent_marker.setVisible(present)
        self.update_appearance()

    def update_appearance(self):
        """Update tile appearance from the cell type and reward."""
        brush_color, pen_color = CELL_COLORS.get(self.cell.cell_type, CELL_COLORS["empty"])
        self.setBrush(QBrush(brush_color))
        if self.has_agent:
            self.setPen(QPen(QColor(59, 130, 246), 3))
        else:
            self.setPen(QPen(pen_color, 1))

        label = CELL_LABELS.get(self.cell.cell_type, "")
        self._type_text.setPlainText(label)
        self._type_text.setDefaultTextColor(
            QColor(148, 163, 184) if self.cell.cell_type == "wall" else QColor(71, 85, 105)
        )
        rect = self._type_text.boundingRect()
        self._type_text.setPos((self.size - rect.width()) / 2, (self.size - rect.height()) / 2)
        self._type_text.setVisible(bool(label) and not self.has_agent)

        self._update_reward_display()
        self.setToolTip(f"({self.grid_x},{self.grid_y}) R:{format_number(self.cell.reward)}")

    def _update_reward_display(self):
        """Show non-zero rewards in the bottom-right corner."""
        reward = self.cell.reward
        if reward != 0 and self.cell.cell_type != "wall":
            self._reward_text.setPlainText(format_number(reward))
            self._reward_text.setDefaultTextColor(
                QColor(22, 163, 74) if reward > 0 else QColor(220, 38, 38)
            )
            rect = self._reward_text.boundingRect()
            self._reward_text.setPos(self.size - rect.width(), self.size - rect.height())
            self._reward_text.setVisible(True)
        else:
            self._reward_text.setVisible(False)
