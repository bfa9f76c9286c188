"""Q-table exercise: the learner's editable table with optional checking."""

from typing import List
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QTableWidget,
    QTableWidgetItem, QHeaderView
)
from PySide6.QtGui import QBrush, QColor, QFont
from PySide6.QtCore import Qt

from ..app.controller import LabController
from ..domain.types import Position, DISPLAY_ACTIONS
from ..domain.qtable import table_entries
from ..domain.qlearning import format_number


class QTableView(QWidget):
    """Editable Q-table the learner fills in by hand."""

    def __init__(self, controller: LabController):
        super().__init__()
        self.controller = controller
        self.show_validation = False
        self._row_positions: List[Position] = []
        self._refreshing = False

        self._create_ui()

        self.controller.tables_updated.connect(self.refresh)
        self.controller.grid_updated.connect(self._update_highlight)
        self.refresh()

    def _create_ui(self):
        layout = QVBoxLayout(self)

        header_layout = QHBoxLayout()
        title = QLabel("Q-Table (your answers)")
        title.setFont(QFont("Arial", 11, QFont.Bold))
        header_layout.addWidget(title)
        header_layout.addStretch()

        self.check_btn = QPushButton("Check Results")
        self.check_btn.setCheckable(True)
        self.check_btn.toggled.connect(self._on_check_toggled)
        header_layout.addWidget(self.check_btn)
        layout.addLayout(header_layout)

        self.table = QTableWidget(0, len(DISPLAY_ACTIONS))
        self.table.setHorizontalHeaderLabels([action.upper() for action in DISPLAY_ACTIONS])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.itemChanged.connect(self._on_item_changed)
        layout.addWidget(self.table)

        self.summary_label = QLabel("")
        layout.addWidget(self.summary_label)

    def refresh(self):
        """Rebuild the table contents from the learner's table."""
        self._refreshing = True
        try:
            entries = list(table_entries(self.controller.user_table))
            self.table.setRowCount(len(entries))
            self._row_positions = [pos for pos, _ in entries]
            self.table.setVerticalHeaderLabels([str(pos) for pos in self._row_positions])

            for row, (pos, values) in enumerate(entries):
                for col, action in enumerate(DISPLAY_ACTIONS):
                    raw = values[action]
                    text = format_number(raw) if isinstance(raw, (int, float)) else str(raw)
                    item = QTableWidgetItem(text)
                    item.setTextAlignment(Qt.AlignCenter)
                    self.table.setItem(row, col, item)
        finally:
            self._refreshing = False

        self._update_highlight()

    def _on_item_changed(self, item: QTableWidgetItem):
        if self._refreshing:
            return
        pos = self._row_positions[item.row()]
        action = DISPLAY_ACTIONS[item.column()]
        self.controller.set_user_entry(pos, action, item.text())
        self._update_highlight()

    def _on_check_toggled(self, checked: bool):
        self.show_validation = checked
        self.check_btn.setText("Hide Solution" if checked else "Check Results")
        self._update_highlight()

    def _update_highlight(self):
        """Colour cells by correctness, or highlight the agent's row."""
        self._refreshing = True
        try:
            agent = tuple(self.controller.agent_pos)
            wrong = 0
            for row, pos in enumerate(self._row_positions):
                for col, action in enumerate(DISPLAY_ACTIONS):
                    item = self.table.item(row, col)
                    if item is None:
                        continue
                    if self.show_validation:
                        correct = self.controller.is_user_entry_correct(pos, action)
                        wrong += 0 if correct else 1
                        color = QColor(220, 252, 231) if correct else QColor(254, 226, 226)
                        item.setBackground(QBrush(color))
                        reference = self.controller.reference_value(pos, action)
                        item.setToolTip("" if correct else f"Correct: {format_number(reference)}")
                    else:
                        highlighted = tuple(pos) == agent
                        color = QColor(254, 249, 195) if highlighted else QColor(255, 255, 255)
                        item.setBackground(QBrush(color))
                        item.setToolTip("")
        finally:
            self._refreshing = False

        if self.show_validation:
            total = len(self._row_positions) * len(DISPLAY_ACTIONS)
            self.summary_label.setText(f"{total - wrong}/{total} entries correct")
        else:
            self.summary_label.setText("")
