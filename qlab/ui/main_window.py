"""Main window for the Q-learning lab."""

from PySide6.QtWidgets import (
    QMainWindow, QVBoxLayout, QHBoxLayout, QGridLayout, QWidget, QPushButton,
    QLabel, QDoubleSpinBox, QSpinBox, QStatusBar, QGroupBox, QListWidget,
    QMessageBox, QSplitter
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut, QFont

from ..app.controller import LabController
from ..app.fsm import LabState
from ..domain.qlearning import decimals_for
from .grid_view import GridView
from .qtable_view import QTableView


class MainWindow(QMainWindow):
    """Main application window for the Q-learning lab."""

    def __init__(self, controller: LabController):
        super().__init__()
        self.controller = controller

        self.setWindowTitle("Q-Learning Lab")
        self.setMinimumSize(1100, 720)

        self._create_ui()
        self._setup_connections()
        self._setup_shortcuts()

        self._update_button_states()
        self._update_log()
        self._update_step_display()

    def _create_ui(self):
        """Create the user interface."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        main_layout.addLayout(self._create_parameters())

        splitter = QSplitter(Qt.Horizontal)

        left_panel = QWidget()
        left_layout = QVBoxLayout(left_panel)
        left_layout.addWidget(self._create_environment_group(), 3)
        left_layout.addWidget(self._create_simulation_group())
        left_layout.addWidget(self._create_log_group(), 1)
        splitter.addWidget(left_panel)

        self.qtable_view = QTableView(self.controller)
        splitter.addWidget(self.qtable_view)
        splitter.setStretchFactor(0, 5)
        splitter.setStretchFactor(1, 7)

        main_layout.addWidget(splitter, 1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self._update_status_message()

    def _create_parameters(self) -> QHBoxLayout:
        """Create the learning rate and discount factor inputs."""
        layout = QHBoxLayout()
        title = QLabel("Q-Learning Lab")
        title.setFont(QFont("Arial", 16, QFont.Bold))
        layout.addWidget(title)
        layout.addStretch()

        settings = self.controller.settings

        layout.addWidget(QLabel("Alpha (α):"))
        self.alpha_spin = QDoubleSpinBox()
        self.alpha_spin.setSingleStep(0.1)
        self._configure_spin(self.alpha_spin, settings.learning_rate, 0.0, 1.0)
        layout.addWidget(self.alpha_spin)

        layout.addWidget(QLabel("Gamma (γ):"))
        self.gamma_spin = QDoubleSpinBox()
        self.gamma_spin.setSingleStep(0.1)
        self._configure_spin(self.gamma_spin, settings.discount_factor, 0.0, 1.0)
        layout.addWidget(self.gamma_spin)

        return layout

    @staticmethod
    def _configure_spin(spin: QDoubleSpinBox, value: float, low: float, high: float):
        """Widen range and precision so the configured value is shown as is."""
        spin.setDecimals(decimals_for(value))
        spin.setRange(min(low, value), max(high, value))
        spin.setValue(value)

    def _create_environment_group(self) -> QGroupBox:
        """Create the map editor: rewards, size, lock toggle and grid."""
        group = QGroupBox("Environment")
        layout = QVBoxLayout(group)

        top_layout = QHBoxLayout()
        self.edit_btn = QPushButton("Editing")
        self.edit_btn.setCheckable(True)
        self.reset_btn = QPushButton("Reset Tables")
        self.reset_btn.setToolTip("Reset agent position and both Q-tables")
        top_layout.addWidget(self.edit_btn)
        top_layout.addStretch()
        top_layout.addWidget(self.reset_btn)
        layout.addLayout(top_layout)

        rewards = self.controller.rewards
        config = self.controller.config

        rewards_layout = QHBoxLayout()
        rewards_layout.addWidget(QLabel("Goal:"))
        self.goal_spin = QDoubleSpinBox()
        self._configure_spin(self.goal_spin, rewards.goal, -10000.0, 10000.0)
        rewards_layout.addWidget(self.goal_spin)

        rewards_layout.addWidget(QLabel("Trap:"))
        self.trap_spin = QDoubleSpinBox()
        self._configure_spin(self.trap_spin, rewards.trap, -10000.0, 10000.0)
        rewards_layout.addWidget(self.trap_spin)
        layout.addLayout(rewards_layout)

        size_layout = QHBoxLayout()
        size_layout.addWidget(QLabel("Rows:"))
        self.rows_spin = QSpinBox()
        self.rows_spin.setRange(config.min_size, config.max_size)
        self.rows_spin.setValue(self.controller.grid.rows)
        size_layout.addWidget(self.rows_spin)

        size_layout.addWidget(QLabel("Cols:"))
        self.cols_spin = QSpinBox()
        self.cols_spin.setRange(config.min_size, config.max_size)
        self.cols_spin.setValue(self.controller.grid.cols)
        size_layout.addWidget(self.cols_spin)
        size_layout.addStretch()
        layout.addLayout(size_layout)

        self.grid_view = GridView(self.controller)
        layout.addWidget(self.grid_view, 1)

        self.hint_label = QLabel("Click cells to rotate: empty → wall → trap → goal → start")
        layout.addWidget(self.hint_label)

        return group

    def _create_simulation_group(self) -> QGroupBox:
        """Create the action pad, random step, undo and step explanation."""
        group = QGroupBox("Simulation")
        layout = QHBoxLayout(group)

        pad = QGridLayout()
        self.up_btn = QPushButton("↑")
        self.down_btn = QPushButton("↓")
        self.left_btn = QPushButton("←")
        self.right_btn = QPushButton("→")
        pad.addWidget(self.up_btn, 0, 1)
        pad.addWidget(self.left_btn, 1, 0)
        pad.addWidget(self.right_btn, 1, 2)
        pad.addWidget(self.down_btn, 2, 1)
        layout.addLayout(pad)

        side_layout = QVBoxLayout()
        self.random_btn = QPushButton("Random Step")
        self.undo_btn = QPushButton("Undo")
        side_layout.addWidget(self.random_btn)
        side_layout.addWidget(self.undo_btn)
        side_layout.addStretch()
        layout.addLayout(side_layout)

        self.step_label = QLabel()
        self.step_label.setFont(QFont("Courier", 9))
        self.step_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        layout.addWidget(self.step_label, 1)

        return group

    def _create_log_group(self) -> QGroupBox:
        """Create the event log display."""
        group = QGroupBox("Event Log")
        layout = QVBoxLayout(group)
        self.log_list = QListWidget()
        self.log_list.setFont(QFont("Courier", 9))
        layout.addWidget(self.log_list)
        return group

    def _setup_connections(self):
        """Setup signal connections."""
        # Controller signals
        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.tables_updated.connect(self._on_tables_updated)
        self.controller.grid_updated.connect(self._on_grid_updated)
        self.controller.error_occurred.connect(self._on_error_occurred)

        # Parameter updates
        self.alpha_spin.valueChanged.connect(self.controller.set_learning_rate)
        self.gamma_spin.valueChanged.connect(self.controller.set_discount_factor)
        self.goal_spin.valueChanged.connect(lambda value: self.controller.set_reward("goal", value))
        self.trap_spin.valueChanged.connect(lambda value: self.controller.set_reward("trap", value))
        self.rows_spin.valueChanged.connect(self._on_size_changed)
        self.cols_spin.valueChanged.connect(self._on_size_changed)

        # Button connections
        self.edit_btn.clicked.connect(self.controller.toggle_edit_mode)
        self.reset_btn.clicked.connect(self.controller.reset_tables)
        self.up_btn.clicked.connect(lambda: self.controller.perform_action("up"))
        self.down_btn.clicked.connect(lambda: self.controller.perform_action("down"))
        self.left_btn.clicked.connect(lambda: self.controller.perform_action("left"))
        self.right_btn.clicked.connect(lambda: self.controller.perform_action("right"))
        self.random_btn.clicked.connect(self.controller.random_step)
        self.undo_btn.clicked.connect(self.controller.undo)

    def _setup_shortcuts(self):
        """Setup keyboard shortcuts."""
        QShortcut(QKeySequence("Ctrl+Q"), self, self.close)
        QShortcut(QKeySequence("Ctrl+Z"), self, self.controller.undo)
        QShortcut(QKeySequence("Ctrl+R"), self, self.controller.random_step)
        for keys, action in [("Ctrl+Up", "up"), ("Ctrl+Down", "down"),
                             ("Ctrl+Left", "left"), ("Ctrl+Right", "right")]:
            QShortcut(QKeySequence(keys), self, lambda a=action: self.controller.perform_action(a))

    def _on_state_changed(self, state: LabState):
        """Handle editor lock changes."""
        self._update_button_states()
        self._update_status_message()

    def _on_size_changed(self, _value: int):
        grid = self.controller.grid
        rows, cols = self.rows_spin.value(), self.cols_spin.value()
        if (rows, cols) != (grid.rows, grid.cols):
            self.controller.resize_grid(rows, cols)

    def _on_tables_updated(self):
        self._update_log()
        self._update_step_display()
        self._update_button_states()

    def _on_grid_updated(self):
        self._update_status_message()

    def _on_error_occurred(self, message: str):
        QMessageBox.warning(self, "Error", message)

    def _update_button_states(self):
        """Enable controls according to the editor lock and history."""
        editing = self.controller.is_editing()
        self.edit_btn.setChecked(editing)
        self.edit_btn.setText("Editing" if editing else "Locked")
        for widget in [self.goal_spin, self.trap_spin, self.rows_spin, self.cols_spin]:
            widget.setEnabled(editing)
        self.hint_label.setVisible(editing)
        self.undo_btn.setEnabled(self.controller.can_undo)

    def _update_log(self):
        """Show the event log, newest first."""
        self.log_list.clear()
        if not self.controller.log:
            self.log_list.addItem("Waiting for agent actions...")
            return
        self.log_list.addItems(self.controller.log)

    def _update_step_display(self):
        lines = self.controller.explain_last_step()
        self.step_label.setText("\n".join(lines) if lines else "No step taken yet.")

    def _update_status_message(self):
        agent = self.controller.agent_pos
        self.status_bar.showMessage(
            f"{self.controller.get_state_description()} | Agent at {agent}"
        )
