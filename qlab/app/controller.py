"""Main application controller connecting UI and lab session logic."""

from typing import List, Optional, Tuple, Any
from PySide6.QtCore import QObject, Signal

from ..domain.types import (
    Action, Grid, LabConfig, LearningSettings, Position, QTable, RewardConfig,
    RewardKind, StepTrace
)
from ..domain.qlearning import explain_step
from .fsm import LabStateMachine, LabState
from .session import LabSession


class LabController(QObject):
    """
    Controller that owns the lab session and connects UI to domain logic.

    Signals:
        state_changed: Emitted when the map is locked or unlocked
        grid_updated: Emitted when the grid or agent needs to be redrawn
        tables_updated: Emitted when either Q-table changed
        step_completed: Emitted with the StepTrace after each step
        error_occurred: Emitted when an error occurs
    """

    # Qt Signals
    state_changed = Signal(object)  # LabState
    grid_updated = Signal()
    tables_updated = Signal()
    step_completed = Signal(object)  # StepTrace
    error_occurred = Signal(str)  # Error message

    def __init__(self, config: Optional[LabConfig] = None):
        super().__init__()

        self._config = config or LabConfig()
        self._session = LabSession(self._config)
        self._state_machine = LabStateMachine()

        self._setup_state_callbacks()

    def _setup_state_callbacks(self):
        """Setup callbacks for state machine transitions."""
        self._state_machine.on_state_enter(LabState.EDITING, self._on_state_entered)
        self._state_machine.on_state_enter(LabState.LOCKED, self._on_state_entered)

    def _on_state_entered(self, context):
        self.state_changed.emit(self._state_machine.current_state)

    # Properties

    @property
    def session(self) -> LabSession:
        return self._session

    @property
    def config(self) -> LabConfig:
        return self._config

    @property
    def grid(self) -> Grid:
        """Get the current grid."""
        return self._session.grid

    @property
    def agent_pos(self) -> Position:
        return self._session.agent_pos

    @property
    def start_pos(self) -> Position:
        return self._session.start_pos

    @property
    def reference_table(self) -> QTable:
        return self._session.reference_table

    @property
    def user_table(self) -> QTable:
        return self._session.user_table

    @property
    def log(self) -> List[str]:
        """Event log, newest first."""
        return self._session.log

    @property
    def last_step(self) -> Optional[StepTrace]:
        return self._session.last_step

    @property
    def settings(self) -> LearningSettings:
        return self._session.settings

    @property
    def rewards(self) -> RewardConfig:
        return self._session.rewards

    @property
    def can_undo(self) -> bool:
        return self._session.can_undo

    @property
    def current_state(self) -> LabState:
        """Get the current editor state."""
        return self._state_machine.current_state

    def is_editing(self) -> bool:
        return self._state_machine.is_editing()

    def get_state_description(self) -> str:
        return self._state_machine.get_state_description()

    # Grid Management

    def toggle_edit_mode(self) -> bool:
        """Lock or unlock the map editor."""
        return self._state_machine.toggle()

    def click_cell(self, pos: Tuple[int, int]) -> bool:
        """Rotate the clicked cell's type when the map is editable."""
        if not self._state_machine.is_editing():
            return False  # Don't allow modifications while locked

        if not self._session.grid.is_valid_coord(pos):
            return False

        try:
            self._session.rotate_cell_at(pos)
            self._emit_all()
            return True
        except Exception as e:
            self.error_occurred.emit(f"Failed to edit cell: {str(e)}")
            return False

    def set_cell_type(self, pos: Tuple[int, int], cell_type: str,
                      reward: Optional[float] = None) -> bool:
        """Place a specific cell type when the map is editable."""
        if not self._state_machine.is_editing():
            return False

        try:
            self._session.set_cell_type(pos, cell_type, reward)
            self._emit_all()
            return True
        except Exception as e:
            self.error_occurred.emit(f"Failed to set cell type: {str(e)}")
            return False

    def resize_grid(self, rows: int, cols: int) -> bool:
        """Resize the grid; resets tables, history and positions."""
        if not self._state_machine.is_editing():
            return False

        try:
            self._session.resize(rows, cols)
            self._emit_all()
            return True
        except Exception as e:
            self.error_occurred.emit(f"Failed to resize grid: {str(e)}")
            return False

    def set_reward(self, kind: RewardKind, value: float) -> bool:
        """Change the goal or trap reward without resetting the tables."""
        if not self._state_machine.is_editing():
            return False

        try:
            self._session.apply_reward_config(kind, float(value))
            self.grid_updated.emit()
            return True
        except Exception as e:
            self.error_occurred.emit(f"Failed to update {kind} reward: {str(e)}")
            return False

    # Learning parameters

    def set_learning_rate(self, value: float) -> bool:
        try:
            self._session.set_learning_rate(value)
            return True
        except Exception as e:
            self.error_occurred.emit(f"Invalid learning rate: {str(e)}")
            return False

    def set_discount_factor(self, value: float) -> bool:
        try:
            self._session.set_discount_factor(value)
            return True
        except Exception as e:
            self.error_occurred.emit(f"Invalid discount factor: {str(e)}")
            return False

    # Simulation

    def perform_action(self, action: Action) -> bool:
        """Move the agent and update the reference table."""
        try:
            trace = self._session.perform_action(action)
        except Exception as e:
            self.error_occurred.emit(f"Failed to perform action: {str(e)}")
            return False

        self._emit_all()
        self.step_completed.emit(trace)
        return True

    def random_step(self) -> bool:
        """Take a random action."""
        try:
            trace = self._session.random_step()
        except Exception as e:
            self.error_occurred.emit(f"Failed to perform random step: {str(e)}")
            return False

        self._emit_all()
        self.step_completed.emit(trace)
        return True

    def undo(self) -> bool:
        """Revert the most recent step."""
        if not self._session.undo():
            return False
        self._emit_all()
        return True

    def reset_tables(self) -> bool:
        """Clear both tables, log and history."""
        try:
            self._session.reset_tables()
            self._emit_all()
            return True
        except Exception as e:
            self.error_occurred.emit(f"Failed to reset tables: {str(e)}")
            return False

    # Learner table

    def set_user_entry(self, pos: Tuple[int, int], action: Action, raw: Any) -> bool:
        """Store a learner entry as typed."""
        try:
            self._session.set_user_entry(pos, action, raw)
            return True
        except Exception as e:
            self.error_occurred.emit(f"Failed to store entry: {str(e)}")
            return False

    def is_user_entry_correct(self, pos: Tuple[int, int], action: Action) -> bool:
        return self._session.is_user_entry_correct(pos, action)

    def reference_value(self, pos: Tuple[int, int], action: Action) -> float:
        return self._session.reference_value(pos, action)

    def explain_last_step(self) -> List[str]:
        """Lines explaining the most recent update, empty before the first step."""
        if self._session.last_step is None:
            return []
        return explain_step(self._session.last_step)

    def _emit_all(self):
        self.grid_updated.emit()
        self.tables_updated.emit()
