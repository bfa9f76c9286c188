"""Finite State Machine for the map editor lock."""

from enum import Enum, auto
from typing import Dict, Callable, Optional


class LabState(Enum):
    """Whether the map can currently be edited."""
    EDITING = auto()
    LOCKED = auto()


class LabStateMachine:
    """State machine switching the map between editing and locked."""

    def __init__(self, initial: LabState = LabState.EDITING):
        self.current_state = initial
        self._enter_callbacks: Dict[LabState, Callable[[Optional[Dict]], None]] = {}
        self._exit_callbacks: Dict[LabState, Callable[[Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            LabState.EDITING: {LabState.LOCKED},
            LabState.LOCKED: {LabState.EDITING},
        }

    def on_state_enter(self, state: LabState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: LabState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state exit."""
        self._exit_callbacks[state] = callback

    def can_transition(self, to_state: LabState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: LabState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        from_state = self.current_state

        if from_state in self._exit_callbacks:
            self._exit_callbacks[from_state](context)

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods

    def lock(self, context: Optional[Dict] = None) -> bool:
        """Lock the map against edits."""
        return self.transition(LabState.LOCKED, context)

    def unlock(self, context: Optional[Dict] = None) -> bool:
        """Allow map edits again."""
        return self.transition(LabState.EDITING, context)

    def toggle(self, context: Optional[Dict] = None) -> bool:
        """Switch between editing and locked."""
        if self.is_editing():
            return self.lock(context)
        return self.unlock(context)

    def is_editing(self) -> bool:
        """Check if the map is editable."""
        return self.current_state == LabState.EDITING

    def is_locked(self) -> bool:
        """Check if the map is locked."""
        return self.current_state == LabState.LOCKED

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            LabState.EDITING: "Editing - click cells to rotate: empty, wall, trap, goal, start",
            LabState.LOCKED: "Locked - map edits disabled",
        }
        return descriptions.get(self.current_state, "Unknown state")
