"""Finite State Machine for pathfinding run phases."""

from enum import Enum
from typing import Callable, Dict, Optional, Set


class RunState(Enum):
    """States of a pathfinding run."""
    IDLE = "idle"
    RUNNING = "running"        # A* search in progress
    TRAINING = "training"      # Q-learning episodes in progress
    EXTRACTING = "extracting"  # Q-learning greedy rollout
    FOUND = "found"
    NOT_FOUND = "not_found"


ACTIVE_STATES = frozenset({RunState.RUNNING, RunState.TRAINING, RunState.EXTRACTING})


class RunStateMachine:
    """
    Finite State Machine for managing run states.

    State Transitions:
    IDLE -> RUNNING (A* started)
    IDLE -> TRAINING (Q-learning started)
    RUNNING -> FOUND | NOT_FOUND (search finished)
    TRAINING -> EXTRACTING (episodes finished)
    EXTRACTING -> FOUND | NOT_FOUND (rollout reached the end or stopped early)
    any active state -> IDLE (run cancelled)
    FOUND | NOT_FOUND -> IDLE (reset)
    """

    def __init__(self):
        self._current_state = RunState.IDLE
        self._state_callbacks: Dict[RunState, Callable[[Optional[dict]], None]] = {}
        self._valid_transitions = self._build_transition_map()

    def _build_transition_map(self) -> Dict[RunState, Set[RunState]]:
        """Build the valid state transition map."""
        return {
            RunState.IDLE: {RunState.RUNNING, RunState.TRAINING},
            RunState.RUNNING: {RunState.FOUND, RunState.NOT_FOUND, RunState.IDLE},
            RunState.TRAINING: {RunState.EXTRACTING, RunState.IDLE},
            RunState.EXTRACTING: {RunState.FOUND, RunState.NOT_FOUND, RunState.IDLE},
            RunState.FOUND: {RunState.IDLE},
            RunState.NOT_FOUND: {RunState.IDLE},
        }

    @property
    def current_state(self) -> RunState:
        """Get the current state."""
        return self._current_state

    def can_transition_to(self, target_state: RunState) -> bool:
        """Check if transition to target state is valid."""
        return target_state in self._valid_transitions.get(self._current_state, set())

    def transition_to(self, target_state: RunState, context: Optional[dict] = None) -> bool:
        """
        Attempt to transition to the target state.

        Returns:
            True if transition was successful, False otherwise
        """
        if not self.can_transition_to(target_state):
            return False

        self._current_state = target_state
        if target_state in self._state_callbacks:
            self._state_callbacks[target_state](context)
        return True

    def on_state_enter(self, state: RunState, callback: Callable[[Optional[dict]], None]):
        """Register a callback for when entering a specific state."""
        self._state_callbacks[state] = callback

    def is_active(self) -> bool:
        """Check if a run is in progress."""
        return self._current_state in ACTIVE_STATES

    def is_finished(self) -> bool:
        return self._current_state in (RunState.FOUND, RunState.NOT_FOUND)

    def reset_to_idle(self, context: Optional[dict] = None) -> bool:
        """Return to IDLE from a finished or cancelled run."""
        if self._current_state == RunState.IDLE:
            return True
        return self.transition_to(RunState.IDLE, context)

    def get_state_description(self) -> str:
        """Get a human-readable description of the current state."""
        descriptions = {
            RunState.IDLE: "Ready",
            RunState.RUNNING: "Running A*...",
            RunState.TRAINING: "Training Q-Learning...",
            RunState.EXTRACTING: "Extracting learned path...",
            RunState.FOUND: "Path found",
            RunState.NOT_FOUND: "No path found",
        }
        return descriptions.get(self._current_state, "Unknown state")
