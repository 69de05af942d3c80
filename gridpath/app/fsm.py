"""Finite state machine for an animated search run."""

from enum import Enum
from typing import Callable, Dict, Optional, Set, Tuple


class RunState(Enum):
    """States of a run as seen by the user interface."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FOUND = "found"
    NO_PATH = "no_path"
    BUDGET_EXHAUSTED = "budget_exhausted"
    ERROR = "error"


FINISHED_STATES = {RunState.FOUND, RunState.NO_PATH, RunState.BUDGET_EXHAUSTED, RunState.ERROR}

StateCallback = Callable[[Optional[dict]], None]
TransitionCallback = Callable[[RunState, RunState, Optional[dict]], None]


class RunStateMachine:
    """
    Tracks where an animated run stands.

    State Transitions:
    IDLE -> RUNNING (run or step pressed)
    RUNNING -> PAUSED | FOUND | NO_PATH | BUDGET_EXHAUSTED | ERROR | IDLE
    PAUSED -> RUNNING (resume) | IDLE (reset) | any finished state (single step)
    finished states -> IDLE (reset)
    """

    def __init__(self):
        self._current_state = RunState.IDLE
        self._state_callbacks: Dict[RunState, StateCallback] = {}
        self._transition_callbacks: Dict[Tuple[RunState, RunState], TransitionCallback] = {}
        self._valid_transitions = self._build_transition_map()

    def _build_transition_map(self) -> Dict[RunState, Set[RunState]]:
        return {
            RunState.IDLE: {RunState.RUNNING},
            RunState.RUNNING: {RunState.PAUSED, RunState.IDLE} | FINISHED_STATES,
            RunState.PAUSED: {RunState.RUNNING, RunState.IDLE} | FINISHED_STATES,
            RunState.FOUND: {RunState.IDLE},
            RunState.NO_PATH: {RunState.IDLE},
            RunState.BUDGET_EXHAUSTED: {RunState.IDLE},
            RunState.ERROR: {RunState.IDLE},
        }

    @property
    def current_state(self) -> RunState:
        return self._current_state

    def can_transition_to(self, target_state: RunState) -> bool:
        return target_state in self._valid_transitions.get(self._current_state, set())

    def transition_to(self, target_state: RunState, context: dict = None) -> bool:
        """
        Attempt to transition to the target state.

        Args:
            target_state: The state to transition to
            context: Optional context data handed to the callbacks

        Returns:
            True if transition was successful, False otherwise
        """
        if not self.can_transition_to(target_state):
            return False

        old_state = self._current_state
        self._current_state = target_state

        transition_key = (old_state, target_state)
        if transition_key in self._transition_callbacks:
            self._transition_callbacks[transition_key](old_state, target_state, context)

        if target_state in self._state_callbacks:
            self._state_callbacks[target_state](context)

        return True

    def on_state_enter(self, state: RunState, callback: StateCallback):
        """Register a callback for when entering a specific state."""
        self._state_callbacks[state] = callback

    def on_transition(self, from_state: RunState, to_state: RunState,
                      callback: TransitionCallback):
        self._transition_callbacks[(from_state, to_state)] = callback

    def is_running(self) -> bool:
        return self._current_state == RunState.RUNNING

    def is_paused(self) -> bool:
        return self._current_state == RunState.PAUSED

    def is_active(self) -> bool:
        """A run has started and not finished yet."""
        return self._current_state in (RunState.RUNNING, RunState.PAUSED)

    def is_idle(self) -> bool:
        return self._current_state == RunState.IDLE

    def is_finished(self) -> bool:
        return self._current_state in FINISHED_STATES

    def get_state_description(self) -> str:
        """Get a human-readable description of the current state."""
        descriptions = {
            RunState.IDLE: "Ready to start",
            RunState.RUNNING: "Search running",
            RunState.PAUSED: "Search paused",
            RunState.FOUND: "Path found",
            RunState.NO_PATH: "Destination unreachable",
            RunState.BUDGET_EXHAUSTED: "No path found within the step budget",
            RunState.ERROR: "Error occurred",
        }
        return descriptions.get(self._current_state, "Unknown state")
