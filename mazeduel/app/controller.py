"""Main application controller connecting the Qt UI to a maze session."""

import logging
from typing import Iterator, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..domain.events import (
    BaseListener, Event, TrainingProgressEvent, dispatch, is_terminal
)
from ..domain.types import Coord, Grid, QLearningConfig
from .fsm import RunState
from .session import DEFAULT_COLS, DEFAULT_ROWS, MazeSession

logger = logging.getLogger(__name__)

# Delay after a training snapshot, independent of the speed slider
TRAINING_PROGRESS_INTERVAL_MS = 30


class _SignalListener(BaseListener):
    """Forwards engine callbacks to the controller's Qt signals."""

    def __init__(self, controller: "MazeController"):
        self.controller = controller

    def on_explore(self, position):
        self.controller.cell_explored.emit(position)

    def on_training_progress(self, episode, explored):
        self.controller.training_progress.emit(episode, explored)

    def on_training_complete(self, result):
        self.controller.training_completed.emit(result)

    def on_animate_step(self, position):
        self.controller.vehicle_moved.emit(position)

    def on_path_found(self, path, complete):
        self.controller.path_found.emit(path, complete)

    def on_no_path(self):
        self.controller.no_path.emit()


class MazeController(QObject):
    """
    Controller that paces a session's event stream with a QTimer.

    The engines never sleep; each timer tick pulls one event and re-emits it
    as a Qt signal, so the timer interval is the only animation delay.

    Signals:
        state_changed: Emitted when the run state changes
        grid_updated: Emitted when the grid or overlays need a redraw
        cell_explored: One A* frontier pop
        training_progress: Q-learning snapshot (episode, explored cells)
        training_completed: Q-learning finished its episodes
        vehicle_moved: One path cell for the vehicle animation
        path_found: Terminal result (path, complete)
        no_path: Terminal result with no path
        status_changed: Human-readable status line
        error_occurred: Emitted when an error occurs
    """

    state_changed = Signal(object)  # RunState
    grid_updated = Signal()
    cell_explored = Signal(object)  # Coord
    training_progress = Signal(int, object)  # episode, explored cells
    training_completed = Signal(object)  # TrainingResult
    vehicle_moved = Signal(object)  # Coord
    path_found = Signal(object, bool)  # path, complete
    no_path = Signal()
    status_changed = Signal(str)
    error_occurred = Signal(str)

    def __init__(self, session: Optional[MazeSession] = None):
        super().__init__()

        self._session = session or MazeSession()
        self._listener = _SignalListener(self)
        self._events: Optional[Iterator[Event]] = None
        self._last_event: Optional[Event] = None

        # Timer for run mode
        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timer_tick)
        self._timer_interval = 50  # milliseconds

        self.path_found.connect(self._on_path_found)
        self.no_path.connect(self._on_no_path)
        self.training_progress.connect(self._on_training_progress)

    # Properties

    @property
    def session(self) -> MazeSession:
        return self._session

    @property
    def grid(self) -> Grid:
        """Get the current grid."""
        return self._session.grid

    @property
    def current_state(self) -> RunState:
        return self._session.current_state

    @property
    def is_running(self) -> bool:
        return self._session.is_running

    @property
    def speed(self) -> int:
        """Get the current speed (timer interval in ms)."""
        return self._timer_interval

    @speed.setter
    def speed(self, interval_ms: int):
        """Set the speed (timer interval in ms)."""
        self._timer_interval = max(0, min(1000, interval_ms))

    # Grid management

    def new_maze(self, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS,
                 seed: Optional[int] = None) -> bool:
        try:
            changed = self._session.new_maze(rows, cols, seed)
        except ValueError as e:
            self.error_occurred.emit(f"Failed to generate maze: {e}")
            return False
        if changed:
            self.status_changed.emit("New maze created")
            self._after_edit()
        return changed

    def edit_cell(self, coord: Coord, mode: str) -> bool:
        """Apply an edit in the given mode: "wall", "start" or "end"."""
        if mode == "wall":
            changed = self._session.toggle_wall(coord)
        elif mode == "start":
            changed = self._session.set_start(coord)
        elif mode == "end":
            changed = self._session.set_end(coord)
        else:
            raise ValueError(f"Unknown edit mode: {mode}")
        if changed:
            self._after_edit()
        return changed

    def clear_paths(self) -> bool:
        cleared = self._session.clear_paths()
        if cleared:
            self.status_changed.emit("Paths cleared")
            self._after_edit()
        return cleared

    def _after_edit(self):
        self.grid_updated.emit()
        self.state_changed.emit(self._session.current_state)

    # Algorithm control

    def start_astar(self) -> bool:
        return self._start(self._session.run_astar())

    def start_qlearning(self, config: Optional[QLearningConfig] = None) -> bool:
        return self._start(self._session.run_qlearning(config))

    def _start(self, events: Optional[Iterator[Event]]) -> bool:
        if events is None:
            return False
        self._events = events
        self.grid_updated.emit()
        self.state_changed.emit(self._session.current_state)
        self.status_changed.emit(self._session.state_machine.get_state_description())
        self._timer.start(0)
        return True

    def step(self) -> bool:
        """
        Pull and dispatch one event.
        Returns False once the stream is exhausted.
        """
        if self._events is None:
            return False

        previous_state = self._session.current_state
        try:
            event = next(self._events)
        except StopIteration:
            self._events = None
            return False
        except ValueError as e:
            self._events = None
            self.error_occurred.emit(f"Algorithm error: {e}")
            self.state_changed.emit(self._session.current_state)
            return False

        dispatch(event, self._listener)
        self.grid_updated.emit()
        if self._session.current_state != previous_state:
            self.state_changed.emit(self._session.current_state)
        self._last_event = event
        if is_terminal(event):
            self._events = None
            return False
        return True

    def cancel(self) -> bool:
        self._timer.stop()
        self._events = None
        cancelled = self._session.cancel()
        if cancelled:
            self.status_changed.emit("Run cancelled")
            self._after_edit()
        return cancelled

    def run_to_completion(self):
        """Drain the active stream without the timer."""
        self._timer.stop()
        while self.step():
            pass

    def _schedule_next(self, event: Event):
        if isinstance(event, TrainingProgressEvent):
            self._timer.start(TRAINING_PROGRESS_INTERVAL_MS)
        else:
            self._timer.start(self._timer_interval)

    def _on_timer_tick(self):
        """Called on each timer tick during run mode."""
        if self.step():
            self._schedule_next(self._last_event)

    # Status messages

    def _on_training_progress(self, episode: int, explored):
        total = self._session.total_episodes
        self.status_changed.emit(f"Q-Learning Episode {episode + 1} / {total}")

    def _on_path_found(self, path, complete: bool):
        name = "A*" if self._session.algorithm == "astar" else "Q-Learning"
        if complete:
            self.status_changed.emit(f"{name} found path! Length: {len(path)}")
        else:
            self.status_changed.emit(f"{name} policy stopped early. Length: {len(path)}")

    def _on_no_path(self):
        self.status_changed.emit("A* found no path.")
