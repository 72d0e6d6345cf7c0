"""Maze session: one grid, at most one active run, and the overlays it left."""

import logging
from typing import Generator, Iterator, List, Optional

from ..domain.astar import run_astar
from ..domain.events import (
    AnimateStepEvent, Event, ExploreEvent, NoPathEvent, PathFoundEvent,
    TrainingCompleteEvent, TrainingProgressEvent, is_terminal
)
from ..domain.qlearning import run_qlearning
from ..domain.types import AlgorithmId, Coord, Grid, QLearningConfig
from ..utils.grid_factory import generate_maze
from ..utils.rng import SeededRNG
from .fsm import RunState, RunStateMachine

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 21
DEFAULT_COLS = 21


class MazeSession:
    """
    Owns the grid and the ``running`` gate for a host.

    Only one run may be active. While it is, new runs, wall edits and
    endpoint moves are rejected as no-ops. Runs are handed out as event
    generators; the session records their overlays as they are consumed and
    releases the gate when the stream ends, is closed, or ``cancel`` is
    called.
    """

    def __init__(self, grid: Optional[Grid] = None, config: Optional[QLearningConfig] = None,
                 seed: Optional[int] = None):
        self.config = config or QLearningConfig()
        self.seed = seed
        self.state_machine = RunStateMachine()
        self.grid = grid if grid is not None else generate_maze(DEFAULT_ROWS, DEFAULT_COLS, seed=seed)

        self.algorithm: Optional[AlgorithmId] = None
        self.explored: List[Coord] = []
        self.path: List[Coord] = []
        self.vehicle: Optional[Coord] = None
        self.complete: Optional[bool] = None
        self.episode: Optional[int] = None
        self.total_episodes: Optional[int] = None
        self._active: Optional[Generator[Event, None, None]] = None
        self._run_id = 0

    # Properties

    @property
    def is_running(self) -> bool:
        return self.state_machine.is_active()

    @property
    def current_state(self) -> RunState:
        return self.state_machine.current_state

    # Grid management

    def new_maze(self, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS,
                 seed: Optional[int] = None) -> bool:
        """Replace the grid with a freshly carved maze."""
        if self._reject_while_running("new maze"):
            return False
        self.grid = generate_maze(rows, cols, seed=seed)
        self.clear_paths()
        return True

    def toggle_wall(self, coord: Coord) -> bool:
        if self._reject_while_running("wall toggle"):
            return False
        changed = self.grid.toggle_wall(coord)
        if changed:
            self.clear_paths()
        return changed

    def set_start(self, coord: Coord) -> bool:
        if self._reject_while_running("start move"):
            return False
        moved = self.grid.set_start(coord)
        if moved:
            self.clear_paths()
        return moved

    def set_end(self, coord: Coord) -> bool:
        if self._reject_while_running("end move"):
            return False
        moved = self.grid.set_end(coord)
        if moved:
            self.clear_paths()
        return moved

    def clear_paths(self) -> bool:
        """Drop exploration and path overlays from the last run."""
        if self._reject_while_running("clear paths"):
            return False
        self.algorithm = None
        self.explored = []
        self.path = []
        self.vehicle = None
        self.complete = None
        self.episode = None
        self.total_episodes = None
        self.state_machine.reset_to_idle()
        return True

    # Runs

    def run_astar(self) -> Optional[Iterator[Event]]:
        """Start an A* run. Returns None if another run is active."""
        if self._reject_while_running("A* run"):
            return None
        events = run_astar(self.grid, self.grid.start, self.grid.end)
        return self._begin("astar", RunState.RUNNING, events)

    def run_qlearning(self, config: Optional[QLearningConfig] = None,
                      rng: Optional[SeededRNG] = None) -> Optional[Iterator[Event]]:
        """Start a Q-learning run. Returns None if another run is active."""
        if self._reject_while_running("Q-learning run"):
            return None
        events = run_qlearning(
            self.grid, self.grid.start, self.grid.end,
            config=config or self.config,
            rng=rng or SeededRNG(self.seed),
        )
        return self._begin("qlearning", RunState.TRAINING, events)

    def cancel(self) -> bool:
        """Abort the active run, if any."""
        active = self._active
        if active is None:
            return False
        active.close()
        self._finish(self._run_id, cancelled=True)
        logger.info("Run cancelled")
        return True

    def _begin(self, algorithm: AlgorithmId, state: RunState,
               events: Iterator[Event]) -> Iterator[Event]:
        self.clear_paths()
        self.algorithm = algorithm
        self.grid.locked = True
        self.state_machine.transition_to(state, {"algorithm": algorithm})
        self._run_id += 1
        self._active = self._consume(events, self._run_id)
        return self._active

    def _consume(self, events: Iterator[Event], run_id: int) -> Generator[Event, None, None]:
        try:
            for event in events:
                self._record(event)
                if is_terminal(event):
                    self._finish(run_id)
                yield event
        finally:
            self._finish(run_id, cancelled=True)

    def _record(self, event: Event):
        if isinstance(event, ExploreEvent):
            self.explored.append(event.position)
        elif isinstance(event, TrainingProgressEvent):
            self.explored = list(event.explored)
            self.episode = event.episode
            self.total_episodes = event.total_episodes
        elif isinstance(event, TrainingCompleteEvent):
            self.state_machine.transition_to(RunState.EXTRACTING)
        elif isinstance(event, AnimateStepEvent):
            self.path.append(event.position)
            self.vehicle = event.position
        elif isinstance(event, PathFoundEvent):
            self.path = list(event.path)
            self.complete = event.complete
            self.vehicle = None
            target = RunState.FOUND if event.complete else RunState.NOT_FOUND
            self.state_machine.transition_to(target, {"event": event})
        elif isinstance(event, NoPathEvent):
            self.complete = False
            self.state_machine.transition_to(RunState.NOT_FOUND, {"event": event})

    def _finish(self, run_id: int, cancelled: bool = False):
        """Release the gate once per run; stale generators are ignored."""
        if run_id != self._run_id or self._active is None:
            return
        self._active = None
        self.grid.locked = False
        if cancelled and self.state_machine.is_active():
            self.vehicle = None
            self.state_machine.reset_to_idle({"cancelled": True})

    def _reject_while_running(self, action: str) -> bool:
        if self.is_running:
            logger.debug("Rejected %s: a run is active", action)
            return True
        return False
