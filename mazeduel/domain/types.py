"""Core type definitions for the maze pathfinding engines."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Literal, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Grid positions are (row, col)
Coord = Tuple[int, int]

# Cell values stored in the grid matrix
OPEN = 0
WALL = 1

# Algorithms that can drive a run
AlgorithmId = Literal["astar", "qlearning"]

# Actions the RL agent can take
Action = Literal["up", "down", "left", "right"]
ActionInt = Literal[0, 1, 2, 3]

# Why a greedy rollout stopped
StopReason = Literal["reached_end", "illegal_move", "cycle", "step_limit"]


@dataclass(eq=False)
class Grid:
    """
    Maze cell matrix with its start and end positions.

    Cells are addressed as (row, col). Edits that would leave start or end on
    a wall, or make them coincide, are rejected as no-ops. While ``locked`` is
    set every edit is a no-op.
    """
    rows: int
    cols: int
    cells: np.ndarray
    start: Coord = (0, 0)
    end: Optional[Coord] = None
    locked: bool = False

    def __post_init__(self):
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        if self.rows * self.cols < 2:
            raise ValueError("Grid needs at least two cells for distinct start and end")
        if self.cells.shape != (self.rows, self.cols):
            raise ValueError(
                f"Cell matrix shape {self.cells.shape} does not match {self.rows}x{self.cols}"
            )
        if self.end is None:
            self.end = (self.rows - 1, self.cols - 1)
        self.start = tuple(self.start)
        self.end = tuple(self.end)
        for name, coord in (("start", self.start), ("end", self.end)):
            if not self.is_valid_coord(coord):
                raise ValueError(f"{name.title()} {coord} is outside the {self.rows}x{self.cols} grid")
        if self.start == self.end:
            raise ValueError(f"Start and end must differ, both are {self.start}")

    def is_valid_coord(self, coord: Coord) -> bool:
        """Check if coordinate is within grid bounds."""
        row, col = coord
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_open(self, coord: Coord) -> bool:
        """Check if coordinate is in bounds and not a wall."""
        return self.is_valid_coord(coord) and self.cells[coord[0], coord[1]] == OPEN

    def is_wall(self, coord: Coord) -> bool:
        """Check if coordinate is an in-bounds wall."""
        return self.is_valid_coord(coord) and self.cells[coord[0], coord[1]] == WALL

    def set_open(self, coord: Coord, is_open: bool = True):
        """Set a cell without any endpoint checks. Used by builders."""
        self.cells[coord[0], coord[1]] = OPEN if is_open else WALL

    def toggle_wall(self, coord: Coord) -> bool:
        """
        Flip a cell between open and wall.
        Returns True if the grid changed.
        """
        coord = tuple(coord)
        if self.locked:
            logger.debug("Ignoring wall toggle at %s: grid is locked", coord)
            return False
        if not self.is_valid_coord(coord):
            return False
        if coord == self.start or coord == self.end:
            logger.debug("Ignoring wall toggle at %s: cell is an endpoint", coord)
            return False

        self.set_open(coord, self.is_wall(coord))
        return True

    def set_start(self, coord: Coord) -> bool:
        """Move the start position. Returns True if it moved."""
        if not self._can_place_endpoint(coord, self.end):
            return False
        self.start = tuple(coord)
        return True

    def set_end(self, coord: Coord) -> bool:
        """Move the end position. Returns True if it moved."""
        if not self._can_place_endpoint(coord, self.start):
            return False
        self.end = tuple(coord)
        return True

    def _can_place_endpoint(self, coord: Coord, other: Coord) -> bool:
        if self.locked:
            logger.debug("Ignoring endpoint move to %s: grid is locked", coord)
            return False
        if not self.is_open(coord) or tuple(coord) == other:
            logger.debug("Ignoring endpoint move to %s: not an open free cell", coord)
            return False
        return True

    def state_index(self, coord: Coord) -> int:
        """Flatten a coordinate into a Q-table row index."""
        return coord[0] * self.cols + coord[1]

    def open_cells(self) -> Iterator[Coord]:
        """Iterate over open cells in row-major order."""
        for row, col in zip(*np.nonzero(self.cells == OPEN)):
            yield (int(row), int(col))

    def wall_count(self) -> int:
        return int(np.count_nonzero(self.cells == WALL))

    def copy(self) -> "Grid":
        """Return an independent, unlocked copy of the grid."""
        return Grid(
            rows=self.rows,
            cols=self.cols,
            cells=self.cells.copy(),
            start=self.start,
            end=self.end,
        )


@dataclass
class PathfindingResult:
    """Result of an A* search."""
    path: Optional[List[Coord]] = None
    explored: List[Coord] = field(default_factory=list)
    nodes_explored: int = 0
    found: bool = False

    @property
    def success(self) -> bool:
        """Whether pathfinding was successful."""
        return self.found and self.path is not None and len(self.path) > 0

    @property
    def path_cost(self) -> int:
        """Number of unit steps along the path."""
        return len(self.path) - 1 if self.path else 0


@dataclass
class QLearningConfig:
    """Configuration for the Q-learning trainer."""
    episodes: int = 200
    alpha: float = 0.7  # Learning rate
    gamma: float = 0.95  # Discount factor
    epsilon_start: float = 0.9
    epsilon_decay: float = 0.98  # Applied once per episode
    epsilon_floor: float = 0.1
    max_steps_per_episode: Optional[int] = None  # None means 3 * rows * cols
    progress_interval_episodes: int = 5
    reward_goal: float = 100.0
    reward_step: float = -1.0
    max_path_steps: Optional[int] = None  # None means 2 * rows * cols

    def validate(self):
        """Raise ValueError if any setting is out of range."""
        if self.episodes < 0:
            raise ValueError(f"episodes must be >= 0, got {self.episodes}")
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        for name in ("epsilon_start", "epsilon_decay", "epsilon_floor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.progress_interval_episodes <= 0:
            raise ValueError(
                f"progress_interval_episodes must be positive, got {self.progress_interval_episodes}"
            )
        for name in ("max_steps_per_episode", "max_path_steps"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    def steps_per_episode(self, grid: Grid) -> int:
        if self.max_steps_per_episode is not None:
            return self.max_steps_per_episode
        return 3 * grid.rows * grid.cols

    def path_step_limit(self, grid: Grid) -> int:
        if self.max_path_steps is not None:
            return self.max_path_steps
        return 2 * grid.rows * grid.cols


@dataclass
class Episode:
    """Represents a single training episode."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    epsilon_used: float


@dataclass
class TrainingResult:
    """Result of RL training."""
    episodes: List[Episode]
    total_episodes: int
    successful_episodes: int
    average_reward: float
    final_epsilon: float

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0


@dataclass
class RolloutResult:
    """Greedy path extracted from a learned Q-table."""
    path: List[Coord]
    complete: bool
    stop_reason: StopReason
    steps_taken: int = 0

    @property
    def path_length(self) -> int:
        return len(self.path)


# Action mappings
ACTION_TO_INT: Dict[Action, ActionInt] = {
    "up": 0,
    "down": 1,
    "left": 2,
    "right": 3
}

INT_TO_ACTION: Dict[ActionInt, Action] = {
    0: "up",
    1: "down",
    2: "left",
    3: "right"
}

# (d_row, d_col) per action, also the neighbour discovery order
ACTION_DELTAS: Dict[ActionInt, Coord] = {
    0: (-1, 0),  # up
    1: (1, 0),   # down
    2: (0, -1),  # left
    3: (0, 1)    # right
}
