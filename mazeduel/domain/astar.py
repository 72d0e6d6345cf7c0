"""Core A* pathfinding algorithm implementation."""

import logging
from typing import Dict, Iterator, List, Optional, Set

from .events import AnimateStepEvent, Event, ExploreEvent, NoPathEvent, PathFoundEvent
from .heuristics import manhattan_distance
from .neighbors import get_neighbors
from .path import reconstruct_path
from .priority_queue import PriorityQueue
from .types import Coord, Grid, PathfindingResult

logger = logging.getLogger(__name__)


class AStarAlgorithm:
    """
    A* pathfinding over a 4-connected unit-cost grid.

    Framework-agnostic: each call to ``step`` pops one frontier entry, so a
    host can render between steps. Once a cell is popped it is closed and its
    g-score is frozen; with uniform costs and a consistent heuristic this
    never loses optimality.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset the algorithm state."""
        self.open_set = PriorityQueue()
        self.closed_set: Set[Coord] = set()
        self.g_score: Dict[Coord, float] = {}
        self.came_from: Dict[Coord, Optional[Coord]] = {}
        self.explored: List[Coord] = []
        self.start_coord: Optional[Coord] = None
        self.target_coord: Optional[Coord] = None
        self.current_coord: Optional[Coord] = None
        self.nodes_explored = 0

    def initialize(self, grid: Grid, start: Coord, target: Coord):
        """Initialize the algorithm with start and target positions."""
        start, target = tuple(start), tuple(target)
        if not grid.is_valid_coord(start):
            raise ValueError(f"Start coordinate {start} is out of bounds")
        if not grid.is_valid_coord(target):
            raise ValueError(f"Target coordinate {target} is out of bounds")
        if not grid.is_open(start):
            raise ValueError(f"Start position {start} is not passable")
        if not grid.is_open(target):
            raise ValueError(f"Target position {target} is not passable")
        if start == target:
            raise ValueError("Start and target positions are the same")

        self.reset()
        self.start_coord = start
        self.target_coord = target

        self.g_score[start] = 0
        self.came_from[start] = None
        self.open_set.put(start, manhattan_distance(start, target), 0)

    def step(self, grid: Grid) -> Optional[PathfindingResult]:
        """
        Execute one step of the A* algorithm.
        Returns PathfindingResult if algorithm is complete, None otherwise.
        """
        if self.start_coord is None or self.target_coord is None:
            raise ValueError("Algorithm not initialized")

        # Skip stale duplicates of cells that were already closed
        item = self.open_set.get()
        while item is not None and item.coord in self.closed_set:
            item = self.open_set.get()

        if item is None:
            return self._result(found=False)

        current = item.coord
        self.current_coord = current
        self.closed_set.add(current)
        self.explored.append(current)
        self.nodes_explored += 1

        if current == self.target_coord:
            return self._result(found=True)

        for neighbor in get_neighbors(current, grid):
            if neighbor in self.closed_set:
                continue

            tentative_g = item.g_cost + 1
            if neighbor not in self.g_score or tentative_g < self.g_score[neighbor]:
                self.came_from[neighbor] = current
                self.g_score[neighbor] = tentative_g
                f_cost = tentative_g + manhattan_distance(neighbor, self.target_coord)
                self.open_set.put(neighbor, f_cost, tentative_g)

        return None  # Algorithm continues

    def run_complete(self, grid: Grid) -> PathfindingResult:
        """Run until completion and return the final PathfindingResult."""
        while True:
            result = self.step(grid)
            if result is not None:
                return result

    def _result(self, found: bool) -> PathfindingResult:
        path = reconstruct_path(self.target_coord, self.came_from) if found else None
        return PathfindingResult(
            path=path,
            explored=list(self.explored),
            nodes_explored=self.nodes_explored,
            found=found,
        )

    def get_open_set_coords(self) -> List[Coord]:
        """Get all coordinates currently in the open set."""
        return [coord for coord in self.open_set.coords() if coord not in self.closed_set]

    def get_closed_set_coords(self) -> List[Coord]:
        """Closed coordinates in the order they were expanded."""
        return list(self.explored)


def run_astar(grid: Grid, start: Optional[Coord] = None,
              end: Optional[Coord] = None) -> Iterator[Event]:
    """
    Lazily run A* and yield its events.

    One ExploreEvent per popped cell, then on success one AnimateStepEvent
    per path cell followed by a PathFoundEvent; otherwise a NoPathEvent.
    Each call starts an independent search with fresh tables.
    """
    start = grid.start if start is None else start
    end = grid.end if end is None else end

    algorithm = AStarAlgorithm()
    algorithm.initialize(grid, start, end)
    logger.debug("A* started from %s to %s on %dx%d grid", start, end, grid.rows, grid.cols)

    result = None
    while result is None:
        popped_before = algorithm.nodes_explored
        result = algorithm.step(grid)
        if algorithm.nodes_explored > popped_before:
            yield ExploreEvent(algorithm.current_coord, popped_before)

    if not result.success:
        logger.info("A* found no path after exploring %d nodes", result.nodes_explored)
        yield NoPathEvent(algorithm="astar", nodes_explored=result.nodes_explored)
        return

    logger.info("A* found path of %d cells after exploring %d nodes",
                len(result.path), result.nodes_explored)
    for index, coord in enumerate(result.path):
        yield AnimateStepEvent(coord, index, "astar")
    yield PathFoundEvent(
        path=tuple(result.path),
        complete=True,
        algorithm="astar",
        explored_count=result.nodes_explored,
    )


def find_path(grid: Grid, start: Optional[Coord] = None,
              end: Optional[Coord] = None) -> PathfindingResult:
    """
    Convenience function to run A* pathfinding from start to finish.

    Args:
        grid: Grid to search in
        start: Starting coordinate (grid.start if None)
        end: Target coordinate (grid.end if None)

    Returns:
        PathfindingResult with path and exploration trace
    """
    algorithm = AStarAlgorithm()
    algorithm.initialize(
        grid,
        grid.start if start is None else start,
        grid.end if end is None else end,
    )
    return algorithm.run_complete(grid)
