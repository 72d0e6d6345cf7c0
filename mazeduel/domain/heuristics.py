"""Heuristic functions for A* pathfinding algorithm."""

from .types import Coord


def manhattan_distance(start: Coord, target: Coord) -> int:
    """
    Manhattan (L1) distance heuristic.
    Admissible and consistent for 4-directional unit-cost movement.
    """
    return abs(start[0] - target[0]) + abs(start[1] - target[1])


def path_length_parity_ok(path_cells: int, start: Coord, target: Coord) -> bool:
    """
    Check the parity invariant of 4-directional grid paths.

    Every path from start to target takes manhattan_distance + 2k unit steps
    for some k >= 0.
    """
    steps = path_cells - 1
    distance = manhattan_distance(start, target)
    return steps >= distance and (steps - distance) % 2 == 0
