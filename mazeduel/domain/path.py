"""Path reconstruction and validation utilities."""

from typing import Dict, List, Optional

from .neighbors import is_adjacent
from .types import Coord, Grid


def reconstruct_path(target: Coord, came_from: Dict[Coord, Optional[Coord]]) -> List[Coord]:
    """
    Reconstruct the path from target back to start using predecessor links.
    Returns the path from start to target (reversed from the parent chain).
    """
    path = []
    current: Optional[Coord] = target

    while current is not None:
        path.append(current)
        current = came_from.get(current)

    return list(reversed(path))


def validate_path(path: List[Coord], grid: Grid) -> bool:
    """
    Validate that a path is walkable and connected.
    Returns True if every cell is open and consecutive cells are adjacent.
    """
    if not path:
        return False

    for coord in path:
        if not grid.is_open(coord):
            return False

    for previous, current in zip(path, path[1:]):
        if not is_adjacent(previous, current):
            return False

    return True


def reaches(path: Optional[List[Coord]], target: Coord) -> bool:
    """Whether a path ends at the target."""
    return bool(path) and tuple(path[-1]) == tuple(target)
