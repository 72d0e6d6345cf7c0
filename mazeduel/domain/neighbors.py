"""Neighbor generation and movement rules shared by both engines."""

from typing import List, Tuple

from .types import ACTION_DELTAS, ActionInt, Coord, Grid

# Fixed discovery order: up, down, left, right. It decides tie-breaks in A*
# and the meaning of each Q-table column.
DIRECTIONS: List[Coord] = [ACTION_DELTAS[action] for action in range(4)]

# Step-2 moves over the carving lattice
LATTICE_DIRECTIONS: List[Coord] = [(2 * dr, 2 * dc) for dr, dc in DIRECTIONS]


def offset(coord: Coord, delta: Coord) -> Coord:
    """Shift a coordinate by a (d_row, d_col) delta."""
    return (coord[0] + delta[0], coord[1] + delta[1])


def get_neighbors(coord: Coord, grid: Grid) -> List[Coord]:
    """
    Get open, in-bounds orthogonal neighbours of a coordinate.
    Returned in the fixed order up, down, left, right.
    """
    neighbors = []
    for delta in DIRECTIONS:
        candidate = offset(coord, delta)
        if grid.is_open(candidate):
            neighbors.append(candidate)
    return neighbors


def apply_action(coord: Coord, action: ActionInt, grid: Grid) -> Tuple[Coord, bool]:
    """
    Move one cell in the direction of ``action``.

    Returns (next_coord, moved). Moving into a wall or off the grid leaves
    the agent where it is and reports ``moved=False``.
    """
    candidate = offset(coord, ACTION_DELTAS[action])
    if grid.is_open(candidate):
        return candidate, True
    return coord, False


def is_adjacent(a: Coord, b: Coord) -> bool:
    """Whether two coordinates are orthogonal unit neighbours."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1
