"""Grid factory for creating, parsing and carving maze grids."""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..domain.neighbors import LATTICE_DIRECTIONS, offset
from ..domain.types import OPEN, WALL, Coord, Grid
from .rng import SeededRNG

logger = logging.getLogger(__name__)

# Characters used by the ASCII grid format
WALL_CHAR = "#"
OPEN_CHAR = "."
START_CHAR = "S"
END_CHAR = "E"


def create_empty_grid(rows: int, cols: int) -> Grid:
    """
    Create a grid with every cell a wall.

    Start defaults to (0, 0) and end to (rows-1, cols-1); the caller (usually
    the maze generator) is responsible for opening them.

    Raises:
        ValueError: If the dimensions cannot hold two distinct cells
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
    cells = np.full((rows, cols), WALL, dtype=np.int8)
    return Grid(rows=rows, cols=cols, cells=cells)


def create_open_grid(rows: int, cols: int) -> Grid:
    """Create a grid with no walls at all."""
    grid = create_empty_grid(rows, cols)
    grid.cells.fill(OPEN)
    return grid


def generate_maze(rows: int, cols: int, seed: Optional[int] = None,
                  rng: Optional[SeededRNG] = None) -> Grid:
    """
    Carve a perfect maze with randomized recursive backtracking.

    Carving walks the lattice of cells two steps apart starting at (0, 0),
    opening the cell in between on every move, so corridors stay separated
    by walls. Afterwards (0, 0) and (rows-1, cols-1) are forced open and
    become start and end.

    With odd dimensions the end corner lies on the lattice and is connected.
    With one even dimension it sits next to a lattice cell and is still
    reachable. When both are even it is opened but has no carved
    neighbour, so it is unreachable until walls are edited.

    Args:
        rows: Number of grid rows
        cols: Number of grid columns
        seed: Random seed for reproducibility (ignored when rng is given)
        rng: Random number generator to use

    Returns:
        Newly carved Grid
    """
    if rng is None:
        rng = SeededRNG(seed)

    grid = create_empty_grid(rows, cols)
    _carve_passages(grid, (0, 0), rng)

    grid.set_open((0, 0))
    grid.set_open((rows - 1, cols - 1))
    grid.start = (0, 0)
    grid.end = (rows - 1, cols - 1)

    logger.debug("Generated %dx%d maze with %d walls (seed=%s)",
                 rows, cols, grid.wall_count(), rng.seed)
    return grid


def _carve_passages(grid: Grid, origin: Coord, rng: SeededRNG) -> None:
    """
    Depth-first carving with an explicit stack.

    Each frame holds a cell and its shuffled remaining directions, which
    reproduces the visiting order of the recursive formulation without its
    depth limit.
    """
    grid.set_open(origin)
    stack: List[Tuple[Coord, List[Coord]]] = [(origin, _shuffled_directions(rng))]

    while stack:
        current, directions = stack[-1]
        if not directions:
            # Backtrack
            stack.pop()
            continue

        step = directions.pop(0)
        target = offset(current, step)
        if grid.is_wall(target):
            between = offset(current, (step[0] // 2, step[1] // 2))
            grid.set_open(between)
            grid.set_open(target)
            stack.append((target, _shuffled_directions(rng)))


def _shuffled_directions(rng: SeededRNG) -> List[Coord]:
    directions = list(LATTICE_DIRECTIONS)
    rng.shuffle(directions)
    return directions


def grid_from_strings(lines: Iterable[str]) -> Grid:
    """
    Build a grid from ASCII rows.

    ``#`` is a wall, ``.`` is open, ``S`` and ``E`` mark open start and end
    cells. Missing markers fall back to the top-left and bottom-right
    corners.

    Raises:
        ValueError: If rows are ragged or contain unknown characters, or if
            the resolved start and end are walls or the same cell
    """
    lines = [line.strip() for line in lines if line.strip()]
    if not lines:
        raise ValueError("Grid text is empty")
    cols = len(lines[0])
    if any(len(line) != cols for line in lines):
        raise ValueError("All grid rows must have the same length")

    grid = create_empty_grid(len(lines), cols)
    start = end = None
    for row, line in enumerate(lines):
        for col, char in enumerate(line):
            if char == WALL_CHAR:
                continue
            if char not in (OPEN_CHAR, START_CHAR, END_CHAR):
                raise ValueError(f"Unknown grid character {char!r} at ({row}, {col})")
            grid.set_open((row, col))
            if char == START_CHAR:
                start = (row, col)
            elif char == END_CHAR:
                end = (row, col)

    grid.start = start if start is not None else (0, 0)
    grid.end = end if end is not None else (grid.rows - 1, grid.cols - 1)
    for name, coord in (("start", grid.start), ("end", grid.end)):
        if not grid.is_open(coord):
            raise ValueError(f"No {name} marker and the default {name} {coord} is a wall")
    if grid.start == grid.end:
        raise ValueError(f"Start and end both resolve to {grid.start}")
    return grid


def grid_to_strings(grid: Grid, overlays: Optional[Dict[Coord, str]] = None) -> List[str]:
    """
    Render a grid as ASCII rows.

    ``overlays`` maps coordinates to single characters drawn over open cells;
    start and end markers are always drawn last.
    """
    overlays = overlays or {}
    lines = []
    for row in range(grid.rows):
        chars = []
        for col in range(grid.cols):
            coord = (row, col)
            if coord == grid.start:
                chars.append(START_CHAR)
            elif coord == grid.end:
                chars.append(END_CHAR)
            elif grid.is_wall(coord):
                chars.append(WALL_CHAR)
            else:
                chars.append(overlays.get(coord, OPEN_CHAR))
        lines.append("".join(chars))
    return lines


def parse_coord(text: str) -> Coord:
    """Parse ``"row,col"`` into a coordinate."""
    try:
        row_text, col_text = text.split(",")
        return (int(row_text), int(col_text))
    except ValueError:
        raise ValueError(f"Expected coordinate as ROW,COL, got {text!r}") from None
