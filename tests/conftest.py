import pytest

from mazeduel.domain.types import QLearningConfig
from mazeduel.utils.grid_factory import create_open_grid, generate_maze, grid_from_strings


@pytest.fixture
def open_grid():
    """5x5 grid with no walls, start (0, 0), end (4, 4)."""
    return create_open_grid(5, 5)


@pytest.fixture
def corridor():
    """Single-row corridor from S to E."""
    return grid_from_strings(["S...E"])


@pytest.fixture
def blocked_grid():
    """The end is sealed off by a wall column."""
    return grid_from_strings([
        "S.#..",
        "..#..",
        "..#.E",
    ])


@pytest.fixture
def maze():
    return generate_maze(11, 11, seed=7)


@pytest.fixture
def fast_config():
    return QLearningConfig(episodes=200, progress_interval_episodes=10)
