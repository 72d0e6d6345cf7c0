import pytest

from mazeduel.app.fsm import RunState
from mazeduel.app.session import DEFAULT_COLS, DEFAULT_ROWS, MazeSession
from mazeduel.domain.events import (
    ExploreEvent, NoPathEvent, PathFoundEvent, TrainingCompleteEvent, TrainingProgressEvent
)
from mazeduel.domain.types import QLearningConfig
from mazeduel.utils.grid_factory import create_open_grid


def test_default_session_carves_a_maze():
    session = MazeSession(seed=1)

    assert (session.grid.rows, session.grid.cols) == (DEFAULT_ROWS, DEFAULT_COLS)
    assert session.current_state == RunState.IDLE
    assert not session.is_running


def test_astar_run_records_overlays(corridor):
    session = MazeSession(grid=corridor)
    events = list(session.run_astar())

    assert isinstance(events[-1], PathFoundEvent)
    assert session.algorithm == "astar"
    assert session.explored == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)]
    assert session.path == list(events[-1].path)
    assert session.complete is True
    assert session.vehicle is None
    assert session.current_state == RunState.FOUND
    assert not session.grid.locked


def test_astar_no_path_state(blocked_grid):
    session = MazeSession(grid=blocked_grid)
    events = list(session.run_astar())

    assert isinstance(events[-1], NoPathEvent)
    assert session.current_state == RunState.NOT_FOUND
    assert session.complete is False
    assert session.path == []


def test_edits_and_runs_are_rejected_while_running(open_grid):
    session = MazeSession(grid=open_grid)
    events = session.run_astar()
    first = next(events)

    assert isinstance(first, ExploreEvent)
    assert session.is_running
    assert session.grid.locked
    assert session.run_astar() is None
    assert session.run_qlearning() is None
    assert not session.toggle_wall((2, 2))
    assert not session.set_start((1, 1))
    assert not session.set_end((3, 3))
    assert not session.clear_paths()
    assert not session.new_maze(7, 7)
    assert session.grid is open_grid
    assert open_grid.is_open((2, 2))


def test_gate_is_released_once_the_terminal_event_is_seen(open_grid):
    session = MazeSession(grid=open_grid)
    for event in session.run_astar():
        if isinstance(event, PathFoundEvent):
            assert not session.is_running
            assert not session.grid.locked


def test_edit_after_run_clears_overlays(open_grid):
    session = MazeSession(grid=open_grid)
    list(session.run_astar())

    assert session.toggle_wall((2, 2))
    assert session.explored == []
    assert session.path == []
    assert session.current_state == RunState.IDLE


def test_rejected_edit_keeps_overlays(open_grid):
    session = MazeSession(grid=open_grid)
    list(session.run_astar())

    assert not session.toggle_wall(open_grid.start)
    assert session.path


def test_cancel_releases_the_gate(open_grid):
    session = MazeSession(grid=open_grid)
    events = session.run_astar()
    next(events)
    next(events)

    assert session.cancel()
    assert not session.is_running
    assert not session.grid.locked
    assert session.current_state == RunState.IDLE
    with pytest.raises(StopIteration):
        next(events)
    assert not session.cancel()


def test_closing_the_stream_releases_the_gate(open_grid):
    session = MazeSession(grid=open_grid)
    events = session.run_astar()
    next(events)
    events.close()

    assert not session.is_running
    assert session.current_state == RunState.IDLE
    assert session.toggle_wall((2, 2))


def test_stale_stream_does_not_unlock_a_newer_run(open_grid):
    session = MazeSession(grid=open_grid)
    old = session.run_astar()
    next(old)
    session.cancel()

    new = session.run_astar()
    next(new)
    old.close()

    assert session.is_running
    assert session.grid.locked
    new.close()
    assert not session.grid.locked


def test_new_run_starts_from_clean_overlays(corridor):
    session = MazeSession(grid=corridor)
    list(session.run_astar())
    list(session.run_astar())

    assert len(session.explored) == 5
    assert len(session.path) == 5


def test_qlearning_run_states_and_overlays():
    grid = create_open_grid(3, 3)
    session = MazeSession(grid=grid, seed=0)
    config = QLearningConfig(episodes=200, progress_interval_episodes=50)
    states = []
    for event in session.run_qlearning(config):
        states.append((type(event), session.current_state))
        if isinstance(event, TrainingProgressEvent):
            assert session.explored == list(event.explored)
            assert session.total_episodes == 200

    assert states[0] == (TrainingProgressEvent, RunState.TRAINING)
    assert (TrainingCompleteEvent, RunState.EXTRACTING) in states
    assert states[-1] == (PathFoundEvent, RunState.FOUND)
    assert session.episode == 150
    assert session.path[-1] == grid.end
    assert session.complete


def test_qlearning_incomplete_policy_is_not_found(blocked_grid):
    session = MazeSession(grid=blocked_grid, seed=0)
    events = list(session.run_qlearning(QLearningConfig(episodes=10)))

    assert isinstance(events[-1], PathFoundEvent)
    assert not events[-1].complete
    assert session.current_state == RunState.NOT_FOUND


def test_seeded_sessions_repeat_qlearning_runs():
    config = QLearningConfig(episodes=40, progress_interval_episodes=10)
    first = MazeSession(grid=create_open_grid(4, 4), seed=8)
    second = MazeSession(grid=create_open_grid(4, 4), seed=8)

    assert list(first.run_qlearning(config)) == list(second.run_qlearning(config))


def test_new_maze_replaces_grid():
    session = MazeSession(seed=0)
    assert session.new_maze(9, 11, seed=2)

    assert (session.grid.rows, session.grid.cols) == (9, 11)


def test_new_maze_rejects_bad_dimensions():
    session = MazeSession(seed=0)
    with pytest.raises(ValueError):
        session.new_maze(0, 5)
