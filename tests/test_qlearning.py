import numpy as np
import pytest

from mazeduel.domain.events import (
    AnimateStepEvent, PathFoundEvent, TrainingCompleteEvent, TrainingProgressEvent
)
from mazeduel.domain.path import validate_path
from mazeduel.domain.qlearning import (
    N_ACTIONS, QLearningAgent, QLearningEnvironment, run_qlearning
)
from mazeduel.domain.types import QLearningConfig
from mazeduel.utils.grid_factory import create_open_grid, grid_from_strings
from mazeduel.utils.rng import SeededRNG


def _events(grid, config=None, seed=0):
    return list(run_qlearning(grid, config=config, seed=seed))


def test_default_config_values():
    config = QLearningConfig()

    assert config.episodes == 200
    assert config.alpha == 0.7
    assert config.gamma == 0.95
    assert config.epsilon_start == 0.9
    assert config.epsilon_decay == 0.98
    assert config.epsilon_floor == 0.1
    assert config.progress_interval_episodes == 5


def test_step_limits_scale_with_grid():
    grid = create_open_grid(3, 5)
    config = QLearningConfig()

    assert config.steps_per_episode(grid) == 45
    assert config.path_step_limit(grid) == 30
    assert QLearningConfig(max_steps_per_episode=7, max_path_steps=3).steps_per_episode(grid) == 7


@pytest.mark.parametrize("overrides", [
    {"episodes": -1},
    {"alpha": 0.0},
    {"alpha": 1.5},
    {"gamma": -0.1},
    {"epsilon_start": 1.2},
    {"epsilon_floor": -0.5},
    {"progress_interval_episodes": 0},
    {"max_steps_per_episode": 0},
])
def test_invalid_config_raises(overrides):
    with pytest.raises(ValueError):
        QLearningConfig(**overrides).validate()
    with pytest.raises(ValueError):
        QLearningAgent(QLearningConfig(**overrides))


def test_environment_self_loops_and_pays_step_reward(corridor):
    env = QLearningEnvironment(corridor, corridor.start, corridor.end, QLearningConfig())
    env.reset()

    position, reward, done = env.step(0)  # up, off the grid
    assert position == (0, 0)
    assert reward == -1.0
    assert not done

    position, reward, done = env.step(3)
    assert position == (0, 1)
    assert reward == -1.0


def test_environment_goal_reward_ends_episode():
    grid = grid_from_strings(["SE"])
    env = QLearningEnvironment(grid, grid.start, grid.end, QLearningConfig())
    env.reset()

    position, reward, done = env.step(3)
    assert position == (0, 1)
    assert reward == 100.0
    assert done
    assert env.is_terminal()


def test_environment_stops_at_step_cap(blocked_grid):
    config = QLearningConfig(max_steps_per_episode=4)
    env = QLearningEnvironment(blocked_grid, blocked_grid.start, blocked_grid.end, config)
    env.reset()

    dones = [env.step(1)[2] for _ in range(4)]
    assert dones == [False, False, False, True]


def test_q_update_rule():
    grid = create_open_grid(2, 2)
    agent = QLearningAgent()
    agent.reset(grid)
    agent.q_table[1] = [0.0, 10.0, 0.0, 0.0]

    agent.update_q_value(0, 3, -1.0, 1)

    expected = 0.7 * (-1.0 + 0.95 * 10.0)
    assert agent.q_table[0, 3] == pytest.approx(expected)


def test_q_table_shape_and_reset(open_grid):
    agent = QLearningAgent()
    agent.reset(open_grid)

    assert agent.q_table.shape == (25, N_ACTIONS)
    assert not agent.q_table.any()


def test_best_action_prefers_first_on_ties(open_grid):
    agent = QLearningAgent()
    agent.reset(open_grid)
    agent.q_table[0] = [1.0, 3.0, 3.0, 0.0]

    assert agent.best_action(0) == 1


def test_select_action_is_greedy_when_epsilon_is_zero(open_grid):
    agent = QLearningAgent(QLearningConfig(epsilon_start=0.0, epsilon_floor=0.0))
    agent.reset(open_grid)
    agent.q_table[0] = [0.0, 0.0, 0.0, 5.0]

    assert all(agent.select_action(0) == 3 for _ in range(20))


def test_epsilon_decays_to_floor(corridor):
    agent = QLearningAgent(QLearningConfig(episodes=200), SeededRNG(0))
    agent.train(corridor, corridor.start, corridor.end)

    assert agent.epsilon == pytest.approx(0.1)
    history = agent.training_history
    assert history[0].epsilon_used == pytest.approx(0.9)
    assert history[1].epsilon_used == pytest.approx(0.9 * 0.98)


def test_corridor_policy_reaches_the_end(corridor):
    events = _events(corridor)
    final = events[-1]

    assert isinstance(final, PathFoundEvent)
    assert final.complete
    assert final.path == ((0, 0), (0, 1), (0, 2), (0, 3), (0, 4))


def test_open_grid_policy_is_a_valid_complete_path():
    grid = create_open_grid(3, 3)
    final = _events(grid)[-1]

    assert final.complete
    assert final.path[0] == grid.start
    assert final.path[-1] == grid.end
    assert validate_path(list(final.path), grid)
    assert len(set(final.path)) == len(final.path)


def test_unreachable_end_gives_incomplete_path(blocked_grid):
    events = _events(blocked_grid, QLearningConfig(episodes=20))
    final = events[-1]

    assert isinstance(final, PathFoundEvent)
    assert not final.complete
    assert final.path[0] == blocked_grid.start
    assert final.path[-1] != blocked_grid.end
    training = next(e for e in events if isinstance(e, TrainingCompleteEvent)).result
    assert training.successful_episodes == 0
    assert all(ep.steps == 45 for ep in training.episodes)


def test_event_order(corridor):
    events = _events(corridor, QLearningConfig(episodes=30, progress_interval_episodes=10))
    kinds = [type(e) for e in events]

    complete_at = kinds.index(TrainingCompleteEvent)
    assert set(kinds[:complete_at]) == {TrainingProgressEvent}
    assert set(kinds[complete_at + 1:-1]) == {AnimateStepEvent}
    assert kinds[-1] is PathFoundEvent
    animated = tuple(e.position for e in events if isinstance(e, AnimateStepEvent))
    assert animated == events[-1].path


def test_progress_every_interval_including_first_episode(fast_config, corridor):
    events = _events(corridor, fast_config)
    progress = [e for e in events if isinstance(e, TrainingProgressEvent)]

    assert [e.episode for e in progress] == list(range(0, 200, 10))
    assert all(e.total_episodes == 200 for e in progress)


def test_progress_reports_epsilon_used_by_the_episode(corridor):
    config = QLearningConfig(episodes=20, progress_interval_episodes=10)
    events = _events(corridor, config)
    progress = [e for e in events if isinstance(e, TrainingProgressEvent)]

    assert [e.episode for e in progress] == [0, 10]
    assert progress[0].epsilon == pytest.approx(0.9)
    assert progress[1].epsilon == pytest.approx(0.9 * 0.98 ** 10)


def test_explored_snapshots_only_grow(fast_config, open_grid):
    events = _events(open_grid, fast_config)
    snapshots = [e.explored for e in events if isinstance(e, TrainingProgressEvent)]

    for earlier, later in zip(snapshots, snapshots[1:]):
        assert later[:len(earlier)] == earlier
    assert len(set(snapshots[-1])) == len(snapshots[-1])


def test_same_seed_same_run(open_grid, fast_config):
    assert _events(open_grid, fast_config, seed=3) == _events(open_grid, fast_config, seed=3)


def test_same_seed_same_q_table(open_grid):
    first = QLearningAgent(QLearningConfig(episodes=50), SeededRNG(11))
    second = QLearningAgent(QLearningConfig(episodes=50), SeededRNG(11))
    first.train(open_grid, open_grid.start, open_grid.end)
    second.train(open_grid, open_grid.start, open_grid.end)

    assert np.array_equal(first.q_table, second.q_table)


def test_zero_episodes_still_emits_result(corridor):
    events = _events(corridor, QLearningConfig(episodes=0))

    assert isinstance(events[0], TrainingCompleteEvent)
    assert events[0].result.total_episodes == 0
    assert events[-1].path == ((0, 0),)
    assert not events[-1].complete


def test_rollout_stops_on_illegal_move(corridor):
    agent = QLearningAgent()
    agent.reset(corridor)

    rollout = agent.extract_path(corridor, corridor.start, corridor.end)

    assert rollout.stop_reason == "illegal_move"
    assert rollout.path == [(0, 0)]


def test_rollout_stops_on_cycle(corridor):
    agent = QLearningAgent()
    agent.reset(corridor)
    agent.q_table[corridor.state_index((0, 0)), 3] = 1.0  # right
    agent.q_table[corridor.state_index((0, 1)), 2] = 1.0  # left

    rollout = agent.extract_path(corridor, corridor.start, corridor.end)

    assert rollout.stop_reason == "cycle"
    assert rollout.path == [(0, 0), (0, 1)]
    assert not rollout.complete


def test_rollout_respects_step_limit(corridor):
    agent = QLearningAgent(QLearningConfig(max_path_steps=2))
    agent.reset(corridor)
    agent.q_table[:, 3] = 1.0

    rollout = agent.extract_path(corridor, corridor.start, corridor.end)

    assert rollout.stop_reason == "step_limit"
    assert rollout.path == [(0, 0), (0, 1), (0, 2)]
    assert rollout.path_length == 3


def test_wall_endpoint_raises(corridor):
    corridor.cells[0, 4] = 1

    with pytest.raises(ValueError):
        next(run_qlearning(corridor, seed=0))
