"""Q-Learning algorithm implementation for pathfinding."""

import logging
from typing import Dict, Iterator, List, Optional

import numpy as np

from ..utils.rng import SeededRNG
from .events import (
    AnimateStepEvent, Event, PathFoundEvent, TrainingCompleteEvent, TrainingProgressEvent
)
from .neighbors import apply_action
from .types import (
    ActionInt, Coord, Episode, Grid, QLearningConfig, RolloutResult, TrainingResult
)

logger = logging.getLogger(__name__)

N_ACTIONS = 4


class QLearningEnvironment:
    """
    Grid environment for the Q-learning agent.

    Blocked or off-grid moves are self-loops: the agent stays in place and
    still pays the step reward.
    """

    def __init__(self, grid: Grid, start: Coord, target: Coord, config: QLearningConfig):
        self.grid = grid
        self.start = tuple(start)
        self.target = tuple(target)
        self.config = config
        self.max_steps = config.steps_per_episode(grid)
        self.current_pos = self.start
        self.steps_taken = 0
        self.total_reward = 0.0

    def reset(self) -> Coord:
        """Reset environment to initial state."""
        self.current_pos = self.start
        self.steps_taken = 0
        self.total_reward = 0.0
        return self.current_pos

    def step(self, action: ActionInt) -> tuple:
        """
        Execute action and return (next_state, reward, done).

        ``done`` is True once the target is reached or the step budget is
        spent.
        """
        self.steps_taken += 1
        self.current_pos, _ = apply_action(self.current_pos, action, self.grid)

        reached = self.current_pos == self.target
        reward = self.config.reward_goal if reached else self.config.reward_step
        self.total_reward += reward

        done = reached or self.steps_taken >= self.max_steps
        return self.current_pos, reward, done

    def is_terminal(self) -> bool:
        return self.current_pos == self.target or self.steps_taken >= self.max_steps


class QLearningAgent:
    """Tabular Q-learning agent with an epsilon-greedy behaviour policy."""

    def __init__(self, config: Optional[QLearningConfig] = None, rng: Optional[SeededRNG] = None):
        self.config = config or QLearningConfig()
        self.config.validate()
        self.rng = rng or SeededRNG()
        self.q_table = np.zeros((0, N_ACTIONS))
        self.epsilon = self.config.epsilon_start
        self.episodes_completed = 0
        self.training_history: List[Episode] = []

    def reset(self, grid: Grid):
        """Start from a zeroed Q-table sized for the grid."""
        self.q_table = np.zeros((grid.rows * grid.cols, N_ACTIONS))
        self.epsilon = self.config.epsilon_start
        self.episodes_completed = 0
        self.training_history = []

    def best_action(self, state_index: int) -> ActionInt:
        """Greedy action; the first index wins ties."""
        return int(np.argmax(self.q_table[state_index]))

    def select_action(self, state_index: int) -> ActionInt:
        """Epsilon-greedy action selection."""
        if self.rng.random() < self.epsilon:
            return self.rng.randint(0, N_ACTIONS - 1)
        return self.best_action(state_index)

    def update_q_value(self, state_index: int, action: ActionInt, reward: float,
                       next_state_index: int):
        """Q-learning update: Q[s,a] += alpha * (r + gamma * max Q[s'] - Q[s,a])."""
        current_q = self.q_table[state_index, action]
        future_q = np.max(self.q_table[next_state_index])
        target = reward + self.config.gamma * future_q
        self.q_table[state_index, action] = current_q + self.config.alpha * (target - current_q)

    def decay_epsilon(self):
        """Decay epsilon for less exploration over time."""
        self.epsilon = max(self.config.epsilon_floor, self.epsilon * self.config.epsilon_decay)

    def train_episode(self, env: QLearningEnvironment, explored: Dict[Coord, None]) -> Episode:
        """
        Train for one episode.

        Every state the agent lands on is added to ``explored``, which keeps
        insertion order across episodes.
        """
        grid = env.grid
        state = env.reset()
        epsilon_used = self.epsilon

        while not env.is_terminal():
            state_index = grid.state_index(state)
            action = self.select_action(state_index)
            next_state, reward, _ = env.step(action)
            self.update_q_value(state_index, action, reward, grid.state_index(next_state))
            state = next_state
            explored.setdefault(state, None)

        episode = Episode(
            number=self.episodes_completed,
            steps=env.steps_taken,
            total_reward=env.total_reward,
            reached_goal=state == env.target,
            epsilon_used=epsilon_used,
        )
        self.training_history.append(episode)
        self.episodes_completed += 1
        self.decay_epsilon()
        return episode

    def training_result(self) -> TrainingResult:
        episodes = self.training_history
        total_reward = sum(ep.total_reward for ep in episodes)
        return TrainingResult(
            episodes=list(episodes),
            total_episodes=len(episodes),
            successful_episodes=sum(1 for ep in episodes if ep.reached_goal),
            average_reward=total_reward / len(episodes) if episodes else 0.0,
            final_epsilon=self.epsilon,
        )

    def train(self, grid: Grid, start: Coord, target: Coord) -> TrainingResult:
        """Train for the configured number of episodes without yielding."""
        for _ in self.iter_training(grid, start, target, {}):
            pass
        return self.training_result()

    def iter_training(self, grid: Grid, start: Coord, target: Coord,
                      explored: Dict[Coord, None]) -> Iterator[Episode]:
        """Reset, then yield each finished episode."""
        self.reset(grid)
        env = QLearningEnvironment(grid, start, target, self.config)
        for _ in range(self.config.episodes):
            yield self.train_episode(env, explored)

    def extract_path(self, grid: Grid, start: Coord, target: Coord) -> RolloutResult:
        """
        Greedy rollout of the learned policy.

        Follows only legal moves and never appends a cell twice. Stops at the
        target, on an illegal greedy move, when the policy cycles back onto
        its own path, or after the step limit.
        """
        start, target = tuple(start), tuple(target)
        path = [start]
        on_path = {start}
        state = start
        stop_reason = "step_limit"
        steps = 0

        for steps in range(1, self.config.path_step_limit(grid) + 1):
            action = self.best_action(grid.state_index(state))
            next_state, moved = apply_action(state, action, grid)
            if not moved:
                stop_reason = "illegal_move"
                break
            if next_state in on_path:
                stop_reason = "cycle"
                break
            state = next_state
            path.append(state)
            on_path.add(state)
            if state == target:
                stop_reason = "reached_end"
                break

        return RolloutResult(
            path=path,
            complete=path[-1] == target,
            stop_reason=stop_reason,
            steps_taken=steps,
        )


def run_qlearning(grid: Grid, start: Optional[Coord] = None, end: Optional[Coord] = None,
                  config: Optional[QLearningConfig] = None, rng: Optional[SeededRNG] = None,
                  seed: Optional[int] = None) -> Iterator[Event]:
    """
    Lazily train a fresh Q-table and yield progress and result events.

    Emits a TrainingProgressEvent every ``progress_interval_episodes``
    episodes (episode 0 included), a TrainingCompleteEvent, one
    AnimateStepEvent per extracted cell and finally a PathFoundEvent whose
    ``complete`` flag says whether the rollout reached ``end``.
    """
    start = tuple(grid.start if start is None else start)
    end = tuple(grid.end if end is None else end)
    if not grid.is_open(start):
        raise ValueError(f"Start position {start} is not passable")
    if not grid.is_open(end):
        raise ValueError(f"Target position {end} is not passable")
    if start == end:
        raise ValueError("Start and target positions are the same")

    config = config or QLearningConfig()
    agent = QLearningAgent(config, rng or SeededRNG(seed))
    explored: Dict[Coord, None] = {}

    logger.debug("Q-learning started: %d episodes on %dx%d grid",
                 config.episodes, grid.rows, grid.cols)

    for episode in agent.iter_training(grid, start, end, explored):
        if episode.number % config.progress_interval_episodes == 0:
            yield TrainingProgressEvent(
                episode=episode.number,
                explored=tuple(explored),
                epsilon=episode.epsilon_used,
                total_episodes=config.episodes,
            )

    training = agent.training_result()
    logger.info("Q-learning trained %d episodes, %d reached the goal, final epsilon %.3f",
                training.total_episodes, training.successful_episodes, training.final_epsilon)
    yield TrainingCompleteEvent(training)

    rollout = agent.extract_path(grid, start, end)
    if rollout.complete:
        logger.info("Q-learning policy reaches the goal in %d cells", rollout.path_length)
    else:
        logger.info("Q-learning policy stopped early (%s) after %d cells",
                    rollout.stop_reason, rollout.path_length)

    for index, coord in enumerate(rollout.path):
        yield AnimateStepEvent(coord, index, "qlearning")
    yield PathFoundEvent(
        path=tuple(rollout.path),
        complete=rollout.complete,
        algorithm="qlearning",
        explored_count=len(explored),
    )
