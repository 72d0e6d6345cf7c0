#!/usr/bin/env python3
"""
Headless maze runner.

Carves a maze, optionally edits it, runs A* and/or Q-learning over it and
prints the maze with the resulting paths drawn in ASCII.
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from .app.session import DEFAULT_COLS, DEFAULT_ROWS
from .domain.astar import run_astar
from .domain.events import (
    AnimateStepEvent, Event, ExploreEvent, NoPathEvent, PathFoundEvent,
    TrainingCompleteEvent, TrainingProgressEvent
)
from .domain.qlearning import run_qlearning
from .domain.types import Coord, Grid, QLearningConfig
from .utils.grid_factory import generate_maze, grid_to_strings, parse_coord

logger = logging.getLogger(__name__)

PATH_CHAR = "*"
EXPLORED_CHAR = "o"

ALGORITHM_NAMES = {"astar": "A*", "qlearning": "Q-Learning"}


def build_parser() -> argparse.ArgumentParser:
    defaults = QLearningConfig()
    parser = argparse.ArgumentParser(
        prog="mazeduel-cli",
        description="Run A* and Q-learning on a generated maze",
    )
    parser.add_argument("--rows", type=int, default=DEFAULT_ROWS, help="Maze height in cells")
    parser.add_argument("--cols", type=int, default=DEFAULT_COLS, help="Maze width in cells")
    parser.add_argument("--seed", type=int, help="Seed for maze carving and Q-learning exploration")
    parser.add_argument("--algorithm", choices=["astar", "qlearning", "both"], default="both",
                        help="Which engine(s) to run")

    rl = parser.add_argument_group("Q-learning")
    rl.add_argument("--episodes", type=int, default=defaults.episodes, help="Training episodes")
    rl.add_argument("--alpha", type=float, default=defaults.alpha, help="Learning rate")
    rl.add_argument("--gamma", type=float, default=defaults.gamma, help="Discount factor")
    rl.add_argument("--epsilon-start", type=float, default=defaults.epsilon_start,
                    help="Initial exploration rate")
    rl.add_argument("--epsilon-decay", type=float, default=defaults.epsilon_decay,
                    help="Per-episode epsilon multiplier")
    rl.add_argument("--epsilon-floor", type=float, default=defaults.epsilon_floor,
                    help="Minimum exploration rate")
    rl.add_argument("--max-steps", type=int, help="Step cap per episode (default 3 * rows * cols)")
    rl.add_argument("--progress-interval", type=int, default=defaults.progress_interval_episodes,
                    help="Episodes between progress lines")

    edits = parser.add_argument_group("Maze edits")
    edits.add_argument("--wall", action="append", default=[], metavar="R,C",
                       help="Toggle the wall at R,C (repeatable)")
    edits.add_argument("--start", metavar="R,C", help="Move the start cell")
    edits.add_argument("--end", metavar="R,C", help="Move the end cell")

    parser.add_argument("--show-explored", action="store_true",
                        help="Mark explored cells in the printed maze")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> QLearningConfig:
    config = QLearningConfig(
        episodes=args.episodes,
        alpha=args.alpha,
        gamma=args.gamma,
        epsilon_start=args.epsilon_start,
        epsilon_decay=args.epsilon_decay,
        epsilon_floor=args.epsilon_floor,
        max_steps_per_episode=args.max_steps,
        progress_interval_episodes=args.progress_interval,
    )
    config.validate()
    return config


def build_grid(args: argparse.Namespace) -> Grid:
    """Carve the maze and apply command line edits, raising ValueError on a rejected edit."""
    grid = generate_maze(args.rows, args.cols, seed=args.seed)

    for text in args.wall:
        coord = parse_coord(text)
        if not grid.toggle_wall(coord):
            raise ValueError(f"Cannot toggle wall at {coord}")
    if args.start and not grid.set_start(parse_coord(args.start)):
        raise ValueError(f"Cannot place start at {args.start}")
    if args.end and not grid.set_end(parse_coord(args.end)):
        raise ValueError(f"Cannot place end at {args.end}")
    return grid


def render(grid: Grid, path: List[Coord], explored: List[Coord], show_explored: bool) -> List[str]:
    overlays: Dict[Coord, str] = {}
    if show_explored:
        overlays.update((coord, EXPLORED_CHAR) for coord in explored)
    overlays.update((coord, PATH_CHAR) for coord in path)
    return grid_to_strings(grid, overlays)


def run_algorithm(name: str, grid: Grid, config: QLearningConfig, seed: Optional[int],
                  show_explored: bool) -> bool:
    """Run one engine to completion and print its report. Returns True if the end was reached."""
    if name == "astar":
        events = run_astar(grid)
    else:
        events = run_qlearning(grid, config=config, seed=seed)

    label = ALGORITHM_NAMES[name]
    print(f"\n=== {label} ===")

    explored: List[Coord] = []
    path: List[Coord] = []
    terminal: Optional[Event] = None
    for event in events:
        if isinstance(event, ExploreEvent):
            explored.append(event.position)
        elif isinstance(event, TrainingProgressEvent):
            explored = list(event.explored)
            print(f"Episode {event.episode + 1}/{event.total_episodes}: "
                  f"{len(event.explored)} cells visited, epsilon {event.epsilon:.3f}")
        elif isinstance(event, TrainingCompleteEvent):
            result = event.result
            print(f"Training complete: {result.successful_episodes}/{result.total_episodes} "
                  f"episodes reached the end ({result.success_rate:.1%}), "
                  f"average reward {result.average_reward:.2f}")
        elif isinstance(event, AnimateStepEvent):
            path.append(event.position)
        elif isinstance(event, (PathFoundEvent, NoPathEvent)):
            terminal = event

    for line in render(grid, path, explored, show_explored):
        print(line)

    if isinstance(terminal, PathFoundEvent) and terminal.complete:
        print(f"{label} found path! Length: {len(terminal.path)} cells, explored {len(explored)}")
        return True
    if isinstance(terminal, PathFoundEvent):
        print(f"{label} policy stopped early at {terminal.path[-1]} after {len(terminal.path)} cells")
    else:
        print(f"{label} found no path after exploring {len(explored)} cells")
    return False


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
        grid = build_grid(args)

        print(f"Maze {grid.rows}x{grid.cols}, start {grid.start}, end {grid.end}")
        algorithms = ["astar", "qlearning"] if args.algorithm == "both" else [args.algorithm]
        for name in algorithms:
            run_algorithm(name, grid, config, args.seed, args.show_explored)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
