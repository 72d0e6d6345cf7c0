"""
Progress events emitted by the pathfinding engines.

Both engines are generators of these events. A host renders them at its own
pace, either by iterating the stream directly or by routing each event to a
listener with ``dispatch``. The terminal event (``PathFoundEvent`` or
``NoPathEvent``) is always the last one in a stream.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from .types import AlgorithmId, Coord, TrainingResult


@dataclass(frozen=True)
class ExploreEvent:
    """A* popped a cell from its frontier."""
    position: Coord
    order: int  # 0-based position in the exploration trace


@dataclass(frozen=True)
class TrainingProgressEvent:
    """Snapshot of Q-learning progress, emitted every few episodes."""
    episode: int
    explored: Tuple[Coord, ...]
    epsilon: float  # exploration rate used during this episode
    total_episodes: int


@dataclass(frozen=True)
class TrainingCompleteEvent:
    """Q-learning finished its episodes and is about to extract a path."""
    result: TrainingResult = field(compare=False)


@dataclass(frozen=True)
class AnimateStepEvent:
    """One cell of the final path, in path order."""
    position: Coord
    index: int
    algorithm: AlgorithmId


@dataclass(frozen=True)
class PathFoundEvent:
    """
    Terminal result carrying a path.

    ``complete`` is False when a Q-learning rollout stopped before the end.
    """
    path: Tuple[Coord, ...]
    complete: bool
    algorithm: AlgorithmId
    explored_count: int = 0


@dataclass(frozen=True)
class NoPathEvent:
    """Terminal result: A* exhausted its frontier."""
    algorithm: AlgorithmId
    nodes_explored: int = 0


Event = Union[
    ExploreEvent,
    TrainingProgressEvent,
    TrainingCompleteEvent,
    AnimateStepEvent,
    PathFoundEvent,
    NoPathEvent,
]


def is_terminal(event: Event) -> bool:
    return isinstance(event, (PathFoundEvent, NoPathEvent))


class BaseListener:
    """Listener with no-op handlers; override the ones you need."""

    def on_explore(self, position: Coord):
        pass

    def on_training_progress(self, episode: int, explored: Tuple[Coord, ...]):
        pass

    def on_training_complete(self, result: TrainingResult):
        pass

    def on_animate_step(self, position: Coord):
        pass

    def on_path_found(self, path: Tuple[Coord, ...], complete: bool):
        pass

    def on_no_path(self):
        pass


class RecordingListener(BaseListener):
    """Listener that records every call, in order."""

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []
        self.explored: List[Coord] = []
        self.animated: List[Coord] = []
        self.progress_episodes: List[int] = []
        self.path: Optional[Tuple[Coord, ...]] = None
        self.complete: Optional[bool] = None
        self.no_path = False

    def on_explore(self, position):
        self.calls.append(("explore", (position,)))
        self.explored.append(position)

    def on_training_progress(self, episode, explored):
        self.calls.append(("training_progress", (episode, explored)))
        self.progress_episodes.append(episode)

    def on_training_complete(self, result):
        self.calls.append(("training_complete", (result,)))

    def on_animate_step(self, position):
        self.calls.append(("animate_step", (position,)))
        self.animated.append(position)

    def on_path_found(self, path, complete):
        self.calls.append(("path_found", (path, complete)))
        self.path = path
        self.complete = complete

    def on_no_path(self):
        self.calls.append(("no_path", ()))
        self.no_path = True


def dispatch(event: Event, listener: BaseListener):
    """Route a single event to the matching listener callback."""
    if isinstance(event, ExploreEvent):
        listener.on_explore(event.position)
    elif isinstance(event, TrainingProgressEvent):
        listener.on_training_progress(event.episode, event.explored)
    elif isinstance(event, TrainingCompleteEvent):
        listener.on_training_complete(event.result)
    elif isinstance(event, AnimateStepEvent):
        listener.on_animate_step(event.position)
    elif isinstance(event, PathFoundEvent):
        listener.on_path_found(event.path, event.complete)
    elif isinstance(event, NoPathEvent):
        listener.on_no_path()
    else:
        raise TypeError(f"Unknown event type: {type(event).__name__}")


def drive(events: Iterable[Event], listener: BaseListener) -> Optional[Event]:
    """
    Consume a whole event stream, dispatching each event.
    Returns the terminal event, or None if the stream ended without one.
    """
    terminal = None
    for event in events:
        dispatch(event, listener)
        if is_terminal(event):
            terminal = event
    return terminal
