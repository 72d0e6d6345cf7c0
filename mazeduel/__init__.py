"""MazeDuel - A* search and tabular Q-learning racing through the same maze.

The engines live in ``mazeduel.domain`` and stream their progress as events;
``mazeduel.app`` gates one run at a time and paces the stream for the Qt UI,
and ``mazeduel.cli`` runs everything headlessly.
"""

__version__ = "1.0.0"
__author__ = "MazeDuel"
