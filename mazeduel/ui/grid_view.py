"""Grid view for the maze pathfinding visualizer."""

from typing import Dict, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QPainter
from PySide6.QtWidgets import QGraphicsScene, QGraphicsView

from ..app.controller import MazeController
from ..domain.types import Coord
from .tiles import THEMES, MazeTile


class GridView(QGraphicsView):
    """Graphics view for displaying and editing the maze."""

    def __init__(self, controller: MazeController):
        super().__init__()

        self.controller = controller
        self.scene = QGraphicsScene()
        self.setScene(self.scene)

        self.tiles: Dict[Tuple[int, int], MazeTile] = {}
        self.tile_size = 24.0
        self.edit_mode = "wall"  # "wall", "start", "end"
        self.theme_name = "dark"
        self.vehicle_glyph = "\U0001F697"  # car
        self._shape = (0, 0)

        self.setRenderHint(QPainter.Antialiasing)

        self.controller.grid_updated.connect(self.update_grid)
        self.update_grid()

    @property
    def theme(self):
        return THEMES[self.theme_name]

    def set_theme(self, name: str):
        self.theme_name = name
        self.setBackgroundBrush(QBrush(self.theme["background"]))
        self.update_grid()

    def set_vehicle_glyph(self, glyph: str):
        self.vehicle_glyph = glyph
        self.update_grid()

    def set_edit_mode(self, mode: str):
        """Set the current edit mode."""
        self.edit_mode = mode

    def update_grid(self):
        """Redraw tiles from the session's grid and overlays."""
        grid = self.controller.grid
        if (grid.rows, grid.cols) != self._shape:
            self._rebuild_tiles(grid.rows, grid.cols)

        session = self.controller.session
        prefix = session.algorithm or "astar"
        explored = set(session.explored)
        path = set(session.path)

        for coord, tile in self.tiles.items():
            glyph = self.vehicle_glyph if coord == session.vehicle else ""
            tile.set_role(self._role_for(coord, grid, prefix, explored, path), self.theme, glyph)

    def _role_for(self, coord: Coord, grid, prefix: str, explored, path) -> str:
        if coord == grid.start:
            return "start"
        if coord == grid.end:
            return "end"
        if grid.is_wall(coord):
            return "wall"
        if coord in path:
            return f"{prefix}_path"
        if coord in explored:
            return f"{prefix}_explored"
        return "open"

    def _rebuild_tiles(self, rows: int, cols: int):
        self.scene.clear()
        self.tiles.clear()
        self.scene.setSceneRect(0, 0, cols * self.tile_size, rows * self.tile_size)
        for row in range(rows):
            for col in range(cols):
                tile = MazeTile(row, col, self.tile_size)
                self.scene.addItem(tile)
                self.tiles[(row, col)] = tile
        self._shape = (rows, cols)

    def mousePressEvent(self, event):
        """Handle mouse press events for tile editing."""
        if event.button() == Qt.LeftButton:
            scene_pos = self.mapToScene(event.pos())
            coord = (int(scene_pos.y() // self.tile_size), int(scene_pos.x() // self.tile_size))
            if self.controller.grid.is_valid_coord(coord):
                self.controller.edit_cell(coord, self.edit_mode)

        super().mousePressEvent(event)

    def fit_in_view(self):
        """Fit the entire grid in the view."""
        if self.scene.items():
            self.fitInView(self.scene.itemsBoundingRect(), Qt.KeepAspectRatio)
