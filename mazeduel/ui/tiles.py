"""Grid tile graphics items and colour themes."""

from typing import Dict

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor, QFont, QPen
from PySide6.QtWidgets import QGraphicsRectItem

# Colour role names used as THEMES keys
TileRole = str

THEMES: Dict[str, Dict[TileRole, QColor]] = {
    "light": {
        "open": QColor("#dbeafe"),
        "wall": QColor("#94a3b8"),
        "start": QColor("#10b981"),
        "end": QColor("#ef4444"),
        "astar_explored": QColor("#60a5fa"),
        "astar_path": QColor("#fbbf24"),
        "qlearning_explored": QColor("#a78bfa"),
        "qlearning_path": QColor("#f472b6"),
        "vehicle": QColor("#f59e0b"),
        "border": QColor("#cbd5e1"),
        "background": QColor("#e0f2fe"),
    },
    "dark": {
        "open": QColor("#1e293b"),
        "wall": QColor("#475569"),
        "start": QColor("#10b981"),
        "end": QColor("#ef4444"),
        "astar_explored": QColor("#3b82f6"),
        "astar_path": QColor("#fbbf24"),
        "qlearning_explored": QColor("#8b5cf6"),
        "qlearning_path": QColor("#ec4899"),
        "vehicle": QColor("#f59e0b"),
        "border": QColor("#64748b"),
        "background": QColor("#0f172a"),
    },
}


class MazeTile(QGraphicsRectItem):
    """Graphics item representing a single grid cell."""

    def __init__(self, row: int, col: int, size: float):
        super().__init__(0, 0, size, size)
        self.row = row
        self.col = col
        self.size = size
        self.role: TileRole = "open"
        self.glyph = ""

        # Set position
        self.setPos(col * size, row * size)

    def set_role(self, role: TileRole, theme: Dict[TileRole, QColor], glyph: str = ""):
        """Update the tile colour and optional glyph."""
        self.role = role
        self.glyph = glyph
        self.setBrush(QBrush(theme.get(role, theme["open"])))
        if glyph:
            self.setPen(QPen(theme["vehicle"], 2))
        else:
            self.setPen(QPen(theme["border"], 0.5))
        self.update()

    def paint(self, painter, option, widget=None):
        super().paint(painter, option, widget)
        if self.glyph:
            painter.setFont(QFont("Arial", max(8, int(self.size * 0.6))))
            painter.drawText(self.rect(), Qt.AlignCenter, self.glyph)
