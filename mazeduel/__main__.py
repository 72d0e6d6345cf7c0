"""Main entry point for the MazeDuel visualizer."""

import logging
import os
import sys

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt


def main():
    """Main entry point for the application."""
    # Disable DPI scaling so tiles stay square on macOS
    os.environ.setdefault('QT_AUTO_SCREEN_SCALE_FACTOR', '0')
    os.environ.setdefault('QT_SCALE_FACTOR', '1')
    os.environ.setdefault('QT_LOGGING_RULES', 'qt.qpa.backingstore=false')

    logging.basicConfig(
        level=logging.DEBUG if "--verbose" in sys.argv else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    QApplication.setHighDpiScaleFactorRoundingPolicy(Qt.HighDpiScaleFactorRoundingPolicy.Floor)

    app = QApplication(sys.argv)
    app.setApplicationName("MazeDuel")
    app.setApplicationVersion("1.0.0")

    # Import UI components (after QApplication is created)
    from .app.controller import MazeController
    from .ui.main_window import MainWindow

    controller = MazeController()
    window = MainWindow(controller)

    try:
        window.show()
        return app.exec()
    finally:
        controller.cancel()


if __name__ == "__main__":
    sys.exit(main())
