"""Main window for the maze pathfinding visualizer."""

from dataclasses import replace

from PySide6.QtWidgets import (
    QMainWindow, QVBoxLayout, QHBoxLayout, QWidget, QPushButton,
    QLabel, QSlider, QComboBox, QSpinBox, QButtonGroup,
    QRadioButton, QStatusBar, QGroupBox
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut

from ..app.controller import MazeController
from ..app.fsm import RunState
from .grid_view import GridView

VEHICLES = {
    "Car": "\U0001F697",
    "Rocket": "\U0001F680",
    "Mouse": "\U0001F42D",
    "Robot": "\U0001F916",
}


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, controller: MazeController):
        super().__init__()
        self.controller = controller

        self.setWindowTitle("MazeDuel - A* vs Q-Learning")
        self.setMinimumSize(900, 700)

        self._create_ui()
        self._setup_connections()
        self._setup_shortcuts()

        self.grid_view.set_theme("dark")
        self._update_button_states()

    def _create_ui(self):
        """Create the user interface."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QVBoxLayout(central_widget)
        main_layout.addLayout(self._create_controls())

        self.grid_view = GridView(self.controller)
        main_layout.addWidget(self.grid_view, 1)

        self.episode_label = QLabel("")
        main_layout.addWidget(self.episode_label)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready - Click cells to edit the maze, then run A* or Q-Learning")

    def _create_controls(self) -> QHBoxLayout:
        """Create the control panel."""
        layout = QHBoxLayout()

        # Run controls
        algo_group = QGroupBox("Algorithm")
        algo_layout = QHBoxLayout(algo_group)

        self.astar_btn = QPushButton("Run A*")
        self.qlearning_btn = QPushButton("Run Q-Learning")
        self.cancel_btn = QPushButton("Cancel")
        self.clear_btn = QPushButton("Clear Paths")

        for btn in [self.astar_btn, self.qlearning_btn, self.cancel_btn, self.clear_btn]:
            algo_layout.addWidget(btn)

        algo_layout.addWidget(QLabel("Episodes:"))
        self.episodes_spin = QSpinBox()
        self.episodes_spin.setRange(1, 5000)
        self.episodes_spin.setValue(self.controller.session.config.episodes)
        algo_layout.addWidget(self.episodes_spin)

        # Speed control (timer interval, lower is faster)
        speed_layout = QVBoxLayout()
        speed_layout.addWidget(QLabel("Step delay (ms)"))
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(0, 500)
        self.speed_slider.setValue(self.controller.speed)
        speed_layout.addWidget(self.speed_slider)

        # Maze controls
        grid_group = QGroupBox("Maze")
        grid_layout = QHBoxLayout(grid_group)

        grid_layout.addWidget(QLabel("Size:"))
        self.rows_spin = QSpinBox()
        self.rows_spin.setRange(5, 99)
        self.rows_spin.setSingleStep(2)
        self.rows_spin.setValue(self.controller.grid.rows)
        grid_layout.addWidget(self.rows_spin)

        grid_layout.addWidget(QLabel("×"))
        self.cols_spin = QSpinBox()
        self.cols_spin.setRange(5, 99)
        self.cols_spin.setSingleStep(2)
        self.cols_spin.setValue(self.controller.grid.cols)
        grid_layout.addWidget(self.cols_spin)

        self.new_maze_btn = QPushButton("New Maze")
        grid_layout.addWidget(self.new_maze_btn)

        # Edit mode
        edit_group = QGroupBox("Edit Mode")
        edit_layout = QVBoxLayout(edit_group)

        self.edit_button_group = QButtonGroup()
        self.wall_radio = QRadioButton("Toggle Walls")
        self.start_radio = QRadioButton("Set Start")
        self.end_radio = QRadioButton("Set End")
        self.wall_radio.setChecked(True)

        for radio in [self.wall_radio, self.start_radio, self.end_radio]:
            self.edit_button_group.addButton(radio)
            edit_layout.addWidget(radio)

        # Appearance
        look_group = QGroupBox("Appearance")
        look_layout = QVBoxLayout(look_group)

        self.theme_combo = QComboBox()
        self.theme_combo.addItems(["dark", "light"])
        look_layout.addWidget(self.theme_combo)

        self.vehicle_combo = QComboBox()
        self.vehicle_combo.addItems(list(VEHICLES))
        look_layout.addWidget(self.vehicle_combo)

        layout.addWidget(algo_group)
        layout.addLayout(speed_layout)
        layout.addWidget(grid_group)
        layout.addWidget(edit_group)
        layout.addWidget(look_group)
        layout.addStretch()

        return layout

    def _setup_connections(self):
        """Setup signal connections."""
        self.astar_btn.clicked.connect(self._on_astar_clicked)
        self.qlearning_btn.clicked.connect(self._on_qlearning_clicked)
        self.cancel_btn.clicked.connect(self.controller.cancel)
        self.clear_btn.clicked.connect(self.controller.clear_paths)
        self.new_maze_btn.clicked.connect(self._on_new_maze)

        self.speed_slider.valueChanged.connect(self._on_speed_changed)

        self.wall_radio.toggled.connect(lambda: self._set_edit_mode("wall"))
        self.start_radio.toggled.connect(lambda: self._set_edit_mode("start"))
        self.end_radio.toggled.connect(lambda: self._set_edit_mode("end"))

        self.theme_combo.currentTextChanged.connect(self.grid_view.set_theme)
        self.vehicle_combo.currentTextChanged.connect(
            lambda name: self.grid_view.set_vehicle_glyph(VEHICLES[name])
        )

        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.status_changed.connect(self.status_bar.showMessage)
        self.controller.error_occurred.connect(self._on_error)
        self.controller.training_progress.connect(self._on_training_progress)

    def _setup_shortcuts(self):
        """Setup keyboard shortcuts."""
        QShortcut(QKeySequence("A"), self, self._on_astar_clicked)
        QShortcut(QKeySequence("L"), self, self._on_qlearning_clicked)
        QShortcut(QKeySequence("C"), self, self.controller.clear_paths)
        QShortcut(QKeySequence("Ctrl+N"), self, self._on_new_maze)
        QShortcut(QKeySequence("Escape"), self, self.controller.cancel)
        QShortcut(QKeySequence("Ctrl+Q"), self, self.close)

    def _on_astar_clicked(self):
        self.controller.start_astar()

    def _on_qlearning_clicked(self):
        """Start Q-learning with the episode count from the spin box."""
        config = replace(self.controller.session.config, episodes=self.episodes_spin.value())
        self.controller.start_qlearning(config)

    def _on_speed_changed(self, value: int):
        self.controller.speed = value

    def _on_new_maze(self):
        self.controller.new_maze(self.rows_spin.value(), self.cols_spin.value())
        self.grid_view.fit_in_view()

    def _set_edit_mode(self, mode: str):
        """Set the grid edit mode."""
        self.grid_view.set_edit_mode(mode)

    def _on_state_changed(self, state: RunState):
        if state == RunState.IDLE:
            self.episode_label.setText("")
        self._update_button_states()

    def _on_training_progress(self, episode: int, explored):
        self.episode_label.setText(f"Episode {episode + 1} - {len(explored)} cells visited")

    def _on_error(self, error_msg: str):
        """Handle error from controller."""
        self.status_bar.showMessage(f"Error: {error_msg}")

    def _update_button_states(self):
        """Update button enabled/disabled states based on current state."""
        running = self.controller.is_running

        self.astar_btn.setEnabled(not running)
        self.qlearning_btn.setEnabled(not running)
        self.new_maze_btn.setEnabled(not running)
        self.clear_btn.setEnabled(not running)
        self.episodes_spin.setEnabled(not running)
        self.cancel_btn.setEnabled(running)

    def showEvent(self, event):
        super().showEvent(event)
        self.grid_view.fit_in_view()

    def closeEvent(self, event):
        """Stop any active run before closing."""
        self.controller.cancel()
        event.accept()
