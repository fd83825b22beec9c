import logging
import sys
from pathlib import Path

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QApplication,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from core.global_ctrl import GlobalController
from rangelist.rl_ctrl import RangeListController
from widgets.graphics_view import CustomGraphicsView

DEMO_VALUES = ["a", "b", "c", "d", "e", "f", "g"]


class MainWindow(QMainWindow):
    """Main window: list canvas and operations on the left, event log on the right."""

    def __init__(self, values=None):
        super().__init__()
        self.setWindowTitle("PyQt5 Range Observable List")
        self.resize(1280, 760)

        self.global_ctrl = GlobalController()
        self.controller = RangeListController(
            self.global_ctrl, DEMO_VALUES if values is None else values
        )

        self._build_ui()
        self._connect_signals()

        style_path = Path(__file__).parent / "resources" / "styles.qss"
        if style_path.exists():
            with open(style_path, "r", encoding="utf-8") as handle:
                self.setStyleSheet(handle.read())

        self.controller.on_activate(self.graphics_view)

    def _build_ui(self):
        central = QWidget(self)
        self.setCentralWidget(central)

        root_layout = QHBoxLayout(central)
        root_layout.setContentsMargins(8, 8, 8, 8)
        root_layout.setSpacing(8)

        # Left panel (70%)
        left_panel = QWidget()
        left_layout = QVBoxLayout(left_panel)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.setSpacing(6)

        self.graphics_view = CustomGraphicsView()
        left_layout.addWidget(self.graphics_view, 1)

        speed_layout = QHBoxLayout()
        speed_label = QLabel("Animation Speed")
        self.speed_value_label = QLabel("1.0×")
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(50, 300)  # maps to 0.5x – 3x
        self.speed_slider.setValue(100)
        self.animate_check = QCheckBox("Animate")
        self.animate_check.setChecked(self.global_ctrl.animations_enabled)
        speed_layout.addWidget(speed_label)
        speed_layout.addWidget(self.speed_slider, 1)
        speed_layout.addWidget(self.speed_value_label)
        speed_layout.addWidget(self.animate_check)
        left_layout.addLayout(speed_layout)

        left_layout.addWidget(self.controller.build_panel(), 0)

        # Right panel (30%)
        right_panel = QWidget()
        right_layout = QVBoxLayout(right_panel)
        right_layout.setContentsMargins(0, 0, 0, 0)
        log_label = QLabel("Change Events")
        self.event_log = QPlainTextEdit()
        self.event_log.setReadOnly(True)
        self.clear_log_btn = QPushButton("Clear Log")
        right_layout.addWidget(log_label)
        right_layout.addWidget(self.event_log, 1)
        right_layout.addWidget(self.clear_log_btn)

        root_layout.addWidget(left_panel, 14)
        root_layout.addWidget(right_panel, 6)

    def _connect_signals(self):
        self.speed_slider.valueChanged.connect(self._on_speed_slider_changed)
        self.animate_check.toggled.connect(self.global_ctrl.set_animations_enabled)
        self.controller.eventLogged.connect(self.event_log.appendPlainText)
        self.clear_log_btn.clicked.connect(self.event_log.clear)

    def closeEvent(self, event):
        self.controller.on_deactivate()
        super().closeEvent(event)

    def _on_speed_slider_changed(self, value):
        speed = value / 100.0
        self.speed_value_label.setText(f"{speed:.1f}×")
        self.global_ctrl.set_speed(speed)


def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = QApplication(sys.argv)
    window = MainWindow()
    window.showMaximized()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
