from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPainter, QWheelEvent
from PyQt5.QtWidgets import QGraphicsView


class CustomGraphicsView(QGraphicsView):
    """
    Canvas for the list view:
    - normal wheel: horizontal panning (lists grow sideways)
    - Shift + wheel: vertical panning
    - Ctrl + wheel: zoom by 1.1, clamped to [min_scale, max_scale]
    """

    min_scale = 0.05
    max_scale = 4.0

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setRenderHints(self.renderHints() | QPainter.Antialiasing | QPainter.TextAntialiasing)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setInteractive(True)
        self.setViewportUpdateMode(QGraphicsView.FullViewportUpdate)
        self._pan_step = 0.2

    def current_scale(self) -> float:
        return self.transform().m11()

    def zoom_by(self, factor: float):
        target = self.current_scale() * factor
        target = max(self.min_scale, min(self.max_scale, target))
        factor = target / self.current_scale()
        self.scale(factor, factor)

    def wheelEvent(self, event: QWheelEvent):
        delta = event.angleDelta().y()
        if event.modifiers() & Qt.ControlModifier:
            self.zoom_by(1.1 if delta > 0 else (1 / 1.1))
        elif event.modifiers() & Qt.ShiftModifier:
            bar = self.verticalScrollBar()
            bar.setValue(bar.value() - int(delta * self._pan_step))
        else:
            bar = self.horizontalScrollBar()
            bar.setValue(bar.value() - int(delta * self._pan_step))
        event.accept()
