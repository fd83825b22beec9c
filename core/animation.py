from PyQt5.QtCore import (
    QEasingCurve,
    QParallelAnimationGroup,
    QPropertyAnimation,
    QSequentialAnimationGroup,
    QVariantAnimation,
)
from PyQt5.QtGui import QColor


class AnimationToolkit:
    """
    Builds the animations used by the views with the global playback speed
    applied to every duration.
    """

    def __init__(self, global_ctrl):
        self.global_ctrl = global_ctrl

    @property
    def enabled(self) -> bool:
        return self.global_ctrl.animations_enabled

    def _duration(self, base_ms):
        return self.global_ctrl.scale_duration(base_ms)

    def move_item(self, item, end_pos, duration=420, easing=QEasingCurve.InOutCubic):
        anim = QPropertyAnimation(item, b"pos")
        anim.setDuration(self._duration(duration))
        anim.setEndValue(end_pos)
        anim.setEasingCurve(easing)
        return anim

    def fade_item(self, item, start=0.0, end=1.0, duration=420):
        anim = QPropertyAnimation(item, b"opacity")
        anim.setDuration(self._duration(duration))
        anim.setStartValue(start)
        anim.setEndValue(end)
        anim.setEasingCurve(QEasingCurve.InOutQuad)
        return anim

    def flash_brush(self, setter, start_color, end_color, duration=360):
        """
        Blend ``setter`` (a callable taking a QColor) to ``end_color`` and back.
        """
        total = self._duration(duration)

        def _update(value):
            if isinstance(value, QColor):
                setter(value)

        def _tween(start, end):
            anim = QVariantAnimation()
            anim.setDuration(total)
            anim.setStartValue(QColor(start))
            anim.setEndValue(QColor(end))
            anim.setEasingCurve(QEasingCurve.InOutQuad)
            anim.valueChanged.connect(_update)
            return anim

        return self.sequential(
            _tween(start_color, end_color), _tween(end_color, start_color)
        )

    def flash_cells(self, cells, color, duration=360):
        """Flash several cells at once, e.g. every member of a removed run."""
        return self.parallel(
            *[
                self.flash_brush(cell.setFillColor, cell.fillColor, color, duration)
                for cell in cells
            ]
        )

    def pause(self, duration=150):
        pause = QVariantAnimation()
        pause.setDuration(self._duration(duration))
        pause.setStartValue(0)
        pause.setEndValue(0)
        return pause

    @staticmethod
    def parallel(*animations):
        group = QParallelAnimationGroup()
        for anim in animations:
            if anim is not None:
                group.addAnimation(anim)
        return group

    @staticmethod
    def sequential(*animations):
        group = QSequentialAnimationGroup()
        for anim in animations:
            if anim is not None:
                group.addAnimation(anim)
        return group
