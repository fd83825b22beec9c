import math

from PyQt5.QtCore import QObject, QPointF, QRectF, QVariantAnimation, pyqtSignal
from PyQt5.QtWidgets import QGraphicsScene

from core.animation import AnimationToolkit


class BaseStructureView(QObject):
    """
    Base class for structure-specific views, providing:
    - shared QGraphicsScene
    - animation helper + lifecycle management
    - interaction locking to keep controllers in sync
    """

    interactionLocked = pyqtSignal(bool)

    def __init__(self, global_ctrl):
        super().__init__()
        self.scene = QGraphicsScene()
        self.scene.setSceneRect(-200, -200, 1200, 800)
        self.anim = AnimationToolkit(global_ctrl)
        self._locked = False
        self._running = []
        self._canvas = None  # bound QGraphicsView (optional)
        self._base_scene_rect = QRectF(self.scene.sceneRect())
        self._view_anim = None

    @property
    def locked(self) -> bool:
        return self._locked

    def bind_canvas(self, view):
        self._cancel_view_anim()
        if self._canvas is not None:
            self._canvas.destroyed.disconnect(self._on_canvas_destroyed)
        self._canvas = view
        if view:
            view.destroyed.connect(self._on_canvas_destroyed)
            view.setScene(self.scene)
            view.resetTransform()

    def _on_canvas_destroyed(self, _obj=None):
        self._cancel_view_anim()
        self._canvas = None

    def auto_fit_view(self, padding=120):
        if not self._canvas:
            return

        items_rect = self.scene.itemsBoundingRect()
        if items_rect.isNull():
            target_rect = QRectF(self._base_scene_rect)
        else:
            padded = QRectF(items_rect)
            padded.adjust(-padding, -padding, padding, padding)
            target_rect = (
                QRectF(self._base_scene_rect)
                if self._base_scene_rect.contains(padded)
                else padded
            )

        self.scene.setSceneRect(target_rect)
        self._animate_view_to_rect(target_rect)

    def _animate_view_to_rect(self, target_rect, duration=360):
        if not self._canvas or target_rect.isNull():
            return

        viewport = self._canvas.viewport().rect()
        if viewport.isNull():
            return

        current_center = self._canvas.mapToScene(viewport.center())
        target_center = target_rect.center()

        current_scale = self._canvas.transform().m11()
        if not math.isfinite(current_scale) or abs(current_scale) < 1e-4:
            current_scale = 1.0

        width = max(target_rect.width(), 1.0)
        height = max(target_rect.height(), 1.0)
        desired_scale = min(viewport.width() / width, viewport.height() / height)
        desired_scale = min(max(0.05, desired_scale), 1.0)

        self._cancel_view_anim()
        if not self.anim.enabled:
            self._apply_view_state(desired_scale, target_center)
            return

        anim = QVariantAnimation(self)
        anim.setDuration(self.anim.global_ctrl.scale_duration(duration))
        anim.setStartValue(0.0)
        anim.setEndValue(1.0)

        def _step(progress):
            if self._canvas is None:
                return
            scale = current_scale + (desired_scale - current_scale) * progress
            cx = current_center.x() + (target_center.x() - current_center.x()) * progress
            cy = current_center.y() + (target_center.y() - current_center.y()) * progress
            self._apply_view_state(scale, QPointF(cx, cy))

        def _finish():
            self._view_anim = None
            if self._canvas is not None:
                self._apply_view_state(desired_scale, target_center)

        anim.valueChanged.connect(_step)
        anim.finished.connect(_finish)
        self._view_anim = anim
        anim.start()

    def _apply_view_state(self, scale, center_point):
        if not self._canvas:
            return
        self._canvas.resetTransform()
        self._canvas.scale(scale, scale)
        self._canvas.centerOn(center_point)

    def _cancel_view_anim(self):
        if self._view_anim:
            self._view_anim.stop()
            self._view_anim = None

    def _lock_interactions(self):
        if not self._locked:
            self._locked = True
            self.interactionLocked.emit(True)

    def _unlock_interactions(self):
        if self._locked:
            self._locked = False
            self.interactionLocked.emit(False)

    def _track_animation(self, animation, finalizer=None):
        """
        Keeps references so that animations are not garbage collected and
        runs ``finalizer`` once the animation is done. With animations
        switched off the finalizer runs right away.
        """
        if animation is None or not self.anim.enabled:
            if finalizer:
                finalizer()
            return

        self._lock_interactions()
        self._running.append(animation)

        def _cleanup():
            if animation in self._running:
                self._running.remove(animation)
            if not self._running:
                self._unlock_interactions()
            if finalizer:
                finalizer()

        animation.finished.connect(_cleanup)
        animation.start()

