from PyQt5.QtCore import QObject, pyqtSignal

MIN_SPEED = 0.5
MAX_SPEED = 3.0


class GlobalController(QObject):
    """
    Playback settings shared by every view: a speed multiplier and a switch
    that turns animations off so views jump straight to their final layout.
    """

    speedChanged = pyqtSignal(float)
    animationsToggled = pyqtSignal(bool)

    def __init__(self, speed: float = 1.0, animations_enabled: bool = True):
        super().__init__()
        self._speed = self._clamp(speed)
        self._animations_enabled = bool(animations_enabled)

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def animations_enabled(self) -> bool:
        return self._animations_enabled

    @staticmethod
    def _clamp(value: float) -> float:
        return max(MIN_SPEED, min(MAX_SPEED, float(value)))

    def set_speed(self, value: float):
        """Clamp and broadcast speed multiplier (0.5× – 3×)."""
        value = self._clamp(value)
        if abs(value - self._speed) > 1e-3:
            self._speed = value
            self.speedChanged.emit(self._speed)

    def set_animations_enabled(self, enabled: bool):
        enabled = bool(enabled)
        if enabled != self._animations_enabled:
            self._animations_enabled = enabled
            self.animationsToggled.emit(enabled)

    def scale_duration(self, base_ms: int) -> int:
        """
        Convert a base duration (ms) into the playback duration. Higher speed
        means shorter duration; 0 when animations are off.
        """
        if not self._animations_enabled:
            return 0
        return max(1, int(base_ms / self._speed))
