from typing import Optional

from .const import MAX_BRIGHTNESS, MIN_BRIGHTNESS
from .utils import clamp


class BrightnessModel:
    """Brightness of a bulb in the vendor 0-255 encoding.

    A value of None means the bulb cannot be dimmed.
    """

    def __init__(
        self,
        value: Optional[int],
        min_value: int = MIN_BRIGHTNESS,
        max_value: int = MAX_BRIGHTNESS,
    ) -> None:
        self._min = min_value
        self._max = max_value
        self._value: Optional[int] = None
        if value is not None:
            self._value = self._clamp(value)

    @property
    def min(self) -> int:
        return self._min

    @property
    def max(self) -> int:
        return self._max

    def supports_brightness(self) -> bool:
        return self._value is not None

    def get_value(self) -> Optional[int]:
        return self._value

    def _clamp(self, value: float) -> int:
        return int(clamp(value, self._min, self._max))

    def set_value(self, value: int) -> None:
        if self._value is None:
            raise ValueError("Brightness is not supported")
        self._value = self._clamp(value)

    def __repr__(self) -> str:
        return f"BrightnessModel(value={self._value}, min={self._min}, max={self._max})"
