"""Color state of a single bulb.

A bulb can be driven by color temperature, by rgb, or both. The state is
held as one of three immutable variants so hue and saturation can never
drift from the representation that was set last:

- ``TemperatureColorState``: white only bulbs.
- ``RgbColorState``: color only bulbs.
- ``TemperatureRgbColorState``: bulbs with both white and color leds, tagged
  with the ``ColorMode`` that was set last.

Derived fields are computed when a variant is built and never afterwards.
"""
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from .const import ColorMode
from .models_db import ColorConfig
from .utils import (
    HsvColor,
    RgbColor,
    byte_rgb_to_normalized_rgb,
    hsv_to_rgb,
    mireds_to_rgb,
    mireds_to_vendor_color_temperature,
    normalized_rgb_to_byte_rgb,
    rgb_to_hsv,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemperatureColorState:
    mireds: int

    @property
    def mode(self) -> ColorMode:
        return ColorMode.TEMPERATURE


@dataclass(frozen=True)
class RgbColorState:
    rgb: RgbColor
    hsv: HsvColor

    @property
    def mode(self) -> ColorMode:
        return ColorMode.RGB


@dataclass(frozen=True)
class TemperatureRgbColorState:
    mode: ColorMode
    mireds: int
    rgb: RgbColor
    hsv: HsvColor


ColorState = Union[TemperatureColorState, RgbColorState, TemperatureRgbColorState]


def _rgb_state(rgb: RgbColor) -> RgbColorState:
    return RgbColorState(rgb=rgb, hsv=rgb_to_hsv(rgb))


def _temperature_rgb_state(mireds: int) -> TemperatureRgbColorState:
    rgb = mireds_to_rgb(mireds)
    return TemperatureRgbColorState(
        mode=ColorMode.TEMPERATURE, mireds=mireds, rgb=rgb, hsv=rgb_to_hsv(rgb)
    )


def _hsv_rgb_state(mireds: int, hsv: HsvColor) -> TemperatureRgbColorState:
    return TemperatureRgbColorState(
        mode=ColorMode.RGB, mireds=mireds, rgb=hsv_to_rgb(hsv), hsv=hsv
    )


def build_color_state(
    mode: Optional[ColorMode],
    mireds: Optional[int],
    rgb: Optional[RgbColor],
) -> ColorState:
    """Build the variant matching the supported representations."""
    if mireds is not None and rgb is not None:
        if mode == ColorMode.RGB:
            return TemperatureRgbColorState(
                mode=ColorMode.RGB, mireds=mireds, rgb=rgb, hsv=rgb_to_hsv(rgb)
            )
        return _temperature_rgb_state(mireds)
    if mireds is not None:
        return TemperatureColorState(mireds=mireds)
    if rgb is not None:
        return _rgb_state(rgb)
    raise ValueError("A color state needs a color temperature or an rgb color")


class ColorModel:
    """The color of one bulb in mireds, hue/saturation and rgb."""

    def __init__(self, config: ColorConfig, state: ColorState) -> None:
        self._config = config
        self._state = state
        if self.supports_color_temperature():
            self._check_color_temperature(self.get_color_temperature())

    @classmethod
    def from_values(
        cls,
        config: ColorConfig,
        mode: Optional[ColorMode] = None,
        mireds: Optional[int] = None,
        rgb: Optional[RgbColor] = None,
    ) -> "ColorModel":
        return cls(config, build_color_state(mode, mireds, rgb))

    @property
    def config(self) -> ColorConfig:
        return self._config

    @property
    def state(self) -> ColorState:
        return self._state

    @property
    def color_mode(self) -> ColorMode:
        return self._state.mode

    @property
    def min_color_temperature(self) -> int:
        return self._config.min_color_temperature

    @property
    def max_color_temperature(self) -> int:
        return self._config.max_color_temperature

    def supports_color_temperature(self) -> bool:
        return isinstance(self._state, (TemperatureColorState, TemperatureRgbColorState))

    def supports_rgb(self) -> bool:
        return isinstance(self._state, (RgbColorState, TemperatureRgbColorState))

    def _check_color_temperature(self, mireds: int) -> None:
        if not self.min_color_temperature <= mireds <= self.max_color_temperature:
            raise ValueError(
                f"Color temperature of {mireds} is not valid and must be between"
                f" {self.min_color_temperature} and {self.max_color_temperature}"
            )

    def get_color_temperature(self) -> int:
        state = self._state
        if isinstance(state, RgbColorState):
            raise ValueError("Color temperature is not supported")
        return state.mireds

    def set_color_temperature(self, mireds: int) -> None:
        """Set the color temperature, callers clamp to the config range."""
        state = self._state
        if isinstance(state, RgbColorState):
            raise ValueError("Must not set color temperature when it is unsupported")
        self._check_color_temperature(mireds)
        if isinstance(state, TemperatureRgbColorState):
            self._state = _temperature_rgb_state(mireds)
        else:
            self._state = TemperatureColorState(mireds=mireds)

    def _get_color_state(self) -> Union[RgbColorState, TemperatureRgbColorState]:
        state = self._state
        if isinstance(state, TemperatureColorState):
            raise ValueError("Rgb color is not supported")
        return state

    def get_hsv(self) -> HsvColor:
        return self._get_color_state().hsv

    def get_hue(self) -> int:
        return self.get_hsv().h

    def get_saturation(self) -> int:
        return self.get_hsv().s

    def get_rgb(self) -> RgbColor:
        return self._get_color_state().rgb

    def _set_hsv(self, hue: float, saturation: float) -> None:
        state = self._get_color_state()
        hsv = HsvColor(hue, saturation, 100)
        if isinstance(state, TemperatureRgbColorState):
            self._state = _hsv_rgb_state(state.mireds, hsv)
        else:
            self._state = RgbColorState(rgb=hsv_to_rgb(hsv), hsv=hsv)

    def set_hue(self, hue: float) -> None:
        self._set_hsv(hue, self.get_saturation())

    def set_saturation(self, saturation: float) -> None:
        self._set_hsv(self.get_hue(), saturation)

    def vendor_color_temperature(self) -> int:
        return mireds_to_vendor_color_temperature(
            self.get_color_temperature(), self._config
        )

    def vendor_rgb(self) -> RgbColor:
        return normalized_rgb_to_byte_rgb(self.get_rgb())

    def copy_snapshot(self) -> ColorState:
        """Return the current state for a later restore_snapshot."""
        return self._state

    def restore_snapshot(self, snapshot: ColorState) -> None:
        _LOGGER.debug("Restoring color state %s", snapshot)
        self._state = snapshot

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the host's accessory cache."""
        data: Dict[str, Any] = {
            "max_color_temperature": self._config.max_color_temperature,
            "min_color_temperature": self._config.min_color_temperature,
            "color_mode": self.color_mode.value,
        }
        if self.supports_color_temperature():
            data["color_temperature"] = self.get_color_temperature()
        if self.supports_rgb():
            data["rgb"] = list(self.vendor_rgb())
        if self._config.gamut is not None:
            data["gamut"] = [list(point) for point in self._config.gamut]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorModel":
        gamut: Optional[List[List[float]]] = data.get("gamut")
        config = ColorConfig(
            max_color_temperature=data["max_color_temperature"],
            min_color_temperature=data["min_color_temperature"],
            gamut=tuple(tuple(point) for point in gamut) if gamut else None,  # type: ignore[arg-type]
        )
        rgb: Optional[Tuple[int, int, int]] = data.get("rgb")
        return cls.from_values(
            config,
            ColorMode(data["color_mode"]),
            data.get("color_temperature"),
            byte_rgb_to_normalized_rgb(tuple(rgb)) if rgb is not None else None,  # type: ignore[arg-type]
        )
