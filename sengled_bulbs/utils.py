import ast
from collections import namedtuple
import colorsys
import contextlib
import math
from typing import List, Optional, Tuple, Union, cast

import webcolors  # type: ignore

from .const import (
    MAX_BYTE,
    MAX_KELVIN,
    MIN_BYTE,
    MIN_KELVIN,
    VENDOR_MAX_COLOR_TEMPERATURE,
    VENDOR_MIN_COLOR_TEMPERATURE,
)
from .models_db import ColorConfig

RgbColor = namedtuple(
    "RgbColor",
    [
        "r",
        "g",
        "b",
    ],
)


HsvColor = namedtuple(
    "HsvColor",
    [
        "h",  # degrees [0, 360)
        "s",  # percent [0, 100]
        "v",  # percent [0, 100]
    ],
)


class utils:
    @staticmethod
    def color_object_to_tuple(
        color: Union[Tuple[int, ...], str]
    ) -> Optional[Tuple[int, int, int]]:

        # see if it's already a color tuple
        if isinstance(color, tuple) and len(color) == 3:
            return cast(Tuple[int, int, int], color)

        # can't convert non-string
        if not isinstance(color, str):
            return None
        color = color.strip()

        # try to convert from an english name
        with contextlib.suppress(Exception):
            return cast(Tuple[int, int, int], tuple(webcolors.name_to_rgb(color)))

        # try to convert an web hex code
        with contextlib.suppress(Exception):
            return cast(
                Tuple[int, int, int],
                tuple(webcolors.hex_to_rgb(webcolors.normalize_hex(color))),
            )

        # try to convert a string RGB tuple
        with contextlib.suppress(Exception):
            val = ast.literal_eval(color)
            if type(val) is not tuple or len(val) != 3:
                raise Exception
            return cast(Tuple[int, int, int], val)

        return None

    @staticmethod
    def color_tuple_to_string(rgb: Tuple[int, int, int]) -> str:
        # try to convert to an english name
        with contextlib.suppress(Exception):
            return cast(str, webcolors.rgb_to_name(rgb))
        return str(rgb)

    @staticmethod
    def get_color_names_list() -> List[str]:
        return sorted(webcolors.names())


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def scale_range(
    value: float,
    current_min: float,
    current_max: float,
    new_min: float,
    new_max: float,
) -> float:
    return ((value - current_min) * (new_max - new_min)) / (
        current_max - current_min
    ) + new_min


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves always round up."""
    return int(math.floor(value + 0.5))


def mireds_to_kelvins(mireds: float) -> int:
    return round_half_up(1000000.0 / mireds)


def kelvins_to_mireds(kelvins: float) -> int:
    return round_half_up(1000000.0 / kelvins)


def kelvins_to_rgb(kelvins: float) -> RgbColor:
    """Approximate the normalized rgb of a black body at the temperature.

    Tanner Helland's fit, scaled to 0.0-1.0:
    https://tannerhelland.com/2012/09/18/convert-temperature-rgb-algorithm-code.html
    """
    temp = math.floor(clamp(kelvins, MIN_KELVIN, MAX_KELVIN) / 100.0)

    if temp <= 66:
        red = 1.0
    else:
        # R-squared .988
        red = clamp(329.698727446 * math.pow(temp - 60, -0.1332047592) / 255.0, 0.0, 1.0)

    if temp <= 66:
        # R-squared .996
        green = clamp((99.4708025861 * math.log(temp) - 161.1195681661) / 255.0, 0.0, 1.0)
    else:
        # R-squared .987
        green = clamp(288.1221695283 * math.pow(temp - 60, -0.0755148492) / 255.0, 0.0, 1.0)

    if temp >= 66:
        blue = 1.0
    elif temp <= 19:
        blue = 0.0
    else:
        # R-squared .998
        blue = clamp(
            (138.5177312231 * math.log(temp - 10) - 305.0447927307) / 255.0, 0.0, 1.0
        )

    return RgbColor(red, green, blue)


def mireds_to_rgb(mireds: float) -> RgbColor:
    return kelvins_to_rgb(mireds_to_kelvins(mireds))


def rgb_to_hsv(rgb: RgbColor) -> HsvColor:
    """Convert normalized rgb to hue degrees and saturation/value percent."""
    h, s, v = colorsys.rgb_to_hsv(rgb.r, rgb.g, rgb.b)
    # colorsys reports a hue of 0 when there is no chroma
    return HsvColor(
        round_half_up(h * 360) % 360, round_half_up(s * 100), round_half_up(v * 100)
    )


def hsv_to_rgb(hsv: HsvColor) -> RgbColor:
    """Convert hue degrees and saturation/value percent to normalized rgb."""
    r, g, b = colorsys.hsv_to_rgb((hsv.h % 360) / 360.0, hsv.s / 100.0, hsv.v / 100.0)
    return RgbColor(r, g, b)


def byte_rgb_to_normalized_rgb(rgb: Tuple[int, int, int]) -> RgbColor:
    r, g, b = rgb
    return RgbColor(r / MAX_BYTE, g / MAX_BYTE, b / MAX_BYTE)


def normalized_rgb_to_byte_rgb(rgb: Tuple[float, float, float]) -> RgbColor:
    return RgbColor(
        *(
            int(clamp(round_half_up(channel * MAX_BYTE), MIN_BYTE, MAX_BYTE))
            for channel in rgb
        )
    )


def vendor_color_temperature_to_mireds(value: float, config: ColorConfig) -> int:
    """Convert the vendor 0-100 scale to mireds.

    The vendor minimum is the warmest light, which is the config's maximum
    mired value, so the ranges are swapped when scaling.
    """
    return round_half_up(
        scale_range(
            value,
            VENDOR_MIN_COLOR_TEMPERATURE,
            VENDOR_MAX_COLOR_TEMPERATURE,
            config.max_color_temperature,
            config.min_color_temperature,
        )
    )


def mireds_to_vendor_color_temperature(mireds: float, config: ColorConfig) -> int:
    """Convert mireds to the vendor 0-100 scale, see above."""
    return round_half_up(
        scale_range(
            mireds,
            config.min_color_temperature,
            config.max_color_temperature,
            VENDOR_MAX_COLOR_TEMPERATURE,
            VENDOR_MIN_COLOR_TEMPERATURE,
        )
    )
