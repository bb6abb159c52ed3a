"""Sengled Models Database."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

Gamut = Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]


@dataclass(frozen=True)
class ColorConfig:
    """Color temperature bounds for a product, in mireds."""

    max_color_temperature: int  # warmest
    min_color_temperature: int  # coolest
    gamut: Optional[Gamut] = None

    def __post_init__(self) -> None:
        if not self.min_color_temperature < self.max_color_temperature:
            raise ValueError(
                f"min_color_temperature {self.min_color_temperature} must be"
                f" below max_color_temperature {self.max_color_temperature}"
            )


@dataclass(frozen=True)
class SengledModel:
    product_codes: List[str]
    description: str
    color_config: ColorConfig


# 2000K - ~7143K
DEFAULT_COLOR_CONFIG = ColorConfig(max_color_temperature=500, min_color_temperature=140)

MODELS = [
    SengledModel(
        product_codes=["E12-N1E"],
        description="Element Color Plus",
        # 2000K - ~6500K
        color_config=ColorConfig(max_color_temperature=500, min_color_temperature=154),
    ),
]

MODEL_MAP: Dict[str, SengledModel] = {
    code.upper(): model for model in MODELS for code in model.product_codes
}


def get_model(product_code: Optional[str]) -> Optional[SengledModel]:
    """Return the SengledModel for the product code."""
    if not product_code:
        return None
    return MODEL_MAP.get(product_code.upper())


def get_color_config(product_code: Optional[str]) -> ColorConfig:
    """Return the color config for the product code, or the default."""
    model = get_model(product_code)
    if model is None:
        return DEFAULT_COLOR_CONFIG
    return model.color_config
