"""Data models for Sengled devices and the platform configuration."""
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .brightness import BrightnessModel
from .color import ColorModel
from .const import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR_MODE,
    ATTR_COLOR_TEMPERATURE,
    ATTR_DEVICE_RSSI,
    ATTR_DEVICE_UUID,
    ATTR_FIRMWARE_VERSION,
    ATTR_IS_ONLINE,
    ATTR_NAME,
    ATTR_ONOFF,
    ATTR_PRODUCT_CODE,
    ATTR_RGB_COLOR_B,
    ATTR_RGB_COLOR_G,
    ATTR_RGB_COLOR_R,
    CONF_COLOR_CACHE_POLICY,
    CONF_CUSTOM_TEMPERATURE_ADJUSTMENT,
    CONF_DEBUG,
    CONF_DISCOVERY_INTERVAL,
    CONF_ENABLE_ADAPTIVE_LIGHTING,
    CONF_PASSWORD,
    CONF_REDUNDANT_SET_POLICY,
    CONF_TIMEOUT,
    CONF_USERNAME,
    DEFAULT_DISCOVERY_INTERVAL,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
    MANUFACTURER,
    CachePolicy,
    ColorMode,
)
from .models_db import ColorConfig, get_color_config
from .utils import (
    byte_rgb_to_normalized_rgb,
    clamp,
    vendor_color_temperature_to_mireds,
)


def _to_int(value: Any) -> Optional[int]:
    """Attributes arrive as strings or numbers, empty means absent."""
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "on")
    return bool(value)


@dataclass
class DeviceAttributes:
    """A bulb as reported by the Sengled cloud.

    Optional values are None when the bulb does not report them, which is
    the only signal of what the bulb can do.
    """

    id: str
    name: Optional[str]
    onoff: bool
    brightness: Optional[int] = None
    color_temperature: Optional[int] = None  # vendor 0-100
    color_mode: Optional[int] = None
    rgb: Optional[Tuple[int, int, int]] = None  # vendor 0-255
    is_online: bool = True
    signal_quality: Optional[int] = None
    product_code: Optional[str] = None
    firmware_version: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Fall back to the id when the bulb has no name."""
        return self.name if self.name else self.id

    @classmethod
    def from_lamp_info(cls, lamp_info: Mapping[str, Any]) -> "DeviceAttributes":
        attributes = lamp_info.get("attributes") or {}
        red = _to_int(attributes.get(ATTR_RGB_COLOR_R))
        green = _to_int(attributes.get(ATTR_RGB_COLOR_G))
        blue = _to_int(attributes.get(ATTR_RGB_COLOR_B))
        rgb = None
        if red is not None and green is not None and blue is not None:
            rgb = (red, green, blue)
        firmware_version = attributes.get(ATTR_FIRMWARE_VERSION)
        return cls(
            id=str(lamp_info[ATTR_DEVICE_UUID]),
            name=attributes.get(ATTR_NAME),
            onoff=_to_bool(attributes.get(ATTR_ONOFF)),
            brightness=_to_int(attributes.get(ATTR_BRIGHTNESS)),
            color_temperature=_to_int(attributes.get(ATTR_COLOR_TEMPERATURE)),
            color_mode=_to_int(attributes.get(ATTR_COLOR_MODE)),
            rgb=rgb,
            is_online=_to_bool(attributes.get(ATTR_IS_ONLINE, True)),
            signal_quality=_to_int(attributes.get(ATTR_DEVICE_RSSI)),
            product_code=attributes.get(ATTR_PRODUCT_CODE) or None,
            firmware_version=str(firmware_version) if firmware_version else None,
        )


def color_model_from_attributes(attrs: DeviceAttributes) -> Optional[ColorModel]:
    """Build the color model, or None for a white dimmable bulb."""
    config: ColorConfig = get_color_config(attrs.product_code)
    mireds = None
    if attrs.color_temperature is not None:
        mireds = int(
            clamp(
                vendor_color_temperature_to_mireds(attrs.color_temperature, config),
                config.min_color_temperature,
                config.max_color_temperature,
            )
        )
    rgb = byte_rgb_to_normalized_rgb(attrs.rgb) if attrs.rgb is not None else None
    if mireds is None and rgb is None:
        return None
    mode = None
    if attrs.color_mode in (ColorMode.RGB.value, ColorMode.TEMPERATURE.value):
        mode = ColorMode(attrs.color_mode)
    return ColorModel.from_values(config, mode, mireds, rgb)


@dataclass
class DeviceRecord:
    """Everything the platform keeps about one bulb between ticks."""

    id: str
    display_name: str
    power_on: bool
    brightness: BrightnessModel
    color: Optional[ColorModel]
    is_online: bool = True
    signal_quality: Optional[int] = None
    firmware_version: Optional[str] = None
    product_code: Optional[str] = None

    @property
    def manufacturer(self) -> str:
        return MANUFACTURER

    @property
    def model(self) -> str:
        return self.product_code if self.product_code else DEFAULT_MODEL

    @classmethod
    def from_attributes(cls, attrs: DeviceAttributes) -> "DeviceRecord":
        return cls(
            id=attrs.id,
            display_name=attrs.display_name,
            power_on=attrs.onoff,
            brightness=BrightnessModel(attrs.brightness),
            color=color_model_from_attributes(attrs),
            is_online=attrs.is_online,
            signal_quality=attrs.signal_quality,
            firmware_version=attrs.firmware_version,
            product_code=attrs.product_code,
        )

    def update_from_attributes(self, attrs: DeviceAttributes) -> None:
        """Refresh the mutable state in place, the identity is kept."""
        assert attrs.id == self.id
        self.power_on = attrs.onoff
        self.brightness = BrightnessModel(attrs.brightness)
        self.color = color_model_from_attributes(attrs)
        self.is_online = attrs.is_online
        self.signal_quality = attrs.signal_quality
        self.firmware_version = attrs.firmware_version
        self.product_code = attrs.product_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the host's accessory cache."""
        return {
            "id": self.id,
            "name": self.display_name,
            "status": self.power_on,
            "brightness": self.brightness.get_value(),
            "color": self.color.to_dict() if self.color is not None else None,
            "is_online": self.is_online,
            "signal_quality": self.signal_quality,
            "firmware_version": self.firmware_version,
            "product_code": self.product_code,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceRecord":
        color = data.get("color")
        return cls(
            id=data["id"],
            display_name=data.get("name") or data["id"],
            power_on=bool(data.get("status", False)),
            brightness=BrightnessModel(data.get("brightness")),
            color=ColorModel.from_dict(color) if color else None,
            is_online=data.get("is_online", True),
            signal_quality=data.get("signal_quality"),
            firmware_version=data.get("firmware_version"),
            product_code=data.get("product_code"),
        )


@dataclass
class PlatformConfig:
    """Configuration of the Sengled platform."""

    username: str
    password: str
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT  # seconds
    enable_adaptive_lighting: bool = False
    custom_temperature_adjustment: int = 0  # mireds
    discovery_interval: int = DEFAULT_DISCOVERY_INTERVAL  # seconds
    color_cache_policy: CachePolicy = CachePolicy.SCHEDULE
    redundant_set_policy: CachePolicy = CachePolicy.SCHEDULE
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the host's platform config block."""
        return {
            **self.extra,
            CONF_USERNAME: self.username,
            CONF_PASSWORD: self.password,
            CONF_DEBUG: self.debug,
            CONF_TIMEOUT: int(self.timeout * 1000),
            CONF_ENABLE_ADAPTIVE_LIGHTING: self.enable_adaptive_lighting,
            CONF_CUSTOM_TEMPERATURE_ADJUSTMENT: self.custom_temperature_adjustment,
            CONF_DISCOVERY_INTERVAL: self.discovery_interval,
            CONF_COLOR_CACHE_POLICY: self.color_cache_policy.value,
            CONF_REDUNDANT_SET_POLICY: self.redundant_set_policy.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlatformConfig":
        """Create from the host's platform config block."""
        username = data.get(CONF_USERNAME)
        password = data.get(CONF_PASSWORD)
        if not username or not password:
            raise ValueError("Both username and password must be configured")
        known = {
            CONF_USERNAME,
            CONF_PASSWORD,
            CONF_DEBUG,
            CONF_TIMEOUT,
            CONF_ENABLE_ADAPTIVE_LIGHTING,
            CONF_CUSTOM_TEMPERATURE_ADJUSTMENT,
            CONF_DISCOVERY_INTERVAL,
            CONF_COLOR_CACHE_POLICY,
            CONF_REDUNDANT_SET_POLICY,
        }
        return cls(
            username=username,
            password=password,
            debug=bool(data.get(CONF_DEBUG, False)),
            timeout=data.get(CONF_TIMEOUT, DEFAULT_TIMEOUT * 1000) / 1000,
            enable_adaptive_lighting=bool(
                data.get(CONF_ENABLE_ADAPTIVE_LIGHTING, False)
            ),
            custom_temperature_adjustment=int(
                data.get(CONF_CUSTOM_TEMPERATURE_ADJUSTMENT, 0)
            ),
            discovery_interval=int(
                data.get(CONF_DISCOVERY_INTERVAL, DEFAULT_DISCOVERY_INTERVAL)
            ),
            color_cache_policy=CachePolicy(
                data.get(CONF_COLOR_CACHE_POLICY, CachePolicy.SCHEDULE.value)
            ),
            redundant_set_policy=CachePolicy(
                data.get(CONF_REDUNDANT_SET_POLICY, CachePolicy.SCHEDULE.value)
            ),
            extra={k: v for k, v in data.items() if k not in known},
        )
