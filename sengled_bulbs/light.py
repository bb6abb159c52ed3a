"""Get and set handlers the host binds to a Sengled bulb.

Bulbs such as the E12-N1E have leds dedicated to white light in addition
to the rgb leds, and white light is much brighter than a white rgb color.
Setting the color temperature therefore switches the bulb to white light,
and setting hue or saturation switches it to color.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, NamedTuple, Optional

from .aioclient import SengledClient
from .brightness import BrightnessModel
from .color import ColorModel
from .const import (
    ADAPTIVE_LIGHTING_MODE_AUTOMATIC,
    CHAR_BRIGHTNESS,
    CHAR_COLOR_TEMPERATURE,
    CHAR_HUE,
    CHAR_ON,
    CHAR_SATURATION,
    ColorMode,
)
from .exceptions import NotFoundError
from .host import AccessoryHost
from .models import DeviceAttributes, DeviceRecord
from .state import ColorWritePolicy, DeviceStateCache
from .utils import clamp, mireds_to_vendor_color_temperature

_LOGGER = logging.getLogger(__name__)


class Characteristic(NamedTuple):
    name: str
    get: Callable[[], Awaitable[Any]]
    set: Callable[[Any], Awaitable[None]]
    min_value: Optional[int] = None
    max_value: Optional[int] = None


class SengledLight:
    """A Sengled bulb bound to the accessory host."""

    def __init__(
        self,
        client: SengledClient,
        record: DeviceRecord,
        host: Optional[AccessoryHost] = None,
        policy: Optional[ColorWritePolicy] = None,
        enable_adaptive_lighting: bool = False,
        custom_temperature_adjustment: int = 0,
        on_not_found: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._client = client
        self._host = host
        self.cache = DeviceStateCache(record, policy)
        self._enable_adaptive_lighting = enable_adaptive_lighting
        self._custom_temperature_adjustment = custom_temperature_adjustment
        self._on_not_found = on_not_found
        # hue set by the host that has not been sent with a saturation yet
        self._hue_pending = False

    @property
    def record(self) -> DeviceRecord:
        return self.cache.record

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.display_name

    @property
    def brightness(self) -> BrightnessModel:
        return self.record.brightness

    @property
    def color(self) -> Optional[ColorModel]:
        return self.record.color

    @property
    def is_on(self) -> bool:
        return self.record.power_on

    def accessory_information(self) -> Dict[str, str]:
        record = self.record
        info = {
            "manufacturer": record.manufacturer,
            "model": record.model,
            "serial_number": record.id,
        }
        if record.firmware_version is not None:
            info["firmware_revision"] = record.firmware_version
        return info

    @property
    def supports_adaptive_lighting(self) -> bool:
        color = self.color
        return (
            self._enable_adaptive_lighting
            and self.brightness.supports_brightness()
            and color is not None
            and color.supports_color_temperature()
        )

    def adaptive_lighting_options(self) -> Optional[Dict[str, Any]]:
        """Options for the host's automatic lighting schedule controller."""
        if not self.supports_adaptive_lighting:
            return None
        return {
            "controller_mode": ADAPTIVE_LIGHTING_MODE_AUTOMATIC,
            "custom_temperature_adjustment": self._custom_temperature_adjustment,
        }

    @property
    def adaptive_lighting_active(self) -> bool:
        return self.cache.schedule_active

    def set_adaptive_lighting_active(self, active: bool) -> None:
        self.cache.schedule_active = active and self.supports_adaptive_lighting

    def characteristics(self) -> Dict[str, Characteristic]:
        """Return the get/set entry points for what the bulb supports."""
        chars = {
            CHAR_ON: Characteristic(
                CHAR_ON, self.async_get_power_state, self.async_set_power_state
            )
        }
        if self.brightness.supports_brightness():
            chars[CHAR_BRIGHTNESS] = Characteristic(
                CHAR_BRIGHTNESS,
                self.async_get_brightness,
                self.async_set_brightness,
                self.brightness.min,
                self.brightness.max,
            )
        color = self.color
        if color is not None and color.supports_color_temperature():
            chars[CHAR_COLOR_TEMPERATURE] = Characteristic(
                CHAR_COLOR_TEMPERATURE,
                self.async_get_color_temperature,
                self.async_set_color_temperature,
                color.min_color_temperature,
                color.max_color_temperature,
            )
        if color is not None and color.supports_rgb():
            chars[CHAR_HUE] = Characteristic(
                CHAR_HUE, self.async_get_hue, self.async_set_hue, 0, 360
            )
            chars[CHAR_SATURATION] = Characteristic(
                CHAR_SATURATION,
                self.async_get_saturation,
                self.async_set_saturation,
                0,
                100,
            )
        return chars

    def _notify(self, name: str, value: Any) -> None:
        if self._host is not None:
            self._host.update_characteristic(self, name, value)

    def _notify_hue_saturation(self) -> None:
        color = self.color
        if color is not None and color.supports_rgb():
            self._notify(CHAR_HUE, color.get_hue())
            self._notify(CHAR_SATURATION, color.get_saturation())

    def push_state(self) -> None:
        """Report every supported value to the host."""
        self._notify(CHAR_ON, self.is_on)
        if self.brightness.supports_brightness():
            self._notify(CHAR_BRIGHTNESS, self.brightness.get_value())
        color = self.color
        if color is not None and color.supports_color_temperature():
            self._notify(CHAR_COLOR_TEMPERATURE, color.get_color_temperature())
        self._notify_hue_saturation()

    def update(self, attrs: DeviceAttributes) -> None:
        """Take the latest state from the cloud."""
        _LOGGER.debug("%s: Updating from %s", self.id, attrs)
        self.cache.refresh(attrs)
        self.push_state()

    async def async_refresh(self) -> None:
        """Fetch the latest state for this bulb from the cloud."""
        for attrs in await self._client.async_get_devices():
            if attrs.id == self.id:
                self.update(attrs)
                return
        self._not_found()
        raise NotFoundError(self.id)

    def _not_found(self) -> None:
        _LOGGER.warning("%s: Device is no longer reported by the cloud", self.id)
        if self._on_not_found is not None:
            self._on_not_found(self.id)

    async def _async_send(self, description: str, request: Awaitable[None]) -> None:
        try:
            await request
        except NotFoundError:
            self._not_found()
            raise
        except Exception as ex:
            _LOGGER.warning("%s: Failed to set %s: %s", self.id, description, ex)
            raise

    def _require_color_temperature(self) -> ColorModel:
        color = self.color
        if color is None or not color.supports_color_temperature():
            raise ValueError(f"{self.id}: Color temperature is not supported")
        return color

    def _require_rgb(self) -> ColorModel:
        color = self.color
        if color is None or not color.supports_rgb():
            raise ValueError(f"{self.id}: Rgb color is not supported")
        return color

    async def _async_flush_color(self) -> None:
        color = self.color
        assert color is not None
        if color.color_mode == ColorMode.TEMPERATURE:
            _LOGGER.debug(
                "%s: Flushing cached color temperature %s",
                self.id,
                color.get_color_temperature(),
            )
            await self._async_send(
                "cached color temperature",
                self._client.async_set_color_temperature(
                    self.id, color.vendor_color_temperature()
                ),
            )
        else:
            rgb = color.vendor_rgb()
            _LOGGER.debug("%s: Flushing cached rgb color %s", self.id, rgb)
            await self._async_send(
                "cached rgb color",
                self._client.async_set_rgb_color(self.id, rgb),
            )
        self.cache.mark_flushed()
        self._hue_pending = False

    async def async_identify(self) -> None:
        _LOGGER.info("%s: Identify requested for %s", self.id, self.name)

    async def async_get_power_state(self, refresh: bool = False) -> bool:
        if refresh:
            await self.async_refresh()
        return self.is_on

    async def async_set_power_state(self, on: bool) -> None:
        _LOGGER.debug("%s: Changing power state to %s", self.id, on)
        with self.cache.optimistic(power=True):
            if on and self.cache.has_cached_color:
                await self._async_flush_color()
            self.record.power_on = on
            await self._async_send(
                "power state", self._client.async_set_on_off(self.id, on)
            )

    async def async_get_brightness(self, refresh: bool = False) -> Optional[int]:
        if refresh:
            await self.async_refresh()
        return self.brightness.get_value()

    async def async_set_brightness(self, brightness: Optional[int]) -> None:
        if not self.brightness.supports_brightness():
            raise ValueError(f"{self.id}: Brightness is not supported")
        if not brightness:
            brightness = self.brightness.min
        brightness = int(clamp(brightness, self.brightness.min, self.brightness.max))
        _LOGGER.debug("%s: Setting brightness to %s", self.id, brightness)
        with self.cache.optimistic(brightness=True):
            self.brightness.set_value(brightness)
            await self._async_send(
                "brightness",
                self._client.async_set_brightness(self.id, brightness),
            )

    async def async_get_color_temperature(self, refresh: bool = False) -> int:
        if refresh:
            await self.async_refresh()
        return self._require_color_temperature().get_color_temperature()

    async def async_set_color_temperature(self, mireds: Optional[int]) -> None:
        color = self._require_color_temperature()
        if not mireds:
            mireds = color.min_color_temperature
        mireds = int(
            clamp(mireds, color.min_color_temperature, color.max_color_temperature)
        )
        vendor_value = mireds_to_vendor_color_temperature(mireds, color.config)

        if (
            self.cache.should_suppress_redundant()
            and color.color_mode == ColorMode.TEMPERATURE
            and vendor_value == color.vendor_color_temperature()
        ):
            # The mired range is finer than the vendor range
            _LOGGER.debug(
                "%s: Skipping color temperature %s, already set", self.id, vendor_value
            )
            color.set_color_temperature(mireds)
            self._notify_hue_saturation()
            return

        if self.cache.should_cache_color():
            color.set_color_temperature(mireds)
            self.cache.mark_color_cached()
            self._notify_hue_saturation()
            return

        _LOGGER.debug("%s: Setting color temperature to %s", self.id, vendor_value)
        with self.cache.optimistic(color=True):
            color.set_color_temperature(mireds)
            await self._async_send(
                "color temperature",
                self._client.async_set_color_temperature(self.id, vendor_value),
            )
        self.cache.mark_flushed()
        self._notify_hue_saturation()

    async def async_get_hue(self, refresh: bool = False) -> int:
        if refresh:
            await self.async_refresh()
        return self._require_rgb().get_hue()

    async def async_set_hue(self, hue: float) -> None:
        """Set the hue locally, the saturation set that follows sends both."""
        color = self._require_rgb()
        if (
            self.cache.should_suppress_redundant()
            and color.color_mode == ColorMode.RGB
            and hue == color.get_hue()
        ):
            return
        color.set_hue(hue)
        self._hue_pending = True
        if self.cache.should_cache_color():
            self.cache.mark_color_cached()

    async def async_get_saturation(self, refresh: bool = False) -> int:
        if refresh:
            await self.async_refresh()
        return self._require_rgb().get_saturation()

    async def async_set_saturation(self, saturation: float) -> None:
        color = self._require_rgb()
        if (
            self.cache.should_suppress_redundant()
            and color.color_mode == ColorMode.RGB
            and not self._hue_pending
            and saturation == color.get_saturation()
        ):
            return

        if self.cache.should_cache_color():
            color.set_saturation(saturation)
            self.cache.mark_color_cached()
            return

        with self.cache.optimistic(color=True):
            color.set_saturation(saturation)
            rgb = color.vendor_rgb()
            _LOGGER.debug("%s: Setting rgb color to %s", self.id, rgb)
            await self._async_send(
                "rgb color", self._client.async_set_rgb_color(self.id, rgb)
            )
        self.cache.mark_flushed()
        self._hue_pending = False
        # Setting an rgb color turns the bulb on
        self.record.power_on = True
        self._notify(CHAR_ON, True)
