"""Sengled Bulbs constants."""

from enum import Enum
from typing import Final


class ColorMode(Enum):
    """Which color representation the bulb is currently driven by."""

    RGB = 1
    TEMPERATURE = 2


class CachePolicy(Enum):
    """When color writes may be cached or skipped instead of sent."""

    NEVER = "never"
    SCHEDULE = "schedule"  # only while the automatic lighting schedule is active
    ALWAYS = "always"


MANUFACTURER: Final = "Sengled"
DEFAULT_MODEL: Final = "Sengled Hub"

# Cloud API
API_BASE_URL: Final = "https://us-elements.cloud.sengled.com/zigbee/"
API_LOGIN: Final = "customer/login.json"
API_USER_INFO: Final = "customer/getUserInfo.json"
API_DEVICE_DETAILS: Final = "device/getDeviceDetails.json"
API_SET_ON_OFF: Final = "device/deviceSetOnOff.json"
API_SET_BRIGHTNESS: Final = "device/deviceSetBrightness.json"
API_SET_COLOR_TEMPERATURE: Final = "device/deviceSetColorTemperature.json"
API_SET_RGB_COLOR: Final = "device/deviceSetRgbColor.json"
SESSION_COOKIE: Final = "JSESSIONID"
OS_TYPE: Final = "android"

RET_SUCCESS: Final = 0
RET_SESSION_EXPIRED: Final = 100

DEFAULT_TIMEOUT: Final = 4.0  # seconds
SESSION_LIFETIME: Final = 24 * 60 * 60
DEVICE_CACHE_SECONDS: Final = 2.0
DEFAULT_DISCOVERY_INTERVAL: Final = 360

# Device attribute keys as reported by getDeviceDetails
ATTR_DEVICE_UUID: Final = "deviceUuid"
ATTR_NAME: Final = "name"
ATTR_ONOFF: Final = "onoff"
ATTR_BRIGHTNESS: Final = "brightness"
ATTR_COLOR_TEMPERATURE: Final = "colorTemperature"
ATTR_COLOR_MODE: Final = "colorMode"
ATTR_RGB_COLOR_R: Final = "rgbColorR"
ATTR_RGB_COLOR_G: Final = "rgbColorG"
ATTR_RGB_COLOR_B: Final = "rgbColorB"
ATTR_IS_ONLINE: Final = "isOnline"
ATTR_DEVICE_RSSI: Final = "deviceRssi"
ATTR_PRODUCT_CODE: Final = "productCode"
ATTR_FIRMWARE_VERSION: Final = "firmwareVersion"

# Vendor encodings
VENDOR_MIN_COLOR_TEMPERATURE: Final = 0
VENDOR_MAX_COLOR_TEMPERATURE: Final = 100
MIN_BRIGHTNESS: Final = 0
MAX_BRIGHTNESS: Final = 255
MIN_BYTE: Final = 0
MAX_BYTE: Final = 255

# Valid domain of the black body approximation
MIN_KELVIN: Final = 1000
MAX_KELVIN: Final = 40000

# Characteristics exposed to the host
CHAR_ON: Final = "On"
CHAR_BRIGHTNESS: Final = "Brightness"
CHAR_COLOR_TEMPERATURE: Final = "ColorTemperature"
CHAR_HUE: Final = "Hue"
CHAR_SATURATION: Final = "Saturation"

# Platform config keys
CONF_USERNAME: Final = "username"
CONF_PASSWORD: Final = "password"
CONF_DEBUG: Final = "debug"
CONF_TIMEOUT: Final = "Timeout"
CONF_ENABLE_ADAPTIVE_LIGHTING: Final = "EnableAdaptiveLighting"
CONF_CUSTOM_TEMPERATURE_ADJUSTMENT: Final = "CustomTemperatureAdjustment"
CONF_DISCOVERY_INTERVAL: Final = "DiscoveryInterval"
CONF_COLOR_CACHE_POLICY: Final = "ColorCachePolicy"
CONF_REDUNDANT_SET_POLICY: Final = "RedundantSetPolicy"

ADAPTIVE_LIGHTING_MODE_AUTOMATIC: Final = "automatic"
