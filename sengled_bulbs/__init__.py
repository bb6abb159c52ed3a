"""Init file for Sengled bulbs"""
from .aioclient import SengledClient, Session
from .color import ColorModel
from .brightness import BrightnessModel
from .exceptions import (
    AuthError,
    NotFoundError,
    RemoteWriteError,
    SengledError,
    SessionExpiredError,
)
from .host import AccessoryHost, LoggingHost
from .light import SengledLight
from .models import DeviceAttributes, DeviceRecord, PlatformConfig
from .platform import SengledPlatform
from .reconcile import ReconcilePlan, ReconciliationEngine, plan_reconciliation
from .utils import utils

__all__ = [
    "AccessoryHost",
    "AuthError",
    "BrightnessModel",
    "ColorModel",
    "DeviceAttributes",
    "DeviceRecord",
    "LoggingHost",
    "NotFoundError",
    "PlatformConfig",
    "ReconcilePlan",
    "ReconciliationEngine",
    "RemoteWriteError",
    "SengledClient",
    "SengledError",
    "SengledLight",
    "SengledPlatform",
    "Session",
    "SessionExpiredError",
    "plan_reconciliation",
    "utils",
]
