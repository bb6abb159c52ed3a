"""The side of the accessory host that the platform talks to."""
from abc import ABC, abstractmethod
import logging
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .light import SengledLight

_LOGGER = logging.getLogger(__name__)


class AccessoryHost(ABC):
    """Registers accessories and receives their state changes."""

    @abstractmethod
    def register_accessory(self, light: "SengledLight") -> None:
        """Publish a new accessory."""

    @abstractmethod
    def unregister_accessory(self, light: "SengledLight") -> None:
        """Withdraw an accessory."""

    @abstractmethod
    def update_characteristic(self, light: "SengledLight", name: str, value: Any) -> None:
        """Report a value the accessory changed on its own."""


class LoggingHost(AccessoryHost):
    """A host that only keeps and logs what it is told."""

    def __init__(self) -> None:
        self.accessories: Dict[str, "SengledLight"] = {}

    def register_accessory(self, light: "SengledLight") -> None:
        _LOGGER.info("%s: Registered %s (%s)", light.id, light.name, light.record.model)
        self.accessories[light.id] = light

    def unregister_accessory(self, light: "SengledLight") -> None:
        _LOGGER.info("%s: Unregistered %s", light.id, light.name)
        self.accessories.pop(light.id, None)

    def update_characteristic(self, light: "SengledLight", name: str, value: Any) -> None:
        _LOGGER.debug("%s: %s = %s", light.id, name, value)
