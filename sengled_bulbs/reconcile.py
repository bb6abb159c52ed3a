"""Bring the set of registered accessories in line with the cloud roster.

Each bulb in the roster is added when it is new, updated in place when it
is known under the same name, and replaced when it was renamed, since a
host caches the name with the accessory. Bulbs missing from the roster
are removed. Running the same roster twice changes nothing the second
time.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Iterable, List, Mapping

from .models import DeviceAttributes

_LOGGER = logging.getLogger(__name__)


class AccessoryRegistry(ABC):
    """The accessories a reconciliation works on."""

    @abstractmethod
    def tracked_names(self) -> Mapping[str, str]:
        """Return the display name of every registered accessory by id."""

    @abstractmethod
    def add_device(self, attrs: DeviceAttributes) -> None:
        pass

    @abstractmethod
    def update_device(self, attrs: DeviceAttributes) -> None:
        pass

    @abstractmethod
    def remove_device(self, device_id: str) -> None:
        pass


@dataclass
class ReconcilePlan:
    added: List[DeviceAttributes] = field(default_factory=list)
    updated: List[DeviceAttributes] = field(default_factory=list)
    replaced: List[DeviceAttributes] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True when the set of accessories changes, updates do not count."""
        return bool(self.added or self.replaced or self.removed)


def plan_reconciliation(
    tracked: Mapping[str, str], roster: Iterable[DeviceAttributes]
) -> ReconcilePlan:
    """Work out what to do without touching anything."""
    plan = ReconcilePlan()
    seen = set()
    for attrs in roster:
        if attrs.id in seen:
            _LOGGER.debug("%s: Ignoring duplicate roster entry", attrs.id)
            continue
        seen.add(attrs.id)
        if attrs.id not in tracked:
            plan.added.append(attrs)
        elif tracked[attrs.id] != attrs.display_name:
            plan.replaced.append(attrs)
        else:
            plan.updated.append(attrs)
    plan.removed = [device_id for device_id in tracked if device_id not in seen]
    return plan


class ReconciliationEngine:
    """Applies reconciliation plans to a registry."""

    def __init__(self, registry: AccessoryRegistry) -> None:
        self.registry = registry

    def apply(self, plan: ReconcilePlan) -> None:
        for device_id in plan.removed:
            _LOGGER.info("%s: Removing, no longer on the account", device_id)
            self.registry.remove_device(device_id)
        for attrs in plan.replaced:
            _LOGGER.info("%s: Renamed to %s, recreating", attrs.id, attrs.display_name)
            self.registry.remove_device(attrs.id)
            self.registry.add_device(attrs)
        for attrs in plan.added:
            _LOGGER.info("%s: Adding %s", attrs.id, attrs.display_name)
            self.registry.add_device(attrs)
        for attrs in plan.updated:
            self.registry.update_device(attrs)

    def reconcile(self, roster: Iterable[DeviceAttributes]) -> ReconcilePlan:
        plan = plan_reconciliation(self.registry.tracked_names(), roster)
        self.apply(plan)
        return plan
