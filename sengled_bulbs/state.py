"""Optimistic state cache of a single bulb.

Every set handler follows the same protocol: take a snapshot, change the
local model, write to the cloud, and restore the snapshot if the write
fails. Color writes may also be held back while the bulb is off and sent
when it is turned on again.
"""
import contextlib
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterator, Optional

from .color import ColorState
from .const import CachePolicy
from .models import DeviceAttributes, DeviceRecord

_LOGGER = logging.getLogger(__name__)


class WriteState(Enum):
    LIVE = "live"
    CACHED_PENDING_FLUSH = "cached_pending_flush"


@dataclass(frozen=True)
class ColorWritePolicy:
    """When color writes are cached while off, and when redundant sets are dropped."""

    cache_policy: CachePolicy = CachePolicy.SCHEDULE
    redundant_set_policy: CachePolicy = CachePolicy.SCHEDULE

    @staticmethod
    def _applies(policy: CachePolicy, schedule_active: bool) -> bool:
        if policy == CachePolicy.ALWAYS:
            return True
        if policy == CachePolicy.SCHEDULE:
            return schedule_active
        return False

    def should_cache(self, schedule_active: bool, power_on: bool) -> bool:
        return not power_on and self._applies(self.cache_policy, schedule_active)

    def should_suppress_redundant(self, schedule_active: bool) -> bool:
        return self._applies(self.redundant_set_policy, schedule_active)


@dataclass(frozen=True)
class StateSnapshot:
    """Parts of a record to put back, None parts are left alone."""

    power_on: Optional[bool] = None
    brightness: Optional[int] = None
    color: Optional[ColorState] = None


class DeviceStateCache:
    """The last known state of a bulb plus its pending color write."""

    def __init__(
        self, record: DeviceRecord, policy: Optional[ColorWritePolicy] = None
    ) -> None:
        self.record = record
        self.policy = policy or ColorWritePolicy()
        self.schedule_active = False
        self._write_state = WriteState.LIVE

    @property
    def write_state(self) -> WriteState:
        return self._write_state

    @property
    def has_cached_color(self) -> bool:
        return self._write_state == WriteState.CACHED_PENDING_FLUSH

    def should_cache_color(self) -> bool:
        return self.policy.should_cache(self.schedule_active, self.record.power_on)

    def should_suppress_redundant(self) -> bool:
        return self.policy.should_suppress_redundant(self.schedule_active)

    def mark_color_cached(self) -> None:
        if self._write_state != WriteState.CACHED_PENDING_FLUSH:
            _LOGGER.debug("%s: Caching color until the bulb is turned on", self.record.id)
        self._write_state = WriteState.CACHED_PENDING_FLUSH

    def mark_flushed(self) -> None:
        self._write_state = WriteState.LIVE

    def snapshot(
        self, power: bool = False, brightness: bool = False, color: bool = False
    ) -> StateSnapshot:
        record = self.record
        return StateSnapshot(
            power_on=record.power_on if power else None,
            brightness=record.brightness.get_value() if brightness else None,
            color=record.color.copy_snapshot()
            if color and record.color is not None
            else None,
        )

    def restore(self, snapshot: StateSnapshot) -> None:
        record = self.record
        if snapshot.power_on is not None:
            record.power_on = snapshot.power_on
        if snapshot.brightness is not None:
            record.brightness.set_value(snapshot.brightness)
        if snapshot.color is not None and record.color is not None:
            record.color.restore_snapshot(snapshot.color)

    @contextlib.contextmanager
    def optimistic(
        self, power: bool = False, brightness: bool = False, color: bool = False
    ) -> Iterator[StateSnapshot]:
        """Restore the selected parts of the record if the block raises."""
        snapshot = self.snapshot(power=power, brightness=brightness, color=color)
        try:
            yield snapshot
        except Exception:
            _LOGGER.debug("%s: Rolling back to %s", self.record.id, snapshot)
            self.restore(snapshot)
            raise

    def refresh(self, attrs: DeviceAttributes) -> None:
        """Take the state reported by the cloud, keeping a color not yet sent."""
        pending_color = self.record.color if self.has_cached_color else None
        self.record.update_from_attributes(attrs)
        if pending_color is not None and self.record.color is not None:
            self.record.color = pending_color
