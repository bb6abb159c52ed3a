"""The Sengled platform: owns the accessories and keeps them in sync."""
import asyncio
import contextlib
import logging
from typing import Dict, Mapping, Optional

from .aioclient import SengledClient
from .host import AccessoryHost
from .light import SengledLight
from .models import DeviceAttributes, DeviceRecord, PlatformConfig
from .reconcile import AccessoryRegistry, ReconcilePlan, ReconciliationEngine
from .state import ColorWritePolicy

_LOGGER = logging.getLogger(__name__)


class SengledPlatform(AccessoryRegistry):
    """Discovers the bulbs on an account and registers them with the host."""

    def __init__(
        self,
        config: PlatformConfig,
        host: AccessoryHost,
        client: Optional[SengledClient] = None,
    ) -> None:
        self.config = config
        self.host = host
        self.client = client or SengledClient(
            config.username, config.password, timeout=config.timeout
        )
        self.policy = ColorWritePolicy(
            config.color_cache_policy, config.redundant_set_policy
        )
        self.accessories: Dict[str, SengledLight] = {}
        self.engine = ReconciliationEngine(self)
        self._discovery_lock = asyncio.Lock()
        self._discovery_task: Optional["asyncio.Task[None]"] = None
        if config.debug:
            logging.getLogger("sengled_bulbs").setLevel(logging.DEBUG)

    def _create_light(self, record: DeviceRecord) -> SengledLight:
        return SengledLight(
            self.client,
            record,
            host=self.host,
            policy=self.policy,
            enable_adaptive_lighting=self.config.enable_adaptive_lighting,
            custom_temperature_adjustment=self.config.custom_temperature_adjustment,
            on_not_found=self.handle_not_found,
        )

    def configure_accessory(self, record: DeviceRecord) -> SengledLight:
        """Take back an accessory the host restored from its cache."""
        old = self.accessories.pop(record.id, None)
        if old is not None:
            _LOGGER.warning("%s: Restored twice, dropping the older copy", record.id)
            self.host.unregister_accessory(old)
        _LOGGER.debug("%s: Restoring %s from cache", record.id, record.display_name)
        light = self._create_light(record)
        self.accessories[record.id] = light
        return light

    def get_light(self, id_or_name: str) -> Optional[SengledLight]:
        """Find an accessory by id, or else by name."""
        light = self.accessories.get(id_or_name)
        if light is not None:
            return light
        for light in self.accessories.values():
            if light.name == id_or_name:
                return light
        return None

    def tracked_names(self) -> Mapping[str, str]:
        return {device_id: light.name for device_id, light in self.accessories.items()}

    def add_device(self, attrs: DeviceAttributes) -> None:
        if attrs.id in self.accessories:
            raise ValueError(f"{attrs.id}: Accessory is already registered")
        light = self._create_light(DeviceRecord.from_attributes(attrs))
        self.accessories[attrs.id] = light
        self.host.register_accessory(light)
        light.push_state()

    def update_device(self, attrs: DeviceAttributes) -> None:
        self.accessories[attrs.id].update(attrs)

    def remove_device(self, device_id: str) -> None:
        light = self.accessories.pop(device_id, None)
        if light is None:
            return
        self.host.unregister_accessory(light)

    def handle_not_found(self, device_id: str) -> None:
        _LOGGER.info("%s: Removing accessory, the cloud does not know it", device_id)
        self.remove_device(device_id)

    async def async_update_devices(self) -> ReconcilePlan:
        """Log in, fetch the roster and reconcile, errors propagate."""
        await self.client.async_login()
        devices = await self.client.async_get_devices(use_cache=False)
        plan = self.engine.reconcile(devices)
        if plan.changed:
            _LOGGER.info(
                "Devices added: %s, renamed: %s, removed: %s",
                len(plan.added),
                len(plan.replaced),
                len(plan.removed),
            )
        return plan

    async def async_discover(self) -> Optional[ReconcilePlan]:
        """Run one discovery unless one is already running.

        Returns None when skipped or when discovery failed, the failure is
        logged and the next tick tries again.
        """
        if self._discovery_lock.locked():
            _LOGGER.debug("Discovery already in progress, skipping")
            return None
        async with self._discovery_lock:
            try:
                return await self.async_update_devices()
            except Exception as ex:  # pylint: disable=broad-except
                _LOGGER.error("Failed to discover devices: %s", ex)
                _LOGGER.debug("Discovery failure", exc_info=True)
                return None

    async def _async_discovery_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.discovery_interval)
            await self.async_discover()

    async def async_start(self) -> None:
        """Discover once now and then every discovery interval."""
        await self.async_discover()
        if self._discovery_task is None:
            self._discovery_task = asyncio.create_task(self._async_discovery_loop())

    async def async_stop(self) -> None:
        task = self._discovery_task
        self._discovery_task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.client.async_close()
