"""Service layer used by the CLI, the chat command router, and the public API."""

from __future__ import annotations

import logging
from pathlib import Path

from wakectl.core.errors import TransportError
from wakectl.core.model import (
    ActionResult,
    Device,
    DeviceChoice,
    Permissions,
    ProbeResult,
    Registry,
    WakeResult,
)
from wakectl.core.permissions import evaluate
from wakectl.core.registry_loader import load_registry
from wakectl.core.search import search_devices
from wakectl.transports.base import ProbeTransport, WakeTransport
from wakectl.transports.magic_packet import MagicPacketTransport
from wakectl.transports.ping import PingTransport

LOGGER = logging.getLogger(__name__)


class DeviceService:
    def __init__(
        self,
        *,
        devices_path: Path | str | None = None,
        registry: Registry | None = None,
        wake_transport: WakeTransport | None = None,
        probe_transport: ProbeTransport | None = None,
    ) -> None:
        self.devices_path = devices_path
        if registry is None:
            loaded = load_registry(devices_path)
            self._registry = loaded.registry
            self.load_warnings = loaded.warnings
        else:
            self._registry = registry
            self.load_warnings = ()
        self.wake_transport = wake_transport or MagicPacketTransport()
        self.probe_transport = probe_transport or PingTransport()

    @property
    def registry(self) -> Registry:
        return self._registry

    def reload(self) -> Registry:
        """Re-read the devices file and swap in the new snapshot.

        On failure the previous snapshot stays in place and the error propagates.
        """
        loaded = load_registry(self.devices_path)
        self._registry = loaded.registry
        self.load_warnings = loaded.warnings
        return loaded.registry

    def search(self, query: str, user_id: str, required: Permissions) -> list[DeviceChoice]:
        return search_devices(self._registry, query, user_id, required)

    def _authorized_device(self, device_id: str, user_id: str, required: Permissions) -> Device | None:
        device = self._registry.get(device_id)
        if not evaluate(device, user_id, required):
            if device is not None:
                LOGGER.info("User %s denied %s on device %s", user_id, required.enabled(), device_id)
            return None
        return device

    async def wake(self, device_id: str, user_id: str, required: Permissions) -> WakeResult:
        device = self._authorized_device(device_id, user_id, required)
        if device is None:
            return WakeResult(result=ActionResult.DEVICE_NOT_FOUND)

        mac = device.network.mac_address
        if mac is None:
            LOGGER.warning("Device %s has no MAC address configured", device.id)
            return WakeResult(result=ActionResult.ACTION_FAILED, device=device.name)

        try:
            outcome = await self.wake_transport.wake(mac, address=device.network.ip_address)
        except Exception as exc:
            LOGGER.error("Wake transport raised for device %s: %s", device.id, exc)
            return WakeResult(result=ActionResult.ACTION_FAILED, device=device.name, mac=mac)

        if not outcome.ok:
            LOGGER.warning("Wake failed for device %s: %s", device.id, outcome.error)
            return WakeResult(result=ActionResult.ACTION_FAILED, device=device.name, mac=mac)
        return WakeResult(result=ActionResult.SUCCESS, device=device.name, mac=mac)

    async def probe(self, device_id: str, user_id: str, required: Permissions) -> ProbeResult | ActionResult:
        device = self._authorized_device(device_id, user_id, required)
        if device is None:
            return ActionResult.DEVICE_NOT_FOUND

        host = device.network.ip_address
        if host is None:
            LOGGER.warning("Device %s has no IP address configured", device.id)
            return ActionResult.ACTION_FAILED

        try:
            return await self.probe_transport.probe(host)
        except Exception as exc:
            level = logging.WARNING if isinstance(exc, TransportError) else logging.ERROR
            LOGGER.log(level, "Probe of device %s failed: %s", device.id, exc)
            return ProbeResult(host=host, alive=False, error=str(exc))
