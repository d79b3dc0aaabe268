"""Stable public API for building tooling on top of wakectl.

This module is the supported integration surface for chat bots, web hooks,
and scripts. Avoid importing from internal modules unless intentionally
depending on non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from wakectl.core.errors import (
    RegistryLoadError,
    RegistryValidationError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    WakectlError,
)
from wakectl.core.model import (
    PROBE_REQUIRED,
    WAKE_REQUIRED,
    ActionResult,
    AlertResult,
    Device,
    DeviceChoice,
    NetworkInfo,
    Permissions,
    PermittedUser,
    ProbeResult,
    Registry,
    SubscriptionMode,
    WakeOutcome,
    WakeResult,
)
from wakectl.core.service import DeviceService
from wakectl.transports.base import MessageSender, NotificationStore, ProbeTransport, WakeTransport

__all__ = [
    "WakectlError",
    "RegistryLoadError",
    "RegistryValidationError",
    "TransportError",
    "TransportSendError",
    "TransportTimeoutError",
    "ActionResult",
    "AlertResult",
    "Device",
    "DeviceChoice",
    "NetworkInfo",
    "Permissions",
    "PermittedUser",
    "ProbeResult",
    "Registry",
    "SubscriptionMode",
    "WakeOutcome",
    "WakeResult",
    "WAKE_REQUIRED",
    "PROBE_REQUIRED",
    "MessageSender",
    "NotificationStore",
    "ProbeTransport",
    "WakeTransport",
    "Client",
]


class Client:
    """Public client for permission-gated device actions.

    A `Client` wraps registry loading, user-scoped search, and the wake and
    probe actions. Unauthorized callers always see `DEVICE_NOT_FOUND`, never
    a distinct denial.
    """

    def __init__(
        self,
        devices_path: Path | str | None = None,
        *,
        registry: Registry | None = None,
        wake_transport: WakeTransport | None = None,
        probe_transport: ProbeTransport | None = None,
    ) -> None:
        self._service = DeviceService(
            devices_path=devices_path,
            registry=registry,
            wake_transport=wake_transport,
            probe_transport=probe_transport,
        )

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    @property
    def devices(self) -> Registry:
        return self._service.registry

    def reload(self) -> Registry:
        return self._service.reload()

    def search(
        self,
        query: str,
        user_id: str,
        required: Permissions = Permissions(),
    ) -> list[DeviceChoice]:
        return self._service.search(query, user_id, required)

    async def wake(
        self,
        device_id: str,
        user_id: str,
        required: Permissions = WAKE_REQUIRED,
    ) -> WakeResult:
        return await self._service.wake(device_id, user_id, required)

    async def probe(
        self,
        device_id: str,
        user_id: str,
        required: Permissions = PROBE_REQUIRED,
    ) -> ProbeResult | ActionResult:
        return await self._service.probe(device_id, user_id, required)
