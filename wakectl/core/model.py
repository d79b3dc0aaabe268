"""Core data models used across loader, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum, IntEnum


@dataclass(frozen=True)
class Permissions:
    """Named capability flags, used both for grants and for requirements."""

    wol: bool = False
    ping: bool = False

    def enabled(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name))


WAKE_REQUIRED = Permissions(wol=True)
PROBE_REQUIRED = Permissions(ping=True)


@dataclass(frozen=True)
class PermittedUser:
    id: str
    permissions: Permissions


@dataclass(frozen=True)
class NetworkInfo:
    mac_address: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True)
class Device:
    id: str
    name: str
    network: NetworkInfo
    permitted_users: tuple[PermittedUser, ...]


@dataclass(frozen=True)
class Registry:
    """Read-only snapshot of the configured devices, in file order."""

    devices: tuple[Device, ...] = ()

    def get(self, device_id: str) -> Device | None:
        for device in self.devices:
            if device.id == device_id:
                return device
        return None

    def __len__(self) -> int:
        return len(self.devices)


@dataclass(frozen=True)
class DeviceChoice:
    name: str
    value: str


class ActionResult(Enum):
    SUCCESS = "success"
    DEVICE_NOT_FOUND = "devicenotfound"
    ACTION_FAILED = "actionfailed"
    # Reserved. Denials are reported as DEVICE_NOT_FOUND so callers cannot
    # tell a hidden device from a missing one.
    PERMISSION_DENIED = "permissiondenied"


@dataclass(frozen=True)
class WakeOutcome:
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class WakeResult:
    result: ActionResult
    device: str | None = None
    mac: str | None = None


@dataclass(frozen=True)
class ProbeResult:
    host: str
    alive: bool
    time_ms: float | None = None
    output: str = ""
    error: str | None = None


class SubscriptionMode(IntEnum):
    """Join-alert preference stored per user."""

    CANCEL = 0
    LMK = 1
    ALWAYS = 2


@dataclass(frozen=True)
class AlertResult:
    status: int
    message: str
