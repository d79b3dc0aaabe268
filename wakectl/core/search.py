"""Device search scoped to what a user is allowed to act on."""

from __future__ import annotations

from wakectl.core.model import DeviceChoice, Permissions, Registry
from wakectl.core.permissions import evaluate


def _name_contains_match(device_name: str, query: str) -> bool:
    return query in device_name.lower()


def search_devices(
    registry: Registry,
    query: str,
    user_id: str,
    required: Permissions,
) -> list[DeviceChoice]:
    lower_query = query.lower()
    return [
        DeviceChoice(name=device.name, value=device.id)
        for device in registry.devices
        if _name_contains_match(device.name, lower_query) and evaluate(device, user_id, required)
    ]
