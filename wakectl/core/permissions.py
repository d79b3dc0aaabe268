"""Per-device authorization checks."""

from __future__ import annotations

from wakectl.core.model import Device, Permissions


def evaluate(device: Device | None, user_id: str, required: Permissions) -> bool:
    """Return True if `user_id` holds every capability set in `required` on `device`.

    A user with no entry in the device's permitted users is denied even when
    nothing is required. When a user is listed more than once, any single
    entry that satisfies `required` grants access.
    """
    if device is None:
        return False

    needed = required.enabled()
    return any(
        user.id == user_id and all(getattr(user.permissions, name) for name in needed)
        for user in device.permitted_users
    )
