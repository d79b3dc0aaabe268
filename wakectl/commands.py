"""Chat command routing on top of the device service.

A chat transport hands over the sender's id and the raw message text and
posts back whatever `CommandRouter.handle` returns.
"""

from __future__ import annotations

import logging
import re

from wakectl.core.model import (
    PROBE_REQUIRED,
    WAKE_REQUIRED,
    ActionResult,
    AlertResult,
    Permissions,
    ProbeResult,
    SubscriptionMode,
)
from wakectl.core.service import DeviceService
from wakectl.transports.base import MessageSender, NotificationStore

COMMAND_PREFIX = "!"
_COMMAND_RE = re.compile(rf"^{re.escape(COMMAND_PREFIX)}(\S+)\s*(.*)$", re.DOTALL)
LOGGER = logging.getLogger(__name__)

HELP_TEXT = "\n".join(
    [
        "Available commands:",
        "  !help - this message",
        "  !devices [text] - list devices you can use",
        "  !wake <device-id> - send a wake packet",
        "  !ping <device-id> - check whether a device is online",
        "  !lmk - get messaged next time you join",
        "  !always - get messaged every time you join",
        "  !cancel - cancel !lmk or !always",
    ]
)


def format_wake(device_id: str, result: ActionResult, device: str | None, mac: str | None) -> str:
    if result is ActionResult.SUCCESS:
        return f"Wake packet sent to {device} ({mac})"
    if result is ActionResult.ACTION_FAILED:
        if mac is None:
            return f"Failed to wake {device}: no MAC address configured"
        return f"Failed to wake {device} ({mac})"
    return f"Device '{device_id}' not found"


def format_probe(device_id: str, result: ProbeResult | ActionResult) -> str:
    if result is ActionResult.DEVICE_NOT_FOUND:
        return f"Device '{device_id}' not found"
    if isinstance(result, ActionResult):
        return f"Could not ping '{device_id}'"
    if result.error:
        return f"Ping to {result.host} failed: {result.error}"
    if not result.alive:
        return f"{result.host} is unreachable"
    if result.time_ms is None:
        return f"{result.host} is online"
    return f"{result.host} is online ({result.time_ms:g} ms)"


SUBSCRIPTION_REPLIES = {
    SubscriptionMode.LMK: "You will be messaged next time you join",
    SubscriptionMode.ALWAYS: "You will be messaged every time you join",
    SubscriptionMode.CANCEL: "You will no longer be messaged when you join",
}
ALERT_TEXT = "You have been alerted"


class CommandRouter:
    def __init__(
        self,
        service: DeviceService,
        *,
        store: NotificationStore | None = None,
        sender: MessageSender | None = None,
    ) -> None:
        self.service = service
        self.store = store
        self.sender = sender

    async def handle(self, user_id: str, text: str) -> str | None:
        match = _COMMAND_RE.match(text.strip())
        if not match:
            return None
        command, argument = match.group(1).lower(), match.group(2).strip()
        LOGGER.info("Command from %s: %s", user_id, command)

        try:
            if self.store is not None and self.store.get(user_id) is None:
                self.store.set(user_id, SubscriptionMode.CANCEL)
            return await self._dispatch(user_id, command, argument)
        except Exception:
            LOGGER.exception("Command %s from %s failed", command, user_id)
            return "An error occurred"

    async def _dispatch(self, user_id: str, command: str, argument: str) -> str:
        if command == "help":
            return HELP_TEXT
        if command == "devices":
            choices = self.service.search(argument, user_id, Permissions())
            if not choices:
                return "No devices available"
            return "\n".join(f"{choice.value}: {choice.name}" for choice in choices)
        if command == "wake":
            if not argument:
                return "Usage: !wake <device-id>"
            result = await self.service.wake(argument, user_id, WAKE_REQUIRED)
            return format_wake(argument, result.result, result.device, result.mac)
        if command == "ping":
            if not argument:
                return "Usage: !ping <device-id>"
            return format_probe(argument, await self.service.probe(argument, user_id, PROBE_REQUIRED))
        if command in {"lmk", "always", "cancel"}:
            if self.store is None:
                return "Join alerts are not available"
            mode = SubscriptionMode[command.upper()]
            self.store.set(user_id, mode)
            return SUBSCRIPTION_REPLIES[mode]
        return f"Unknown command '{command}'. Use {COMMAND_PREFIX}help for a list of commands"

    async def send_alert(self, user_id: str) -> AlertResult:
        """Message a subscribed user that they joined.

        An `lmk` subscription is consumed by the alert and falls back to cancel.
        """
        if self.store is None or self.sender is None:
            return AlertResult(status=503, message="Alerts are not configured")
        try:
            mode = self.store.get(user_id)
            if mode is None:
                return AlertResult(status=404, message="User not found")
            if mode == SubscriptionMode.CANCEL:
                return AlertResult(status=200, message="User has notifications disabled")

            await self.sender.send(user_id, ALERT_TEXT)
            if mode == SubscriptionMode.LMK:
                self.store.set(user_id, SubscriptionMode.CANCEL)
            return AlertResult(status=200, message="Alert sent")
        except Exception:
            LOGGER.exception("Alert for %s failed", user_id)
            return AlertResult(status=500, message="An error occurred")
