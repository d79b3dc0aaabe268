"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from wakectl.core.model import ProbeResult, SubscriptionMode, WakeOutcome


class WakeTransport(Protocol):
    async def wake(self, mac: str, *, address: str | None = None) -> WakeOutcome:
        """Send a wake packet for `mac` and report whether it went out."""


class ProbeTransport(Protocol):
    async def probe(self, host: str) -> ProbeResult:
        """Check whether `host` answers and how fast."""


class NotificationStore(Protocol):
    def get(self, user_id: str) -> SubscriptionMode | None:
        """Return the user's join-alert mode, or None for an unknown user."""

    def set(self, user_id: str, mode: SubscriptionMode) -> None:
        """Create or update the user's join-alert mode."""


class MessageSender(Protocol):
    async def send(self, user_id: str, text: str) -> None:
        """Deliver a chat message to `user_id`."""
