"""Wake-on-LAN transport sending UDP magic packets."""

from __future__ import annotations

import asyncio
import logging
import socket

from wakectl.core.errors import TransportSendError
from wakectl.core.model import WakeOutcome

BROADCAST_ADDRESS = "255.255.255.255"
DEFAULT_PORT = 9
LOGGER = logging.getLogger(__name__)


def build_magic_packet(mac: str) -> bytes:
    digits = mac.replace(":", "").replace("-", "")
    try:
        mac_bytes = bytes.fromhex(digits)
    except ValueError as exc:
        raise TransportSendError(f"Invalid MAC address '{mac}'") from exc
    if len(mac_bytes) != 6:
        raise TransportSendError(f"Invalid MAC address '{mac}'")
    return b"\xff" * 6 + mac_bytes * 16


class MagicPacketTransport:
    def __init__(self, *, port: int = DEFAULT_PORT) -> None:
        self.port = port

    def send(self, mac: str, *, address: str | None = None) -> None:
        packet = build_magic_packet(mac)
        target = (address or BROADCAST_ADDRESS, self.port)
        try:
            udp_socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise TransportSendError(f"Could not create UDP socket: {exc}") from exc
        try:
            udp_socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            udp_socket.sendto(packet, target)
        except OSError as exc:
            raise TransportSendError(f"Magic packet send to {target[0]}:{target[1]} failed: {exc}") from exc
        finally:
            udp_socket.close()

    async def wake(self, mac: str, *, address: str | None = None) -> WakeOutcome:
        try:
            await asyncio.to_thread(self.send, mac, address=address)
        except TransportSendError as exc:
            LOGGER.warning("Wake packet for %s not sent: %s", mac, exc)
            return WakeOutcome(ok=False, error=str(exc))
        LOGGER.info("Wake packet sent for %s via %s", mac, address or BROADCAST_ADDRESS)
        return WakeOutcome(ok=True)
