from __future__ import annotations

import asyncio
import socket
import subprocess

import pytest

from wakectl.core.errors import TransportSendError, TransportTimeoutError
from wakectl.core.model import WakeOutcome
from wakectl.transports.magic_packet import MagicPacketTransport, build_magic_packet
from wakectl.transports.ping import PingTransport, parse_time_ms


class FakeSocket:
    sent: list[tuple[bytes, tuple[str, int]]] = []
    options: list[tuple[int, int, int]] = []

    def __init__(self, family: int, kind: int) -> None:
        self.closed = False

    def setsockopt(self, level: int, option: int, value: int) -> None:
        FakeSocket.options.append((level, option, value))

    def sendto(self, data: bytes, address: tuple[str, int]) -> None:
        FakeSocket.sent.append((data, address))

    def close(self) -> None:
        self.closed = True


def test_magic_packet_layout() -> None:
    packet = build_magic_packet("AA:BB:CC:DD:EE:FF")
    assert len(packet) == 102
    assert packet[:6] == b"\xff" * 6
    assert packet[6:] == bytes.fromhex("aabbccddeeff") * 16


def test_magic_packet_rejects_bad_mac() -> None:
    with pytest.raises(TransportSendError):
        build_magic_packet("AA:BB:CC")


def test_send_uses_broadcast_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeSocket.sent = []
    FakeSocket.options = []
    monkeypatch.setattr(socket, "socket", FakeSocket)

    MagicPacketTransport().send("AA:BB:CC:DD:EE:FF")

    assert FakeSocket.sent[0][1] == ("255.255.255.255", 9)
    assert (socket.SOL_SOCKET, socket.SO_BROADCAST, 1) in FakeSocket.options


def test_send_targets_configured_address(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeSocket.sent = []
    monkeypatch.setattr(socket, "socket", FakeSocket)

    MagicPacketTransport(port=7).send("AA:BB:CC:DD:EE:FF", address="10.0.0.255")

    assert FakeSocket.sent[0][1] == ("10.0.0.255", 7)


def test_wake_reports_send_failure_as_outcome(monkeypatch: pytest.MonkeyPatch) -> None:
    transport = MagicPacketTransport()

    def failing_send(mac: str, *, address: str | None = None) -> None:
        raise TransportSendError("Network is unreachable")

    monkeypatch.setattr(transport, "send", failing_send)
    outcome = asyncio.run(transport.wake("AA:BB:CC:DD:EE:FF"))
    assert outcome == WakeOutcome(ok=False, error="Network is unreachable")


def test_wake_reports_success(monkeypatch: pytest.MonkeyPatch) -> None:
    transport = MagicPacketTransport()
    monkeypatch.setattr(transport, "send", lambda mac, *, address=None: None)
    assert asyncio.run(transport.wake("AA:BB:CC:DD:EE:FF")) == WakeOutcome(ok=True)


def _cp(cmd: list[str], rc: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(cmd, rc, stdout=stdout, stderr=stderr)


def test_parse_time_ms() -> None:
    assert parse_time_ms("64 bytes from 10.0.0.5: icmp_seq=1 ttl=64 time=12.3 ms") == 12.3
    assert parse_time_ms("Reply from 10.0.0.5: bytes=32 time<1ms TTL=128") == 1.0
    assert parse_time_ms("Request timeout") is None


def test_ping_alive(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check, capture_output, text, timeout):
        assert cmd[0] == "ping"
        assert cmd[-1] == "10.0.0.5"
        return _cp(cmd, 0, stdout="64 bytes from 10.0.0.5: icmp_seq=1 ttl=64 time=0.42 ms\n")

    monkeypatch.setattr(subprocess, "run", fake_run)
    result = asyncio.run(PingTransport().probe("10.0.0.5"))
    assert result.alive is True
    assert result.time_ms == 0.42
    assert result.error is None


def test_ping_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check, capture_output, text, timeout):
        return _cp(cmd, 1, stdout="1 packets transmitted, 0 received, 100% packet loss\n")

    monkeypatch.setattr(subprocess, "run", fake_run)
    result = PingTransport().run("10.0.0.5")
    assert result.alive is False
    assert result.time_ms is None
    assert "100% packet loss" in result.output


def test_ping_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check, capture_output, text, timeout):
        raise FileNotFoundError("ping")

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(TransportSendError):
        PingTransport().run("10.0.0.5")


def test_ping_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check, capture_output, text, timeout):
        raise subprocess.TimeoutExpired(cmd, timeout)

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(TransportTimeoutError):
        PingTransport().run("10.0.0.5")
