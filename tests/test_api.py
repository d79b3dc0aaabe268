from __future__ import annotations

import asyncio

from wakectl.api import (
    ActionResult,
    Client,
    Device,
    DeviceChoice,
    NetworkInfo,
    Permissions,
    PermittedUser,
    ProbeResult,
    Registry,
    WakeOutcome,
    WakeResult,
)


class FakeWakeTransport:
    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc

    async def wake(self, mac: str, *, address: str | None = None) -> WakeOutcome:
        if self.exc is not None:
            raise self.exc
        return WakeOutcome(ok=True)


class FakeProbeTransport:
    async def probe(self, host: str) -> ProbeResult:
        return ProbeResult(host=host, alive=True, time_ms=2.0)


OFFICE = Registry(
    devices=(
        Device(
            id="d1",
            name="Office PC",
            network=NetworkInfo(mac_address="AA:BB:CC:DD:EE:FF", ip_address="10.0.0.5"),
            permitted_users=(PermittedUser(id="u1", permissions=Permissions(wol=True)),),
        ),
    )
)


def _client(wake_transport: FakeWakeTransport | None = None) -> Client:
    return Client(
        registry=OFFICE,
        wake_transport=wake_transport or FakeWakeTransport(),
        probe_transport=FakeProbeTransport(),
    )


def test_wake_authorized_and_unauthorized() -> None:
    client = _client()
    assert asyncio.run(client.wake("d1", "u1")) == WakeResult(
        result=ActionResult.SUCCESS, device="Office PC", mac="AA:BB:CC:DD:EE:FF"
    )
    assert asyncio.run(client.wake("d1", "u2")) == WakeResult(result=ActionResult.DEVICE_NOT_FOUND)


def test_search_scoped_to_user() -> None:
    client = _client()
    assert client.search("office", "u1", Permissions(wol=True)) == [DeviceChoice(name="Office PC", value="d1")]
    assert client.search("office", "u2", Permissions(wol=True)) == []


def test_wake_without_requirements_still_needs_listing() -> None:
    assert asyncio.run(_client().wake("d1", "u2", Permissions())) == WakeResult(result=ActionResult.DEVICE_NOT_FOUND)


def test_wake_transport_error_reports_action_failed() -> None:
    client = _client(FakeWakeTransport(exc=OSError("Network is unreachable")))
    assert asyncio.run(client.wake("d1", "u1")) == WakeResult(
        result=ActionResult.ACTION_FAILED, device="Office PC", mac="AA:BB:CC:DD:EE:FF"
    )


def test_probe_requires_ping_capability() -> None:
    client = _client()
    assert asyncio.run(client.probe("d1", "u1")) is ActionResult.DEVICE_NOT_FOUND
    result = asyncio.run(client.probe("d1", "u1", Permissions(wol=True)))
    assert result == ProbeResult(host="10.0.0.5", alive=True, time_ms=2.0)
