"""Reachability probe using the system `ping` binary."""

from __future__ import annotations

import asyncio
import re
import subprocess

from wakectl.core.errors import TransportSendError, TransportTimeoutError
from wakectl.core.model import ProbeResult

_TIME_RE = re.compile(r"time[=<]\s*([0-9]+(?:\.[0-9]+)?)\s*ms", re.IGNORECASE)


def parse_time_ms(output: str) -> float | None:
    match = _TIME_RE.search(output)
    if not match:
        return None
    return float(match.group(1))


class PingTransport:
    def __init__(self, *, count: int = 1, timeout_s: float = 2.0) -> None:
        self.count = count
        self.timeout_s = timeout_s

    def _command(self, host: str) -> list[str]:
        return ["ping", "-c", str(self.count), "-W", str(max(1, int(self.timeout_s))), host]

    def run(self, host: str) -> ProbeResult:
        cmd = self._command(host)
        try:
            result = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout_s * self.count + 2,
            )
        except FileNotFoundError as exc:
            raise TransportSendError("The 'ping' binary is not available on this system") from exc
        except subprocess.TimeoutExpired as exc:
            raise TransportTimeoutError(f"Ping to {host} did not finish in time") from exc

        output = (result.stdout or "").strip()
        alive = result.returncode == 0
        return ProbeResult(
            host=host,
            alive=alive,
            time_ms=parse_time_ms(output) if alive else None,
            output=output if alive else (output or (result.stderr or "").strip()),
        )

    async def probe(self, host: str) -> ProbeResult:
        return await asyncio.to_thread(self.run, host)
