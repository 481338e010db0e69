"""
Latency sampler: ICMP round-trip time to each endpoint's host via the system
`ping` tool, one echo request per probe.
"""
import logging
import re
import subprocess
import sys
import time
from typing import Callable, Optional, Sequence

from bench.registry import extract_host
from config import PING_COUNT, PING_INTERVAL_MS, PING_STYLE, RPC_TIMEOUT_SECONDS, ConfigError
from core.interfaces import Bench, PingParser
from core.types import Endpoint, EndpointResult, Failure, Sample, Success

logger = logging.getLogger(__name__)

# "time=14ms", "time<1ms", Korean locale "시간=14ms"
_WINDOWS_TIME = re.compile(r"(?:time|시간)\s*([=<])\s*(\d+(?:\.\d+)?)\s*ms", re.I)
# "time=14.2 ms"
_POSIX_TIME = re.compile(r"time=(\d+(?:\.\d+)?)\s*ms")


def _whole_ms(text: str) -> float:
    return float(int(float(text)))


class WindowsPingParser(PingParser):
    """ping.exe output, English or Korean locale."""

    count_flag = "-n"

    def parse(self, output: str) -> Optional[float]:
        for line in output.splitlines():
            m = _WINDOWS_TIME.search(line)
            if m:
                # "<1ms" is reported as the 1 ms bound
                return _whole_ms(m.group(2))
        return None


class PosixPingParser(PingParser):
    """iputils / BSD ping output."""

    count_flag = "-c"

    def parse(self, output: str) -> Optional[float]:
        for line in output.splitlines():
            m = _POSIX_TIME.search(line)
            if m:
                return _whole_ms(m.group(1))
        return None


def parser_for(style: str = PING_STYLE, platform: str = sys.platform) -> PingParser:
    """Pick the output parser: explicit style, or by platform when style is 'auto'."""
    style = (style or "auto").lower()
    if style == "windows":
        return WindowsPingParser()
    if style == "posix":
        return PosixPingParser()
    if style != "auto":
        raise ConfigError(f"Unknown PING_STYLE: {style}")
    return WindowsPingParser() if platform.startswith("win") else PosixPingParser()


def run_ping(args: Sequence[str], timeout: float = RPC_TIMEOUT_SECONDS) -> str:
    """Run the echo tool and return its stdout. Raises OSError / TimeoutExpired."""
    proc = subprocess.run(
        list(args),
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout,
        check=False,
    )
    return proc.stdout or ""


class LatencySampler(Bench):
    """
    Sends `count` single-packet pings per endpoint, `interval` seconds apart.
    The sample is the RTT reported by the tool, not process wall time.
    """

    name = "ping"
    title = "Ping latency"

    def __init__(
        self,
        parser: Optional[PingParser] = None,
        count: int = PING_COUNT,
        interval: float = PING_INTERVAL_MS / 1000.0,
        runner: Callable[[Sequence[str]], str] = run_ping,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.parser = parser or parser_for()
        self.count = count
        self.interval = interval
        self._runner = runner
        self._sleep = sleep

    def probe(self, host: str, label: str) -> Sample:
        args = ["ping", self.parser.count_flag, "1", host]
        try:
            output = self._runner(args)
        except (OSError, subprocess.SubprocessError) as e:
            logger.info("  %s: error %s", label, e)
            return Failure(label=label, reason=str(e))

        rtt = self.parser.parse(output)
        if rtt is None:
            logger.info("  %s: no reply", label)
            return Failure(label=label, reason="no reply")
        logger.info("  %s: %.0f ms", label, rtt)
        return Success(label=label, duration_ms=rtt)

    def measure(self, endpoint: Endpoint) -> Optional[EndpointResult]:
        host = endpoint.host or extract_host(endpoint.url)
        if not host:
            # Not padded with failures: the endpoint is left out of this run
            logger.warning("  Invalid URL, no host to ping: %s", endpoint.url)
            return None

        result = EndpointResult(endpoint=endpoint)
        logger.info("  host: %s", host)
        for i in range(1, self.count + 1):
            result.samples.append(self.probe(host, f"ping #{i}"))
            self._sleep(self.interval)
        return result
