"""Readiness probe for the local emulator's health endpoint."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import httpx

from hotreload_core.errors import ReadinessCancelled, ReadinessTimeout

logger = logging.getLogger(__name__)

HEALTH_PATH = "/_localstack/health"
DEFAULT_HOST = "localhost"
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_RETRY_DELAY_MS = 2000


class ReadinessProbe:
    """Polls the health endpoint with bounded retries.

    Usage:
        probe = ReadinessProbe()
        attempts = await probe.wait_for_ready(4566, max_attempts=60, retry_delay_ms=1000)
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        health_path: str = HEALTH_PATH,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize probe.

        Args:
            host: Host the emulator listens on
            health_path: Health endpoint path
            transport: Optional httpx transport (tests pass a MockTransport)
            sleep: Coroutine used for the retry delay
        """
        self.host = host
        self.health_path = health_path if health_path.startswith("/") else f"/{health_path}"
        self.transport = transport
        self.sleep = sleep

    def health_url(self, port: int) -> str:
        return f"http://{self.host}:{port}{self.health_path}"

    async def is_healthy(self, port: int, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Issue a single health check.

        Network errors, timeouts and non-2xx responses all count as unhealthy.

        Args:
            port: Emulator gateway port
            timeout_ms: Per-request timeout in milliseconds

        Returns:
            True on any 2xx response
        """
        url = self.health_url(port)
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=timeout_ms / 1000.0) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug(f"Health check {url} failed: {e!r}")
            return False

        if not response.is_success:
            logger.debug(f"Health check {url} returned {response.status_code}")
            return False
        return True

    async def wait_for_ready(
        self,
        port: int,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        *,
        cancel_event: asyncio.Event | None = None,
        deadline: float | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> int:
        """Wait until the health endpoint reports healthy.

        Args:
            port: Emulator gateway port
            max_attempts: Maximum number of health checks
            retry_delay_ms: Delay between failed checks
            cancel_event: Set by the caller to abort; checked between attempts
            deadline: Absolute ``time.monotonic()`` value after which no further
                attempt is started; retry delays are cut short to meet it
            timeout_ms: Per-request timeout in milliseconds

        Returns:
            Number of attempts used

        Raises:
            ReadinessTimeout: If every attempt failed or the deadline passed
            ReadinessCancelled: If cancel_event was set
        """
        attempts = 0
        while attempts < max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                raise ReadinessCancelled(port, attempts)
            if deadline is not None and time.monotonic() >= deadline:
                logger.debug(f"Readiness deadline passed after {attempts} attempt(s)")
                break

            attempts += 1
            if await self.is_healthy(port, timeout_ms):
                logger.debug(f"Backend on port {port} ready after {attempts} attempt(s)")
                return attempts

            if attempts < max_attempts:
                delay = retry_delay_ms / 1000.0
                if deadline is not None:
                    delay = max(0.0, min(delay, deadline - time.monotonic()))
                await self._delay(delay, cancel_event)

        raise ReadinessTimeout(port, attempts)

    async def _delay(self, seconds: float, cancel_event: asyncio.Event | None) -> None:
        """Sleep between attempts, waking early when cancel_event is set."""
        if cancel_event is None:
            await self.sleep(seconds)
            return
        sleeper = asyncio.ensure_future(self.sleep(seconds))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            waiter.cancel()
        if sleeper.done() and not sleeper.cancelled():
            sleeper.result()
