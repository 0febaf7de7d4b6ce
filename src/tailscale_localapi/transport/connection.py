"""Startup connection probe.

tailscaled may not be up yet when the client is created (early boot,
container start order). The probe polls the status endpoint in the
background with exponential backoff until the daemon answers or the retry
budget is spent.

States:
    UNINITIALIZED: Probe created, not started
    PROBING: Background task running
    READY: Status endpoint answered with a 2xx
    FAILED: Every attempt failed (terminal)

Valid Transitions:
    UNINITIALIZED → PROBING
    PROBING → READY
    PROBING → FAILED

Usage:
    probe = ConnectionProbe(transport)
    probe.start()
    await probe.wait_ready()  # raises ConnectionExhaustedError on FAILED
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Awaitable, Callable, Optional

import structlog

from tailscale_localapi.core.exceptions import (
    ConnectionExhaustedError,
    LocalAPIConnectionError,
)
from tailscale_localapi.transport.dispatch import API_PREFIX, LocalAPITransport

log = structlog.get_logger()

STATUS_PATH = f"{API_PREFIX}/status"

DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_DELAY_MS = 5000
DEFAULT_BACKOFF_FACTOR = 1.5


class ConnectionState(StrEnum):
    """Lifecycle of the startup probe."""

    UNINITIALIZED = "UNINITIALIZED"
    PROBING = "PROBING"
    READY = "READY"
    FAILED = "FAILED"


def backoff_delay_ms(
    retry_count: int,
    base_delay_ms: float = DEFAULT_RETRY_DELAY_MS,
    factor: float = DEFAULT_BACKOFF_FACTOR,
) -> float:
    """Delay before the retry that follows failed attempt number retry_count.

    Pure exponential, no ceiling: 5000, 7500, 11250, 16875, 25312.5 ms for
    retry_count 0..4 with the defaults.
    """
    return base_delay_ms * factor ** retry_count


class ConnectionProbe:
    """Background readiness probe with a cancellation handle.

    Attributes:
        state: Current ConnectionState.
        attempts: Number of status requests issued so far.
        error: ConnectionExhaustedError once FAILED, else None.
    """

    def __init__(
        self,
        transport: LocalAPITransport,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_ms: float = DEFAULT_RETRY_DELAY_MS,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._max_retries = max_retries
        self._retry_delay_ms = retry_delay_ms
        self._backoff_factor = backoff_factor
        self._sleep = sleep

        self._state = ConnectionState.UNINITIALIZED
        self._task: Optional[asyncio.Task[None]] = None
        self._attempts = 0
        self._error: Optional[ConnectionExhaustedError] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def error(self) -> Optional[ConnectionExhaustedError]:
        return self._error

    @property
    def task(self) -> Optional[asyncio.Task[None]]:
        return self._task

    def start(self) -> asyncio.Task[None]:
        """Start probing in the background. Idempotent.

        Must be called with a running event loop.
        """
        if self._task is None:
            self._state = ConnectionState.PROBING
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name="tailscale-localapi-probe"
            )
        return self._task

    def cancel(self) -> None:
        """Stop the probe if it is still running."""
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_ready(self) -> None:
        """Wait for the probe to finish, starting it if needed.

        Raises:
            ConnectionExhaustedError: The probe ended in FAILED.
            asyncio.CancelledError: The probe was cancelled.
        """
        task = self.start()
        await asyncio.shield(task)
        if self._error is not None:
            raise self._error

    async def _attempt(self) -> Optional[str]:
        """Issue one status request. Returns None on success, else the reason."""
        self._attempts += 1
        try:
            response = await self._transport.request("GET", STATUS_PATH)
        except LocalAPIConnectionError as e:
            return e.message

        if response.is_success:
            return None
        return f"Tailscale API returned status {response.status_code}"

    async def _run(self) -> None:
        transport_name = self._transport.config.transport_name
        retry_count = 0

        try:
            while True:
                failure = await self._attempt()
                if failure is None:
                    self._state = ConnectionState.READY
                    log.info(
                        "tailscale_running",
                        transport=transport_name,
                        attempts=self._attempts,
                    )
                    return

                log.error(
                    "tailscale_connect_failed",
                    transport=transport_name,
                    error=failure,
                    hint="is tailscaled running?",
                )

                if retry_count >= self._max_retries:
                    self._state = ConnectionState.FAILED
                    self._error = ConnectionExhaustedError(
                        attempts=self._attempts,
                        transport=transport_name,
                        last_error=failure,
                    )
                    log.error("tailscale_connect_exhausted", **self._error.context)
                    return

                delay_ms = backoff_delay_ms(
                    retry_count, self._retry_delay_ms, self._backoff_factor
                )
                retry_count += 1
                log.info(
                    "tailscale_connect_retry",
                    delay_seconds=delay_ms / 1000,
                    attempt=retry_count,
                    max_retries=self._max_retries,
                )
                await self._sleep(delay_ms / 1000)
        except asyncio.CancelledError:
            log.info("tailscale_probe_cancelled", attempts=self._attempts)
            raise
