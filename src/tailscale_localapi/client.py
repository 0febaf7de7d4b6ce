"""Tailscale LocalAPI client.

Usage:
    from tailscale_localapi import TailscaleLocalAPI

    async with TailscaleLocalAPI() as api:
        await api.wait_ready()
        status = await api.status()
        print(status.backend_state)

        who = await api.whois("100.101.102.103")
        print(who.user_profile.login_name)
"""

from __future__ import annotations

import asyncio
import math
from pathlib import Path
from typing import Any, AsyncIterable, Optional, Union
from urllib.parse import quote

import httpx
import structlog

from tailscale_localapi.core.casing import to_camel_case_keys
from tailscale_localapi.core.config import Settings, get_settings
from tailscale_localapi.core.exceptions import (
    LocalAPIRequestError,
    LocalAPIValidationError,
)
from tailscale_localapi.core.models import (
    FileTarget,
    StatusResponse,
    StatusWithPeers,
    WaitingFile,
    WaitingFileContent,
    WhoIsResponse,
)
from tailscale_localapi.core.tailnet import is_in_tailscale_ip_range
from tailscale_localapi.transport.connection import ConnectionProbe, ConnectionState
from tailscale_localapi.transport.credentials import SHARED_DIR
from tailscale_localapi.transport.dispatch import (
    API_PREFIX,
    LocalAPITransport,
    TransportConfig,
)
from tailscale_localapi.transport.environment import Environment

log = structlog.get_logger()

# encodeURIComponent leaves these unescaped as well
_PATH_SEGMENT_SAFE = "!*'()"


def _quote_segment(name: str) -> str:
    return quote(name, safe=_PATH_SEGMENT_SAFE)


def _check_response(
    operation: str,
    response: httpx.Response,
    expected_status: Optional[int] = None,
) -> None:
    """Raise LocalAPIRequestError unless the response is a success.

    Args:
        operation: Name used in the error message.
        response: Daemon response (already read).
        expected_status: Exact status required; any 2xx when None.
    """
    if expected_status is None:
        ok = response.is_success
    else:
        ok = response.status_code == expected_status

    if not ok:
        error = LocalAPIRequestError(
            operation=operation,
            status_code=response.status_code,
            body=response.text,
        )
        log.warning("localapi_request_rejected", **error.context)
        raise error


class TailscaleLocalAPI:
    """Client for the tailscaled LocalAPI.

    Construction detects the environment, discovers macOS credentials when
    needed and builds the transport. If an event loop is running the
    startup probe begins immediately in the background; otherwise it starts
    on connect(), wait_ready() or ``async with``.

    Args:
        socket_path: Unix socket override.
        use_socket_only: Force the Unix socket even on macOS.
        settings: Settings to use instead of the global ones.
        environment: Skip detection and assume this environment.
        shared_dir: Directory holding the macOS sameuserproof files.
        transport: httpx transport override (tests).

    Raises:
        CredentialDiscoveryError: macOS TCP mode without usable credentials.
    """

    def __init__(
        self,
        socket_path: Optional[str] = None,
        use_socket_only: Optional[bool] = None,
        *,
        settings: Optional[Settings] = None,
        environment: Optional[Union[Environment, str]] = None,
        shared_dir: Path = SHARED_DIR,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = settings or get_settings()
        if use_socket_only is None:
            use_socket_only = settings.transport.use_socket_only

        self._config = TransportConfig.resolve(
            socket_path=socket_path or settings.transport.socket_path,
            use_socket_only=use_socket_only,
            environment=environment,
            shared_dir=shared_dir,
        )
        log.info(
            "localapi_initializing",
            transport=self._config.transport_name,
            environment=str(self._config.environment),
            endpoint=self._config.endpoint,
        )

        self._transport = LocalAPITransport(
            self._config,
            timeout=settings.transport.timeout,
            transport=transport,
        )
        self._probe = ConnectionProbe(
            self._transport,
            max_retries=settings.connection.max_retries,
            retry_delay_ms=settings.connection.retry_delay_ms,
            backoff_factor=settings.connection.backoff_factor,
        )

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            log.debug("localapi_probe_deferred", reason="no running event loop")
        else:
            self._probe.start()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def environment(self) -> Environment:
        return self._config.environment

    @property
    def socket_path(self) -> str:
        return self._config.socket_path

    @property
    def probe(self) -> ConnectionProbe:
        return self._probe

    @property
    def connection_state(self) -> ConnectionState:
        return self._probe.state

    def connect(self) -> asyncio.Task[None]:
        """Start the background probe (no-op if already started)."""
        return self._probe.start()

    async def wait_ready(self) -> None:
        """Block until the daemon answered the probe.

        Raises:
            ConnectionExhaustedError: Every probe attempt failed.
        """
        await self._probe.wait_ready()

    async def aclose(self) -> None:
        """Cancel the probe and close the HTTP client."""
        self._probe.cancel()
        await self._transport.aclose()

    async def __aenter__(self) -> TailscaleLocalAPI:
        self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        operation: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        response = await self._transport.request("GET", f"{API_PREFIX}{path}", params=params)
        _check_response(operation, response)
        return to_camel_case_keys(response.json())

    async def _get_text(self, operation: str, path: str) -> str:
        response = await self._transport.request("GET", f"{API_PREFIX}{path}")
        _check_response(operation, response)
        return response.text

    async def _post_no_content(
        self,
        operation: str,
        path: str,
        json: Any = None,
    ) -> None:
        response = await self._transport.request("POST", f"{API_PREFIX}{path}", json=json)
        _check_response(operation, response, expected_status=204)

    def is_in_tailscale_ip_range(self, address: str) -> Optional[str]:
        """Return the tailnet address if ``address`` is inside the tailnet."""
        return is_in_tailscale_ip_range(address)

    # ------------------------------------------------------------------
    # Status and identity
    # ------------------------------------------------------------------

    async def status(self) -> StatusWithPeers:
        """Return the daemon's status, including peers."""
        data = await self._get_json("get status", "/status")
        return StatusWithPeers.model_validate(data)

    async def status_without_peers(self) -> StatusResponse:
        """Return the daemon's status without the peer map."""
        data = await self._get_json("get status", "/status", params={"peers": "false"})
        return StatusResponse.model_validate(data)

    async def whois(self, addr: str) -> WhoIsResponse:
        """Look up the node and user owning a tailnet address (ip or ip:port)."""
        data = await self._get_json(f"get whois for {addr}", "/whois", params={"addr": addr})
        return WhoIsResponse.model_validate(data)

    async def prefs(self) -> dict[str, Any]:
        return await self._get_json("get prefs", "/prefs")

    # ------------------------------------------------------------------
    # Diagnostics and metrics
    # ------------------------------------------------------------------

    async def goroutines(self) -> str:
        """Return a dump of the daemon's goroutines."""
        return await self._get_text("get goroutines", "/goroutines")

    async def daemon_metrics(self) -> str:
        """Return daemon metrics in the Prometheus text exposition format."""
        return await self._get_text("get daemon metrics", "/metrics")

    async def user_metrics(self) -> str:
        """Return user metrics in the Prometheus text exposition format."""
        return await self._get_text("get user metrics", "/usermetrics")

    async def increment_counter(self, name: str, delta: int) -> None:
        """Increment a daemon counter metric, creating it if needed.

        Gauges and negative deltas are not supported.

        Raises:
            LocalAPIValidationError: delta is negative.
        """
        if delta < 0:
            raise LocalAPIValidationError(
                field="delta",
                value=delta,
                message="negative delta not allowed",
            )

        updates = [{"name": name, "type": "counter", "value": delta}]
        response = await self._transport.request(
            "POST", f"{API_PREFIX}/upload-client-metrics", json=updates
        )
        _check_response("increment counter", response)

    # ------------------------------------------------------------------
    # Taildrop
    # ------------------------------------------------------------------

    async def waiting_files(self) -> list[WaitingFile]:
        """Return files received by the daemon but not yet picked up."""
        return await self.await_waiting_files(0)

    async def await_waiting_files(self, seconds: float) -> list[WaitingFile]:
        """Like waiting_files(), but let the daemon wait for a file to arrive.

        The wait is respected at whole-second granularity; 0 returns
        immediately. An empty list means nothing arrived in time.
        """
        data = await self._get_json(
            "get waiting files",
            "/files/",
            params={"waitsec": math.floor(seconds)},
        )
        return [WaitingFile.model_validate(item) for item in data or []]

    async def delete_waiting_file(self, base_name: str) -> None:
        response = await self._transport.request(
            "DELETE", f"{API_PREFIX}/files/{_quote_segment(base_name)}"
        )
        _check_response("delete waiting file", response, expected_status=204)

    async def get_waiting_file(self, base_name: str) -> WaitingFileContent:
        """Fetch a staged file.

        Raises:
            LocalAPIValidationError: The daemon used chunked encoding.
        """
        response = await self._transport.request(
            "GET", f"{API_PREFIX}/files/{_quote_segment(base_name)}"
        )
        _check_response("get waiting file", response, expected_status=200)

        if response.headers.get("transfer-encoding", "").lower() == "chunked":
            raise LocalAPIValidationError(
                field="transfer-encoding",
                value="chunked",
                message="Unexpected chunking",
            )

        size = int(response.headers.get("content-length") or 0)
        return WaitingFileContent(data=response.content, size=size)

    async def file_targets(self) -> list[FileTarget]:
        """Return the peers that can receive files."""
        data = await self._get_json("get file targets", "/file-targets")
        return [FileTarget.model_validate(item) for item in data or []]

    async def push_file(
        self,
        target_node_id: str,
        file_path: Optional[Union[str, Path]] = None,
        *,
        name: Optional[str] = None,
        data: Optional[Union[bytes, AsyncIterable[bytes]]] = None,
        size: int = -1,
    ) -> None:
        """Send a file to a peer.

        Either pass ``file_path`` (name and size are taken from the file) or
        ``name`` and ``data``. ``size`` of -1 means unknown and omits the
        Content-Length header.

        Args:
            target_node_id: Stable node ID of the receiving device.
            file_path: Local file to send.
            name: Name the receiver will see.
            data: Bytes or an async byte stream.
            size: Byte length of data, or -1.
        """
        if file_path is not None:
            path = Path(file_path)
            data = path.read_bytes()
            size = len(data)
            name = path.name or "file"
        elif name is None or data is None:
            raise LocalAPIValidationError(
                field="file_path",
                message="push_file needs either file_path or both name and data",
            )

        headers: dict[str, str] = {}
        if size != -1:
            headers["Content-Length"] = str(size)

        url = f"{API_PREFIX}/file-put/{target_node_id}/{_quote_segment(name)}"
        log.debug("localapi_push_file", target=target_node_id, name=name, size=size)
        response = await self._transport.request("PUT", url, headers=headers, content=data)
        _check_response("push file", response, expected_status=200)

    # ------------------------------------------------------------------
    # Login state
    # ------------------------------------------------------------------

    async def start(self, options: Optional[dict[str, Any]] = None) -> None:
        """Start the backend with the given ipn.Options (wire key casing)."""
        await self._post_no_content("start Tailscale", "/start", json=options)

    async def logout(self) -> None:
        await self._post_no_content("logout", "/logout")

    async def start_login_interactive(self) -> None:
        """Begin an interactive login; the auth URL appears in status()."""
        await self._post_no_content("start interactive login", "/login-interactive")
