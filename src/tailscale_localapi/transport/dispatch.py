"""Request dispatch over the LocalAPI transport.

Two transports reach the same HTTP API:

- Unix domain socket (Linux, containers, macOS in socket-only mode). No auth.
- Localhost TCP (macOS GUI builds). HTTP Basic auth with an empty user and
  the sameuserproof token, plus a virtual Host header naming the socket.

TransportConfig captures that decision once; LocalAPITransport owns the
single httpx.AsyncClient every request goes through.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import httpx
import structlog

from tailscale_localapi.core.exceptions import LocalAPIConnectionError
from tailscale_localapi.transport.credentials import SHARED_DIR, read_sameuserproof
from tailscale_localapi.transport.environment import (
    Environment,
    default_socket_path,
    detect_environment,
)

log = structlog.get_logger()

VIRTUAL_HOST = "local-tailscaled.sock"
SOCKET_BASE_URL = f"http://{VIRTUAL_HOST}"
LOOPBACK_HOST = "127.0.0.1"
API_PREFIX = "/localapi/v0"


@dataclass(frozen=True)
class TransportConfig:
    """Resolved transport settings.

    adapter_port and adapter_password are set exactly when the client talks
    localhost TCP (macOS without socket-only mode).

    Attributes:
        socket_path: Unix socket path (used unless TCP is selected).
        use_socket_only: Caller forced the Unix socket.
        environment: Detected host environment.
        adapter_port: tailscaled TCP port (TCP mode only).
        adapter_password: sameuserproof token (TCP mode only).
    """

    socket_path: str
    use_socket_only: bool
    environment: Environment
    adapter_port: Optional[int] = None
    adapter_password: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Enforce the credentials-iff-TCP invariant."""
        wants_tcp = self.environment == Environment.MACOS and not self.use_socket_only
        has_port = self.adapter_port is not None
        has_password = self.adapter_password is not None
        if has_port != has_password or has_port != wants_tcp:
            raise ValueError(
                "adapter_port/adapter_password must be set only for macOS "
                "localhost TCP mode"
            )

    @classmethod
    def resolve(
        cls,
        socket_path: Optional[str] = None,
        use_socket_only: bool = False,
        environment: Optional[Union[Environment, str]] = None,
        shared_dir: Path = SHARED_DIR,
    ) -> TransportConfig:
        """Detect the environment and discover credentials when needed.

        Raises:
            CredentialDiscoveryError: macOS TCP mode without usable
                sameuserproof files.
        """
        env = Environment(environment) if environment else detect_environment()
        path = socket_path or default_socket_path(env)

        if env == Environment.MACOS and not use_socket_only:
            proof = read_sameuserproof(shared_dir)
            return cls(
                socket_path=path,
                use_socket_only=use_socket_only,
                environment=env,
                adapter_port=proof.port,
                adapter_password=proof.token,
            )

        return cls(socket_path=path, use_socket_only=use_socket_only, environment=env)

    @property
    def uses_tcp(self) -> bool:
        return self.adapter_port is not None

    @property
    def transport_name(self) -> str:
        """Human-readable transport name for logs."""
        return "localhost TCP" if self.uses_tcp else "Unix socket"

    @property
    def base_url(self) -> str:
        if self.uses_tcp:
            return f"http://{LOOPBACK_HOST}:{self.adapter_port}"
        return SOCKET_BASE_URL

    @property
    def endpoint(self) -> str:
        """Where requests physically go: the socket path or the TCP URL."""
        return self.base_url if self.uses_tcp else self.socket_path


class LocalAPITransport:
    """The single dispatch function shared by every LocalAPI call.

    Args:
        config: Resolved transport configuration.
        timeout: Per-request timeout in seconds. None disables deadlines.
        transport: Optional httpx transport replacing the socket/TCP one
            (used by tests to mount a mock).
    """

    def __init__(
        self,
        config: TransportConfig,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = self._build_client(timeout, transport)

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def _build_client(
        self,
        timeout: Optional[float],
        transport: Optional[httpx.AsyncBaseTransport],
    ) -> httpx.AsyncClient:
        config = self._config

        if config.uses_tcp:
            assert config.adapter_password is not None
            return httpx.AsyncClient(
                base_url=config.base_url,
                auth=httpx.BasicAuth(username="", password=config.adapter_password),
                headers={"Host": VIRTUAL_HOST},
                timeout=timeout,
                transport=transport,
            )

        return httpx.AsyncClient(
            base_url=SOCKET_BASE_URL,
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(uds=config.socket_path),
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        content: Any = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request and return the fully read response.

        Status codes are not checked here; callers decide what success means.

        Raises:
            LocalAPIConnectionError: The daemon could not be reached.
        """
        try:
            return await self._client.request(
                method,
                path,
                params=params,
                headers=headers,
                content=content,
                json=json,
            )
        except httpx.TransportError as e:
            log.error(
                "localapi_fetch_failed",
                method=method,
                path=path,
                endpoint=self._config.endpoint,
                error=str(e) or type(e).__name__,
            )
            raise LocalAPIConnectionError(
                endpoint=self._config.endpoint,
                path=path,
                message=f"Failed to fetch {path} via {self._config.transport_name}: {e}",
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
