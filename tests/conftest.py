"""
tailscale-localapi Test Configuration

Shared pytest fixtures and configuration for all test types.
"""

import os
from typing import Any, Callable, Generator

import httpx
import pytest
import respx

from tailscale_localapi.core.config import Settings, reset_settings
from tailscale_localapi.transport.dispatch import SOCKET_BASE_URL


# Configure pytest collection
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (require a running tailscaled)")


@pytest.fixture(autouse=True)
def isolated_settings() -> Generator[None, None, None]:
    """Reset the settings singleton and drop TAILSCALE_LOCALAPI_ variables."""
    reset_settings()
    saved = {k: v for k, v in os.environ.items() if k.startswith("TAILSCALE_LOCALAPI_")}
    for key in saved:
        del os.environ[key]

    yield

    reset_settings()
    for key in [k for k in os.environ if k.startswith("TAILSCALE_LOCALAPI_")]:
        del os.environ[key]
    os.environ.update(saved)


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with a tiny retry delay so probe retries don't slow tests."""
    return Settings(connection={"max_retries": 2, "retry_delay_ms": 1})


@pytest.fixture
def router() -> respx.Router:
    """respx router for the Unix-socket base URL, status route pre-mocked."""
    mock_router = respx.Router(base_url=SOCKET_BASE_URL, assert_all_called=False)
    mock_router.get("/localapi/v0/status", name="probe").mock(
        return_value=httpx.Response(200, json={"BackendState": "Running"})
    )
    return mock_router


@pytest.fixture
def mock_transport(router: respx.Router) -> httpx.MockTransport:
    """httpx transport answering from the respx router."""
    return httpx.MockTransport(router.handler)


@pytest.fixture
def failing_handler() -> Callable[[httpx.Request], httpx.Response]:
    """Handler that refuses every connection, like a daemon that is down."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return handler


@pytest.fixture
def raw_status_payload() -> dict[str, Any]:
    """A status body as tailscaled writes it (Go field names)."""
    return {
        "Version": "1.66.4-t1234",
        "TUN": True,
        "BackendState": "Running",
        "HaveNodeKey": True,
        "AuthURL": "",
        "TailscaleIPs": ["100.101.102.103", "fd7a:115c:a1e0::1"],
        "Self": {
            "ID": "nSelf1CNTRL",
            "PublicKey": "nodekey:aaaa",
            "HostName": "laptop",
            "DNSName": "laptop.tail1234.ts.net.",
            "OS": "linux",
            "UserID": 42,
            "TailscaleIPs": ["100.101.102.103"],
            "Online": True,
            "PeerAPIURL": ["http://100.101.102.103:12345"],
        },
        "Health": [],
        "MagicDNSSuffix": "tail1234.ts.net",
        "CurrentTailnet": {
            "Name": "example.com",
            "MagicDNSSuffix": "tail1234.ts.net",
            "MagicDNSEnabled": True,
        },
        "CertDomains": None,
        "Peer": {
            "nodekey:bbbb": {
                "ID": "nPeer2CNTRL",
                "HostName": "server",
                "DNSName": "server.tail1234.ts.net.",
                "TailscaleIPs": ["100.64.0.2"],
                "RxBytes": 1024,
                "TxBytes": 2048,
                "ExitNodeOption": False,
            },
        },
    }
