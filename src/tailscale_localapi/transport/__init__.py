"""Transport package for tailscale-localapi.

Components:
- environment: host/container detection and default socket paths
- credentials: macOS sameuserproof discovery
- dispatch: TransportConfig and the shared httpx dispatcher
- connection: background startup probe with backoff
"""

from tailscale_localapi.transport.connection import (
    ConnectionProbe,
    ConnectionState,
    backoff_delay_ms,
)
from tailscale_localapi.transport.credentials import SameUserProof, read_sameuserproof
from tailscale_localapi.transport.dispatch import LocalAPITransport, TransportConfig
from tailscale_localapi.transport.environment import (
    Environment,
    default_socket_path,
    detect_environment,
    is_running_in_container,
)

__all__ = [
    "ConnectionProbe",
    "ConnectionState",
    "backoff_delay_ms",
    "SameUserProof",
    "read_sameuserproof",
    "LocalAPITransport",
    "TransportConfig",
    "Environment",
    "default_socket_path",
    "detect_environment",
    "is_running_in_container",
]
