"""Core module for tailscale-localapi.

Exports the transport-independent pieces: exceptions, key normalization,
tailnet address ranges, response models and configuration.
"""

from tailscale_localapi.core.casing import (
    WORD_SEPARATORS,
    to_camel_case,
    to_camel_case_keys,
    words,
)
from tailscale_localapi.core.config import (
    ConnectionSettings,
    LoggingConfig,
    Settings,
    TransportSettings,
    create_settings,
    get_settings,
    reset_settings,
)
from tailscale_localapi.core.exceptions import (
    ConfigurationError,
    ConnectionExhaustedError,
    CredentialDiscoveryError,
    LocalAPIConnectionError,
    LocalAPIError,
    LocalAPIRequestError,
    LocalAPIValidationError,
)
from tailscale_localapi.core.models import (
    FileTarget,
    Node,
    Peer,
    StatusResponse,
    StatusWithPeers,
    UserProfile,
    WaitingFile,
    WaitingFileContent,
    WhoIsResponse,
)
from tailscale_localapi.core.tailnet import (
    TAILSCALE_IPV4_RANGE,
    TAILSCALE_IPV6_RANGE,
    is_in_tailscale_ip_range,
)

__all__ = [
    # Exceptions
    "LocalAPIError",
    "CredentialDiscoveryError",
    "LocalAPIConnectionError",
    "ConnectionExhaustedError",
    "LocalAPIRequestError",
    "LocalAPIValidationError",
    "ConfigurationError",
    # Key normalization
    "WORD_SEPARATORS",
    "words",
    "to_camel_case",
    "to_camel_case_keys",
    # Tailnet ranges
    "TAILSCALE_IPV4_RANGE",
    "TAILSCALE_IPV6_RANGE",
    "is_in_tailscale_ip_range",
    # Response models
    "FileTarget",
    "Node",
    "Peer",
    "StatusResponse",
    "StatusWithPeers",
    "UserProfile",
    "WaitingFile",
    "WaitingFileContent",
    "WhoIsResponse",
    # Configuration
    "Settings",
    "TransportSettings",
    "ConnectionSettings",
    "LoggingConfig",
    "create_settings",
    "get_settings",
    "reset_settings",
]
