"""
tailscale-localapi - asyncio client for the Tailscale LocalAPI

Talks to tailscaled over its Unix socket or, on macOS, over authenticated
localhost TCP, and returns camelCase-normalized responses.
"""

from tailscale_localapi.client import TailscaleLocalAPI
from tailscale_localapi.core.casing import to_camel_case, to_camel_case_keys, words
from tailscale_localapi.core.exceptions import (
    ConfigurationError,
    ConnectionExhaustedError,
    CredentialDiscoveryError,
    LocalAPIConnectionError,
    LocalAPIError,
    LocalAPIRequestError,
    LocalAPIValidationError,
)
from tailscale_localapi.core.tailnet import is_in_tailscale_ip_range
from tailscale_localapi.transport.connection import ConnectionState
from tailscale_localapi.transport.environment import Environment

__version__ = "0.1.0"

__all__ = [
    "TailscaleLocalAPI",
    "ConnectionState",
    "Environment",
    # Key normalization
    "words",
    "to_camel_case",
    "to_camel_case_keys",
    # Address ranges
    "is_in_tailscale_ip_range",
    # Exceptions
    "LocalAPIError",
    "CredentialDiscoveryError",
    "LocalAPIConnectionError",
    "ConnectionExhaustedError",
    "LocalAPIRequestError",
    "LocalAPIValidationError",
    "ConfigurationError",
]
