"""Tailnet address-range membership.

Tailscale assigns node addresses from the CGNAT block 100.64.0.0/10 and
from its ULA prefix fd7a:115c:a1e0::/48. Addresses seen on a dual-stack
listener can arrive IPv4-mapped ("::ffff:100.101.102.103"), so the
embedded IPv4 literal is unwrapped before testing.

Usage:
    from tailscale_localapi.core.tailnet import is_in_tailscale_ip_range

    is_in_tailscale_ip_range("::ffff:100.64.0.1")  # "100.64.0.1"
    is_in_tailscale_ip_range("8.8.8.8")            # None
"""

from __future__ import annotations

import re
from ipaddress import IPv4Network, IPv6Network, ip_address
from typing import Optional

TAILSCALE_IPV4_RANGE = IPv4Network("100.64.0.0/10")
TAILSCALE_IPV6_RANGE = IPv6Network("fd7a:115c:a1e0::/48")

TAILSCALE_RANGES: tuple[IPv4Network | IPv6Network, ...] = (
    TAILSCALE_IPV4_RANGE,
    TAILSCALE_IPV6_RANGE,
)

_IPV4_MAPPED_RE = re.compile(r"::ffff:(\d+\.\d+\.\d+\.\d+)$", re.IGNORECASE)


def _contains(address: str) -> bool:
    """Return True if the literal falls inside a range of its own family."""
    try:
        ip = ip_address(address)
    except ValueError:
        return False

    return any(
        ip.version == network.version and ip in network
        for network in TAILSCALE_RANGES
    )


def is_in_tailscale_ip_range(address: str) -> Optional[str]:
    """Check whether an address belongs to the tailnet.

    Args:
        address: IPv4, IPv6 or IPv4-mapped IPv6 literal.

    Returns:
        The matching address (the embedded IPv4 literal for mapped
        addresses), or None when the address is outside both ranges or
        cannot be parsed.
    """
    match = _IPV4_MAPPED_RE.search(address)
    if match:
        embedded = match.group(1)
        return embedded if _contains(embedded) else None

    return address if _contains(address) else None
