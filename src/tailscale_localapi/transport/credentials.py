"""macOS sameuserproof credential discovery.

The macOS builds of tailscaled serve the LocalAPI on a localhost TCP port
instead of a Unix socket. The port and an auth token are published as:

    /Library/Tailscale/ipnport               symlink whose target is the port
    /Library/Tailscale/sameuserproof-$port   file containing the hex token

The token is sent as the password of HTTP Basic auth with an empty user.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import structlog

from tailscale_localapi.core.exceptions import CredentialDiscoveryError

log = structlog.get_logger()

SHARED_DIR = Path("/Library/Tailscale")
IPN_PORT_FILE = "ipnport"
SAMEUSERPROOF_PREFIX = "sameuserproof-"


@dataclass(frozen=True)
class SameUserProof:
    """Localhost TCP credentials read from the shared directory."""

    port: int
    token: str

    def __repr__(self) -> str:
        return f"SameUserProof(port={self.port!r}, token='***')"


def read_sameuserproof(shared_dir: Path = SHARED_DIR) -> SameUserProof:
    """Read the LocalAPI port and token.

    Args:
        shared_dir: Directory holding ipnport and sameuserproof-* files.

    Returns:
        The discovered credentials.

    Raises:
        CredentialDiscoveryError: If the symlink cannot be read, its target
            is not a decimal port, or the token file is unreadable or empty.
    """
    shared_dir = Path(shared_dir)

    try:
        port_str = os.readlink(shared_dir / IPN_PORT_FILE)
    except OSError as e:
        raise CredentialDiscoveryError(
            shared_dir=str(shared_dir),
            reason=f"cannot read {IPN_PORT_FILE} link: {e}",
        ) from e

    if not (port_str.isascii() and port_str.isdigit()) or not 0 < int(port_str) < 65536:
        raise CredentialDiscoveryError(
            shared_dir=str(shared_dir),
            reason=f"Invalid port number: {port_str}",
        )
    port = int(port_str)

    # The file name uses the link target verbatim
    proof_path = shared_dir / f"{SAMEUSERPROOF_PREFIX}{port_str}"
    try:
        token = proof_path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialDiscoveryError(
            shared_dir=str(shared_dir),
            reason=f"cannot read {proof_path.name}: {e}",
        ) from e

    if not token:
        raise CredentialDiscoveryError(
            shared_dir=str(shared_dir),
            reason="Empty auth token in sameuserproof file",
        )

    log.debug("sameuserproof_read", shared_dir=str(shared_dir), port=port)
    return SameUserProof(port=port, token=token)
