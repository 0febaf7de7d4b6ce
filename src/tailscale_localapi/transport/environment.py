"""Runtime environment detection.

The transport depends on where the client runs:

- macos: tailscaled (GUI build) listens on localhost TCP and publishes
  credentials under /Library/Tailscale
- container: the socket is conventionally mounted at /tmp/tailscaled.sock
- unix / windows: the platform default Unix socket
"""

from __future__ import annotations

import os
import sys
from enum import StrEnum
from pathlib import Path
from typing import Mapping, Optional

import structlog

log = structlog.get_logger()

DOCKERENV_PATH = Path("/.dockerenv")
CGROUP_PATH = Path("/proc/1/cgroup")
CONTAINER_CGROUP_MARKERS = ("docker", "kubepods", "lxc")

DEFAULT_SOCKET_PATH = "/var/run/tailscaled.socket"
CONTAINER_SOCKET_PATH = "/tmp/tailscaled.sock"


class Environment(StrEnum):
    """Host environment, as far as transport selection is concerned."""

    WINDOWS = "windows"
    MACOS = "macos"
    UNIX = "unix"
    CONTAINER = "container"


def is_running_in_container(
    platform: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    dockerenv_path: Path = DOCKERENV_PATH,
    cgroup_path: Path = CGROUP_PATH,
) -> bool:
    """Return True when running inside Docker, Kubernetes or LXC.

    Args:
        platform: sys.platform value to assume. Defaults to the real one.
        environ: Environment mapping. Defaults to os.environ.
        dockerenv_path: Docker marker file.
        cgroup_path: cgroup file of PID 1 (only read on Linux).
    """
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ

    if dockerenv_path.exists():
        return True

    if environ.get("KUBERNETES_SERVICE_HOST"):
        return True

    if platform.startswith("linux"):
        try:
            cgroup = cgroup_path.read_text(encoding="utf-8")
        except OSError as e:
            log.debug("cgroup_read_failed", path=str(cgroup_path), error=str(e))
            return False
        return any(marker in cgroup for marker in CONTAINER_CGROUP_MARKERS)

    return False


def detect_environment(
    platform: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    dockerenv_path: Path = DOCKERENV_PATH,
    cgroup_path: Path = CGROUP_PATH,
) -> Environment:
    """Classify the host. Container detection takes precedence over the OS."""
    platform = platform or sys.platform

    if is_running_in_container(
        platform=platform,
        environ=environ,
        dockerenv_path=dockerenv_path,
        cgroup_path=cgroup_path,
    ):
        return Environment.CONTAINER

    if platform == "win32":
        return Environment.WINDOWS

    if platform == "darwin":
        return Environment.MACOS

    return Environment.UNIX


def default_socket_path(environment: Environment) -> str:
    """Socket path used when the caller does not supply one."""
    if environment is Environment.CONTAINER:
        return CONTAINER_SOCKET_PATH
    return DEFAULT_SOCKET_PATH
