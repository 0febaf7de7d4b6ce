"""LocalAPI response models.

Responses are validated after key normalization, so aliases are the
camelCase keys produced by to_camel_case(). Names with acronyms
("TailscaleIPs" → "tailscaleIPs") keep their explicit alias; the rest use
the alias generator. Every field is optional and unknown keys are kept,
because tailscaled adds fields between releases.

Models:
    WhoIsResponse: Node and user owning an address.
    StatusResponse / StatusWithPeers: Backend state, self node, peers.
    WaitingFile: Taildrop file staged by the daemon.
    FileTarget: Peer that can receive Taildrop files.
    WaitingFileContent: Raw bytes of a staged file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tailscale_localapi.core.casing import to_camel_case


class LocalAPIModel(BaseModel):
    """Base for response models: camelCase aliases, extra keys allowed."""

    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        extra="allow",
    )


class UserProfile(LocalAPIModel):
    id: Optional[int] = None
    login_name: Optional[str] = None
    display_name: Optional[str] = None
    profile_pic_url: Optional[str] = Field(default=None, alias="profilePicURL")
    roles: Optional[List[str]] = None


class Service(LocalAPIModel):
    proto: Optional[str] = None
    port: Optional[int] = None


class Hostinfo(LocalAPIModel):
    os: Optional[str] = None
    hostname: Optional[str] = None
    services: Optional[List[Service]] = None


class Node(LocalAPIModel):
    """A tailnet node as described by the control plane."""

    id: Optional[int] = None
    stable_id: Optional[str] = Field(default=None, alias="stableID")
    name: Optional[str] = None
    user: Optional[int] = None
    key: Optional[str] = None
    key_expiry: Optional[str] = None
    machine: Optional[str] = None
    disco_key: Optional[str] = None
    addresses: Optional[List[str]] = None
    allowed_ips: Optional[List[str]] = Field(default=None, alias="allowedIPs")
    endpoints: Optional[List[str]] = None
    home_derp: Optional[int] = Field(default=None, alias="homeDERP")
    hostinfo: Optional[Hostinfo] = None
    created: Optional[str] = None
    last_seen: Optional[str] = None
    online: Optional[bool] = None
    machine_authorized: Optional[bool] = None
    capabilities: Optional[List[str]] = None
    cap_map: Optional[Dict[str, Any]] = None
    computed_name: Optional[str] = None
    computed_name_with_host: Optional[str] = None


class WhoIsResponse(LocalAPIModel):
    node: Optional[Node] = None
    user_profile: Optional[UserProfile] = None
    cap_map: Optional[Dict[str, Any]] = None


class Peer(LocalAPIModel):
    """A peer (or the local node) in a status response."""

    id: Optional[str] = None
    public_key: Optional[str] = None
    host_name: Optional[str] = None
    dns_name: Optional[str] = Field(default=None, alias="dNSName")
    os: Optional[str] = None
    user_id: Optional[int] = Field(default=None, alias="userID")
    tailscale_ips: Optional[List[str]] = Field(default=None, alias="tailscaleIPs")
    allowed_ips: Optional[List[str]] = Field(default=None, alias="allowedIPs")
    addrs: Optional[List[str]] = None
    cur_addr: Optional[str] = None
    relay: Optional[str] = None
    rx_bytes: Optional[int] = None
    tx_bytes: Optional[int] = None
    created: Optional[str] = None
    last_write: Optional[str] = None
    last_seen: Optional[str] = None
    last_handshake: Optional[str] = None
    online: Optional[bool] = None
    exit_node: Optional[bool] = None
    exit_node_option: Optional[bool] = None
    active: Optional[bool] = None
    peer_api_url: Optional[List[str]] = Field(default=None, alias="peerAPIURL")
    capabilities: Optional[List[str]] = None
    cap_map: Optional[Dict[str, Any]] = None
    in_network_map: Optional[bool] = None
    in_magic_sock: Optional[bool] = None
    in_engine: Optional[bool] = None
    key_expiry: Optional[str] = None


class CurrentTailnet(LocalAPIModel):
    name: Optional[str] = None
    magic_dns_suffix: Optional[str] = Field(default=None, alias="magicDNSSuffix")
    magic_dns_enabled: Optional[bool] = Field(default=None, alias="magicDNSEnabled")


class StatusResponse(LocalAPIModel):
    """Daemon status without the peer map."""

    version: Optional[str] = None
    tun: Optional[bool] = None
    backend_state: Optional[str] = None
    have_node_key: Optional[bool] = None
    auth_url: Optional[str] = Field(default=None, alias="authURL")
    tailscale_ips: Optional[List[str]] = Field(default=None, alias="tailscaleIPs")
    self_node: Optional[Peer] = Field(default=None, alias="self")
    health: Optional[List[Any]] = None
    magic_dns_suffix: Optional[str] = Field(default=None, alias="magicDNSSuffix")
    current_tailnet: Optional[CurrentTailnet] = None
    cert_domains: Optional[List[str]] = None


class StatusWithPeers(StatusResponse):
    """Daemon status including peers, keyed by (normalized) node key."""

    peer: Optional[Dict[str, Peer]] = Field(default_factory=dict)


class WaitingFile(LocalAPIModel):
    name: Optional[str] = None
    size: Optional[int] = None
    partial_path: Optional[str] = None
    create_time: Optional[str] = None
    sender: Optional[Dict[str, Any]] = None


class FileTarget(LocalAPIModel):
    node: Optional[Node] = None
    peer_api_url: Optional[str] = Field(default=None, alias="peerAPIURL")


@dataclass(frozen=True)
class WaitingFileContent:
    """Body of a staged Taildrop file."""

    data: bytes
    size: int
