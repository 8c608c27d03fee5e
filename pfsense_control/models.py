"""
pfsense_control.models
======================
Immutable point-in-time snapshots of appliance resources.

Every snapshot is produced fresh by a fetch or a mutation and carries the
hidden form values (CSRF tokens, per-row hidden fields) that were on the
page it was parsed from.  Those values are only good until the next fetch
of the same resource; mutations take a snapshot and return a new one.
Token-bearing fields are left out of ``repr()`` so snapshots can be logged.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from .config import CSRF_FIELD
from .exceptions import ValidationError


class IpVersion(Enum):
    V4 = 4
    V6 = 6


class DhcpLeaseState(Enum):
    UNAVAILABLE = "unavailable"   # interface is not configured for DHCP
    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"


class TunnelState(Enum):
    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"


class ServiceState(Enum):
    UNKNOWN = "unknown"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class HiddenForm:
    """Hidden ``(name, value)`` inputs of a form, in document order."""

    fields: tuple[tuple[str, str], ...]

    @property
    def csrf_token(self) -> str | None:
        for name, value in self.fields:
            if name == CSRF_FIELD:
                return value
        return None

    def __repr__(self) -> str:
        return f"HiddenForm(<{len(self.fields)} fields>)"


# ---------------------------------------------------------------------------
# Gateways
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GatewayTableEntry:
    name: str
    interface: str
    gateway: str
    monitor: str
    description: str


@dataclass(frozen=True)
class GatewayOption:
    option_id: str
    label: str


@dataclass(frozen=True)
class DefaultGatewaySelection:
    """Options of a default-gateway drop-down and the selected one."""

    AUTOMATIC = ""
    NONE = "-"

    options: tuple[GatewayOption, ...]
    selected: GatewayOption | None

    def get(self, option_id: str) -> GatewayOption | None:
        return next((o for o in self.options if o.option_id == option_id), None)

    def select(self, option_id: str) -> DefaultGatewaySelection:
        """Return a copy with *option_id* selected."""
        option = self.get(option_id)
        if option is None:
            known = ", ".join(repr(o.option_id) for o in self.options)
            raise ValidationError(
                f"Gateway option {option_id!r} is not available (known: {known})"
            )
        return replace(self, selected=option)


@dataclass(frozen=True)
class GatewaySet:
    entries: tuple[GatewayTableEntry, ...]
    ipv4: DefaultGatewaySelection
    ipv6: DefaultGatewaySelection
    save_form: HiddenForm = field(repr=False)
    apply_form: HiddenForm | None = field(default=None, repr=False)

    @property
    def has_pending_changes(self) -> bool:
        return self.apply_form is not None

    def selection(self, ip_version: IpVersion) -> DefaultGatewaySelection:
        return self.ipv4 if ip_version is IpVersion.V4 else self.ipv6


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DhcpReleaseForm:
    """Hidden fields of an interface's DHCP Release/Renew form."""

    csrf_token: str
    ifdescr: str
    status: str
    iface: str | None = None
    ipv: str | None = None

    def __repr__(self) -> str:
        return f"DhcpReleaseForm(ifdescr={self.ifdescr!r}, status={self.status!r})"


@dataclass(frozen=True)
class PacketCounters:
    in_packets: int
    out_packets: int
    in_bytes: int
    out_bytes: int


@dataclass(frozen=True)
class InterfaceStatus:
    name: str
    internal_name: str
    nic_name: str
    is_up: bool
    mac_address: str | None = None
    ipv4_address: str | None = None
    ipv4_subnet_mask: str | None = None
    ipv4_gateway: str | None = None
    ipv6_link_local: str | None = None
    ipv6_address: str | None = None
    ipv6_subnet_mask: str | None = None
    ipv6_gateway: str | None = None
    mtu: int | None = None
    media: str | None = None
    dhcp_state: DhcpLeaseState = DhcpLeaseState.UNAVAILABLE
    dns_servers: tuple[str, ...] = ()
    packets: PacketCounters | None = None
    dhcp_form: DhcpReleaseForm | None = field(default=None, repr=False)


@dataclass(frozen=True)
class InterfaceSet:
    interfaces: tuple[InterfaceStatus, ...]

    def get(self, internal_name: str) -> InterfaceStatus | None:
        return next((i for i in self.interfaces if i.internal_name == internal_name), None)


# ---------------------------------------------------------------------------
# OpenVPN
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpenVpnClientInstance:
    instance_id: str | None
    name: str
    tunnel_state: TunnelState
    connected_since: datetime | None
    local_address: str | None
    virtual_address: str | None
    remote_host: str | None
    bytes_sent: int
    bytes_received: int
    service_state: ServiceState


@dataclass(frozen=True)
class OpenVpnClientConnection:
    server: str
    endpoint: str
    common_name: str
    real_address: str | None
    virtual_address: str | None
    connected_since: datetime | None
    bytes_sent: int
    bytes_received: int


@dataclass(frozen=True)
class VpnStatusSet:
    instances: tuple[OpenVpnClientInstance, ...]
    connections: tuple[OpenVpnClientConnection, ...] = ()
    csrf_token: str | None = field(default=None, repr=False)

    def get(self, instance_id: str) -> OpenVpnClientInstance | None:
        return next((i for i in self.instances if i.instance_id == instance_id), None)

    def connections_for(self, server: str) -> tuple[OpenVpnClientConnection, ...]:
        return tuple(c for c in self.connections if c.server == server)
