"""
pfsense_control
===============
Programmatic control of a pfSense appliance through its server-rendered
web UI: an authenticated session, HTML-to-snapshot parsers and replayed
form submissions (``__csrf_magic`` included).

Package structure
-----------------
pfsense_control/
├── __init__.py       – package init and public API
├── config.py         – page paths, form field names, env defaults
├── exceptions.py     – error taxonomy
├── logging_setup.py  – colorlog console / file logging
├── models.py         – immutable snapshots (gateways, interfaces, OpenVPN)
├── client.py         – PfSenseClient facade
├── cli.py            – argparse CLI (``python -m pfsense_control``)
├── auth/             – SessionManager, login form handling, SessionSecret
├── network/          – requests.Session factory, certificate-check adapter
├── extraction/       – BeautifulSoup helpers and per-page parsers
├── actions/          – fetch / mutate / refresh operations
└── utils/            – IEC byte units and appliance timestamps

Quick start
-----------
    from pfsense_control import PfSenseClient

    with PfSenseClient("https://192.168.1.1/", "admin", "pfsense") as fw:
        fw.login()
        for iface in fw.fetch_interfaces().interfaces:
            print(iface.name, iface.ipv4_address)
"""

from .auth import SessionManager
from .client import PfSenseClient
from .exceptions import (
    AuthenticationError,
    LoginFormNotFound,
    PfSenseError,
    ProtocolViolation,
    SessionExpired,
    SessionNotEstablished,
    StructureNotFound,
    TransportError,
    ValidationError,
    ValueFormatError,
)
from .extraction import parse_gateways, parse_interfaces, parse_openvpn_status
from .models import (
    DhcpLeaseState,
    GatewaySet,
    InterfaceSet,
    InterfaceStatus,
    IpVersion,
    OpenVpnClientConnection,
    OpenVpnClientInstance,
    ServiceState,
    TunnelState,
    VpnStatusSet,
)

__version__ = "1.0.0"

__all__ = [
    "PfSenseClient",
    "SessionManager",
    "parse_gateways",
    "parse_interfaces",
    "parse_openvpn_status",
    "DhcpLeaseState",
    "GatewaySet",
    "InterfaceSet",
    "InterfaceStatus",
    "IpVersion",
    "OpenVpnClientConnection",
    "OpenVpnClientInstance",
    "ServiceState",
    "TunnelState",
    "VpnStatusSet",
    "AuthenticationError",
    "LoginFormNotFound",
    "PfSenseError",
    "ProtocolViolation",
    "SessionExpired",
    "SessionNotEstablished",
    "StructureNotFound",
    "TransportError",
    "ValidationError",
    "ValueFormatError",
]
