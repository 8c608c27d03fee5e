"""
pfsense_control.extraction.openvpn
==================================
Parser for ``status_openvpn.php``.

Two sub-structures are read:

* the "Client Instance Statistics" panel (always present when OpenVPN is
  configured): one 8-cell row per client instance, row id
  ``r:<port>:<vpnid>``;
* zero or more "<server> Client Connections" panels, one per server-mode
  instance: 6-cell rows per connected peer.

The CSRF token used by service restart actions is not in any form on this
page; it only appears in the ``csrfMagicToken`` script variable in
``<head>``.
"""

import ipaddress
import re

from ..config import (
    CLIENT_CONNECTION_CELLS,
    CLIENT_CONNECTIONS_TITLE,
    CLIENT_INSTANCE_CELLS,
    CLIENT_STATS_TITLE,
)
from ..exceptions import StructureNotFound, ValueFormatError
from ..logging_setup import log
from ..models import (
    OpenVpnClientConnection,
    OpenVpnClientInstance,
    ServiceState,
    TunnelState,
    VpnStatusSet,
)
from ..utils.units import parse_appliance_timestamp, parse_sent_received
from .html_parser import (
    body_rows,
    find_panel_by_title,
    panel_title,
    panels,
    parse_document,
    row_cells,
    striped_table,
    text_of,
)

RESOURCE = "openvpn"

_CSRF_SCRIPT_RE = re.compile(r"(sid:[\w,]+)", re.IGNORECASE)
_INSTANCE_ROW_ID_RE = re.compile(r"^r:[^:]*:(\d+)$")
_CONNECTIONS_TITLE_RE = re.compile(
    rf"^(?P<label>.*?)\s*(?P<endpoint>(?:UDP|TCP)\S*)\s+{CLIENT_CONNECTIONS_TITLE}$"
)
_HOST_PORT_RE = re.compile(r"^\[?(?P<host>[0-9A-Fa-f:.]+?)\]?[:.](?P<port>\d{1,5})$")

_SERVICE_RUNNING = "Service is Running"
_SERVICE_STOPPED = "Service is Stopped"


# ---------------------------------------------------------------------------
# Cell value helpers
# ---------------------------------------------------------------------------

def _is_ip(text: str) -> bool:
    try:
        ipaddress.ip_address(text)
    except ValueError:
        return False
    return True


def _address(text: str) -> str | None:
    """
    One or more whitespace-separated IP addresses (a dual-stack tunnel
    lists its IPv4 and IPv6 address), or None for placeholder text like
    "Service not running?".
    """
    tokens = text.split()
    if tokens and all(_is_ip(t) for t in tokens):
        return " ".join(tokens)
    return None


def _address_with_port(text: str) -> str | None:
    """``ip:port`` (IPv4) or ``[ip]:port`` / ``ip.port`` (IPv6), else None."""
    m = _HOST_PORT_RE.match(text)
    if m and _is_ip(m.group("host")):
        return text
    return None


def _tunnel_state(text: str) -> TunnelState:
    return {"up": TunnelState.UP, "down": TunnelState.DOWN}.get(text.lower(), TunnelState.UNKNOWN)


def _service_state(cell) -> ServiceState:
    for icon in cell.find_all("i"):
        title = icon.get("title", "")
        if _SERVICE_STOPPED in title:
            return ServiceState.STOPPED
        if _SERVICE_RUNNING in title:
            return ServiceState.RUNNING
    return ServiceState.UNKNOWN


def _counters(text: str, row_label: str) -> tuple[int, int]:
    try:
        return parse_sent_received(text)
    except ValueFormatError as exc:
        raise ValueFormatError(
            f"Cannot parse byte counters for {row_label}",
            resource=RESOURCE, field="Bytes Sent/Received", raw_value=text,
        ) from exc


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

def parse_instance_row(row) -> OpenVpnClientInstance | None:
    """Parse a client-instance row; None when the row is not a data row."""
    cells = row_cells(row)
    if len(cells) != CLIENT_INSTANCE_CELLS:
        return None

    name = text_of(cells[0])
    m = _INSTANCE_ROW_ID_RE.match(row.get("id", ""))
    sent, received = _counters(text_of(cells[6]), name)
    return OpenVpnClientInstance(
        instance_id=m.group(1) if m else None,
        name=name,
        tunnel_state=_tunnel_state(text_of(cells[1])),
        connected_since=parse_appliance_timestamp(text_of(cells[2])),
        local_address=_address_with_port(text_of(cells[3])),
        virtual_address=_address(text_of(cells[4])),
        remote_host=_address_with_port(text_of(cells[5])),
        bytes_sent=sent,
        bytes_received=received,
        service_state=_service_state(cells[7]),
    )


def parse_connection_row(row, server: str, endpoint: str) -> OpenVpnClientConnection | None:
    """Parse a server client-connection row; None when not a data row."""
    cells = row_cells(row)
    if len(cells) != CLIENT_CONNECTION_CELLS:
        return None

    common_name = text_of(cells[0])
    sent, received = _counters(text_of(cells[4]), common_name)
    return OpenVpnClientConnection(
        server=server,
        endpoint=endpoint,
        common_name=common_name,
        real_address=_address_with_port(text_of(cells[1])),
        virtual_address=_address(text_of(cells[2])),
        connected_since=parse_appliance_timestamp(text_of(cells[3])),
        bytes_sent=sent,
        bytes_received=received,
    )


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

def find_csrf_token(soup) -> str | None:
    """Recover ``csrfMagicToken`` from the ``<head>`` scripts."""
    head = soup.find("head")
    if head is None:
        return None
    for script in head.find_all("script"):
        m = _CSRF_SCRIPT_RE.search(script.get_text())
        if m:
            return m.group(1)
    return None


def _parse_instances(soup) -> tuple[OpenVpnClientInstance, ...]:
    panel = find_panel_by_title(soup, lambda title: CLIENT_STATS_TITLE in title)
    if panel is None:
        raise StructureNotFound(RESOURCE, f"panel '{CLIENT_STATS_TITLE}'")
    table = striped_table(panel)
    if table is None:
        raise StructureNotFound(RESOURCE, f"'{CLIENT_STATS_TITLE}' table.table-striped")

    instances = []
    for row in body_rows(table):
        instance = parse_instance_row(row)
        if instance is None:
            log.debug("%s: skipping non-data instance row", RESOURCE)
            continue
        instances.append(instance)
    return tuple(instances)


def _parse_connections(soup) -> tuple[OpenVpnClientConnection, ...]:
    connections = []
    for panel in panels(soup):
        m = _CONNECTIONS_TITLE_RE.match(panel_title(panel) or "")
        if not m:
            continue
        table = striped_table(panel)
        if table is None:
            log.debug("%s: no table in panel %r", RESOURCE, m.group(0))
            continue
        for row in body_rows(table):
            conn = parse_connection_row(row, m.group("label"), m.group("endpoint"))
            if conn is not None:
                connections.append(conn)
    return tuple(connections)


def parse_openvpn_status(html: str) -> VpnStatusSet:
    """Parse ``status_openvpn.php`` into a VpnStatusSet snapshot."""
    soup = parse_document(html)
    csrf_token = find_csrf_token(soup)
    if csrf_token is None:
        log.warning("%s: csrfMagicToken not found in page head", RESOURCE)
    snapshot = VpnStatusSet(
        instances=_parse_instances(soup),
        connections=_parse_connections(soup),
        csrf_token=csrf_token,
    )
    log.debug(
        "%s: %d client instance(s), %d server connection(s)",
        RESOURCE, len(snapshot.instances), len(snapshot.connections),
    )
    return snapshot
