"""
pfsense_control.extraction.interfaces
=====================================
Parser for ``status_interfaces.php``.

Each interface is rendered as a panel titled
``"<Name> Interface (<internal>, <nic>)"`` holding a ``<dl>`` of labelled
values.  DHCP interfaces additionally carry a Release/Renew form inside
the ``DHCP`` value::

    <dt>DHCP</dt>
    <dd><form name="dhcpform" method="post">up
        <input type="hidden" name="__csrf_magic" value="sid:...">
        <input type="hidden" name="ifdescr" value="wan">
        <input type="hidden" name="status" value="up">
        <input type="hidden" name="if" value="igb0">
        <input type="hidden" name="ipv" value="inet">
        <button type="submit" name="submit" value="Release">Release</button>
    </form></dd>

DNS servers are a labelled value followed by unlabelled continuation
pairs (``<dt></dt><dd>8.8.4.4</dd>``).
"""

import re

from ..config import CSRF_FIELD
from ..exceptions import StructureNotFound
from ..logging_setup import log
from ..models import (
    DhcpLeaseState,
    DhcpReleaseForm,
    InterfaceSet,
    InterfaceStatus,
    PacketCounters,
)
from ..utils.units import parse_packet_counters
from .html_parser import (
    FieldRule,
    extract_fields,
    find_label,
    input_value,
    label_chain,
    panel_title,
    panels,
    parse_document,
    value_after,
)

RESOURCE = "interfaces"

_TITLE_RE = re.compile(r"^(?P<name>.+?) Interface \((?P<internal>[\w.]+), (?P<nic>[\w.\-]+)\)$")

_RULES = (
    FieldRule("status", "Status", required=True),
    FieldRule("mac_address", "MAC Address"),
    FieldRule("ipv4_address", "IPv4 Address"),
    FieldRule("ipv4_subnet_mask", "Subnet mask IPv4"),
    FieldRule("ipv4_gateway", "Gateway IPv4"),
    FieldRule("ipv6_link_local", "IPv6 Link Local"),
    FieldRule("ipv6_address", "IPv6 Address"),
    FieldRule("ipv6_subnet_mask", "Subnet mask IPv6"),
    FieldRule("ipv6_gateway", "Gateway IPv6"),
    FieldRule("mtu", "MTU", convert=int),
    FieldRule("media", "Media"),
    FieldRule("packets", "In/out packets",
              convert=lambda raw: PacketCounters(*parse_packet_counters(raw))),
)

_DHCP_STATES = {"up": DhcpLeaseState.UP, "down": DhcpLeaseState.DOWN}


def _parse_dhcp(panel, name: str) -> tuple[DhcpLeaseState, DhcpReleaseForm | None]:
    dt = find_label(panel, "DHCP")
    if dt is None:
        return DhcpLeaseState.UNAVAILABLE, None

    dd = value_after(dt)
    form = dd.find("form") if dd is not None else None
    if form is None:
        raise StructureNotFound(RESOURCE, "DHCP release form", f"interface {name}")

    csrf = input_value(form, CSRF_FIELD)
    ifdescr = input_value(form, "ifdescr")
    status = input_value(form, "status")
    if csrf is None or ifdescr is None or status is None:
        raise StructureNotFound(
            RESOURCE, f"DHCP form inputs {CSRF_FIELD}/ifdescr/status", f"interface {name}"
        )

    state = _DHCP_STATES.get(status.strip().lower(), DhcpLeaseState.UNKNOWN)
    if state is DhcpLeaseState.UNKNOWN:
        log.warning("%s: unrecognised DHCP status %r on %s", RESOURCE, status, name)
        return state, None

    return state, DhcpReleaseForm(
        csrf_token=csrf,
        ifdescr=ifdescr,
        status=status,
        iface=input_value(form, "if"),
        ipv=input_value(form, "ipv"),
    )


def parse_interface_panel(panel) -> InterfaceStatus | None:
    """Parse one panel; None when the panel is not an interface panel."""
    title = panel_title(panel)
    m = _TITLE_RE.match(title or "")
    if not m:
        return None

    name = m.group("name")
    fields = extract_fields(panel, _RULES, RESOURCE)
    status = fields.pop("status")
    dhcp_state, dhcp_form = _parse_dhcp(panel, name)

    return InterfaceStatus(
        name=name,
        internal_name=m.group("internal"),
        nic_name=m.group("nic"),
        is_up=status.lower() == "up",
        dhcp_state=dhcp_state,
        dhcp_form=dhcp_form,
        dns_servers=tuple(label_chain(panel, "DNS servers")),
        **fields,
    )


def parse_interfaces(html: str) -> InterfaceSet:
    """Parse ``status_interfaces.php`` into an InterfaceSet snapshot."""
    soup = parse_document(html)
    containers = panels(soup)
    if not containers:
        raise StructureNotFound(RESOURCE, "div.panel")

    interfaces = []
    for panel in containers:
        iface = parse_interface_panel(panel)
        if iface is not None:
            interfaces.append(iface)
    if not interfaces:
        log.warning("%s: no interface panels recognised on page", RESOURCE)
    log.debug("%s: parsed %s", RESOURCE, ", ".join(i.internal_name for i in interfaces))
    return InterfaceSet(tuple(interfaces))
