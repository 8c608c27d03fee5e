"""DHCP lease release and renew on interface status."""

from ..auth.session import SessionManager
from ..config import CSRF_FIELD, DHCP_RELEASE, DHCP_RENEW, INTERFACES_PATH
from ..exceptions import StructureNotFound, ValidationError
from ..extraction.interfaces import RESOURCE, parse_interfaces
from ..logging_setup import log
from ..models import DhcpLeaseState, InterfaceSet, InterfaceStatus
from .base import refreshed_snapshot, submit_form


def fetch_interfaces(manager: SessionManager) -> InterfaceSet:
    return parse_interfaces(manager.get_page(INTERFACES_PATH))


def _dhcp_interface(snapshot: InterfaceSet, interface_id: str, required: DhcpLeaseState) -> InterfaceStatus:
    iface = snapshot.get(interface_id)
    if iface is None:
        known = ", ".join(i.internal_name for i in snapshot.interfaces)
        raise ValidationError(f"Unknown interface {interface_id!r} (known: {known})")
    if iface.dhcp_state is not required or iface.dhcp_form is None:
        raise ValidationError(
            f"Interface {interface_id!r} DHCP lease is {iface.dhcp_state.value}, "
            f"must be {required.value}"
        )
    return iface


def release_dhcp(
    manager: SessionManager,
    snapshot: InterfaceSet,
    interface_id: str,
    relinquish_lease: bool = False,
) -> InterfaceSet:
    """
    Release the DHCP lease of *interface_id* (lease must be up).

    With *relinquish_lease* a DHCPRELEASE is also sent to the server.
    Returns the refreshed interfaces snapshot.
    """
    iface = _dhcp_interface(snapshot, interface_id, DhcpLeaseState.UP)
    form = iface.dhcp_form
    if form.iface is None or form.ipv is None:
        raise StructureNotFound(RESOURCE, "DHCP release form inputs if/ipv", f"interface {iface.name}")

    data = [
        (CSRF_FIELD, form.csrf_token),
        ("ifdescr", form.ifdescr),
        ("status", form.status),
        ("if", form.iface),
        ("ipv", form.ipv),
    ]
    # A browser only submits the checkbox when it is ticked
    if relinquish_lease:
        data.append(("relinquish_lease", "yes"))
    data.append(("submit", DHCP_RELEASE))

    log.info("Releasing DHCP lease on %s (%s)", iface.name, interface_id)
    response = submit_form(manager, INTERFACES_PATH, data)
    return refreshed_snapshot(manager, response, INTERFACES_PATH, parse_interfaces, "DHCP release")


def renew_dhcp(manager: SessionManager, snapshot: InterfaceSet, interface_id: str) -> InterfaceSet:
    """Request a new DHCP lease on *interface_id* (lease must be down)."""
    iface = _dhcp_interface(snapshot, interface_id, DhcpLeaseState.DOWN)
    form = iface.dhcp_form
    data = [
        (CSRF_FIELD, form.csrf_token),
        ("ifdescr", form.ifdescr),
        ("status", form.status),
        ("submit", DHCP_RENEW),
    ]

    log.info("Renewing DHCP lease on %s (%s)", iface.name, interface_id)
    response = submit_form(manager, INTERFACES_PATH, data)
    return refreshed_snapshot(manager, response, INTERFACES_PATH, parse_interfaces, "DHCP renew")
