"""OpenVPN client service restart."""

from ..auth.session import SessionManager
from ..config import CSRF_FIELD, OPENVPN_PATH, SERVICES_PATH
from ..exceptions import StructureNotFound, ValidationError
from ..extraction.openvpn import RESOURCE, parse_openvpn_status
from ..logging_setup import log
from ..models import VpnStatusSet
from .base import submit_form


def fetch_openvpn_status(manager: SessionManager) -> VpnStatusSet:
    return parse_openvpn_status(manager.get_page(OPENVPN_PATH))


def restart_vpn_client_service(manager: SessionManager, snapshot: VpnStatusSet, instance_id: str) -> VpnStatusSet:
    """
    Restart the OpenVPN client service *instance_id* through the services
    AJAX endpoint, then return the refreshed OpenVPN status.
    """
    instance = snapshot.get(instance_id) if instance_id else None
    if instance is None:
        known = ", ".join(i.instance_id for i in snapshot.instances if i.instance_id)
        raise ValidationError(f"Unknown OpenVPN client instance {instance_id!r} (known: {known})")
    if snapshot.csrf_token is None:
        raise StructureNotFound(RESOURCE, "csrfMagicToken script variable")

    data = [
        (CSRF_FIELD, snapshot.csrf_token),
        ("ajax", "ajax"),
        ("mode", "restartservice"),
        ("service", "openvpn"),
        ("vpnmode", "client"),
        ("zone", "client"),
        ("id", instance_id),
    ]
    log.info("Restarting OpenVPN client %r (id %s)", instance.name, instance_id)
    # The endpoint answers 200 with an empty body; anything else is an error
    manager.send(manager.create_request("POST", SERVICES_PATH, data=data))
    return fetch_openvpn_status(manager)
