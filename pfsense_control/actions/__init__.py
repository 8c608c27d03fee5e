"""Mutation coordinator – fetch a snapshot, replay the appliance's form, refresh."""

from pfsense_control.actions.gateways import (
    apply_gateway_changes,
    fetch_gateways,
    save_default_gateways,
    select_default_gateway,
)
from pfsense_control.actions.interfaces import fetch_interfaces, release_dhcp, renew_dhcp
from pfsense_control.actions.openvpn import fetch_openvpn_status, restart_vpn_client_service

__all__ = [
    "apply_gateway_changes",
    "fetch_gateways",
    "fetch_interfaces",
    "fetch_openvpn_status",
    "release_dhcp",
    "renew_dhcp",
    "restart_vpn_client_service",
    "save_default_gateways",
    "select_default_gateway",
]
