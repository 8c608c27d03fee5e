"""
pfsense_control.client
======================
``PfSenseClient`` – one object bundling the session manager with the
fetch and mutation operations.

    with PfSenseClient("https://192.168.1.1/", "admin", "pfsense") as fw:
        fw.login()
        gateways = fw.fetch_gateways()
        gateways = fw.select_default_gateway(gateways, 4, "WAN2_DHCP")
        fw.save_default_gateways(gateways, apply_immediately=True)
"""

from .actions import gateways as _gateways
from .actions import interfaces as _interfaces
from .actions import openvpn as _openvpn
from .auth.session import SessionManager
from .config import REQUEST_TIMEOUT
from .models import GatewaySet, InterfaceSet, IpVersion, VpnStatusSet
from .network.client import CertificateCheck


class PfSenseClient:
    """Facade over SessionManager and the actions modules."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        verify_ssl: bool = True,
        certificate_check: CertificateCheck | None = None,
        session: SessionManager | None = None,
    ) -> None:
        self.session = session or SessionManager(
            base_url, username, password,
            timeout=timeout, verify_ssl=verify_ssl, certificate_check=certificate_check,
        )

    def login(self) -> None:
        self.session.login()

    # Gateways

    def fetch_gateways(self) -> GatewaySet:
        return _gateways.fetch_gateways(self.session)

    @staticmethod
    def select_default_gateway(snapshot: GatewaySet, ip_version: IpVersion | int, option_id: str) -> GatewaySet:
        return _gateways.select_default_gateway(snapshot, ip_version, option_id)

    def save_default_gateways(self, snapshot: GatewaySet, apply_immediately: bool = False) -> GatewaySet:
        return _gateways.save_default_gateways(self.session, snapshot, apply_immediately)

    def apply_gateway_changes(self, snapshot: GatewaySet) -> GatewaySet:
        return _gateways.apply_gateway_changes(self.session, snapshot)

    # Interfaces

    def fetch_interfaces(self) -> InterfaceSet:
        return _interfaces.fetch_interfaces(self.session)

    def release_dhcp(self, snapshot: InterfaceSet, interface_id: str, relinquish_lease: bool = False) -> InterfaceSet:
        return _interfaces.release_dhcp(self.session, snapshot, interface_id, relinquish_lease)

    def renew_dhcp(self, snapshot: InterfaceSet, interface_id: str) -> InterfaceSet:
        return _interfaces.renew_dhcp(self.session, snapshot, interface_id)

    # OpenVPN

    def fetch_openvpn_status(self) -> VpnStatusSet:
        return _openvpn.fetch_openvpn_status(self.session)

    def restart_vpn_client_service(self, snapshot: VpnStatusSet, instance_id: str) -> VpnStatusSet:
        return _openvpn.restart_vpn_client_service(self.session, snapshot, instance_id)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "PfSenseClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PfSenseClient({self.session!r})"
