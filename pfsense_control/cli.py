"""
Command-line interface for the pfSense control client.

Provides argument parsing, one sub-command per operation and the main
execution flow.
"""

import argparse
import getpass
import logging
import sys

from pfsense_control.client import PfSenseClient
from pfsense_control.config import DEFAULT_PASSWORD, DEFAULT_URL, DEFAULT_USER
from pfsense_control.exceptions import PfSenseError
from pfsense_control.logging_setup import log, setup_logging
from pfsense_control.models import GatewaySet, InterfaceSet, VpnStatusSet


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _show_gateways(snapshot: GatewaySet) -> None:
    print(f"{'Name':<20} {'Interface':<12} {'Gateway':<28} {'Monitor':<28} Description")
    for entry in snapshot.entries:
        print(f"{entry.name:<20} {entry.interface:<12} {entry.gateway:<28} {entry.monitor:<28} {entry.description}")
    for label, selection in (("IPv4", snapshot.ipv4), ("IPv6", snapshot.ipv6)):
        current = selection.selected
        shown = f"{current.label} ({current.option_id!r})" if current else "-"
        print(f"Default {label} gateway: {shown}")
        print("  options: " + ", ".join(repr(o.option_id) for o in selection.options))
    if snapshot.has_pending_changes:
        print("Pending changes – run 'apply-gateways' to apply them")


def _show_interfaces(snapshot: InterfaceSet) -> None:
    for iface in snapshot.interfaces:
        state = "up" if iface.is_up else "down"
        print(f"{iface.name} ({iface.internal_name}, {iface.nic_name}): {state}")
        for label, value in (
            ("MAC", iface.mac_address),
            ("IPv4", iface.ipv4_address and f"{iface.ipv4_address}/{iface.ipv4_subnet_mask}"),
            ("IPv4 gateway", iface.ipv4_gateway),
            ("IPv6", iface.ipv6_address and f"{iface.ipv6_address}/{iface.ipv6_subnet_mask}"),
            ("IPv6 gateway", iface.ipv6_gateway),
            ("MTU", iface.mtu),
            ("Media", iface.media),
        ):
            if value is not None:
                print(f"  {label:<13} {value}")
        print(f"  {'DHCP':<13} {iface.dhcp_state.value}")
        if iface.dns_servers:
            print(f"  {'DNS':<13} {', '.join(iface.dns_servers)}")
        if iface.packets:
            p = iface.packets
            print(f"  {'Packets':<13} in {p.in_packets} ({p.in_bytes} B) / out {p.out_packets} ({p.out_bytes} B)")


def _show_openvpn(snapshot: VpnStatusSet) -> None:
    for inst in snapshot.instances:
        since = inst.connected_since.isoformat(sep=" ") if inst.connected_since else "-"
        print(
            f"[{inst.instance_id or '?'}] {inst.name}: tunnel {inst.tunnel_state.value}, "
            f"service {inst.service_state.value}, since {since}"
        )
        print(f"    local {inst.local_address or '-'}  virtual {inst.virtual_address or '-'}  "
              f"remote {inst.remote_host or '-'}")
        print(f"    sent {inst.bytes_sent} B  received {inst.bytes_received} B")
    for conn in snapshot.connections:
        print(f"{conn.server} {conn.endpoint}: {conn.common_name} from {conn.real_address or '-'} "
              f"(sent {conn.bytes_sent} B, received {conn.bytes_received} B)")


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------

def _cmd_gateways(client: PfSenseClient, args: argparse.Namespace) -> None:
    _show_gateways(client.fetch_gateways())


def _cmd_set_default_gateway(client: PfSenseClient, args: argparse.Namespace) -> None:
    snapshot = client.fetch_gateways()
    snapshot = client.select_default_gateway(snapshot, args.ip_version, args.option)
    _show_gateways(client.save_default_gateways(snapshot, apply_immediately=args.apply))


def _cmd_apply_gateways(client: PfSenseClient, args: argparse.Namespace) -> None:
    _show_gateways(client.apply_gateway_changes(client.fetch_gateways()))


def _cmd_interfaces(client: PfSenseClient, args: argparse.Namespace) -> None:
    _show_interfaces(client.fetch_interfaces())


def _cmd_dhcp_release(client: PfSenseClient, args: argparse.Namespace) -> None:
    snapshot = client.fetch_interfaces()
    _show_interfaces(client.release_dhcp(snapshot, args.interface, relinquish_lease=args.relinquish))


def _cmd_dhcp_renew(client: PfSenseClient, args: argparse.Namespace) -> None:
    _show_interfaces(client.renew_dhcp(client.fetch_interfaces(), args.interface))


def _cmd_openvpn(client: PfSenseClient, args: argparse.Namespace) -> None:
    _show_openvpn(client.fetch_openvpn_status())


def _cmd_restart_vpn_client(client: PfSenseClient, args: argparse.Namespace) -> None:
    _show_openvpn(client.restart_vpn_client_service(client.fetch_openvpn_status(), args.instance_id))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="pfsense-control",
        description="Inspect and control a pfSense appliance through its web UI.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "URL, user and password can also be provided via the PFSENSE_URL,\n"
            "PFSENSE_USER and PFSENSE_PASSWORD env vars. If the password is not\n"
            "supplied and not in the environment, you will be prompted for it."
        ),
    )
    parser.add_argument(
        "--url", default=DEFAULT_URL,
        help=f"Web UI base URL (default: {DEFAULT_URL})",
    )
    parser.add_argument(
        "--user", default=DEFAULT_USER,
        help=f"Admin username (default: {DEFAULT_USER})",
    )
    parser.add_argument(
        "--password", default=DEFAULT_PASSWORD,
        help="Admin password (overrides PFSENSE_PASSWORD env var)",
    )
    parser.add_argument(
        "--no-verify-ssl", dest="verify_ssl", action="store_false", default=True,
        help="Disable TLS certificate verification (use for self-signed certs)",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--log-file", default=None,
        help="Also write log messages to this file",
    )

    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    p = sub.add_parser("gateways", help="Show gateways and default gateway selection")
    p.set_defaults(func=_cmd_gateways)

    p = sub.add_parser("set-default-gateway", help="Select and save the default gateway")
    p.add_argument("ip_version", type=int, choices=(4, 6), help="IP version of the selector")
    p.add_argument("option", help="Gateway option id ('' = automatic, '-' = none)")
    p.add_argument("--apply", action="store_true", help="Apply the change immediately")
    p.set_defaults(func=_cmd_set_default_gateway)

    p = sub.add_parser("apply-gateways", help="Apply pending gateway changes")
    p.set_defaults(func=_cmd_apply_gateways)

    p = sub.add_parser("interfaces", help="Show interface status")
    p.set_defaults(func=_cmd_interfaces)

    p = sub.add_parser("dhcp-release", help="Release the DHCP lease of an interface")
    p.add_argument("interface", help="Internal interface name, e.g. wan")
    p.add_argument("--relinquish", action="store_true",
                   help="Also send a DHCPRELEASE to the DHCP server")
    p.set_defaults(func=_cmd_dhcp_release)

    p = sub.add_parser("dhcp-renew", help="Renew the DHCP lease of an interface")
    p.add_argument("interface", help="Internal interface name, e.g. wan")
    p.set_defaults(func=_cmd_dhcp_renew)

    p = sub.add_parser("openvpn", help="Show OpenVPN client status")
    p.set_defaults(func=_cmd_openvpn)

    p = sub.add_parser("restart-vpn-client", help="Restart an OpenVPN client service")
    p.add_argument("instance_id", help="OpenVPN client id (vpnid)")
    p.set_defaults(func=_cmd_restart_vpn_client)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI.
    """
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file)

    if args.debug:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)

    if not args.verify_ssl:
        log.warning("TLS certificate verification is DISABLED (--no-verify-ssl)")

    if not args.password:
        args.password = getpass.getpass("pfSense password: ")

    try:
        with PfSenseClient(args.url, args.user, args.password, verify_ssl=args.verify_ssl) as client:
            client.login()
            args.func(client, args)
    except PfSenseError as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
