"""Resource document parsers: HTML page -> immutable snapshot."""

from pfsense_control.extraction.gateways import parse_gateways
from pfsense_control.extraction.html_parser import FieldRule, extract_fields, parse_document
from pfsense_control.extraction.interfaces import parse_interfaces
from pfsense_control.extraction.openvpn import parse_openvpn_status

__all__ = [
    "FieldRule",
    "extract_fields",
    "parse_document",
    "parse_gateways",
    "parse_interfaces",
    "parse_openvpn_status",
]
