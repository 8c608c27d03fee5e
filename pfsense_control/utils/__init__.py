"""Value parsing helpers for appliance-formatted text."""

from pfsense_control.utils.units import (
    IEC_MULTIPLIERS,
    iec_to_bytes,
    parse_appliance_timestamp,
    parse_packet_counters,
    parse_sent_received,
)

__all__ = [
    "IEC_MULTIPLIERS",
    "iec_to_bytes",
    "parse_appliance_timestamp",
    "parse_packet_counters",
    "parse_sent_received",
]
