"""
IEC byte-quantity and timestamp parsing for appliance-formatted text.

pfSense prints traffic counters with binary units (``format_bytes()``)
and connection times in ``ctime`` style, e.g.::

    2.98 GiB / 20.27 GiB
    Mon Jan 2 03:04:05 2006
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from ..exceptions import ValueFormatError

IEC_MULTIPLIERS = {
    "B":   1,
    "KiB": 1024,
    "MiB": 1024 ** 2,
    "GiB": 1024 ** 3,
    "TiB": 1024 ** 4,
}

_QTY = r"(\d+(?:\.\d+)?)\s+([A-Za-z]+)"
_SENT_RECEIVED_RE = re.compile(rf"{_QTY}\s*/\s*{_QTY}")
_PACKETS_RE = re.compile(rf"(\d+)\s*/\s*(\d+)\s*\(\s*{_QTY}\s*/\s*{_QTY}\s*\)")

TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"


def iec_to_bytes(magnitude, unit: str) -> int:
    """
    Convert *magnitude* expressed in *unit* (B, KiB, MiB, GiB, TiB) to bytes,
    rounded to the nearest integer.

    Raises ValueFormatError for unknown units or non-numeric magnitudes;
    a unit the table does not know means the appliance changed its unit
    system and must not be guessed at.
    """
    multiplier = IEC_MULTIPLIERS.get(unit)
    if multiplier is None:
        raise ValueFormatError(f"Unsupported IEC unit {unit!r}", raw_value=unit)
    try:
        value = Decimal(str(magnitude).strip())
    except InvalidOperation:
        raise ValueFormatError("Invalid byte quantity", raw_value=str(magnitude)) from None
    if not value.is_finite() or value < 0:
        raise ValueFormatError("Invalid byte quantity", raw_value=str(magnitude))
    return int((value * multiplier).to_integral_value(rounding=ROUND_HALF_EVEN))


def parse_sent_received(text: str) -> tuple[int, int]:
    """
    Parse ``"<qty> <unit> / <qty> <unit>"`` into ``(sent, received)`` bytes.

    Both halves must convert; a partial result is never returned.
    """
    m = _SENT_RECEIVED_RE.fullmatch(text.strip())
    if not m:
        raise ValueFormatError("Malformed sent/received counters", raw_value=text)
    sent = iec_to_bytes(m.group(1), m.group(2))
    received = iec_to_bytes(m.group(3), m.group(4))
    return sent, received


def parse_packet_counters(text: str) -> tuple[int, int, int, int]:
    """
    Parse the interface ``In/out packets`` value, e.g.
    ``"1234/5678 (1.20 MiB/340 KiB)"``, into
    ``(in_packets, out_packets, in_bytes, out_bytes)``.
    """
    m = _PACKETS_RE.fullmatch(text.strip())
    if not m:
        raise ValueFormatError("Malformed packet counters", raw_value=text)
    return (
        int(m.group(1)),
        int(m.group(2)),
        iec_to_bytes(m.group(3), m.group(4)),
        iec_to_bytes(m.group(5), m.group(6)),
    )


def parse_appliance_timestamp(text: str | None) -> datetime | None:
    """
    Parse ``"Mon Jan 2 03:04:05 2006"`` as a naive local datetime.

    Empty or unparseable input yields None; a disconnected client simply
    has no timestamp.
    """
    if not text:
        return None
    normalised = " ".join(text.split())
    try:
        return datetime.strptime(normalised, TIMESTAMP_FORMAT)
    except ValueError:
        return None
