# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Port array encoding.

A port array is a list of 0/1 values giving the desired state of 4 or 8
GPIO lines. Element i of an 8-element array drives line i. A 4-element
array is interleaved with zeros first ([a, b, c, d] -> [0, a, 0, b, 0, c,
0, d]), so its element k drives line 2k + 1.
"""

from typing import Sequence

ALL_ON = 0xFF
ALL_OFF = 0x00

PORT_COUNTS = (4, 8)


class PortsError(ValueError):
    """Invalid port array."""
    pass


def validate_ports(ports: Sequence[int]) -> None:
    """
    Check a port array.

    Raises:
        PortsError: If ports is not a list/tuple of 4 or 8 items, each
                    exactly the integer 0 or 1
    """
    if not isinstance(ports, (list, tuple)):
        raise PortsError("Invalid ports input")
    if len(ports) not in PORT_COUNTS or any(
        isinstance(v, bool) or v not in (0, 1) for v in ports
    ):
        raise PortsError("Invalid ports input; must be 4/8 length and contain only 1/0 data")


def encode_ports(ports: Sequence[int]) -> int:
    """
    Encode a port array as the byte written to the device.

    Examples:
        encode_ports([1, 0, 0, 0, 0, 0, 0, 0]) == 0x01
        encode_ports([1, 0, 0, 0]) == 0x02
    """
    validate_ports(ports)
    bits = list(ports)
    if len(bits) == 4:
        bits = [b for x in bits for b in (0, x)]
    return int("".join(str(int(b)) for b in reversed(bits)), 2)


def decode_ports(value: int, width: int = 8) -> list[int]:
    """Port array whose element i is bit i of value."""
    if not 0 <= value <= 0xFF:
        raise PortsError(f"Port value out of range: {value}")
    return [(value >> i) & 1 for i in range(width)]


def single_port(line: int, width: int = 8) -> list[int]:
    """Port array with only one line on."""
    if width not in PORT_COUNTS:
        raise PortsError(f"Invalid port count: {width}")
    if not 0 <= line < width:
        raise PortsError(f"Port {line} out of range 0..{width - 1}")
    return [1 if i == line else 0 for i in range(width)]
