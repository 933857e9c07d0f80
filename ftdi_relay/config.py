# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Connection settings for FTDI devices.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Union

import serial

from .bitmode import resolve_bitmode

PARITIES = {
    "none": serial.PARITY_NONE,
    "odd": serial.PARITY_ODD,
    "even": serial.PARITY_EVEN,
    "mark": serial.PARITY_MARK,
    "space": serial.PARITY_SPACE,
}

DATABITS = (serial.SEVENBITS, serial.EIGHTBITS)
STOPBITS = (serial.STOPBITS_ONE, serial.STOPBITS_ONE_POINT_FIVE, serial.STOPBITS_TWO)


@dataclass(frozen=True)
class OpenSettings:
    """Settings used to open a device."""
    baudrate: int = 9600
    databits: int = 8
    stopbits: Union[int, float] = 1
    parity: str = "none"
    bitmode: Union[str, int] = "sync"
    bitmask: int = 0xFF  # 1 = output line
    latency: int = 16  # ms
    interface: int = 1
    read_size: int = 64
    read_timeout: float = 0.1
    poll_interval: float = 0.01
    read_data: bool = True

    def __post_init__(self):
        if self.baudrate <= 0:
            raise ValueError(f"Invalid baudrate: {self.baudrate}")
        if self.databits not in DATABITS:
            raise ValueError(f"Invalid databits: {self.databits}")
        if self.stopbits not in STOPBITS:
            raise ValueError(f"Invalid stopbits: {self.stopbits}")
        if not isinstance(self.parity, str) or self.parity.lower() not in PARITIES:
            raise ValueError(f"Invalid parity: {self.parity!r}")
        if not 0 <= self.bitmask <= 0xFF:
            raise ValueError(f"Invalid bitmask: {self.bitmask}")
        # fail early on unknown modes
        resolve_bitmode(self.bitmode)

    @property
    def mode(self):
        """The resolved Ftdi.BitMode."""
        return resolve_bitmode(self.bitmode)

    @property
    def parity_char(self) -> str:
        """Parity as a pyserial PARITY_* constant."""
        return PARITIES[self.parity.lower()]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "OpenSettings":
        """
        Build settings from a plain mapping.

        Unknown keys are rejected so that typos do not silently fall back
        to defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**dict(mapping))

    def with_overrides(self, **overrides) -> "OpenSettings":
        """Return a copy with some fields replaced."""
        return replace(self, **overrides)


# Synchronous bit-bang with all eight lines as outputs, as used to drive
# relay boards.
RELAY_SETTINGS = OpenSettings(
    baudrate=9600,
    databits=8,
    stopbits=1,
    parity="none",
    bitmode="sync",
    bitmask=0xFF,
)
