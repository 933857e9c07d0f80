# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
FTDI bit mode names.

Maps the short names accepted by ``FtdiDevice.open`` onto pyftdi's
``Ftdi.BitMode`` values:

    reset  = 0x00  UART, no alternate mode
    async  = 0x01  Asynchronous bit-bang
    mpsse  = 0x02  MPSSE (FT2232, FT2232H, FT4232H and FT232H only)
    sync   = 0x04  Synchronous bit-bang (FT232R, FT245R, FT2232, FT2232H,
                   FT4232H and FT232H only)
    mcu    = 0x08  MCU host bus emulation
    fast   = 0x10  Fast opto-isolated serial
    cbus   = 0x20  CBUS bit-bang (FT232R and FT232H only)
    single = 0x40  Single channel synchronous 245 FIFO
"""

from typing import Union

from pyftdi.ftdi import Ftdi

BITMODES = {
    "reset": Ftdi.BitMode.RESET,
    "async": Ftdi.BitMode.BITBANG,
    "mpsse": Ftdi.BitMode.MPSSE,
    "sync": Ftdi.BitMode.SYNCBB,
    "mcu": Ftdi.BitMode.MCU,
    "fast": Ftdi.BitMode.OPTO,
    "cbus": Ftdi.BitMode.CBUS,
    "single": Ftdi.BitMode.SYNCFF,
}


def resolve_bitmode(value: Union[str, int, "Ftdi.BitMode"]) -> "Ftdi.BitMode":
    """
    Resolve a bit mode given by name or value.

    Args:
        value: Name from BITMODES (case-insensitive), integer or Ftdi.BitMode

    Returns:
        The matching Ftdi.BitMode

    Raises:
        ValueError: If the mode is unknown
    """
    if isinstance(value, Ftdi.BitMode):
        return value
    if isinstance(value, str):
        try:
            return BITMODES[value.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown bitmode: {value!r}") from None
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Ftdi.BitMode(value)
        except ValueError:
            raise ValueError(f"Unknown bitmode: 0x{value:02x}") from None
    raise ValueError(f"Unknown bitmode: {value!r}")


def bitmode_name(mode: "Ftdi.BitMode") -> str:
    """Return the short name of a bit mode."""
    for name, candidate in BITMODES.items():
        if candidate == mode:
            return name
    return mode.name.lower()


def is_uart(mode: "Ftdi.BitMode") -> bool:
    """True when the mode leaves the chip in plain UART operation."""
    return mode == Ftdi.BitMode.RESET
