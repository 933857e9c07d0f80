# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
ftdi-relay - FTDI device handle and GPIO port switching.

This package wraps pyftdi with a small event-driven device handle and
helpers for relay boards driven in synchronous bit-bang mode.

Example usage:
    from ftdi_relay import FtdiDevice, find_first, open_device, switch_ports

    device = find_first()
    device.on("error", lambda err: print(f"Error: {err}"))
    open_device(device)

    # Lines 0 and 2 on
    switch_ports(device, [1, 0, 1, 0, 0, 0, 0, 0])

    device.close()
"""

from .bitmode import BITMODES, resolve_bitmode
from .config import OpenSettings, RELAY_SETTINGS
from .device import FtdiDevice
from .driver import (
    DeviceInfo,
    DeviceError,
    DeviceNotFoundError,
    DeviceStateError,
    LinkError,
    find_all,
)
from .events import EventEmitter
from .ports import (
    ALL_OFF,
    ALL_ON,
    PortsError,
    decode_ports,
    encode_ports,
    single_port,
    validate_ports,
)
from .relay import (
    close_device,
    find,
    find_first,
    open_device,
    switch_all_ports,
    switch_ports,
)

__version__ = "0.1.0"

__all__ = [
    # Device
    "FtdiDevice",
    "DeviceInfo",
    "EventEmitter",
    "find_all",
    # Settings
    "OpenSettings",
    "RELAY_SETTINGS",
    "BITMODES",
    "resolve_bitmode",
    # Errors
    "DeviceError",
    "DeviceNotFoundError",
    "DeviceStateError",
    "LinkError",
    "PortsError",
    # Ports
    "ALL_ON",
    "ALL_OFF",
    "encode_ports",
    "decode_ports",
    "single_port",
    "validate_ports",
    # Relay helpers
    "find",
    "find_first",
    "open_device",
    "close_device",
    "switch_ports",
    "switch_all_ports",
]
