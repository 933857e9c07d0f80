# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Relay board helpers.

Convenience functions for boards whose relays hang off the eight data
lines of an FTDI chip in synchronous bit-bang mode (FT245R/FT232R based
USB relay modules).

Example usage:
    from ftdi_relay import relay

    device = relay.find_first()
    relay.open_device(device)
    relay.switch_ports(device, [1, 0, 1, 0])
    relay.switch_all_ports(device, False)
    relay.close_device(device)
"""

import logging
from typing import Optional, Sequence

from . import driver
from .config import RELAY_SETTINGS
from .device import FtdiDevice
from .driver import DeviceError, DeviceInfo, DeviceNotFoundError, LinkError
from .ports import ALL_OFF, ALL_ON, encode_ports

log = logging.getLogger(__name__)


def find(vid: Optional[int] = None, pid: Optional[int] = None) -> list[DeviceInfo]:
    """List connected FTDI devices, optionally filtered by vendor/product id."""
    return driver.find_all(vid, pid)


def find_first(vid: Optional[int] = None, pid: Optional[int] = None) -> FtdiDevice:
    """
    Return a handle for the first FTDI device found.

    Raises:
        DeviceNotFoundError: If there is no device or enumeration failed
    """
    try:
        devices = find(vid, pid)
    except LinkError as e:
        raise DeviceNotFoundError(f"No FTDI device found. Error: {e}") from e
    if not devices:
        raise DeviceNotFoundError("No FTDI device found.")
    return FtdiDevice(devices[0])


def open_device(device: FtdiDevice) -> None:
    """Open a device in synchronous bit-bang mode with all lines as outputs."""
    device.open(RELAY_SETTINGS)


def close_device(device: FtdiDevice) -> None:
    device.close()


def _check_device(device: FtdiDevice):
    if device is None:
        raise DeviceError("Invalid device")


def switch_ports(device: FtdiDevice, ports: Sequence[int]) -> None:
    """
    Set every line from a port array.

    Args:
        device: An open device
        ports: 4 or 8 values, each 0 or 1

    Raises:
        DeviceError: If device is missing, not open or the write fails
        PortsError: If ports is invalid
    """
    _check_device(device)
    value = encode_ports(ports)
    log.debug("Switching ports %s -> 0x%02x", list(ports), value)
    device.write([value])


def switch_all_ports(device: FtdiDevice, is_on: bool) -> None:
    """Turn every line on or off."""
    _check_device(device)
    device.write([ALL_ON if is_on else ALL_OFF])
