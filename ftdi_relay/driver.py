# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Driver binding for FTDI devices.

Thin layer over pyftdi: enumerates devices and opens low-level links,
translating driver exceptions into LinkError.
"""

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional, Union

import serial
from pyftdi.ftdi import Ftdi, FtdiError
from pyftdi.serialext import serial_for_url
from pyftdi.usbtools import UsbTools, UsbToolsError
from usb.core import USBError

from .bitmode import bitmode_name, is_uart
from .config import OpenSettings

log = logging.getLogger(__name__)

SELECTOR_KEYS = ("serial", "location_id", "index", "description", "vid", "pid")
SELECTOR_ALIASES = {"locationId": "location_id", "serialNumber": "serial"}


class DeviceError(Exception):
    """Base exception for device errors."""
    pass


class DeviceNotFoundError(DeviceError):
    """No device matches the request."""
    pass


class LinkError(DeviceError):
    """The driver failed to open, configure, read, write or close a device."""
    pass


class DeviceStateError(DeviceError):
    """Operation not allowed in the current open/closed state."""
    pass


@contextmanager
def _driver_errors(action: str):
    try:
        yield
    except (FtdiError, USBError, UsbToolsError, serial.SerialException, ValueError) as e:
        raise LinkError(f"Failed to {action}: {e}") from e


@dataclass(frozen=True)
class DeviceInfo:
    """An enumerated FTDI device."""
    vid: int
    pid: int
    bus: Optional[int] = None
    address: Optional[int] = None
    serial: Optional[str] = None
    index: int = 0
    description: Optional[str] = None
    interfaces: int = 1

    @classmethod
    def from_descriptor(cls, desc, interfaces: int, index: int) -> "DeviceInfo":
        """Build from a pyftdi UsbDeviceDescriptor."""
        return cls(
            vid=desc.vid,
            pid=desc.pid,
            bus=desc.bus,
            address=desc.address,
            serial=desc.sn,
            index=index,
            description=desc.description,
            interfaces=interfaces,
        )

    @property
    def location_id(self) -> Optional[int]:
        """Bus and address packed as (bus << 8) | address."""
        if self.bus is None or self.address is None:
            return None
        return (self.bus << 8) | self.address

    def url_for(self, interface: int = 1) -> str:
        """pyftdi URL selecting this device and interface."""
        if self.bus is not None and self.address is not None:
            locator = f"{self.bus:x}:{self.address:x}"
        else:
            locator = self.serial or ""
        return f"ftdi://0x{self.vid:04x}:0x{self.pid:04x}:{locator}/{interface}"

    @property
    def url(self) -> str:
        return self.url_for(1)

    def matches(self, **criteria) -> bool:
        """True when every given criterion equals this device's value."""
        for key, expected in criteria.items():
            if expected is None:
                continue
            if getattr(self, key) != expected:
                return False
        return True

    def as_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["location_id"] = self.location_id
        result["url"] = self.url
        return result

    def __str__(self) -> str:
        name = self.description or "FTDI device"
        ident = self.serial or f"bus {self.bus} addr {self.address}"
        return f"{name} ({self.vid:04x}:{self.pid:04x}, {ident})"


def _vendor_products(vid: Optional[int], pid: Optional[int]) -> list[tuple[int, int]]:
    if vid is None:
        vid = Ftdi.DEFAULT_VENDOR
    if pid is not None:
        return [(vid, pid)]
    products = Ftdi.PRODUCT_IDS.get(vid, {})
    return [(vid, p) for p in sorted(set(products.values()))]


def find_all(vid: Optional[int] = None, pid: Optional[int] = None) -> list[DeviceInfo]:
    """
    Enumerate connected FTDI devices.

    Args:
        vid: Restrict to this USB vendor id (default: any known FTDI vendor,
             or 0x0403 when only pid is given)
        pid: Restrict to this USB product id (default: any known product)

    Returns:
        List of DeviceInfo, numbered by enumeration order

    Raises:
        LinkError: If USB enumeration fails
    """
    with _driver_errors("enumerate devices"):
        if vid is None and pid is None:
            found = Ftdi.list_devices()
        else:
            vps = _vendor_products(vid, pid)
            found = UsbTools.find_all(vps, nocache=True) if vps else []

    devices = [
        DeviceInfo.from_descriptor(desc, interfaces, index)
        for index, (desc, interfaces) in enumerate(found)
    ]
    log.debug("Found %d FTDI device(s)", len(devices))
    return devices


def _normalize_selector(selector: Mapping[str, Any]) -> dict[str, Any]:
    criteria = {}
    for key, value in selector.items():
        key = SELECTOR_ALIASES.get(key, key)
        if key not in SELECTOR_KEYS:
            raise ValueError(f"Unknown device selector key: {key!r}")
        criteria[key] = value
    return criteria


def resolve(selector: Union[DeviceInfo, int, Mapping[str, Any]]) -> DeviceInfo:
    """
    Resolve a device selector to an enumerated device.

    Args:
        selector: DeviceInfo (returned as is), enumeration index, or a
                  mapping of serial/location_id/index/description/vid/pid

    Raises:
        DeviceNotFoundError: If nothing matches
        TypeError: If the selector has an unsupported type
    """
    if isinstance(selector, DeviceInfo):
        return selector
    if isinstance(selector, int) and not isinstance(selector, bool):
        selector = {"index": selector}
    if not isinstance(selector, Mapping):
        raise TypeError(f"Unsupported device selector: {selector!r}")

    criteria = _normalize_selector(selector)
    vid = criteria.pop("vid", None)
    pid = criteria.pop("pid", None)
    for info in find_all(vid, pid):
        if info.matches(**criteria):
            return info
    raise DeviceNotFoundError(f"No FTDI device matches {dict(selector)}")


class BitbangLink:
    """Link over a pyftdi Ftdi instance in an alternate bit mode."""

    def __init__(self, ftdi: Ftdi):
        self._ftdi = ftdi

    def write(self, data: bytes) -> int:
        with _driver_errors("write"):
            return self._ftdi.write_data(data)

    def read(self, size: int) -> bytes:
        with _driver_errors("read"):
            return bytes(self._ftdi.read_data(size))

    def read_pins(self) -> int:
        with _driver_errors("read pins"):
            return self._ftdi.read_pins()

    def close(self):
        with _driver_errors("close"):
            self._ftdi.close()


class SerialLink:
    """Link over a pyserial port (UART mode)."""

    def __init__(self, port):
        self._port = port

    def write(self, data: bytes) -> int:
        with _driver_errors("write"):
            written = self._port.write(data)
            self._port.flush()
        return len(data) if written is None else written

    def read(self, size: int) -> bytes:
        with _driver_errors("read"):
            return bytes(self._port.read(size))

    def read_pins(self) -> int:
        raise DeviceStateError("Pin state is only available in bit-bang modes")

    def close(self):
        with _driver_errors("close"):
            if self._port.is_open:
                self._port.close()


def _configure(ftdi: Ftdi, settings: OpenSettings):
    ftdi.set_latency_timer(settings.latency)
    ftdi.set_baudrate(settings.baudrate)
    ftdi.set_line_property(settings.databits, settings.stopbits, settings.parity_char)
    ftdi.set_bitmode(settings.bitmask, settings.mode)
    ftdi.purge_buffers()


def open_link(info: DeviceInfo, settings: OpenSettings):
    """
    Open and configure a device.

    UART mode ("reset") opens a pyserial port through pyftdi's URL
    handler; every other mode opens the chip directly and switches it to
    the requested bit mode with settings.bitmask as output lines.

    Returns:
        SerialLink or BitbangLink

    Raises:
        LinkError: If the driver fails
    """
    mode = settings.mode
    log.debug("Opening %s in %s mode (%d baud, mask 0x%02x)",
              info, bitmode_name(mode), settings.baudrate, settings.bitmask)

    if is_uart(mode):
        url = info.url_for(settings.interface)
        with _driver_errors(f"open {url}"):
            port = serial_for_url(
                url,
                baudrate=settings.baudrate,
                bytesize=settings.databits,
                parity=settings.parity_char,
                stopbits=settings.stopbits,
                timeout=settings.read_timeout,
            )
        return SerialLink(port)

    ftdi = Ftdi()
    with _driver_errors(f"open {info}"):
        ftdi.open(
            info.vid,
            info.pid,
            bus=info.bus,
            address=info.address,
            serial=info.serial,
            interface=settings.interface,
        )
        try:
            _configure(ftdi, settings)
        except Exception:
            ftdi.close()
            raise
    return BitbangLink(ftdi)
