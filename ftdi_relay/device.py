# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
FTDI device handle.

Wraps one device and reports its lifecycle through events:

    open   device opened
    data   bytes read from the device (pin snapshots in sync bit-bang)
    error  an exception from the driver; the device closes itself
    close  device closed; all listeners are removed afterwards
"""

import logging
import threading
from typing import Any, Iterable, Mapping, Optional, Union

from . import driver
from .config import OpenSettings
from .driver import DeviceError, DeviceInfo, DeviceStateError, LinkError
from .events import EventEmitter

log = logging.getLogger(__name__)

READER_JOIN_TIMEOUT = 1.0


class FtdiDevice(EventEmitter):
    """
    Handle for one FTDI device.

    Can be used as a context manager:
        with FtdiDevice(0) as dev:
            dev.write(b"\\xff")
    """

    def __init__(self, settings: Union[DeviceInfo, int, Mapping[str, Any]] = 0):
        """
        Args:
            settings: DeviceInfo from find_all(), an enumeration index, or a
                      selector mapping (serial, location_id, index,
                      description). The device is not touched until open().
        """
        super().__init__()
        if isinstance(settings, int) and not isinstance(settings, bool):
            settings = {"index": settings}
        self.device_settings = settings
        self.connection_settings: Optional[OpenSettings] = None
        self._info: Optional[DeviceInfo] = None
        self._link = None
        self._closing = False
        self._lock = threading.RLock()
        self._reader: Optional[threading.Thread] = None
        self._stop_reading = threading.Event()

    def __enter__(self):
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.is_open:
            self.close()
        return False

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<FtdiDevice {self._info or self.device_settings} {state}>"

    @property
    def is_open(self) -> bool:
        return self._link is not None

    @property
    def is_closing(self) -> bool:
        """True while a close() is in progress."""
        return self._closing

    @property
    def info(self) -> Optional[DeviceInfo]:
        """The device resolved by the last open()."""
        return self._info

    @staticmethod
    def _make_settings(settings, overrides) -> OpenSettings:
        if settings is None:
            settings = OpenSettings()
        elif isinstance(settings, Mapping):
            settings = OpenSettings.from_mapping(settings)
        elif not isinstance(settings, OpenSettings):
            raise TypeError(f"Unsupported settings: {settings!r}")
        if overrides:
            settings = settings.with_overrides(**overrides)
        return settings

    def open(self, settings: Union[OpenSettings, Mapping[str, Any], None] = None, **overrides):
        """
        Open the device.

        Args:
            settings: OpenSettings, or a mapping with the same keys
                      (baudrate, databits, stopbits, parity, bitmode,
                      bitmask, ...). Defaults to OpenSettings().
            **overrides: Individual fields replacing those in settings

        Raises:
            DeviceStateError: If the device is already open
            DeviceNotFoundError: If the device cannot be found
            LinkError: If the driver fails to open it
            ValueError: If the settings are invalid
        """
        if self.is_open:
            raise DeviceStateError("Device already open")

        settings = self._make_settings(settings, overrides)
        self.connection_settings = settings
        self._closing = False
        if self._close_on_error not in self.listeners("error"):
            self.on("error", self._close_on_error)

        try:
            info = driver.resolve(self.device_settings)
            link = driver.open_link(info, settings)
        except DeviceError as e:
            self.emit("error", e)
            raise

        with self._lock:
            self._info = info
            self._link = link
        if settings.read_data:
            self._start_reader()

        log.info("Opened %s", info)
        self.emit("open")

    def write(self, data: Union[bytes, bytearray, Iterable[int]]) -> int:
        """
        Write raw bytes to the device.

        Args:
            data: bytes, bytearray or an iterable of ints 0..255

        Returns:
            Number of bytes written

        Raises:
            DeviceStateError: If the device is not open
            LinkError: If the driver fails
        """
        if isinstance(data, int):
            raise TypeError("data must be bytes or an iterable of ints")
        if not isinstance(data, (bytes, bytearray)):
            data = bytes(data)

        with self._lock:
            link = self._link
            if link is None or self._closing:
                raise DeviceStateError("Device is not open")
            try:
                written = link.write(data)
            except LinkError as e:
                error = e
            else:
                error = None

        if error is not None:
            self.emit("error", error)
            raise error
        log.debug("Wrote %d byte(s): %s", written, data.hex())
        return written

    def read_pins(self) -> int:
        """
        Read the current GPIO levels (bit-bang modes only).

        Raises:
            DeviceStateError: If the device is not open or in UART mode
            LinkError: If the driver fails
        """
        with self._lock:
            if self._link is None:
                raise DeviceStateError("Device is not open")
            return self._link.read_pins()

    def close(self):
        """
        Close the device.

        A close() issued while another is in progress returns immediately.

        Raises:
            DeviceStateError: If the device is not open
            LinkError: If the driver fails to close it
        """
        with self._lock:
            if self._closing:
                return
            if not self.is_open:
                raise DeviceStateError("Device is not open")
            self._closing = True

        try:
            self._stop_reader()
            with self._lock:
                link = self._link
                self._link = None
            try:
                link.close()
            except LinkError as e:
                log.warning("Failed to close %s: %s", self._info, e)
                self.emit("error", e)
                raise
            log.info("Closed %s", self._info)
            self.emit("close")
        finally:
            self.remove_all_listeners()
            self._closing = False

    def _close_on_error(self, error: Exception):
        if not self.is_open or self._closing:
            return
        log.debug("Closing %s after error: %s", self._info, error)
        try:
            self.close()
        except DeviceError as e:
            log.warning("Close after error failed: %s", e)

    def _start_reader(self):
        self._stop_reading.clear()
        self._reader = threading.Thread(
            target=self._read_loop,
            name=f"ftdi-reader-{self._info.index}",
            daemon=True,
        )
        self._reader.start()

    def _stop_reader(self):
        self._stop_reading.set()
        reader = self._reader
        self._reader = None
        if reader is not None and reader is not threading.current_thread():
            reader.join(READER_JOIN_TIMEOUT)

    def _read_loop(self):
        settings = self.connection_settings
        while not self._stop_reading.is_set():
            error = None
            with self._lock:
                link = self._link
                if link is None:
                    break
                try:
                    data = link.read(settings.read_size)
                except LinkError as e:
                    error = e

            if error is not None:
                if not self._stop_reading.is_set():
                    self.emit("error", error)
                break
            if data:
                self.emit("data", data)
            else:
                self._stop_reading.wait(settings.poll_interval)
