# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for the pyftdi driver binding."""

from collections import OrderedDict
from unittest.mock import Mock, patch

import pytest
import serial
from pyftdi.ftdi import Ftdi, FtdiError
from pyftdi.usbtools import UsbDeviceDescriptor, UsbToolsError

from ftdi_relay.config import OpenSettings
from ftdi_relay.driver import (
    BitbangLink,
    DeviceInfo,
    DeviceNotFoundError,
    DeviceStateError,
    LinkError,
    SerialLink,
    find_all,
    open_link,
    resolve,
)


def make_descriptor(sn="A50285BI", bus=1, address=4, pid=0x6001, description="FT245R USB FIFO"):
    return UsbDeviceDescriptor(0x0403, pid, bus, address, sn, None, description)


@pytest.fixture
def mock_ftdi_class():
    """Patch the Ftdi class used by the driver, keeping its id tables."""
    with patch("ftdi_relay.driver.Ftdi") as cls:
        cls.DEFAULT_VENDOR = 0x0403
        cls.PRODUCT_IDS = {
            0x0403: OrderedDict([("232", 0x6001), ("ft232r", 0x6001), ("2232", 0x6010)]),
        }
        yield cls


class TestDeviceInfo:
    """Tests for DeviceInfo."""

    def test_from_descriptor(self):
        info = DeviceInfo.from_descriptor(make_descriptor(), 1, 3)
        assert info.vid == 0x0403
        assert info.pid == 0x6001
        assert info.serial == "A50285BI"
        assert info.index == 3
        assert info.description == "FT245R USB FIFO"

    def test_location_id(self):
        assert DeviceInfo(0x0403, 0x6001, bus=2, address=0x11).location_id == 0x0211

    def test_location_id_unknown(self):
        assert DeviceInfo(0x0403, 0x6001).location_id is None

    def test_url_by_bus_address(self):
        info = DeviceInfo(0x0403, 0x6001, bus=1, address=0x1c, serial="X")
        assert info.url_for(2) == "ftdi://0x0403:0x6001:1:1c/2"

    def test_url_by_serial(self):
        info = DeviceInfo(0x0403, 0x6001, serial="A50285BI")
        assert info.url == "ftdi://0x0403:0x6001:A50285BI/1"

    def test_matches(self):
        info = DeviceInfo(0x0403, 0x6001, bus=1, address=4, serial="S1", index=2)
        assert info.matches(serial="S1")
        assert info.matches(serial="S1", index=2)
        assert info.matches(location_id=0x0104)
        assert info.matches(description=None)
        assert not info.matches(serial="S2")

    def test_as_dict(self):
        data = DeviceInfo(0x0403, 0x6001, bus=1, address=4).as_dict()
        assert data["location_id"] == 0x0104
        assert data["url"].startswith("ftdi://")


class TestFindAll:
    """Tests for find_all function."""

    def test_lists_all(self, mock_ftdi_class):
        mock_ftdi_class.list_devices.return_value = [
            (make_descriptor("S1"), 1),
            (make_descriptor("S2", address=5), 1),
        ]

        devices = find_all()

        assert [d.serial for d in devices] == ["S1", "S2"]
        assert [d.index for d in devices] == [0, 1]

    @patch("ftdi_relay.driver.UsbTools")
    def test_filter_vid_pid(self, mock_usbtools, mock_ftdi_class):
        mock_usbtools.find_all.return_value = [(make_descriptor(), 1)]

        devices = find_all(0x0403, 0x6001)

        mock_usbtools.find_all.assert_called_once_with([(0x0403, 0x6001)], nocache=True)
        assert len(devices) == 1
        mock_ftdi_class.list_devices.assert_not_called()

    @patch("ftdi_relay.driver.UsbTools")
    def test_filter_vid_only_expands_products(self, mock_usbtools, mock_ftdi_class):
        mock_usbtools.find_all.return_value = []

        find_all(0x0403)

        mock_usbtools.find_all.assert_called_once_with(
            [(0x0403, 0x6001), (0x0403, 0x6010)], nocache=True
        )

    @patch("ftdi_relay.driver.UsbTools")
    def test_filter_pid_only_uses_default_vendor(self, mock_usbtools, mock_ftdi_class):
        mock_usbtools.find_all.return_value = []

        find_all(pid=0x6014)

        mock_usbtools.find_all.assert_called_once_with([(0x0403, 0x6014)], nocache=True)

    @patch("ftdi_relay.driver.UsbTools")
    def test_unknown_vendor_without_pid(self, mock_usbtools, mock_ftdi_class):
        assert find_all(0x1234) == []
        mock_usbtools.find_all.assert_not_called()

    def test_enumeration_error(self, mock_ftdi_class):
        mock_ftdi_class.list_devices.side_effect = UsbToolsError("no backend")

        with pytest.raises(LinkError, match="no backend"):
            find_all()


class TestResolve:
    """Tests for resolve function."""

    DEVICES = [
        DeviceInfo(0x0403, 0x6001, bus=1, address=4, serial="S1", index=0, description="A"),
        DeviceInfo(0x0403, 0x6001, bus=1, address=5, serial="S2", index=1, description="B"),
    ]

    def test_device_info_passthrough(self):
        info = self.DEVICES[0]
        with patch("ftdi_relay.driver.find_all") as mock_find:
            assert resolve(info) is info
            mock_find.assert_not_called()

    @patch("ftdi_relay.driver.find_all")
    def test_index(self, mock_find):
        mock_find.return_value = self.DEVICES
        assert resolve(1).serial == "S2"
        mock_find.assert_called_once_with(None, None)

    @patch("ftdi_relay.driver.find_all")
    def test_serial(self, mock_find):
        mock_find.return_value = self.DEVICES
        assert resolve({"serial": "S2"}).index == 1

    @patch("ftdi_relay.driver.find_all")
    def test_aliases(self, mock_find):
        mock_find.return_value = self.DEVICES
        assert resolve({"locationId": 0x0105}).serial == "S2"
        assert resolve({"serialNumber": "S1"}).serial == "S1"

    @patch("ftdi_relay.driver.find_all")
    def test_vid_pid_forwarded(self, mock_find):
        mock_find.return_value = self.DEVICES
        resolve({"vid": 0x0403, "pid": 0x6001, "description": "B"})
        mock_find.assert_called_once_with(0x0403, 0x6001)

    @patch("ftdi_relay.driver.find_all")
    def test_not_found(self, mock_find):
        mock_find.return_value = self.DEVICES
        with pytest.raises(DeviceNotFoundError):
            resolve({"serial": "S9"})

    @patch("ftdi_relay.driver.find_all")
    def test_index_out_of_range(self, mock_find):
        mock_find.return_value = []
        with pytest.raises(DeviceNotFoundError):
            resolve(0)

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="colour"):
            resolve({"colour": "blue"})

    def test_bad_type(self):
        with pytest.raises(TypeError):
            resolve("S1")


class TestOpenLink:
    """Tests for open_link function."""

    INFO = DeviceInfo(0x0403, 0x6001, bus=1, address=4, serial="S1")

    def test_bitbang(self, mock_ftdi_class):
        ftdi = mock_ftdi_class.return_value

        link = open_link(self.INFO, OpenSettings())

        assert isinstance(link, BitbangLink)
        ftdi.open.assert_called_once_with(
            0x0403, 0x6001, bus=1, address=4, serial="S1", interface=1
        )
        ftdi.set_baudrate.assert_called_once_with(9600)
        ftdi.set_line_property.assert_called_once_with(8, 1, "N")
        ftdi.set_bitmode.assert_called_once_with(0xFF, Ftdi.BitMode.SYNCBB)
        ftdi.set_latency_timer.assert_called_once_with(16)
        ftdi.purge_buffers.assert_called_once()

    def test_bitbang_custom_mode(self, mock_ftdi_class):
        ftdi = mock_ftdi_class.return_value

        open_link(self.INFO, OpenSettings(bitmode="cbus", bitmask=0x0F))

        ftdi.set_bitmode.assert_called_once_with(0x0F, Ftdi.BitMode.CBUS)

    def test_open_failure(self, mock_ftdi_class):
        mock_ftdi_class.return_value.open.side_effect = FtdiError("busy")

        with pytest.raises(LinkError, match="busy"):
            open_link(self.INFO, OpenSettings())

    def test_configure_failure_closes(self, mock_ftdi_class):
        ftdi = mock_ftdi_class.return_value
        ftdi.set_bitmode.side_effect = FtdiError("Unable to set bitmode")

        with pytest.raises(LinkError, match="bitmode"):
            open_link(self.INFO, OpenSettings())

        ftdi.close.assert_called_once()

    def test_unsupported_baudrate(self, mock_ftdi_class):
        mock_ftdi_class.return_value.set_baudrate.side_effect = ValueError("Invalid baudrate")

        with pytest.raises(LinkError):
            open_link(self.INFO, OpenSettings(baudrate=1))

    @patch("ftdi_relay.driver.serial_for_url")
    def test_uart_mode_uses_serial(self, mock_serial_for_url, mock_ftdi_class):
        link = open_link(self.INFO, OpenSettings(bitmode="reset", baudrate=115200, parity="even"))

        assert isinstance(link, SerialLink)
        mock_serial_for_url.assert_called_once_with(
            "ftdi://0x0403:0x6001:1:4/1",
            baudrate=115200,
            bytesize=8,
            parity=serial.PARITY_EVEN,
            stopbits=1,
            timeout=0.1,
        )
        mock_ftdi_class.assert_not_called()

    @patch("ftdi_relay.driver.serial_for_url")
    def test_uart_open_failure(self, mock_serial_for_url):
        mock_serial_for_url.side_effect = serial.SerialException("no such device")

        with pytest.raises(LinkError, match="no such device"):
            open_link(self.INFO, OpenSettings(bitmode="reset"))


class TestBitbangLink:
    """Tests for BitbangLink."""

    def test_write(self):
        ftdi = Mock()
        ftdi.write_data.return_value = 1
        assert BitbangLink(ftdi).write(b"\xff") == 1
        ftdi.write_data.assert_called_once_with(b"\xff")

    def test_read(self):
        ftdi = Mock()
        ftdi.read_data.return_value = bytearray(b"\x0f")
        assert BitbangLink(ftdi).read(64) == b"\x0f"

    def test_read_pins(self):
        ftdi = Mock()
        ftdi.read_pins.return_value = 0x55
        assert BitbangLink(ftdi).read_pins() == 0x55

    def test_write_error(self):
        ftdi = Mock()
        ftdi.write_data.side_effect = FtdiError("Usb bulk write error")
        with pytest.raises(LinkError, match="write"):
            BitbangLink(ftdi).write(b"\x00")

    def test_close(self):
        ftdi = Mock()
        BitbangLink(ftdi).close()
        ftdi.close.assert_called_once()


class TestSerialLink:
    """Tests for SerialLink."""

    def test_write_flushes(self):
        port = Mock()
        port.write.return_value = 2
        assert SerialLink(port).write(b"ab") == 2
        port.flush.assert_called_once()

    def test_write_none_count(self):
        port = Mock()
        port.write.return_value = None
        assert SerialLink(port).write(b"abc") == 3

    def test_read(self):
        port = Mock()
        port.read.return_value = b"x"
        assert SerialLink(port).read(16) == b"x"
        port.read.assert_called_once_with(16)

    def test_read_pins_unsupported(self):
        with pytest.raises(DeviceStateError):
            SerialLink(Mock()).read_pins()

    def test_close_only_if_open(self):
        port = Mock()
        port.is_open = False
        SerialLink(port).close()
        port.close.assert_not_called()

    def test_read_error(self):
        port = Mock()
        port.read.side_effect = serial.SerialException("device reports readiness")
        with pytest.raises(LinkError):
            SerialLink(port).read(1)
