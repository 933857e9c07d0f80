# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Pytest configuration and shared fakes."""

from unittest.mock import patch

import pytest

from ftdi_relay.driver import DeviceInfo


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--hardware",
        action="store_true",
        default=False,
        help="Run integration tests against a connected FTDI device",
    )
    parser.addoption(
        "--device-serial",
        action="store",
        default=None,
        help="Serial number of the device to use (default: first found)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --hardware is given."""
    if config.getoption("--hardware"):
        return
    skip = pytest.mark.skip(reason="needs --hardware")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


class FakeLink:
    """In-memory stand-in for a driver link."""

    def __init__(self, reads=None):
        self.reads = list(reads or [])
        self.written = []
        self.pins = 0
        self.closed = False
        self.write_error = None
        self.close_error = None

    def write(self, data: bytes) -> int:
        if self.write_error:
            raise self.write_error
        self.written.append(bytes(data))
        return len(data)

    def read(self, size: int) -> bytes:
        if self.reads:
            item = self.reads.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return b""

    def read_pins(self) -> int:
        return self.pins

    def close(self):
        if self.close_error:
            raise self.close_error
        self.closed = True


SAMPLE_INFO = DeviceInfo(
    vid=0x0403,
    pid=0x6001,
    bus=1,
    address=4,
    serial="A50285BI",
    index=0,
    description="FT245R USB FIFO",
)


class FakeDriver:
    """Patched driver.resolve/open_link pair."""

    def __init__(self, resolve, open_link, link):
        self.resolve = resolve
        self.open_link = open_link
        self.link = link


@pytest.fixture
def fake_link():
    return FakeLink()


@pytest.fixture
def fake_driver(fake_link):
    """Route FtdiDevice.open() to a FakeLink."""
    with patch("ftdi_relay.driver.resolve", return_value=SAMPLE_INFO) as resolve, \
            patch("ftdi_relay.driver.open_link", return_value=fake_link) as open_link:
        yield FakeDriver(resolve, open_link, fake_link)


@pytest.fixture
def device_serial(request):
    return request.config.getoption("--device-serial")
