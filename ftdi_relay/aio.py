# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Awaitable relay helpers.

Each coroutine runs the blocking driver call in the event loop's default
executor and re-raises its exception.
"""

import asyncio
import functools
from typing import Optional, Sequence

from . import relay
from .device import FtdiDevice
from .driver import DeviceInfo


async def _run(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


async def find(vid: Optional[int] = None, pid: Optional[int] = None) -> list[DeviceInfo]:
    return await _run(relay.find, vid, pid)


async def find_first(vid: Optional[int] = None, pid: Optional[int] = None) -> FtdiDevice:
    return await _run(relay.find_first, vid, pid)


async def open_device(device: FtdiDevice) -> None:
    await _run(relay.open_device, device)


async def close_device(device: FtdiDevice) -> None:
    await _run(relay.close_device, device)


async def switch_ports(device: FtdiDevice, ports: Sequence[int]) -> None:
    await _run(relay.switch_ports, device, ports)


async def switch_all_ports(device: FtdiDevice, is_on: bool) -> None:
    await _run(relay.switch_all_ports, device, is_on)
