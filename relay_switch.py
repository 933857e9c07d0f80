#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Relay switching tool for FTDI bit-bang boards.

Usage:
    python relay_switch.py list
    python relay_switch.py list --vid 0x0403 --pid 0x6001 --json
    python relay_switch.py on
    python relay_switch.py --serial A50285BI set 1 0 1 0
    python relay_switch.py chase --cycles 2 --interval 0.5

Requirements:
    pip install pyftdi
"""

import argparse
import json
import logging
import sys
import time

try:
    import pyftdi  # noqa: F401
except ImportError:
    print("Error: pyftdi not installed. Run: pip install pyftdi")
    sys.exit(1)

from ftdi_relay import FtdiDevice, find, open_device, switch_all_ports, switch_ports
from ftdi_relay.driver import DeviceError
from ftdi_relay.ports import PORT_COUNTS, PortsError, single_port


def cmd_list(vid, pid, as_json: bool):
    """List connected devices."""
    devices = find(vid, pid)

    if as_json:
        print(json.dumps([d.as_dict() for d in devices], indent=2))
        return

    if not devices:
        print("No FTDI devices found.")
        return

    for d in devices:
        print(f"[{d.index}] {d.description or 'FTDI device'}")
        print(f"  VID:PID:  {d.vid:04x}:{d.pid:04x}")
        print(f"  Serial:   {d.serial or '-'}")
        print(f"  Location: {d.location_id if d.location_id is not None else '-'}")
        print(f"  URL:      {d.url}")


def cmd_switch_all(device: FtdiDevice, is_on: bool):
    """Turn every line on or off."""
    switch_all_ports(device, is_on)
    print(f"All ports {'ON' if is_on else 'OFF'}")


def cmd_set(device: FtdiDevice, ports: list[int]):
    """Switch lines from a port array."""
    switch_ports(device, ports)
    print(f"Ports set: {' '.join(str(p) for p in ports)}")


def cmd_chase(device: FtdiDevice, cycles: int, interval: float, width: int = 8):
    """Light each line in turn."""
    for step in range(cycles * width):
        line = step % width
        switch_ports(device, single_port(line, width))
        print(f"\rPort {line} ON ", end="", flush=True)
        time.sleep(interval)
    switch_all_ports(device, False)
    print("\rAll ports OFF")


def parse_int(value: str) -> int:
    return int(value, 0)


def parse_bit(value: str) -> int:
    if value not in ("0", "1"):
        raise argparse.ArgumentTypeError(f"expected 0 or 1, got {value!r}")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Switch relays on FTDI bit-bang boards"
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--index", "-i",
        type=int, default=0,
        help="Device index as shown by 'list' (default 0)"
    )
    target.add_argument(
        "--serial", "-s",
        help="Device serial number"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # list command
    list_parser = subparsers.add_parser("list", help="List connected devices")
    list_parser.add_argument("--vid", type=parse_int, help="USB vendor id")
    list_parser.add_argument("--pid", type=parse_int, help="USB product id")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # on/off commands
    subparsers.add_parser("on", help="Turn all ports on")
    subparsers.add_parser("off", help="Turn all ports off")

    # set command
    set_parser = subparsers.add_parser("set", help="Set ports from 4 or 8 bits")
    set_parser.add_argument("ports", type=parse_bit, nargs="+",
                            help="Port states, line 0 first")

    # chase command
    chase_parser = subparsers.add_parser("chase", help="Light each port in turn")
    chase_parser.add_argument("--cycles", "-c", type=int, default=2,
                              help="Number of passes (default 2)")
    chase_parser.add_argument("--interval", type=float, default=1.0,
                              help="Seconds per port (default 1.0)")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "set" and len(args.ports) not in PORT_COUNTS:
        parser.error("set expects 4 or 8 port values")

    try:
        if args.command == "list":
            cmd_list(args.vid, args.pid, args.json)
            return

        selector = {"serial": args.serial} if args.serial else args.index
        device = FtdiDevice(selector)
        open_device(device)
    except DeviceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        if args.command == "on":
            cmd_switch_all(device, True)
        elif args.command == "off":
            cmd_switch_all(device, False)
        elif args.command == "set":
            cmd_set(device, args.ports)
        elif args.command == "chase":
            cmd_chase(device, args.cycles, args.interval)
    except (DeviceError, PortsError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        if device.is_open:
            device.close()


if __name__ == "__main__":
    main()
