#!/usr/bin/env python3
"""
tag_utility.py - Command line utility for location tags

Reads a location tag, sets up a new location or adds a visitor without
the API server running.

    neatocache-tag setup "Corner Cafe"
    neatocache-tag add-visitor Bob
    neatocache-tag read
"""

import argparse
import logging
import sys

from ...config import CONFIG
from ...utils.exceptions import ValidationError
from ...utils.logger import setup_logger
from .actions import AddVisitor, ReadLocation, SetupLocation
from .nfc_controller import initialize, perform_action_sync, shutdown

logger = logging.getLogger(__name__)


def print_location(location):
    """Print a location and its visitors."""
    print(f"\nLocation: {location.name}")
    print(f"Visitors: {len(location.visitors)}")
    for visitor in location.visitors:
        print(f"  - {visitor.name}")


def build_action(args):
    if args.command == 'read':
        return ReadLocation()
    if args.command == 'setup':
        return SetupLocation(args.name)
    return AddVisitor(args.name)


def run_action(action, timeout):
    """
    Run one tag action and report the outcome.

    Returns:
        int: Process exit code
    """
    print(action.alert_message)
    result = perform_action_sync(action, timeout=timeout)

    if not result.ok:
        print(f"❌ {result.error}")
        return 1

    print("✅ Done")
    print_location(result.location)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='NeatoCache location tag utility')
    parser.add_argument('-a', '--address', type=lambda value: int(value, 0),
                        default=CONFIG['nfc']['i2c_address'],
                        help='I2C device address (default: 0x24)')
    parser.add_argument('-t', '--timeout', type=float, default=CONFIG['api']['action_timeout'],
                        help='Seconds to wait for a tag')
    parser.add_argument('--debug', action='store_true', help='Enable debug level logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')
    subparsers.add_parser('read', help='Read the location stored on a tag')
    setup_parser = subparsers.add_parser('setup', help='Set up a new location on a tag')
    setup_parser.add_argument('name', help='Location name')
    visitor_parser = subparsers.add_parser('add-visitor', help='Add a visitor to the tag location')
    visitor_parser.add_argument('name', help='Visitor name')

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 2

    setup_logger('neatocache', level=logging.DEBUG if args.debug else logging.WARNING)

    try:
        action = build_action(args)
    except ValidationError as e:
        print(f"❌ {e.message}")
        return 2

    nfc_config = dict(CONFIG['nfc'], i2c_address=args.address)
    initialize(nfc_config=nfc_config)
    try:
        return run_action(action, args.timeout)
    finally:
        shutdown()


if __name__ == "__main__":
    sys.exit(main())
