#! /usr/bin/env python3

from .board import check_board
from .commands import (
    checkintegrity,
    getactiveroot,
    getselectordevice,
    getversion,
    list_slots,
    resetandsetactiveroot,
    setactiveroot,
)
from .errors import (
    handle_errors,
    HELP_TEXT,
    MISSING_ARGUMENTS,
    WRONG_BOARD,
)
from .selector import BootSelector
from . import __version__

import argparse
import logging
import json
import sys

from typing import (
    Any,
    Dict,
    IO,
    List,
    NoReturn,
    Optional,
    Union,
)


def checkintegrity_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, Union[bool, str]]:
    return checkintegrity(selector)

def getselectordevice_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, str]:
    return getselectordevice(selector)

def getactiveroot_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, str]:
    return getactiveroot(selector)

def getversion_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, Any]:
    return getversion(selector, root=args.root)

def list_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, List[Dict[str, Any]]]:
    return list_slots(selector)

def setactiveroot_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, Union[bool, str]]:
    return setactiveroot(selector, root=args.root)

def resetandsetactiveroot_handler(args: argparse.Namespace, selector: BootSelector) -> Dict[str, Union[bool, str]]:
    return resetandsetactiveroot(selector, root=args.root)

class DualbootHelpFormatter(argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter):
    pass

class DualbootArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.formatter_class = DualbootHelpFormatter

    def print_usage(self, file: Optional[IO[str]] = None) -> None:
        if file is None:
            file = sys.stderr
        super().print_usage(file)

    def print_help(self, file: Optional[IO[str]] = None) -> None:
        if file is None:
            file = sys.stderr
        super().print_help(file)
        error = {'error': 'Help text requested', 'code': HELP_TEXT}
        print(json.dumps(error))

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        args = {'prog': self.prog, 'message': message}
        error = {'error': '%(prog)s: error: %(message)s' % args, 'code': MISSING_ARGUMENTS}
        print(json.dumps(error))
        self.exit(-MISSING_ARGUMENTS)

def get_parser() -> DualbootArgumentParser:
    parser = DualbootArgumentParser(description='Dual boot flag tool, version {}.\nSelect which firmware slot of a ZyXEL NBG6817 boots next and inspect the firmware installed in each slot. Responses are in JSON format.'.format(__version__))
    parser.add_argument('--debug', help='Print debug statements', action='store_true')
    parser.add_argument('--version', action='version', version='%(prog)s {}'.format(__version__))
    parser.add_argument('--selector-device', help='Use this device or image file as the selector region instead of locating the dual flag partition. The board is still checked.')

    subparsers = parser.add_subparsers(description='Commands', dest='command')
    # work-around to make subparser required
    subparsers.required = True

    checkintegrity_parser = subparsers.add_parser('checkintegrity', help='Check that the whole selector region holds a valid state')
    checkintegrity_parser.set_defaults(func=checkintegrity_handler)

    getselectordevice_parser = subparsers.add_parser('getselectordevice', help='Print the device holding the selector region')
    getselectordevice_parser.set_defaults(func=getselectordevice_handler)

    getactiveroot_parser = subparsers.add_parser('getactiveroot', help='Print the root device of the slot that boots next')
    getactiveroot_parser.set_defaults(func=getactiveroot_handler)

    getversion_parser = subparsers.add_parser('getversion', help='Print the firmware and kernel versions installed in a slot')
    getversion_parser.add_argument('root', help='The root device of the slot, e.g. /dev/mmcblk0p5')
    getversion_parser.set_defaults(func=getversion_handler)

    list_parser = subparsers.add_parser('list', help='Print the firmware and kernel versions of both slots')
    list_parser.set_defaults(func=list_handler)

    setactiveroot_parser = subparsers.add_parser('setactiveroot', help='Boot the slot with the given root device next. Only the boot flag byte is written.')
    setactiveroot_parser.add_argument('root', help='The root device of the slot to boot')
    setactiveroot_parser.set_defaults(func=setactiveroot_handler)

    resetandsetactiveroot_parser = subparsers.add_parser('resetandsetactiveroot', help='Rewrite the whole selector region with the slot of the given root device active. DANGEROUS: an interrupted write leaves the device unbootable.')
    resetandsetactiveroot_parser.add_argument('root', help='The root device of the slot to boot')
    resetandsetactiveroot_parser.set_defaults(func=resetandsetactiveroot_handler)

    return parser

def process_commands(cli_args: List[str]) -> Any:
    parser = get_parser()
    args = parser.parse_args(cli_args)
    result: Dict[str, Any] = {}

    # Setup debug logging
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    # Refuse to touch anything on other boards
    with handle_errors(result=result, code=WRONG_BOARD, debug=args.debug):
        check_board()
    if 'error' in result:
        return result

    selector = BootSelector(device=args.selector_device)

    # Do the commands
    with handle_errors(result=result, debug=args.debug):
        result = args.func(args, selector)

    return result

def main() -> None:
    result = process_commands(sys.argv[1:])
    print(json.dumps(result))
    if 'error' in result:
        sys.exit(-result['code'])
