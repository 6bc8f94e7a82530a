"""
Board Identity
**************

The selector layout only exists on the ZyXEL NBG6817.
The command line tool checks the board before running any command.
"""

import logging

from typing import Optional

from .errors import WrongBoardError

EXPECTED_BOARD = "nbg6817"
BOARD_VENDOR = "zyxel"

BOARD_NAME_FILE = "/tmp/sysinfo/board_name"
DEVICE_TREE_COMPATIBLE = "/proc/device-tree/compatible"


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "rb") as f:
            return f.read().decode("ascii", errors="replace")
    except OSError:
        return None


def get_board_name(path: str = BOARD_NAME_FILE, compatible_path: str = DEVICE_TREE_COMPATIBLE) -> str:
    """
    Get the board name the way the firmware reports it.

    LEDE writes it to ``/tmp/sysinfo/board_name``.
    Otherwise the most specific entry of the device tree ``compatible`` property is used.

    :param path: The board name file
    :param compatible_path: The device tree ``compatible`` file
    :return: The board name, or an empty string if it is not available
    """
    name = _read_text(path)
    if name is not None:
        return name.strip()
    compatible = _read_text(compatible_path)
    if compatible is not None:
        # NUL separated, most specific first
        return compatible.split("\0")[0].strip()
    return ""


def check_board(name: Optional[str] = None) -> None:
    """
    Make sure we are running on the expected board.

    :param name: The board name. Read with :func:`get_board_name` if not given.
    :raises: WrongBoardError: if the board is not a NBG6817
    """
    if name is None:
        name = get_board_name()
    logging.debug(f"Board name: {name!r}")
    if name not in (EXPECTED_BOARD, "{},{}".format(BOARD_VENDOR, EXPECTED_BOARD)):
        raise WrongBoardError("This tool only supports the {} board, not {!r}".format(EXPECTED_BOARD, name))
