"""
Errors and Error Codes
**********************

Dualboot has several possible Exceptions with corresponding error codes.

:mod:`~dualbootlib.selector`, :mod:`~dualbootlib.firmware` and :mod:`~dualbootlib.commands` functions will raise an exception that is a subclass of :class:`DualbootError`.
The command line tool will convert these exceptions into a dictionary containing the error message and error code.
These look like ``{"error": "<msg>", "code": <code>}``.
The process exit status is the negated error code, so every kind of error has its own exit status.
"""

from typing import Any, Dict, Iterator, Optional
from contextlib import contextmanager

# Error codes
DEVICE_NOT_FOUND = -1 #: The selector partition could not be found
MISSING_ARGUMENTS = -2 #: Arguments are missing
UNRECOGNIZED_FLAG = -3 #: The boot flag byte has an unknown value
INVALID_SLOT = -4 #: The root device is not one of the known slots
UNDECODABLE_VERSION = -5 #: The kernel version string could not be classified
CORRUPT_REGION = -6 #: The selector region matches neither valid state
WRONG_BOARD = -7 #: The tool is running on an unsupported board
HELP_TEXT = -8 #: Help text was requested by the user
UNKNOWN_ERROR = -13 #: An unknown error occurred

# Exceptions
class DualbootError(Exception):
    """
    Generic exception type produced by dualboot
    Subclassed by specific Errors to have Exceptions that have specific error codes.

    Contains a message and error code.
    """
    def __init__(self, msg: str, code: int) -> None:
        """
        Create an exception with the message and error code

        :param msg: The error message
        :param code: The error code
        """
        Exception.__init__(self)
        self.code = code
        self.msg = msg

    def get_code(self) -> int:
        """
        Get the error code for this Error

        :return: The error code
        """
        return self.code

    def get_msg(self) -> str:
        """
        Get the error message for this Error

        :return: The error message
        """
        return self.msg

    def __str__(self) -> str:
        return self.msg

class DeviceNotFoundError(DualbootError):
    """
    :class:`DualbootError` for :data:`DEVICE_NOT_FOUND`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        DualbootError.__init__(self, msg, DEVICE_NOT_FOUND)

class UnrecognizedBootFlagError(DualbootError):
    """
    :class:`DualbootError` for :data:`UNRECOGNIZED_FLAG`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        DualbootError.__init__(self, msg, UNRECOGNIZED_FLAG)

class InvalidSlotError(DualbootError):
    """
    :class:`DualbootError` for :data:`INVALID_SLOT`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        DualbootError.__init__(self, msg, INVALID_SLOT)

class UndecodableVersionError(DualbootError):
    """
    :class:`DualbootError` for :data:`UNDECODABLE_VERSION`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        DualbootError.__init__(self, msg, UNDECODABLE_VERSION)

class CorruptSelectorRegionError(DualbootError):
    """
    :class:`DualbootError` for :data:`CORRUPT_REGION`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        DualbootError.__init__(self, msg, CORRUPT_REGION)

class WrongBoardError(DualbootError):
    """
    :class:`DualbootError` for :data:`WRONG_BOARD`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        DualbootError.__init__(self, msg, WRONG_BOARD)

@contextmanager
def handle_errors(
    result: Optional[Dict[str, Any]] = None,
    code: int = UNKNOWN_ERROR,
    debug: bool = False,
) -> Iterator[None]:
    """
    Context manager to catch all Exceptions and DualbootErrors to return them as dictionaries containing the error message and code.

    :param result: The dictionary to put the resulting error in
    :param code: The default error code to use for Exceptions
    :param debug: Whether to also print out the traceback for debugging purposes
    """
    if result is None:
        result = {}

    try:
        yield

    except DualbootError as e:
        result['error'] = e.get_msg()
        result['code'] = e.get_code()
    except Exception as e:
        result['error'] = str(e)
        result['code'] = code
        if debug:
            import traceback
            traceback.print_exc()
