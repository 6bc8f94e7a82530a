#! /usr/bin/env python3

"""
Commands
********

The functions in this module are the primary way to use the dual boot flag.
Each function takes a :class:`~dualbootlib.selector.BootSelector` and returns a dictionary
that the command line tool prints as JSON.

Note that these functions do not check the board, callers should use :func:`~dualbootlib.board.check_board` first.
"""

from .common import Slot
from .firmware import describe
from .selector import BootSelector

from typing import (
    Any,
    Dict,
    List,
    Union,
)


def _slot_dict(selector: BootSelector, slot: Slot) -> Dict[str, str]:
    return {"slot": str(slot), "root": selector.root_device_for(slot)}

def checkintegrity(selector: BootSelector) -> Dict[str, Union[bool, str]]:
    """
    Check that the whole selector region is in one of its valid states.

    :param selector: The boot selector
    :return: A dictionary containing the slot whose valid state the region holds.
        Returned as ``{"valid": True, "slot": <slot>, "root": <root device>}``.
    :raises: CorruptSelectorRegionError: if the region is corrupt
    """
    slot = selector.check_integrity()
    result: Dict[str, Union[bool, str]] = {"valid": True}
    result.update(_slot_dict(selector, slot))
    return result

def getselectordevice(selector: BootSelector) -> Dict[str, str]:
    """
    Get the device holding the selector region.

    :param selector: The boot selector
    :return: Returned as ``{"device": <device path>}``.
    :raises: DeviceNotFoundError: if the partition could not be found
    """
    return {"device": selector.device}

def getactiveroot(selector: BootSelector) -> Dict[str, str]:
    """
    Get the root device of the slot the bootloader will boot.

    :param selector: The boot selector
    :return: Returned as ``{"slot": <slot>, "root": <root device>}``.
    :raises: UnrecognizedBootFlagError: if the boot flag is not valid
    """
    return _slot_dict(selector, selector.read_active_slot())

def getversion(selector: BootSelector, root: str) -> Dict[str, Any]:
    """
    Get the firmware and kernel versions installed in a slot.

    :param selector: The boot selector
    :param root: The root device of the slot
    :return: The :meth:`~dualbootlib.firmware.FirmwareDescription.to_dict` of the slot
    :raises: InvalidSlotError: if ``root`` is not a root device
    :raises: UndecodableVersionError: if the kernel version is not recognized
    """
    return describe(root, selector=selector, slots=selector.slots).to_dict()

def list_slots(selector: BootSelector) -> Dict[str, List[Dict[str, Any]]]:
    """
    Get the firmware and kernel versions of every slot.

    :param selector: The boot selector
    :return: Returned as ``{"slots": [<slot A>, <slot B>]}``, each as returned by :func:`getversion`
    """
    return {"slots": [getversion(selector, selector.root_device_for(slot)) for slot in selector.slots]}

def setactiveroot(selector: BootSelector, root: str) -> Dict[str, Union[bool, str]]:
    """
    Boot the slot with root device ``root`` next time. Only the boot flag byte is written.

    :param selector: The boot selector
    :param root: The root device of the slot to boot
    :return: Returned as ``{"success": True, "slot": <slot>, "root": <root device>}``.
    :raises: InvalidSlotError: if ``root`` is not a root block device
    """
    slot = selector.set_active_slot(root)
    result: Dict[str, Union[bool, str]] = {"success": True}
    result.update(_slot_dict(selector, slot))
    return result

def resetandsetactiveroot(selector: BootSelector, root: str) -> Dict[str, Union[bool, str]]:
    """
    Rewrite the whole selector region with the slot of ``root`` active.
    See :meth:`~dualbootlib.selector.BootSelector.reset_and_set_active_slot` for why this is dangerous.

    :param selector: The boot selector
    :param root: The root device of the slot to boot
    :return: Returned as ``{"success": True, "slot": <slot>, "root": <root device>}``.
    :raises: InvalidSlotError: if ``root`` is not a root block device
    """
    slot = selector.reset_and_set_active_slot(root)
    result: Dict[str, Union[bool, str]] = {"success": True}
    result.update(_slot_dict(selector, slot))
    return result
