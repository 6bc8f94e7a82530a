"""
Firmware Metadata
*****************

Decodes the version strings stored in the header and kernel partitions of a slot.

The vendor firmware writes its version at offset 8 of the header partition.
Both the vendor firmware and LEDE kernels carry a ``Linux-<release>`` string at offset 32 of the kernel partition,
LEDE kernels prefixing it with the architecture (e.g. ``ARMv7 Linux-4.9.0``).
"""

import logging
import re

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .common import Slot, SlotInfo, SLOTS
from .errors import UndecodableVersionError
from .selector import BootSelector

HEADER_VERSION_OFFSET = 8
HEADER_VERSION_LENGTH = 16
KERNEL_VERSION_OFFSET = 32
KERNEL_VERSION_LENGTH = 25

UNKNOWN_REVISION = "unknown revision"

ALTERNATE_KERNEL_RE = re.compile(r"^ARM.*Linux-", re.DOTALL)
OEM_KERNEL_PREFIX = "Linux-"


class FirmwareType(Enum):
    OEM = 0 #: Vendor firmware
    ALTERNATE = 1 #: LEDE/OpenWrt

    def __str__(self) -> str:
        return str(self.name).lower()


@dataclass
class FirmwareDescription(object):
    slot: Slot
    header_path: str
    kernel_path: str
    root_path: str
    firmware_type: FirmwareType
    firmware_version: str
    kernel_version: str
    uname_version: str
    is_active: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": str(self.slot),
            "header": self.header_path,
            "kernel": self.kernel_path,
            "root": self.root_path,
            "type": str(self.firmware_type),
            "firmware_version": self.firmware_version,
            "kernel_version": self.kernel_version,
            "uname_version": self.uname_version,
            "active": self.is_active,
        }


def read_range(path: str, offset: int, length: int) -> bytes:
    """
    Read ``length`` bytes at ``offset`` from a device or file.
    Fewer bytes are returned if the device ends first.
    """
    with open(path, "rb") as f:
        f.seek(offset)
        return f.read(length)


def _decode(raw: bytes) -> str:
    # latin-1 maps every byte to one character so padding survives as is
    return raw.rstrip(b"\x00").decode("latin-1")


def classify_kernel_version(kernel_version: str) -> FirmwareType:
    """
    Tell which firmware a kernel version string belongs to.

    :param kernel_version: The text read from the kernel partition
    :return: The firmware type
    :raises: UndecodableVersionError: if the string has neither known form
    """
    if ALTERNATE_KERNEL_RE.match(kernel_version):
        return FirmwareType.ALTERNATE
    if kernel_version.startswith(OEM_KERNEL_PREFIX):
        return FirmwareType.OEM
    raise UndecodableVersionError("Unable to decode kernel version {!r}".format(kernel_version))


def uname_from_kernel_version(kernel_version: str) -> str:
    """
    Strip everything up to and including the last ``Linux-``.

    >>> uname_from_kernel_version("ARMv7 Linux-4.9.0")
    '4.9.0'
    """
    return kernel_version.rpartition(OEM_KERNEL_PREFIX)[2]


def describe(root_path: str, selector: Optional[BootSelector] = None, slots: Dict[Slot, SlotInfo] = SLOTS) -> FirmwareDescription:
    """
    Describe the firmware installed in the slot with root filesystem ``root_path``.

    :param root_path: The root device of the slot
    :param selector: Used to tell whether the slot is the active one. A new :class:`~dualbootlib.selector.BootSelector` over ``slots`` is used if not given.
    :param slots: The slot table
    :return: The firmware description
    :raises: InvalidSlotError: if ``root_path`` is not the root device of any slot
    :raises: UndecodableVersionError: if the kernel version string is not recognized
    """
    if selector is None:
        selector = BootSelector(slots=slots)
    slot = selector.slot_for_root(root_path)
    info = slots[slot]

    header_raw = read_range(info.header_device, HEADER_VERSION_OFFSET, HEADER_VERSION_LENGTH)
    kernel_raw = read_range(info.kernel_device, KERNEL_VERSION_OFFSET, KERNEL_VERSION_LENGTH)
    logging.debug(f"Slot {slot} header bytes: {header_raw.hex()}, kernel bytes: {kernel_raw.hex()}")

    kernel_version = _decode(kernel_raw)
    firmware_type = classify_kernel_version(kernel_version)
    if firmware_type == FirmwareType.ALTERNATE:
        # LEDE does not fill in the vendor header
        firmware_version = UNKNOWN_REVISION
    else:
        firmware_version = _decode(header_raw)

    return FirmwareDescription(
        slot=slot,
        header_path=info.header_device,
        kernel_path=info.kernel_device,
        root_path=info.root_device,
        firmware_type=firmware_type,
        firmware_version=firmware_version,
        kernel_version=kernel_version,
        uname_version=uname_from_kernel_version(kernel_version),
        is_active=selector.read_active_slot() == slot,
    )
