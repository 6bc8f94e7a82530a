"""
Common Classes and Utilities
****************************

The slot table and the layout of the selector region.
"""

import hashlib

from enum import Enum
from typing import Dict, NamedTuple


REGION_SIZE = 65536 #: Size of the selector region in bytes
FILL_BYTE = 0xff #: Value of every byte of the selector region except the flag


class Slot(Enum):
    """
    One of the two firmware slots
    """
    A = 0 #: First firmware slot, rootfs on ``/dev/mmcblk0p5``
    B = 1 #: Second firmware slot, rootfs on ``/dev/mmcblk0p8``

    def __str__(self) -> str:
        return str(self.name).lower()

    def __repr__(self) -> str:
        return str(self)


class SlotInfo(NamedTuple):
    """
    Static description of a firmware slot
    """
    root_device: str
    header_device: str
    kernel_device: str
    flag: int #: Selector byte that makes this slot the active one
    fingerprint: str #: MD5 of the whole selector region when this slot is active


SLOTS: Dict[Slot, SlotInfo] = {
    Slot.A: SlotInfo(
        root_device="/dev/mmcblk0p5",
        header_device="/dev/mmcblk0p3",
        kernel_device="/dev/mmcblk0p4",
        flag=0xff,
        fingerprint="ecb99e6ffea7be1e5419350f725da86b",
    ),
    Slot.B: SlotInfo(
        root_device="/dev/mmcblk0p8",
        header_device="/dev/mmcblk0p6",
        kernel_device="/dev/mmcblk0p7",
        flag=0x01,
        fingerprint="e107d3d780e73f0b5c7d48ec749e66f9",
    ),
}


def md5_hex(s: bytes) -> str:
    """
    Compute the MD5 digest used to fingerprint the selector region.

    :param s: Bytes to hash
    :return: The hex encoded digest
    """
    return hashlib.new('md5', s).hexdigest()


def build_region(slot: Slot, slots: Dict[Slot, SlotInfo] = SLOTS) -> bytes:
    """
    Build the content of a valid selector region with the given slot active.

    :param slot: The slot to make active
    :param slots: The slot table
    :return: :data:`REGION_SIZE` bytes, the flag byte followed by :data:`FILL_BYTE`
    """
    return bytes([slots[slot].flag]) + bytes([FILL_BYTE]) * (REGION_SIZE - 1)
