"""
Boot Selector
*************

The :class:`BootSelector` reads and writes the boot flag, the first byte of the selector region.
The bootloader boots slot A when the flag is ``0xff`` and slot B when it is ``0x01``.
"""

import logging
import os

from typing import Dict, Optional

from .common import (
    build_region,
    md5_hex,
    REGION_SIZE,
    Slot,
    SlotInfo,
    SLOTS,
)
from .errors import (
    CorruptSelectorRegionError,
    InvalidSlotError,
    UnrecognizedBootFlagError,
)
from .locator import (
    is_block_device,
    locate,
    PartitionResolver,
)


class BootSelector(object):
    """
    Access to the selector region of a device.

    The selector device is located on first use unless it is given explicitly.
    Nothing is cached besides its path: every read goes to the device.
    """

    def __init__(self, device: Optional[str] = None, resolver: Optional[PartitionResolver] = None, slots: Dict[Slot, SlotInfo] = SLOTS) -> None:
        """
        :param device: Path to the selector region. Located with :func:`~dualbootlib.locator.locate` if not given.
        :param resolver: Partition name lookup used to locate the device
        :param slots: The slot table
        """
        self._device = device
        self.resolver = resolver
        self.slots = slots

    @property
    def device(self) -> str:
        if self._device is None:
            self._device = locate(resolver=self.resolver)
        return self._device

    def root_device_for(self, slot: Slot) -> str:
        return self.slots[slot].root_device

    def slot_for_root(self, root_path: str) -> Slot:
        """
        Find the slot whose root filesystem lives on ``root_path``.

        :param root_path: A root device path
        :return: The slot
        :raises: InvalidSlotError: if the path is not the root device of any slot
        """
        for slot, info in self.slots.items():
            if info.root_device == root_path:
                return slot
        raise InvalidSlotError("{} is not a valid root device".format(root_path))

    def read_active_slot(self) -> Slot:
        """
        Read the boot flag and return the slot it selects.

        :return: The active slot
        :raises: UnrecognizedBootFlagError: if the flag does not belong to any slot
        """
        with open(self.device, "rb") as f:
            data = f.read(1)
        logging.debug(f"Boot flag read from {self.device}: {data.hex()}")
        if len(data) == 1:
            for slot, info in self.slots.items():
                if info.flag == data[0]:
                    return slot
        raise UnrecognizedBootFlagError("Unrecognized boot flag {!r} in {}".format(data.hex() or "<empty>", self.device))

    def _target_slot(self, root_path: str) -> Slot:
        slot = self.slot_for_root(root_path)
        if not is_block_device(root_path):
            raise InvalidSlotError("{} is not a block device".format(root_path))
        return slot

    def set_active_slot(self, root_path: str) -> Slot:
        """
        Make the slot with root filesystem ``root_path`` the one booted next.
        Only the flag byte is written, the rest of the region is left as is.

        :param root_path: The root device of the slot to activate
        :return: The activated slot
        :raises: InvalidSlotError: if ``root_path`` is not a known root block device. Nothing is written in that case.
        """
        slot = self._target_slot(root_path)
        flag = self.slots[slot].flag
        with open(self.device, "r+b") as f:
            f.seek(0)
            f.write(bytes([flag]))
            f.flush()
            os.fsync(f.fileno())
        logging.debug(f"Wrote boot flag {flag:02x} to {self.device}")
        return slot

    def reset_and_set_active_slot(self, root_path: str) -> Slot:
        """
        Rewrite the whole selector region so that it holds a valid state with the slot of ``root_path`` active.

        This recovers a corrupt region, but it is dangerous: if the write is interrupted,
        for example by a power loss, the region is left invalid and the bootloader may not boot either slot.

        :param root_path: The root device of the slot to activate
        :return: The activated slot
        :raises: InvalidSlotError: if ``root_path`` is not a known root block device. Nothing is written in that case.
        """
        slot = self._target_slot(root_path)
        region = build_region(slot, self.slots)
        logging.warning(f"Rewriting all {REGION_SIZE} bytes of {self.device}, do not power off")
        with open(self.device, "r+b") as f:
            f.seek(0)
            f.write(region)
            f.flush()
            os.fsync(f.fileno())
        logging.debug(f"Selector region reset with slot {slot} active")
        return slot

    def check_integrity(self) -> Slot:
        """
        Fingerprint the whole selector region and compare it against the valid state of each slot.

        :return: The slot whose valid state the region matches
        :raises: CorruptSelectorRegionError: if the region matches no valid state
        """
        with open(self.device, "rb") as f:
            data = f.read(REGION_SIZE)
        digest = md5_hex(data)
        logging.debug(f"Selector region fingerprint: {digest}")
        for slot, info in self.slots.items():
            if info.fingerprint == digest:
                return slot
        raise CorruptSelectorRegionError("Selector region {} is corrupt (md5 {})".format(self.device, digest))
