#! /usr/bin/env python3

"""Tests for reading and writing the boot flag"""

import os
import shutil
import tempfile
import unittest

from unittest import mock

from dualbootlib.common import (
    build_region,
    FILL_BYTE,
    md5_hex,
    REGION_SIZE,
    Slot,
    SLOTS,
)
from dualbootlib.errors import (
    CorruptSelectorRegionError,
    InvalidSlotError,
    UnrecognizedBootFlagError,
)
from dualbootlib.selector import BootSelector

ROOT_A = SLOTS[Slot.A].root_device
ROOT_B = SLOTS[Slot.B].root_device


class SelectorTestCase(unittest.TestCase):
    """Runs a BootSelector against an image file standing in for the dual flag partition"""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.image = os.path.join(self.tmpdir, "dual_flag.img")
        self.write_image(build_region(Slot.A))
        self.selector = BootSelector(device=self.image)

        # The root devices do not exist here
        patcher = mock.patch("dualbootlib.selector.is_block_device", side_effect=lambda p: p in (ROOT_A, ROOT_B))
        self.is_block_device = patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def write_image(self, data):
        with open(self.image, "wb") as f:
            f.write(data)

    def read_image(self):
        with open(self.image, "rb") as f:
            return f.read()


class TestBootFlag(SelectorTestCase):
    def test_valid_flags(self):
        for flag, slot in [(0xff, Slot.A), (0x01, Slot.B)]:
            self.write_image(bytes([flag]) + bytes([FILL_BYTE]) * (REGION_SIZE - 1))
            self.assertEqual(self.selector.read_active_slot(), slot)
            # Reading does not change anything
            self.assertEqual(self.selector.read_active_slot(), slot)

    def test_unrecognized_flags(self):
        for flag in range(256):
            if flag in (0xff, 0x01):
                continue
            self.write_image(bytes([flag]) + bytes([FILL_BYTE]) * (REGION_SIZE - 1))
            with self.assertRaises(UnrecognizedBootFlagError):
                self.selector.read_active_slot()

    def test_empty_device(self):
        self.write_image(b"")
        self.assertRaises(UnrecognizedBootFlagError, self.selector.read_active_slot)

    def test_root_device_for(self):
        self.assertEqual(self.selector.root_device_for(Slot.A), "/dev/mmcblk0p5")
        self.assertEqual(self.selector.root_device_for(Slot.B), "/dev/mmcblk0p8")
        self.assertEqual(self.selector.slot_for_root("/dev/mmcblk0p8"), Slot.B)
        self.assertRaises(InvalidSlotError, self.selector.slot_for_root, "/dev/mmcblk0p6")


class TestSetActiveSlot(SelectorTestCase):
    def test_last_write_wins(self):
        self.assertEqual(self.selector.set_active_slot(ROOT_A), Slot.A)
        self.assertEqual(self.selector.set_active_slot(ROOT_B), Slot.B)
        self.assertEqual(self.selector.read_active_slot(), Slot.B)
        self.assertEqual(self.selector.set_active_slot(ROOT_A), Slot.A)
        self.assertEqual(self.selector.read_active_slot(), Slot.A)

    def test_only_flag_is_written(self):
        data = bytearray(os.urandom(REGION_SIZE))
        self.write_image(bytes(data))
        self.selector.set_active_slot(ROOT_B)
        data[0] = 0x01
        self.assertEqual(self.read_image(), bytes(data))

    def test_unknown_root(self):
        before = self.read_image()
        for root in ["/dev/mmcblk0p6", "/dev/sda1", "", "mmcblk0p5"]:
            with self.assertRaises(InvalidSlotError):
                self.selector.set_active_slot(root)
            with self.assertRaises(InvalidSlotError):
                self.selector.reset_and_set_active_slot(root)
        self.assertEqual(self.read_image(), before)

    def test_root_not_block_device(self):
        self.is_block_device.side_effect = lambda p: False
        before = self.read_image()
        self.assertRaises(InvalidSlotError, self.selector.set_active_slot, ROOT_B)
        self.assertRaises(InvalidSlotError, self.selector.reset_and_set_active_slot, ROOT_B)
        self.assertEqual(self.read_image(), before)

    def test_nothing_opened_for_unknown_root(self):
        with mock.patch("builtins.open") as mock_open:
            self.assertRaises(InvalidSlotError, self.selector.set_active_slot, "/dev/sda1")
            mock_open.assert_not_called()


class TestResetAndSetActiveSlot(SelectorTestCase):
    def test_reset_corrupt_region(self):
        self.write_image(os.urandom(REGION_SIZE))
        with self.assertLogs(level="WARNING"):
            self.assertEqual(self.selector.reset_and_set_active_slot(ROOT_B), Slot.B)
        data = self.read_image()
        self.assertEqual(len(data), REGION_SIZE)
        self.assertEqual(md5_hex(data), SLOTS[Slot.B].fingerprint)
        self.assertEqual(self.selector.read_active_slot(), Slot.B)
        self.assertEqual(self.selector.check_integrity(), Slot.B)

    def test_reset_slot_a(self):
        self.write_image(bytes(REGION_SIZE))
        self.selector.reset_and_set_active_slot(ROOT_A)
        self.assertEqual(self.read_image(), bytes([FILL_BYTE]) * REGION_SIZE)
        self.assertEqual(self.selector.check_integrity(), Slot.A)

    def test_only_first_byte_is_flag(self):
        region = build_region(Slot.B)
        self.assertEqual(region[0], 0x01)
        self.assertEqual(region[1:], bytes([FILL_BYTE]) * (REGION_SIZE - 1))


class TestCheckIntegrity(SelectorTestCase):
    def test_fingerprints(self):
        for slot, info in SLOTS.items():
            self.assertEqual(md5_hex(build_region(slot)), info.fingerprint)

    def test_valid_a(self):
        self.assertEqual(self.selector.check_integrity(), Slot.A)

    def test_valid_b(self):
        self.write_image(build_region(Slot.B))
        self.assertEqual(self.selector.check_integrity(), Slot.B)

    def test_corrupt(self):
        data = bytearray(build_region(Slot.A))
        data[1000] = 0
        self.write_image(bytes(data))
        self.assertRaises(CorruptSelectorRegionError, self.selector.check_integrity)
        # The flag byte alone still reads fine
        self.assertEqual(self.selector.read_active_slot(), Slot.A)

    def test_truncated(self):
        self.write_image(build_region(Slot.A)[:REGION_SIZE // 2])
        self.assertRaises(CorruptSelectorRegionError, self.selector.check_integrity)

    def test_only_region_is_fingerprinted(self):
        self.write_image(build_region(Slot.B) + b"\x00" * 512)
        self.assertEqual(self.selector.check_integrity(), Slot.B)


class TestLazyDevice(unittest.TestCase):
    def test_located_once(self):
        with mock.patch("dualbootlib.selector.locate", return_value="/dev/mmcblk0p10") as mock_locate:
            selector = BootSelector()
            self.assertEqual(selector.device, "/dev/mmcblk0p10")
            self.assertEqual(selector.device, "/dev/mmcblk0p10")
            mock_locate.assert_called_once_with(resolver=None)

if __name__ == "__main__":
    unittest.main()
