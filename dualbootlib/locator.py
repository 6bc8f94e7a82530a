"""
Device Locator
**************

Finds the block device holding the selector region.
The partition has a different name under LEDE and under the vendor firmware,
so every name in :data:`SELECTOR_PARTITION_NAMES` is tried in order.
"""

import glob
import logging
import os
import stat

from typing import Optional, Sequence
from typing_extensions import Protocol

from .errors import DeviceNotFoundError

SELECTOR_PARTITION_NAMES = [
    "0:DUAL_FLAG", # LEDE
    "dual_flag", # vendor firmware
]


class PartitionResolver(Protocol):
    def resolve(self, name: str) -> Optional[str]:
        ...


class SysfsPartitionResolver(object):
    """
    Resolves eMMC partition names through the ``PARTNAME`` entries in sysfs.
    """

    def __init__(self, sysfs_root: str = "/sys/block", dev_root: str = "/dev") -> None:
        self.sysfs_root = sysfs_root
        self.dev_root = dev_root

    def resolve(self, name: str) -> Optional[str]:
        """
        Find the device node of the partition with the given name.

        :param name: The partition name
        :return: The device path, or ``None`` if no partition has that name
        """
        pattern = os.path.join(self.sysfs_root, "mmcblk*", "mmcblk*p*", "uevent")
        for uevent in sorted(glob.glob(pattern)):
            fields = {}
            with open(uevent, "r") as f:
                for line in f:
                    key, sep, value = line.strip().partition("=")
                    if sep:
                        fields[key] = value
            if fields.get("PARTNAME") == name and "DEVNAME" in fields:
                return os.path.join(self.dev_root, fields["DEVNAME"])
        return None


def is_block_device(path: str) -> bool:
    """
    Check that the path exists and is a block special file.

    :param path: The path to check
    :return: Whether the path is a block device
    """
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def locate(names: Sequence[str] = SELECTOR_PARTITION_NAMES, resolver: Optional[PartitionResolver] = None) -> str:
    """
    Locate the first partition in ``names`` that resolves to a block device.

    :param names: Candidate partition names, in order of preference
    :param resolver: Partition name lookup. Defaults to :class:`SysfsPartitionResolver`
    :return: The device path
    :raises: DeviceNotFoundError: if none of the names resolve to a block device
    """
    if resolver is None:
        resolver = SysfsPartitionResolver()
    for name in names:
        path = resolver.resolve(name)
        logging.debug(f"Partition {name} resolved to {path}")
        if path is not None and is_block_device(path):
            return path
    raise DeviceNotFoundError("Could not find the dual flag partition (tried {})".format(", ".join(names)))
