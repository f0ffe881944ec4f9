"""
Type definitions for automount.

This module provides TypedDict definitions and other type aliases
for better type checking throughout the codebase.
"""
from typing import Literal, TypedDict


class BlockDevice(TypedDict):
    """Snapshot of one lsblk entry"""
    name: str
    size: str
    type: str
    fstype: str
    mountpoint: str


class DiskCandidate(TypedDict):
    """A whole disk annotated with its eligibility for provisioning"""
    device: BlockDevice
    path: str
    eligible: bool
    reason: str


class MountRequest(TypedDict):
    """State carried from one provisioning stage to the next"""
    device: str
    mount_point: str
    filesystem: str
    formatted: bool


class FstabEntry(TypedDict):
    """A single /etc/fstab line"""
    uuid: str
    mount_point: str
    filesystem: str
    options: str
    dump: int
    passno: int


# Device types reported by lsblk that matter for disk classification
DeviceType = Literal["disk", "part", "crypt", "lvm", "other"]

# Filesystems that can be created on a blank disk
FilesystemType = Literal["ext4", "xfs", "btrfs", "f2fs", "vfat", "ntfs"]
