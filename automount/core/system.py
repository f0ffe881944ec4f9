"""
System utility interface.

This module wraps every external program the tool depends on behind one
method each, so the classification and preparation stages never build
command lines themselves.
"""
import json
import logging
import os
import shutil
import subprocess
import time
from typing import Any, Dict, List, Optional

from automount.utils.command import CommandRunner
from automount.utils.types import BlockDevice
from automount.core.exceptions import (
    DeviceEnumerationError, FormatFailure, MountFailure, PersistenceError,
    PersistenceValidationFailure
)

logger = logging.getLogger('automount')

FSTAB_PATH = "/etc/fstab"


def _parse_block_device(entry: Dict[str, Any]) -> BlockDevice:
    """Convert one lsblk JSON object into a BlockDevice, mapping nulls to empty strings."""
    return BlockDevice(
        name=entry.get("name") or "",
        size=entry.get("size") or "",
        type=entry.get("type") or "",
        fstype=entry.get("fstype") or "",
        mountpoint=entry.get("mountpoint") or ""
    )


def _flatten_children(entries: List[Dict[str, Any]]) -> List[BlockDevice]:
    """Walk the nested lsblk children tree depth first."""
    devices: List[BlockDevice] = []
    for entry in entries:
        devices.append(_parse_block_device(entry))
        devices.extend(_flatten_children(entry.get("children") or []))
    return devices


class SystemTools:
    """
    Thin adapter around lsblk, blkid, findmnt, mkfs, mount, umount, df and /etc/fstab.

    Read-only queries always run through CommandRunner.run_real; commands that
    change the system go through CommandRunner.run and are only logged in
    simulation mode.
    """
    def __init__(self, cmd_runner: CommandRunner, fstab_path: str = FSTAB_PATH):
        self.cmd_runner = cmd_runner
        self.fstab_path = fstab_path

    def _lsblk(self, args: List[str]) -> List[Dict[str, Any]]:
        try:
            result = self.cmd_runner.run_real(["lsblk", "-J"] + args)
            data = json.loads(result.stdout or "{}")
        except subprocess.CalledProcessError as e:
            raise DeviceEnumerationError(f"lsblk failed: {(e.stderr or '').strip() or e}")
        except ValueError as e:
            raise DeviceEnumerationError(f"Could not parse lsblk output: {e}")
        return data.get("blockdevices") or []

    def enumerate_disks(self) -> List[BlockDevice]:
        """
        List top-level block devices without their partitions.

        Returns:
            Top-level devices in lsblk order, of any type
        """
        return [_parse_block_device(entry) for entry in self._lsblk(["-d", "-o", "NAME,SIZE,TYPE"])]

    def enumerate_descendants(self, device: str) -> List[BlockDevice]:
        """
        List every partition and volume stacked on a device.

        Args:
            device: Path to the disk device

        Returns:
            Descendants of the device, the device itself excluded
        """
        entries = self._lsblk(["-o", "NAME,SIZE,FSTYPE,MOUNTPOINT,TYPE", device])
        descendants: List[BlockDevice] = []
        for entry in entries:
            descendants.extend(_flatten_children(entry.get("children") or []))
        return descendants

    def _blkid_value(self, tag: str, device: str) -> str:
        # blkid exits 2 when the tag is absent
        result = self.cmd_runner.run_real(["blkid", "-o", "value", "-s", tag, device], check=False)
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def probe_filesystem(self, device: str) -> str:
        """Return the filesystem type found on the device itself, or an empty string."""
        return self._blkid_value("TYPE", device)

    def probe_uuid(self, device: str) -> str:
        """Return the filesystem UUID of the device, or an empty string."""
        return self._blkid_value("UUID", device)

    def format(self, filesystem: str, device: str) -> None:
        """
        Create a filesystem on the device, destroying its contents.

        Raises:
            FormatFailure: If the mkfs helper fails or is missing
        """
        try:
            self.cmd_runner.run([f"mkfs.{filesystem}", device])
        except subprocess.CalledProcessError as e:
            raise FormatFailure(f"Failed to create {filesystem} filesystem on {device}: {(e.stderr or '').strip() or e}")
        except FileNotFoundError:
            raise FormatFailure(f"mkfs.{filesystem} is not installed")

    def mount_source(self, path: str) -> Optional[str]:
        """Return the source currently mounted on path, or None."""
        result = self.cmd_runner.run_real(
            ["findmnt", "-n", "-o", "SOURCE", "--mountpoint", path], check=False
        )
        if result.returncode != 0:
            return None
        source = result.stdout.strip()
        return source.splitlines()[0] if source else None

    def mount_targets(self, device: str) -> List[str]:
        """Return every directory the device is mounted on."""
        result = self.cmd_runner.run_real(
            ["findmnt", "-n", "-o", "TARGET", "--source", device], check=False
        )
        if result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def mount(self, filesystem: str, device: str, path: str) -> None:
        """
        Attach a filesystem with default options.

        Raises:
            MountFailure: If mount exits non-zero
        """
        try:
            self.cmd_runner.run(["mount", "-t", filesystem, device, path])
        except subprocess.CalledProcessError as e:
            raise MountFailure(
                f"Failed to mount {device} on {path} as {filesystem}: {(e.stderr or '').strip() or e}. "
                "Check the filesystem type, the directory and kernel module support"
            )

    def unmount(self, path: str) -> None:
        """
        Detach whatever is mounted on path.

        Raises:
            MountFailure: If umount exits non-zero
        """
        try:
            self.cmd_runner.run(["umount", path])
        except subprocess.CalledProcessError as e:
            raise MountFailure(f"Failed to unmount {path}: {(e.stderr or '').strip() or e}. Please check it manually")

    def disk_usage(self, path: str) -> str:
        """Return the df report for path, or an empty string if df fails."""
        result = self.cmd_runner.run_real(["df", "-h", path], check=False)
        if result.returncode != 0:
            logger.debug(f"df failed for {path}: {result.stderr.strip()}")
            return ""
        return result.stdout.rstrip()

    def read_persistent_table(self) -> List[str]:
        """
        Read the fstab lines without their line endings.

        Raises:
            PersistenceError: If the file exists but cannot be read
        """
        if not os.path.exists(self.fstab_path):
            return []
        try:
            with open(self.fstab_path, "r") as f:
                return f.read().splitlines()
        except OSError as e:
            raise PersistenceError(f"Could not read {self.fstab_path}: {e}")

    def append_persistent_entry(self, line: str) -> None:
        """
        Append one line to fstab after taking a timestamped backup.

        Raises:
            PersistenceError: If the file cannot be backed up or written
        """
        if self.cmd_runner.simulating:
            logger.info(f"Would append to {self.fstab_path}: {line}")
            return

        try:
            prefix = ""
            if os.path.exists(self.fstab_path):
                backup = f"{self.fstab_path}.{int(time.time())}.bak"
                shutil.copy2(self.fstab_path, backup)
                logger.debug(f"Backed up {self.fstab_path} to {backup}")
                with open(self.fstab_path, "r") as f:
                    content = f.read()
                if content and not content.endswith("\n"):
                    prefix = "\n"
            with open(self.fstab_path, "a") as f:
                f.write(f"{prefix}{line}\n")
        except OSError as e:
            raise PersistenceError(f"Could not update {self.fstab_path}: {e}")

    def validate_table(self) -> None:
        """
        Ask the OS to mount every fstab entry.

        Raises:
            PersistenceValidationFailure: With mount's own error output
        """
        try:
            self.cmd_runner.run(["mount", "-a"])
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            raise PersistenceValidationFailure(
                f"mount -a reported an error, please check {self.fstab_path}:\n{output}"
            )
