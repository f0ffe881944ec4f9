"""
Validation utilities.

This module provides functions for validating prerequisites before any disk is touched.
"""
import os
import shutil
import logging

from automount.utils.command import CommandRunner
from automount.core.exceptions import MissingToolError, PrivilegeError

logger = logging.getLogger('automount')

# Tools every run needs
REQUIRED_TOOLS = ["lsblk", "blkid", "findmnt", "mount", "umount"]

# Formatters, only needed when a blank disk is formatted
FORMAT_TOOLS = ["mkfs.ext4", "mkfs.xfs", "mkfs.btrfs", "mkfs.f2fs", "mkfs.vfat", "mkfs.ntfs"]


def check_prerequisites(cmd_runner: CommandRunner) -> None:
    """
    Check for root privileges and required tools.

    The privilege check comes first and applies in simulation mode too.

    Args:
        cmd_runner: CommandRunner instance for executing commands

    Raises:
        PrivilegeError: If not running as root
        MissingToolError: If a required tool is not installed
    """
    if os.geteuid() != 0:
        raise PrivilegeError("This tool must be run as root, e.g. sudo automount")

    missing_tools = [tool for tool in REQUIRED_TOOLS if not shutil.which(tool)]
    if missing_tools:
        raise MissingToolError(
            f"Missing required tools: {', '.join(missing_tools)}\n"
            "Please install the necessary packages for your distribution and try again"
        )

    missing_formatters = [tool for tool in FORMAT_TOOLS if not shutil.which(tool)]
    if missing_formatters:
        logger.warning(
            f"Missing optional tools: {', '.join(missing_formatters)}\n"
            "Blank disks cannot be formatted with the corresponding filesystems."
        )
