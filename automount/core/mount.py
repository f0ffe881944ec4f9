"""
Mount point and mounting module.

This module asks for the target directory and attaches the selected disk to it.
"""
import os
import logging
from pathlib import Path

from automount.config import create_directory
from automount.core.system import SystemTools
from automount.utils.command import CommandRunner
from automount.utils.format import TermColors, colorize
from automount.utils.prompt import Prompter
from automount.utils.types import MountRequest
from automount.core.exceptions import InvalidMountPathError, MountConflictError, UserCancelledError

logger = logging.getLogger('automount')


def normalize_mount_point(raw: str) -> str:
    """
    Validate and normalize an operator supplied mount directory.

    Args:
        raw: Path as typed by the operator

    Returns:
        Absolute path without trailing slashes

    Raises:
        InvalidMountPathError: If the path is empty or relative
    """
    if not raw:
        raise InvalidMountPathError("Mount directory cannot be empty")
    if not os.path.isabs(raw):
        raise InvalidMountPathError(f"Mount directory must be an absolute path, got '{raw}'")
    return os.path.normpath(raw)


def ask_mount_point(prompter: Prompter, cmd_runner: CommandRunner) -> str:
    """
    Ask for the mount directory, offering to create it when missing.

    Args:
        prompter: Prompter used to talk to the operator
        cmd_runner: CommandRunner instance, consulted for simulation mode

    Returns:
        Normalized mount directory

    Raises:
        InvalidMountPathError: If the path is unusable or cannot be created
        UserCancelledError: If the operator declines to create the directory
    """
    prompter.say()
    mount_point = normalize_mount_point(
        prompter.ask("Enter the directory to mount on (e.g. /mnt/data or /data):")
    )
    path = Path(mount_point)

    if path.exists():
        if not path.is_dir():
            raise InvalidMountPathError(f"{mount_point} exists and is not a directory")
        return mount_point

    if not prompter.confirm_yes_no(f"Directory {mount_point} does not exist, create it?"):
        raise UserCancelledError(f"Directory {mount_point} was not created")

    try:
        create_directory(path, cmd_runner, "mount")
    except OSError as e:
        raise InvalidMountPathError(f"Failed to create {mount_point}: {e}")

    return mount_point


def mount_disk(request: MountRequest, system: SystemTools, colored: bool = True) -> None:
    """
    Mount the selected disk on the requested directory.

    Whatever already occupies the directory is unmounted first. A disk that is
    already mounted somewhere else is never moved.

    Args:
        request: Mount request with device, mount_point and filesystem set
        system: SystemTools instance for findmnt, mount and umount
        colored: Whether to use ANSI colors

    Raises:
        MountFailure: If unmounting the directory or mounting the disk fails
        MountConflictError: If the disk is already mounted elsewhere
    """
    device = request["device"]
    mount_point = request["mount_point"]
    filesystem = request["filesystem"]

    logger.info(f"Mounting {device} on {mount_point} ({filesystem})")

    current = system.mount_source(mount_point)
    if current:
        logger.warning(colorize(f"{mount_point} is already in use by {current}, unmounting it first",
                                TermColors.WARNING, colored))
        system.unmount(mount_point)

    targets = system.mount_targets(device)
    if targets:
        raise MountConflictError(
            f"{device} is already mounted on {', '.join(targets)}. Unmount it manually and run again"
        )

    system.mount(filesystem, device, mount_point)
    logger.info(colorize(f"Mounted {device} on {mount_point}", TermColors.SUCCESS, colored))

    usage = system.disk_usage(mount_point)
    if usage:
        logger.info(f"Current usage:\n{usage}")
