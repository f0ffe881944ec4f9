"""
Filesystem detection and creation module.

This module decides whether the selected disk can be mounted as-is or must be
formatted first. An existing whole-disk filesystem is always kept.
"""
import logging
from typing import Dict, List, Tuple

from automount.core.disk import has_partitions
from automount.core.system import SystemTools
from automount.utils.format import TermColors, colorize
from automount.utils.prompt import Prompter
from automount.utils.types import FilesystemType, MountRequest
from automount.core.exceptions import AmbiguousLayoutError, InvalidSelectionError, UserCancelledError

logger = logging.getLogger('automount')

# Menu key, filesystem and description, in display order
FILESYSTEM_CHOICES: List[Tuple[str, FilesystemType, str]] = [
    ("1", "ext4", "Linux default"),
    ("2", "xfs", "high performance, common on servers"),
    ("3", "btrfs", "snapshots and subvolumes"),
    ("4", "f2fs", "tuned for flash storage such as SSD/eMMC"),
    ("5", "vfat", "widely compatible, USB sticks and EFI"),
    ("6", "ntfs", "Windows compatible, requires ntfs-3g"),
]

CANCEL_CHOICE = "0"

# Literal answer required before a disk is erased
CONFIRMATION_TOKEN = "yes"


def choose_filesystem(prompter: Prompter) -> FilesystemType:
    """
    Ask the operator which filesystem to create.

    Returns:
        The chosen filesystem type

    Raises:
        UserCancelledError: If the operator picks the cancel entry
        InvalidSelectionError: If the answer matches no entry
    """
    choices: Dict[str, FilesystemType] = {key: fs for key, fs, _ in FILESYSTEM_CHOICES}

    prompter.say("Select the filesystem to create:")
    for key, fs, description in FILESYSTEM_CHOICES:
        prompter.say(f"  [{key}] {fs:<6} ({description})")
    prompter.say(f"  [{CANCEL_CHOICE}] cancel and exit")

    answer = prompter.ask("Filesystem:")
    if answer == CANCEL_CHOICE:
        raise UserCancelledError("Cancelled by operator")
    if answer not in choices:
        raise InvalidSelectionError(f"Unsupported choice '{answer}'")

    return choices[answer]


def confirm_format(device: str, filesystem: str, prompter: Prompter, colored: bool = True) -> None:
    """
    Require the literal confirmation token before erasing the disk.

    Raises:
        UserCancelledError: If the answer is anything but the exact token
    """
    prompter.say(colorize(
        f"WARNING: the whole disk {device} is about to be formatted with mkfs.{filesystem}.",
        TermColors.WARNING, colored
    ))
    answer = prompter.ask(f"All data on this disk will be lost. Continue? ({CONFIRMATION_TOKEN}/no)")
    if answer != CONFIRMATION_TOKEN:
        raise UserCancelledError(f"'{CONFIRMATION_TOKEN}' was not entered, disk left untouched")


def prepare_filesystem(
    request: MountRequest,
    system: SystemTools,
    prompter: Prompter,
    colored: bool = True
) -> str:
    """
    Make sure the selected disk carries a filesystem.

    Args:
        request: Mount request; filesystem and formatted are filled in
        system: SystemTools instance for probing and formatting
        prompter: Prompter used to talk to the operator
        colored: Whether to use ANSI colors

    Returns:
        The filesystem type the disk will be mounted with

    Raises:
        AmbiguousLayoutError: If the disk has partitions but no whole-disk filesystem
        UserCancelledError: If the operator cancels or does not confirm
        InvalidSelectionError: If the filesystem choice is invalid
        FormatFailure: If the mkfs helper fails
    """
    device = request["device"]
    logger.info(f"Detecting filesystem on {device}")

    existing = system.probe_filesystem(device)
    if existing:
        logger.info(f"{device} already holds a {existing} filesystem, it will be mounted without formatting")
        request["filesystem"] = existing
        request["formatted"] = False
        return existing

    if has_partitions(system, device):
        raise AmbiguousLayoutError(
            f"{device} has partitions but no whole-disk filesystem. "
            "This layout is not handled automatically, please partition and format it manually"
        )

    logger.info(f"No filesystem and no partitions found on {device}, treating it as a blank disk")
    prompter.say()
    filesystem = choose_filesystem(prompter)
    confirm_format(device, filesystem, prompter, colored)

    logger.info(f"Formatting {device} as {filesystem}")
    system.format(filesystem, device)
    logger.info(colorize("Formatting complete", TermColors.SUCCESS, colored))

    request["filesystem"] = filesystem
    request["formatted"] = True
    return filesystem
