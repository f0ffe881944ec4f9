"""
Disk enumeration and eligibility module.

This module lists physical disks, decides which of them are free to be
provisioned and lets the operator pick one from a numbered menu.
A disk is free only when nothing stacked on it carries a filesystem or a
mount, which keeps system and boot disks out of the menu.
"""
import logging
import re
from typing import List, Tuple

from automount.core.system import SystemTools
from automount.utils.format import TermColors, colorize
from automount.utils.prompt import Prompter
from automount.utils.types import BlockDevice, DeviceType, DiskCandidate
from automount.core.exceptions import InvalidSelectionError, NoEligibleDiskError

logger = logging.getLogger('automount')

# Descendant types whose filesystem or mount makes the parent disk unusable
USAGE_DEVICE_TYPES: Tuple[DeviceType, ...] = ("part", "crypt", "lvm")


def device_path(name: str) -> str:
    """Turn an lsblk device name into its /dev path."""
    return name if name.startswith("/dev/") else f"/dev/{name}"


def is_disk_eligible(descendants: List[BlockDevice]) -> Tuple[bool, str]:
    """
    Decide whether a disk can be provisioned.

    Args:
        descendants: Partitions and volumes stacked on the disk

    Returns:
        Tuple of (eligible, reason); reason is empty for eligible disks
    """
    for child in descendants:
        if child["type"] not in USAGE_DEVICE_TYPES:
            continue
        if child["mountpoint"]:
            return False, f"{child['name']} is mounted on {child['mountpoint']}"
        if child["fstype"]:
            return False, f"{child['name']} holds a {child['fstype']} filesystem"
    return True, ""


def classify_disks(system: SystemTools) -> List[DiskCandidate]:
    """
    Enumerate whole disks and annotate each with its eligibility.

    Args:
        system: SystemTools instance used to query lsblk

    Returns:
        Disk candidates in enumeration order
    """
    candidates: List[DiskCandidate] = []

    for device in system.enumerate_disks():
        if device["type"] != "disk":
            continue

        path = device_path(device["name"])
        eligible, reason = is_disk_eligible(system.enumerate_descendants(path))
        logger.debug(f"{path}: eligible={eligible} {reason}".rstrip())

        candidates.append(DiskCandidate(
            device=device,
            path=path,
            eligible=eligible,
            reason=reason
        ))

    return candidates


def eligible_disks(candidates: List[DiskCandidate]) -> List[DiskCandidate]:
    """Keep the selectable candidates, preserving enumeration order."""
    return [candidate for candidate in candidates if candidate["eligible"]]


def display_disk_menu(candidates: List[DiskCandidate], prompter: Prompter, colored: bool = True) -> None:
    """
    Print every disk; eligible ones get dense 1-based indices, the others are marked [x].

    Args:
        candidates: Classified disks in enumeration order
        prompter: Prompter used to talk to the operator
        colored: Whether to use ANSI colors
    """
    prompter.say("=== Physical disks ===")
    prompter.say()

    index = 1
    for candidate in candidates:
        size = candidate["device"]["size"]
        if candidate["eligible"]:
            prompter.say(f"  [{index}] {candidate['path']}  size: {size}  (available)")
            index += 1
        else:
            line = f"  [x] {candidate['path']}  size: {size}  (in use: {candidate['reason']}, not selectable)"
            prompter.say(colorize(line, TermColors.WARNING, colored))


def parse_selection(choice: str, count: int) -> int:
    """
    Validate a menu answer.

    Args:
        choice: Raw operator input
        count: Number of selectable entries

    Returns:
        Zero-based index of the chosen entry

    Raises:
        InvalidSelectionError: If the input is not a number between 1 and count
    """
    if not re.fullmatch(r"[0-9]+", choice):
        raise InvalidSelectionError(f"Input '{choice}' is not a number")

    number = int(choice)
    if number < 1 or number > count:
        raise InvalidSelectionError(f"Selection {number} is outside the range 1-{count}")

    return number - 1


def select_disk(system: SystemTools, prompter: Prompter, colored: bool = True) -> str:
    """
    Show the disk menu and return the device path the operator picked.

    Args:
        system: SystemTools instance used to query lsblk
        prompter: Prompter used to talk to the operator
        colored: Whether to use ANSI colors

    Returns:
        Path of the selected disk, e.g. /dev/sda

    Raises:
        NoEligibleDiskError: If every disk is in use
        InvalidSelectionError: If the answer is not a valid index
    """
    candidates = classify_disks(system)
    display_disk_menu(candidates, prompter, colored)

    available = eligible_disks(candidates)
    if not available:
        raise NoEligibleDiskError(
            "No free disk found. Every disk already has partitions in use "
            "or lsblk returned unexpected output"
        )

    prompter.say()
    choice = prompter.ask("Select the disk to mount:")
    selected = available[parse_selection(choice, len(available))]["path"]

    logger.info(f"Selected disk: {selected}")
    return selected


def has_partitions(system: SystemTools, device: str) -> bool:
    """Return True when lsblk reports at least one partition on the device."""
    return any(child["type"] == "part" for child in system.enumerate_descendants(device))
