"""
fstab registration for the mounted disk.

Entries reference the filesystem UUID so they survive device renames. An
existing entry for the same UUID or mount point is never duplicated or edited.
"""
import logging
from typing import List

from automount.core.system import SystemTools
from automount.utils.format import TermColors, colorize
from automount.utils.types import FstabEntry, MountRequest
from automount.core.exceptions import PersistenceConflictWarning, UUIDUnavailableWarning

logger = logging.getLogger('automount')

DEFAULT_OPTIONS = "defaults"

# Filesystems checked by fsck at boot, after the root filesystem
FSCK_FILESYSTEMS = ("ext2", "ext3", "ext4")

# Octal escapes fstab uses for characters that would split a field; backslash first
FSTAB_ESCAPES = [("\\", "\\134"), (" ", "\\040"), ("\t", "\\011"), ("\n", "\\012")]


def fsck_pass_number(filesystem: str) -> int:
    """Return 2 for ext filesystems and 0 (no boot check) for everything else."""
    return 2 if filesystem in FSCK_FILESYSTEMS else 0


def build_fstab_entry(uuid: str, mount_point: str, filesystem: str) -> FstabEntry:
    return FstabEntry(
        uuid=uuid,
        mount_point=mount_point,
        filesystem=filesystem,
        options=DEFAULT_OPTIONS,
        dump=0,
        passno=fsck_pass_number(filesystem)
    )


def escape_fstab_path(path: str) -> str:
    """Escape whitespace and backslashes the way fstab(5) expects, e.g. ' ' as \\040."""
    for char, code in FSTAB_ESCAPES:
        path = path.replace(char, code)
    return path


def format_fstab_line(entry: FstabEntry) -> str:
    return (
        f"UUID={entry['uuid']}  {escape_fstab_path(entry['mount_point'])}  {entry['filesystem']}  "
        f"{entry['options']}  {entry['dump']}  {entry['passno']}"
    )


def find_conflicting_lines(lines: List[str], uuid: str, mount_point: str) -> List[str]:
    """
    Find active fstab lines that reference the UUID or mount on the same directory.

    Comment and blank lines are ignored. The mount point is compared in its
    escaped form, as it appears in the file.

    Args:
        lines: fstab content split into lines
        uuid: Filesystem UUID of the new entry
        mount_point: Mount directory of the new entry, unescaped

    Returns:
        Conflicting lines in file order
    """
    target = escape_fstab_path(mount_point)
    conflicts = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        fields = stripped.split()
        if uuid in stripped or (len(fields) > 1 and fields[1] == target):
            conflicts.append(line)

    return conflicts


def resolve_uuid(system: SystemTools, device: str) -> str:
    """
    Look up the filesystem UUID of a device.

    Raises:
        UUIDUnavailableWarning: If blkid reports no UUID
    """
    uuid = system.probe_uuid(device)
    if not uuid:
        raise UUIDUnavailableWarning(
            f"Could not read the UUID of {device}, /etc/fstab was not updated. "
            "Check the blkid output and edit /etc/fstab manually"
        )
    return uuid


def check_conflicts(system: SystemTools, entry: FstabEntry) -> None:
    """
    Refuse to add an entry that duplicates an existing UUID or mount point.

    Raises:
        PersistenceConflictWarning: With the conflicting lines attached
    """
    conflicts = find_conflicting_lines(system.read_persistent_table(), entry["uuid"], entry["mount_point"])
    if conflicts:
        raise PersistenceConflictWarning(
            f"{system.fstab_path} already has an entry for UUID {entry['uuid']} "
            f"or mount point {entry['mount_point']}; not adding another one",
            conflicts
        )


def setup_fstab(request: MountRequest, system: SystemTools, colored: bool = True) -> None:
    """
    Register the mounted disk in fstab and validate the whole table.

    Args:
        request: Mount request of the disk that was just mounted
        system: SystemTools instance for blkid, fstab access and mount -a
        colored: Whether to use ANSI colors

    Raises:
        PersistenceError: If fstab cannot be read or written
        PersistenceValidationFailure: If mount -a fails
    """
    logger.info(f"Configuring {system.fstab_path} for mounting at boot")

    try:
        uuid = resolve_uuid(system, request["device"])
    except UUIDUnavailableWarning as e:
        logger.warning(colorize(str(e), TermColors.WARNING, colored))
        return

    entry = build_fstab_entry(uuid, request["mount_point"], request["filesystem"])
    line = format_fstab_line(entry)

    try:
        check_conflicts(system, entry)
    except PersistenceConflictWarning as e:
        logger.warning(colorize(str(e), TermColors.WARNING, colored))
        for conflict in e.lines:
            logger.warning(f"  {conflict}")
        logger.warning("Please review and edit the existing entry manually")
    else:
        system.append_persistent_entry(line)
        logger.info(f"Added to {system.fstab_path}:")
        logger.info(f"  {line}")

    logger.info("Validating fstab with mount -a")
    system.validate_table()
    logger.info(colorize("mount -a succeeded, the disk will be mounted at boot", TermColors.SUCCESS, colored))
