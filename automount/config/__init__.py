"""
Host configuration helpers.

This module provides common utilities shared by the mount and fstab stages.
"""
import logging
from pathlib import Path
from typing import Optional

from automount.utils.command import CommandRunner

logger = logging.getLogger('automount')


def create_directory(
    path: Path,
    cmd_runner: CommandRunner,
    description: Optional[str] = None
) -> None:
    """
    Create a directory with its parents, or log that it would be created in simulation mode.

    Args:
        path: Directory path to create
        cmd_runner: CommandRunner instance for executing commands
        description: Optional description of the directory for logging

    Raises:
        OSError: If the directory cannot be created
    """
    desc = f"{description} " if description else ""

    if cmd_runner.simulating:
        logger.info(f"Would create {desc}directory: {path}")
    else:
        path.mkdir(exist_ok=True, parents=True)
        logger.info(f"Created {desc}directory: {path}")
