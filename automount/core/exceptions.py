"""
Base exceptions for automount.

This module defines the hierarchy of exceptions used by automount.
Every fatal error aborts the run with exit code 1. Warnings are raised by
helpers and caught by the stage that called them.
"""
from typing import List, Optional


class AutomountError(Exception):
    """Base exception for automount errors"""
    pass


class PrivilegeError(AutomountError):
    """Exception raised when the tool is not run as root"""
    pass


class MissingToolError(AutomountError):
    """Exception raised when a required system utility is not installed"""
    pass


class DeviceEnumerationError(AutomountError):
    """Exception raised when block devices cannot be listed"""
    pass


class NoEligibleDiskError(AutomountError):
    """Exception raised when no disk is free for provisioning"""
    pass


class InvalidSelectionError(AutomountError):
    """Exception raised when a menu choice is non-numeric or out of range"""
    pass


class InvalidMountPathError(AutomountError):
    """Exception raised when the mount directory cannot be used"""
    pass


class AmbiguousLayoutError(AutomountError):
    """Exception raised when a disk has partitions but no whole-disk filesystem"""
    pass


class UserCancelledError(AutomountError):
    """Exception raised when the operator declines or cancels an operation"""
    pass


class FormatFailure(AutomountError):
    """Exception raised when filesystem creation fails"""
    pass


class MountConflictError(AutomountError):
    """Exception raised when the selected disk is already mounted elsewhere"""
    pass


class MountFailure(AutomountError):
    """Exception raised when a mount or unmount command fails"""
    pass


class PersistenceError(AutomountError):
    """Exception raised when /etc/fstab cannot be read or written"""
    pass


class PersistenceValidationFailure(PersistenceError):
    """Exception raised when mounting every fstab entry fails after an update"""
    pass


class AutomountWarning(AutomountError):
    """Base class for non-fatal conditions"""
    pass


class UUIDUnavailableWarning(AutomountWarning):
    """Raised when the filesystem UUID of a device cannot be resolved"""
    pass


class PersistenceConflictWarning(AutomountWarning):
    """Raised when fstab already holds an entry for the same UUID or mount point"""

    def __init__(self, message: str, lines: Optional[List[str]] = None):
        super().__init__(message)
        self.lines = lines or []
