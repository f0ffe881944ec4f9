"""
automount - Interactive provisioning of an unused disk for persistent mounting

This package provides tools for selecting a blank physical disk, formatting it
when needed, mounting it and registering it in /etc/fstab.
"""

__version__ = "0.1.0"
