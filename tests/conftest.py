"""Shared fixtures for automount tests."""

import pytest

from tests.helpers import FakeSystem, ScriptedPrompter, make_device


@pytest.fixture
def fake_system():
    """A host with one blank disk (sda) and one system disk (sdb)."""
    return FakeSystem(
        disks=[
            make_device("sda", size="465.8G"),
            make_device("sdb", size="238.5G"),
        ],
        descendants={
            "/dev/sdb": [
                make_device("sdb1", type="part", size="512M", fstype="vfat", mountpoint="/boot/efi"),
                make_device("sdb2", type="part", size="238G", fstype="ext4", mountpoint="/"),
            ],
        },
    )


@pytest.fixture
def blank_system():
    """A host whose only disk (sda) is blank and has a UUID once formatted."""
    return FakeSystem(
        disks=[make_device("sda", size="465.8G")],
        uuids={"/dev/sda": "0b1c2d3e-4f50-6172-8394-a5b6c7d8e9f0"},
    )
