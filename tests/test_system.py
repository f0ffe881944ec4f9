"""Tests for the system utility adapter."""

import json
import subprocess
from unittest.mock import Mock

import pytest

from automount.core.exceptions import (
    DeviceEnumerationError,
    FormatFailure,
    MountFailure,
    PersistenceValidationFailure,
)
from automount.core.system import SystemTools
from automount.utils.command import CommandRunner, SimulationMode


def completed(cmd, stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=cmd, returncode=returncode, stdout=stdout, stderr=stderr)


def called_process_error(cmd, stderr="boom"):
    return subprocess.CalledProcessError(1, cmd, output="", stderr=stderr)


@pytest.fixture
def runner():
    mock_runner = Mock(spec=CommandRunner)
    mock_runner.simulating = False
    return mock_runner


@pytest.fixture
def system(runner, tmp_path):
    return SystemTools(runner, fstab_path=str(tmp_path / "fstab"))


LSBLK_TREE = {
    "blockdevices": [
        {
            "name": "sdb", "size": "238.5G", "fstype": None, "mountpoint": None, "type": "disk",
            "children": [
                {"name": "sdb1", "size": "512M", "fstype": "vfat", "mountpoint": "/boot/efi", "type": "part"},
                {
                    "name": "sdb2", "size": "238G", "fstype": "crypto_LUKS", "mountpoint": None, "type": "part",
                    "children": [
                        {"name": "root", "size": "238G", "fstype": "ext4", "mountpoint": "/", "type": "crypt"}
                    ],
                },
            ],
        }
    ]
}


class TestEnumeration:
    """Test lsblk parsing."""

    def test_enumerate_disks(self, system, runner):
        runner.run_real.return_value = completed([], json.dumps({"blockdevices": [
            {"name": "sda", "size": "465.8G", "type": "disk"},
            {"name": "sr0", "size": "1024M", "type": "rom"},
        ]}))

        disks = system.enumerate_disks()

        assert [(d["name"], d["size"], d["type"]) for d in disks] == [
            ("sda", "465.8G", "disk"),
            ("sr0", "1024M", "rom"),
        ]
        assert disks[0]["fstype"] == ""
        assert disks[0]["mountpoint"] == ""
        runner.run_real.assert_called_once_with(["lsblk", "-J", "-d", "-o", "NAME,SIZE,TYPE"])

    def test_enumerate_descendants_flattens_tree(self, system, runner):
        runner.run_real.return_value = completed([], json.dumps(LSBLK_TREE))

        descendants = system.enumerate_descendants("/dev/sdb")

        assert [(d["name"], d["type"], d["fstype"], d["mountpoint"]) for d in descendants] == [
            ("sdb1", "part", "vfat", "/boot/efi"),
            ("sdb2", "part", "crypto_LUKS", ""),
            ("root", "crypt", "ext4", "/"),
        ]

    def test_disk_without_children(self, system, runner):
        runner.run_real.return_value = completed([], json.dumps({"blockdevices": [
            {"name": "sda", "size": "465.8G", "fstype": None, "mountpoint": None, "type": "disk"}
        ]}))

        assert system.enumerate_descendants("/dev/sda") == []

    def test_lsblk_failure(self, system, runner):
        runner.run_real.side_effect = called_process_error(["lsblk"], "lsblk: not a block device")

        with pytest.raises(DeviceEnumerationError, match="not a block device"):
            system.enumerate_disks()

    def test_invalid_json(self, system, runner):
        runner.run_real.return_value = completed([], "not json")

        with pytest.raises(DeviceEnumerationError, match="parse"):
            system.enumerate_disks()


class TestProbing:
    """Test blkid and findmnt queries."""

    def test_probe_filesystem(self, system, runner):
        runner.run_real.return_value = completed([], "xfs\n")

        assert system.probe_filesystem("/dev/sda") == "xfs"
        runner.run_real.assert_called_once_with(
            ["blkid", "-o", "value", "-s", "TYPE", "/dev/sda"], check=False
        )

    def test_probe_without_signature(self, system, runner):
        runner.run_real.return_value = completed([], "", returncode=2)

        assert system.probe_filesystem("/dev/sda") == ""
        assert system.probe_uuid("/dev/sda") == ""

    def test_mount_source(self, system, runner):
        runner.run_real.return_value = completed([], "/dev/sdc1\n")

        assert system.mount_source("/data") == "/dev/sdc1"

    def test_mount_source_when_nothing_mounted(self, system, runner):
        runner.run_real.return_value = completed([], "", returncode=1)

        assert system.mount_source("/data") is None

    def test_mount_targets(self, system, runner):
        runner.run_real.return_value = completed([], "/media/usb\n/srv/usb\n")

        assert system.mount_targets("/dev/sda") == ["/media/usb", "/srv/usb"]


class TestStateChanges:
    """Test commands that modify the system."""

    def test_format(self, system, runner):
        system.format("ext4", "/dev/sda")

        runner.run.assert_called_once_with(["mkfs.ext4", "/dev/sda"])

    def test_format_failure(self, system, runner):
        runner.run.side_effect = called_process_error(["mkfs.xfs"])

        with pytest.raises(FormatFailure, match="xfs"):
            system.format("xfs", "/dev/sda")

    def test_missing_formatter(self, system, runner):
        runner.run.side_effect = FileNotFoundError("mkfs.f2fs")

        with pytest.raises(FormatFailure, match="not installed"):
            system.format("f2fs", "/dev/sda")

    def test_mount(self, system, runner):
        system.mount("xfs", "/dev/sda", "/data")

        runner.run.assert_called_once_with(["mount", "-t", "xfs", "/dev/sda", "/data"])

    def test_mount_failure(self, system, runner):
        runner.run.side_effect = called_process_error(["mount"])

        with pytest.raises(MountFailure):
            system.mount("xfs", "/dev/sda", "/data")

    def test_unmount_failure(self, system, runner):
        runner.run.side_effect = called_process_error(["umount"], "target is busy")

        with pytest.raises(MountFailure, match="target is busy"):
            system.unmount("/data")

    def test_validate_table_failure_is_verbatim(self, system, runner):
        runner.run.side_effect = called_process_error(["mount", "-a"], "mount: /data: can't find UUID=1234.")

        with pytest.raises(PersistenceValidationFailure, match="can't find UUID=1234"):
            system.validate_table()


class TestPersistentTable:
    """Test fstab file access."""

    def test_missing_table_reads_empty(self, system):
        assert system.read_persistent_table() == []

    def test_append_adds_newline_and_backup(self, system, tmp_path):
        fstab = tmp_path / "fstab"
        fstab.write_text("UUID=1111 / ext4 defaults 0 1")

        system.append_persistent_entry("UUID=2222  /data  xfs  defaults  0  0")

        assert system.read_persistent_table() == [
            "UUID=1111 / ext4 defaults 0 1",
            "UUID=2222  /data  xfs  defaults  0  0",
        ]
        backups = list(tmp_path.glob("fstab.*.bak"))
        assert len(backups) == 1
        assert backups[0].read_text() == "UUID=1111 / ext4 defaults 0 1"

    def test_append_in_simulation_leaves_file_untouched(self, system, runner, tmp_path):
        runner.simulating = True
        fstab = tmp_path / "fstab"
        fstab.write_text("UUID=1111 / ext4 defaults 0 1\n")

        system.append_persistent_entry("UUID=2222  /data  xfs  defaults  0  0")

        assert fstab.read_text() == "UUID=1111 / ext4 defaults 0 1\n"


def test_queries_run_for_real_in_simulation(tmp_path):
    cmd_runner = CommandRunner(SimulationMode.SIMULATE, colored_output=False)
    system = SystemTools(cmd_runner, fstab_path=str(tmp_path / "fstab"))

    with pytest.MonkeyPatch.context() as mp:
        fake_run = Mock(return_value=completed([], "ext4\n"))
        mp.setattr(subprocess, "run", fake_run)

        assert system.probe_filesystem("/dev/sda") == "ext4"
        system.format("ext4", "/dev/sda")

    fake_run.assert_called_once()
    assert cmd_runner.commands_run == [{"command": ["mkfs.ext4", "/dev/sda"], "simulated": True}]
