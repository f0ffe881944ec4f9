"""Test doubles for automount tests."""

from typing import Dict, List, Optional

from automount.core.exceptions import FormatFailure, MountFailure
from automount.utils.prompt import Prompter
from automount.utils.types import BlockDevice


def make_device(
    name: str,
    type: str = "disk",
    size: str = "100G",
    fstype: str = "",
    mountpoint: str = "",
) -> BlockDevice:
    return BlockDevice(name=name, size=size, type=type, fstype=fstype, mountpoint=mountpoint)


class FakeSystem:
    """In-memory stand-in for SystemTools that records every state-changing call."""

    def __init__(
        self,
        disks: Optional[List[BlockDevice]] = None,
        descendants: Optional[Dict[str, List[BlockDevice]]] = None,
        filesystems: Optional[Dict[str, str]] = None,
        uuids: Optional[Dict[str, str]] = None,
        mounts: Optional[Dict[str, str]] = None,
        fstab: Optional[List[str]] = None,
    ):
        self.disks = disks or []
        self.descendants = descendants or {}
        self.filesystems = filesystems or {}
        self.uuids = uuids or {}
        # mount point -> source
        self.mounts = mounts or {}
        self.fstab = fstab if fstab is not None else []
        self.fstab_path = "/etc/fstab"
        self.calls: List[tuple] = []
        self.fail_format = False
        self.fail_mount = False
        self.fail_unmount = False
        self.validation_error: Optional[Exception] = None

    def enumerate_disks(self) -> List[BlockDevice]:
        return list(self.disks)

    def enumerate_descendants(self, device: str) -> List[BlockDevice]:
        return list(self.descendants.get(device, []))

    def probe_filesystem(self, device: str) -> str:
        return self.filesystems.get(device, "")

    def probe_uuid(self, device: str) -> str:
        return self.uuids.get(device, "")

    def format(self, filesystem: str, device: str) -> None:
        self.calls.append(("format", filesystem, device))
        if self.fail_format:
            raise FormatFailure(f"Failed to create {filesystem} filesystem on {device}")
        self.filesystems[device] = filesystem

    def mount_source(self, path: str) -> Optional[str]:
        return self.mounts.get(path)

    def mount_targets(self, device: str) -> List[str]:
        return [target for target, source in self.mounts.items() if source == device]

    def mount(self, filesystem: str, device: str, path: str) -> None:
        self.calls.append(("mount", filesystem, device, path))
        if self.fail_mount:
            raise MountFailure(f"Failed to mount {device} on {path}")
        self.mounts[path] = device

    def unmount(self, path: str) -> None:
        self.calls.append(("unmount", path))
        if self.fail_unmount:
            raise MountFailure(f"Failed to unmount {path}")
        self.mounts.pop(path, None)

    def disk_usage(self, path: str) -> str:
        return f"Filesystem Size Used Avail Use% Mounted on\n{self.mounts.get(path, '')} 100G 0 100G 0% {path}"

    def read_persistent_table(self) -> List[str]:
        return list(self.fstab)

    def append_persistent_entry(self, line: str) -> None:
        self.calls.append(("append", line))
        self.fstab.append(line)

    def validate_table(self) -> None:
        self.calls.append(("validate",))
        if self.validation_error is not None:
            raise self.validation_error

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


class ScriptedPrompter(Prompter):
    """Prompter fed from a fixed list of answers, capturing everything shown."""

    def __init__(self, answers: Optional[List[str]] = None):
        self.answers = list(answers or [])
        self.output: List[str] = []
        super().__init__(read_line=self._next_answer, write=self.output.append)

    def _next_answer(self) -> str:
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    @property
    def text(self) -> str:
        return "\n".join(self.output)
