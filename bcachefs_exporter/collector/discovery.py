# bcachefs_exporter/collector/discovery.py - Filesystem and device discovery
"""
Finds mounted bcachefs filesystems and their member devices by listing
the sysfs tree:

    <root>/<fs uuid>/dev-<N>/
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List
import logging
import os
import uuid

from bcachefs_exporter.errors import DiscoveryError


SYSFS_BCACHEFS_ROOT = '/sys/fs/bcachefs'
DEVICE_PREFIX = 'dev-'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilesystemInstance:
    """
    One mounted bcachefs filesystem, identified by its external UUID.
    """
    root: Path
    uuid: uuid.UUID
    dirname: str

    @property
    def path(self) -> Path:
        return self.root / self.dirname


@dataclass(frozen=True)
class Device:
    """
    A member device of a filesystem.

    Refers to its filesystem by UUID only.
    """
    fs_uuid: uuid.UUID
    device_no: int
    path: Path


def _list_dir(path: Path) -> List[str]:
    try:
        return sorted(os.listdir(path))
    except OSError as e:
        raise DiscoveryError(f"cannot list {path}: {e.strerror}") from e


def discover_filesystems(root=SYSFS_BCACHEFS_ROOT) -> List[FilesystemInstance]:
    """
    List the filesystems under the sysfs root.

    Args:
        root: Directory holding one entry per filesystem UUID

    Returns:
        Filesystems sorted by directory name

    Raises:
        DiscoveryError: if the root is unreadable or an entry is not a UUID
    """
    root = Path(root)
    filesystems = []
    for name in _list_dir(root):
        try:
            fs_uuid = uuid.UUID(name)
        except ValueError as e:
            raise DiscoveryError(f"malformed filesystem uuid {name!r} in {root}") from e
        filesystems.append(FilesystemInstance(root=root, uuid=fs_uuid, dirname=name))

    logger.debug(f"Found {len(filesystems)} bcachefs filesystem(s) under {root}")
    return filesystems


def discover_devices(fs: FilesystemInstance) -> List[Device]:
    """
    List the member devices of a filesystem.

    Entries not starting with "dev-" are not devices and are skipped.

    Raises:
        DiscoveryError: if the directory is unreadable or a "dev-" entry
            has a non-numeric suffix
    """
    devices = []
    for name in _list_dir(fs.path):
        if not name.startswith(DEVICE_PREFIX):
            continue
        suffix = name[len(DEVICE_PREFIX):]
        if not suffix.isdigit() or not suffix.isascii():
            raise DiscoveryError(f"malformed device directory {name!r} in {fs.path}")
        devices.append(Device(fs_uuid=fs.uuid, device_no=int(suffix), path=fs.path / name))

    devices.sort(key=lambda d: d.device_no)
    logger.debug(f"Filesystem {fs.uuid}: {len(devices)} device(s)")
    return devices
