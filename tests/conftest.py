# tests/conftest.py - Shared fixtures
"""
Fixtures building fake /sys/fs/bcachefs trees under tmp_path.
"""

import os
import pytest


FS_UUID = '11111111-1111-1111-1111-111111111111'

ALLOC_DEBUG = (
    "                 buckets sectors fragmented\n"
    "user                  10      20          0\n"
    "capacity             100\n"
    "\n"
)


def make_device(root, fs_uuid=FS_UUID, device_no=0, label='ssd\n', bucket_size='4 KiB',
                block='../../../../devices/pci0000:00/block/sda', alloc_debug=ALLOC_DEBUG):
    """
    Create <root>/<fs_uuid>/dev-<device_no> with the given pseudo-files.

    Passing None for a file leaves it out.
    """
    dev = root / fs_uuid / f'dev-{device_no}'
    dev.mkdir(parents=True)
    if block is not None:
        os.symlink(block, dev / 'block')
    if label is not None:
        (dev / 'label').write_text(label)
    if bucket_size is not None:
        (dev / 'bucket_size').write_text(bucket_size)
    if alloc_debug is not None:
        (dev / 'alloc_debug').write_text(alloc_debug)
    return dev


@pytest.fixture
def sysfs_root(tmp_path):
    """Empty bcachefs sysfs root"""
    root = tmp_path / 'bcachefs'
    root.mkdir()
    return root


@pytest.fixture
def single_device_root(sysfs_root):
    """Root with one filesystem holding one fully populated device"""
    make_device(sysfs_root)
    return sysfs_root
