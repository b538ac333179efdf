# bcachefs_exporter/collector/extractor.py - Per-device metric extraction
"""
Turns the pseudo-files of one bcachefs device into metrics.

Files read under <root>/<fs uuid>/dev-<N>/:
- block: symlink to the block device, its last path segment is the device name
- label: user-assigned label
- bucket_size: human readable bucket size
- alloc_debug: allocation table, parsed by parse_alloc_table()
"""

from dataclasses import dataclass
from typing import Dict, List, Union
import logging
import os

from bcachefs_exporter.collector.units import (
    buckets_to_bytes,
    parse_uint,
    read_attribute,
    sectors_to_bytes,
)
from bcachefs_exporter.errors import MissingLink, UnexpectedFormat
from bcachefs_exporter.exporters.encoder import ALLOC_BYTES, CAPACITY, Metric


ALLOC_HEADER = ['buckets', 'sectors', 'fragmented']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypedRow:
    """
    Allocation of one data type on the device.

    Only type and sectors are exported; buckets and fragmented are
    validated but unused.
    """
    type: str
    buckets: int
    sectors: str
    fragmented: int


@dataclass(frozen=True)
class CapacityRow:
    """Device capacity in buckets."""
    buckets: str


AllocationRow = Union[TypedRow, CapacityRow]


def parse_alloc_table(text: str) -> List[AllocationRow]:
    """
    Parse the contents of an alloc_debug file.

    The first non-empty line must be the header "buckets sectors fragmented".
    Following lines are either "<type> <buckets> <sectors> <fragmented>" or
    "capacity <buckets>". Parsing stops at the first empty line.

    Raises:
        UnexpectedFormat: on a missing or different header, or any other row shape
        InvalidNumber: if buckets or fragmented of a typed row are not integers
    """
    lines = iter(text.splitlines())

    header = None
    for line in lines:
        if line.strip():
            header = line
            break
    if header is None:
        raise UnexpectedFormat(text, "missing alloc_debug header")
    if header.split() != ALLOC_HEADER:
        raise UnexpectedFormat(header, "unexpected alloc_debug header")

    rows: List[AllocationRow] = []
    for line in lines:
        if not line.strip():
            break
        cells = line.split()
        if len(cells) == 4:
            type_, buckets, sectors, fragmented = cells
            rows.append(TypedRow(
                type=type_,
                buckets=parse_uint(buckets),
                sectors=sectors,
                fragmented=parse_uint(fragmented),
            ))
        elif len(cells) == 2 and cells[0] == 'capacity':
            rows.append(CapacityRow(buckets=cells[1]))
        else:
            raise UnexpectedFormat(line)
    return rows


def resolve_device_name(device) -> str:
    """Return the block device name the device's "block" symlink points at."""
    link = device.path / 'block'
    try:
        target = os.readlink(link)
    except OSError as e:
        raise MissingLink(link, e.strerror) from e
    name = os.path.basename(target.rstrip('/'))
    if not name:
        raise MissingLink(link, f"link target {target!r} has no final segment")
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        raise MissingLink(link, f"link target {target!r} is not valid UTF-8") from None
    return name


def read_label(device) -> str:
    return read_attribute(device.path / 'label').strip()


def device_labels(device) -> Dict[str, str]:
    """Labels shared by every metric of the device, in encoding order."""
    return {
        'fs': str(device.fs_uuid),
        'device_no': str(device.device_no),
        'device': resolve_device_name(device),
        'label': read_label(device),
    }


def extract(device) -> List[Metric]:
    """
    Build the metrics of one device.

    Returns one bcachefs_dev_alloc_bytes metric per data type and one
    bcachefs_dev_capacity metric per capacity row, in table order.
    """
    base_labels = device_labels(device)
    rows = parse_alloc_table(read_attribute(device.path / 'alloc_debug'))

    metrics = []
    for row in rows:
        if isinstance(row, TypedRow):
            labels = dict(base_labels)
            labels['type'] = row.type
            metrics.append(Metric(ALLOC_BYTES, labels, sectors_to_bytes(row.sectors)))
        else:
            metrics.append(Metric(CAPACITY, dict(base_labels), buckets_to_bytes(device, row.buckets)))

    logger.debug(f"{device.path}: {len(metrics)} metric(s)")
    return metrics
