# bcachefs_exporter/collector/units.py - Unit conversion
"""
Conversions from bcachefs sysfs units (sectors, buckets, human readable
sizes) to bytes, and the attribute reader they share with the extractor.
"""

from pathlib import Path
import re

from bcachefs_exporter.errors import InvalidNumber, MissingAttribute


# bcachefs reports sectors in 512 byte units even on 4k-sector disks.
SECTOR_SIZE = 512

# Counts and sizes are u64 in the kernel.
U64_MAX = 2**64 - 1

_UINT_RE = re.compile(r'[0-9]+')
_QUANTITY_RE = re.compile(r'([0-9]+(?:\.[0-9]+)?)\s*([a-z]*)', re.IGNORECASE)

_PREFIXES = ['k', 'm', 'g', 't', 'p', 'e']


def read_attribute(path: Path) -> str:
    """
    Read a sysfs attribute file as UTF-8.

    Raises:
        MissingAttribute: if the file is unreadable or not valid UTF-8
    """
    try:
        return path.read_text(encoding='utf-8')
    except OSError as e:
        raise MissingAttribute(path, e.strerror) from e
    except UnicodeDecodeError as e:
        raise MissingAttribute(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e


def _unit_multiplier(unit: str) -> int:
    unit = unit.lower()
    if unit in ('', 'b'):
        return 1
    if unit.endswith('b'):
        unit = unit[:-1]
    binary = unit.endswith('i')
    if binary:
        unit = unit[:-1]
    if unit not in _PREFIXES:
        raise KeyError(unit)
    exponent = _PREFIXES.index(unit) + 1
    return (1024 if binary else 1000) ** exponent


def parse_uint(text: str) -> int:
    """Parse a decimal u64, rejecting signs, whitespace and out of range values."""
    if not _UINT_RE.fullmatch(text):
        raise InvalidNumber(text, "unsigned integer")
    value = int(text)
    if value > U64_MAX:
        raise InvalidNumber(text, "unsigned integer")
    return value


def parse_byte_quantity(text: str) -> int:
    """
    Parse a human readable byte quantity such as "512 KiB", "4k" or "1.5 MB".

    Suffixes with an "i" are powers of 1024, the rest powers of 1000.
    Matching is case-insensitive and fractional bytes are truncated.

    Raises:
        InvalidNumber: if the text is empty, negative, has an unknown unit
            or exceeds u64
    """
    match = _QUANTITY_RE.fullmatch(text.strip())
    if not match:
        raise InvalidNumber(text, "byte quantity")
    mantissa, unit = match.groups()
    try:
        multiplier = _unit_multiplier(unit)
    except KeyError:
        raise InvalidNumber(text, "byte quantity") from None
    if '.' in mantissa:
        whole, frac = mantissa.split('.')
        scale = 10 ** len(frac)
        value = (int(whole) * scale + int(frac)) * multiplier // scale
    else:
        value = int(mantissa) * multiplier
    if value > U64_MAX:
        raise InvalidNumber(text, "byte quantity")
    return value


def sectors_to_bytes(text: str) -> float:
    """Convert a sector count to bytes."""
    return float(parse_uint(text) * SECTOR_SIZE)


def bucket_size(device) -> int:
    """Read the device's bucket_size file and return it in bytes."""
    return parse_byte_quantity(read_attribute(device.path / 'bucket_size'))


def buckets_to_bytes(device, text: str) -> float:
    """Convert a bucket count to bytes using the device's bucket size."""
    buckets = parse_uint(text)
    return float(buckets * bucket_size(device))
