# bcachefs_exporter/errors.py - Exception hierarchy
"""
Errors raised while discovering and extracting bcachefs statistics.

Every error aborts the whole collection pass; nothing is retried or skipped.
"""

from typing import Optional


class ExporterError(Exception):
    """Base class for all exporter errors."""


class DiscoveryError(ExporterError):
    """Sysfs root or filesystem directory unreadable, or an entry name is malformed."""


class ExtractionError(ExporterError):
    """A device's pseudo-files could not be turned into metrics."""


class MissingLink(ExtractionError):
    """The device's block symlink is absent or unresolvable."""

    def __init__(self, path, reason: Optional[str] = None):
        self.path = str(path)
        message = f"cannot resolve block device link {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingAttribute(ExtractionError):
    """An expected device attribute file is absent."""

    def __init__(self, path, reason: Optional[str] = None):
        self.path = str(path)
        message = f"cannot read {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnexpectedFormat(ExtractionError):
    """alloc_debug header or row does not match the known layout."""

    def __init__(self, line: str, reason: str = "can't handle line"):
        self.line = line
        super().__init__(f"{reason}: {line!r}")


class InvalidNumber(ExtractionError):
    """Text that should hold a count or byte quantity does not parse."""

    def __init__(self, text: str, what: str = "number"):
        self.text = text
        super().__init__(f"invalid {what}: {text!r}")
