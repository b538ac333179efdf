# bcachefs_exporter/exporters/encoder.py - Metric model and text exposition encoder
"""
In-memory metric representation and its serialization to the Prometheus
text exposition format (version 0.0.4).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable
import math


CONTENT_TYPE = 'text/plain; version=0.0.4'

ALLOC_BYTES = 'bcachefs_dev_alloc_bytes'
CAPACITY = 'bcachefs_dev_capacity'


@dataclass(frozen=True)
class Metric:
    """
    A single gauge sample.

    Labels keep their insertion order, which is the order they are encoded in.
    """
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0

    def encode(self) -> str:
        return encode(self)


def escape_label_value(value: str) -> str:
    # Backslash first, otherwise the escapes added below get doubled.
    return value.replace('\\', '\\\\').replace('\n', '\\n').replace('"', '\\"')


def format_value(value: float) -> str:
    """
    Render a sample value.

    Whole numbers are written without a fractional part ("10240"),
    everything else uses Python's float repr.
    """
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def encode_labels(labels: Dict[str, str]) -> str:
    return ','.join(f'{key}="{escape_label_value(value)}"' for key, value in labels.items())


def encode(metric: Metric) -> str:
    """Encode one metric as `name{k="v",...} value\\n`."""
    return f"{metric.name}{{{encode_labels(metric.labels)}}} {format_value(metric.value)}\n"


def encode_all(metrics: Iterable[Metric]) -> str:
    return ''.join(encode(metric) for metric in metrics)
