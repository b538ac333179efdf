# bcachefs_exporter/collector/orchestrator.py - Collection pass
"""
Runs discovery and extraction for one scrape.

Nothing is cached between calls, so concurrent scrapes share no state.
"""

from typing import List
import logging

from bcachefs_exporter.collector.discovery import (
    SYSFS_BCACHEFS_ROOT,
    discover_devices,
    discover_filesystems,
)
from bcachefs_exporter.collector.extractor import extract
from bcachefs_exporter.exporters.encoder import Metric


logger = logging.getLogger(__name__)


def collect_all(root=SYSFS_BCACHEFS_ROOT) -> List[Metric]:
    """
    Collect the metrics of every device of every filesystem.

    Any error aborts the pass; no partial result is returned.
    """
    metrics: List[Metric] = []
    for fs in discover_filesystems(root):
        for device in discover_devices(fs):
            metrics.extend(extract(device))

    logger.debug(f"Collected {len(metrics)} metric(s) from {root}")
    return metrics
