# bcachefs_exporter/exporters/prometheus.py - prometheus_client bridge
"""
Exposes a collection pass as a prometheus_client custom collector so it can
be registered in a CollectorRegistry and rendered with generate_latest().
"""

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily
from typing import Dict, Iterator
import logging

from bcachefs_exporter.collector.discovery import SYSFS_BCACHEFS_ROOT
from bcachefs_exporter.collector.orchestrator import collect_all
from bcachefs_exporter.exporters.encoder import ALLOC_BYTES, CAPACITY


DOCUMENTATION = {
    ALLOC_BYTES: 'Bytes allocated on a bcachefs device, by data type',
    CAPACITY: 'Capacity of a bcachefs device in bytes',
}


class BcachefsCollector:
    """
    Custom collector running collect_all() on every scrape.

    Errors propagate to the registry, which aborts the scrape.
    """

    def __init__(self, root=SYSFS_BCACHEFS_ROOT):
        self.root = root
        self.logger = logging.getLogger(__name__)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families: Dict[str, GaugeMetricFamily] = {}
        for metric in collect_all(self.root):
            family = families.get(metric.name)
            if family is None:
                family = GaugeMetricFamily(
                    metric.name,
                    DOCUMENTATION.get(metric.name, metric.name),
                    labels=list(metric.labels),
                )
                families[metric.name] = family
            family.add_metric(list(metric.labels.values()), metric.value)

        self.logger.debug(f"Exposing {len(families)} metric families")
        yield from families.values()

    def describe(self):
        # Skip the collect() call the registry makes on register().
        return []


def get_metrics_text(root=SYSFS_BCACHEFS_ROOT) -> str:
    """
    Render one collection pass with prometheus_client's exposition writer.

    Returns:
        Metrics as text, including HELP and TYPE lines
    """
    registry = CollectorRegistry(auto_describe=False)
    registry.register(BcachefsCollector(root))
    return generate_latest(registry).decode('utf-8')
