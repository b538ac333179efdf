# bcachefs_exporter/exporters/__init__.py - Exporters module
"""
Exporters for serving collected metrics.

This module provides:
- encoder.py: Metric model and text exposition encoder
- prometheus.py: prometheus_client collector bridge
- http_handler.py: HTTP scrape endpoint
"""
