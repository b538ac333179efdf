# bcachefs_exporter/__init__.py - Package root
"""
Prometheus exporter for bcachefs per-device allocation statistics.

Reads /sys/fs/bcachefs and serves the result in the text exposition format.
"""

__version__ = "0.1.0"
