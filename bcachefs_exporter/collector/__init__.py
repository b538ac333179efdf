# bcachefs_exporter/collector/__init__.py - Collection module
"""
Collector module for reading bcachefs statistics from sysfs.

This module provides:
- discovery.py: Filesystem and device discovery
- extractor.py: Per-device extraction and alloc_debug parsing
- units.py: Sector, bucket and byte quantity conversion
- orchestrator.py: Full collection pass
"""
