# bcachefs_exporter/utils/config.py - Configuration management
"""
Configuration management for the exporter.
Loads settings from YAML files and environment variables.
"""

import yaml
import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import logging


ENV_OVERRIDES = {
    'BCACHEFS_EXPORTER_LISTEN': 'exporter.listen',
    'BCACHEFS_EXPORTER_SYSFS_ROOT': 'sysfs.root',
    'BCACHEFS_EXPORTER_LOG_LEVEL': 'logging.level',
}


class Config:
    """
    Configuration manager for the exporter.

    Values come from DEFAULT_CONFIG, then an optional YAML file, then the
    environment variables in ENV_OVERRIDES.
    """

    DEFAULT_CONFIG = {
        'exporter': {
            'listen': '[::1]:22903',
            'metrics_path': '/metrics',
        },
        'sysfs': {
            'root': '/sys/fs/bcachefs',
        },
        'logging': {
            'level': 'INFO',
            'file': None,
        },
    }

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            environ: Environment mapping (default: os.environ)
        """
        self.logger = logging.getLogger(__name__)
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file:
            self.load_from_file(config_file)

        self.load_from_env(os.environ if environ is None else environ)

    def load_from_file(self, config_file: str):
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML file
        """
        config_path = Path(config_file)

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_file}, using defaults")
            return

        try:
            with open(config_path, 'r') as f:
                loaded_config = yaml.safe_load(f) or {}

            self._merge_config(self.config, loaded_config)
            self.logger.info(f"Loaded configuration from {config_file}")

        except Exception as e:
            self.logger.error(f"Failed to load config: {e}")
            raise

    def load_from_env(self, environ: Dict[str, str]):
        for var, key in ENV_OVERRIDES.items():
            if environ.get(var):
                self.set(key, environ[var])

    def _merge_config(self, base: Dict, override: Dict):
        """
        Recursively merge configuration dictionaries.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Args:
            key: Configuration key (e.g., 'sysfs.root')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def to_dict(self) -> Dict:
        return copy.deepcopy(self.config)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split "host:port" or "[v6 host]:port" into (host, port).

    Raises:
        ValueError: if the address has no valid port
    """
    host, sep, port = address.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {address!r}")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    elif ':' in host:
        raise ValueError(f"IPv6 listen address must be bracketed: {address!r}")
    port_no = int(port)
    if port_no > 65535:
        raise ValueError(f"port out of range: {address!r}")
    return host, port_no
