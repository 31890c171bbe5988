"""
Configuration parsing module with nginx-like syntax support.
"""

from .loader import ConfigError, ConfigLoader, find_config_file
from .schema import Config, HTTPConfig, LoggingConfig, SNMPConfig, SNMPVersion

__all__ = [
    "Config",
    "ConfigError",
    "ConfigLoader",
    "HTTPConfig",
    "LoggingConfig",
    "SNMPConfig",
    "SNMPVersion",
    "find_config_file",
]
