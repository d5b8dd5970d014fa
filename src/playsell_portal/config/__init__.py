"""Configuration module for the PlaySell login portal."""

from .logger_config import setup_logging
from .settings import ConfigManager, LoggingConfig, PortalConfig, get_config_manager, parse_role_aliases

__all__ = ["PortalConfig", "LoggingConfig", "ConfigManager", "get_config_manager", "parse_role_aliases", "setup_logging"]
