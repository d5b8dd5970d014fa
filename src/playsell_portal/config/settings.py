"""Configuration management for the PlaySell login portal.

This module provides configuration for the identity backend connection,
post-login destinations and logging, with environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from loguru import logger


def _default_destinations() -> Dict[str, str]:
    return {
        "user": "http://localhost:8080",  # playsell-user
        "admin": "http://localhost:8081",  # playsell-admin
        "leader": "http://localhost:8082",  # playsell-leader
        "gerenciador": "http://localhost:8083",  # playsell-gerenciador
    }


@dataclass
class LoggingConfig:
    """Configuration for loguru sinks."""

    level: str = "INFO"
    to_console: bool = True
    to_file: bool = False
    file_path: Path = field(default_factory=lambda: Path.cwd() / "playsell_portal.log")
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass
class PortalConfig:
    """Complete login portal configuration."""

    # Identity backend
    supabase_url: str = ""
    supabase_key: str = ""
    timeout_seconds: int = 30

    # Portal itself (used to build the password reset callback)
    portal_url: str = "http://localhost:5173"
    reset_path: str = "/reset-password"
    login_path: str = "/"

    # Password rules for the reset form
    min_password_length: int = 6

    # Role routing
    destinations: Dict[str, str] = field(default_factory=_default_destinations)
    role_aliases: Dict[str, str] = field(default_factory=dict)

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        # Identity backend
        if supabase_url := os.getenv("PLAYSELL_SUPABASE_URL"):
            self.supabase_url = supabase_url

        # The publishable key takes precedence over the legacy anon key
        if supabase_key := os.getenv("PLAYSELL_SUPABASE_PUBLISHABLE_KEY") or os.getenv("PLAYSELL_SUPABASE_ANON_KEY"):
            self.supabase_key = supabase_key

        if timeout_seconds := os.getenv("PLAYSELL_TIMEOUT_SECONDS"):
            try:
                self.timeout_seconds = int(timeout_seconds)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout_seconds}")

        if portal_url := os.getenv("PLAYSELL_PORTAL_URL"):
            self.portal_url = portal_url

        if min_password_length := os.getenv("PLAYSELL_MIN_PASSWORD_LENGTH"):
            try:
                self.min_password_length = int(min_password_length)
            except ValueError:
                logger.warning(f"Invalid minimum password length: {min_password_length}")

        # Destinations
        for role in ("user", "admin", "leader", "gerenciador"):
            if url := os.getenv(f"PLAYSELL_{role.upper()}_APP_URL"):
                self.destinations[role] = url

        if role_aliases := os.getenv("PLAYSELL_ROLE_ALIASES"):
            self.role_aliases.update(parse_role_aliases(role_aliases))

        # Logging
        if log_level := os.getenv("PLAYSELL_LOG_LEVEL"):
            self.logging.level = log_level.upper()

        if log_to_console := os.getenv("PLAYSELL_LOG_TO_CONSOLE"):
            self.logging.to_console = _parse_flag(log_to_console)

        if log_to_file := os.getenv("PLAYSELL_LOG_TO_FILE"):
            self.logging.to_file = _parse_flag(log_to_file)

        if log_file_path := os.getenv("PLAYSELL_LOG_FILE_PATH"):
            self.logging.file_path = Path(log_file_path)

    @property
    def reset_redirect_url(self) -> str:
        """Callback location embedded in password reset emails."""
        return f"{self.portal_url.rstrip('/')}{self.reset_path}"

    def get_provider_config(self) -> dict:
        """Get configuration for the identity provider client."""
        return {
            "base_url": self.supabase_url,
            "api_key": self.supabase_key,
            "timeout_seconds": self.timeout_seconds,
        }

    def is_backend_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.supabase_url:
            errors.append("Supabase URL is required")

        if not self.supabase_key:
            errors.append("Supabase key is required")

        if self.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        if self.min_password_length <= 0:
            errors.append("Minimum password length must be positive")

        if "user" not in self.destinations:
            errors.append("A destination for the 'user' role is required")

        for alias, target in self.role_aliases.items():
            if target not in self.destinations:
                errors.append(f"Role alias '{alias}' points to unknown role '{target}'")

        return len(errors) == 0, errors


def parse_role_aliases(raw: str) -> Dict[str, str]:
    """Parse ``"leader=admin,chefe=gerenciador"`` into an alias mapping."""
    aliases = {}
    for pair in raw.split(","):
        if not pair.strip():
            continue
        stored, sep, target = pair.partition("=")
        if not sep or not stored.strip() or not target.strip():
            logger.warning(f"Ignoring malformed role alias: {pair!r}")
            continue
        aliases[stored.strip().lower()] = target.strip().lower()
    return aliases


def _parse_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class ConfigManager:
    """Manages portal configuration."""

    def __init__(self):
        """Initialize configuration manager."""
        self._config: Optional[PortalConfig] = None

    def load_config(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        portal_url: Optional[str] = None,
    ) -> PortalConfig:
        """Load configuration with optional overrides.

        Args:
            supabase_url: Backend URL override
            supabase_key: Backend key override
            portal_url: Public portal URL override

        Returns:
            Configured PortalConfig instance
        """
        config = PortalConfig()

        # Apply parameter overrides
        if supabase_url:
            config.supabase_url = supabase_url

        if supabase_key:
            config.supabase_key = supabase_key

        if portal_url:
            config.portal_url = portal_url

        self._config = config
        return config

    def get_config(self) -> Optional[PortalConfig]:
        """Get current configuration."""
        return self._config

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        if not self._config:
            return False, ["No configuration loaded"]

        return self._config.validate()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager

