# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Daemon Configuration Module

This module handles daemon configuration including:
- HTTP API settings
- Linear memory limits for the listing module
- Authentication settings
"""

import os
import secrets
from dataclasses import dataclass
from typing import Optional

from zipcheck.core import zcconst

# Default values
DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 8312
DEFAULT_MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50MB


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    value = os.environ.get(key, "").strip().lower()
    if not value:
        return default
    return value in ("1", "true", "yes", "on")


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    value = os.environ.get(key, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_str(key: str, default: str = "") -> str:
    """Get string value from environment variable."""
    return os.environ.get(key, "").strip() or default


@dataclass
class ZipCheckConfig:
    """Daemon configuration container.

    Attributes:
        http_host: HTTP server bind address
        http_port: HTTP server port
        max_upload_size: Maximum archive size in bytes
        initial_memory_pages: Linear memory pages at module creation
        max_memory_pages: Linear memory page limit per listing
        api_key: API key for authentication
        require_auth: Require authentication for API access
    """

    # HTTP settings
    http_host: str = DEFAULT_HTTP_HOST
    http_port: int = DEFAULT_HTTP_PORT

    # Resource limits
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    initial_memory_pages: int = zcconst.DEFAULT_INITIAL_PAGES
    max_memory_pages: int = zcconst.DEFAULT_MAX_PAGES

    # Authentication
    api_key: str = ""
    require_auth: bool = False

    # PID and log files
    pid_file: Optional[str] = None
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ZipCheckConfig":
        """Create ZipCheckConfig from environment variables.

        Returns:
            ZipCheckConfig instance populated from environment variables
        """
        return cls(
            # HTTP settings
            http_host=_get_env_str("ZC_HTTP_HOST", DEFAULT_HTTP_HOST),
            http_port=_get_env_int("ZC_HTTP_PORT", DEFAULT_HTTP_PORT),
            # Resource limits
            max_upload_size=_get_env_int("ZC_MAX_UPLOAD_SIZE", DEFAULT_MAX_UPLOAD_SIZE),
            initial_memory_pages=_get_env_int("ZC_INITIAL_MEMORY_PAGES", zcconst.DEFAULT_INITIAL_PAGES),
            max_memory_pages=_get_env_int("ZC_MAX_MEMORY_PAGES", zcconst.DEFAULT_MAX_PAGES),
            # Authentication
            api_key=_get_env_str("ZC_API_KEY", ""),
            require_auth=_get_env_bool("ZC_REQUIRE_AUTH", False),
            # Files
            pid_file=_get_env_str("ZC_PID_FILE", "") or None,
            log_file=_get_env_str("ZC_LOG_FILE", "") or None,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages. Empty if valid.
        """
        errors = []

        if not (1 <= self.http_port <= 65535):
            errors.append(f"Invalid HTTP port: {self.http_port}")

        if self.max_upload_size < 1024:  # Minimum 1KB
            errors.append(f"max_upload_size too small: {self.max_upload_size}")

        # Descriptor words are 32-bit
        if not (1 <= self.initial_memory_pages <= self.max_memory_pages <= zcconst.DEFAULT_MAX_PAGES):
            errors.append(
                f"Invalid memory pages: initial={self.initial_memory_pages}, max={self.max_memory_pages} "
                f"(limit {zcconst.DEFAULT_MAX_PAGES})"
            )

        if self.require_auth and not self.api_key:
            errors.append("API key required when require_auth is enabled")

        return errors

    def generate_api_key(self) -> str:
        """Generate a new random API key.

        Returns:
            Generated API key (32 characters)
        """
        self.api_key = secrets.token_urlsafe(24)
        return self.api_key

    @property
    def max_upload_size_mb(self) -> float:
        """Get max upload size in MB."""
        return self.max_upload_size / (1024 * 1024)


# Global daemon configuration instance
_config: Optional[ZipCheckConfig] = None


def get_config() -> ZipCheckConfig:
    """Get the current daemon configuration.

    Returns:
        Current ZipCheckConfig instance. If not initialized, initializes from env.
    """
    global _config
    if _config is None:
        _config = ZipCheckConfig.from_env()
    return _config


def reload_config() -> ZipCheckConfig:
    """Reload daemon configuration from environment."""
    global _config
    _config = ZipCheckConfig.from_env()
    return _config


def set_config(config: ZipCheckConfig) -> None:
    """Set the daemon configuration.

    Args:
        config: ZipCheckConfig instance to use
    """
    global _config
    _config = config
