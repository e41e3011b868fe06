"""
Configuration module for GitLab Mirror.

This module provides the run configuration, the optional JSON configuration
file and the validation applied before any traversal begins.
"""

import os
import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any

from .exceptions import ConfigurationError


# Default configuration values
DEFAULT_CONFIG = {
    "gitlab_url": "https://gitlab.com",
    "destination": ".",
    "transport": "ssh",
    "per_page": 100,      # GitLab caps per_page at 100
    "api_timeout": 30,    # seconds per API request
    "workers": 1,         # concurrent repository syncs within a group
}

MAX_PER_PAGE = 100


class TransportPreference(Enum):
    """Which clone URL to use for the whole run."""
    SSH = "ssh"
    HTTPS = "https"


@dataclass
class MirrorConfig:
    """Settings for one mirror run."""

    group: str
    token: Optional[str] = None
    gitlab_url: str = DEFAULT_CONFIG["gitlab_url"]
    destination: str = DEFAULT_CONFIG["destination"]
    transport: TransportPreference = TransportPreference.SSH
    per_page: int = DEFAULT_CONFIG["per_page"]
    api_timeout: float = DEFAULT_CONFIG["api_timeout"]
    workers: int = DEFAULT_CONFIG["workers"]
    manual: bool = False
    dry_run: bool = False
    quiet: bool = False

    def validate(self) -> None:
        """
        Check the configuration before a run.

        Raises:
            ConfigurationError: if a required value is missing or out of range
        """
        if not self.group or not str(self.group).strip():
            raise ConfigurationError("group ID or path is required")
        if not validate_gitlab_url(self.gitlab_url):
            raise ConfigurationError(f"invalid GitLab URL: {self.gitlab_url!r} (expected http:// or https://)")
        if not self.manual and not validate_access_token(self.token):
            raise ConfigurationError(
                "access token is required for API discovery mode "
                "(use --token or GITLAB_TOKEN, or --manual-mode)"
            )
        if not validate_destination_path(self.destination):
            raise ConfigurationError(f"invalid destination path: {self.destination!r}")
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ConfigurationError(f"per_page must be between 1 and {MAX_PER_PAGE}")
        if self.workers < 1:
            raise ConfigurationError("workers must be at least 1")
        if self.api_timeout <= 0:
            raise ConfigurationError("api_timeout must be positive")


class ConfigFile:
    """JSON file holding default option values."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file (optional)
        """
        self.config_file = config_file or self._get_default_config_path()
        self.config = self._load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path."""
        return os.path.join(os.path.expanduser("~"), ".gitlab_mirror_config.json")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file."""
        if not os.path.exists(self.config_file):
            return {}
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigurationError(f"cannot read config file {self.config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"config file {self.config_file} must contain a JSON object")
        return data

    def save_config(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if successful, False otherwise
        """
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2)
            return True
        except IOError:
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value, falling back to DEFAULT_CONFIG then ``default``."""
        if key in self.config:
            return self.config[key]
        return DEFAULT_CONFIG.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value


def validate_gitlab_url(url: Optional[str]) -> bool:
    """
    Validate GitLab URL format.

    Args:
        url: GitLab URL to validate

    Returns:
        True if valid, False otherwise
    """
    if not url:
        return False

    url = url.lower()
    return url.startswith(('http://', 'https://')) and len(url.split('://', 1)[1].strip('/')) > 0


def validate_access_token(token: Optional[str]) -> bool:
    """
    Validate GitLab access token format.

    GitLab personal access tokens typically start with 'glpat-',
    but any non-empty string is accepted.
    """
    if not token:
        return False
    return len(token.strip()) > 0


def validate_destination_path(path: Optional[str]) -> bool:
    """
    Validate destination path.

    Args:
        path: Destination path to validate

    Returns:
        True if the path is usable as an output root, False otherwise
    """
    if not path:
        return False

    try:
        path_obj = Path(path)
        return not path_obj.exists() or path_obj.is_dir()
    except (OSError, ValueError):
        return False
