"""Configuration getters and secret resolution."""

import logging
import os
from pathlib import Path
from typing import Any

from vulngate.resolver.settings import DEFAULT_GHSA_API_BASE_URL, DEFAULT_NVD_API_BASE_URL

from .env_loader import load_global_config, load_project_config

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 15.0


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        project_dir: Optional project directory
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    project_config = load_project_config(project_dir)
    if project_config.get(key):
        return project_config[key]

    global_config = load_global_config()
    if key in global_config and global_config[key] is not None:
        return global_config[key]

    return default


def get_nvd_base_url(project_dir: Path | None = None) -> str:
    """Get the NVD CVE API base URL."""
    return str(get_config("VULNGATE_NVD_API_BASE_URL", project_dir, DEFAULT_NVD_API_BASE_URL))


def get_ghsa_base_url(project_dir: Path | None = None) -> str:
    """Get the GitHub advisory API base URL."""
    return str(get_config("VULNGATE_GHSA_API_BASE_URL", project_dir, DEFAULT_GHSA_API_BASE_URL))


def get_request_timeout(project_dir: Path | None = None) -> float:
    """Get the per-request HTTP timeout in seconds."""
    raw = get_config("VULNGATE_REQUEST_TIMEOUT", project_dir, DEFAULT_REQUEST_TIMEOUT)
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"VULNGATE_REQUEST_TIMEOUT must be a number, got {raw!r}") from exc
    if timeout <= 0:
        raise ValueError("VULNGATE_REQUEST_TIMEOUT must be positive")
    return timeout


def _read_secret_file(path: str, label: str) -> str:
    trimmed = path.strip()
    value = Path(trimmed).read_text(encoding="utf-8").strip()
    if not value:
        raise ValueError(f"{label} file {trimmed!r} is empty")
    return value


def resolve_nvd_api_key(key_file: str | None = None, project_dir: Path | None = None) -> str:
    """
    Resolve the NVD API key.

    A key file, when given, must exist and be non-empty. Otherwise the
    ``NVD_API_KEY`` setting is used; an empty result means anonymous access.
    """
    if key_file and key_file.strip():
        return _read_secret_file(key_file, "NVD API key")
    return str(get_config("NVD_API_KEY", project_dir, "")).strip()


def resolve_ghsa_token(token_file: str | None = None, project_dir: Path | None = None) -> str:
    """
    Resolve the GitHub advisory token.

    Falls back from the token file to ``GHSA_TOKEN`` and then ``GITHUB_TOKEN``.
    """
    if token_file and token_file.strip():
        return _read_secret_file(token_file, "GHSA token")
    token = str(get_config("GHSA_TOKEN", project_dir, "")).strip()
    if token:
        return token
    logger.debug("GHSA_TOKEN not set, falling back to GITHUB_TOKEN")
    return str(get_config("GITHUB_TOKEN", project_dir, "")).strip()
