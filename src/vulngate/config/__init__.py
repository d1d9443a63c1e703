"""
Configuration management for vulngate.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (.vulngate/.env)
3. Global config file (~/.vulngate/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    global_config_path,
    load_env_file,
    load_global_config,
    load_project_config,
    project_env_path,
)
from .getters import (
    get_config,
    get_ghsa_base_url,
    get_nvd_base_url,
    get_request_timeout,
    resolve_ghsa_token,
    resolve_nvd_api_key,
)

__all__ = [
    # env_loader
    "global_config_path",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    "project_env_path",
    # getters
    "get_config",
    "get_ghsa_base_url",
    "get_nvd_base_url",
    "get_request_timeout",
    "resolve_ghsa_token",
    "resolve_nvd_api_key",
]
