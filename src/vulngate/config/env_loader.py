"""Environment file and global YAML configuration loading."""

from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR_NAME = ".vulngate"


def global_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / "config.yml"


def project_env_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_DIR_NAME / ".env"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load KEY=VALUE pairs from a .env file, ignoring comments."""
    env_vars = {}
    if env_path.exists():
        with open(env_path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                # Remove quotes if present
                env_vars[key.strip()] = value.strip().strip("\"'")
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.vulngate/config.yml."""
    config_path = global_config_path()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping")
        return data
    return {}


def load_project_config(project_dir: Path | None = None) -> dict[str, str]:
    """Load the project .env file (defaults to the current directory)."""
    return load_env_file(project_env_path(project_dir or Path.cwd()))
