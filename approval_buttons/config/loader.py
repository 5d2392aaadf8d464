"""Load and save the JSON config file."""

import json
import re
from pathlib import Path
from typing import Any

from filelock import FileLock
from loguru import logger

from approval_buttons.config.schema import Config


def get_data_dir() -> Path:
    """Get the approval-buttons data directory."""
    return Path.home() / ".approval-buttons"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_data_dir() / "config.json"


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(word.capitalize() for word in rest)


def convert_keys(data: Any) -> Any:
    """Recursively convert dict keys from camelCase to snake_case."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from a camelCase JSON file.

    Missing, empty or invalid files fall back to defaults, which still
    pick up APPROVAL_BUTTONS_* environment variables.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return Config(**convert_keys(data))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration as camelCase JSON."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with FileLock(path.with_suffix(".lock"), timeout=10):
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
