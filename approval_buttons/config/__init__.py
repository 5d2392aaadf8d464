"""Configuration module for approval-buttons."""

from approval_buttons.config.loader import load_config, get_config_path
from approval_buttons.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
