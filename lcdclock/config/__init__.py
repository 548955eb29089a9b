"""Configuration module for lcdclock."""

from lcdclock.config.loader import get_config_path, load_config, save_config
from lcdclock.config.schema import Config

__all__ = ["Config", "load_config", "save_config", "get_config_path"]
