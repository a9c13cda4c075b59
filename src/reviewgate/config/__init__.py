"""Configuration management."""

from reviewgate.config.loader import load_config
from reviewgate.config.settings import Settings

__all__ = ["Settings", "load_config"]
