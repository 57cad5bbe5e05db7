"""Utilities for Shell Container."""

from .config_manager import ConfigManager

__all__ = [
    'ConfigManager'
]
