"""Utility modules."""

from .config import Settings, load_config
from .logging import setup_logging

__all__ = ["Settings", "load_config", "setup_logging"]
