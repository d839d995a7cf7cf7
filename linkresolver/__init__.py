"""Resolve placeholder links in text documents with a chat model."""

from .config import ConfigManager, ResolverSettings, get_user_config_dir  # noqa: F401
from .logging import setup_logging  # noqa: F401

__version__ = "0.1.0"
