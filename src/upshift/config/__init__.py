"""Configuration management."""

from upshift.config.loader import load_config
from upshift.config.settings import Settings

__all__ = ["Settings", "load_config"]
