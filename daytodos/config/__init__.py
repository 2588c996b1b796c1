"""Configuration package for day todos."""
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
