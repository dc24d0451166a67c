"""Configuration module."""

from studio.config.constants import STUDIO, StudioConstants
from studio.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "StudioConstants", "STUDIO"]
