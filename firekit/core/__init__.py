"""Core: settings shared by every layer."""

from firekit.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
