"""Configuration package exposing the composed `Settings` singleton."""

from .settings import Settings, create_settings, settings

__all__ = ["Settings", "create_settings", "settings"]
