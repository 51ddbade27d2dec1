"""Configuration for the client."""

from .settings import ClientSettings, get_settings

__all__ = ["ClientSettings", "get_settings"]
