"""Configuration management using pydantic-settings."""

from .settings import LogweaveSettings, clear_settings_cache, get_settings

__all__ = ["LogweaveSettings", "clear_settings_cache", "get_settings"]
