"""
Configuration module for the application.
Exports the settings instance for use throughout the application.
"""

from config.settings import settings, get_settings, Settings

__all__ = ["settings", "get_settings", "Settings"]
