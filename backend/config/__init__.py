"""
Configuration module initialization.
Exports configuration components for use throughout the application.
"""

from config.settings import SleeperConfig, SportsbookConfig, Settings, get_settings, settings

__all__ = [
    "Settings",
    "SleeperConfig",
    "SportsbookConfig",
    "get_settings",
    "settings",
]
