"""Configuration module for scrobblehub."""

from .settings import HttpSettings, ObservabilitySettings, Settings, get_settings

__all__ = ["HttpSettings", "ObservabilitySettings", "Settings", "get_settings"]
