"""Centralized configuration for dompetku.

Exports:
- Settings: environment-driven configuration class
- get_settings: cached accessor for the single instance

Typical use:
    from dompetku.config import get_settings
"""

from dompetku.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
