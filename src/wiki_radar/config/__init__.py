"""Configuration package for Wiki Radar.

Re-exports the settings symbols so that callers can write::

    from wiki_radar.config import get_settings
"""

from __future__ import annotations

from wiki_radar.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
