"""Wikimedia fetch layer: recent changes, pageviews and article metadata."""

from __future__ import annotations

from wiki_radar.sources.wikimedia import WikimediaClient

__all__ = ["WikimediaClient"]
