"""FastAPI dependency injection providers.

Route handlers receive their settings and Wikimedia client through these
providers so that tests can swap them via ``app.dependency_overrides``::

    app.dependency_overrides[get_wikimedia_client] = lambda: fake_client
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from wiki_radar.config.settings import Settings, get_settings
from wiki_radar.sources.wikimedia import WikimediaClient


def get_radar_settings() -> Settings:
    """Return the cached application settings."""
    return get_settings()


def get_wikimedia_client(
    settings: Annotated[Settings, Depends(get_radar_settings)],
) -> WikimediaClient:
    """Return a Wikimedia client bound to the current settings.

    The client opens a short-lived HTTP connection per upstream call, so a
    fresh instance per request holds no sockets between requests.
    """
    return WikimediaClient(settings=settings)


SettingsDep = Annotated[Settings, Depends(get_radar_settings)]
ClientDep = Annotated[WikimediaClient, Depends(get_wikimedia_client)]
