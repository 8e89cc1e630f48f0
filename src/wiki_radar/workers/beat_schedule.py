"""Celery Beat periodic task schedule for Wiki Radar.

This module is imported by ``celery_app.py`` and applied via
``celery_app.conf.beat_schedule``.

Schedule overview:

+---------------------------+--------------------------+----------------------------+
| Task name                 | Schedule                 | Purpose                    |
+===========================+==========================+============================+
| refresh_radar_snapshot    | Every                    | Fetch the change feed and  |
|                           | ``poll_interval_seconds``| top-viewed list, rebuild   |
|                           | (default 60 s)           | and cache the snapshot.    |
+---------------------------+--------------------------+----------------------------+
"""

from __future__ import annotations

from datetime import timedelta

from wiki_radar.config.settings import get_settings

_settings = get_settings()

#: Celery Beat schedule dict.  Applied to ``celery_app.conf.beat_schedule``
#: in ``celery_app.py``.
beat_schedule: dict[str, dict] = {  # type: ignore[type-arg]
    # ------------------------------------------------------------------
    # Periodic radar pass
    # ------------------------------------------------------------------
    "refresh_radar_snapshot": {
        "task": "wiki_radar.workers.tasks.refresh_radar_snapshot",
        "schedule": timedelta(seconds=_settings.poll_interval_seconds),
        "options": {
            # A pass that has not started before the next one is due is
            # superseded by it.
            "expires": _settings.poll_interval_seconds,
        },
    },
}
