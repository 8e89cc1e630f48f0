"""Wiki Radar.

Derives ranked, explainable contestation, canonization and status signals
for Wikipedia articles from the recent-changes feed and pageview data.

Subpackages:

- :mod:`wiki_radar.engine`: pure scoring engine (no I/O, no global state).
- :mod:`wiki_radar.sources`: Wikimedia fetch layer (httpx).
- :mod:`wiki_radar.core`: exceptions, logging, and the radar service that
  joins fetches to the engine.
- :mod:`wiki_radar.api`: FastAPI JSON surface for dashboards.
- :mod:`wiki_radar.workers`: Celery beat schedule for the periodic pass.
"""

__version__ = "0.1.0"
