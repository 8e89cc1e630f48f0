"""Celery application factory for Wiki Radar.

Configures the broker, result backend, serialization and timezone.  All
configuration values are sourced from ``Settings`` so that no
environment-specific values are hard-coded here.

Usage (starting a worker)::

    celery -A wiki_radar.workers.celery_app worker --loglevel=info

Usage (starting the Beat scheduler that drives the periodic pass)::

    celery -A wiki_radar.workers.celery_app beat --loglevel=info
"""

from __future__ import annotations

from celery import Celery
from celery.signals import worker_process_init
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load .env values into os.environ before settings are first read
# ---------------------------------------------------------------------------

load_dotenv()

from wiki_radar.config.settings import get_settings  # noqa: E402
from wiki_radar.core.logging_config import configure_logging  # noqa: E402

settings = get_settings()

#: The global Celery application instance.
celery_app = Celery(
    "wiki_radar",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "wiki_radar.workers.tasks",
    ],
)

# ---------------------------------------------------------------------------
# Core configuration
# ---------------------------------------------------------------------------

celery_app.conf.update(
    # JSON only: task results are snapshot summaries.
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    # A pass result is stale after one more poll interval.
    result_expires=3_600,
    # A pass fetches two endpoints; anything slower than this is stuck.
    task_soft_time_limit=120,
    task_time_limit=180,
    task_max_retries=3,
    beat_schedule_filename="celerybeat-schedule",
)

# Import and apply the Beat schedule after the app is configured.
from wiki_radar.workers.beat_schedule import beat_schedule  # noqa: E402

celery_app.conf.beat_schedule = beat_schedule


# ---------------------------------------------------------------------------
# Logging in forked worker processes
# ---------------------------------------------------------------------------
@worker_process_init.connect
def _configure_worker_logging(**kwargs: object) -> None:  # noqa: ARG001
    """Apply the structlog configuration inside each forked worker process."""
    configure_logging(get_settings().log_level)
