"""
Message Queue Service - Celery app used to hand records to analysis.

The analysis workers run elsewhere and register ``prism.analyze_transcript``.
This process only publishes to the broker (Redis by default).
"""
from celery import Celery
from ..core.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

ANALYZE_TASK_NAME = "prism.analyze_transcript"
ANALYSIS_QUEUE = "analysis"

celery_app = Celery(
    "prism",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_routes={
        ANALYZE_TASK_NAME: {"queue": ANALYSIS_QUEUE},
    },
    task_default_queue="default",
)
