"""Celery application for asynchronous webhook processing."""

from __future__ import annotations

from celery import Celery
from celery.signals import worker_process_init

from app.config import get_facebook_config, get_settings

settings = get_settings()

celery_app = Celery(
    settings.app_name,
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.process_facebook_webhook_task"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)


@worker_process_init.connect
def _require_facebook_config(**_kwargs) -> None:
    """Refuse to start a worker process without the Facebook app secret."""
    get_facebook_config()
