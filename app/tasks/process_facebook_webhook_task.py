"""Task for processing Facebook webhook deliveries asynchronously."""

from __future__ import annotations

from typing import Dict

from pydantic import ValidationError

from app.commands.webhooks.facebook_command import ReceiveFacebookWebhookCommand
from app.db import db_session
from app.infra.celery_app import celery_app
from app.infra.logging_config import get_logger
from app.schemas.facebook import WebhookPayload

logger = get_logger("facebook_webhook_task")


@celery_app.task(
    name="app.tasks.process_facebook_webhook_task.process_facebook_webhook_task"
)
def process_facebook_webhook_task(payload: Dict) -> int:
    """
    Run a webhook delivery through every Facebook integration.

    The webhook route acknowledges immediately and enqueues the raw body here
    when FACEBOOK_WEBHOOK_ASYNC is enabled.

    Args:
        payload: The delivery body as received ({object, entry[]}).

    Returns:
        int: Number of integrations that processed the delivery (0 on an
            invalid payload).
    """
    try:
        webhook = WebhookPayload.model_validate(payload)
    except ValidationError as e:
        logger.warning("Invalid Facebook webhook payload: %s", e)
        return 0

    with db_session() as db:
        processed = ReceiveFacebookWebhookCommand(db).execute(webhook)
    logger.info("Facebook webhook processed by %s integration(s)", processed)
    return processed
