"""
Webhook routes for Facebook page deliveries.

Facebook verifies the subscription with a GET handshake, then POSTs page
events. Deliveries are acknowledged with 200 once the body parses; processing
runs inline or on a Celery worker (FACEBOOK_WEBHOOK_ASYNC).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import FacebookGraphClient
from app.commands.webhooks.facebook_command import ReceiveFacebookWebhookCommand
from app.config import get_facebook_config, get_settings
from app.db import get_db
from app.routers.utils.dependencies import get_graph_client, get_message_publisher
from app.schemas.facebook import WebhookPayload
from app.services.message_publisher import MessagePublisher
from app.tasks.process_facebook_webhook_task import process_facebook_webhook_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

SUBSCRIBE_MODE = "subscribe"


@router.get("/facebook", response_class=PlainTextResponse)
def facebook_webhook_handshake(
    mode: str = Query(default="", alias="hub.mode"),
    verify_token: str = Query(default="", alias="hub.verify_token"),
    challenge: str = Query(default="", alias="hub.challenge"),
) -> str:
    """Answer Facebook's subscription handshake with hub.challenge."""
    config = get_facebook_config()
    if (
        mode != SUBSCRIBE_MODE
        or not config.verify_token
        or verify_token != config.verify_token
    ):
        raise HTTPException(status_code=403, detail="Invalid verify token")
    return challenge


@router.post("/facebook")
async def facebook_webhook(
    request: Request,
    db: Session = Depends(get_db),
    graph: FacebookGraphClient = Depends(get_graph_client),
    publisher: MessagePublisher = Depends(get_message_publisher),
) -> dict[str, str]:
    """
    Receive a Facebook page delivery. Parse the envelope, process it inline
    or enqueue it, and return 200.
    """
    try:
        body = await request.json()
    except ValueError as e:
        logger.warning("Facebook webhook invalid JSON: %s", e)
        raise HTTPException(status_code=400, detail="Invalid JSON body") from e
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    try:
        payload = WebhookPayload.model_validate(body)
    except ValidationError as e:
        logger.warning("Facebook webhook parse error: %s", e)
        raise HTTPException(status_code=400, detail="Invalid webhook payload") from e

    if get_settings().facebook_webhook_async:
        process_facebook_webhook_task.delay(body)
        return {"status": "ok"}

    # Graph calls and the session are blocking; keep them off the event loop
    command = ReceiveFacebookWebhookCommand(db, graph=graph, publisher=publisher)
    await run_in_threadpool(command.execute, payload)
    return {"status": "ok"}
