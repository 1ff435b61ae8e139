"""
Real-time notifications for newly ingested messages.

Published over Redis pub/sub so that agent dashboards and customer widgets
can pick up new messages. Best effort: a Redis failure never fails ingestion.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from uuid import UUID

import redis

from app.config import Settings, get_settings
from app.constants.facebook import (
    PUBSUB_CUSTOMER_MESSAGE_CHANNEL,
    PUBSUB_NEW_MESSAGE_CHANNEL,
)
from app.models.conversation_message import ConversationMessage
from app.schemas.conversation import ConversationMessageRead

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_pubsub_redis(settings: Optional[Settings] = None) -> redis.Redis:
    """Process-wide Redis client for pub/sub."""
    global _redis_client
    if _redis_client is None:
        settings = settings or get_settings()
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            decode_responses=True,
        )
    return _redis_client


class MessagePublisher:
    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        enabled: Optional[bool] = None,
    ) -> None:
        self.enabled = get_settings().pubsub_enabled if enabled is None else enabled
        self._redis = redis_client

    def _client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = get_pubsub_redis()
        return self._redis

    def _publish(self, channel: str, payload: dict[str, Any]) -> None:
        if not self.enabled:
            return
        try:
            self._client().publish(channel, json.dumps({channel: payload}))
        except redis.RedisError as e:
            logger.warning("Publish to %s failed: %s", channel, e)

    def publish_new_message(self, message: ConversationMessage) -> None:
        self._publish(
            PUBSUB_NEW_MESSAGE_CHANNEL,
            ConversationMessageRead.model_validate(message).model_dump(mode="json"),
        )

    def publish_to_customer_subscription(
        self, message: ConversationMessage, customer_id: Optional[UUID]
    ) -> None:
        """Notify the customer's own subscription (widget side)."""
        payload = ConversationMessageRead.model_validate(message).model_dump(
            mode="json"
        )
        payload["customer_id"] = str(customer_id) if customer_id else None
        self._publish(PUBSUB_CUSTOMER_MESSAGE_CHANNEL, payload)
