"""Tests for new-message notifications."""

import json
import uuid
from unittest.mock import MagicMock

import redis

from app.schemas.conversation import MessageChannelData
from app.services.conversation_message_service import ConversationMessageService
from app.services.message_publisher import MessagePublisher


def _message(db, conversation, customer):
    return ConversationMessageService(db).create_message(
        conversation.id, customer.id, "hello", MessageChannelData(message_id="m1")
    )


def test_disabled_publisher_does_not_touch_redis(
    db, setup_messenger_conversation, setup_customer
):
    client = MagicMock()
    publisher = MessagePublisher(redis_client=client, enabled=False)
    message = _message(db, setup_messenger_conversation, setup_customer)

    publisher.publish_new_message(message)
    publisher.publish_to_customer_subscription(message, setup_customer.id)

    client.publish.assert_not_called()


def test_publish_new_message_payload(db, setup_messenger_conversation, setup_customer):
    client = MagicMock()
    message = _message(db, setup_messenger_conversation, setup_customer)

    MessagePublisher(redis_client=client, enabled=True).publish_new_message(message)

    channel, raw = client.publish.call_args.args
    assert channel == "conversationMessageInserted"
    payload = json.loads(raw)["conversationMessageInserted"]
    assert payload["id"] == str(message.id)
    assert payload["content"] == "hello"


def test_publish_to_customer_subscription_carries_customer(
    db, setup_messenger_conversation, setup_customer
):
    client = MagicMock()
    message = _message(db, setup_messenger_conversation, setup_customer)
    customer_id = uuid.uuid4()

    MessagePublisher(redis_client=client, enabled=True).publish_to_customer_subscription(
        message, customer_id
    )

    channel, raw = client.publish.call_args.args
    assert channel == "conversationClientMessageInserted"
    assert json.loads(raw)[channel]["customer_id"] == str(customer_id)


def test_redis_failure_is_swallowed(db, setup_messenger_conversation, setup_customer):
    client = MagicMock()
    client.publish.side_effect = redis.ConnectionError("down")
    message = _message(db, setup_messenger_conversation, setup_customer)

    MessagePublisher(redis_client=client, enabled=True).publish_new_message(message)

    client.publish.assert_called_once()
