"""Tests for the outbound reply route."""

from uuid import uuid4

import pytest

from app.exceptions import TransportError
from app.schemas.conversation import MessageChannelData
from app.services.conversation_message_service import ConversationMessageService


@pytest.fixture
def agent_message(db, setup_messenger_conversation, setup_customer):
    return ConversationMessageService(db).create_message(
        setup_messenger_conversation.id,
        setup_customer.id,
        "agent text",
        MessageChannelData(),
    )


def test_send_messenger_reply(client, fake_graph, setup_messenger_conversation, agent_message):
    fake_graph.add_post("me/messages", {"message_id": "mid.out"})

    r = client.post(
        "/outbound/facebook/reply",
        json={
            "conversation_id": str(setup_messenger_conversation.id),
            "message_id": str(agent_message.id),
            "text": "thanks!",
        },
    )

    assert r.status_code == 200
    assert r.json()["data"]["message_id"] == "mid.out"


def test_unknown_conversation_is_404(client, agent_message):
    r = client.post(
        "/outbound/facebook/reply",
        json={
            "conversation_id": str(uuid4()),
            "message_id": str(agent_message.id),
            "text": "hi",
        },
    )
    assert r.status_code == 404


def test_message_of_other_conversation_is_404(
    client, setup_feed_conversation, agent_message
):
    r = client.post(
        "/outbound/facebook/reply",
        json={
            "conversation_id": str(setup_feed_conversation.id),
            "message_id": str(agent_message.id),
            "text": "hi",
        },
    )
    assert r.status_code == 404


def test_graph_failure_is_502(client, fake_graph, setup_messenger_conversation, agent_message):
    fake_graph.add_post("me/messages", TransportError("boom", status_code=500))

    r = client.post(
        "/outbound/facebook/reply",
        json={
            "conversation_id": str(setup_messenger_conversation.id),
            "message_id": str(agent_message.id),
            "text": "hi",
        },
    )

    assert r.status_code == 502
    assert r.json() == {"detail": "Facebook Graph API request failed"}
