"""Tests for the conversations router."""

from uuid import uuid4

from app.schemas.conversation import MessageChannelData
from app.services.conversation_message_service import ConversationMessageService


def test_get_conversation(client, setup_messenger_conversation):
    r = client.get(f"/conversations/{setup_messenger_conversation.id}")
    assert r.status_code == 200
    data = r.json()
    assert data["id"] == str(setup_messenger_conversation.id)
    assert data["kind"] == "messenger"


def test_get_conversation_not_found(client):
    r = client.get(f"/conversations/{uuid4()}")
    assert r.status_code == 404


def test_list_messages_is_paginated(
    client, db, setup_messenger_conversation, setup_customer
):
    service = ConversationMessageService(db)
    for i in range(3):
        service.create_message(
            setup_messenger_conversation.id,
            setup_customer.id,
            f"msg {i}",
            MessageChannelData(message_id=f"m{i}"),
        )

    r = client.get(
        f"/conversations/{setup_messenger_conversation.id}/messages",
        params={"page": 1, "size": 2},
    )

    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 3
    assert len(data["items"]) == 2


def test_import_comments(client, fake_graph, setup_feed_conversation):
    fake_graph.add_get(
        f"{setup_feed_conversation.post_id}/comments",
        {"data": [{"id": "c1", "from": {"id": "501", "name": "A"}, "message": "hey"}]},
    )

    r = client.post(
        f"/conversations/{setup_feed_conversation.id}/comments/import",
        params={"limit": 5},
    )

    assert r.status_code == 200
    assert r.json() == {
        "post_id": setup_feed_conversation.post_id,
        "imported": 1,
        "skipped": 0,
    }


def test_import_comments_rejects_messenger_conversation(
    client, setup_messenger_conversation
):
    r = client.post(f"/conversations/{setup_messenger_conversation.id}/comments/import")
    assert r.status_code == 400
