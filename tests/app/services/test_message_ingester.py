"""Tests for Messenger and feed message ingestion."""

import json

import pytest

from app.exceptions import NotFoundError
from app.models.conversation import Conversation
from app.models.conversation_message import ConversationMessage
from app.models.customer import Customer
from app.schemas.conversation import MessageChannelData
from app.schemas.facebook import (
    FeedChangeValue,
    MessagingEvent,
    classify_messaging_event,
)
from tests.fixtures.inbox_fixtures import PAGE_ID
from tests.fixtures.payloads import feed_value, messenger_event

POST_ID = f"{PAGE_ID}_555"


def _messenger(sender_id, recipient_id, mid, text="hi"):
    return classify_messaging_event(
        MessagingEvent.model_validate(messenger_event(sender_id, recipient_id, mid, text))
    )


def _feed(**kwargs):
    return FeedChangeValue.model_validate(feed_value(**kwargs))


def test_messenger_message_end_to_end(db, ingester, page_context, fake_graph):
    fake_graph.add_get("100", {"id": "100", "first_name": "Jane", "last_name": "Doe"})

    message_id = ingester.ingest_messenger_event(
        page_context, _messenger("100", PAGE_ID, "m1", "hi")
    )

    conversation = db.query(Conversation).one()
    assert conversation.status == "new"
    assert conversation.kind == "messenger"
    assert conversation.sender_id == "100"
    assert conversation.message_count == 1
    assert conversation.content == "hi"
    customer = db.query(Customer).one()
    assert customer.facebook_user_id == "100"
    message = db.query(ConversationMessage).one()
    assert message.id == message_id
    assert message.content == "hi"
    assert message.message_id == "m1"
    assert message.customer_id == customer.id


def test_messenger_message_without_text_gets_placeholder(db, ingester, page_context):
    ingester.ingest_messenger_event(page_context, _messenger("100", PAGE_ID, "m1", None))
    assert db.query(ConversationMessage).one().content == "..."


def test_same_messenger_message_twice_is_stored_once(db, ingester, page_context):
    event = _messenger("100", PAGE_ID, "m1")
    ingester.ingest_messenger_event(page_context, event)
    assert ingester.ingest_messenger_event(page_context, event) is None
    assert db.query(ConversationMessage).count() == 1


def test_page_echo_lands_in_customer_conversation(db, ingester, page_context):
    ingester.ingest_messenger_event(page_context, _messenger("100", PAGE_ID, "m1"))
    ingester.ingest_messenger_event(page_context, _messenger(PAGE_ID, "100", "m2"))

    assert db.query(Conversation).count() == 1
    assert db.query(ConversationMessage).count() == 2


def test_reopen_threshold_through_ingestion(db, ingester, page_context):
    ingester.ingest_messenger_event(page_context, _messenger("100", PAGE_ID, "m1"))
    conversation = db.query(Conversation).one()
    conversation.status = "closed"
    db.commit()

    ingester.ingest_messenger_event(page_context, _messenger("100", PAGE_ID, "m2"))
    db.refresh(conversation)
    assert conversation.message_count == 2
    assert conversation.status == "new"

    conversation.status = "closed"
    db.commit()
    ingester.ingest_messenger_event(page_context, _messenger("100", PAGE_ID, "m3"))

    conversations = db.query(Conversation).order_by(Conversation.created_at).all()
    assert len(conversations) == 2
    assert conversations[1].message_count == 1


def test_new_message_is_published_twice(ingester, page_context, mock_redis):
    ingester.ingest_messenger_event(page_context, _messenger("100", PAGE_ID, "m1"))

    channels = [call.args[0] for call in mock_redis.publish.call_args_list]
    assert channels == [
        "conversationMessageInserted",
        "conversationClientMessageInserted",
    ]
    payload = json.loads(mock_redis.publish.call_args_list[1].args[1])
    assert payload["conversationClientMessageInserted"]["message_id"] == "m1"
    assert payload["conversationClientMessageInserted"]["customer_id"]


def test_create_message_requires_conversation(ingester, page_context):
    with pytest.raises(NotFoundError):
        ingester.create_message(
            page_context, None, "100", "hi", MessageChannelData(message_id="m1")
        )


def test_create_message_duplicate_returns_existing_id(
    db, ingester, page_context, setup_messenger_conversation
):
    data = MessageChannelData(message_id="m1")
    first = ingester.create_message(
        page_context, setup_messenger_conversation, "100", "hi", data
    )
    second = ingester.create_message(
        page_context, setup_messenger_conversation, "100", "hi again", data
    )
    assert first == second
    db.refresh(setup_messenger_conversation)
    assert setup_messenger_conversation.message_count == 1


def test_feed_post_uses_stable_post_id(db, ingester, page_context, fake_graph):
    fake_graph.add_get("raw_post_id", {"id": POST_ID})

    ingester.ingest_feed_change(
        page_context,
        _feed(item="status", post_id="raw_post_id", message="hello wall"),
    )

    conversation = db.query(Conversation).one()
    assert conversation.kind == "feed"
    assert conversation.post_id == POST_ID
    assert conversation.page_id == PAGE_ID
    message = db.query(ConversationMessage).one()
    assert message.is_post is True
    assert message.post_id == POST_ID
    assert message.content == "hello wall"
    assert message.channel_data["sender_id"] == "200"
    assert message.channel_data["item"] == "status"


def test_feed_post_by_customer_is_new(db, ingester, page_context):
    ingester.ingest_feed_change(page_context, _feed(item="status", post_id=POST_ID))
    assert db.query(Conversation).one().status == "new"


def test_feed_post_by_own_page_is_closed(db, ingester, page_context):
    ingester.ingest_feed_change(
        page_context, _feed(item="status", post_id=POST_ID, sender_id=PAGE_ID)
    )
    assert db.query(Conversation).one().status == "closed"


def test_same_comment_twice_is_stored_once(db, ingester, page_context, fake_graph):
    fake_graph.add_get(POST_ID, {"id": POST_ID, "message": "post", "from": {"id": PAGE_ID}})
    value = _feed(item="comment", comment_id="c1", post_id=POST_ID, parent_id=POST_ID)

    ingester.ingest_feed_change(page_context, value)
    assert ingester.ingest_feed_change(page_context, value) is None

    assert db.query(ConversationMessage).filter_by(comment_id="c1").count() == 1


def test_comment_on_known_post_joins_post_conversation(db, ingester, page_context):
    ingester.ingest_feed_change(
        page_context, _feed(item="status", post_id=POST_ID, sender_id=PAGE_ID)
    )
    ingester.ingest_feed_change(
        page_context,
        _feed(item="comment", comment_id="c1", post_id=POST_ID, message="first!"),
    )

    conversation = db.query(Conversation).one()
    assert conversation.message_count == 2
    assert conversation.content == "first!"
    comment = db.query(ConversationMessage).filter_by(comment_id="c1").one()
    assert comment.post_id == POST_ID
    assert comment.is_post is False


def test_edited_comment_is_ignored(db, ingester, page_context):
    ingester.ingest_feed_change(
        page_context, _feed(item="comment", verb="edited", comment_id="c1", post_id=POST_ID)
    )
    assert db.query(ConversationMessage).count() == 0


def test_like_goes_to_aggregator_without_message(db, ingester, page_context):
    ingester.ingest_feed_change(
        page_context, _feed(item="status", post_id=POST_ID, sender_id=PAGE_ID)
    )
    ingester.ingest_feed_change(page_context, _feed(item="like", post_id=POST_ID))

    message = db.query(ConversationMessage).one()
    db.refresh(message)
    assert message.like_count == 1


def test_post_like_matches_post_stored_under_stable_id(
    db, ingester, page_context, fake_graph
):
    fake_graph.add_get(f"{PAGE_ID}_999", {"id": f"{PAGE_ID}_42"})
    ingester.ingest_feed_change(
        page_context, _feed(item="status", post_id=f"{PAGE_ID}_999", message="sale")
    )

    ingester.ingest_feed_change(
        page_context, _feed(item="like", post_id=f"{PAGE_ID}_999", sender_id="300")
    )
    ingester.ingest_feed_change(
        page_context,
        _feed(
            item="reaction",
            post_id=f"{PAGE_ID}_999",
            sender_id="301",
            reaction_type="love",
        ),
    )

    post = db.query(ConversationMessage).one()
    db.refresh(post)
    assert post.post_id == f"{PAGE_ID}_42"
    assert post.like_count == 1
    assert [a["id"] for a in post.reactions["love"]] == ["301"]


def test_comment_like_targets_comment_without_post_lookup(
    db, ingester, page_context, fake_graph
):
    ingester.ingest_feed_change(
        page_context, _feed(item="comment", comment_id="c1", post_id=POST_ID)
    )
    lookups_before = len(fake_graph.get_calls)

    ingester.ingest_feed_change(
        page_context, _feed(item="like", comment_id="c1", post_id=POST_ID)
    )

    assert len(fake_graph.get_calls) == lookups_before
    comment = db.query(ConversationMessage).filter_by(comment_id="c1").one()
    db.refresh(comment)
    assert comment.like_count == 1
