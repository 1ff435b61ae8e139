"""Tests for like counters and reactor lists."""

import pytest

from app.models.conversation_message import ConversationMessage
from app.schemas.conversation import MessageChannelData
from app.services.conversation_message_service import ConversationMessageService
from app.services.reaction_aggregator import ReactionAggregator, reaction_selector
from tests.fixtures.inbox_fixtures import PAGE_ID

POST_ID = f"{PAGE_ID}_555"
ALICE = {"id": "301", "name": "Alice"}


@pytest.fixture
def post_and_comment(db, setup_feed_conversation, setup_customer):
    service = ConversationMessageService(db)
    post = service.create_message(
        setup_feed_conversation.id,
        setup_customer.id,
        "post",
        MessageChannelData(post_id=POST_ID, is_post=True, item="status"),
    )
    comment = service.create_message(
        setup_feed_conversation.id,
        setup_customer.id,
        "comment",
        MessageChannelData(post_id=POST_ID, comment_id="c1", item="comment"),
    )
    return post, comment


def _reload(db, message):
    return db.query(ConversationMessage).filter_by(id=message.id).one()


def test_like_add_then_remove_restores_count(db, post_and_comment):
    post, comment = post_and_comment
    aggregator = ReactionAggregator(db)
    selector = reaction_selector(POST_ID, None)

    aggregator.apply("add", selector, "like", None, ALICE)
    assert _reload(db, post).like_count == 1
    aggregator.apply("remove", selector, "like", None, ALICE)

    assert _reload(db, post).like_count == 0
    assert _reload(db, comment).like_count == 0


def test_like_on_comment_targets_only_the_comment(db, post_and_comment):
    post, comment = post_and_comment
    ReactionAggregator(db).apply(
        "add", reaction_selector(POST_ID, "c1"), "like", None, ALICE
    )
    assert _reload(db, comment).like_count == 1
    assert _reload(db, post).like_count == 0


def test_unknown_verb_decrements_like(db, post_and_comment):
    post, _ = post_and_comment
    ReactionAggregator(db).apply(
        "edited", reaction_selector(POST_ID, None), "like", None, ALICE
    )
    assert _reload(db, post).like_count == -1


def test_reaction_add_then_remove_empties_list(db, post_and_comment):
    post, _ = post_and_comment
    aggregator = ReactionAggregator(db)
    selector = reaction_selector(POST_ID, None)

    aggregator.apply("add", selector, "reaction", "love", ALICE)
    assert _reload(db, post).reactions == {"love": [ALICE]}
    aggregator.apply("remove", selector, "reaction", "love", ALICE)

    assert _reload(db, post).reactions == {"love": []}


def test_reaction_is_a_set_per_actor(db, post_and_comment):
    post, _ = post_and_comment
    aggregator = ReactionAggregator(db)
    selector = reaction_selector(POST_ID, None)

    aggregator.apply("add", selector, "reaction", "haha", ALICE)
    aggregator.apply("add", selector, "reaction", "haha", ALICE)
    aggregator.apply("add", selector, "reaction", "haha", {"id": "302", "name": "Bob"})

    reactors = _reload(db, post).reactions["haha"]
    assert [r["id"] for r in reactors] == ["301", "302"]


def test_reaction_type_defaults_to_like(db, post_and_comment):
    post, _ = post_and_comment
    ReactionAggregator(db).apply(
        "add", reaction_selector(POST_ID, None), "reaction", None, ALICE
    )
    assert _reload(db, post).reactions == {"like": [ALICE]}


def test_event_without_target_touches_nothing(db, post_and_comment):
    assert ReactionAggregator(db).apply("add", None, "like", None, ALICE) == 0
    assert reaction_selector(None, None) is None
