"""
Inbound message ingestion.

Turns classified Messenger and feed events into stored messages: resolves the
conversation and customer, skips events already recorded, backfills missing
post context for comments, and notifies subscribers of each new message.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from app.adapters.facebook_graph import get_object
from app.constants.facebook import (
    EMPTY_CONTENT,
    ConversationStatus,
    FacebookDataKind,
)
from app.core.page_context import PageContext
from app.exceptions import ConfigurationError, NotFoundError
from app.models.conversation import Conversation
from app.models.conversation_message import ConversationMessage
from app.schemas.conversation import ConversationChannelData, MessageChannelData
from app.schemas.facebook import (
    FeedChangeValue,
    FeedCommentEvent,
    FeedPostEvent,
    FeedReactionEvent,
    MessengerMessageEvent,
    classify_feed_change,
)
from app.services.conversation_message_service import ConversationMessageService
from app.services.conversation_service import (
    ConversationResolver,
    ConversationService,
    feed_selector,
    messenger_selector,
)
from app.services.customer_service import CustomerResolver
from app.services.facebook_channel_data import (
    generate_comment_params,
    generate_post_params,
)
from app.services.message_publisher import MessagePublisher
from app.services.parent_post_restorer import ParentPostRestorer
from app.services.reaction_aggregator import ReactionAggregator

logger = logging.getLogger(__name__)


class MessageIngester:
    def __init__(
        self,
        db: Session,
        conversation_resolver: ConversationResolver,
        customer_resolver: CustomerResolver,
        publisher: MessagePublisher,
    ) -> None:
        self.db = db
        self.conversation_resolver = conversation_resolver
        self.customer_resolver = customer_resolver
        self.publisher = publisher
        self.conversations = ConversationService(db)
        self.messages = ConversationMessageService(db)
        self.reactions = ReactionAggregator(db)
        self.parent_post_restorer = ParentPostRestorer(self)

    def create_message(
        self,
        ctx: Optional[PageContext],
        conversation: Optional[Conversation],
        platform_user_id: str,
        content: Optional[str],
        channel_data: MessageChannelData,
        attachments: Optional[list[dict[str, Any]]] = None,
    ) -> Optional[UUID]:
        """
        Store a message in conversation on behalf of platform_user_id.

        Updates the conversation's message count and content snapshot and
        publishes the new message. When the platform id is already recorded
        nothing is written and the existing message's id is returned.

        Raises:
            NotFoundError: conversation is None.
            ConfigurationError: no page context to resolve the customer with.
        """
        message = self.store_message(
            ctx, conversation, platform_user_id, content, channel_data, attachments
        )
        if message is None:
            existing = self.messages.find_existing(channel_data)
            return existing.id if existing else None
        return message.id

    def store_message(
        self,
        ctx: Optional[PageContext],
        conversation: Optional[Conversation],
        platform_user_id: str,
        content: Optional[str],
        channel_data: MessageChannelData,
        attachments: Optional[list[dict[str, Any]]] = None,
    ) -> Optional[ConversationMessage]:
        """Like create_message, but returns None when no new row was inserted."""
        if conversation is None:
            raise NotFoundError("Conversation not found; cannot create message")
        if ctx is None:
            raise ConfigurationError("No page context set; cannot create message")

        customer = self.customer_resolver.resolve_or_create(
            platform_user_id, ctx.integration.id, ctx.page_access_token()
        )
        message = self.messages.create_message(
            conversation_id=conversation.id,
            customer_id=customer.id,
            content=content,
            channel_data=channel_data,
            attachments=attachments,
        )
        if message is None:
            return None

        self.conversations.record_message(conversation, content)
        self.publisher.publish_new_message(message)
        self.publisher.publish_to_customer_subscription(message, conversation.customer_id)
        return message

    def ingest_messenger_event(
        self, ctx: PageContext, event: MessengerMessageEvent
    ) -> Optional[UUID]:
        if self.messages.get_by_platform_message_id(event.message_id) is not None:
            logger.debug("Messenger message %s already recorded", event.message_id)
            return None

        content = event.text or EMPTY_CONTENT
        conversation = self.conversation_resolver.resolve(
            ctx,
            messenger_selector(event.sender_id, event.recipient_id),
            ConversationStatus.NEW,
            ConversationChannelData(
                kind=FacebookDataKind.MESSENGER.value,
                sender_id=event.sender_id,
                sender_name=event.sender_name,
                recipient_id=event.recipient_id,
            ),
            platform_user_id=event.sender_id,
            content=content,
        )
        return self.create_message(
            ctx,
            conversation,
            event.sender_id,
            content,
            MessageChannelData(message_id=event.message_id),
            attachments=event.attachments or None,
        )

    def ingest_feed_change(
        self, ctx: PageContext, value: FeedChangeValue
    ) -> Optional[UUID]:
        """
        Handle one feed change. Likes and reactions update counters; comments
        and posts become messages. Returns the stored message id, if any.
        """
        event = classify_feed_change(value)
        if event is None:
            logger.debug(
                "Skipping feed change item=%s verb=%s", value.item, value.verb
            )
            return None
        if isinstance(event, FeedReactionEvent):
            # Post messages are stored under the stable post id
            if event.post_id and not event.comment_id:
                event = event.model_copy(
                    update={"post_id": self.stable_post_id(ctx, event.post_id)}
                )
            self.reactions.apply_event(event)
            return None
        return self.ingest_feed_event(ctx, event)

    def stable_post_id(self, ctx: PageContext, post_id: str) -> str:
        """
        The Graph object id of a post. The webhook's post_id varies between
        deliveries for the same post; the object id does not.
        """
        post = get_object(ctx.graph, post_id, ctx.page_access_token())
        if isinstance(post, dict) and post.get("id"):
            return str(post["id"])
        return post_id

    def ingest_feed_event(
        self, ctx: PageContext, event: Union[FeedCommentEvent, FeedPostEvent]
    ) -> Optional[UUID]:
        if isinstance(event, FeedCommentEvent):
            if self.messages.get_by_comment_id(event.comment_id) is not None:
                logger.debug("Comment %s already recorded", event.comment_id)
                return None
            channel_data = generate_comment_params(event.value.to_params())
        else:
            channel_data = generate_post_params(event.value.to_params())

        if not event.post_id:
            logger.info("Feed %s without post_id skipped", event.value.item)
            return None

        post_id = self.stable_post_id(ctx, event.post_id)

        sender = event.sender
        status = (
            ConversationStatus.CLOSED
            if ctx.owns_sender(sender.id)
            else ConversationStatus.NEW
        )
        content = event.message or EMPTY_CONTENT
        channel_data = channel_data.model_copy(
            update={
                "sender_id": sender.id,
                "sender_name": sender.name,
                "post_id": post_id,
            }
        )

        conversation = self.conversation_resolver.resolve(
            ctx,
            feed_selector(post_id, ctx.page_id),
            status,
            ConversationChannelData(
                kind=FacebookDataKind.FEED.value,
                sender_id=sender.id,
                sender_name=sender.name,
                post_id=post_id,
            ),
            platform_user_id=sender.id,
            content=content,
        )
        self.parent_post_restorer.ensure_parent_post(
            ctx,
            conversation,
            sender.id,
            comment_id=channel_data.comment_id,
            post_id=post_id,
            item=channel_data.item,
        )
        return self.create_message(ctx, conversation, sender.id, content, channel_data)
