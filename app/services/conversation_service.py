"""Conversation persistence and find-or-create-or-reopen resolution."""

from __future__ import annotations

import logging
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.constants.facebook import (
    REOPEN_MESSAGE_LIMIT,
    ConversationStatus,
    FacebookDataKind,
)
from app.core.page_context import PageContext
from app.exceptions import ConfigurationError
from app.models.conversation import Conversation
from app.schemas.conversation import ConversationChannelData
from app.services.activity_log_service import ActivityLogService
from app.services.customer_service import CustomerResolver

logger = logging.getLogger(__name__)

Selector = List[Any]


def messenger_selector(sender_id: str, recipient_id: str) -> Selector:
    """Messenger thread between two parties, in either direction."""
    return [
        Conversation.kind == FacebookDataKind.MESSENGER.value,
        or_(
            and_(
                Conversation.sender_id == sender_id,
                Conversation.recipient_id == recipient_id,
            ),
            and_(
                Conversation.sender_id == recipient_id,
                Conversation.recipient_id == sender_id,
            ),
        ),
    ]


def feed_selector(post_id: str, page_id: str) -> Selector:
    """Wall-post thread on one page."""
    return [
        Conversation.kind == FacebookDataKind.FEED.value,
        Conversation.post_id == post_id,
        Conversation.page_id == page_id,
    ]


def starts_new_conversation(conversation: Conversation) -> bool:
    """
    A closed conversation that already holds more than one message is left
    alone; the next matching event opens a fresh one.
    """
    return (
        conversation.status == ConversationStatus.CLOSED
        and (conversation.message_count or 0) > REOPEN_MESSAGE_LIMIT
    )


class ConversationService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_conversation(self, conversation_id: UUID) -> Optional[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .first()
        )

    def find_latest(
        self, integration_id: UUID, selector: Selector
    ) -> Optional[Conversation]:
        """Most recently created conversation of the integration matching selector."""
        return (
            self.db.query(Conversation)
            .filter(Conversation.integration_id == integration_id, *selector)
            .order_by(Conversation.created_at.desc())
            .first()
        )

    def create_conversation(
        self,
        integration_id: UUID,
        customer_id: UUID,
        status: str,
        content: Optional[str],
        channel_data: ConversationChannelData,
    ) -> Conversation:
        conversation = Conversation(
            integration_id=integration_id,
            customer_id=customer_id,
            status=str(status),
            content=content,
            message_count=0,
            **channel_data.model_dump(),
        )
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def reopen(self, conversation: Conversation) -> Conversation:
        conversation.status = str(ConversationStatus.NEW)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def record_message(self, conversation: Conversation, content: Optional[str]) -> None:
        """Bump message_count and refresh the content snapshot."""
        self.db.query(Conversation).filter(Conversation.id == conversation.id).update(
            {
                Conversation.message_count: Conversation.message_count + 1,
                Conversation.content: content,
            },
            synchronize_session=False,
        )
        self.db.commit()
        self.db.refresh(conversation)


class ConversationResolver:
    """Find-or-create-or-reopen for a correlation selector."""

    def __init__(
        self,
        db: Session,
        customer_resolver: CustomerResolver,
        activity_logs: Optional[ActivityLogService] = None,
    ) -> None:
        self.db = db
        self.conversations = ConversationService(db)
        self.customer_resolver = customer_resolver
        self.activity_logs = activity_logs or ActivityLogService(db)

    def resolve(
        self,
        ctx: Optional[PageContext],
        selector: Optional[Selector],
        status: str,
        channel_data: ConversationChannelData,
        platform_user_id: str,
        content: Optional[str] = None,
    ) -> Conversation:
        """
        Return the conversation a new event belongs to.

        No match, or a match that is closed with more than one message, creates a
        conversation (stamped with the context's page id and logged). Any other
        match is reopened with its history intact.

        Raises:
            ConfigurationError: a conversation must be created but there is no
                page context.
        """
        conversation = None
        if selector and ctx is not None:
            conversation = self.conversations.find_latest(ctx.integration.id, selector)

        if conversation is not None and not starts_new_conversation(conversation):
            logger.debug("Reopening conversation %s", conversation.id)
            return self.conversations.reopen(conversation)

        if ctx is None or not ctx.page_id:
            raise ConfigurationError("No page context set; cannot create conversation")

        customer = self.customer_resolver.resolve_or_create(
            platform_user_id, ctx.integration.id, ctx.page_access_token()
        )
        channel_data = channel_data.model_copy(update={"page_id": ctx.page_id})
        conversation = self.conversations.create_conversation(
            integration_id=ctx.integration.id,
            customer_id=customer.id,
            status=status,
            content=content,
            channel_data=channel_data,
        )
        self.activity_logs.create_conversation_log(conversation, customer)
        logger.info(
            "Created %s conversation %s on page %s (status=%s)",
            conversation.kind,
            conversation.id,
            ctx.page_id,
            status,
        )
        return conversation
