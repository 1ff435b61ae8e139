"""ConversationMessage persistence, duplicate detection and counter updates."""

from __future__ import annotations

import logging
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.models.conversation_message import ConversationMessage
from app.schemas.conversation import MessageChannelData

logger = logging.getLogger(__name__)

# MessageChannelData fields stored as columns rather than in channel_data JSON
_COLUMN_FIELDS = {
    "message_id",
    "comment_id",
    "post_id",
    "parent_id",
    "is_post",
    "comment_count",
}


class ConversationMessageService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_message(self, message_id: UUID) -> Optional[ConversationMessage]:
        return (
            self.db.query(ConversationMessage)
            .filter(ConversationMessage.id == message_id)
            .first()
        )

    def get_messages_query(self, conversation_id: UUID) -> Query:
        """Messages of a conversation, oldest first (for pagination)."""
        return (
            self.db.query(ConversationMessage)
            .filter(ConversationMessage.conversation_id == conversation_id)
            .order_by(ConversationMessage.created_at)
        )

    def get_by_platform_message_id(
        self, platform_message_id: str
    ) -> Optional[ConversationMessage]:
        return (
            self.db.query(ConversationMessage)
            .filter(ConversationMessage.message_id == platform_message_id)
            .first()
        )

    def get_by_comment_id(
        self, comment_id: str, conversation_id: Optional[UUID] = None
    ) -> Optional[ConversationMessage]:
        query = self.db.query(ConversationMessage).filter(
            ConversationMessage.comment_id == comment_id
        )
        if conversation_id is not None:
            query = query.filter(ConversationMessage.conversation_id == conversation_id)
        return query.first()

    def get_post_message(
        self, conversation_id: UUID, post_id: str
    ) -> Optional[ConversationMessage]:
        """The root post message of a feed conversation, if it was recorded."""
        return (
            self.db.query(ConversationMessage)
            .filter(
                ConversationMessage.conversation_id == conversation_id,
                ConversationMessage.is_post.is_(True),
                ConversationMessage.post_id == post_id,
            )
            .first()
        )

    def create_message(
        self,
        conversation_id: UUID,
        customer_id: UUID,
        content: Optional[str],
        channel_data: MessageChannelData,
        attachments: Optional[list[dict[str, Any]]] = None,
    ) -> Optional[ConversationMessage]:
        """
        Insert a message. Returns None when the platform message or comment id is
        already recorded (the unique constraint rejected the insert).
        """
        columns = channel_data.model_dump(include=_COLUMN_FIELDS)
        columns["comment_count"] = columns.get("comment_count") or 0
        extra = channel_data.model_dump(exclude=_COLUMN_FIELDS, exclude_none=True)
        msg = ConversationMessage(
            conversation_id=conversation_id,
            customer_id=customer_id,
            content=content,
            attachments=attachments or None,
            internal=False,
            like_count=0,
            reactions={},
            channel_data=extra or None,
            **columns,
        )
        self.db.add(msg)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Duplicate message ignored (message_id=%s comment_id=%s)",
                channel_data.message_id,
                channel_data.comment_id,
            )
            return None
        self.db.refresh(msg)
        return msg

    def find_existing(
        self, channel_data: MessageChannelData
    ) -> Optional[ConversationMessage]:
        """Message already holding the platform id carried by channel_data."""
        if channel_data.message_id:
            return self.get_by_platform_message_id(channel_data.message_id)
        if channel_data.comment_id:
            return self.get_by_comment_id(channel_data.comment_id)
        return None

    def update_channel_data(
        self, message_id: UUID, channel_data: MessageChannelData
    ) -> Optional[ConversationMessage]:
        """
        Apply the explicitly set fields of channel_data to an existing message.

        Returns None when the message is missing or when the platform id is
        already held by another message.
        """
        msg = self.get_message(message_id)
        if msg is None:
            return None
        columns = channel_data.model_dump(include=_COLUMN_FIELDS, exclude_unset=True)
        for key, value in columns.items():
            setattr(msg, key, value)
        extra = channel_data.model_dump(
            exclude=_COLUMN_FIELDS, exclude_unset=True, exclude_none=True
        )
        if extra:
            msg.channel_data = {**(msg.channel_data or {}), **extra}
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "Platform id already recorded on another message (message=%s)",
                message_id,
            )
            return None
        self.db.refresh(msg)
        return msg

    def increment_like_count(self, selector: List[Any], delta: int) -> int:
        updated = (
            self.db.query(ConversationMessage)
            .filter(*selector)
            .update(
                {ConversationMessage.like_count: ConversationMessage.like_count + delta},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated

    def increment_comment_count(self, conversation_id: UUID, delta: int = 1) -> int:
        """Bump comment_count on the root post message(s) of a conversation."""
        updated = (
            self.db.query(ConversationMessage)
            .filter(
                ConversationMessage.conversation_id == conversation_id,
                ConversationMessage.is_post.is_(True),
            )
            .update(
                {
                    ConversationMessage.comment_count: ConversationMessage.comment_count
                    + delta
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated

    def add_reaction(
        self, selector: List[Any], reaction_type: str, actor: dict[str, Any]
    ) -> int:
        """Add actor to reactions[reaction_type] on every matching message (set semantics)."""
        messages = self.db.query(ConversationMessage).filter(*selector).all()
        for msg in messages:
            reactions = {k: list(v) for k, v in (msg.reactions or {}).items()}
            actors = reactions.setdefault(reaction_type, [])
            if not any(a.get("id") == actor["id"] for a in actors):
                actors.append(actor)
            msg.reactions = reactions
        self.db.commit()
        return len(messages)

    def remove_reaction(
        self, selector: List[Any], reaction_type: str, actor_id: str
    ) -> int:
        messages = self.db.query(ConversationMessage).filter(*selector).all()
        for msg in messages:
            reactions = {k: list(v) for k, v in (msg.reactions or {}).items()}
            reactions[reaction_type] = [
                a for a in reactions.get(reaction_type, []) if a.get("id") != actor_id
            ]
            msg.reactions = reactions
        self.db.commit()
        return len(messages)
