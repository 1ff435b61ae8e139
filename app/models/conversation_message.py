"""ConversationMessage model: one row per Messenger message, post or comment."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db import Base, JSONType


class ConversationMessage(Base):
    """
    message_id and comment_id are unique when present; a duplicate insert is the
    signal that the event was already ingested.
    """

    __tablename__ = "conversation_messages"

    __table_args__ = (
        UniqueConstraint("message_id", name="uq_conversation_messages_message_id"),
        UniqueConstraint("comment_id", name="uq_conversation_messages_comment_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
    )
    content = Column(Text, nullable=True)
    attachments = Column(JSONType, nullable=True)
    internal = Column(Boolean, nullable=False, default=False)

    message_id = Column(String(256), nullable=True)
    comment_id = Column(String(256), nullable=True)
    post_id = Column(String(256), nullable=True, index=True)
    parent_id = Column(String(256), nullable=True)
    is_post = Column(Boolean, nullable=False, default=False)
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    reactions = Column(JSONType, nullable=True)  # {reaction_type: [{id, name}]}
    channel_data = Column(JSONType, nullable=True)  # remaining platform fields

    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    conversation = relationship("Conversation", back_populates="messages")
