"""Conversation model: a correlation unit for one Messenger thread or wall post."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db import Base
from app.models.mixins import TimestampMixin
from app.schemas.conversation import ConversationChannelData


class Conversation(Base, TimestampMixin):
    """
    Messenger conversations correlate on the sender/recipient pair (either order);
    feed conversations correlate on post id plus page id.
    """

    __tablename__ = "conversations"

    __table_args__ = (
        Index(
            "ix_conversations_kind_sender_recipient",
            "kind",
            "sender_id",
            "recipient_id",
        ),
        Index("ix_conversations_kind_post_page", "kind", "post_id", "page_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    integration_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("integrations.id", ondelete="CASCADE"),
        nullable=False,
    )
    customer_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
    )
    status = Column(String(16), nullable=False)
    message_count = Column(Integer, nullable=False, default=0)
    content = Column(Text, nullable=True)

    # channel data
    kind = Column(String(16), nullable=False)
    sender_id = Column(String(128), nullable=False)
    sender_name = Column(String(256), nullable=True)
    recipient_id = Column(String(128), nullable=True)
    post_id = Column(String(256), nullable=True)
    page_id = Column(String(128), nullable=False)

    integration = relationship("Integration")
    messages = relationship(
        "ConversationMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationMessage.created_at",
    )

    @property
    def channel_data(self) -> ConversationChannelData:
        return ConversationChannelData(
            kind=self.kind,
            sender_id=self.sender_id,
            sender_name=self.sender_name,
            recipient_id=self.recipient_id,
            post_id=self.post_id,
            page_id=self.page_id,
        )
