"""Schemas for conversations, messages and their Facebook channel data."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

# -----------------------------------------------------------------------------
# Channel data
# -----------------------------------------------------------------------------


class ConversationChannelData(BaseModel):
    """Correlation descriptor stored on a conversation."""

    kind: str
    sender_id: str
    sender_name: Optional[str] = None
    recipient_id: Optional[str] = None
    post_id: Optional[str] = None
    page_id: Optional[str] = None


class MessageChannelData(BaseModel):
    """
    Platform fields attached to a message.

    message_id, comment_id, post_id, parent_id, is_post and comment_count are
    stored as columns; everything else lands in the channel_data JSON column.
    """

    sender_id: Optional[str] = None
    sender_name: Optional[str] = None
    message_id: Optional[str] = None
    comment_id: Optional[str] = None
    post_id: Optional[str] = None
    parent_id: Optional[str] = None
    is_post: bool = False
    item: Optional[str] = None
    link: Optional[str] = None
    photo: Optional[str] = None
    video: Optional[str] = None
    photos: Optional[list[str]] = None
    created_time: Optional[str] = None
    comment_count: Optional[int] = None


# -----------------------------------------------------------------------------
# Read schemas
# -----------------------------------------------------------------------------


class ConversationRead(BaseModel):
    id: UUID
    integration_id: UUID
    customer_id: Optional[UUID] = None
    status: str
    message_count: int
    content: Optional[str] = None
    kind: str
    sender_id: str
    sender_name: Optional[str] = None
    recipient_id: Optional[str] = None
    post_id: Optional[str] = None
    page_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConversationMessageRead(BaseModel):
    id: UUID
    conversation_id: UUID
    customer_id: Optional[UUID] = None
    content: Optional[str] = None
    attachments: Optional[list[dict[str, Any]]] = None
    internal: bool = False
    message_id: Optional[str] = None
    comment_id: Optional[str] = None
    post_id: Optional[str] = None
    parent_id: Optional[str] = None
    is_post: bool = False
    like_count: int = 0
    comment_count: int = 0
    reactions: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    channel_data: Optional[dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CommentImportResult(BaseModel):
    """Result of importing a post's comments into its conversation."""

    post_id: str
    imported: int
    skipped: int
