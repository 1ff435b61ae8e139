"""
Facebook webhook payload schemas.

The envelope is validated as sent by the platform; each messaging element and
feed change is then classified into one of a closed set of event variants.
Shapes that match no variant are skipped by the caller.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from app.constants.facebook import (
    COMMENT_ITEM,
    DEFAULT_REACTION_TYPE,
    FACEBOOK_POST_TYPES,
    LIKE_ITEM,
    REACTION_ITEM,
    FeedVerb,
)

# Feed sends numeric ids, Messenger sends strings
FacebookId = Annotated[str, BeforeValidator(lambda v: str(v) if v is not None else v)]


class FacebookUser(BaseModel):
    """A sender, recipient or actor reference ({id, name})."""

    id: FacebookId
    name: Optional[str] = None


# -----------------------------------------------------------------------------
# Envelope
# -----------------------------------------------------------------------------


class MessengerAttachmentPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None


class MessengerAttachment(BaseModel):
    type: str
    payload: Optional[MessengerAttachmentPayload] = None


class MessengerMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    mid: str
    text: Optional[str] = None
    attachments: list[MessengerAttachment] = Field(default_factory=list)
    is_echo: Optional[bool] = None


class MessagingEvent(BaseModel):
    """One element of entry.messaging (messages, receipts, postbacks...)."""

    model_config = ConfigDict(extra="allow")

    sender: FacebookUser
    recipient: FacebookUser
    timestamp: Optional[int] = None
    message: Optional[MessengerMessage] = None


class ParentRef(BaseModel):
    id: FacebookId


class FeedChangeValue(BaseModel):
    """entry.changes[].value for the `feed` field."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    item: Optional[str] = None
    verb: Optional[str] = None
    id: Optional[FacebookId] = None
    post_id: Optional[FacebookId] = None
    comment_id: Optional[FacebookId] = None
    parent_id: Optional[FacebookId] = None
    parent: Optional[ParentRef] = None
    from_: Optional[FacebookUser] = Field(default=None, alias="from")
    message: Optional[str] = None
    created_time: Optional[FacebookId] = None
    link: Optional[str] = None
    photo: Optional[str] = None
    video: Optional[str] = None
    photo_id: Optional[FacebookId] = None
    video_id: Optional[FacebookId] = None
    photos: Optional[list[str]] = None
    reaction_type: Optional[str] = None

    def to_params(self) -> dict[str, Any]:
        """Plain dict with the wire field names, for the metadata builders."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FeedChange(BaseModel):
    field: Optional[str] = None
    value: FeedChangeValue


class WebhookEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: FacebookId
    time: Optional[int] = None
    # Elements are validated one by one so a malformed one is skipped alone
    messaging: Optional[list[Any]] = None
    changes: Optional[list[Any]] = None


class WebhookPayload(BaseModel):
    """Top-level webhook delivery: {object, entry[]}."""

    object: str
    entry: list[WebhookEntry] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Classified events
# -----------------------------------------------------------------------------


class MessengerMessageEvent(BaseModel):
    kind: Literal["messenger_message"] = "messenger_message"
    sender_id: str
    sender_name: Optional[str] = None
    recipient_id: str
    message_id: str
    text: Optional[str] = None
    attachments: list[dict[str, Any]] = Field(default_factory=list)


class FeedCommentEvent(BaseModel):
    kind: Literal["feed_comment"] = "feed_comment"
    sender: FacebookUser
    comment_id: str
    post_id: Optional[str] = None
    message: Optional[str] = None
    value: FeedChangeValue


class FeedPostEvent(BaseModel):
    kind: Literal["feed_post"] = "feed_post"
    sender: FacebookUser
    post_id: Optional[str] = None
    message: Optional[str] = None
    value: FeedChangeValue


class FeedReactionEvent(BaseModel):
    kind: Literal["feed_reaction"] = "feed_reaction"
    item: Literal["like", "reaction"]
    verb: str
    actor: FacebookUser
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    reaction_type: str = DEFAULT_REACTION_TYPE


def classify_messaging_event(event: MessagingEvent) -> Optional[MessengerMessageEvent]:
    """Messenger message variant, or None for receipts, postbacks and the like."""
    if event.message is None:
        return None
    attachments = [
        {
            "type": attachment.type,
            "url": attachment.payload.url if attachment.payload else "",
        }
        for attachment in event.message.attachments
    ]
    return MessengerMessageEvent(
        sender_id=event.sender.id,
        sender_name=event.sender.name,
        recipient_id=event.recipient.id,
        message_id=event.message.mid,
        text=event.message.text,
        attachments=attachments,
    )


def classify_feed_change(
    value: FeedChangeValue,
) -> Optional[Union[FeedCommentEvent, FeedPostEvent, FeedReactionEvent]]:
    """
    Map a feed change to its variant.

    Likes and reactions are classified for every verb (adds and removes both
    move counters). Comments and posts are only taken on `add`. Anything else,
    including items without a sender, returns None.
    """
    if value.from_ is None:
        return None

    if value.item in (LIKE_ITEM, REACTION_ITEM):
        return FeedReactionEvent(
            item=value.item,
            verb=value.verb or "",
            actor=value.from_,
            post_id=value.post_id,
            comment_id=value.comment_id,
            reaction_type=value.reaction_type or DEFAULT_REACTION_TYPE,
        )

    if value.verb != FeedVerb.ADD:
        return None

    if value.item == COMMENT_ITEM:
        if not value.comment_id:
            return None
        return FeedCommentEvent(
            sender=value.from_,
            comment_id=value.comment_id,
            post_id=value.post_id,
            message=value.message,
            value=value,
        )

    if value.item in FACEBOOK_POST_TYPES:
        return FeedPostEvent(
            sender=value.from_,
            post_id=value.post_id,
            message=value.message,
            value=value,
        )

    return None


# -----------------------------------------------------------------------------
# Outbound reply
# -----------------------------------------------------------------------------


class FacebookReplyAttachment(BaseModel):
    url: str


class FacebookReply(BaseModel):
    """Reply payload: text and/or attachment, optionally targeting a comment."""

    text: Optional[str] = None
    attachment: Optional[FacebookReplyAttachment] = None
    comment_id: Optional[str] = None


class FacebookReplyRequest(FacebookReply):
    conversation_id: UUID
    message_id: UUID


class FacebookReplyResult(BaseModel):
    message_id: Optional[str] = None
    comment_id: Optional[str] = None
    parent_id: Optional[str] = None


class FacebookPage(BaseModel):
    id: str
    name: Optional[str] = None
