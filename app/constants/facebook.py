"""Facebook channel constants: conversation statuses, data kinds, feed items."""

from enum import StrEnum


class ConversationStatus(StrEnum):
    """Inbox conversation lifecycle states."""

    NEW = "new"
    OPEN = "open"  # set by agents picking up a conversation
    CLOSED = "closed"


class FacebookDataKind(StrEnum):
    """Which Facebook surface a conversation correlates on."""

    MESSENGER = "messenger"
    FEED = "feed"


class FeedVerb(StrEnum):
    """Only `add` is distinguished; any other verb undoes a like or reaction."""

    ADD = "add"


class ActivityLogAction(StrEnum):
    CONVERSATION_CREATE = "conversation.create"
    CUSTOMER_CREATE = "customer.create"


INTEGRATION_KIND_FACEBOOK = "facebook"

# Feed items that represent a wall post
FACEBOOK_POST_TYPES = ("status", "photo", "video", "link", "post", "share")
COMMENT_ITEM = "comment"
LIKE_ITEM = "like"
REACTION_ITEM = "reaction"
DEFAULT_REACTION_TYPE = "like"

# Placeholder content for messages without text
EMPTY_CONTENT = "..."

# Messages a closed conversation may hold and still be reopened
REOPEN_MESSAGE_LIMIT = 1

PUBSUB_NEW_MESSAGE_CHANNEL = "conversationMessageInserted"
PUBSUB_CUSTOMER_MESSAGE_CHANNEL = "conversationClientMessageInserted"
