"""Like counters and reactor lists on feed messages."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from app.constants.facebook import DEFAULT_REACTION_TYPE, LIKE_ITEM, FeedVerb
from app.models.conversation_message import ConversationMessage
from app.schemas.facebook import FeedReactionEvent
from app.services.conversation_message_service import ConversationMessageService

logger = logging.getLogger(__name__)


def reaction_selector(
    post_id: Optional[str], comment_id: Optional[str]
) -> Optional[List[Any]]:
    """
    Target of a like/reaction: the comment when a comment id is present,
    otherwise the root post message. None when the event names neither.
    """
    if comment_id:
        return [ConversationMessage.comment_id == comment_id]
    if post_id:
        return [
            ConversationMessage.post_id == post_id,
            ConversationMessage.is_post.is_(True),
        ]
    return None


class ReactionAggregator:
    def __init__(self, db: Session) -> None:
        self.messages = ConversationMessageService(db)

    def apply(
        self,
        verb: str,
        selector: Optional[List[Any]],
        kind: str,
        reaction_type: Optional[str],
        actor: dict[str, Any],
    ) -> int:
        """
        Apply one like/reaction event to every message matching selector.

        like: like_count moves by +1 on add and -1 on any other verb.
        reaction: actor is added to (add) or removed by id from (other verbs)
        reactions[reaction_type].

        Returns the number of messages touched.
        """
        if not selector:
            logger.debug("Reaction without post or comment id ignored")
            return 0

        if kind == LIKE_ITEM:
            delta = 1 if verb == FeedVerb.ADD else -1
            return self.messages.increment_like_count(selector, delta)

        reaction_type = reaction_type or DEFAULT_REACTION_TYPE
        if verb == FeedVerb.ADD:
            return self.messages.add_reaction(selector, reaction_type, actor)
        return self.messages.remove_reaction(selector, reaction_type, actor["id"])

    def apply_event(self, event: FeedReactionEvent) -> int:
        return self.apply(
            verb=event.verb,
            selector=reaction_selector(event.post_id, event.comment_id),
            kind=event.item,
            reaction_type=event.reaction_type,
            actor=event.actor.model_dump(exclude_none=True),
        )
