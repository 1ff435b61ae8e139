"""
Backfill of missing feed context.

A comment can arrive for a post the inbox has never seen (the post predates
the integration, or its webhook was lost). Before such a comment is stored,
the post itself and, for a reply, the parent comment together with its
direct replies are fetched from the Graph API and stored first.

Only one level of ancestry is restored: the parent comment's own parent is
not followed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from app.adapters.facebook_graph import get_comment_info, get_comments, get_post_info
from app.constants.facebook import COMMENT_ITEM, EMPTY_CONTENT
from app.core.page_context import PageContext
from app.models.conversation import Conversation
from app.services.facebook_channel_data import (
    generate_comment_params,
    generate_post_params,
)

if TYPE_CHECKING:
    from app.services.message_ingester import MessageIngester

logger = logging.getLogger(__name__)

# Item recorded on backfilled post messages
BACKFILLED_POST_ITEM = "status"


class ParentPostRestorer:
    def __init__(self, ingester: "MessageIngester") -> None:
        self.ingester = ingester
        self.messages = ingester.messages

    def ensure_parent_post(
        self,
        ctx: PageContext,
        conversation: Conversation,
        platform_user_id: str,
        comment_id: Optional[str],
        post_id: Optional[str],
        item: Optional[str],
    ) -> bool:
        """
        Make sure the conversation holds the post a comment belongs to.

        Returns True when the post (and possibly the parent comment thread)
        was backfilled, False when there was nothing to do.
        """
        if not post_id or item != COMMENT_ITEM:
            return False
        if self.messages.get_post_message(conversation.id, post_id) is not None:
            return False

        token = ctx.page_access_token()
        post = get_post_info(ctx.graph, post_id, token)
        author = post.get("from") or {}
        summary = (post.get("comments") or {}).get("summary") or {}
        channel_data = generate_post_params(
            {**post, "item": BACKFILLED_POST_ITEM, "post_id": post.get("id") or post_id}
        ).model_copy(
            update={
                "sender_id": author.get("id"),
                "sender_name": author.get("name"),
                "comment_count": summary.get("total_count", 0),
            }
        )
        self.ingester.create_message(
            ctx,
            conversation,
            platform_user_id,
            post.get("message") or EMPTY_CONTENT,
            channel_data,
        )
        logger.info("Backfilled post %s into conversation %s", post_id, conversation.id)

        if not comment_id:
            return True

        comment = get_comment_info(ctx.graph, comment_id, token)
        parent = comment.get("parent")
        if parent and parent.get("id"):
            parent_comment = get_comment_info(ctx.graph, parent["id"], token)
            replies = get_comments(ctx.graph, parent["id"], token)
            self.create_messages_from_comments(
                ctx,
                conversation,
                [*replies, parent_comment],
                post_id=post_id,
                platform_user_id=platform_user_id,
            )
        return True

    def create_messages_from_comments(
        self,
        ctx: PageContext,
        conversation: Conversation,
        comments: list[dict[str, Any]],
        post_id: Optional[str] = None,
        platform_user_id: Optional[str] = None,
    ) -> tuple[int, int]:
        """
        Store every Graph comment not yet recorded in the conversation, in
        list order.

        Messages are attributed to platform_user_id when given, otherwise to
        each comment's author. Returns (imported, skipped).
        """
        imported = skipped = 0
        for comment in comments:
            comment_id = comment.get("id")
            if not comment_id:
                skipped += 1
                continue
            if self.messages.get_by_comment_id(comment_id, conversation.id) is not None:
                skipped += 1
                continue

            author = comment.get("from") or {}
            user_id = platform_user_id or author.get("id")
            if not user_id:
                logger.debug("Comment %s has no author; skipped", comment_id)
                skipped += 1
                continue

            channel_data = generate_comment_params(
                {
                    **comment,
                    "item": COMMENT_ITEM,
                    "post_id": post_id or conversation.post_id,
                }
            ).model_copy(
                update={"sender_id": author.get("id"), "sender_name": author.get("name")}
            )
            stored = self.ingester.store_message(
                ctx,
                conversation,
                user_id,
                comment.get("message") or comment.get("attachment_url") or EMPTY_CONTENT,
                channel_data,
            )
            if stored is None:
                # recorded in another conversation
                skipped += 1
                continue
            imported += 1
        return imported, skipped
