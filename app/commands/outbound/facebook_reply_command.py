"""
Command to send an agent reply to a Facebook conversation.

Messenger conversations get a direct message addressed to the customer;
feed conversations get a comment on the post or a reply to one comment. The
platform ids of the sent reply are written back onto the agent's message.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.adapters.facebook_graph import (
    FacebookGraphClient,
    PageTokenCache,
    build_graph_client,
    get_page_token_cache,
)
from app.constants.facebook import FacebookDataKind
from app.core.page_context import PageContext
from app.exceptions import ConfigurationError, NotFoundError, TransportError
from app.models.conversation import Conversation
from app.models.conversation_message import ConversationMessage
from app.schemas.conversation import MessageChannelData
from app.schemas.facebook import FacebookReply, FacebookReplyResult
from app.services.conversation_message_service import ConversationMessageService
from app.services.integration_service import IntegrationService

logger = logging.getLogger(__name__)

MESSENGER_SEND_PATH = "me/messages"


class FacebookReplyCommand:
    """Send a reply through the Graph API and record the returned ids."""

    def __init__(
        self,
        db: Session,
        graph: Optional[FacebookGraphClient] = None,
        token_cache: Optional[PageTokenCache] = None,
    ) -> None:
        self.db = db
        self.graph = graph or build_graph_client()
        self.token_cache = token_cache or get_page_token_cache()
        self.integration_service = IntegrationService(db)
        self.message_service = ConversationMessageService(db)

    def execute(
        self,
        conversation: Conversation,
        reply: FacebookReply,
        message: ConversationMessage,
    ) -> FacebookReplyResult:
        """
        Send reply for conversation and patch message with the platform ids.

        Args:
            conversation: The Messenger or feed conversation being answered.
            reply: Text and/or attachment, plus the comment to reply to (feed).
            message: The stored agent message the reply corresponds to.

        Returns:
            FacebookReplyResult: ids returned by the platform.

        Raises:
            NotFoundError: the conversation's integration or account is missing.
            ConfigurationError: the conversation has no Facebook channel data.
            TransportError: the Graph API call failed.
        """
        integration = self.integration_service.get_integration(
            conversation.integration_id
        )
        if integration is None or integration.page_ids is None:
            raise NotFoundError(
                f"Integration {conversation.integration_id} not found"
            )
        account = (
            self.integration_service.get_account(integration.account_id)
            if integration.account_id
            else None
        )
        if account is None:
            raise NotFoundError(
                f"Account of integration {integration.id} not found"
            )
        if not conversation.kind or not conversation.page_id:
            raise ConfigurationError(
                f"Conversation {conversation.id} has no Facebook channel data"
            )

        ctx = PageContext(
            integration=integration,
            page_id=conversation.page_id,
            user_access_token=account.token,
            graph=self.graph,
            token_cache=self.token_cache,
        )
        try:
            if conversation.kind == FacebookDataKind.MESSENGER:
                return self._reply_messenger(ctx, conversation, reply, message)
            if conversation.kind == FacebookDataKind.FEED:
                return self._reply_feed(ctx, conversation, reply, message)
        except TransportError as e:
            if e.is_auth_error:
                ctx.invalidate_token()
            raise
        raise ConfigurationError(
            f"Conversation {conversation.id} has unknown kind {conversation.kind}"
        )

    def _reply_messenger(
        self,
        ctx: PageContext,
        conversation: Conversation,
        reply: FacebookReply,
        message: ConversationMessage,
    ) -> FacebookReplyResult:
        body: dict[str, Any] = {"recipient": {"id": conversation.sender_id}}
        if reply.attachment:
            body["message"] = {
                "attachment": {
                    "type": "file",
                    "payload": {"url": reply.attachment.url},
                }
            }
        else:
            body["message"] = {"text": reply.text} if reply.text else {}

        response = self.graph.post(MESSENGER_SEND_PATH, ctx.page_access_token(), body)
        platform_message_id = (response or {}).get("message_id")
        if platform_message_id:
            self.message_service.update_channel_data(
                message.id, MessageChannelData(message_id=platform_message_id)
            )
        else:
            logger.warning(
                "Messenger send returned no message_id (conversation %s)",
                conversation.id,
            )
        logger.info(
            "Sent Messenger reply %s in conversation %s",
            platform_message_id,
            conversation.id,
        )
        return FacebookReplyResult(message_id=platform_message_id)

    def _reply_feed(
        self,
        ctx: PageContext,
        conversation: Conversation,
        reply: FacebookReply,
        message: ConversationMessage,
    ) -> FacebookReplyResult:
        target_id = reply.comment_id or conversation.post_id
        body: dict[str, Any] = {}
        if reply.text:
            body["message"] = reply.text
        if reply.attachment:
            body["attachment_url"] = reply.attachment.url

        response = self.graph.post(
            f"{target_id}/comments", ctx.page_access_token(), body
        )
        comment_id = (response or {}).get("id")

        fields: dict[str, Any] = {}
        if comment_id:
            fields["comment_id"] = comment_id
        if reply.comment_id:
            fields["parent_id"] = reply.comment_id
        if reply.attachment:
            fields["link"] = reply.attachment.url
        self.message_service.update_channel_data(
            message.id, MessageChannelData(**fields)
        )
        self.message_service.increment_comment_count(conversation.id)
        logger.info(
            "Sent feed reply %s on %s in conversation %s",
            comment_id,
            target_id,
            conversation.id,
        )
        return FacebookReplyResult(comment_id=comment_id, parent_id=reply.comment_id)
