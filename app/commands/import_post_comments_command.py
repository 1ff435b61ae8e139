"""Command to import a post's existing comments into its feed conversation."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import (
    FacebookGraphClient,
    PageTokenCache,
    build_graph_client,
    fetch_comments,
    get_page_token_cache,
)
from app.constants.facebook import FacebookDataKind
from app.core.page_context import PageContext
from app.exceptions import NotFoundError
from app.models.conversation import Conversation
from app.schemas.conversation import CommentImportResult
from app.services.conversation_service import ConversationResolver
from app.services.customer_service import CustomerResolver
from app.services.integration_service import IntegrationService
from app.services.message_ingester import MessageIngester
from app.services.message_publisher import MessagePublisher

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_LIMIT = 100


class ImportPostCommentsCommand:
    """
    Fetch up to `limit` comments of a feed conversation's post and store the
    ones not yet recorded, each attributed to its own author.
    """

    def __init__(
        self,
        db: Session,
        graph: Optional[FacebookGraphClient] = None,
        publisher: Optional[MessagePublisher] = None,
        token_cache: Optional[PageTokenCache] = None,
    ) -> None:
        self.db = db
        self.graph = graph or build_graph_client()
        self.token_cache = token_cache or get_page_token_cache()
        self.integration_service = IntegrationService(db)
        customer_resolver = CustomerResolver(db, self.graph)
        self.ingester = MessageIngester(
            db,
            ConversationResolver(db, customer_resolver),
            customer_resolver,
            publisher or MessagePublisher(),
        )

    def execute(
        self, conversation: Conversation, limit: int = DEFAULT_IMPORT_LIMIT
    ) -> CommentImportResult:
        if conversation.kind != FacebookDataKind.FEED or not conversation.post_id:
            raise HTTPException(
                status_code=400,
                detail="Comments can only be imported into feed conversations",
            )
        integration = self.integration_service.get_integration(
            conversation.integration_id
        )
        if integration is None or integration.account is None:
            raise NotFoundError(
                f"Integration or account of conversation {conversation.id} not found"
            )

        ctx = PageContext(
            integration=integration,
            page_id=conversation.page_id,
            user_access_token=integration.account.token,
            graph=self.graph,
            token_cache=self.token_cache,
        )
        comments = fetch_comments(
            self.graph, conversation.post_id, ctx.page_access_token(), limit
        )
        imported, skipped = self.ingester.parent_post_restorer.create_messages_from_comments(
            ctx, conversation, comments, post_id=conversation.post_id
        )
        logger.info(
            "Imported %s comments (%s skipped) of post %s",
            imported,
            skipped,
            conversation.post_id,
        )
        return CommentImportResult(
            post_id=conversation.post_id, imported=imported, skipped=skipped
        )
