"""
Commands to process Facebook page webhook deliveries.

ReceiveFacebookWebhookCommand offers a delivery to every Facebook integration;
FacebookWebhookCommand dispatches the entries one integration owns to the
Messenger or feed ingestion path.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import (
    FacebookGraphClient,
    PageTokenCache,
    build_graph_client,
    get_page_token_cache,
)
from app.core.page_context import PageContext
from app.exceptions import ConfigurationError, NotFoundError, TransportError
from app.models.integration import Integration
from app.schemas.facebook import (
    FeedChange,
    MessagingEvent,
    WebhookEntry,
    WebhookPayload,
    classify_messaging_event,
)
from app.services.conversation_service import ConversationResolver
from app.services.customer_service import CustomerResolver
from app.services.integration_service import IntegrationService
from app.services.message_ingester import MessageIngester
from app.services.message_publisher import MessagePublisher

PAGE_OBJECT = "page"
FEED_FIELD = "feed"


class FacebookWebhookCommand:
    """
    Dispatch a webhook delivery for one integration.

    Entries for pages the integration does not own are skipped. Each owned
    entry is processed in its own page context; a failure aborts that entry
    only and processing moves on to the next one.
    """

    def __init__(
        self,
        db: Session,
        integration: Integration,
        user_access_token: str,
        graph: FacebookGraphClient,
        publisher: MessagePublisher,
        token_cache: Optional[PageTokenCache] = None,
    ) -> None:
        self.db = db
        self.integration = integration
        self.user_access_token = user_access_token
        self.graph = graph
        self.token_cache = token_cache or get_page_token_cache()
        self.logger = logging.getLogger(__name__)

        self.customer_resolver = CustomerResolver(db, graph)
        self.conversation_resolver = ConversationResolver(db, self.customer_resolver)
        self.ingester = MessageIngester(
            db, self.conversation_resolver, self.customer_resolver, publisher
        )

    def execute(self, payload: WebhookPayload) -> None:
        """
        Process every owned entry of the delivery, in order.

        Raises:
            ConfigurationError: the integration has no Facebook page data.
        """
        if self.integration.page_ids is None:
            raise ConfigurationError(
                f"Integration {self.integration.id} has no Facebook page data"
            )
        if payload.object != PAGE_OBJECT:
            self.logger.debug("Ignoring webhook object %s", payload.object)
            return

        for entry in payload.entry:
            if not self.integration.owns_page(entry.id):
                self.logger.debug(
                    "Entry for page %s not owned by integration %s",
                    entry.id,
                    self.integration.id,
                )
                continue

            ctx = PageContext(
                integration=self.integration,
                page_id=entry.id,
                user_access_token=self.user_access_token,
                graph=self.graph,
                token_cache=self.token_cache,
            )
            try:
                self._process_entry(ctx, entry)
            except TransportError as e:
                if e.is_auth_error:
                    ctx.invalidate_token()
                self.logger.exception(
                    "Graph request failed for page %s: %s", entry.id, e
                )
            except (ConfigurationError, NotFoundError) as e:
                self.logger.exception(
                    "Failed to process entry for page %s: %s", entry.id, e
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                self.logger.exception(
                    "Database error processing entry for page %s: %s", entry.id, e
                )
            except Exception as e:
                self.db.rollback()
                self.logger.exception(
                    "Unexpected error processing entry for page %s: %s", entry.id, e
                )

    def _process_entry(self, ctx: PageContext, entry: WebhookEntry) -> None:
        for raw_event in entry.messaging or []:
            try:
                event = MessagingEvent.model_validate(raw_event)
            except ValidationError as e:
                self.logger.warning(
                    "Skipping malformed messaging event on %s: %s", ctx.page_id, e
                )
                continue
            message_event = classify_messaging_event(event)
            if message_event is None:
                self.logger.debug(
                    "Skipping non-message messaging event on %s", ctx.page_id
                )
                continue
            self.ingester.ingest_messenger_event(ctx, message_event)

        for raw_change in entry.changes or []:
            try:
                change = FeedChange.model_validate(raw_change)
            except ValidationError as e:
                self.logger.warning(
                    "Skipping malformed change on %s: %s", ctx.page_id, e
                )
                continue
            if change.field not in (None, FEED_FIELD):
                self.logger.debug("Skipping %s change on %s", change.field, ctx.page_id)
                continue
            self.ingester.ingest_feed_change(ctx, change.value)


class ReceiveFacebookWebhookCommand:
    """Offer one webhook delivery to every Facebook integration with an account."""

    def __init__(
        self,
        db: Session,
        graph: Optional[FacebookGraphClient] = None,
        publisher: Optional[MessagePublisher] = None,
        token_cache: Optional[PageTokenCache] = None,
    ) -> None:
        self.db = db
        self.graph = graph or build_graph_client()
        self.publisher = publisher or MessagePublisher()
        self.token_cache = token_cache or get_page_token_cache()
        self.integration_service = IntegrationService(db)
        self.logger = logging.getLogger(__name__)

    def execute(self, payload: WebhookPayload) -> int:
        """
        Run the delivery through each integration's dispatcher.

        Returns:
            int: number of integrations that processed the delivery.
        """
        if payload.object != PAGE_OBJECT:
            self.logger.debug("Ignoring webhook object %s", payload.object)
            return 0

        processed = 0
        for integration in self.integration_service.get_facebook_integrations():
            try:
                account = integration.account
                if account is None:
                    raise NotFoundError(
                        f"Account {integration.account_id} of integration "
                        f"{integration.id} not found"
                    )
                FacebookWebhookCommand(
                    self.db,
                    integration,
                    account.token,
                    self.graph,
                    self.publisher,
                    self.token_cache,
                ).execute(payload)
                processed += 1
            except (ConfigurationError, NotFoundError) as e:
                self.logger.error("Skipping integration %s: %s", integration.id, e)
            except Exception as e:
                self.db.rollback()
                self.logger.exception(
                    "Unexpected error processing integration %s: %s", integration.id, e
                )
        return processed
