"""Per-entry page context threaded through webhook processing."""

from __future__ import annotations

from dataclasses import dataclass

from app.adapters.facebook_graph import (
    FacebookGraphClient,
    PageTokenCache,
    get_page_access_token,
)
from app.models.integration import Integration


@dataclass
class PageContext:
    """
    The page a webhook entry belongs to, plus what is needed to call the Graph
    API on its behalf. One instance per entry; never stored on a service.
    """

    integration: Integration
    page_id: str
    user_access_token: str
    graph: FacebookGraphClient
    token_cache: PageTokenCache

    def page_access_token(self) -> str:
        token = self.token_cache.get(self.page_id)
        if token is None:
            token = get_page_access_token(
                self.graph, self.page_id, self.user_access_token
            )
            self.token_cache.set(self.page_id, token)
        return token

    def invalidate_token(self) -> None:
        self.token_cache.invalidate(self.page_id)

    def owns_sender(self, sender_id: str) -> bool:
        """True when the sender is one of the integration's own pages."""
        return self.integration.owns_page(sender_id)
