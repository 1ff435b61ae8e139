"""Facebook Graph API adapter."""

from app.adapters.facebook_graph import FacebookGraphClient, PageTokenCache

__all__ = ["FacebookGraphClient", "PageTokenCache"]
