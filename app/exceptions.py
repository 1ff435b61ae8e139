"""Error taxonomy for webhook ingestion and outbound replies."""

from __future__ import annotations

from typing import Optional

# Graph API error code for an invalid or expired access token
GRAPH_OAUTH_ERROR_CODE = 190


class InboxError(Exception):
    """Base class for inbox processing errors."""


class ConfigurationError(InboxError):
    """Missing app secret, integration channel data, or page context."""


class NotFoundError(InboxError):
    """A referenced conversation, integration or account does not exist."""


class TransportError(InboxError):
    """A Graph API call failed (network error or non-2xx response)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code

    @property
    def is_auth_error(self) -> bool:
        return (
            self.status_code in (401, 403)
            or self.error_code == GRAPH_OAUTH_ERROR_CODE
        )
