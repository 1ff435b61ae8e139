"""
Facebook Graph API client.

Thin wrapper over requests: every non-2xx response or network failure is raised
as TransportError. No retries here; callers decide what a failure means.
"""

from __future__ import annotations

import hashlib
import hmac
import threading
import time
from typing import Any, Optional

import requests

from app.config import Settings, get_facebook_config, get_settings
from app.exceptions import TransportError
from app.infra.logging_config import get_logger

logger = get_logger("facebook_graph")

POST_FIELDS = (
    "caption,description,link,picture,source,message,from,created_time,"
    "comments.summary(true)"
)
COMMENT_FIELDS = "parent.fields(id),from,message,attachment_url,created_time,comment_count"
PROFILE_PICTURE_HEIGHT = 600
PAGE_LIST_LIMIT = 100


class FacebookGraphClient:
    """Blocking Graph API client exposing get(path, token) and post(path, token, body)."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        app_secret: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._app_secret = app_secret
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _auth_params(self, token: Optional[str]) -> dict[str, str]:
        if not token:
            return {}
        params = {"access_token": token}
        if self._app_secret:
            params["appsecret_proof"] = hmac.new(
                self._app_secret.encode("utf-8"),
                token.encode("utf-8"),
                hashlib.sha256,
            ).hexdigest()
        return params

    def _send(
        self,
        method: str,
        path: str,
        token: Optional[str],
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        query = dict(params or {})
        query.update(self._auth_params(token))
        try:
            resp = self._session.request(
                method,
                self._url(path),
                params=query,
                json=body,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            error_code = None
            try:
                error_code = resp.json().get("error", {}).get("code")
            except (ValueError, AttributeError):
                pass
            logger.warning(
                "graph_request_failed method=%s path=%s status=%s code=%s",
                method,
                path,
                resp.status_code,
                error_code,
            )
            raise TransportError(
                f"{method} {path} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                error_code=error_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"{method} {path} returned invalid JSON") from e

    def get(
        self,
        path: str,
        token: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        return self._send("GET", path, token, params=params)

    def post(self, path: str, token: str, body: dict[str, Any]) -> Any:
        return self._send("POST", path, token, body=body)


def build_graph_client(settings: Optional[Settings] = None) -> FacebookGraphClient:
    """Graph client configured from settings and the FACEBOOK app secret."""
    settings = settings or get_settings()
    config = get_facebook_config(settings)
    return FacebookGraphClient(
        base_url=settings.graph_base_url,
        timeout=settings.facebook_graph_timeout,
        app_secret=config.app_secret,
    )


# -----------------------------------------------------------------------------
# Page access tokens
# -----------------------------------------------------------------------------


class PageTokenCache:
    """Page access tokens keyed by page id, kept for ttl_seconds (0 disables)."""

    def __init__(self, ttl_seconds: int) -> None:
        self._ttl = ttl_seconds
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, page_id: str) -> Optional[str]:
        if self._ttl <= 0:
            return None
        with self._lock:
            entry = self._entries.get(page_id)
            if entry is None:
                return None
            token, expires_at = entry
            if expires_at <= time.monotonic():
                del self._entries[page_id]
                return None
            return token

    def set(self, page_id: str, token: str) -> None:
        if self._ttl <= 0:
            return
        with self._lock:
            self._entries[page_id] = (token, time.monotonic() + self._ttl)

    def invalidate(self, page_id: str) -> None:
        with self._lock:
            self._entries.pop(page_id, None)


def get_page_access_token(
    graph: FacebookGraphClient, page_id: str, user_access_token: str
) -> str:
    response = graph.get(
        page_id, user_access_token, params={"fields": "access_token"}
    )
    token = (response or {}).get("access_token")
    if not token:
        raise TransportError(f"No page access token returned for page {page_id}")
    return token


# -----------------------------------------------------------------------------
# Object lookups
# -----------------------------------------------------------------------------


def get_object(graph: FacebookGraphClient, object_id: str, token: str) -> dict[str, Any]:
    return graph.get(object_id, token)


def get_post_info(graph: FacebookGraphClient, post_id: str, token: str) -> dict[str, Any]:
    """Post object with its comment summary."""
    return graph.get(post_id, token, params={"fields": POST_FIELDS})


def get_comment_info(
    graph: FacebookGraphClient, comment_id: str, token: str
) -> dict[str, Any]:
    return graph.get(comment_id, token, params={"fields": COMMENT_FIELDS})


def get_comments(
    graph: FacebookGraphClient, comment_id: str, token: str
) -> list[dict[str, Any]]:
    """Direct replies of a comment (first page)."""
    response = graph.get(
        f"{comment_id}/comments", token, params={"fields": COMMENT_FIELDS}
    )
    return (response or {}).get("data", [])


def fetch_comments(
    graph: FacebookGraphClient, post_id: str, token: str, limit: int
) -> list[dict[str, Any]]:
    """Up to `limit` comments of a post, following cursor pagination."""
    comments: list[dict[str, Any]] = []
    params: dict[str, Any] = {"fields": COMMENT_FIELDS, "limit": limit}
    while len(comments) < limit:
        response = graph.get(f"{post_id}/comments", token, params=params) or {}
        comments.extend(response.get("data", []))
        after = response.get("paging", {}).get("cursors", {}).get("after")
        if not after or not response.get("paging", {}).get("next"):
            break
        params = {**params, "after": after}
    return comments[:limit]


def get_page_list(graph: FacebookGraphClient, user_access_token: str) -> list[dict[str, Any]]:
    """Pages managed by the user token, as {id, name}."""
    response = graph.get(
        "me/accounts", user_access_token, params={"limit": PAGE_LIST_LIMIT}
    )
    return [
        {"id": page["id"], "name": page.get("name")}
        for page in (response or {}).get("data", [])
    ]


def get_profile(graph: FacebookGraphClient, user_id: str, token: str) -> dict[str, Any]:
    return graph.get(user_id, token)


def get_profile_picture(graph: FacebookGraphClient, user_id: str) -> str:
    """
    Avatar URL for a user. Best effort: any transport failure yields "".
    """
    try:
        response = graph.get(
            f"{user_id}/picture",
            params={"height": PROFILE_PICTURE_HEIGHT, "redirect": 0},
        )
    except TransportError as e:
        logger.debug("profile_picture_lookup_failed user_id=%s error=%s", user_id, e)
        return ""
    data = (response or {}).get("data") or {}
    return data.get("url") or ""


_page_token_cache: Optional[PageTokenCache] = None


def get_page_token_cache() -> PageTokenCache:
    """Process-wide page token cache, sized from settings on first use."""
    global _page_token_cache
    if _page_token_cache is None:
        _page_token_cache = PageTokenCache(
            get_settings().facebook_page_token_ttl_seconds
        )
    return _page_token_cache
