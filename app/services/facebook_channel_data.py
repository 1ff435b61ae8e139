"""Message channel data builders for feed comments and posts."""

from __future__ import annotations

from typing import Any, Optional

from app.schemas.conversation import MessageChannelData


def _as_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def generate_comment_params(params: dict[str, Any]) -> MessageChannelData:
    """
    Channel data for a comment, from a feed change value or a Graph comment.

    parent_id is the explicit parent object's id when present. Otherwise the
    change's parent_id is kept only when it differs from post_id, i.e. when
    the comment replies to another comment rather than to the post.
    """
    post_id = _as_str(params.get("post_id"))
    parent_id = None
    parent = params.get("parent")
    if parent and parent.get("id"):
        parent_id = _as_str(parent["id"])
    elif params.get("parent_id") and _as_str(params["parent_id"]) != post_id:
        parent_id = _as_str(params["parent_id"])

    return MessageChannelData(
        post_id=post_id,
        item=params.get("item"),
        comment_id=_as_str(params.get("id") or params.get("comment_id")),
        parent_id=parent_id,
        photo=params.get("photo"),
        video=params.get("video"),
        created_time=_as_str(params.get("created_time")),
    )


def generate_post_params(params: dict[str, Any]) -> MessageChannelData:
    """
    Channel data for a wall post. The post's link is stored as video, photo
    or plain link depending on whether a video_id or photo_id accompanies it.
    """
    data: dict[str, Any] = {
        "post_id": _as_str(params.get("post_id")),
        "item": params.get("item"),
        "is_post": True,
    }
    link = params.get("link")
    if link:
        if params.get("video_id"):
            data["video"] = link
        elif params.get("photo_id"):
            data["photo"] = link
        else:
            data["link"] = link
    if params.get("created_time"):
        data["created_time"] = _as_str(params["created_time"])
    if params.get("photos"):
        data["photos"] = params["photos"]
    return MessageChannelData(**data)
