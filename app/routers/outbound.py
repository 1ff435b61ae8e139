"""
Outbound API: send agent replies to Facebook conversations.

Internal consumers POST a reply for an existing conversation and the stored
agent message it corresponds to; the returned platform ids are recorded on
that message.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import FacebookGraphClient
from app.commands.outbound.facebook_reply_command import FacebookReplyCommand
from app.db import get_db
from app.routers.utils.dependencies import get_graph_client
from app.schemas.facebook import FacebookReplyRequest, FacebookReplyResult
from app.services.conversation_message_service import ConversationMessageService
from app.services.conversation_service import ConversationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/outbound", tags=["outbound"])


@router.post("/facebook/reply", response_model=dict[str, FacebookReplyResult])
def send_facebook_reply(
    body: FacebookReplyRequest,
    db: Session = Depends(get_db),
    graph: FacebookGraphClient = Depends(get_graph_client),
) -> dict[str, FacebookReplyResult]:
    """
    Send a reply to a Messenger or feed conversation.
    Return {"data": {message_id?, comment_id?, parent_id?}}.
    """
    conversation = ConversationService(db).get_conversation(body.conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    message = ConversationMessageService(db).get_message(body.message_id)
    if message is None or message.conversation_id != conversation.id:
        raise HTTPException(status_code=404, detail="Message not found")

    result = FacebookReplyCommand(db, graph=graph).execute(conversation, body, message)
    return {"data": result}
