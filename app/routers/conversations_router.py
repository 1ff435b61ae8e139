"""Conversations API: get, messages, comment import."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import FacebookGraphClient
from app.commands.import_post_comments_command import (
    DEFAULT_IMPORT_LIMIT,
    ImportPostCommentsCommand,
)
from app.db import get_db
from app.models.conversation import Conversation
from app.routers.utils.dependencies import (
    get_conversation_by_id,
    get_graph_client,
    get_message_publisher,
)
from app.schemas.conversation import (
    CommentImportResult,
    ConversationMessageRead,
    ConversationRead,
)
from app.services.conversation_message_service import ConversationMessageService
from app.services.message_publisher import MessagePublisher

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("/{id}", response_model=ConversationRead)
def get_conversation(
    conversation: Conversation = Depends(get_conversation_by_id),
) -> ConversationRead:
    """Get a conversation by ID."""
    return ConversationRead.model_validate(conversation)


@router.get("/{id}/messages", response_model=Page[ConversationMessageRead])
def list_conversation_messages(
    params: Params = Depends(),
    conversation: Conversation = Depends(get_conversation_by_id),
    db: Session = Depends(get_db),
) -> Page[ConversationMessageRead]:
    """List a conversation's messages, oldest first."""
    query = ConversationMessageService(db).get_messages_query(conversation.id)
    return paginate(query, params=params)


@router.post("/{id}/comments/import", response_model=CommentImportResult)
def import_post_comments(
    limit: int = Query(DEFAULT_IMPORT_LIMIT, ge=1, le=500),
    conversation: Conversation = Depends(get_conversation_by_id),
    db: Session = Depends(get_db),
    graph: FacebookGraphClient = Depends(get_graph_client),
    publisher: MessagePublisher = Depends(get_message_publisher),
) -> CommentImportResult:
    """Import the post's existing comments into a feed conversation."""
    command = ImportPostCommentsCommand(db, graph=graph, publisher=publisher)
    return command.execute(conversation, limit=limit)
