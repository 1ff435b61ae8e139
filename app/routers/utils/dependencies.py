from uuid import UUID

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import FacebookGraphClient, build_graph_client
from app.db import get_db
from app.models.conversation import Conversation
from app.services.conversation_service import ConversationService
from app.services.message_publisher import MessagePublisher


def get_conversation_by_id(
    id: UUID,
    db: Session = Depends(get_db),
) -> Conversation:
    """FastAPI dependency to get a conversation by ID."""
    conversation = ConversationService(db).get_conversation(id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


def get_graph_client() -> FacebookGraphClient:
    """FastAPI dependency for the Graph API client."""
    return build_graph_client()


def get_message_publisher() -> MessagePublisher:
    """FastAPI dependency for the new-message publisher."""
    return MessagePublisher()
