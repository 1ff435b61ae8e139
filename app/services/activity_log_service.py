"""Append-only activity log writes."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.constants.facebook import ActivityLogAction
from app.models.activity_log import ActivityLog
from app.models.conversation import Conversation
from app.models.customer import Customer


class ActivityLogService:
    """Write-only: ingestion records conversation creation and customer registration."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_conversation_log(
        self, conversation: Conversation, customer: Customer
    ) -> ActivityLog:
        return self._create(
            action=ActivityLogAction.CONVERSATION_CREATE.value,
            content_type="customer",
            content_id=customer.id,
            details={
                "conversation_id": str(conversation.id),
                "kind": conversation.kind,
                "content": conversation.content,
            },
        )

    def create_customer_registration_log(self, customer: Customer) -> ActivityLog:
        return self._create(
            action=ActivityLogAction.CUSTOMER_CREATE.value,
            content_type="customer",
            content_id=customer.id,
            details={
                "integration_id": str(customer.integration_id),
                "facebook_user_id": customer.facebook_user_id,
            },
        )

    def _create(self, **fields) -> ActivityLog:
        log = ActivityLog(**fields)
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log
