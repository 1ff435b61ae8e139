"""Read access to integrations and their accounts."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.adapters.facebook_graph import FacebookGraphClient, get_page_list
from app.constants.facebook import INTEGRATION_KIND_FACEBOOK
from app.exceptions import NotFoundError
from app.models.account import Account
from app.models.integration import Integration
from app.schemas.facebook import FacebookPage


class IntegrationService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_integration(self, integration_id: UUID) -> Optional[Integration]:
        return (
            self.db.query(Integration)
            .filter(Integration.id == integration_id)
            .first()
        )

    def get_account(self, account_id: UUID) -> Optional[Account]:
        return self.db.query(Account).filter(Account.id == account_id).first()

    def get_facebook_integrations(self) -> List[Integration]:
        """Facebook integrations that have an account attached."""
        return (
            self.db.query(Integration)
            .filter(
                Integration.kind == INTEGRATION_KIND_FACEBOOK,
                Integration.account_id.isnot(None),
            )
            .order_by(Integration.created_at)
            .all()
        )

    def list_pages(
        self, account_id: UUID, graph: FacebookGraphClient
    ) -> List[FacebookPage]:
        """Pages the account's user token manages, for integration setup."""
        account = self.get_account(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return [FacebookPage(**page) for page in get_page_list(graph, account.token)]
