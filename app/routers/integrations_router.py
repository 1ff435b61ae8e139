"""Integrations API: pages available to a connected account."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import FacebookGraphClient
from app.db import get_db
from app.routers.utils.dependencies import get_graph_client
from app.schemas.facebook import FacebookPage
from app.services.integration_service import IntegrationService

router = APIRouter(prefix="/integrations", tags=["integrations"])


@router.get("/accounts/{account_id}/pages", response_model=List[FacebookPage])
def list_account_pages(
    account_id: UUID,
    db: Session = Depends(get_db),
    graph: FacebookGraphClient = Depends(get_graph_client),
) -> List[FacebookPage]:
    """List the Facebook pages the account manages."""
    return IntegrationService(db).list_pages(account_id, graph)
