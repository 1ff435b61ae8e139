"""Integration model: one per connected set of Facebook pages."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db import Base, JSONType
from app.models.mixins import TimestampMixin


class Integration(Base, TimestampMixin):
    __tablename__ = "integrations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(256), nullable=False)
    kind = Column(String(32), nullable=False, index=True)
    account_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    page_ids = Column(JSONType, nullable=True)  # null means no Facebook data

    account = relationship("Account")

    def owns_page(self, page_id: str | None) -> bool:
        return bool(page_id) and page_id in (self.page_ids or [])
