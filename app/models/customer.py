"""Customer model: a Facebook user who contacted a page."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint, Uuid

from app.db import Base
from app.models.mixins import TimestampMixin


class Customer(Base, TimestampMixin):
    """One row per (integration, Facebook user id). Profile fields are set once."""

    __tablename__ = "customers"

    __table_args__ = (
        UniqueConstraint(
            "integration_id",
            "facebook_user_id",
            name="uq_customers_integration_facebook_user",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    integration_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("integrations.id", ondelete="CASCADE"),
        nullable=False,
    )
    facebook_user_id = Column(String(128), nullable=False, index=True)
    first_name = Column(String(256), nullable=True)
    last_name = Column(String(256), nullable=True)
    avatar = Column(Text, nullable=True)
