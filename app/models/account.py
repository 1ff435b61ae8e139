"""Account model: a connected Facebook user and its long-lived token."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String, Text, Uuid

from app.db import Base
from app.models.mixins import TimestampMixin


class Account(Base, TimestampMixin):
    """Read-only from ingestion; token is used to mint page access tokens."""

    __tablename__ = "accounts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    kind = Column(String(32), nullable=False, default="facebook")
    name = Column(String(256), nullable=True)
    uid = Column(String(128), nullable=True)
    token = Column(Text, nullable=False)
