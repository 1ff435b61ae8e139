"""ActivityLog model: append-only audit entries."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid

from app.db import Base, JSONType


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(String(64), nullable=False)
    content_type = Column(String(32), nullable=False)
    content_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    details = Column(JSONType, nullable=True)
    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )
