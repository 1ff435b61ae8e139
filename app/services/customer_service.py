"""Customer lookup and first-contact registration."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.adapters.facebook_graph import (
    FacebookGraphClient,
    get_profile,
    get_profile_picture,
)
from app.models.customer import Customer
from app.services.activity_log_service import ActivityLogService

logger = logging.getLogger(__name__)


def split_profile_name(profile: dict) -> tuple[str, str]:
    """
    First and last name from a Graph profile.

    Messenger profiles carry first_name/last_name only; feed profiles carry a
    single name. Prefer the split fields, fall back to splitting name.
    """
    first_name = profile.get("first_name")
    last_name = profile.get("last_name")
    if first_name or last_name:
        return first_name or "", last_name or ""
    name = (profile.get("name") or "").strip()
    if not name:
        return "", ""
    first, _, last = name.partition(" ")
    return first, last.strip()


class CustomerService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_customer(self, customer_id: UUID) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_by_facebook_user_id(
        self, integration_id: UUID, facebook_user_id: str
    ) -> Optional[Customer]:
        return (
            self.db.query(Customer)
            .filter(
                Customer.integration_id == integration_id,
                Customer.facebook_user_id == facebook_user_id,
            )
            .first()
        )

    def create_customer(
        self,
        integration_id: UUID,
        facebook_user_id: str,
        first_name: str,
        last_name: str,
        avatar: str,
    ) -> Optional[Customer]:
        """Insert a customer; None if another delivery registered it first."""
        customer = Customer(
            integration_id=integration_id,
            facebook_user_id=facebook_user_id,
            first_name=first_name,
            last_name=last_name,
            avatar=avatar,
        )
        self.db.add(customer)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return None
        self.db.refresh(customer)
        return customer


class CustomerResolver:
    """
    Resolves the customer behind a Facebook user id, registering it on first
    sight with its Graph profile. Built once per delivery.
    """

    def __init__(
        self,
        db: Session,
        graph: FacebookGraphClient,
        activity_logs: Optional[ActivityLogService] = None,
    ) -> None:
        self.db = db
        self.graph = graph
        self.customers = CustomerService(db)
        self.activity_logs = activity_logs or ActivityLogService(db)

    def resolve_or_create(
        self, platform_user_id: str, integration_id: UUID, token: str
    ) -> Customer:
        customer = self.customers.get_by_facebook_user_id(
            integration_id, platform_user_id
        )
        if customer is not None:
            return customer

        profile = get_profile(self.graph, platform_user_id, token) or {}
        first_name, last_name = split_profile_name(profile)
        avatar = get_profile_picture(self.graph, platform_user_id)

        created = self.customers.create_customer(
            integration_id=integration_id,
            facebook_user_id=platform_user_id,
            first_name=first_name,
            last_name=last_name,
            avatar=avatar,
        )
        if created is None:
            logger.info(
                "Customer for facebook user %s registered concurrently; reusing it",
                platform_user_id,
            )
            return self.customers.get_by_facebook_user_id(
                integration_id, platform_user_id
            )

        self.activity_logs.create_customer_registration_log(created)
        logger.info(
            "Registered customer %s for facebook user %s", created.id, platform_user_id
        )
        return created
