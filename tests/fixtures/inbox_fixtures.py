"""Fixtures for accounts, integrations, page contexts and the ingestion stack."""

import pytest

from app.constants.facebook import (
    INTEGRATION_KIND_FACEBOOK,
    ConversationStatus,
    FacebookDataKind,
)
from app.core.page_context import PageContext
from app.models.account import Account
from app.models.conversation import Conversation
from app.models.customer import Customer
from app.models.integration import Integration
from app.services.conversation_service import ConversationResolver
from app.services.customer_service import CustomerResolver
from app.services.message_ingester import MessageIngester

PAGE_ID = "1111"
OTHER_PAGE_ID = "2222"
USER_TOKEN = "user-token"


@pytest.fixture(scope="function")
def setup_account(db, faker):
    account = Account(
        kind="facebook",
        name=faker.name(),
        uid=faker.numerify("##########"),
        token=USER_TOKEN,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture(scope="function")
def setup_integration(db, faker, setup_account):
    """Facebook integration owning PAGE_ID."""
    integration = Integration(
        name=faker.company(),
        kind=INTEGRATION_KIND_FACEBOOK,
        account_id=setup_account.id,
        page_ids=[PAGE_ID],
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)
    return integration


@pytest.fixture(scope="function")
def page_context(setup_integration, fake_graph, token_cache):
    return PageContext(
        integration=setup_integration,
        page_id=PAGE_ID,
        user_access_token=USER_TOKEN,
        graph=fake_graph,
        token_cache=token_cache,
    )


@pytest.fixture(scope="function")
def customer_resolver(db, fake_graph):
    return CustomerResolver(db, fake_graph)


@pytest.fixture(scope="function")
def conversation_resolver(db, customer_resolver):
    return ConversationResolver(db, customer_resolver)


@pytest.fixture(scope="function")
def ingester(db, conversation_resolver, customer_resolver, publisher):
    return MessageIngester(db, conversation_resolver, customer_resolver, publisher)


@pytest.fixture(scope="function")
def setup_customer(db, faker, setup_integration):
    customer = Customer(
        integration_id=setup_integration.id,
        facebook_user_id=faker.numerify("1##########"),
        first_name=faker.first_name(),
        last_name=faker.last_name(),
        avatar="",
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture(scope="function")
def setup_messenger_conversation(db, setup_integration, setup_customer):
    conversation = Conversation(
        integration_id=setup_integration.id,
        customer_id=setup_customer.id,
        status=ConversationStatus.NEW.value,
        message_count=0,
        kind=FacebookDataKind.MESSENGER.value,
        sender_id=setup_customer.facebook_user_id,
        recipient_id=PAGE_ID,
        page_id=PAGE_ID,
    )
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation


@pytest.fixture(scope="function")
def setup_feed_conversation(db, setup_integration, setup_customer):
    conversation = Conversation(
        integration_id=setup_integration.id,
        customer_id=setup_customer.id,
        status=ConversationStatus.NEW.value,
        message_count=0,
        kind=FacebookDataKind.FEED.value,
        sender_id=setup_customer.facebook_user_id,
        post_id=f"{PAGE_ID}_555",
        page_id=PAGE_ID,
    )
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation
