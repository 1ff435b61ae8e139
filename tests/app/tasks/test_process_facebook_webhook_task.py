"""Tests for the webhook processing task."""

from contextlib import contextmanager
from unittest.mock import patch

from app.tasks.process_facebook_webhook_task import process_facebook_webhook_task
from tests.fixtures.inbox_fixtures import PAGE_ID
from tests.fixtures.payloads import messenger_event, webhook_body


def test_invalid_payload_is_dropped():
    with patch(
        "app.tasks.process_facebook_webhook_task.ReceiveFacebookWebhookCommand"
    ) as command:
        assert process_facebook_webhook_task.run({"entry": "nope"}) == 0
    command.assert_not_called()


def test_payload_is_processed_in_a_session(db):
    @contextmanager
    def fake_session():
        yield db

    body = webhook_body(PAGE_ID, messaging=[messenger_event("100", PAGE_ID, "m1")])
    with patch(
        "app.tasks.process_facebook_webhook_task.db_session", fake_session
    ), patch(
        "app.tasks.process_facebook_webhook_task.ReceiveFacebookWebhookCommand"
    ) as command:
        command.return_value.execute.return_value = 2
        assert process_facebook_webhook_task.run(body) == 2

    command.assert_called_once_with(db)
    payload = command.return_value.execute.call_args.args[0]
    assert payload.entry[0].id == PAGE_ID
