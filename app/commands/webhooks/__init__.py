"""Webhook command handlers."""

from app.commands.webhooks.facebook_command import (
    FacebookWebhookCommand,
    ReceiveFacebookWebhookCommand,
)

__all__ = ["FacebookWebhookCommand", "ReceiveFacebookWebhookCommand"]
