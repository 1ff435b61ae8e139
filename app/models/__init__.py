from app.models.account import Account
from app.models.activity_log import ActivityLog
from app.models.conversation import Conversation
from app.models.conversation_message import ConversationMessage
from app.models.customer import Customer
from app.models.integration import Integration

__all__ = [
    "Account",
    "ActivityLog",
    "Conversation",
    "ConversationMessage",
    "Customer",
    "Integration",
]
