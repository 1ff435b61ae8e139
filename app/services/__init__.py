from app.services.activity_log_service import ActivityLogService
from app.services.conversation_message_service import ConversationMessageService
from app.services.conversation_service import ConversationResolver, ConversationService
from app.services.customer_service import CustomerResolver, CustomerService
from app.services.integration_service import IntegrationService
from app.services.message_ingester import MessageIngester
from app.services.message_publisher import MessagePublisher
from app.services.parent_post_restorer import ParentPostRestorer
from app.services.reaction_aggregator import ReactionAggregator

__all__ = [
    "ActivityLogService",
    "ConversationMessageService",
    "ConversationResolver",
    "ConversationService",
    "CustomerResolver",
    "CustomerService",
    "IntegrationService",
    "MessageIngester",
    "MessagePublisher",
    "ParentPostRestorer",
    "ReactionAggregator",
]
