"""Kernel messaging – message envelope, handler port and handling errors."""
from mp_integration.kernel.messaging.errors import MessageHandlingError, MessagingError
from mp_integration.kernel.messaging.handler import (
    AbstractReplyProducingMessageHandler,
    MessageHandler,
)
from mp_integration.kernel.messaging.message import (
    CONTENT_TYPE,
    CORRELATION_ID,
    Message,
    MessageHeaders,
    MessageId,
)

__all__ = [
    "CONTENT_TYPE",
    "CORRELATION_ID",
    "AbstractReplyProducingMessageHandler",
    "Message",
    "MessageHandler",
    "MessageHandlingError",
    "MessageHeaders",
    "MessageId",
    "MessagingError",
]
