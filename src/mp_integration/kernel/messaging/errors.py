"""Kernel messaging – errors raised while handling a message."""
from __future__ import annotations

from typing import Any

from mp_integration.kernel.errors import InfrastructureError
from mp_integration.kernel.messaging.message import Message


class MessagingError(InfrastructureError):
    """A failure attributable to a specific message."""

    default_code = "messaging_error"

    def __init__(
        self,
        failed_message: Message[Any] | None,
        message: str,
        *,
        cause: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, cause=cause, **kwargs)
        self.failed_message = failed_message
        if failed_message is not None:
            self.detail.setdefault("message_id", failed_message.headers.id)

    def __str__(self) -> str:
        if self.failed_message is None:
            return self.message
        return f"{self.message}, failedMessage={self.failed_message!r}"


class MessageHandlingError(MessagingError):
    """A handler failed to process its inbound message."""

    default_code = "message_handling_failed"


__all__ = ["MessageHandlingError", "MessagingError"]
