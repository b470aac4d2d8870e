"""Kernel messaging – message handler port and reply-producing base class."""
from __future__ import annotations

import abc
import threading
from typing import Any

from mp_integration.kernel.messaging.message import Message


class MessageHandler(abc.ABC):
    """Port: consume one message per invocation."""

    @abc.abstractmethod
    def handle_message(self, message: Message[Any]) -> Message[Any] | None: ...


class AbstractReplyProducingMessageHandler(MessageHandler):
    """Handler with a one-shot initialization step and an optional reply.

    Subclasses implement :meth:`_handle_request_message`; a ``None`` result means
    no reply is emitted.  :meth:`initialize` runs :meth:`_on_init` exactly once;
    :meth:`handle_message` triggers it on first use when the host never did.
    """

    def __init__(self) -> None:
        self.component_name: str | None = None
        self._initialized = False
        self._init_lock = threading.Lock()

    @property
    def component_type(self) -> str:
        return "service-activator"

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if not self._initialized:
                self._on_init()
                self._initialized = True

    def _on_init(self) -> None:
        """Hook for subclasses; called once under the init lock."""

    def handle_message(self, message: Message[Any]) -> Message[Any] | None:
        self.initialize()
        result = self._handle_request_message(message)
        if result is None:
            return None
        if isinstance(result, Message):
            return result
        return Message.of(result)

    @abc.abstractmethod
    def _handle_request_message(self, request_message: Message[Any]) -> Any: ...

    def __str__(self) -> str:
        return self.component_name or f"{type(self).__name__}@{id(self):x}"


__all__ = ["AbstractReplyProducingMessageHandler", "MessageHandler"]
