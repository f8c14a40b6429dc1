"""Use-case layer — business logic decoupled from the HTTP transport."""

from aidbridge.application.use_cases.chat import ChatTurn, ChatUseCase, OpenedChat

__all__ = ["ChatTurn", "ChatUseCase", "OpenedChat"]
