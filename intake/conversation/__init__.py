"""Tenant conversation sessions and the completion-service boundary."""

from .completion import AnthropicCompletionClient, CompletionClient, CompletionServiceError
from .models import ConversationTurn, SessionState, TurnOutcome, TurnRejection, TurnRole
from .session import ConversationSession, SessionManager

__all__ = [
    "AnthropicCompletionClient",
    "CompletionClient",
    "CompletionServiceError",
    "ConversationTurn",
    "ConversationSession",
    "SessionManager",
    "SessionState",
    "TurnOutcome",
    "TurnRejection",
    "TurnRole",
]
