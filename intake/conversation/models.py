from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from intake.extraction import strip_structured_blocks
from intake.tickets.models import Ticket


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class TurnRejection(str, Enum):
    """Reasons a submitted turn is ignored."""

    EMPTY = "empty"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    """One message in a tenant's conversation log."""

    role: TurnRole
    content: str

    @property
    def display_content(self) -> str:
        return strip_structured_blocks(self.content)

    def as_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(slots=True)
class TurnOutcome:
    """Result of submitting a user turn to a session."""

    accepted: bool
    rejection: TurnRejection | None = None
    user_turn: ConversationTurn | None = None
    reply: ConversationTurn | None = None
    tickets: list[Ticket] = field(default_factory=list)
    failed: bool = False
