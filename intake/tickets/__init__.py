"""Ticket registry domain models and services."""

from .models import Ticket
from .registry import TicketNotFoundError, TicketRegistry, TicketRegistryError
from .state import TicketPriority, TicketStateMachine, TicketStatus

__all__ = [
    "Ticket",
    "TicketRegistry",
    "TicketRegistryError",
    "TicketNotFoundError",
    "TicketPriority",
    "TicketStatus",
    "TicketStateMachine",
]
