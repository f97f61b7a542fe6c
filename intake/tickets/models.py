from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .state import TicketStatus


@dataclass(frozen=True, slots=True)
class Ticket:
    """Engineering ticket registered for a company."""

    id: str
    company_id: str
    company_name: str
    title: str
    description: str
    acceptance_criteria: tuple[str, ...]
    technical_notes: str | None
    estimated_hours: float
    priority: str
    dependencies: tuple[str, ...]
    status: TicketStatus
    created_at: datetime
    completed_at: datetime | None = None
