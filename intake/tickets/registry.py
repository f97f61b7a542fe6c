from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Iterable
from uuid import uuid4

from intake.companies import CompanyNotFoundError, CompanyStore
from intake.extraction.models import TicketDraft

from .models import Ticket
from .state import TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)

TICKET_ID_PREFIX = "TICKET-"


class TicketRegistryError(RuntimeError):
    """Base error for ticket registry issues."""


class TicketNotFoundError(TicketRegistryError):
    """Raised when a ticket could not be located."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketRegistry:
    """In-memory store of every ticket across tenants.

    Registration and status changes share one lock, so identity assignment
    and completion never interleave.
    """

    def __init__(
        self,
        *,
        companies: CompanyStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._companies = companies
        self._clock = clock
        self._tickets: dict[str, Ticket] = {}
        self._issued_ids: set[str] = set()
        self._lock = Lock()

    def _next_id(self) -> str:
        ticket_id = f"{TICKET_ID_PREFIX}{uuid4().hex}"
        while ticket_id in self._issued_ids:
            ticket_id = f"{TICKET_ID_PREFIX}{uuid4().hex}"
        self._issued_ids.add(ticket_id)
        return ticket_id

    def register_batch(
        self,
        company_id: str,
        company_name: str,
        drafts: Iterable[TicketDraft],
    ) -> list[Ticket]:
        if self._companies is not None and company_id not in self._companies:
            raise CompanyNotFoundError(f"Company {company_id} not found")

        created: list[Ticket] = []
        with self._lock:
            now = self._clock()
            for draft in drafts:
                ticket = Ticket(
                    id=self._next_id(),
                    company_id=company_id,
                    company_name=company_name,
                    title=draft.title,
                    description=draft.description,
                    acceptance_criteria=tuple(draft.acceptance_criteria),
                    technical_notes=draft.technical_notes,
                    estimated_hours=draft.estimated_hours,
                    priority=draft.priority,
                    dependencies=tuple(draft.dependencies),
                    status=TicketStateMachine.initial_state(),
                    created_at=now,
                )
                self._tickets[ticket.id] = ticket
                created.append(ticket)

        if created:
            logger.info("Registered %d ticket(s) for company %s", len(created), company_id)
        return created

    def get_ticket(self, ticket_id: str) -> Ticket:
        with self._lock:
            ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        return ticket

    def complete(self, ticket_id: str) -> Ticket:
        """Mark a ticket completed.

        Completing an already completed ticket is a no-op: the original
        completion timestamp is kept.
        """

        with self._lock:
            ticket = self._tickets.get(ticket_id)
            if ticket is None:
                raise TicketNotFoundError(f"Ticket {ticket_id} not found")
            TicketStateMachine.assert_transition(ticket.status, TicketStatus.COMPLETED)
            if ticket.status == TicketStatus.COMPLETED:
                return ticket

            completed_at = max(self._clock(), ticket.created_at)
            updated = replace(ticket, status=TicketStatus.COMPLETED, completed_at=completed_at)
            self._tickets[ticket_id] = updated

        logger.info("Ticket %s completed", ticket_id)
        return updated

    def list_for_tenant(self, company_id: str) -> list[Ticket]:
        with self._lock:
            return [ticket for ticket in self._tickets.values() if ticket.company_id == company_id]

    def list_all(self, *, status: TicketStatus | None = None) -> list[Ticket]:
        with self._lock:
            if status is None:
                return list(self._tickets.values())
            return [ticket for ticket in self._tickets.values() if ticket.status == status]
