from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ConfigDict

from intake.dependencies.auth import Role, User
from intake.dependencies.services import EngineerUser, TicketReader, TicketRegistryDep
from intake.tickets import Ticket, TicketNotFoundError, TicketStatus

router = APIRouter(prefix="/tickets", tags=["tickets"])


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    company_name: str
    title: str
    description: str
    acceptance_criteria: list[str]
    technical_notes: str | None
    estimated_hours: float
    priority: str
    dependencies: list[str]
    status: TicketStatus
    created_at: datetime
    completed_at: datetime | None


def to_ticket_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse.model_validate(ticket)


def _visible_to(user: User, ticket: Ticket) -> bool:
    if user.has_role(Role.ENGINEER):
        return True
    return user.company is not None and ticket.company_id == user.company.id


@router.get("", response_model=list[TicketResponse])
async def list_tickets(
    registry: TicketRegistryDep,
    user: TicketReader,
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
) -> list[TicketResponse]:
    if user.has_role(Role.ENGINEER):
        tickets = registry.list_all(status=status_filter)
    else:
        tickets = registry.list_for_tenant(user.company.id)
        if status_filter is not None:
            tickets = [ticket for ticket in tickets if ticket.status == status_filter]
    return [to_ticket_response(ticket) for ticket in tickets]


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: str, registry: TicketRegistryDep, user: TicketReader) -> TicketResponse:
    try:
        ticket = registry.get_ticket(ticket_id)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if not _visible_to(user, ticket):
        raise HTTPException(status_code=404, detail=f"Ticket {ticket_id} not found")
    return to_ticket_response(ticket)


@router.post("/{ticket_id}/complete", response_model=TicketResponse)
async def complete_ticket(ticket_id: str, registry: TicketRegistryDep, _: EngineerUser) -> TicketResponse:
    try:
        ticket = registry.complete(ticket_id)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return to_ticket_response(ticket)
