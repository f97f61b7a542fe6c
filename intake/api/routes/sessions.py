from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from intake.companies import CompanyNotFoundError
from intake.conversation import ConversationTurn, TurnRejection, TurnRole
from intake.dependencies.services import CustomerUser, SessionManagerDep

from .companies import CompanyResponse, to_company_response
from .tickets import TicketResponse, to_ticket_response

router = APIRouter(prefix="/sessions", tags=["sessions"])


class LoginRequest(BaseModel):
    api_key: str = Field(..., min_length=1)


class ConversationTurnModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: TurnRole
    content: str


class TurnResponse(ConversationTurnModel):
    display_content: str


class LoginResponse(BaseModel):
    company: CompanyResponse
    greeting: str
    turns: list[TurnResponse]


class MessageRequest(BaseModel):
    content: str


class MessageResponse(BaseModel):
    reply: TurnResponse
    tickets: list[TicketResponse]
    failed: bool


def to_turn_response(turn: ConversationTurn) -> TurnResponse:
    return TurnResponse.model_validate(turn)


@router.post("", response_model=LoginResponse)
async def login(payload: LoginRequest, sessions: SessionManagerDep) -> LoginResponse:
    try:
        session = sessions.login(payload.api_key)
    except CompanyNotFoundError as exc:
        raise HTTPException(status_code=401, detail="Invalid API key") from exc
    return LoginResponse(
        company=to_company_response(session.company),
        greeting=sessions.greeting_for(session.company),
        turns=[to_turn_response(turn) for turn in session.turns],
    )


@router.get("/messages", response_model=list[TurnResponse])
async def list_messages(sessions: SessionManagerDep, user: CustomerUser) -> list[TurnResponse]:
    return [to_turn_response(turn) for turn in sessions.turns_for(user.company.id)]


@router.post("/messages", response_model=MessageResponse)
async def send_message(payload: MessageRequest, sessions: SessionManagerDep, user: CustomerUser) -> MessageResponse:
    session = sessions.start_session(user.company)
    outcome = await session.submit_user_turn(payload.content)
    if not outcome.accepted:
        if outcome.rejection is TurnRejection.IN_FLIGHT:
            raise HTTPException(status_code=409, detail="A reply is already in progress")
        raise HTTPException(status_code=400, detail="Message must not be empty")

    return MessageResponse(
        reply=to_turn_response(outcome.reply),
        tickets=[to_ticket_response(ticket) for ticket in outcome.tickets],
        failed=outcome.failed,
    )
