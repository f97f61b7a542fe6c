from __future__ import annotations

import asyncio
import logging
from threading import Lock

from intake.companies import Company, CompanyStore
from intake.core.logging import get_tracer
from intake.extraction import extract_ticket_drafts
from intake.tickets import Ticket, TicketRegistry

from .completion import CompletionClient, CompletionServiceError
from .models import ConversationTurn, SessionState, TurnOutcome, TurnRejection, TurnRole
from .prompts import APOLOGY_MESSAGE, build_greeting

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class ConversationSession:
    """Live conversation for one authenticated company.

    Only one turn may be in flight at a time; a turn submitted while a reply
    is pending is rejected without touching the log.
    """

    def __init__(
        self,
        company: Company,
        *,
        completion_client: CompletionClient,
        registry: TicketRegistry,
        system_prompt: str,
        timeout: float | None = None,
    ) -> None:
        self.company = company
        self._completion_client = completion_client
        self._registry = registry
        self._system_prompt = system_prompt
        self._timeout = timeout
        self._turns: list[ConversationTurn] = []
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def history(self) -> list[dict[str, str]]:
        """Role/content pairs sent to the completion service."""

        return [turn.as_message() for turn in self._turns]

    async def submit_user_turn(self, text: str) -> TurnOutcome:
        if not text or not text.strip():
            return TurnOutcome(accepted=False, rejection=TurnRejection.EMPTY)
        if self._state is SessionState.AWAITING_REPLY:
            return TurnOutcome(accepted=False, rejection=TurnRejection.IN_FLIGHT)

        user_turn = ConversationTurn(role=TurnRole.USER, content=text)
        self._turns.append(user_turn)
        self._state = SessionState.AWAITING_REPLY

        try:
            with tracer.start_as_current_span("conversation.completion") as span:
                span.set_attribute("intake.company_id", self.company.id)
                span.set_attribute("intake.turn_count", len(self._turns))
                reply_text = await asyncio.wait_for(
                    self._completion_client.complete(system=self._system_prompt, messages=self.history()),
                    timeout=self._timeout,
                )
        except (CompletionServiceError, asyncio.TimeoutError) as exc:
            logger.warning("Completion failed for company %s: %r", self.company.id, exc)
            apology = ConversationTurn(role=TurnRole.ASSISTANT, content=APOLOGY_MESSAGE)
            self._turns.append(apology)
            return TurnOutcome(accepted=True, user_turn=user_turn, reply=apology, failed=True)
        finally:
            self._state = SessionState.IDLE

        reply = ConversationTurn(role=TurnRole.ASSISTANT, content=reply_text)
        self._turns.append(reply)

        extraction = extract_ticket_drafts(reply_text)
        tickets: list[Ticket] = []
        if extraction.drafts:
            tickets = self._registry.register_batch(self.company.id, self.company.company_name, extraction.drafts)
        return TurnOutcome(accepted=True, user_turn=user_turn, reply=reply, tickets=tickets)


class SessionManager:
    """Holds one conversation session per company.

    Logging in again resumes the existing session; turn logs are kept for the
    lifetime of the process.
    """

    def __init__(
        self,
        *,
        companies: CompanyStore,
        registry: TicketRegistry,
        completion_client: CompletionClient,
        system_prompt: str,
        vendor_name: str,
        timeout: float | None = None,
    ) -> None:
        self._companies = companies
        self._registry = registry
        self._completion_client = completion_client
        self._system_prompt = system_prompt
        self._vendor_name = vendor_name
        self._timeout = timeout
        self._sessions: dict[str, ConversationSession] = {}
        self._lock = Lock()

    def login(self, api_key: str) -> ConversationSession:
        """Authenticate a company token and start or resume its session.

        Raises :class:`~intake.companies.CompanyNotFoundError` when the token
        matches no company.
        """

        company = self._companies.authenticate(api_key)
        return self.start_session(company)

    def start_session(self, company: Company) -> ConversationSession:
        with self._lock:
            session = self._sessions.get(company.id)
            if session is None:
                session = ConversationSession(
                    company,
                    completion_client=self._completion_client,
                    registry=self._registry,
                    system_prompt=self._system_prompt,
                    timeout=self._timeout,
                )
                self._sessions[company.id] = session
                logger.info("Started session for company %s", company.id)
        return session

    def get_session(self, company_id: str) -> ConversationSession | None:
        with self._lock:
            return self._sessions.get(company_id)

    def turns_for(self, company_id: str) -> list[ConversationTurn]:
        session = self.get_session(company_id)
        if session is None:
            return []
        return list(session.turns)

    def greeting_for(self, company: Company) -> str:
        return build_greeting(company.company_name, self._vendor_name)
