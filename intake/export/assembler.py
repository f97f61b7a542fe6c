from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from intake.companies import Company, CompanyStore
from intake.conversation import ConversationTurn, SessionManager
from intake.tickets import Ticket, TicketRegistry


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ExportDocument:
    """Self-contained snapshot of one company's transaction record."""

    company: Company
    conversation: tuple[ConversationTurn, ...]
    tickets: tuple[Ticket, ...]
    exported_at: datetime


def export_filename(company_name: str, exported_at: datetime, *, prefix: str = "laplace") -> str:
    """Download name derived from the company name and the export time."""

    millis = int(exported_at.timestamp() * 1000)
    return f"{prefix}_{company_name}_{millis}.json"


class ExportAssembler:
    """Build export documents from the company, session and ticket stores."""

    def __init__(
        self,
        *,
        companies: CompanyStore,
        sessions: SessionManager,
        registry: TicketRegistry,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._companies = companies
        self._sessions = sessions
        self._registry = registry
        self._clock = clock

    def build_export(self, company_id: str) -> ExportDocument:
        company = self._companies.get_company(company_id)
        return ExportDocument(
            company=company,
            conversation=tuple(self._sessions.turns_for(company.id)),
            tickets=tuple(self._registry.list_for_tenant(company.id)),
            exported_at=self._clock(),
        )
