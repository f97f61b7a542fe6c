from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from intake.companies import CompanyStore
from intake.conversation import SessionManager
from intake.core.config import Settings
from intake.dependencies.auth import Role, User, role_required
from intake.export import ExportAssembler
from intake.tickets import TicketRegistry

require_admin = role_required(Role.ADMIN)
require_engineer = role_required(Role.ENGINEER)
require_customer = role_required(Role.CUSTOMER)
require_ticket_reader = role_required(Role.ENGINEER, Role.CUSTOMER)
require_back_office = role_required(Role.ADMIN, Role.ENGINEER)

AdminUser = Annotated[User, Depends(require_admin)]
EngineerUser = Annotated[User, Depends(require_engineer)]
CustomerUser = Annotated[User, Depends(require_customer)]
TicketReader = Annotated[User, Depends(require_ticket_reader)]
BackOfficeUser = Annotated[User, Depends(require_back_office)]


def _state_or_503(request: Request, name: str, label: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{label} is not configured")
    return value


async def get_settings_from_state(request: Request) -> Settings:
    return _state_or_503(request, "settings", "Settings")


async def get_company_store(request: Request) -> CompanyStore:
    return _state_or_503(request, "companies", "Company store")


async def get_ticket_registry(request: Request) -> TicketRegistry:
    return _state_or_503(request, "ticket_registry", "Ticket registry")


async def get_session_manager(request: Request) -> SessionManager:
    return _state_or_503(request, "session_manager", "Session manager")


async def get_export_assembler(request: Request) -> ExportAssembler:
    return _state_or_503(request, "export_assembler", "Export assembler")


SettingsDep = Annotated[Settings, Depends(get_settings_from_state)]
CompanyStoreDep = Annotated[CompanyStore, Depends(get_company_store)]
TicketRegistryDep = Annotated[TicketRegistry, Depends(get_ticket_registry)]
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
ExportAssemblerDep = Annotated[ExportAssembler, Depends(get_export_assembler)]
