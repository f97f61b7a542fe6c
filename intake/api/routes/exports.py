from __future__ import annotations

from datetime import datetime
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from intake.companies import CompanyNotFoundError
from intake.dependencies.services import BackOfficeUser, CustomerUser, ExportAssemblerDep, SettingsDep
from intake.export import ExportDocument, export_filename

from .companies import CompanyResponse
from .sessions import ConversationTurnModel
from .tickets import TicketResponse

router = APIRouter(prefix="/exports", tags=["exports"])


class ExportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company: CompanyResponse
    conversation: list[ConversationTurnModel]
    tickets: list[TicketResponse]
    exported_at: datetime


def _attachment(document: ExportDocument, prefix: str) -> JSONResponse:
    body = ExportResponse.model_validate(document).model_dump(mode="json")
    filename = export_filename(document.company.company_name, document.exported_at, prefix=prefix)
    return JSONResponse(
        content=body,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.get("", response_model=ExportResponse)
async def export_own_record(
    assembler: ExportAssemblerDep,
    settings: SettingsDep,
    user: CustomerUser,
) -> JSONResponse:
    document = assembler.build_export(user.company.id)
    return _attachment(document, settings.export_prefix)


@router.get("/{company_id}", response_model=ExportResponse)
async def export_company_record(
    company_id: str,
    assembler: ExportAssemblerDep,
    settings: SettingsDep,
    _: BackOfficeUser,
) -> JSONResponse:
    try:
        document = assembler.build_export(company_id)
    except CompanyNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _attachment(document, settings.export_prefix)
