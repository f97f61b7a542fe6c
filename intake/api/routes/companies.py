from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field

from intake.companies import Company
from intake.dependencies.services import AdminUser, CompanyStoreDep

router = APIRouter(prefix="/companies", tags=["companies"])


class CompanyCreateRequest(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    contact_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_name: str
    contact_name: str
    email: str
    created_at: datetime
    api_key: str


def to_company_response(company: Company) -> CompanyResponse:
    return CompanyResponse.model_validate(company)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(payload: CompanyCreateRequest, store: CompanyStoreDep, _: AdminUser) -> CompanyResponse:
    company = store.create_company(payload.company_name, payload.contact_name, payload.email)
    return to_company_response(company)


@router.get("", response_model=list[CompanyResponse])
async def list_companies(store: CompanyStoreDep, _: AdminUser) -> list[CompanyResponse]:
    return [to_company_response(company) for company in store.list_companies()]
