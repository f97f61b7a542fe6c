from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from threading import Lock
from typing import Callable
from uuid import uuid4

from .models import Company

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "lp_"
COMPANY_ID_PREFIX = "COMP-"


class CompanyStoreError(RuntimeError):
    """Base error for company store issues."""


class CompanyNotFoundError(CompanyStoreError):
    """Raised when a company lookup has no match."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_api_key() -> str:
    """Return a fresh opaque access token."""

    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(24)}"


class CompanyStore:
    """In-memory registry of company accounts keyed by id and access token."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._companies: dict[str, Company] = {}
        self._by_api_key: dict[str, Company] = {}
        self._lock = Lock()

    def create_company(self, company_name: str, contact_name: str, email: str) -> Company:
        with self._lock:
            company_id = f"{COMPANY_ID_PREFIX}{uuid4().hex}"
            while company_id in self._companies:
                company_id = f"{COMPANY_ID_PREFIX}{uuid4().hex}"
            api_key = generate_api_key()
            while api_key in self._by_api_key:
                api_key = generate_api_key()

            company = Company(
                id=company_id,
                company_name=company_name,
                contact_name=contact_name,
                email=email,
                created_at=self._clock(),
                api_key=api_key,
            )
            self._companies[company.id] = company
            self._by_api_key[company.api_key] = company

        logger.info("Created company %s (%s)", company.id, company.company_name)
        return company

    def authenticate(self, api_key: str) -> Company:
        with self._lock:
            company = self._by_api_key.get(api_key)
        if company is None:
            raise CompanyNotFoundError("No company matches the presented API key")
        return company

    def get_company(self, company_id: str) -> Company:
        with self._lock:
            company = self._companies.get(company_id)
        if company is None:
            raise CompanyNotFoundError(f"Company {company_id} not found")
        return company

    def list_companies(self) -> list[Company]:
        with self._lock:
            return list(self._companies.values())

    def __contains__(self, company_id: object) -> bool:
        with self._lock:
            return company_id in self._companies
