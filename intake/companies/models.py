from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Company:
    """Tenant account; the unit of data isolation."""

    id: str
    company_name: str
    contact_name: str
    email: str
    created_at: datetime
    api_key: str
