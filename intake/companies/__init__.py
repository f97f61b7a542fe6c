"""Company accounts and access-token authentication."""

from .models import Company
from .store import CompanyNotFoundError, CompanyStore, CompanyStoreError

__all__ = [
    "Company",
    "CompanyStore",
    "CompanyStoreError",
    "CompanyNotFoundError",
]
