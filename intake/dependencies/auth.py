from collections.abc import Callable
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from intake.companies import Company, CompanyNotFoundError, CompanyStore
from intake.core.config import Settings


class Role(str, Enum):
    """Supported roles."""

    ADMIN = "admin"
    ENGINEER = "engineer"
    CUSTOMER = "customer"


class User:
    """Authenticated caller; customers are bound to their company."""

    def __init__(self, username: str, roles: tuple[Role, ...], company: Company | None = None):
        self.username = username
        self.roles = roles
        self.company = company

    def has_role(self, role: Role) -> bool:
        return role in self.roles


bearer_scheme = HTTPBearer(auto_error=False)


def resolve_user_from_token(token: str | None, *, settings: Settings, companies: CompanyStore) -> User:
    """Map a bearer token to a user.

    The administrator and engineer tokens come from settings; any other token
    must be a company API key.
    """

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if token == settings.admin_token:
        return User(username="admin", roles=(Role.ADMIN,))
    if token == settings.engineer_token:
        return User(username="engineer", roles=(Role.ENGINEER,))

    try:
        company = companies.authenticate(token)
    except CompanyNotFoundError as exc:
        raise HTTPException(status_code=401, detail="Invalid API key") from exc
    return User(username=company.id, roles=(Role.CUSTOMER,), company=company)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
) -> User:
    settings = getattr(request.app.state, "settings", None)
    companies = getattr(request.app.state, "companies", None)
    if settings is None or companies is None:
        raise HTTPException(status_code=503, detail="Authentication is not configured")
    token = credentials.credentials if credentials is not None else None
    return resolve_user_from_token(token, settings=settings, companies=companies)


def role_required(*roles: Role) -> Callable[[User], User]:
    """Dependency factory ensuring the current user has one of the roles."""

    async def dependency(user: Annotated[User, Depends(get_current_user)]) -> User:
        if not any(user.has_role(role) for role in roles):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency

