import pytest
from fastapi import HTTPException

from intake.dependencies.auth import Role, User, resolve_user_from_token, role_required


@pytest.mark.asyncio
async def test_role_required_allows_authorized_user():
    dependency = role_required(Role.ADMIN)
    user = User("alice", (Role.ADMIN,))
    result = await dependency(user)  # type: ignore[arg-type]
    assert result.username == "alice"


@pytest.mark.asyncio
async def test_role_required_accepts_any_listed_role():
    dependency = role_required(Role.ENGINEER, Role.CUSTOMER)
    user = User("COMP-1", (Role.CUSTOMER,))
    result = await dependency(user)  # type: ignore[arg-type]
    assert result is user


@pytest.mark.asyncio
async def test_role_required_rejects_unauthorized_user():
    dependency = role_required(Role.ENGINEER)
    user = User("bob", (Role.CUSTOMER,))
    with pytest.raises(HTTPException) as exc:
        await dependency(user)  # type: ignore[arg-type]

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_resolve_user_maps_static_and_company_tokens(settings, company_store):
    acme = company_store.create_company("Acme", "Jane", "jane@acme.test")

    admin = resolve_user_from_token("test-admin", settings=settings, companies=company_store)
    engineer = resolve_user_from_token("test-engineer", settings=settings, companies=company_store)
    customer = resolve_user_from_token(acme.api_key, settings=settings, companies=company_store)

    assert admin.roles == (Role.ADMIN,)
    assert engineer.roles == (Role.ENGINEER,)
    assert customer.roles == (Role.CUSTOMER,)
    assert customer.company == acme


@pytest.mark.parametrize("token, detail", [(None, "Not authenticated"), ("lp_bogus", "Invalid API key")])
def test_resolve_user_rejects_missing_or_unknown_tokens(settings, company_store, token, detail):
    with pytest.raises(HTTPException) as exc:
        resolve_user_from_token(token, settings=settings, companies=company_store)

    assert exc.value.status_code == 401
    assert exc.value.detail == detail
