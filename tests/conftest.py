from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from intake.companies import CompanyStore
from intake.conversation import SessionManager
from intake.core.config import Settings
from intake.tickets import TicketRegistry

TICKET_BATCH = {
    "tickets": [
        {
            "title": "Add login",
            "description": "Customers need to sign in before placing orders.",
            "acceptance_criteria": ["works"],
            "estimated_hours": 4,
            "priority": "high",
            "dependencies": [],
        }
    ]
}

TICKET_REPLY = (
    "Thanks, I have everything I need. Here is the ticket:\n\n"
    f"```json\n{json.dumps(TICKET_BATCH, indent=2)}\n```\n\n"
    "Let me know if anything should change."
)


class StubCompletionClient:
    """Completion client returning canned replies and recording calls."""

    def __init__(self, replies=None, *, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: list[dict] = []

    async def complete(self, *, system, messages):
        self.calls.append({"system": system, "messages": [dict(message) for message in messages]})
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def company_store(clock):
    return CompanyStore(clock=clock)


@pytest.fixture
def ticket_registry(company_store, clock):
    return TicketRegistry(companies=company_store, clock=clock)


@pytest.fixture
def completion_client():
    return StubCompletionClient()


@pytest.fixture
def session_manager(company_store, ticket_registry, completion_client):
    return SessionManager(
        companies=company_store,
        registry=ticket_registry,
        completion_client=completion_client,
        system_prompt="You write tickets.",
        vendor_name="Laplace",
        timeout=5.0,
    )


@pytest.fixture
def settings():
    return Settings(
        admin_token="test-admin",
        engineer_token="test-engineer",
        anthropic_api_key="test-key",
        completion_timeout=5.0,
    )
