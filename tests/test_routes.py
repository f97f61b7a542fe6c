from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient

from conftest import TICKET_REPLY, StubCompletionClient
from intake.conversation import CompletionServiceError
from intake.conversation.prompts import APOLOGY_MESSAGE
from intake.main import create_app

ADMIN = {"Authorization": "Bearer test-admin"}
ENGINEER = {"Authorization": "Bearer test-engineer"}


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def stub_client():
    return StubCompletionClient()


@pytest.fixture
def client(settings, stub_client):
    app = create_app(settings, completion_client=stub_client)
    return TestClient(app)


def _create_company(client: TestClient, name: str = "Acme") -> dict:
    response = client.post(
        "/companies",
        json={"company_name": name, "contact_name": "Jane Doe", "email": f"contact@{name.lower()}.test"},
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()


def test_ping_is_public(client):
    assert client.get("/ping").json() == {"status": "ok"}


def test_company_creation_requires_admin(client):
    payload = {"company_name": "Acme", "contact_name": "Jane", "email": "jane@acme.test"}

    assert client.post("/companies", json=payload).status_code == 401
    assert client.post("/companies", json=payload, headers=ENGINEER).status_code == 403


def test_admin_lists_companies_with_api_keys(client):
    acme = _create_company(client)

    response = client.get("/companies", headers=ADMIN)

    assert response.status_code == 200
    assert response.json() == [acme]
    assert acme["api_key"].startswith("lp_")


def test_login_with_unknown_token_fails(client):
    response = client.post("/sessions", json={"api_key": "lp_unknown"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API key"


def test_end_to_end_ticket_flow(client, stub_client):
    acme = _create_company(client)
    token = acme["api_key"]

    login = client.post("/sessions", json={"api_key": token})
    assert login.status_code == 200
    assert login.json()["company"]["id"] == acme["id"]
    assert "Acme" in login.json()["greeting"]
    assert login.json()["turns"] == []

    stub_client.replies.append(TICKET_REPLY)
    sent = client.post("/sessions/messages", json={"content": "We need a login page"}, headers=_bearer(token))
    assert sent.status_code == 200
    body = sent.json()
    assert body["failed"] is False
    assert "```json" not in body["reply"]["display_content"]
    assert body["reply"]["content"] == TICKET_REPLY
    assert len(body["tickets"]) == 1
    ticket = body["tickets"][0]
    assert ticket["title"] == "Add login"
    assert ticket["status"] == "pending"
    assert ticket["company_id"] == acme["id"]
    assert ticket["company_name"] == "Acme"
    assert ticket["completed_at"] is None

    engineer_view = client.get("/tickets", headers=ENGINEER).json()
    assert [item["id"] for item in engineer_view] == [ticket["id"]]

    completed = client.post(f"/tickets/{ticket['id']}/complete", headers=ENGINEER)
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"
    assert completed.json()["completed_at"] is not None

    repeated = client.post(f"/tickets/{ticket['id']}/complete", headers=ENGINEER)
    assert repeated.json()["completed_at"] == completed.json()["completed_at"]

    customer_view = client.get("/tickets", headers=_bearer(token)).json()
    assert customer_view[0]["status"] == "completed"


def test_customer_cannot_see_or_complete_other_tenant_tickets(client, stub_client):
    acme = _create_company(client, "Acme")
    globex = _create_company(client, "Globex")
    stub_client.replies.append(TICKET_REPLY)
    sent = client.post("/sessions/messages", json={"content": "login please"}, headers=_bearer(acme["api_key"]))
    ticket_id = sent.json()["tickets"][0]["id"]

    assert client.get("/tickets", headers=_bearer(globex["api_key"])).json() == []
    assert client.get(f"/tickets/{ticket_id}", headers=_bearer(globex["api_key"])).status_code == 404
    assert client.get(f"/tickets/{ticket_id}", headers=_bearer(acme["api_key"])).status_code == 200
    assert client.post(f"/tickets/{ticket_id}/complete", headers=_bearer(acme["api_key"])).status_code == 403
    assert client.get("/sessions/messages", headers=_bearer(globex["api_key"])).json() == []


def test_engineer_can_filter_by_status_and_gets_404_for_unknown(client, stub_client):
    acme = _create_company(client)
    stub_client.replies.append(TICKET_REPLY)
    client.post("/sessions/messages", json={"content": "login please"}, headers=_bearer(acme["api_key"]))

    assert client.get("/tickets", params={"status": "completed"}, headers=ENGINEER).json() == []
    assert len(client.get("/tickets", params={"status": "pending"}, headers=ENGINEER).json()) == 1
    assert client.post("/tickets/TICKET-missing/complete", headers=ENGINEER).status_code == 404


def test_blank_message_is_rejected(client, stub_client):
    acme = _create_company(client)

    response = client.post("/sessions/messages", json={"content": "   "}, headers=_bearer(acme["api_key"]))

    assert response.status_code == 400
    assert stub_client.calls == []


def test_service_failure_returns_apology(client, stub_client):
    acme = _create_company(client)
    stub_client.error = CompletionServiceError("down", status_code=503)

    response = client.post("/sessions/messages", json={"content": "hello"}, headers=_bearer(acme["api_key"]))

    assert response.status_code == 200
    assert response.json()["failed"] is True
    assert response.json()["reply"]["content"] == APOLOGY_MESSAGE
    assert response.json()["tickets"] == []
    messages = client.get("/sessions/messages", headers=_bearer(acme["api_key"])).json()
    assert [message["role"] for message in messages] == ["user", "assistant"]


def test_customer_export_is_downloadable_attachment(client, stub_client):
    acme = _create_company(client)
    stub_client.replies.append(TICKET_REPLY)
    client.post("/sessions/messages", json={"content": "We need a login page"}, headers=_bearer(acme["api_key"]))

    response = client.get("/exports", headers=_bearer(acme["api_key"]))

    assert response.status_code == 200
    document = response.json()
    assert set(document) == {"company", "conversation", "tickets", "exported_at"}
    assert document["company"]["id"] == acme["id"]
    assert len(document["conversation"]) == 2
    assert document["conversation"][0] == {"role": "user", "content": "We need a login page"}
    assert len(document["tickets"]) == 1
    disposition = unquote(response.headers["content-disposition"])
    assert disposition.startswith("attachment; filename*=UTF-8''laplace_Acme_")
    assert disposition.endswith(".json")


def test_back_office_export_by_company_id(client):
    acme = _create_company(client)

    assert client.get(f"/exports/{acme['id']}", headers=ENGINEER).status_code == 200
    assert client.get(f"/exports/{acme['id']}", headers=ADMIN).json()["tickets"] == []
    assert client.get("/exports/COMP-missing", headers=ADMIN).status_code == 404
    assert client.get(f"/exports/{acme['id']}", headers=_bearer(acme["api_key"])).status_code == 403


def test_overflowing_estimate_does_not_break_export(client, stub_client):
    acme = _create_company(client)
    stub_client.replies.append(
        "```json\n"
        '{"tickets": [{"title": "Huge", "description": "d", "acceptance_criteria": ["a"],'
        ' "estimated_hours": 1e400, "priority": "low"}]}\n'
        "```"
    )

    sent = client.post("/sessions/messages", json={"content": "big job"}, headers=_bearer(acme["api_key"]))

    assert sent.status_code == 200
    assert sent.json()["tickets"] == []
    assert client.get("/tickets", headers=ENGINEER).json() == []
    export = client.get("/exports", headers=_bearer(acme["api_key"]))
    assert export.status_code == 200
    assert export.json()["tickets"] == []


def test_configured_response_language_reaches_completion_service(settings, stub_client):
    settings = settings.model_copy(update={"response_language": "English"})
    client = TestClient(create_app(settings, completion_client=stub_client))
    acme = _create_company(client)
    stub_client.replies.append("Could you describe the login page?")

    client.post("/sessions/messages", json={"content": "We need a login page"}, headers=_bearer(acme["api_key"]))

    assert "Always respond in English" in stub_client.calls[0]["system"]
