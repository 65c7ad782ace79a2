import pytest

from membership.api.deps.session import get_document_session
from membership.domain.models.account import UserAccount
from membership.infrastructure.documents import InMemoryDocumentSession
from membership.main import app

pytestmark = pytest.mark.anyio


async def _register(client, username, email=None, **fields):
    response = await client.post(
        "/api/v1/accounts", json={"username": username, "email": email, **fields}
    )
    assert response.status_code == 200
    return response.json()["data"]


async def test_register_returns_provider_key(async_client):
    response = await async_client.post(
        "/api/v1/accounts", json={"username": "jonas", "email": "jonas@example.com"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["provider_user_key"]
    assert body["data"]["application_name"] == "/"
    assert body["data"]["is_approved"] is False


async def test_get_account_by_name_and_key(async_client):
    created = await _register(async_client, "jonas", "jonas@example.com")

    by_name = await async_client.get("/api/v1/accounts/jonas")
    by_key = await async_client.get(
        f"/api/v1/accounts/by-key/{created['provider_user_key']}"
    )
    missing = await async_client.get("/api/v1/accounts/nobody")

    assert by_name.json()["data"]["email"] == "jonas@example.com"
    assert by_key.json()["data"]["username"] == "jonas"
    assert missing.json()["success"] is False
    assert missing.json()["data"] is None


async def test_user_name_by_email(async_client):
    await _register(async_client, "jonas", "jonas@example.com")

    found = await async_client.get("/api/v1/accounts/by-email/jonas@example.com/username")
    missing = await async_client.get("/api/v1/accounts/by-email/x@example.com/username")

    assert found.json()["username"] == "jonas"
    assert missing.json()["success"] is False


async def test_update_changes_only_sent_fields(async_client):
    created = await _register(async_client, "jonas", "jonas@example.com", comment="keep")

    response = await async_client.put(
        f"/api/v1/accounts/{created['provider_user_key']}", json={"is_online": True}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["is_online"] is True
    assert data["comment"] == "keep"
    assert data["email"] == "jonas@example.com"

    online = await async_client.get("/api/v1/accounts/online/count")
    assert online.json()["online"] == 1


async def test_update_unknown_account_is_404(async_client):
    response = await async_client.put("/api/v1/accounts/missing", json={"comment": "x"})

    assert response.status_code == 404
    assert response.json()["detail"]["error_code"] == "ACCOUNT_NOT_FOUND"


async def test_delete_account(async_client):
    await _register(async_client, "jonas")

    deleted = await async_client.delete("/api/v1/accounts/jonas")
    again = await async_client.delete(
        "/api/v1/accounts/jonas", params={"delete_related_data": True}
    )
    lookup = await async_client.get("/api/v1/accounts/jonas")

    assert deleted.json()["success"] is True
    assert again.json()["success"] is True
    assert lookup.json()["success"] is False


async def test_list_accounts_with_filters(async_client):
    await _register(async_client, "anna", "anna@example.com", is_approved=True)
    await _register(async_client, "annika", "annika@example.com")
    await _register(async_client, "bert", "bert@example.com")

    everyone = await async_client.get("/api/v1/accounts", params={"page_size": 2})
    second_page = await async_client.get(
        "/api/v1/accounts", params={"page": 2, "page_size": 2}
    )
    by_name = await async_client.get("/api/v1/accounts", params={"username": "ann"})
    by_email = await async_client.get(
        "/api/v1/accounts", params={"email": "bert@example.com"}
    )
    new_only = await async_client.get("/api/v1/accounts", params={"new_only": True})

    assert everyone.json()["pagination"] == {
        "page": 1,
        "page_size": 2,
        "total_count": 3,
        "total_pages": 2,
    }
    assert [a["username"] for a in everyone.json()["data"]] == ["anna", "annika"]
    assert [a["username"] for a in second_page.json()["data"]] == ["bert"]
    assert by_name.json()["pagination"]["total_count"] == 2
    assert [a["username"] for a in by_email.json()["data"]] == ["bert"]
    assert [a["username"] for a in new_only.json()["data"]] == ["annika", "bert"]


async def test_list_accounts_rejects_page_zero(async_client):
    response = await async_client.get("/api/v1/accounts", params={"page": 0})

    assert response.status_code == 422

async def test_update_ignores_null_fields(async_client):
    created = await _register(async_client, "jonas", "jonas@example.com", is_approved=True)

    response = await async_client.put(
        f"/api/v1/accounts/{created['provider_user_key']}",
        json={"is_approved": None, "comment": "checked"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["is_approved"] is True
    assert response.json()["data"]["comment"] == "checked"

    listed = await async_client.get("/api/v1/accounts")
    assert listed.status_code == 200
    assert [a["username"] for a in listed.json()["data"]] == ["jonas"]
    assert listed.json()["data"][0]["is_approved"] is True


class UnavailableSession(InMemoryDocumentSession):
    async def _replace(self, collection_name, document_id, document):
        raise RuntimeError("store unavailable")

    async def _count(self, collection_name, filter):
        raise RuntimeError("store unavailable")


async def test_store_failures_are_reported_in_the_envelope(async_client, document_store):
    async def _unavailable_session():
        yield UnavailableSession(document_store)

    app.dependency_overrides[get_document_session] = _unavailable_session

    registered = await async_client.post("/api/v1/accounts", json={"username": "jonas"})
    listed = await async_client.get("/api/v1/accounts")
    online = await async_client.get("/api/v1/accounts/online/count")

    assert registered.status_code == 200
    assert registered.json()["success"] is False
    assert "store unavailable" in registered.json()["message"]
    assert registered.json()["data"] is None
    assert listed.status_code == 200
    assert listed.json()["success"] is False
    assert listed.json()["data"] == []
    assert online.json()["success"] is False
    assert document_store.count(UserAccount.collection_name) == 0



async def test_health(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
