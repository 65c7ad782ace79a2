import os
import sys

import pytest
from httpx import ASGITransport, AsyncClient
from asgi_lifespan import LifespanManager

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
os.environ.setdefault("ANYIO_BACKEND", "asyncio")
os.environ["MONGODB_CREATE_INDEXES"] = "false"

from membership.main import app  # noqa: E402
from membership.api.deps.session import get_document_session  # noqa: E402
from membership.domain.repositories.account_repository import (  # noqa: E402
    AccountRepository,
)
from membership.infrastructure.documents import (  # noqa: E402
    InMemoryDocumentSession,
    InMemoryDocumentStore,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    """Fresh in-memory store per test."""
    return InMemoryDocumentStore()


@pytest.fixture
def session(document_store: InMemoryDocumentStore) -> InMemoryDocumentSession:
    return InMemoryDocumentSession(document_store)


@pytest.fixture
def repository(session: InMemoryDocumentSession) -> AccountRepository:
    return AccountRepository(session)


@pytest.fixture(autouse=True)
def override_session_dependency(document_store: InMemoryDocumentStore):
    """
    Serve every request from the in-memory store so routes can be
    exercised without a MongoDB server.
    """

    async def _override_session():
        yield InMemoryDocumentSession(document_store)

    app.dependency_overrides[get_document_session] = _override_session
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    """Shared HTTPX async client with FastAPI lifespan handling."""
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
