"""
Request-scoped dependencies for the account API.
Each request gets its own document session and account service.
"""

from typing import AsyncIterator

from fastapi import Depends

from membership.api.services.account_service import AccountService
from membership.core.config import settings
from membership.domain.repositories.account_repository import AccountRepository
from membership.infrastructure.database.mongo_client import get_mongo_client
from membership.infrastructure.documents import DocumentSession, MotorDocumentSession


async def get_document_session() -> AsyncIterator[DocumentSession]:
    """Yield a MongoDB document session for the current request."""
    database = get_mongo_client().get_database()
    yield MotorDocumentSession(database)


async def get_account_service(
    session: DocumentSession = Depends(get_document_session),
) -> AccountService:
    """Build the account service over the request's session."""
    repository = AccountRepository(
        session, require_unique_email=settings.REQUIRE_UNIQUE_EMAIL
    )
    return AccountService(repository)
