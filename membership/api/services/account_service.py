"""
Account Service Layer.
Maps between API DTOs and the account repository.
"""

import math
from typing import List, Optional, Tuple

from membership.api.dto.account_dto import (
    AccountDTO,
    AccountRegisterRequestDTO,
    AccountUpdateRequestDTO,
)
from membership.core.config import settings
from membership.core.exceptions import AccountNotFoundError
from membership.core.logging import LoggerMixin, log_account_operation
from membership.domain.models.account import AccountDeletedEvent, UserAccount
from membership.domain.repositories.account_repository import AccountRepository


def to_account_dto(account: UserAccount) -> AccountDTO:
    """Convert a stored account to its public representation."""
    return AccountDTO(
        provider_user_key=account.provider_user_key or account.id,
        application_name=account.application_name,
        username=account.username,
        email=account.email,
        comment=account.comment,
        is_approved=account.is_approved,
        is_online=account.is_online,
        is_locked_out=account.is_locked_out,
        created_at=account.created_at,
        last_login_at=account.last_login_at,
        last_activity_at=account.last_activity_at,
    )


class AccountService(LoggerMixin):
    """Service class for account management."""

    def __init__(self, repository: AccountRepository):
        """Initialize account service and subscribe to deletions."""
        self.repository = repository
        self.repository.subscribe_deleted(self._on_account_deleted)

    def _on_account_deleted(self, event: AccountDeletedEvent) -> None:
        log_account_operation(
            "deleted_notification",
            provider_user_key=event.account.id,
            username=event.account.username,
            delete_all_related_data=event.delete_all_related_data,
        )

    async def register_account(self, request: AccountRegisterRequestDTO) -> AccountDTO:
        """
        Create and register a new account.

        Args:
            request: Registration request data

        Returns:
            The registered account
        """
        account = self.repository.create(
            None, settings.APPLICATION_NAME, request.username, request.email
        )
        account.comment = request.comment
        account.is_approved = request.is_approved

        await self.repository.register(account)
        self.logger.info(f"Registered account {account.username}")
        return to_account_dto(account)

    async def get_account(self, username: str) -> Optional[AccountDTO]:
        account = await self.repository.get(username)
        return to_account_dto(account) if account else None

    async def get_account_by_key(self, provider_user_key: str) -> Optional[AccountDTO]:
        account = await self.repository.get_by_provider_key(provider_user_key)
        return to_account_dto(account) if account else None

    async def get_user_name_by_email(self, email: str) -> Optional[str]:
        return await self.repository.get_user_name_by_email(email)

    async def update_account(
        self, provider_user_key: str, request: AccountUpdateRequestDTO
    ) -> AccountDTO:
        """
        Apply the fields sent in ``request`` to a stored account.

        Fields sent as null are left unchanged. The merged account is
        validated before it is stored.

        Raises:
            AccountNotFoundError: If no account has the given key
        """
        account = await self.repository.get_by_provider_key(provider_user_key)
        if account is None:
            raise AccountNotFoundError(provider_user_key)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        updated = UserAccount.model_validate(
            {**account.model_dump(by_alias=True), **changes}
        )
        await self.repository.update(updated)
        return to_account_dto(updated)

    async def delete_account(self, username: str, delete_related_data: bool) -> bool:
        return await self.repository.delete(username, delete_related_data)

    async def count_online(self) -> int:
        return await self.repository.get_number_of_users_online()

    async def list_accounts(
        self,
        page: int,
        page_size: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
        new_only: bool = False,
    ) -> Tuple[List[AccountDTO], int, int]:
        """
        Get a page of accounts, filtered by at most one criterion.

        Precedence: email, then username, then new_only.

        Returns:
            Tuple of (accounts, total count, total pages)
        """
        if email is not None:
            accounts, total = await self.repository.find_by_email(email, page, page_size)
        elif username is not None:
            accounts, total = await self.repository.find_by_user_name(
                username, page, page_size
            )
        elif new_only:
            accounts, total = await self.repository.find_new_accounts(page, page_size)
        else:
            accounts, total = await self.repository.find_all(page, page_size)

        total_pages = math.ceil(total / page_size) if total else 0
        return [to_account_dto(account) for account in accounts], total, total_pages
