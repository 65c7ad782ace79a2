"""
Account repository over a document session.
Implements the membership account contract: register, lookup, update,
delete and paged searches for a single document type.
"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from pymongo import ASCENDING

from membership.core.exceptions import (
    AccountNotFoundError,
    ArgumentOutOfRangeError,
    MissingArgumentError,
)
from membership.core.logging import get_logger, log_account_operation, log_error
from membership.domain.models.account import (
    AccountDeletedEvent,
    MembershipAccount,
    MembershipCreateStatus,
    UserAccount,
)
from membership.infrastructure.documents.session import DocumentSession

logger = get_logger(__name__)

DeletedHandler = Callable[[AccountDeletedEvent], None]

_PAGE_SORT = [("username", ASCENDING)]


class AccountRepository:
    """
    Repository for user accounts.

    One repository wraps one document session and is not safe for
    concurrent use.

    Example:
        >>> repository = AccountRepository(MotorDocumentSession(database))
        >>> account = repository.create(None, "/", "jonas", "jonas@example.com")
        >>> await repository.register(account)
        >>> await repository.get("jonas")
    """

    def __init__(self, session: DocumentSession, require_unique_email: bool = False):
        """
        Initialize account repository.

        Args:
            session: Document session used for every operation
            require_unique_email: Whether all users must have unique email addresses
        """
        self._session = session
        self.require_unique_email = require_unique_email
        self._deleted_handlers: List[DeletedHandler] = []

    # Deletion notifications

    def subscribe_deleted(self, handler: DeletedHandler) -> None:
        """
        Subscribe a handler to account deletions.

        Handlers are called synchronously, in subscription order, before the
        deletion is committed.
        """
        self._deleted_handlers.append(handler)

    def unsubscribe_deleted(self, handler: DeletedHandler) -> bool:
        """
        Unsubscribe a deletion handler.

        Returns:
            True if handler was found and removed, False otherwise
        """
        try:
            self._deleted_handlers.remove(handler)
            return True
        except ValueError:
            return False

    def _fire_deleted(self, event: AccountDeletedEvent) -> None:
        for handler in self._deleted_handlers:
            handler(event)

    # Contract

    async def register(self, account: MembershipAccount) -> MembershipCreateStatus:
        """
        Register a new account.

        Sets ``account.provider_user_key`` to the generated identity when it
        is not already set. A failed commit leaves nothing pending.

        Args:
            account: Account to register

        Returns:
            MembershipCreateStatus.SUCCESS
        """
        if account is None:
            raise MissingArgumentError("account")

        document = (
            account
            if isinstance(account, UserAccount)
            else UserAccount.from_account(account)
        )
        self._session.store(document)
        if document.provider_user_key is None:
            document.provider_user_key = document.id
        try:
            await self._session.save_changes()
        except Exception:
            self._session.evict(document)
            raise

        if account.provider_user_key is None:
            account.provider_user_key = document.id

        log_account_operation(
            "register", provider_user_key=document.id, username=document.username
        )
        return MembershipCreateStatus.SUCCESS

    async def get(self, username: str) -> Optional[UserAccount]:
        """
        Fetch a user by user name.

        Args:
            username: Unique user name

        Returns:
            User if found; otherwise None.
        """
        if username is None:
            raise MissingArgumentError("username")
        return await self._session.first_or_default(
            UserAccount, {"username": username}
        )

    async def update(self, account: MembershipAccount) -> None:
        """
        Update an existing user.

        Args:
            account: Account being updated
        """
        if account is None:
            raise MissingArgumentError("account")

        if isinstance(account, UserAccount):
            user_account = account
        else:
            user_account = None
            if account.provider_user_key is not None:
                user_account = await self._session.load(
                    UserAccount, str(account.provider_user_key)
                )
            if user_account is None:
                raise AccountNotFoundError(account.provider_user_key)
            user_account.copy_from(account)

        self._session.store(user_account)
        await self._session.save_changes()
        log_account_operation(
            "update", provider_user_key=user_account.id, username=user_account.username
        )

    async def get_by_provider_key(self, provider_user_key: Any) -> Optional[UserAccount]:
        """
        Get a user by the store specific identity.

        Args:
            provider_user_key: Identity assigned at registration

        Returns:
            User if found; otherwise None.
        """
        if provider_user_key is None:
            raise MissingArgumentError("provider_user_key")
        return await self._session.first_or_default(
            UserAccount, {"_id": str(provider_user_key)}
        )

    async def get_user_name_by_email(self, email: str) -> Optional[str]:
        """
        Translate an email into a user name.

        Returns:
            User name if the specified email was found; otherwise None.
        """
        if email is None:
            raise MissingArgumentError("email")
        account = await self._session.first_or_default(UserAccount, {"email": email})
        return account.username if account else None

    async def delete(self, username: str, delete_all_related_data: bool = False) -> bool:
        """
        Delete a user from the database.

        Deletion subscribers are notified before the change is committed. A
        missing user counts as already deleted.

        Args:
            username: Unique user name
            delete_all_related_data: Passed on to deletion subscribers

        Returns:
            True if removed (or not present); False if the commit failed.
        """
        account = await self._session.first_or_default(
            UserAccount, {"username": username}
        )
        if account is None:
            return True

        self._session.delete(account)

        try:
            self._fire_deleted(
                AccountDeletedEvent(
                    account=account, delete_all_related_data=delete_all_related_data
                )
            )
            await self._session.save_changes()
        except Exception as e:
            log_error(e, {"operation": "delete", "username": username})
            self._session.evict(account)
            return False

        log_account_operation(
            "delete",
            provider_user_key=account.id,
            username=username,
            delete_all_related_data=delete_all_related_data,
        )
        return True

    async def get_number_of_users_online(self) -> int:
        """Get number of users that are online."""
        return await self._session.count(UserAccount, {"is_online": True})

    async def find_all(
        self, page_index: int, page_size: int
    ) -> Tuple[List[UserAccount], int]:
        """
        Find all users.

        Args:
            page_index: One based index
            page_size: Number of users per page

        Returns:
            Tuple of (users on the page, total number of users)
        """
        return await self._count_and_page({}, page_index, page_size)

    async def find_new_accounts(
        self, page_index: int, page_size: int
    ) -> Tuple[List[UserAccount], int]:
        """Find new accounts that haven't been approved."""
        return await self._count_and_page({"is_approved": False}, page_index, page_size)

    async def find_by_user_name(
        self, username_to_match: str, page_index: int, page_size: int
    ) -> Tuple[List[UserAccount], int]:
        """
        Find users whose user name contains the given text.

        Args:
            username_to_match: User name (or partial user name)
            page_index: One based index
            page_size: Number of items per page

        Returns:
            Tuple of (users on the page, total number of partial matches)
        """
        if username_to_match is None:
            raise MissingArgumentError("username_to_match")
        return await self._count_and_page(
            {"username": {"$regex": re.escape(username_to_match)}},
            page_index,
            page_size,
        )

    async def find_by_email(
        self, email_to_match: str, page_index: int, page_size: int
    ) -> Tuple[List[UserAccount], int]:
        """Find users with exactly the specified email."""
        if email_to_match is None:
            raise MissingArgumentError("email_to_match")
        return await self._count_and_page(
            {"email": email_to_match}, page_index, page_size
        )

    async def _count_and_page(
        self, filter: Dict[str, Any], page_index: int, page_size: int
    ) -> Tuple[List[UserAccount], int]:
        if page_index < 1:
            raise ArgumentOutOfRangeError("page_index", "page_index should be 1 or larger.")
        if page_size <= 0:
            raise ArgumentOutOfRangeError("page_size", "Request at least one element.")

        total_records = await self._session.count(UserAccount, filter)
        accounts = await self._session.query(
            UserAccount,
            filter,
            sort=_PAGE_SORT,
            skip=(page_index - 1) * page_size,
            limit=page_size,
        )

        logger.info(
            f"Retrieved {len(accounts)} accounts (page_index={page_index}, "
            f"page_size={page_size}, total_records={total_records})"
        )
        return accounts, total_records

    def create(
        self,
        provider_user_key: Any,
        application_name: Optional[str],
        username: str,
        email: Optional[str],
    ) -> UserAccount:
        """Build a new, unsaved account."""
        return UserAccount(
            provider_user_key=provider_user_key,
            application_name=application_name,
            username=username,
            email=email,
            created_at=datetime.now(timezone.utc),
        )
