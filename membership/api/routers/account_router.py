"""
Account Router for the Membership Accounts service.
Exposes the account repository contract over HTTP.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from membership.api.deps.session import get_account_service
from membership.api.dto.account_dto import (
    AccountDeleteResponseDTO,
    AccountListResponseDTO,
    AccountRegisterRequestDTO,
    AccountResponseDTO,
    AccountUpdateRequestDTO,
    OnlineCountResponseDTO,
    UserNameResponseDTO,
)
from membership.api.services.account_service import AccountService
from membership.core.config import settings
from membership.core.exceptions import (
    MembershipException,
    create_http_exception,
    get_exception_status_code,
)
from membership.core.logging import get_logger

logger = get_logger(__name__)

# Create router
router = APIRouter()


@router.post("", response_model=AccountResponseDTO)
async def register_account(
    request: AccountRegisterRequestDTO,
    service: AccountService = Depends(get_account_service),
) -> AccountResponseDTO:
    """
    Register a new account.

    Args:
        request: Registration request data

    Returns:
        AccountResponseDTO with the registered account and its provider key
    """
    logger.info(f"Registering account: {request.username}")

    try:
        account = await service.register_account(request)
        return AccountResponseDTO(
            success=True, message="Account registered successfully", data=account
        )
    except MembershipException as e:
        raise create_http_exception(e, get_exception_status_code(e))
    except Exception as e:
        logger.error(f"Error registering account: {e}", exc_info=True)
        return AccountResponseDTO(
            success=False, message=f"Internal server error: {str(e)}", data=None
        )


@router.get("", response_model=AccountListResponseDTO)
async def list_accounts(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    ),
    username: Optional[str] = Query(None, description="Partial user name to match"),
    email: Optional[str] = Query(None, description="Exact email to match"),
    new_only: bool = Query(False, description="Only accounts not yet approved"),
    service: AccountService = Depends(get_account_service),
) -> AccountListResponseDTO:
    """
    Get paginated list of accounts with an optional filter.

    Examples:
        - All accounts: /api/v1/accounts
        - Partial user name: /api/v1/accounts?username=jo
        - Email: /api/v1/accounts?email=jonas@example.com
        - Awaiting approval: /api/v1/accounts?new_only=true
    """
    logger.info(
        f"Listing accounts: page={page}, page_size={page_size}, "
        f"username={username}, email={email}, new_only={new_only}"
    )

    try:
        accounts, total_count, total_pages = await service.list_accounts(
            page=page,
            page_size=page_size,
            username=username,
            email=email,
            new_only=new_only,
        )
    except MembershipException as e:
        raise create_http_exception(e, get_exception_status_code(e))
    except Exception as e:
        logger.error(f"Error listing accounts: {e}", exc_info=True)
        return AccountListResponseDTO(
            success=False,
            message=f"Internal server error: {str(e)}",
            data=[],
            pagination={
                "page": page,
                "page_size": page_size,
                "total_count": 0,
                "total_pages": 0,
            },
        )

    return AccountListResponseDTO(
        success=True,
        message="Accounts retrieved successfully",
        data=accounts,
        pagination={
            "page": page,
            "page_size": page_size,
            "total_count": total_count,
            "total_pages": total_pages,
        },
    )


@router.get("/online/count", response_model=OnlineCountResponseDTO)
async def count_online(
    service: AccountService = Depends(get_account_service),
) -> OnlineCountResponseDTO:
    """Get number of users that are online."""
    try:
        online = await service.count_online()
    except Exception as e:
        logger.error(f"Error counting online users: {e}", exc_info=True)
        return OnlineCountResponseDTO(
            success=False, message=f"Internal server error: {str(e)}", online=0
        )

    return OnlineCountResponseDTO(
        success=True, message="Online users counted", online=online
    )


@router.get("/by-key/{provider_user_key}", response_model=AccountResponseDTO)
async def get_account_by_key(
    provider_user_key: str,
    service: AccountService = Depends(get_account_service),
) -> AccountResponseDTO:
    """Get an account by its provider key."""
    try:
        account = await service.get_account_by_key(provider_user_key)
    except Exception as e:
        logger.error(f"Error getting account {provider_user_key}: {e}", exc_info=True)
        return AccountResponseDTO(
            success=False, message=f"Internal server error: {str(e)}", data=None
        )

    if account is None:
        return AccountResponseDTO(success=False, message="Account not found", data=None)
    return AccountResponseDTO(
        success=True, message="Account retrieved successfully", data=account
    )


@router.get("/by-email/{email}/username", response_model=UserNameResponseDTO)
async def get_user_name_by_email(
    email: str,
    service: AccountService = Depends(get_account_service),
) -> UserNameResponseDTO:
    """Translate an email into a user name."""
    try:
        username = await service.get_user_name_by_email(email)
    except Exception as e:
        logger.error(f"Error looking up email {email}: {e}", exc_info=True)
        return UserNameResponseDTO(
            success=False, message=f"Internal server error: {str(e)}"
        )

    if username is None:
        return UserNameResponseDTO(success=False, message="Email not found")
    return UserNameResponseDTO(
        success=True, message="User name retrieved successfully", username=username
    )


@router.get("/{username}", response_model=AccountResponseDTO)
async def get_account(
    username: str,
    service: AccountService = Depends(get_account_service),
) -> AccountResponseDTO:
    """Get an account by user name."""
    try:
        account = await service.get_account(username)
    except Exception as e:
        logger.error(f"Error getting account {username}: {e}", exc_info=True)
        return AccountResponseDTO(
            success=False, message=f"Internal server error: {str(e)}", data=None
        )

    if account is None:
        return AccountResponseDTO(success=False, message="Account not found", data=None)
    return AccountResponseDTO(
        success=True, message="Account retrieved successfully", data=account
    )


@router.put("/{provider_user_key}", response_model=AccountResponseDTO)
async def update_account(
    provider_user_key: str,
    request: AccountUpdateRequestDTO,
    service: AccountService = Depends(get_account_service),
) -> AccountResponseDTO:
    """
    Update an account. Only the fields present in the request body change.

    Args:
        provider_user_key: Account identity
        request: Fields to change

    Returns:
        AccountResponseDTO with the updated account
    """
    logger.info(f"Updating account: {provider_user_key}")

    try:
        account = await service.update_account(provider_user_key, request)
    except MembershipException as e:
        raise create_http_exception(e, get_exception_status_code(e))
    except Exception as e:
        logger.error(f"Error updating account {provider_user_key}: {e}", exc_info=True)
        return AccountResponseDTO(
            success=False, message=f"Internal server error: {str(e)}", data=None
        )

    return AccountResponseDTO(
        success=True, message="Account updated successfully", data=account
    )


@router.delete("/{username}", response_model=AccountDeleteResponseDTO)
async def delete_account(
    username: str,
    delete_related_data: bool = Query(
        False, description="Delete information from all related stores"
    ),
    service: AccountService = Depends(get_account_service),
) -> AccountDeleteResponseDTO:
    """
    Delete an account. Deleting an unknown user name succeeds.
    """
    logger.info(f"Deleting account: {username}")

    try:
        deleted = await service.delete_account(username, delete_related_data)
    except Exception as e:
        logger.error(f"Error deleting account {username}: {e}", exc_info=True)
        return AccountDeleteResponseDTO(
            success=False, message=f"Internal server error: {str(e)}"
        )

    if not deleted:
        return AccountDeleteResponseDTO(
            success=False, message="Account could not be deleted"
        )
    return AccountDeleteResponseDTO(success=True, message="Account deleted")
