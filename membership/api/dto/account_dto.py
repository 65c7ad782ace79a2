from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# Request DTOs
class AccountRegisterRequestDTO(BaseModel):
    """Request DTO for registering an account."""

    username: str = Field(..., min_length=1, description="Unique user name")
    email: Optional[str] = Field(None, description="Email address")
    comment: Optional[str] = Field(None, description="Free-form comment")
    is_approved: bool = Field(default=False, description="Approve immediately")


class AccountUpdateRequestDTO(BaseModel):
    """Request DTO for updating an account. Only fields sent are changed."""

    email: Optional[str] = Field(None, description="Email address")
    comment: Optional[str] = Field(None, description="Free-form comment")
    is_approved: Optional[bool] = Field(None, description="Account has been approved")
    is_online: Optional[bool] = Field(None, description="User is currently online")
    is_locked_out: Optional[bool] = Field(None, description="Account is locked out")
    last_login_at: Optional[datetime] = Field(None, description="Last login")
    last_activity_at: Optional[datetime] = Field(None, description="Last activity")


# Response DTOs
class AccountDTO(BaseModel):
    """Account data returned to clients."""

    provider_user_key: str = Field(..., description="Account identity")
    application_name: Optional[str] = Field(None, description="Owning application")
    username: str = Field(..., description="User name")
    email: Optional[str] = Field(None, description="Email address")
    comment: Optional[str] = Field(None, description="Free-form comment")
    is_approved: bool = Field(..., description="Account has been approved")
    is_online: bool = Field(..., description="User is currently online")
    is_locked_out: bool = Field(..., description="Account is locked out")
    created_at: datetime = Field(..., description="Creation timestamp")
    last_login_at: Optional[datetime] = Field(None, description="Last login")
    last_activity_at: Optional[datetime] = Field(None, description="Last activity")


class AccountResponseDTO(BaseModel):
    """Response DTO for a single account."""

    success: bool = Field(..., description="Operation success status")
    message: str = Field(..., description="Response message")
    data: Optional[AccountDTO] = Field(None, description="Account data")


class AccountListResponseDTO(BaseModel):
    """Response DTO for paginated account list."""

    success: bool = Field(..., description="Operation success status")
    message: str = Field(..., description="Response message")
    data: List[AccountDTO] = Field(..., description="List of accounts")
    pagination: Dict[str, int] = Field(
        ...,
        description="Pagination metadata (page, page_size, total_count, total_pages)",
    )


class UserNameResponseDTO(BaseModel):
    """Response DTO for an email to user name lookup."""

    success: bool = Field(..., description="Operation success status")
    message: str = Field(..., description="Response message")
    username: Optional[str] = Field(None, description="User name")


class OnlineCountResponseDTO(BaseModel):
    """Response DTO for the online user count."""

    success: bool = Field(..., description="Operation success status")
    message: str = Field(..., description="Response message")
    online: int = Field(..., description="Number of users online")


class AccountDeleteResponseDTO(BaseModel):
    """Response DTO for account deletion."""

    success: bool = Field(..., description="Account removed or already absent")
    message: str = Field(..., description="Response message")
