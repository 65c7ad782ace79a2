"""
Account models for the membership store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from membership.core.config import settings
from membership.infrastructure.documents.document import Document


class MembershipCreateStatus(str, Enum):
    """Result of registering an account."""

    SUCCESS = "success"
    DUPLICATE_USER_NAME = "duplicate_user_name"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_PROVIDER_USER_KEY = "invalid_provider_user_key"
    PROVIDER_ERROR = "provider_error"


class MembershipAccount(BaseModel):
    """Generic user account as seen by the host application."""

    # Identity
    provider_user_key: Optional[str] = Field(
        None, description="Opaque identity assigned by the account store"
    )
    application_name: Optional[str] = Field(None, description="Owning application")
    username: str = Field(..., description="Unique user name")
    email: Optional[str] = Field(None, description="Email address")
    comment: Optional[str] = Field(None, description="Free-form comment")

    # Credentials, stored as given
    password: Optional[str] = Field(None, description="Password (as stored by host)")
    password_salt: Optional[str] = Field(None, description="Password salt")
    password_question: Optional[str] = Field(None, description="Password question")
    password_answer: Optional[str] = Field(None, description="Password answer")

    # State
    is_approved: bool = Field(default=False, description="Account has been approved")
    is_online: bool = Field(default=False, description="User is currently online")
    is_locked_out: bool = Field(default=False, description="Account is locked out")

    # Activity
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp",
    )
    last_login_at: Optional[datetime] = Field(None, description="Last login")
    last_activity_at: Optional[datetime] = Field(None, description="Last activity")
    last_password_changed_at: Optional[datetime] = Field(
        None, description="Last password change"
    )
    last_locked_out_at: Optional[datetime] = Field(None, description="Last lock out")

    # Failed attempt windows
    failed_password_window_attempt_count: int = Field(
        default=0, description="Failed password attempts in current window"
    )
    failed_password_window_started_at: Optional[datetime] = Field(
        None, description="Start of failed password window"
    )
    failed_password_answer_window_attempt_count: int = Field(
        default=0, description="Failed password answer attempts in current window"
    )
    failed_password_answer_window_started_at: Optional[datetime] = Field(
        None, description="Start of failed password answer window"
    )

    @field_validator("provider_user_key", mode="before")
    @classmethod
    def convert_key_to_str(cls, v):
        """Provider keys are opaque; keep them as strings (ObjectId included)."""
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    class Config:
        populate_by_name = True

    def __str__(self) -> str:
        return f"{self.username} ({self.provider_user_key})"


class UserAccount(MembershipAccount, Document):
    """MongoDB document for a user account; ``id`` equals the provider key."""

    collection_name: ClassVar[str] = settings.ACCOUNTS_COLLECTION

    @model_validator(mode="after")
    def default_id_to_provider_key(self):
        """Use the provider key as document identity when none is set."""
        if self.id is None and self.provider_user_key is not None:
            self.id = self.provider_user_key
        return self

    @classmethod
    def from_account(cls, account: MembershipAccount) -> "UserAccount":
        """Build a document from a generic account."""
        return cls(**account.model_dump())

    def copy_from(self, account: MembershipAccount) -> None:
        """Overwrite every membership field with the values of ``account``."""
        for name in MembershipAccount.model_fields:
            setattr(self, name, getattr(account, name))


class AccountDeletedEvent(BaseModel):
    """Raised to subscribers before an account deletion is committed."""

    account: UserAccount = Field(..., description="Account being deleted")
    delete_all_related_data: bool = Field(
        default=False, description="Cascade flag as passed by the caller"
    )
    deleted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Deletion timestamp",
    )
