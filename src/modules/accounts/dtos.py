"""Account DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``Principal``: the resolved caller (identity id + role).
- ``RegisterDTO`` / ``LoginDTO`` / ``UpdateProfileDTO`` / ``ChangeRoleDTO``:
  inputs.
- ``ProfileOutputDTO`` / ``AuthResultDTO``: outputs.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from django.conf import settings
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

if TYPE_CHECKING:
    from modules.accounts.models import UserProfile


class RoleEnum(StrEnum):
    """Caller role (framework-agnostic mirror of ``Role``)."""

    VIEWER = "viewer"
    ADMIN = "admin"


# ---------------------------------------------------------------------------
# Principal
# ---------------------------------------------------------------------------


class Principal(BaseModel):
    """An authenticated caller."""

    model_config = ConfigDict(frozen=True)

    identity_id: str
    role: RoleEnum = RoleEnum.VIEWER

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.ADMIN


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("This field may not be blank.")
    return value


class RegisterDTO(BaseModel):
    """Immutable DTO for account registration.

    Validates:
    - ``email`` is a well-formed address (Pydantic ``EmailStr``).
    - ``username`` is not blank.
    - ``password`` has at least ``ACCOUNTS_MIN_PASSWORD_LENGTH`` characters.
    """

    model_config = ConfigDict(frozen=True)

    email: EmailStr
    password: str
    username: str

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        return _required_text(v)

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        minimum = settings.ACCOUNTS_MIN_PASSWORD_LENGTH
        if len(v) < minimum:
            raise ValueError(f"Password must be at least {minimum} characters long.")
        return v


class LoginDTO(BaseModel):
    """Login by username, or by email when ``login`` contains ``@``."""

    model_config = ConfigDict(frozen=True)

    login: str
    password: str

    @field_validator("login", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _required_text(v)

    @property
    def is_email(self) -> bool:
        return "@" in self.login


class UpdateProfileDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v)


class ChangeRoleDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: RoleEnum


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ProfileOutputDTO(BaseModel):
    """Immutable DTO for profile responses."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    role: RoleEnum
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, profile: UserProfile) -> ProfileOutputDTO:
        return cls(
            id=profile.identity_id,
            username=profile.username,
            role=profile.role,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class AuthResultDTO(BaseModel):
    """Tokens plus the profile of the identity that just logged in or registered."""

    model_config = ConfigDict(frozen=True)

    access: Optional[str] = None
    refresh: Optional[str] = None
    email: Optional[str] = None
    user: ProfileOutputDTO
