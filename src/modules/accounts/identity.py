"""Identity provider contract and its Django implementation.

The provider owns secrets: it hashes and checks passwords and issues
and verifies bearer tokens.  The rest of the system only ever sees the
opaque identity id it returns.

``DjangoIdentityProvider`` stores identities in Django's auth user table
(password hashing by Django's hashers) and issues SimpleJWT tokens.
Every call into the store goes through :func:`call_with_retry`, so
transient failures surface as ``ServiceUnavailable`` after the bounded
retries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

import structlog
from django.contrib.auth import authenticate, get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from pydantic import BaseModel, ConfigDict
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from modules.accounts.constants import INVALID_CREDENTIALS_MESSAGE
from modules.core.exceptions import Conflict, NotFound, Unauthenticated
from modules.core.retry import call_with_retry

logger = structlog.get_logger(__name__)


class TokenPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    access: str
    refresh: str


class IIdentityProvider(ABC):
    """Contract of the external identity provider."""

    @abstractmethod
    def verify(self, credential: str) -> str:
        """Return the identity id behind a bearer credential.

        Raises ``Unauthenticated`` when the credential is rejected.
        """

    @abstractmethod
    def create_identity(
        self, login: str, secret: str, attributes: Mapping[str, Any]
    ) -> str:
        """Provision an identity; ``attributes`` seed the user profile.

        Raises ``Conflict`` when the login is already registered.
        """

    @abstractmethod
    def lookup_email(self, identity_id: str) -> str:
        """Return the email of an identity; ``NotFound`` when absent."""

    @abstractmethod
    def authenticate(self, login: str, secret: str) -> str:
        """Check a login/secret pair and return the identity id."""

    @abstractmethod
    def issue_tokens(self, identity_id: str) -> TokenPair:
        """Issue an access/refresh token pair for an identity."""

    @abstractmethod
    def delete_identity(self, identity_id: str) -> bool:
        """Remove an identity; ``False`` when it did not exist."""


class DjangoIdentityProvider(IIdentityProvider):
    """Identity provider backed by ``django.contrib.auth`` and SimpleJWT."""

    def __init__(self) -> None:
        self._users = get_user_model()

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def verify(self, credential: str) -> str:
        try:
            token = AccessToken(credential)
        except TokenError as exc:
            logger.warning("identity.token_rejected", error=str(exc))
            raise Unauthenticated("Invalid or expired token.") from exc

        identity_id = token.get(api_settings.USER_ID_CLAIM)
        if identity_id is None:
            raise Unauthenticated("Invalid or expired token.")

        user = call_with_retry(
            self._get_user, identity_id, active_only=True, operation="identity.verify"
        )
        if user is None:
            logger.warning("identity.unknown_subject", identity_id=str(identity_id))
            raise Unauthenticated("Invalid or expired token.")
        return str(user.pk)

    def issue_tokens(self, identity_id: str) -> TokenPair:
        user = call_with_retry(
            self._get_user, identity_id, operation="identity.issue_tokens"
        )
        if user is None:
            raise NotFound(f"Identity {identity_id} not found.")
        refresh = RefreshToken.for_user(user)
        return TokenPair(access=str(refresh.access_token), refresh=str(refresh))

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------

    def create_identity(
        self, login: str, secret: str, attributes: Mapping[str, Any]
    ) -> str:
        log = logger.bind(role=attributes.get("role"))

        if call_with_retry(
            self._login_exists, login, operation="identity.lookup_login"
        ):
            log.warning("identity.duplicate_email")
            raise Conflict("Email already registered.")

        try:
            user = call_with_retry(
                self._create_user,
                login,
                secret,
                dict(attributes),
                operation="identity.create",
            )
        except IntegrityError as exc:
            log.warning("identity.create_conflict", error=str(exc))
            raise Conflict("Email or username already registered.") from exc

        log.info("identity.created", identity_id=str(user.pk))
        return str(user.pk)

    def lookup_email(self, identity_id: str) -> str:
        user = call_with_retry(
            self._get_user, identity_id, operation="identity.lookup_email"
        )
        if user is None or not user.email:
            raise NotFound(f"Identity {identity_id} not found.")
        return user.email

    def authenticate(self, login: str, secret: str) -> str:
        user = call_with_retry(
            authenticate, username=login, password=secret, operation="identity.authenticate"
        )
        if user is None:
            logger.info("identity.authentication_failed")
            raise Unauthenticated(INVALID_CREDENTIALS_MESSAGE)
        return str(user.pk)

    def delete_identity(self, identity_id: str) -> bool:
        user = call_with_retry(
            self._get_user, identity_id, operation="identity.lookup"
        )
        if user is None:
            return False
        call_with_retry(user.delete, operation="identity.delete")
        logger.info("identity.deleted", identity_id=str(identity_id))
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_user(self, identity_id: Any, active_only: bool = False) -> Optional[Any]:
        queryset = self._users.objects.all()
        if active_only:
            queryset = queryset.filter(is_active=True)
        try:
            return queryset.filter(pk=identity_id).first()
        except (ValueError, TypeError, DjangoValidationError):
            return None

    def _login_exists(self, login: str) -> bool:
        return self._users.objects.filter(email__iexact=login).exists() or (
            self._users.objects.filter(**{self._users.USERNAME_FIELD: login}).exists()
        )

    @transaction.atomic
    def _create_user(self, login: str, secret: str, attributes: dict) -> Any:
        user = self._users(**{self._users.USERNAME_FIELD: login, "email": login})
        user.set_password(secret)
        user._profile_attributes = attributes
        user.save()
        return user
