"""Account service layer (Use Cases).

Registration, login, profile management and principal resolution.
Secrets only ever reach the identity provider; this layer works with
identity ids and profiles.

Business rules enforced:
- Passwords shorter than ``ACCOUNTS_MIN_PASSWORD_LENGTH`` are rejected.
- Usernames and emails are unique (``Conflict``).
- Login failures never reveal whether the username or the password was wrong.
- Only admins list or edit other profiles, change roles and delete identities.
- A caller whose profile is missing is treated as a ``viewer``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction

from modules.accounts.constants import INVALID_CREDENTIALS_MESSAGE, Role
from modules.accounts.dtos import (
    AuthResultDTO,
    ChangeRoleDTO,
    LoginDTO,
    Principal,
    ProfileOutputDTO,
    RegisterDTO,
    RoleEnum,
    UpdateProfileDTO,
)
from modules.accounts.policies import check_role_change, require_admin
from modules.core.exceptions import Conflict, Forbidden, NoOp, NotFound, Unauthenticated
from modules.core.repositories.interfaces import Page
from modules.core.retry import call_with_retry
from modules.core.validation import clamp_page, parse_dto

if TYPE_CHECKING:
    from modules.accounts.identity import IIdentityProvider
    from modules.accounts.models import UserProfile
    from modules.accounts.repositories.interfaces import IProfileLookup, IProfileRepository

logger = structlog.get_logger(__name__)

Payload = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Principal resolution
# ---------------------------------------------------------------------------


class PrincipalResolver:
    """Turns a bearer credential into a ``Principal``.

    The role is read through the privileged profile lookup, never through
    the caller-facing repository.
    """

    def __init__(
        self, identity_provider: IIdentityProvider, profile_lookup: IProfileLookup
    ) -> None:
        self._identity = identity_provider
        self._profiles = profile_lookup

    def resolve(self, authorization: Optional[str]) -> Principal:
        """Resolve an ``Authorization`` header value (``Bearer <token>``).

        Raises:
            Unauthenticated: header missing, malformed or token rejected.
        """
        if not authorization:
            raise Unauthenticated("Authorization header missing.")
        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise Unauthenticated("Authorization header must be 'Bearer <token>'.")
        return self.resolve_credential(parts[1])

    def resolve_credential(self, credential: str) -> Principal:
        identity_id = self._identity.verify(credential)
        role = self._profiles.get_role(identity_id)
        if role is None:
            logger.warning("principal.profile_missing", identity_id=identity_id)
            role = Role.VIEWER
        return Principal(identity_id=identity_id, role=RoleEnum(role))


# ---------------------------------------------------------------------------
# Account use-cases
# ---------------------------------------------------------------------------


class AccountService:
    """Application service for account use-cases.

    Receives the identity provider and repositories via constructor
    injection (DIP).
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        profile_repository: IProfileRepository,
        profile_lookup: IProfileLookup,
    ) -> None:
        self._identity = identity_provider
        self._profile_repo = profile_repository
        self._profiles = profile_lookup

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register_viewer(self, data: Union[RegisterDTO, Payload]) -> AuthResultDTO:
        return self._register(parse_dto(RegisterDTO, data), Role.VIEWER)

    def register_admin(self, data: Union[RegisterDTO, Payload]) -> AuthResultDTO:
        """Register an admin account.

        Raises:
            Forbidden: public admin sign-up is disabled.
        """
        if not settings.ACCOUNTS_ALLOW_PUBLIC_ADMIN_SIGNUP:
            raise Forbidden("Admin sign-up is disabled.")
        return self._register(parse_dto(RegisterDTO, data), Role.ADMIN)

    def login(self, data: Union[LoginDTO, Payload]) -> AuthResultDTO:
        """Authenticate by username or email and issue tokens.

        Raises:
            Unauthenticated: unknown login or wrong password (one message
                for both).
        """
        dto = parse_dto(LoginDTO, data)

        if dto.is_email:
            email = dto.login.lower()
        else:
            profile = self._profiles.get_by_username(dto.login)
            if profile is None:
                logger.info("account.login_failed", reason="unknown_username")
                raise Unauthenticated(INVALID_CREDENTIALS_MESSAGE)
            try:
                email = self._identity.lookup_email(profile.identity_id)
            except NotFound as exc:
                logger.info("account.login_failed", reason="identity_missing")
                raise Unauthenticated(INVALID_CREDENTIALS_MESSAGE) from exc

        identity_id = self._identity.authenticate(email, dto.password)
        profile = self._require_profile(identity_id)
        tokens = self._identity.issue_tokens(identity_id)

        logger.info("account.logged_in", identity_id=identity_id, role=profile.role)
        return AuthResultDTO(
            access=tokens.access,
            refresh=tokens.refresh,
            email=email,
            user=ProfileOutputDTO.from_entity(profile),
        )

    def logout(self, principal: Principal) -> None:
        """Acknowledge a logout; tokens are discarded by the client."""
        logger.info("account.logged_out", identity_id=principal.identity_id)

    def update_own_profile(
        self, principal: Principal, data: Union[UpdateProfileDTO, Payload]
    ) -> ProfileOutputDTO:
        return self._update_username(principal.identity_id, parse_dto(UpdateProfileDTO, data))

    def update_profile(
        self,
        principal: Principal,
        profile_id: str,
        data: Union[UpdateProfileDTO, Payload],
    ) -> ProfileOutputDTO:
        require_admin(principal, "edit other profiles")
        return self._update_username(profile_id, parse_dto(UpdateProfileDTO, data))

    def change_role(
        self,
        principal: Principal,
        profile_id: str,
        data: Union[ChangeRoleDTO, Payload],
    ) -> ProfileOutputDTO:
        """Change the role of a profile.

        Raises:
            Forbidden: see ``policies.check_role_change``.
            NotFound: profile does not exist.
        """
        dto = parse_dto(ChangeRoleDTO, data)
        check_role_change(principal, profile_id)

        profile = self._require_profile(profile_id)
        old_role = profile.role
        profile.role = dto.role.value
        self._profile_repo.save(profile)

        logger.info(
            "profile.role_changed",
            identity_id=profile.identity_id,
            old_role=old_role,
            new_role=profile.role,
            changed_by=principal.identity_id,
        )
        return ProfileOutputDTO.from_entity(profile)

    def delete_identity(self, principal: Principal, identity_id: str) -> None:
        """Remove an identity; its profile and notifications go with it.

        Raises:
            Forbidden: caller is not an admin.
            NotFound: identity does not exist.
        """
        require_admin(principal, "delete users")
        if not self._identity.delete_identity(identity_id):
            raise NotFound(f"User {identity_id} not found.")
        logger.info(
            "account.identity_deleted",
            identity_id=str(identity_id),
            deleted_by=principal.identity_id,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_me(self, principal: Principal) -> ProfileOutputDTO:
        return ProfileOutputDTO.from_entity(self._require_profile(principal.identity_id))

    def list_profiles(
        self,
        principal: Principal,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ProfileOutputDTO]:
        require_admin(principal, "list users")
        limit, offset = clamp_page(
            limit, offset, settings.MAX_PAGE_SIZE, settings.MAX_PAGE_SIZE
        )
        profiles = self._profile_repo.list(Page(limit=limit, offset=offset))
        return [ProfileOutputDTO.from_entity(p) for p in profiles]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _register(self, dto: RegisterDTO, role: Role) -> AuthResultDTO:
        email = str(dto.email).lower()
        log = logger.bind(role=role.value)

        if self._profile_repo.username_taken(dto.username):
            log.warning("account.username_taken")
            raise Conflict("Username already taken.")

        identity_id = self._identity.create_identity(
            email, dto.password, {"username": dto.username, "role": role.value}
        )
        profile = self._require_profile(identity_id)
        tokens = self._identity.issue_tokens(identity_id)

        log.info("account.registered", identity_id=identity_id)
        return AuthResultDTO(
            access=tokens.access,
            refresh=tokens.refresh,
            email=email,
            user=ProfileOutputDTO.from_entity(profile),
        )

    def _update_username(self, profile_id: str, dto: UpdateProfileDTO) -> ProfileOutputDTO:
        if dto.username is None:
            raise NoOp("No fields to update.")

        profile = self._require_profile(profile_id)
        if self._profile_repo.username_taken(dto.username, exclude_id=profile.identity_id):
            raise Conflict("Username already taken.")

        profile.username = dto.username
        try:
            call_with_retry(self._save_profile, profile, operation="profiles.update")
        except IntegrityError as exc:
            raise Conflict("Username already taken.") from exc

        logger.info("profile.updated", identity_id=profile.identity_id)
        return ProfileOutputDTO.from_entity(profile)

    @transaction.atomic
    def _save_profile(self, profile: UserProfile) -> None:
        self._profile_repo.save(profile)

    def _require_profile(self, identity_id: str) -> UserProfile:
        profile = self._profile_repo.get_by_id(identity_id)
        if profile is None:
            raise NotFound(f"Profile {identity_id} not found.")
        return profile


# ---------------------------------------------------------------------------
# Default wiring
# ---------------------------------------------------------------------------


def build_account_service() -> AccountService:
    from modules.accounts.identity import DjangoIdentityProvider
    from modules.accounts.repositories import PrivilegedProfileLookup, ProfileDjangoRepository

    return AccountService(
        identity_provider=DjangoIdentityProvider(),
        profile_repository=ProfileDjangoRepository(),
        profile_lookup=PrivilegedProfileLookup(),
    )


def build_principal_resolver() -> PrincipalResolver:
    from modules.accounts.identity import DjangoIdentityProvider
    from modules.accounts.repositories import PrivilegedProfileLookup

    return PrincipalResolver(
        identity_provider=DjangoIdentityProvider(),
        profile_lookup=PrivilegedProfileLookup(),
    )
