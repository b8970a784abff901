"""Unit tests for PrincipalResolver."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from modules.accounts.dtos import RoleEnum
from modules.accounts.models import UserProfile
from modules.accounts.services import PrincipalResolver
from modules.core.exceptions import Unauthenticated

pytestmark = pytest.mark.unit


@pytest.fixture()
def admin_token(account_service):
    result = account_service.register_admin(
        {"email": "root@example.com", "password": "secret123", "username": "root"}
    )
    return result.user.id, result.access


class TestHeaderParsing:
    @pytest.mark.parametrize("header", [None, "", "Bearer", "Token abc", "Bearer a b"])
    def test_malformed_header(self, resolver, header):
        with pytest.raises(Unauthenticated):
            resolver.resolve(header)

    def test_scheme_is_case_insensitive(self, resolver, admin_token):
        identity_id, access = admin_token
        assert resolver.resolve(f"bearer {access}").identity_id == identity_id


class TestResolution:
    def test_resolves_identity_and_role(self, resolver, admin_token):
        identity_id, access = admin_token
        principal = resolver.resolve(f"Bearer {access}")
        assert principal.identity_id == identity_id
        assert principal.role == RoleEnum.ADMIN

    def test_missing_profile_defaults_to_viewer(self, resolver, admin_token):
        identity_id, access = admin_token
        UserProfile.objects.filter(user_id=identity_id).delete()

        principal = resolver.resolve_credential(access)
        assert principal.role == RoleEnum.VIEWER

    def test_role_read_from_profile_on_every_call(self, resolver, admin_token):
        identity_id, access = admin_token
        UserProfile.objects.filter(user_id=identity_id).update(role="viewer")
        assert resolver.resolve_credential(access).role == RoleEnum.VIEWER

    def test_rejected_credential(self, resolver):
        with pytest.raises(Unauthenticated):
            resolver.resolve("Bearer invalid.token.value")

    def test_role_comes_from_privileged_lookup(self):
        identity = MagicMock()
        identity.verify.return_value = "42"
        lookup = MagicMock()
        lookup.get_role.return_value = "admin"

        principal = PrincipalResolver(identity, lookup).resolve("Bearer abc")

        identity.verify.assert_called_once_with("abc")
        lookup.get_role.assert_called_once_with("42")
        assert principal.is_admin
