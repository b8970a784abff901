"""Unit tests for AccountService."""

from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model

from modules.accounts.constants import INVALID_CREDENTIALS_MESSAGE
from modules.accounts.dtos import RoleEnum
from modules.accounts.models import UserProfile
from modules.core.exceptions import (
    Conflict,
    Forbidden,
    NoOp,
    NotFound,
    Unauthenticated,
    ValidationError,
)

pytestmark = pytest.mark.unit

PAYLOAD = {"email": "Jane@Example.com", "password": "secret123", "username": "jane"}


class TestRegistration:
    def test_register_viewer(self, account_service):
        result = account_service.register_viewer(PAYLOAD)

        assert result.user.username == "jane"
        assert result.user.role == RoleEnum.VIEWER
        assert result.email == "jane@example.com"
        assert result.access and result.refresh

    def test_register_admin(self, account_service):
        result = account_service.register_admin(PAYLOAD)
        assert result.user.role == RoleEnum.ADMIN

    def test_admin_signup_can_be_disabled(self, account_service, settings):
        settings.ACCOUNTS_ALLOW_PUBLIC_ADMIN_SIGNUP = False
        with pytest.raises(Forbidden):
            account_service.register_admin(PAYLOAD)

    def test_short_password(self, account_service):
        with pytest.raises(ValidationError):
            account_service.register_viewer({**PAYLOAD, "password": "123"})
        assert not get_user_model().objects.exists()

    def test_missing_username(self, account_service):
        with pytest.raises(ValidationError):
            account_service.register_viewer({"email": "a@example.com", "password": "secret123"})

    def test_duplicate_username(self, account_service):
        account_service.register_viewer(PAYLOAD)
        with pytest.raises(Conflict):
            account_service.register_viewer({**PAYLOAD, "email": "other@example.com"})

    def test_duplicate_email(self, account_service):
        account_service.register_viewer(PAYLOAD)
        with pytest.raises(Conflict):
            account_service.register_viewer({**PAYLOAD, "username": "jane2"})


class TestLogin:
    @pytest.fixture(autouse=True)
    def _registered(self, account_service):
        account_service.register_viewer(PAYLOAD)

    def test_login_by_username(self, account_service):
        result = account_service.login({"login": "jane", "password": "secret123"})
        assert result.user.username == "jane"
        assert result.access

    def test_login_by_email_is_case_insensitive(self, account_service):
        result = account_service.login({"login": "JANE@example.com", "password": "secret123"})
        assert result.user.username == "jane"

    @pytest.mark.parametrize(
        "login, password",
        [
            ("jane", "wrong-password"),
            ("nobody", "secret123"),
            ("nobody@example.com", "secret123"),
        ],
    )
    def test_failures_share_one_message(self, account_service, login, password):
        with pytest.raises(Unauthenticated) as exc_info:
            account_service.login({"login": login, "password": password})
        assert exc_info.value.message == INVALID_CREDENTIALS_MESSAGE


class TestProfiles:
    def test_get_me(self, account_service, viewer):
        assert account_service.get_me(viewer).username == "victor"

    def test_get_me_without_profile(self, account_service, viewer):
        UserProfile.objects.filter(user_id=viewer.identity_id).delete()
        with pytest.raises(NotFound):
            account_service.get_me(viewer)

    def test_update_own_username(self, account_service, viewer):
        profile = account_service.update_own_profile(viewer, {"username": "vic"})
        assert profile.username == "vic"

    def test_update_own_profile_empty_payload(self, account_service, viewer):
        with pytest.raises(NoOp):
            account_service.update_own_profile(viewer, {})

    def test_update_to_taken_username(self, account_service, viewer, admin):
        with pytest.raises(Conflict):
            account_service.update_own_profile(viewer, {"username": "alice"})

    def test_list_profiles_oldest_first(self, account_service, admin, viewer):
        profiles = account_service.list_profiles(admin)
        assert [p.username for p in profiles] == ["alice", "victor"]

    def test_viewer_cannot_list_profiles(self, account_service, viewer):
        with pytest.raises(Forbidden):
            account_service.list_profiles(viewer)

    def test_admin_updates_other_profile(self, account_service, admin, viewer):
        profile = account_service.update_profile(admin, viewer.identity_id, {"username": "v2"})
        assert profile.username == "v2"

    def test_viewer_cannot_update_other_profile(self, account_service, admin, viewer):
        with pytest.raises(Forbidden):
            account_service.update_profile(viewer, admin.identity_id, {"username": "x"})


class TestRoleChange:
    def test_admin_promotes_viewer(self, account_service, admin, viewer):
        profile = account_service.change_role(admin, viewer.identity_id, {"role": "admin"})
        assert profile.role == RoleEnum.ADMIN
        assert UserProfile.objects.get(user_id=viewer.identity_id).role == "admin"

    def test_admin_demotes_self(self, account_service, admin):
        profile = account_service.change_role(admin, admin.identity_id, {"role": "viewer"})
        assert profile.role == RoleEnum.VIEWER

    def test_viewer_cannot_promote_self(self, account_service, viewer):
        with pytest.raises(Forbidden):
            account_service.change_role(viewer, viewer.identity_id, {"role": "admin"})
        assert UserProfile.objects.get(user_id=viewer.identity_id).role == "viewer"

    def test_unknown_role(self, account_service, admin, viewer):
        with pytest.raises(ValidationError):
            account_service.change_role(admin, viewer.identity_id, {"role": "owner"})

    def test_unknown_profile(self, account_service, admin):
        with pytest.raises(NotFound):
            account_service.change_role(admin, "999999", {"role": "admin"})


class TestDeleteIdentity:
    def test_admin_deletes_identity(self, account_service, admin, viewer):
        account_service.delete_identity(admin, viewer.identity_id)
        assert not UserProfile.objects.filter(user_id=viewer.identity_id).exists()
        assert not get_user_model().objects.filter(pk=viewer.identity_id).exists()

    def test_viewer_cannot_delete(self, account_service, admin, viewer):
        with pytest.raises(Forbidden):
            account_service.delete_identity(viewer, admin.identity_id)

    def test_unknown_identity(self, account_service, admin):
        with pytest.raises(NotFound):
            account_service.delete_identity(admin, "999999")

    def test_logout_is_acknowledged(self, account_service, viewer):
        assert account_service.logout(viewer) is None
