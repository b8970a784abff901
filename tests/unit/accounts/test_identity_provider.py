"""Unit tests for DjangoIdentityProvider (auth user table + SimpleJWT)."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model
from django.db import OperationalError

from modules.accounts.constants import INVALID_CREDENTIALS_MESSAGE, Role
from modules.accounts.models import UserProfile
from modules.core.exceptions import Conflict, NotFound, ServiceUnavailable, Unauthenticated

pytestmark = pytest.mark.unit


@pytest.fixture()
def identity_id(identity_provider):
    return identity_provider.create_identity(
        "jane@example.com", "secret123", {"username": "jane", "role": Role.ADMIN}
    )


class TestCreateIdentity:
    def test_provisions_profile_from_attributes(self, identity_id):
        profile = UserProfile.objects.get(user_id=identity_id)
        assert profile.username == "jane"
        assert profile.role == Role.ADMIN

    def test_profile_defaults_without_attributes(self, identity_provider):
        identity_id = identity_provider.create_identity("sam@example.com", "secret123", {})
        profile = UserProfile.objects.get(user_id=identity_id)
        assert profile.username == "sam@example.com"
        assert profile.role == Role.VIEWER

    def test_secret_is_hashed(self, identity_id):
        user = get_user_model().objects.get(pk=identity_id)
        assert user.password != "secret123"
        assert user.check_password("secret123")

    def test_duplicate_email_conflicts(self, identity_provider, identity_id):
        with pytest.raises(Conflict):
            identity_provider.create_identity("jane@example.com", "other123", {})

    def test_duplicate_username_rolls_back_identity(self, identity_provider, identity_id):
        with pytest.raises(Conflict):
            identity_provider.create_identity(
                "jane2@example.com", "secret123", {"username": "jane"}
            )
        assert not get_user_model().objects.filter(email="jane2@example.com").exists()


class TestTokens:
    def test_issued_access_token_verifies(self, identity_provider, identity_id):
        tokens = identity_provider.issue_tokens(identity_id)
        assert identity_provider.verify(tokens.access) == identity_id

    def test_garbage_token_rejected(self, identity_provider):
        with pytest.raises(Unauthenticated):
            identity_provider.verify("not-a-jwt")

    def test_refresh_token_is_not_an_access_token(self, identity_provider, identity_id):
        tokens = identity_provider.issue_tokens(identity_id)
        with pytest.raises(Unauthenticated):
            identity_provider.verify(tokens.refresh)

    def test_deactivated_identity_rejected(self, identity_provider, identity_id):
        tokens = identity_provider.issue_tokens(identity_id)
        get_user_model().objects.filter(pk=identity_id).update(is_active=False)
        with pytest.raises(Unauthenticated):
            identity_provider.verify(tokens.access)

    def test_removed_identity_rejected(self, identity_provider, identity_id):
        tokens = identity_provider.issue_tokens(identity_id)
        identity_provider.delete_identity(identity_id)
        with pytest.raises(Unauthenticated):
            identity_provider.verify(tokens.access)


class TestAuthenticate:
    def test_valid_credentials(self, identity_provider, identity_id):
        assert identity_provider.authenticate("jane@example.com", "secret123") == identity_id

    def test_wrong_secret(self, identity_provider, identity_id):
        with pytest.raises(Unauthenticated, match=INVALID_CREDENTIALS_MESSAGE):
            identity_provider.authenticate("jane@example.com", "wrong")


class TestLookupAndDelete:
    def test_lookup_email(self, identity_provider, identity_id):
        assert identity_provider.lookup_email(identity_id) == "jane@example.com"

    def test_lookup_unknown(self, identity_provider):
        with pytest.raises(NotFound):
            identity_provider.lookup_email("999999")

    def test_delete_identity(self, identity_provider, identity_id):
        assert identity_provider.delete_identity(identity_id) is True
        assert identity_provider.delete_identity(identity_id) is False

    def test_malformed_id_is_absent(self, identity_provider):
        assert identity_provider.delete_identity("not-a-number") is False


@pytest.mark.django_db(transaction=True)
class TestTransientFailures:
    def test_store_outage_surfaces_as_service_unavailable(
        self, identity_provider, identity_id
    ):
        tokens = identity_provider.issue_tokens(identity_id)
        with patch.object(
            identity_provider, "_get_user", side_effect=OperationalError("db down")
        ) as get_user:
            with pytest.raises(ServiceUnavailable):
                identity_provider.verify(tokens.access)
        assert get_user.call_count == 3
