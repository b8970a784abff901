"""Profile provisioning on identity creation."""

from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model

from modules.accounts.constants import Role
from modules.accounts.models import UserProfile

pytestmark = pytest.mark.unit


class TestProfileProvisioning:
    def test_plain_user_gets_viewer_profile(self):
        user = get_user_model().objects.create_user(
            "plain", email="plain@example.com", password="secret123"
        )
        profile = UserProfile.objects.get(user=user)
        assert profile.username == "plain@example.com"
        assert profile.role == Role.VIEWER

    def test_username_falls_back_to_login(self):
        user = get_user_model().objects.create_user("no-email", password="secret123")
        assert UserProfile.objects.get(user=user).username == "no-email"

    def test_updating_user_does_not_create_second_profile(self):
        user = get_user_model().objects.create_user("plain", email="plain@example.com")
        user.first_name = "Plain"
        user.save()
        assert UserProfile.objects.filter(user=user).count() == 1

    def test_removing_identity_removes_profile(self):
        user = get_user_model().objects.create_user("gone", email="gone@example.com")
        user.delete()
        assert not UserProfile.objects.filter(username="gone@example.com").exists()
