from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command

from modules.accounts.models import UserProfile
from modules.orders.models import Order

pytestmark = pytest.mark.integration


class TestSeedData:
    def test_seeds_accounts_and_orders(self):
        out = StringIO()
        call_command("seed_data", "--orders", "4", stdout=out)

        assert set(UserProfile.objects.values_list("username", "role")) == {
            ("admin", "admin"),
            ("staff", "viewer"),
        }
        assert Order.objects.count() == 4
        assert all(
            (o.completed_at is not None) == (o.status == "completed")
            for o in Order.objects.all()
        )
        assert "Seed completed" in out.getvalue()

    def test_rerun_skips_existing_accounts(self):
        call_command("seed_data", "--orders", "1", stdout=StringIO())
        out = StringIO()
        call_command("seed_data", "--orders", "1", stdout=out)

        assert UserProfile.objects.count() == 2
        assert "already exists" in out.getvalue()
