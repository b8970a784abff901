"""End-to-end order lifecycle through the default service wiring.

Starts from bearer credentials: every call goes through registration,
login, principal resolution and then the order use-cases.
"""

from __future__ import annotations

import pytest

from modules.accounts.services import build_account_service, build_principal_resolver
from modules.core.exceptions import Forbidden, NoOp
from modules.history.services import build_history_service
from modules.notifications.models import Notification
from modules.notifications.services import build_notification_service
from modules.orders.services import build_order_service

pytestmark = pytest.mark.integration


def _login(accounts, resolver, register, username):
    register({"email": f"{username}@example.com", "password": "secret123", "username": username})
    tokens = accounts.login({"login": username, "password": "secret123"})
    return resolver.resolve(f"Bearer {tokens.access}")


@pytest.fixture()
def principals():
    accounts = build_account_service()
    resolver = build_principal_resolver()
    return {
        "alice": _login(accounts, resolver, accounts.register_admin, "alice"),
        "bob": _login(accounts, resolver, accounts.register_admin, "bob"),
        "victor": _login(accounts, resolver, accounts.register_viewer, "victor"),
    }


class TestOrderLifecycle:
    def test_concrete_scenario(self, principals):
        alice, victor = principals["alice"], principals["victor"]
        orders = build_order_service()
        inbox = build_notification_service()

        order = orders.create_order(
            alice, {"customer_name": "Jane", "order_details": "2kg vanilla"}
        )
        assert order.status == "incoming"
        assert order.completed_at is None

        completed = orders.update_order(alice, order.id, {"status": "completed"})
        assert completed.completed_at is not None
        for name in ("alice", "bob"):
            titles = [n.title for n in inbox.list(principals[name])]
            assert titles == ["Order COMPLETED"]
        assert inbox.list(victor) == []

        reopened = orders.update_order(victor, order.id, {"status": "pending"})
        assert reopened.completed_at is None
        latest = Notification.objects.filter(order_id=order.id, type="order")
        assert latest.count() == 2

        history = build_history_service().list({"order_id": str(order.id)})
        assert [(h.old_status, h.new_status) for h in history] == [
            ("completed", "pending"),
            ("incoming", "completed"),
        ]

    def test_resave_same_status_is_silent(self, principals):
        alice = principals["alice"]
        orders = build_order_service()
        order = orders.create_order(alice, {"customer_name": "Jo", "order_details": "tart"})

        orders.update_order(alice, order.id, {"status": "pending"})
        before = Notification.objects.count()
        orders.update_order(alice, order.id, {"status": "pending"})
        assert Notification.objects.count() == before

    def test_viewer_restrictions(self, principals):
        alice, victor = principals["alice"], principals["victor"]
        orders = build_order_service()

        with pytest.raises(Forbidden):
            orders.create_order(victor, {"customer_name": "Jo", "order_details": "tart"})

        order = orders.create_order(alice, {"customer_name": "Jo", "order_details": "tart"})
        with pytest.raises(NoOp):
            orders.update_order(victor, order.id, {"completed_at": "2025-01-01T00:00:00Z"})
        orders.update_order(alice, order.id, {"completed_at": "2025-01-01T00:00:00Z"})

        with pytest.raises(Forbidden):
            orders.delete_order(victor, order.id)

    def test_notifications_follow_promotion(self, principals):
        alice, victor = principals["alice"], principals["victor"]
        accounts = build_account_service()
        orders = build_order_service()

        accounts.change_role(alice, victor.identity_id, {"role": "admin"})
        order = orders.create_order(alice, {"customer_name": "Jo", "order_details": "tart"})
        orders.update_order(alice, order.id, {"status": "accepted"})

        assert Notification.objects.filter(order_id=order.id).count() == 3
