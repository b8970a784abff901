from __future__ import annotations

import pytest

from modules.core.exceptions import ServiceUnavailable
from modules.notifications.models import Notification
from modules.notifications.tasks import fan_out_order_event

pytestmark = pytest.mark.unit


class TestFanOutTask:
    def test_task_delivers_to_admins(self, admin, second_admin, order):
        result = fan_out_order_event.apply(
            kwargs={
                "title": "Order ACCEPTED",
                "message": "m",
                "type": "order",
                "order_id": str(order.id),
            }
        )
        assert result.get() == 2
        assert Notification.objects.filter(title="Order ACCEPTED").count() == 2

    def test_task_is_registered_by_name(self):
        assert fan_out_order_event.name == "notifications.fan_out_order_event"

    def test_retries_when_delivery_is_unavailable(self):
        assert fan_out_order_event.autoretry_for == (ServiceUnavailable,)
        assert fan_out_order_event.max_retries == 3
