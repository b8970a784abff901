"""Fan-out handed to Celery (eager in tests) once the order update commits."""

from __future__ import annotations

import pytest

from modules.notifications.models import Notification

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _async_notifications(settings):
    settings.NOTIFICATIONS_ASYNC = True
    settings.CELERY_TASK_ALWAYS_EAGER = True


class TestAsyncFanOut:
    def test_delivered_after_commit(
        self, order_service, admin, second_admin, order, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            order_service.update_order(admin, order.id, {"status": "completed"})
        assert not Notification.objects.exists()

        for callback in callbacks:
            callback()

        notifications = Notification.objects.filter(order_id=order.id)
        assert notifications.count() == 2
        assert {n.type for n in notifications} == {"success"}

    def test_nothing_queued_for_silent_update(
        self, order_service, viewer, order, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            order_service.update_order(viewer, order.id, {"location": "Harbor"})
        assert callbacks == []
