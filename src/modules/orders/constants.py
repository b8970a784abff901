"""Order domain constants.

Defines status choices and the per-role field permissions enforced by
``modules.orders.policies``.  Any status may move to any other status.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    INCOMING = "incoming", "Incoming"
    ACCEPTED = "accepted", "Accepted"
    DECLINED = "declined", "Declined"
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"


# Fields any authenticated caller may change on an existing order.
SHARED_MUTABLE_FIELDS: frozenset[str] = frozenset(
    {
        "customer_name",
        "order_details",
        "location",
        "phone_number",
        "pickup_date",
        "meta_business_link",
        "image",
        "status",
    }
)

ADMIN_ONLY_FIELDS: frozenset[str] = frozenset({"completed_at"})

ORDER_UPDATED_TITLE = "Order Updated"
