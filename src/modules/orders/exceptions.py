"""Order domain exceptions.

Specialisations of the shared taxonomy in ``modules.core.exceptions`` so
callers can catch either the order-specific or the generic kind.
"""

from __future__ import annotations

from modules.core.exceptions import NoOp, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""

    default_message = "Order not found."


class NothingToUpdate(NoOp):
    """No field of the update payload is writable by the caller."""

    default_message = "No fields to update."
