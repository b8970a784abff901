"""Domain exception taxonomy.

Raised by the Service Layer when a request cannot be honoured.  Every
error carries a stable ``code`` and the HTTP status the API layer should
answer with, so callers can translate failures without inspecting
messages.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for every failure surfaced by the services."""

    code = "error"
    http_status = 500
    default_message = "Unexpected error."

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "detail": self.message}
        if self.details:
            payload["meta"] = self.details
        return payload


class Unauthenticated(DomainError):
    """Credential missing, malformed or rejected by the identity provider."""

    code = "unauthenticated"
    http_status = 401
    default_message = "Authentication required."


class Forbidden(DomainError):
    """Authenticated, but the policy denies the operation."""

    code = "forbidden"
    http_status = 403
    default_message = "You do not have permission to perform this action."


class NotFound(DomainError):
    """The referenced entity does not exist (or is not visible to the caller)."""

    code = "not_found"
    http_status = 404
    default_message = "Not found."


class ValidationError(DomainError):
    """Malformed or missing required input."""

    code = "validation_error"
    http_status = 400
    default_message = "Invalid input."

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """Build from a ``pydantic.ValidationError``, keeping per-field messages."""
        errors = {
            ".".join(str(part) for part in err["loc"]) or "__all__": err["msg"]
            for err in exc.errors()
        }
        first = next(iter(errors.items()), ("__all__", cls.default_message))
        return cls(f"{first[0]}: {first[1]}", errors=errors)


class NoOp(DomainError):
    """An update ended up with no permitted field to change."""

    code = "no_op"
    http_status = 400
    default_message = "No fields to update."


class Conflict(DomainError):
    """Uniqueness violation (duplicate username or email)."""

    code = "conflict"
    http_status = 409
    default_message = "Resource already exists."


class ServiceUnavailable(DomainError):
    """An external dependency kept failing after the bounded retries."""

    code = "service_unavailable"
    http_status = 503
    default_message = "A required service is temporarily unavailable."
