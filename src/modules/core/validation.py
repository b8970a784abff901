"""Helpers turning raw payloads into DTOs and querysets at the service boundary."""

from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from modules.core.exceptions import ValidationError

D = TypeVar("D", bound=BaseModel)


def parse_dto(dto_class: Type[D], data: Union[D, Mapping[str, Any]]) -> D:
    """Return ``data`` as a ``dto_class`` instance.

    Instances pass through untouched; mappings are validated and pydantic
    errors are re-raised as the domain ``ValidationError``.
    """
    if isinstance(data, dto_class):
        return data
    try:
        return dto_class.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def clamp_page(limit: Any, offset: Any, default_limit: int, max_limit: int) -> tuple[int, int]:
    """Validate ``limit``/``offset`` query values.

    ``None`` falls back to ``default_limit`` / ``0``.  Raises
    ``ValidationError`` for non-integers, ``limit`` outside ``1..max_limit``
    or a negative ``offset``.
    """
    try:
        limit_value = default_limit if limit is None else int(limit)
        offset_value = 0 if offset is None else int(offset)
    except (TypeError, ValueError) as exc:
        raise ValidationError("limit and offset must be integers.") from exc
    if not 1 <= limit_value <= max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}.")
    if offset_value < 0:
        raise ValidationError("offset must be zero or positive.")
    return limit_value, offset_value


def apply_filterset(filterset_class: Type[Any], data: Mapping[str, Any], queryset: Any) -> Any:
    """Filter ``queryset`` through a django-filter ``FilterSet``.

    Raises ``ValidationError`` with the per-field messages when a filter
    value does not validate, instead of silently skipping that filter.
    """
    filterset = filterset_class(data, queryset=queryset)
    if not filterset.is_valid():
        errors = {
            field: " ".join(str(message) for message in messages)
            for field, messages in filterset.errors.items()
        }
        field, message = next(iter(errors.items()))
        raise ValidationError(f"{field}: {message}", errors=errors)
    return filterset.qs
