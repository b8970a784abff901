"""Bounded retry with exponential backoff for calls to external services.

Only transient failures are retried: lost connections and other
``OperationalError``/``InterfaceError`` raised by the database driver, plus
``ConnectionError``/``TimeoutError`` from network clients.  Anything else
(policy, validation, integrity errors) propagates on the first attempt.
After the last attempt the failure surfaces as ``ServiceUnavailable``.

Inside an open ``transaction.atomic()`` block a failed statement has
already aborted the transaction, so nothing is retried there: the error
propagates unchanged and the retry wrapping the whole unit of work (the
outermost call, made outside any atomic block) rolls back and starts over.
"""

from __future__ import annotations

import functools
import time
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

import structlog
from django.conf import settings
from django.db import InterfaceError, OperationalError, transaction

from modules.core.exceptions import ServiceUnavailable

logger = structlog.get_logger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    ConnectionError,
    TimeoutError,
)


def call_with_retry(
    func: Callable[..., T],
    *args: Any,
    operation: str = "",
    max_retries: Optional[int] = None,
    backoff: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """Call ``func`` retrying transient failures.

    ``max_retries`` and ``backoff`` default to the
    ``EXTERNAL_CALL_MAX_RETRIES`` / ``EXTERNAL_CALL_RETRY_BACKOFF`` settings.
    The delay before attempt ``n + 1`` is ``backoff * 2**n`` seconds.

    Raises:
        ServiceUnavailable: every attempt failed with a transient error.
        OperationalError, InterfaceError: a transient failure inside an
            atomic block, left for the enclosing unit of work to retry.
    """
    if in_atomic_block():
        return _call_once(func, args, kwargs, operation)

    attempts = max_retries if max_retries is not None else settings.EXTERNAL_CALL_MAX_RETRIES
    delay = backoff if backoff is not None else settings.EXTERNAL_CALL_RETRY_BACKOFF
    attempts = max(attempts, 1)
    name = operation or getattr(func, "__qualname__", repr(func))
    last_exception: Optional[BaseException] = None

    for attempt in range(attempts):
        try:
            return func(*args, **kwargs)
        except TRANSIENT_ERRORS as exc:
            last_exception = exc
            logger.warning(
                "external_call.transient_failure",
                operation=name,
                attempt=attempt + 1,
                max_attempts=attempts,
                error=str(exc),
            )
            if attempt < attempts - 1:
                backoff_time = delay * (2**attempt)
                logger.info(
                    "external_call.retrying",
                    operation=name,
                    backoff_seconds=backoff_time,
                )
                sleep(backoff_time)

    logger.error("external_call.exhausted", operation=name, attempts=attempts)
    raise ServiceUnavailable(
        f"{name} failed after {attempts} attempts.",
        operation=name,
    ) from last_exception


def retrying(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of :func:`call_with_retry`."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return call_with_retry(func, *args, operation=operation, **kwargs)

        return wrapper

    return decorator


def in_atomic_block(using: Optional[str] = None) -> bool:
    """``True`` when the connection has an open ``transaction.atomic()`` block."""
    return transaction.get_connection(using).in_atomic_block


def _call_once(func: Callable[..., T], args: tuple, kwargs: dict, operation: str) -> T:
    try:
        return func(*args, **kwargs)
    except TRANSIENT_ERRORS as exc:
        logger.warning(
            "external_call.transient_failure_in_transaction",
            operation=operation or getattr(func, "__qualname__", repr(func)),
            error=str(exc),
        )
        raise
