"""Completion delivery on a caller-chosen context.

A completion callback runs exactly once per request, never inline with the
code that produced the result. The context is either a
``concurrent.futures.Executor`` (``submit``) or an asyncio event loop
(``call_soon_threadsafe``).
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor
import logging
import threading
from typing import TYPE_CHECKING, Any

from travis_v3.errors import ConfigurationError, TransportError
from travis_v3.result import Failure

if TYPE_CHECKING:
    from collections.abc import Callable

    from travis_v3.result import Result

logger = logging.getLogger(__name__)

DeliveryContext = Executor | asyncio.AbstractEventLoop


def validate_context(context: object) -> None:
    """Raise ConfigurationError for anything that cannot deliver callbacks."""
    if not isinstance(context, (Executor, asyncio.AbstractEventLoop)):
        raise ConfigurationError(
            f"Unsupported delivery context: {type(context).__name__}",
            hint="Pass a concurrent.futures.Executor or an asyncio event loop.",
        )


def deliver(
    completion: Callable[[Result[Any, Any]], object],
    result: Result[Any, Any],
    context: DeliveryContext,
) -> None:
    """Schedule ``completion(result)`` on *context*."""
    validate_context(context)
    if isinstance(context, Executor):
        context.submit(completion, result)
    else:
        context.call_soon_threadsafe(completion, result)


class OnceDelivery:
    """Delivers at most one result; later attempts are ignored and logged."""

    def __init__(
        self,
        completion: Callable[[Result[Any, Any]], object],
        context: DeliveryContext,
    ) -> None:
        """Bind the callback to its delivery context."""
        validate_context(context)
        self._completion = completion
        self._context = context
        self._lock = threading.Lock()
        self._delivered = False

    @property
    def delivered(self) -> bool:
        return self._delivered

    def __call__(self, result: Result[Any, Any]) -> bool:
        """Deliver *result*; return False when a result was already delivered."""
        with self._lock:
            if self._delivered:
                logger.warning("Completion already delivered; dropping %r", result)
                return False
            self._delivered = True
        try:
            deliver(self._completion, result, self._context)
        except RuntimeError:
            # Shut-down executor or closed loop; the completion cannot run.
            logger.error(
                "Delivery context rejected the completion; dropping %r",
                result,
                exc_info=True,
            )
            return False
        return True

    def from_task(self, task: asyncio.Task[Result[Any, Any]]) -> None:
        """Done-callback adapter for an asyncio task."""
        if task.cancelled():
            self(Failure(TransportError("Request was cancelled")))
            return
        exc = task.exception()
        if exc is not None:
            # Operations return Result values; an exception here is a bug.
            err = TransportError(f"Request failed unexpectedly: {exc}")
            err.__cause__ = exc
            self(Failure(err))
            return
        self(task.result())
