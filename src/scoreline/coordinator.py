"""Single-flight coordination of outbound calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from scoreline.errors import (
    MISSING_KEY_MARKER,
    ConfigurationError,
    FootballDataError,
    MalformedResponseError,
    ServiceError,
    TransportError,
)
from scoreline.keys import request_key
from scoreline.remote import RemoteCaller, RemoteEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")


def interpret_envelope(function_name: str, envelope: RemoteEnvelope) -> dict[str, Any]:
    """Map a remote envelope onto a payload dict or a classified error."""
    if envelope.error:
        if MISSING_KEY_MARKER in envelope.error:
            raise ConfigurationError()
        raise ServiceError(envelope.error)

    data = envelope.data
    if isinstance(data, dict) and "error" in data:
        embedded = data.get("error")
        if embedded and MISSING_KEY_MARKER in str(embedded):
            raise ConfigurationError()
        raise ServiceError(str(embedded) if embedded else None)
    if not isinstance(data, dict):
        raise MalformedResponseError()

    if data.get("results") == 0:
        logger.warning(
            "%s returned 0 results (invalid league/season, rate limiting, or no data)",
            function_name,
        )
        provider_errors = data.get("errors")
        if provider_errors:
            logger.warning("%s provider errors: %s", function_name, provider_errors)
    return data


def _consume_outcome(task: asyncio.Future[Any]) -> None:
    # marks the outcome retrieved even when every waiter was cancelled
    if not task.cancelled():
        task.exception()


class RequestCoordinator:
    """Collapses concurrent identical requests into one outbound call.

    The pending map holds at most one task per key. Entries are removed inside
    the task itself, so by the time any caller sees the outcome the slot is
    already free and the next dispatch starts a fresh call.
    """

    def __init__(self, caller: RemoteCaller) -> None:
        self._caller = caller
        self._pending: dict[str, asyncio.Future[Any]] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def dispatch(self, key: str, perform: Callable[[], Awaitable[T]]) -> T:
        pending = self._pending.get(key)
        if pending is not None:
            logger.debug("request already in flight for %s, joining", key)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._settle(key, perform))
        task.add_done_callback(_consume_outcome)
        self._pending[key] = task
        # a cancelled waiter must not cancel the call other waiters share
        return await asyncio.shield(task)

    async def _settle(self, key: str, perform: Callable[[], Awaitable[T]]) -> T:
        try:
            return await perform()
        finally:
            self._pending.pop(key, None)

    async def call(self, function_name: str, params: dict[str, Any]) -> dict[str, Any]:
        """Invoke a remote function once per identical in-flight request."""
        key = request_key(function_name, params)
        return await self.dispatch(key, lambda: self._invoke(function_name, params))

    async def _invoke(self, function_name: str, params: dict[str, Any]) -> dict[str, Any]:
        logger.info("calling %s with params %s", function_name, params)
        try:
            envelope = await self._caller.call(function_name, params)
        except FootballDataError:
            raise
        except (httpx.TransportError, OSError) as exc:
            logger.warning("%s could not connect: %s", function_name, exc)
            raise TransportError() from exc
        return interpret_envelope(function_name, envelope)
