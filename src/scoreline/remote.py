"""Remote callers: the outbound half of every query.

A caller takes a proxy function name (``get-fixtures``, ``get-leagues``,
``get-standings``) plus params and answers with a ``RemoteEnvelope``. Errors the
service reports in-band travel inside the envelope; a call that could not
complete at all raises ``TransportError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, Protocol

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from scoreline import __version__
from scoreline.errors import (
    MISSING_KEY_MARKER,
    ConfigurationError,
    MalformedResponseError,
    TransportError,
)
from scoreline.settings import Settings

logger = logging.getLogger(__name__)

FUNCTION_ENDPOINTS = {
    "get-fixtures": "/fixtures",
    "get-live-scores": "/fixtures",
    "get-leagues": "/leagues",
    "get-standings": "/standings",
}
FORWARDED_PARAMS = {
    "get-fixtures": ("league", "season"),
    "get-live-scores": ("league", "season"),
    "get-leagues": ("country", "season"),
    "get-standings": ("league", "season"),
}


@dataclass(frozen=True)
class RemoteEnvelope:
    """Payload plus an optional in-band error message."""

    data: Any
    error: str | None = None


class RemoteCaller(Protocol):
    async def call(self, function_name: str, params: dict[str, Any]) -> RemoteEnvelope: ...


class RetryableStatusError(RuntimeError):
    """Raised for retryable status codes."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        super().__init__(f"retryable status {response.status_code}")

    def retry_after_seconds(self) -> float | None:
        raw_value = self.response.headers.get("Retry-After")
        if not raw_value:
            return None
        try:
            return max(0.0, float(raw_value))
        except ValueError:
            try:
                date_value = parsedate_to_datetime(raw_value)
            except (TypeError, ValueError):
                return None
            return max(0.0, (date_value - datetime.now(UTC)).total_seconds())


def _wait_for_retry(retry_state) -> float:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, RetryableStatusError):
        retry_after = exc.retry_after_seconds()
        if retry_after is not None:
            return min(retry_after, 60.0)
    return min(2 ** (retry_state.attempt_number - 1), 30.0)


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code <= 599


def _json_body(response: httpx.Response, *, label: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"{label} returned a non-JSON body") from exc


class ApiFootballClient:
    """Calls API-Football directly, mirroring what the proxy functions forward."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        limits = httpx.Limits(max_connections=8, max_keepalive_connections=4)
        self._http = httpx.AsyncClient(
            base_url=settings.api_base_url.rstrip("/"),
            timeout=settings.api_timeout_s,
            limits=limits,
            transport=transport,
            headers={"User-Agent": f"scoreline/{__version__}"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiFootballClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def call(self, function_name: str, params: dict[str, Any]) -> RemoteEnvelope:
        path = FUNCTION_ENDPOINTS.get(function_name)
        if path is None:
            return RemoteEnvelope(data=None, error=f"unknown function: {function_name}")
        api_key = self.settings.football_api_key.strip()
        if not api_key:
            return RemoteEnvelope(data=None, error=f"{MISSING_KEY_MARKER} in secrets")

        query = {
            name: str(params[name])
            for name in FORWARDED_PARAMS[function_name]
            if params.get(name) is not None
        }
        headers = {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": self.settings.api_host}
        response: httpx.Response | None = None
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max(1, self.settings.api_max_attempts)),
                retry=retry_if_exception_type(RetryableStatusError),
                wait=_wait_for_retry,
                reraise=True,
            ):
                with attempt:
                    response = await self._http.get(path, params=query, headers=headers)
                    if _is_retryable(response.status_code):
                        raise RetryableStatusError(response)
        except RetryableStatusError as exc:
            status = exc.response.status_code
            logger.warning("%s failed with status %d after retries", path, status)
            return RemoteEnvelope(data=None, error=f"API call failed: {status}")
        except httpx.TransportError as exc:
            raise TransportError() from exc
        if response is None:
            raise TransportError()
        if not response.is_success:
            return RemoteEnvelope(data=None, error=f"API call failed: {response.status_code}")
        return RemoteEnvelope(data=_json_body(response, label=path))


class FunctionsClient:
    """Invokes the serverless proxy functions with a JSON body of params."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        headers = {"User-Agent": f"scoreline/{__version__}"}
        anon_key = settings.functions_anon_key.strip()
        if anon_key:
            headers["Authorization"] = f"Bearer {anon_key}"
            headers["apikey"] = anon_key
        self._http = httpx.AsyncClient(
            timeout=settings.api_timeout_s,
            transport=transport,
            headers=headers,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> FunctionsClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def call(self, function_name: str, params: dict[str, Any]) -> RemoteEnvelope:
        base_url = self.settings.functions_url.strip().rstrip("/")
        if not base_url:
            raise ConfigurationError()
        body = {key: value for key, value in params.items() if value is not None}
        try:
            response = await self._http.post(f"{base_url}/{function_name}", json=body)
        except httpx.TransportError as exc:
            raise TransportError() from exc

        if response.is_success:
            return RemoteEnvelope(data=_json_body(response, label=function_name))
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("error"):
            return RemoteEnvelope(data=None, error=str(payload["error"]))
        return RemoteEnvelope(
            data=None,
            error=f"Edge Function returned a non-2xx status code ({response.status_code})",
        )


def build_remote_caller(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ApiFootballClient | FunctionsClient:
    if settings.transport == "functions":
        return FunctionsClient(settings, transport=transport)
    if settings.transport == "direct":
        return ApiFootballClient(settings, transport=transport)
    raise ValueError(f"unknown transport: {settings.transport}")
