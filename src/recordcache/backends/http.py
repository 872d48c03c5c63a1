"""
REST backend over httpx.

Maps the backend contract onto a conventional resource API:

    GET    {base_url}/{resource}          -> list of records
    GET    {base_url}/{resource}/{uid}    -> record (404 means not found)
    PATCH  {base_url}/{resource}/{uid}    -> updated record (404 raises)
    POST   {base_url}/{resource}          -> created record

Transport errors and 5xx responses are retried with exponential backoff.
"""

from __future__ import annotations

from typing import Any

import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from recordcache.backends.base import Backend
from recordcache.config import Settings, get_settings
from recordcache.exceptions import BackendError, ConfigurationError, RecordNotFoundError
from recordcache.logging import get_logger
from recordcache.types import Uid

logger = get_logger(__name__)

Record = dict[str, Any]


def _is_retryable(exc: BaseException) -> bool:
    """Retry on transport failures and server-side errors only."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class HttpBackend(Backend[Record]):
    """Backend talking JSON to a REST resource."""

    def __init__(
        self,
        base_url: str,
        resource: str,
        timeout_seconds: float = 30.0,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP backend.

        Args:
            base_url: Root URL of the API.
            resource: Collection path segment, e.g. "orgs".
            timeout_seconds: Per-request timeout.
            max_attempts: Attempts per request before giving up.
            backoff_seconds: Multiplier for exponential backoff between attempts.
            client: Optional preconfigured client (e.g. with a mock transport).
        """
        self.base_url = base_url.rstrip("/")
        self.resource = resource.strip("/")
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._client = client

    @classmethod
    def from_settings(cls, resource: str, settings: Settings | None = None) -> HttpBackend:
        """Build a backend from application settings."""
        settings = settings or get_settings()
        if not settings.BACKEND_BASE_URL:
            raise ConfigurationError(
                "BACKEND_BASE_URL must be set to use the HTTP backend",
                context={"resource": resource},
            )
        return cls(
            base_url=settings.BACKEND_BASE_URL,
            resource=resource,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
            max_attempts=settings.HTTP_MAX_ATTEMPTS,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _url(self, uid: Uid | None = None) -> str:
        url = f"{self.base_url}/{self.resource}"
        if uid is not None:
            url = f"{url}/{uid}"
        return url

    async def _request(
        self,
        method: str,
        url: str,
        body: Any = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            httpx.HTTPStatusError: For non-retryable or exhausted error statuses.
            httpx.TransportError: When the transport keeps failing.
        """
        client = await self._get_client()
        content = orjson.dumps(body) if body is not None else None
        headers = {"Content-Type": "application/json"} if content is not None else None

        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=30),
            stop=stop_after_attempt(self.max_attempts),
            reraise=True,
        ):
            with attempt:
                response = await client.request(method, url, content=content, headers=headers)
                if response.status_code != 404:
                    response.raise_for_status()

        return response

    async def _call(
        self,
        operation: str,
        method: str,
        uid: Uid | None = None,
        body: Any = None,
    ) -> httpx.Response:
        """Run a request and translate httpx errors into BackendError."""
        url = self._url(uid)
        try:
            return await self._request(method, url, body)
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"HTTP {e.response.status_code} from backend",
                context={
                    "operation": operation,
                    "uid": uid,
                    "status_code": e.response.status_code,
                },
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(
                f"Backend transport error: {e}",
                context={"operation": operation, "uid": uid},
            ) from e

    async def fetch_all(self) -> list[Record]:
        response = await self._call("fetch_all", "GET")
        if response.status_code == 404:
            raise BackendError(
                "Collection not found",
                context={"operation": "fetch_all", "status_code": 404},
            )
        data = response.json()
        if not isinstance(data, list):
            raise BackendError(
                "Expected a JSON array from collection endpoint",
                context={"operation": "fetch_all"},
            )
        return data

    async def fetch_one(self, uid: Uid) -> Record | None:
        response = await self._call("fetch_one", "GET", uid)
        if response.status_code == 404:
            logger.debug("Backend returned 404", uid=uid)
            return None
        return response.json()

    async def update(self, uid: Uid, patch: Any) -> Record:
        response = await self._call("update", "PATCH", uid, patch)
        if response.status_code == 404:
            raise RecordNotFoundError("Record not found", context={"uid": uid})
        return response.json()

    async def create(self, record: Record) -> Record:
        response = await self._call("create", "POST", body=record)
        if response.status_code == 404:
            raise BackendError(
                "Collection not found",
                context={"operation": "create", "status_code": 404},
            )
        return response.json()
