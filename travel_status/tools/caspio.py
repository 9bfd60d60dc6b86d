"""Async client for the hosted low-code table store (Caspio REST v2).

Handles the OAuth client-credentials token, table queries, and inserts.
Every transport or protocol problem is converted to CollaboratorFailure.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional

import httpx

from travel_status.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

SERVICE_NAME = "caspio"

# Refresh the token this long before the server says it expires
TOKEN_REFRESH_MARGIN_SEC = 300


class CaspioClient:
    """Thin REST client with a cached bearer token."""

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._clock = clock
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    async def access_token(self) -> str:
        """Return a valid bearer token, fetching a new one when needed."""
        async with self._token_lock:
            if self._token and self._clock() < self._token_expires_at:
                return self._token

            data = await self._request(
                "POST",
                f"{self.base_url}/oauth/token",
                "authenticate",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
            )
            token = data.get("access_token")
            if not token:
                raise CollaboratorFailure(SERVICE_NAME, "token response had no access_token")
            try:
                expires_in = float(data.get("expires_in", 0))
            except (TypeError, ValueError):
                expires_in = 0.0

            self._token = token
            self._token_expires_at = self._clock() + max(0.0, expires_in - TOKEN_REFRESH_MARGIN_SEC)
            logger.info("Caspio access token obtained (expires in %ss)", int(expires_in))
            return token

    async def query(self, table: str, where: Optional[str] = None) -> list[dict[str, Any]]:
        """Return the records of ``table`` matching a ``q.where`` clause."""
        token = await self.access_token()
        params = {"q.where": where} if where else None
        data = await self._request(
            "GET",
            f"{self.base_url}/rest/v2/tables/{table}/records",
            f"query {table}",
            params=params,
            headers=self._headers(token),
        )
        result = data.get("Result", [])
        if not isinstance(result, list):
            raise CollaboratorFailure(SERVICE_NAME, f"malformed result from {table}")
        return result

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one record and return the stored row when the server echoes it."""
        token = await self.access_token()
        data = await self._request(
            "POST",
            f"{self.base_url}/rest/v2/tables/{table}/records",
            f"insert {table}",
            params={"response": "rows"},
            json=record,
            headers=self._headers(token),
        )
        rows = data.get("Result") or []
        return rows[0] if rows and isinstance(rows[0], dict) else {}

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CaspioClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def _headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Accept": "application/json"}

    async def _request(self, method: str, url: str, context: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Caspio %s timed out", context)
            raise CollaboratorFailure(SERVICE_NAME, f"{context} timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Caspio %s failed: HTTP %s %s",
                context, exc.response.status_code, exc.response.text[:200],
            )
            raise CollaboratorFailure(
                SERVICE_NAME, f"{context} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Caspio %s failed: %s", context, exc)
            raise CollaboratorFailure(SERVICE_NAME, f"{context} failed: {exc}") from exc

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise CollaboratorFailure(SERVICE_NAME, f"{context} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise CollaboratorFailure(SERVICE_NAME, f"{context} returned unexpected payload")
        return data
