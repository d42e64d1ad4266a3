"""Smart Gestion — Managed Store REST Client.

Handles API-key headers, retry logic and rate limiting against the store's
REST interface (`/rest/v1/<resource>`).
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from smartgestion.config import settings
from smartgestion.core.logging import get_logger

logger = get_logger("store.client")

MAX_RETRIES = 3
RETRY_BASE_DELAY = 2  # seconds


class StoreAPIError(Exception):
    """Raised when the store returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: int = 0, error_code: str = ""):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class StoreClient:
    """Async HTTP client for the store's read-only REST queries."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ):
        self.base_url = (base_url or settings.store_rest_url).rstrip("/")
        self.api_key = api_key or settings.store_api_key
        self.retry_base_delay = retry_base_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.store_timeout,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "Accept": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ── Core Request Method ──

    async def _request(
        self,
        method: str,
        url: str,
        params: Dict[str, Any] | None = None,
    ) -> Any:
        """Make a request with retry + rate-limit handling."""
        client = await self._get_client()

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                resp = await client.request(method, url, params=params)

                # Rate limited
                if resp.status_code == 429:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Rate limited (429). Retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})"
                    )
                    await asyncio.sleep(wait)
                    continue

                resp.raise_for_status()
                return resp.json()

            except httpx.HTTPStatusError as e:
                body = (
                    e.response.json()
                    if e.response.headers.get("content-type", "").startswith(
                        "application/json"
                    )
                    else {}
                )
                error_msg = body.get("message", str(e)) if isinstance(body, dict) else str(e)
                error_code = str(body.get("code", "")) if isinstance(body, dict) else ""

                if attempt < MAX_RETRIES and e.response.status_code >= 500:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Server error {e.response.status_code}. Retrying in {wait}s",
                        extra={"status_code": e.response.status_code},
                    )
                    await asyncio.sleep(wait)
                    continue

                raise StoreAPIError(error_msg, e.response.status_code, error_code) from e

            except httpx.RequestError as e:
                if attempt < MAX_RETRIES:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(f"Request error: {e}. Retrying in {wait}s")
                    await asyncio.sleep(wait)
                    continue
                raise StoreAPIError(
                    f"Connection failed after {MAX_RETRIES} retries: {e}"
                ) from e

        raise StoreAPIError("Max retries exhausted", 429)

    # ── Resource Reads ──

    async def select(
        self,
        resource: str,
        select: str = "*",
        order: str | None = None,
        limit: int | None = None,
        filters: Dict[str, str] | None = None,
    ) -> List[Dict[str, Any]]:
        """Read rows from a table or view.

        Args:
            resource: Table or view name.
            select: Column list, embeds allowed (`activities(nom)`).
            order: `column.asc` / `column.desc`.
            limit: Maximum number of rows.
            filters: Column → operator expression, e.g. `{"jour": "gte.2024-01-01"}`.
        """
        params: Dict[str, Any] = {"select": select}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        if filters:
            params.update(filters)

        url = f"{self.base_url}/{resource}"
        result = await self._request("GET", url, params)
        if not isinstance(result, list):
            raise StoreAPIError(f"Unexpected payload from {resource}: expected a list")
        logger.info(
            f"Fetched {len(result)} rows from {resource}",
            extra={"view": resource, "count": len(result)},
        )
        return result
