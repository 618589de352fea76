"""Supabase (PostgREST) client with retry logic and API key support."""

import asyncio
import logging
from typing import Any

import httpx

from tombo.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class SupabaseClientError(Exception):
    """Base exception for Supabase client errors."""

    pass


class SupabaseClient:
    """
    Client for the Supabase REST endpoint (PostgREST) of the Tombo project.

    Features:
    - API key sent both as `apikey` and as a bearer token
    - Exponential backoff retry (3 attempts)
    - Exact row counts via `Prefer: count=exact` and `Content-Range`
    """

    def __init__(
        self,
        base_url: str = settings.supabase_url,
        api_key: str | None = settings.supabase_key,
        max_retries: int = 3,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.max_retries = max_retries
        self.timeout = timeout

        # Build headers
        self.headers: dict[str, str] = {
            "Accept": "application/json",
        }
        if api_key:
            self.headers["apikey"] = api_key
            self.headers["Authorization"] = f"Bearer {api_key}"

    def table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make HTTP request with exponential backoff retry."""
        last_error: Exception | None = None
        request_headers = {**self.headers, **(headers or {})}

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method, url, headers=request_headers, params=params
                    )
                    response.raise_for_status()
                    return response

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code == 429:  # Rate limited
                    wait_time = 2**attempt * 10  # 10s, 20s, 40s
                    logger.warning(f"Rate limited, waiting {wait_time}s before retry")
                    await asyncio.sleep(wait_time)
                elif e.response.status_code >= 500:  # Server error
                    wait_time = 2**attempt
                    logger.warning(f"Server error {e.response.status_code}, retry in {wait_time}s")
                    await asyncio.sleep(wait_time)
                else:
                    raise SupabaseClientError(f"HTTP error: {e}") from e

            except httpx.RequestError as e:
                last_error = e
                wait_time = 2**attempt
                logger.warning(f"Request error: {e}, retry in {wait_time}s")
                await asyncio.sleep(wait_time)

        raise SupabaseClientError(f"Failed after {self.max_retries} retries: {last_error}")

    async def _select(self, table: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        response = await self._request_with_retry("GET", self.table_url(table), params=params)
        try:
            rows = response.json()
        except ValueError as e:
            raise SupabaseClientError(f"Invalid JSON from {table}: {e}") from e
        if not isinstance(rows, list):
            raise SupabaseClientError(f"Unexpected payload from {table}: {type(rows).__name__}")
        return rows

    async def fetch_reports(
        self,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Fetch one page of the reports table.

        Args:
            limit: Maximum number of rows to fetch
            offset: Pagination offset

        Returns:
            List of report rows, oldest first
        """
        params: dict[str, Any] = {
            "select": "*",
            "order": "created_at.asc,id.asc",
            "limit": limit,
            "offset": offset,
        }

        logger.info(f"Fetching reports: limit={limit}, offset={offset}")
        rows = await self._select(settings.reports_table, params)
        logger.info(f"Fetched {len(rows)} report rows")

        return rows

    async def fetch_all_reports(
        self,
        batch_size: int = settings.fetch_batch_size,
        max_records: int = settings.max_records,
    ) -> list[dict[str, Any]]:
        """
        Fetch every report row with pagination.

        Args:
            batch_size: Number of rows per request
            max_records: Safety limit on the total number of rows

        Returns:
            All report rows
        """
        all_rows: list[dict[str, Any]] = []
        offset = 0

        while True:
            batch = await self.fetch_reports(limit=batch_size, offset=offset)

            if not batch:
                break

            all_rows.extend(batch)
            # The server may cap a page below batch_size, so only an empty page ends the scan
            offset += len(batch)

            # Safety limit to prevent runaway requests
            if offset >= max_records:
                logger.warning(f"Reached safety limit of {max_records} report rows")
                break

        return all_rows

    async def fetch_recent_reports(self, limit: int = settings.recent_reports_limit) -> list[dict[str, Any]]:
        """Fetch the newest reports, most recent first."""
        params: dict[str, Any] = {
            "select": "*",
            "order": "created_at.desc",
            "limit": limit,
        }
        return await self._select(settings.reports_table, params)

    async def count_rows(self, table: str) -> int:
        """
        Count the rows of a table without transferring them.

        PostgREST reports the total after the slash of the Content-Range
        header, e.g. `0-0/42` or `*/0`.
        """
        response = await self._request_with_retry(
            "HEAD",
            self.table_url(table),
            params={"select": "*"},
            headers={"Prefer": "count=exact"},
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        if not total or total == "*":
            logger.warning(f"No exact count for {table} (Content-Range: {content_range!r})")
            return 0
        try:
            return int(total)
        except ValueError:
            logger.warning(f"Unparseable Content-Range for {table}: {content_range!r}")
            return 0

    async def check_connection(self, table: str = settings.reports_table) -> bool:
        """Check that the backend answers a one-row select."""
        try:
            await self._select(table, {"select": "*", "limit": 1})
        except SupabaseClientError as e:
            logger.error(f"Supabase connection check failed: {e}")
            return False
        return True
