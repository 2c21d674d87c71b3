"""
openFDA device API source.

Pages through the search endpoint of one submission category with
limit/skip offsets until the quota is met, the API runs dry, or a request
fails. Failures are never retried and never raised to the caller.
"""

from typing import Any

import httpx

from fda_importer.config import DEFAULT_API_BASE_URL
from fda_importer.core.models import FetchResult, SubmissionCategory
from fda_importer.observability.logger import get_logger
from fda_importer.observability.metrics import (
    fetch_requests_total,
    increment_counter,
    records_fetched_total,
)


logger = get_logger(__name__)

FETCH_BATCH_SIZE = 100
DEFAULT_TIMEOUT = 30.0


class OpenFDASource:
    """
    Paginating client for the openFDA device endpoints.

    Owns its httpx.Client unless one is injected. Use as a context manager
    or call close() when done.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        batch_size: int = FETCH_BATCH_SIZE,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize source.

        Args:
            base_url: Base URL the category endpoint file is appended to
            batch_size: Records requested per page
            api_key: Optional openFDA API key
            timeout: Per-request timeout in seconds
            client: Pre-configured client (tests inject a MockTransport here)

        Raises:
            ValueError: If batch_size is not positive
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.batch_size = batch_size
        self.api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def endpoint_url(self, category: SubmissionCategory) -> str:
        return self.base_url + category.endpoint

    def fetch(
        self,
        category: SubmissionCategory | str,
        search: str | None = None,
        max_records: int = 100,
    ) -> FetchResult:
        """
        Fetch up to max_records raw records of one category.

        Args:
            category: SubmissionCategory or its name
            search: Opaque openFDA search expression, sent unchanged
            max_records: Maximum number of records to accumulate

        Returns:
            FetchResult with the records accumulated so far. If a request
            failed, error holds its message and records may be partial.
        """
        category = SubmissionCategory.parse(category)
        url = self.endpoint_url(category)
        result = FetchResult(category=category)
        skip = 0

        logger.info(
            f"Starting data fetch from {url}",
            extra={"category": category.value, "max_records": max_records, "search": search},
        )

        while len(result.records) < max_records:
            params: dict[str, Any] = {
                "limit": min(self.batch_size, max_records - len(result.records)),
                "skip": skip,
            }
            if search:
                params["search"] = search
            if self.api_key:
                params["api_key"] = self.api_key

            try:
                response = self._client.get(url, params=params)
                response.raise_for_status()
                records = response.json().get("results") or []
            except (httpx.HTTPError, ValueError, AttributeError) as e:
                increment_counter(fetch_requests_total, category=category.value, status="failure")
                logger.error(
                    f"API request failed: {e}",
                    extra={"category": category.value, "skip": skip},
                )
                result.error = str(e) or type(e).__name__
                break

            increment_counter(fetch_requests_total, category=category.value, status="success")

            if not records:
                logger.info("API returned no more records. Ending fetch.", extra={"category": category.value})
                break

            result.records.extend(records)
            result.pages += 1
            skip += len(records)
            logger.info(
                f"Fetched {len(result.records)} of {max_records} total records...",
                extra={"category": category.value},
            )

        increment_counter(records_fetched_total, len(result.records), category=category.value)
        logger.info(
            f"Total records retrieved for {category.value}: {len(result.records)}",
            extra={"category": category.value, "fetched": len(result.records)},
        )
        return result

    def close(self) -> None:
        """Close the underlying client if this source created it"""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
