"""
Shared HTTP plumbing for the JSON APIs the ledger pulls hours from.

Transient network failures are retried with exponential backoff; HTTP error
statuses and undecodable bodies raise ApiClientError straight away.
"""

import logging
from typing import Any

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from iou_ledger.utils.exceptions import ApiClientError

logger = logging.getLogger(__name__)


class JsonApiClient:
    """Minimal JSON-over-HTTP client shared by the Baserow and Beeminder clients."""

    service_name = "API"

    def __init__(self, timeout_seconds: float, session: requests.Session | None = None) -> None:
        """
        Initialize the client.

        Args:
            timeout_seconds: Per-request timeout.
            session: Optional requests session (a new one is created if omitted).
        """
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return {}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True,
    )
    def _request(self, url: str, params: dict[str, Any] | None) -> requests.Response:
        return self.session.get(
            url, params=params, headers=self._headers(), timeout=self.timeout_seconds
        )

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Request URL.
            params: Optional query parameters.

        Returns:
            Decoded JSON body.

        Raises:
            ApiClientError: If the request fails, returns an error status or invalid JSON.
        """
        try:
            response = self._request(url, params)
        except requests.RequestException as e:
            raise ApiClientError(f"{self.service_name} request failed: {e}") from e

        if not response.ok:
            logger.error(
                f"{self.service_name} API error: status={response.status_code} "
                f"reason={response.reason} body={response.text[:500]}"
            )
            raise ApiClientError(
                f"Failed to fetch {self.service_name} data: "
                f"{response.status_code} {response.reason}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise ApiClientError(f"Failed to parse {self.service_name} response: {e}") from e
