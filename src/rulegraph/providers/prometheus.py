"""
Prometheus rules provider.

Fetches the rule-group snapshot from a Prometheus (or compatible) server's
``/api/v1/rules`` endpoint.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from rulegraph import __version__
from rulegraph.core.errors import MalformedSnapshotError, SourceUnavailableError
from rulegraph.rules.models import RulesSnapshot

logger = structlog.get_logger()

DEFAULT_USER_AGENT = f"rulegraph/{__version__}"
RULES_PATH = "/api/v1/rules"
RULE_TYPES = ("record", "alert")


class RetryableHTTPError(Exception):
    """Transient HTTP failure that should be retried."""


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


class PrometheusRulesProvider:
    """Reads recording and alerting rules from the Prometheus HTTP API."""

    def __init__(
        self,
        url: str,
        *,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = url.rstrip("/")
        self._auth = (username, password) if username and password else None
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_factor = backoff_factor
        self._user_agent = user_agent

    @property
    def rules_url(self) -> str:
        return f"{self._base_url}{RULES_PATH}"

    async def fetch_rules(self, rule_type: str | None = None) -> RulesSnapshot:
        """
        Fetch the complete rule snapshot.

        Args:
            rule_type: Optional filter, "record" or "alert"

        Returns:
            RulesSnapshot with every group in server order

        Raises:
            SourceUnavailableError: On network/HTTP failure or API error status
            MalformedSnapshotError: If the response is not a rules document
        """
        params: dict[str, Any] = {}
        if rule_type is not None:
            if rule_type not in RULE_TYPES:
                raise ValueError(f"rule_type must be one of {RULE_TYPES}, got {rule_type!r}")
            params["type"] = rule_type

        payload = await self._request(RULES_PATH, params=params or None)
        snapshot = RulesSnapshot.from_api_response(payload)

        logger.info(
            "rules_fetched",
            url=self.rules_url,
            groups=len(snapshot.groups),
            rules=snapshot.rule_count,
        )
        return snapshot

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` with retry on transient failures."""
        url = f"{self._base_url}{path}"

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(RetryableHTTPError),
                stop=stop_after_attempt(self._max_retries),
                wait=wait_exponential(multiplier=self._backoff_factor, max=30),
                reraise=True,
            ):
                with attempt:
                    return await self._get(url, params)
        except RetryableHTTPError as exc:
            raise SourceUnavailableError(
                f"Prometheus unavailable after {self._max_retries} attempts: {exc}",
                details={"url": url},
            ) from exc

        raise SourceUnavailableError("Prometheus request was not attempted", details={"url": url})

    async def _get(self, url: str, params: dict[str, Any] | None) -> Any:
        headers = {"User-Agent": self._user_agent, "Accept": "application/json"}

        try:
            async with httpx.AsyncClient(auth=self._auth, timeout=self._timeout) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("http_network_error", url=url, error=str(exc))
            raise RetryableHTTPError(str(exc) or type(exc).__name__) from exc

        if is_retryable_status(response.status_code):
            logger.warning("http_retryable_error", status=response.status_code, url=url)
            raise RetryableHTTPError(f"HTTP {response.status_code}")

        data = _json_body(response, url)

        # Prometheus reports API errors as JSON with a 4xx status
        if response.is_error or (isinstance(data, dict) and data.get("status") == "error"):
            error = data.get("error") if isinstance(data, dict) else None
            logger.error("http_permanent_error", status=response.status_code, url=url, error=error)
            raise SourceUnavailableError(
                f"Prometheus API error: {error or f'HTTP {response.status_code}'}",
                details={"url": url, "status_code": response.status_code},
            )

        return data


def _json_body(response: httpx.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        if response.is_error:
            raise SourceUnavailableError(
                f"Prometheus returned HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            ) from exc
        raise MalformedSnapshotError(
            "Rules response is not valid JSON", details={"url": url}
        ) from exc
