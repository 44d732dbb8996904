"""HTTP client for the image schedule API."""

from typing import Any, Optional

import httpx


class ScheduleAPIClient:
    """Client for the image schedule service.

    Items may be numbers (ms since epoch), None, or dicts with the request
    item fields (time_ms, captured_at, fallback_ms).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _payload(
        items: list[Any],
        config: dict | None,
        resolve_missing: bool,
    ) -> dict:
        payload: dict[str, Any] = {
            "items": [item if isinstance(item, dict) else {"time_ms": item} for item in items],
            "resolve_missing": resolve_missing,
        }
        if config:
            payload["config"] = config
        return payload

    def health_check(self) -> dict:
        """Check if the API is healthy."""
        with self._client() as client:
            response = client.get("/health")
            response.raise_for_status()
            return response.json()

    def schedule(
        self,
        items: list[Any],
        config: dict | None = None,
        resolve_missing: bool = False,
    ) -> dict:
        """Request a full schedule.

        Args:
            items: Photos in caller order.
            config: Optional scheduling parameter overrides.
            resolve_missing: Synthesize instants for items without one.

        Returns:
            Dictionary with metadata, segments, bounds and effective config.

        Raises:
            httpx.HTTPStatusError: If the service rejects the request.
        """
        with self._client() as client:
            response = client.post("/schedule", json=self._payload(items, config, resolve_missing))
            response.raise_for_status()
            return response.json()

    def visible_at(
        self,
        items: list[Any],
        probe_ms: float,
        config: dict | None = None,
        resolve_missing: bool = False,
        force: bool = False,
    ) -> dict:
        """Ask which items are on screen at probe_ms."""
        payload = self._payload(items, config, resolve_missing)
        payload["probe_ms"] = probe_ms
        payload["force"] = force
        with self._client() as client:
            response = client.post("/schedule/visible", json=payload)
            response.raise_for_status()
            return response.json()


# Default client instance
_client: Optional[ScheduleAPIClient] = None


def get_client(base_url: str = "http://localhost:8000") -> ScheduleAPIClient:
    """Get or create API client singleton."""
    global _client
    if _client is None or _client.base_url != base_url.rstrip("/"):
        _client = ScheduleAPIClient(base_url)
    return _client
