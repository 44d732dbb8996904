"""Tests for the schedule HTTP client."""

import json

import httpx
import pytest

from src.api_client import ScheduleAPIClient, get_client


def make_client(responses: dict[str, dict], seen: list[httpx.Request]) -> ScheduleAPIClient:
    """Helper creating a client whose transport answers from a path table."""

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path not in responses:
            return httpx.Response(422, json={"error": {"code": "INVALID_INPUT", "message": "bad"}})
        return httpx.Response(200, json=responses[request.url.path])

    return ScheduleAPIClient("http://scheduler.test/", transport=httpx.MockTransport(handler))


class TestScheduleAPIClient:
    """Tests for request shaping and response handling."""

    def test_health_check(self):
        seen: list[httpx.Request] = []
        client = make_client({"/health": {"status": "ok"}}, seen)

        assert client.health_check() == {"status": "ok"}
        assert seen[0].method == "GET"

    def test_schedule_wraps_bare_times(self):
        seen: list[httpx.Request] = []
        client = make_client({"/schedule": {"segments": []}}, seen)

        client.schedule([0, None, {"captured_at": "2024-01-01T00:00:00Z"}], config={"max_slots": 2})

        body = json.loads(seen[0].content)
        assert body["items"] == [
            {"time_ms": 0},
            {"time_ms": None},
            {"captured_at": "2024-01-01T00:00:00Z"},
        ]
        assert body["config"] == {"max_slots": 2}
        assert body["resolve_missing"] is False

    def test_visible_at_sends_probe(self):
        seen: list[httpx.Request] = []
        client = make_client({"/schedule/visible": {"entries": []}}, seen)

        assert client.visible_at([0], probe_ms=500, force=True) == {"entries": []}

        body = json.loads(seen[0].content)
        assert body["probe_ms"] == 500
        assert body["force"] is True
        assert "config" not in body

    def test_error_status_raises(self):
        seen: list[httpx.Request] = []
        client = make_client({}, seen)

        with pytest.raises(httpx.HTTPStatusError):
            client.schedule([0])

    def test_base_url_trailing_slash_stripped(self):
        assert ScheduleAPIClient("http://host:9000/").base_url == "http://host:9000"


class TestGetClient:
    """Tests for the client singleton."""

    def test_same_url_reuses_client(self):
        assert get_client("http://a.test") is get_client("http://a.test/")

    def test_new_url_replaces_client(self):
        first = get_client("http://a.test")
        assert get_client("http://b.test") is not first
