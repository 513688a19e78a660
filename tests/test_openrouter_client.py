"""Tests for the OpenRouter HTTP client (no network)."""

from __future__ import annotations

import httpx
import pytest

from sahulat.errors import ConfigurationError, MalformedResponseError, UpstreamTransportError
from sahulat.tools.openrouter_client import call_completion, fetch_available_models

BASE_URL = "https://openrouter.test/api/v1"


def _response(status: int, method: str = "POST", **kwargs) -> httpx.Response:
    """Helper to build a response bound to a request so raise_for_status works."""
    return httpx.Response(status, request=httpx.Request(method, BASE_URL), **kwargs)


class TestCallCompletion:
    """Test suite for the chat-completion call."""

    def test_returns_message_content(self, monkeypatch) -> None:
        calls = []

        def fake_post(url, headers, json, timeout):
            calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
            return _response(200, json={"choices": [{"message": {"content": "hi there"}}]})

        monkeypatch.setattr(httpx, "post", fake_post)
        text = call_completion(
            "model-x",
            [{"role": "user", "content": "hello"}],
            "key-1",
            json_mode=True,
            base_url=BASE_URL,
            referer="https://example.test",
            title="Tester",
        )

        assert text == "hi there"
        assert calls[0]["url"] == f"{BASE_URL}/chat/completions"
        assert calls[0]["headers"]["Authorization"] == "Bearer key-1"
        assert calls[0]["headers"]["X-Title"] == "Tester"
        assert calls[0]["json"]["response_format"] == {"type": "json_object"}
        assert calls[0]["json"]["model"] == "model-x"

    def test_plain_mode_has_no_response_format(self, monkeypatch) -> None:
        captured = {}

        def fake_post(url, headers, json, timeout):
            captured.update(json)
            return _response(200, json={"choices": [{"message": {"content": "ok"}}]})

        monkeypatch.setattr(httpx, "post", fake_post)
        call_completion("m", [], "key", base_url=BASE_URL)

        assert "response_format" not in captured

    def test_missing_key(self) -> None:
        with pytest.raises(ConfigurationError):
            call_completion("m", [], None, base_url=BASE_URL)

    def test_http_error_status(self, monkeypatch) -> None:
        monkeypatch.setattr(httpx, "post", lambda *a, **k: _response(503, text="busy"))
        with pytest.raises(UpstreamTransportError):
            call_completion("m", [], "key", base_url=BASE_URL)

    def test_timeout(self, monkeypatch) -> None:
        def fake_post(*args, **kwargs):
            raise httpx.ReadTimeout("too slow")

        monkeypatch.setattr(httpx, "post", fake_post)
        with pytest.raises(UpstreamTransportError):
            call_completion("m", [], "key", base_url=BASE_URL)

    def test_connection_refused(self, monkeypatch) -> None:
        def fake_post(*args, **kwargs):
            raise httpx.ConnectError("refused")

        monkeypatch.setattr(httpx, "post", fake_post)
        with pytest.raises(UpstreamTransportError):
            call_completion("m", [], "key", base_url=BASE_URL)

    def test_missing_choices(self, monkeypatch) -> None:
        monkeypatch.setattr(httpx, "post", lambda *a, **k: _response(200, json={"choices": []}))
        with pytest.raises(MalformedResponseError):
            call_completion("m", [], "key", base_url=BASE_URL)

    def test_non_json_body(self, monkeypatch) -> None:
        monkeypatch.setattr(httpx, "post", lambda *a, **k: _response(200, text="<html>"))
        with pytest.raises(MalformedResponseError):
            call_completion("m", [], "key", base_url=BASE_URL)


class TestFetchAvailableModels:
    def test_returns_ids(self, monkeypatch) -> None:
        body = {"data": [{"id": "a/model"}, {"id": "b/model"}, {"name": "no id"}]}
        monkeypatch.setattr(httpx, "get", lambda *a, **k: _response(200, "GET", json=body))

        assert fetch_available_models("key", base_url=BASE_URL) == {"a/model", "b/model"}

    def test_http_error(self, monkeypatch) -> None:
        monkeypatch.setattr(httpx, "get", lambda *a, **k: _response(500, "GET"))
        with pytest.raises(UpstreamTransportError):
            fetch_available_models("key", base_url=BASE_URL)
