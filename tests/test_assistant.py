"""Tests for free-form assistant replies and LLM profile enhancement."""

from __future__ import annotations

import json

import pytest

from sahulat.agents import assistant
from sahulat.agents.assistant import (
    FAILURE_REPLY,
    NOT_CONFIGURED_REPLY,
    enhance_user_profile,
    generate_simple_response,
)
from sahulat.config import Settings
from sahulat.errors import UpstreamTransportError
from sahulat.models.profile import EducationLevel, UserProfile


@pytest.fixture
def settings() -> Settings:
    return Settings(openrouter_api_key="test-key")


def _reply_with(monkeypatch, reply) -> list:
    """Helper to stub the completion call; returns the captured kwargs."""
    calls = []

    def fake_completion(model, messages, api_key, **kwargs):
        calls.append(kwargs)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(assistant, "resolve_model", lambda *args, **kwargs: "model-x")
    monkeypatch.setattr(assistant, "call_completion", fake_completion)
    return calls


class TestSimpleResponse:
    def test_reply_trimmed(self, settings, monkeypatch) -> None:
        calls = _reply_with(monkeypatch, "  Hello!  ")

        assert generate_simple_response("hi", settings) == "Hello!"
        assert calls[0]["max_tokens"] == 200
        assert calls[0]["temperature"] == 0.7

    def test_not_configured(self) -> None:
        assert generate_simple_response("hi", Settings()) == NOT_CONFIGURED_REPLY

    def test_backend_failure(self, settings, monkeypatch) -> None:
        _reply_with(monkeypatch, UpstreamTransportError("down"))
        assert generate_simple_response("hi", settings) == FAILURE_REPLY


class TestEnhanceUserProfile:
    """Test suite for completion-backed profile enhancement."""

    def test_updates_applied(self, settings, monkeypatch) -> None:
        _reply_with(monkeypatch, json.dumps({
            "updatedProfile": {"age": 25, "education": "bachelor", "id": "hijack"},
            "suggestions": ["Ask for income level"],
        }))
        profile = UserProfile(id="u-1")
        enhanced, suggestions = enhance_user_profile("I'm 25 with a BA", profile, settings)

        assert enhanced.id == "u-1"
        assert enhanced.age == 25
        assert enhanced.education == EducationLevel.BACHELOR
        assert suggestions == ["Ask for income level"]
        assert profile.age is None

    def test_invalid_update_falls_back(self, settings, monkeypatch) -> None:
        _reply_with(monkeypatch, json.dumps({"updatedProfile": {"age": 500}}))
        profile = UserProfile(goals=["loan"])
        enhanced, suggestions = enhance_user_profile("hi", profile, settings)

        assert enhanced is profile
        assert suggestions == [
            "Please tell us your age",
            "What is your education level?",
            "Where are you located?",
        ]

    def test_backend_failure_falls_back(self, settings, monkeypatch) -> None:
        _reply_with(monkeypatch, UpstreamTransportError("down"))
        profile = UserProfile()
        enhanced, suggestions = enhance_user_profile("hi", profile, settings)

        assert enhanced is profile
        assert len(suggestions) == 4

    def test_not_configured(self) -> None:
        profile = UserProfile()
        assert enhance_user_profile("hi", profile, Settings()) == (profile, [])
