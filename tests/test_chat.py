"""Tests for a full chat turn: parse, merge, recommend, record."""

from __future__ import annotations

import json

import pytest

from sahulat import graph
from sahulat.agents import assistant, chat
from sahulat.agents.chat import handle_chat
from sahulat.config import Settings
from sahulat.models.profile import EducationLevel, UserProfile
from sahulat.models.program import CandidateProgram, ProgramCategory
from sahulat.models.recommendation import RecommendationResult, WebSearchResponse
from sahulat.storage.database import ChatLogRepository

SCENARIO_TEXT = (
    "I am 25 years old, have a bachelor degree, live in Lahore, looking for scholarship"
)


def _corpus() -> list[CandidateProgram]:
    return [
        CandidateProgram(id="p1", title="Ehsaas Scholarship", category=ProgramCategory.SCHOLARSHIP),
        CandidateProgram(id="p2", title="Laptop Scheme", category=ProgramCategory.TECHNOLOGY),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(openrouter_api_key="test-key")


@pytest.fixture
def backend(monkeypatch):
    monkeypatch.setattr(graph, "resolve_model", lambda *args, **kwargs: "model-x")
    monkeypatch.setattr(graph, "search_specific_programs", lambda *a, **k: WebSearchResponse())
    monkeypatch.setattr(
        graph,
        "call_completion",
        lambda *a, **k: json.dumps({"message": "Apply to Ehsaas", "recommendedPrograms": ["p1"]}),
    )


class TestHandleChat:
    """Test suite for handle_chat."""

    def test_empty_message_rejected(self, settings) -> None:
        response = handle_chat("   ", None, _corpus(), settings=settings)

        assert response.success is False
        assert response.error == "Message is required"

    def test_creates_profile_and_recommends(self, settings, backend) -> None:
        response = handle_chat(SCENARIO_TEXT, None, _corpus(), settings=settings)

        assert response.success is True
        assert response.message == "Apply to Ehsaas"
        assert [p.id for p in response.recommended_programs] == ["p1"]
        assert response.profile is not None
        assert response.profile.age == 25
        assert response.profile.education == EducationLevel.BACHELOR
        assert response.profile.goals == ["scholarship"]

    def test_existing_profile_updated(self, settings, backend) -> None:
        existing = UserProfile(id="u-7", age=40, goals=["housing"])
        response = handle_chat("I am looking for a loan", existing, _corpus(), settings=settings)

        assert response.profile.id == "u-7"
        assert response.profile.age == 40
        assert response.profile.goals == ["loan"]

    def test_recommender_sees_merged_profile(self, settings, monkeypatch) -> None:
        seen = {}

        def fake_recommend(message, profile, corpus, settings=None, tier=None):
            seen["profile"] = profile
            seen["tier"] = tier
            return RecommendationResult(success=True, message="ok")

        monkeypatch.setattr(chat, "recommend", fake_recommend)
        existing = UserProfile(education=EducationLevel.MASTER)
        handle_chat("I am 33 years old", existing, _corpus(), settings=settings, tier="smart")

        assert seen["profile"].age == 33
        assert seen["profile"].education == EducationLevel.MASTER
        assert seen["tier"] == "smart"

    def test_parser_suggestions_used_when_recommender_has_none(self, settings, backend) -> None:
        response = handle_chat("hello", None, _corpus(), settings=settings)

        assert response.suggestions[0] == "Please provide your age"

    def test_exchange_recorded(self, settings, backend) -> None:
        chat_log = ChatLogRepository(":memory:")
        response = handle_chat(
            SCENARIO_TEXT, None, _corpus(), settings=settings, chat_log=chat_log, user_id="u-1"
        )
        chats = chat_log.get_recent_chats("u-1")

        assert response.chat_id == chats[0]["chat_id"]
        assert chats[0]["recommended_programs"] == ["p1"]
        chat_log.close()

    def test_failed_turn_not_recorded(self, backend) -> None:
        chat_log = ChatLogRepository(":memory:")
        response = handle_chat("hello", None, _corpus(), settings=Settings(), chat_log=chat_log)

        assert response.success is False
        assert response.chat_id is None
        assert chat_log.get_recent_chats("anonymous") == []
        chat_log.close()

    def test_chat_log_failure_is_not_fatal(self, settings, backend) -> None:
        class BrokenLog:
            def log_chat(self, **kwargs):
                raise RuntimeError("disk full")

        response = handle_chat(SCENARIO_TEXT, None, _corpus(), settings=settings, chat_log=BrokenLog())

        assert response.success is True
        assert response.chat_id is None


class TestProfileEnhancement:
    """Test suite for the opt-in completion-backed profile step."""

    def _stub_assistant(self, monkeypatch, reply: str) -> list:
        calls = []

        def fake_completion(model, messages, api_key, **kwargs):
            calls.append(messages)
            return reply

        monkeypatch.setattr(assistant, "resolve_model", lambda *args, **kwargs: "model-x")
        monkeypatch.setattr(assistant, "call_completion", fake_completion)
        return calls

    def test_enhanced_profile_reaches_recommender(self, settings, monkeypatch) -> None:
        self._stub_assistant(monkeypatch, json.dumps({
            "updatedProfile": {"occupation": "tailor"},
            "suggestions": ["Ask for income level"],
        }))
        seen = {}

        def fake_recommend(message, profile, corpus, settings=None, tier=None):
            seen["profile"] = profile
            return RecommendationResult(success=True, message="ok")

        monkeypatch.setattr(chat, "recommend", fake_recommend)
        response = handle_chat(
            "I am 30 years old", None, _corpus(), settings=settings, enhance_profile=True
        )

        assert seen["profile"].age == 30
        assert seen["profile"].occupation == "tailor"
        assert response.profile.occupation == "tailor"
        assert response.suggestions == ["Ask for income level"]

    def test_enhancement_off_by_default(self, settings, backend, monkeypatch) -> None:
        calls = self._stub_assistant(monkeypatch, "{}")
        handle_chat(SCENARIO_TEXT, None, _corpus(), settings=settings)

        assert calls == []


class TestCommandLine:
    def test_simple_mode_prints_short_answer(self, tmp_path, monkeypatch, capsys) -> None:
        import main

        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        monkeypatch.setattr("sys.argv", ["main.py", "What is Ehsaas?", "--simple"])
        main.main()

        assert capsys.readouterr().out.strip() == assistant.NOT_CONFIGURED_REPLY
