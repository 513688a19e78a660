"""Pydantic models for search results, completion output and recommendations."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sahulat.models.program import CandidateProgram
from sahulat.models.profile import UserProfile


class SearchResult(BaseModel):
    """One web search hit. Identity is the ``link``."""

    title: str = ""
    link: str
    snippet: str = ""
    source: str = ""
    date: str | None = None


class WebSearchResponse(BaseModel):
    success: bool = True
    results: list[SearchResult] = Field(default_factory=list)
    error: str | None = None


class LLMRecommendationOutput(BaseModel):
    """Strict schema for the completion backend's recommendation JSON."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    recommended_programs: list[str] = Field(default_factory=list, alias="recommendedPrograms")
    web_results: list[str] = Field(default_factory=list, alias="webResults")
    suggestions: list[str] = Field(default_factory=list)
    confidence: float | None = None

    @field_validator("recommended_programs", "web_results", "suggestions", mode="before")
    @classmethod
    def coerce_string_list(cls, v: object) -> list[str]:
        if v is None:
            return []
        if isinstance(v, (str, int)):
            v = [v]
        if not isinstance(v, list):
            raise ValueError("expected a list")
        return [str(item) for item in v if item is not None]

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float | None) -> float | None:
        if v is None:
            return None
        return min(max(v, 0.0), 1.0)


class RecommendationResult(BaseModel):
    """The orchestrator's sole output."""

    success: bool
    message: str
    recommended_programs: list[CandidateProgram] = Field(default_factory=list)
    web_results: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    error: str | None = None


class ChatResponse(BaseModel):
    """Result of one chat turn: recommendation plus the updated profile."""

    success: bool
    message: str = ""
    profile: UserProfile | None = None
    recommended_programs: list[CandidateProgram] = Field(default_factory=list)
    web_results: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    confidence: float = 0.0
    error: str | None = None
    chat_id: int | None = None
