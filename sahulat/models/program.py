"""Pydantic models for government programs supplied by the program store."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProgramCategory(str, Enum):
    SCHOLARSHIP = "scholarship"
    GRANT = "grant"
    LOAN = "loan"
    SKILL_TRAINING = "skill_training"
    EMPLOYMENT = "employment"
    BUSINESS = "business"
    HOUSING = "housing"
    HEALTH = "health"
    DISABILITY = "disability"
    WOMEN_EMPOWERMENT = "women_empowerment"
    YOUTH = "youth"
    AGRICULTURE = "agriculture"
    TECHNOLOGY = "technology"


class EligibilityCriteria(BaseModel):
    age_min: int | None = None
    age_max: int | None = None
    education_level: list[str] = Field(default_factory=list)
    income_level: list[str] = Field(default_factory=list)
    location: list[str] = Field(default_factory=list)
    gender: Literal["male", "female", "all"] | None = None
    disability_friendly: bool | None = None
    family_size_max: int | None = None
    occupation: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)


class FundingAmount(BaseModel):
    min: float
    max: float
    currency: str = "PKR"

    def display(self) -> str:
        return f"{self.min:,.0f}–{self.max:,.0f} {self.currency}"


class CandidateProgram(BaseModel):
    """A government assistance program. Read-only input to ranking."""

    id: str
    title: str
    category: ProgramCategory
    description: str = ""
    eligibility_criteria: EligibilityCriteria = Field(default_factory=EligibilityCriteria)
    benefits: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    funding_amount: FundingAmount | None = None
    application_deadline: str | None = None
    application_url: str | None = None
    is_active: bool = True

    model_config = ConfigDict(frozen=True)


class ProgramSearchFilters(BaseModel):
    """Filters accepted by the program store's search query."""

    category: list[ProgramCategory] = Field(default_factory=list)
    age: int | None = None
    education: list[str] = Field(default_factory=list)
    location: list[str] = Field(default_factory=list)
    income_level: list[str] = Field(default_factory=list)
    gender: Literal["male", "female", "all"] | None = None
    disability_friendly: bool = False
    keywords: list[str] = Field(default_factory=list)


class ProgramSearchResult(BaseModel):
    programs: list[CandidateProgram] = Field(default_factory=list)
    total_count: int = 0
    filters_applied: ProgramSearchFilters = Field(default_factory=ProgramSearchFilters)
