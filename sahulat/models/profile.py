"""Pydantic models for applicant attributes and the long-lived user profile."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class EducationLevel(str, Enum):
    NONE = "none"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    HIGH_SCHOOL = "high_school"
    BACHELOR = "bachelor"
    MASTER = "master"
    PHD = "phd"
    VOCATIONAL = "vocational"
    TECHNICAL = "technical"


class IncomeLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Location(BaseModel):
    """Where the applicant lives. Only ``city`` is ever filled by extraction."""

    city: str | None = None
    province: str | None = None
    country: str

    def display(self) -> str:
        parts = [p for p in (self.city, self.province, self.country) if p]
        return ", ".join(parts)


class ParsedAttributes(BaseModel):
    """Attributes extracted from a single message."""

    age: int | None = Field(default=None, ge=1, le=120)
    gender: Gender | None = None
    education: EducationLevel | None = None
    location: Location | None = None
    goals: list[str] = Field(default_factory=list)
    income: IncomeLevel | None = None
    occupation: str | None = Field(default=None, min_length=3)
    family_size: int | None = Field(default=None, ge=1, le=20)
    disabilities: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(BaseModel):
    """Applicant profile accumulated across messages."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    age: int | None = Field(default=None, ge=1, le=120)
    gender: Gender | None = None
    education: EducationLevel | None = None
    location: Location | None = None
    goals: list[str] = Field(default_factory=list)
    income: IncomeLevel | None = None
    occupation: str | None = None
    family_size: int | None = Field(default=None, ge=1, le=20)
    disabilities: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def attribute_items(self) -> list[tuple[str, str]]:
        """Flatten the known attributes into (name, text) pairs for prompts."""
        items: list[tuple[str, str]] = []
        for name in PROFILE_FIELDS:
            value = getattr(self, name)
            if value is None or value == []:
                continue
            if isinstance(value, Location):
                text = value.display()
            elif isinstance(value, Enum):
                text = value.value
            elif isinstance(value, list):
                text = ", ".join(value)
            else:
                text = str(value)
            items.append((name, text))
        return items


# Attribute fields shared by ParsedAttributes and UserProfile, in extraction order
PROFILE_FIELDS: tuple[str, ...] = (
    "age",
    "gender",
    "education",
    "location",
    "goals",
    "income",
    "occupation",
    "family_size",
    "disabilities",
    "languages",
)


class ParsingResult(BaseModel):
    """Outcome of parsing one message."""

    success: bool = False
    data: ParsedAttributes = Field(default_factory=ParsedAttributes)
    errors: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
