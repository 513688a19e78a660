"""Tests for confidence scoring and missing-field prompts."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sahulat.agents.confidence import (
    FIELD_WEIGHTS,
    is_usable,
    missing_field_suggestions,
    score_confidence,
    validate_attributes,
)
from sahulat.models.profile import (
    EducationLevel,
    Gender,
    IncomeLevel,
    Location,
    ParsedAttributes,
)

FIELD_VALUES = {
    "age": 30,
    "gender": Gender.FEMALE,
    "education": EducationLevel.MASTER,
    "location": Location(city="Karachi", country="Pakistan"),
    "goals": ["loan"],
    "income": IncomeLevel.LOW,
    "occupation": "tailor",
    "family_size": 4,
}


class TestScoreConfidence:
    """Test suite for the weighted confidence score."""

    def test_empty_attributes(self) -> None:
        assert score_confidence(ParsedAttributes()) == 0.0

    def test_single_field_no_bonus(self) -> None:
        assert score_confidence(ParsedAttributes(age=30)) == pytest.approx(0.15)

    def test_three_fields_get_first_bonus(self) -> None:
        attrs = ParsedAttributes(age=30, gender=Gender.MALE, education=EducationLevel.PRIMARY)
        # 0.15 + 0.10 + 0.15 + 0.10 bonus
        assert score_confidence(attrs) == pytest.approx(0.50)

    def test_five_fields_get_both_bonuses(self) -> None:
        attrs = ParsedAttributes(
            age=30,
            gender=Gender.MALE,
            education=EducationLevel.PRIMARY,
            location=Location(city="Quetta", country="Pakistan"),
            goals=["job"],
        )
        # 0.75 weighted + 0.20 bonus
        assert score_confidence(attrs) == pytest.approx(0.95)

    def test_all_fields_capped_at_one(self) -> None:
        assert score_confidence(ParsedAttributes(**FIELD_VALUES)) == 1.0

    def test_empty_goals_do_not_count(self) -> None:
        assert score_confidence(ParsedAttributes(goals=[])) == 0.0

    def test_unweighted_fields_do_not_count(self) -> None:
        attrs = ParsedAttributes(disabilities=["disability"], languages=["english", "urdu"])
        assert score_confidence(attrs) == 0.0

    def test_monotonic_as_fields_are_added(self) -> None:
        """Adding fields never lowers the score and it stays within [0, 1]."""
        values: dict = {}
        previous = score_confidence(ParsedAttributes())
        for name in FIELD_WEIGHTS:
            values[name] = FIELD_VALUES[name]
            current = score_confidence(ParsedAttributes(**values))
            assert current >= previous
            assert 0.0 <= current <= 1.0
            previous = current


class TestUsability:
    def test_threshold_is_exclusive(self) -> None:
        assert is_usable(0.3) is False
        assert is_usable(0.31) is True


class TestMissingFieldSuggestions:
    """Test suite for localized missing-field prompts."""

    def test_order_is_fixed(self) -> None:
        suggestions = missing_field_suggestions(ParsedAttributes(), "en")
        assert suggestions == [
            "Please provide your age",
            "Please mention your education level",
            "Please provide your location",
            "Please mention your goals (scholarship, job, etc.)",
        ]

    def test_present_fields_are_skipped(self) -> None:
        attrs = ParsedAttributes(age=22, goals=["grant"])
        suggestions = missing_field_suggestions(attrs, "en")
        assert suggestions == [
            "Please mention your education level",
            "Please provide your location",
        ]

    def test_urdu(self) -> None:
        suggestions = missing_field_suggestions(ParsedAttributes(age=22), "ur")
        assert suggestions[0] == "براہ کرم اپنی تعلیمی سطح بتائیں"


class TestValidateAttributes:
    def test_valid_attributes(self) -> None:
        assert validate_attributes(ParsedAttributes(age=40, family_size=5)) == []

    def test_constructed_out_of_bound_values(self) -> None:
        """model_construct skips validation; the checker still flags it."""
        attrs = ParsedAttributes.model_construct(age=150, family_size=30)
        assert validate_attributes(attrs) == [
            "Invalid age detected",
            "Invalid family size detected",
        ]

    def test_model_rejects_out_of_bound_age(self) -> None:
        with pytest.raises(ValidationError):
            ParsedAttributes(age=0)
