"""Tests for merging parsed attributes into user profiles."""

from __future__ import annotations

from datetime import datetime, timezone

from sahulat.agents.profile_merger import merge_profile
from sahulat.models.profile import (
    EducationLevel,
    Location,
    ParsedAttributes,
    UserProfile,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2026, 1, 2, tzinfo=timezone.utc)


def _make_profile(**kwargs) -> UserProfile:
    """Helper to create an existing profile."""
    defaults = {
        "id": "user-1",
        "age": 30,
        "education": EducationLevel.MASTER,
        "location": Location(city="Multan", country="Pakistan"),
        "goals": ["scholarship"],
        "created_at": T0,
        "updated_at": T0,
    }
    defaults.update(kwargs)
    return UserProfile(**defaults)


class TestMergeProfile:
    """Test suite for sparse last-write-wins merging."""

    def test_creates_new_profile(self) -> None:
        """Without an existing profile a fresh one is created."""
        parsed = ParsedAttributes(age=25, goals=["loan"], confidence=0.35)
        profile = merge_profile(None, parsed, now=T1)

        assert profile.id
        assert profile.age == 25
        assert profile.goals == ["loan"]
        assert profile.created_at == T1
        assert profile.updated_at == T1

    def test_new_profiles_get_distinct_ids(self) -> None:
        parsed = ParsedAttributes(age=25)
        assert merge_profile(None, parsed).id != merge_profile(None, parsed).id

    def test_present_fields_overwrite(self) -> None:
        profile = merge_profile(_make_profile(), ParsedAttributes(age=31), now=T1)

        assert profile.age == 31
        assert profile.education == EducationLevel.MASTER
        assert profile.location.city == "Multan"

    def test_absent_fields_are_kept(self) -> None:
        """A message that does not mention a field leaves it intact."""
        profile = merge_profile(_make_profile(), ParsedAttributes(), now=T1)

        assert profile.age == 30
        assert profile.goals == ["scholarship"]
        assert profile.updated_at == T1

    def test_identity_and_creation_time_preserved(self) -> None:
        profile = merge_profile(_make_profile(), ParsedAttributes(age=40), now=T1)

        assert profile.id == "user-1"
        assert profile.created_at == T0

    def test_goals_replaced_not_accumulated(self) -> None:
        profile = merge_profile(_make_profile(), ParsedAttributes(goals=["housing"]), now=T1)
        assert profile.goals == ["housing"]

    def test_idempotent(self) -> None:
        """Merging the same attributes twice equals merging once."""
        parsed = ParsedAttributes(
            age=27,
            goals=["loan", "business"],
            languages=["english"],
            location=Location(city="Lahore", country="Pakistan"),
        )
        once = merge_profile(_make_profile(), parsed, now=T1)
        twice = merge_profile(once, parsed, now=T1)

        assert twice == once

    def test_existing_profile_not_mutated(self) -> None:
        existing = _make_profile()
        merge_profile(existing, ParsedAttributes(age=50, goals=["health"]), now=T1)

        assert existing.age == 30
        assert existing.goals == ["scholarship"]
        assert existing.updated_at == T0

    def test_lists_are_copied(self) -> None:
        parsed = ParsedAttributes(goals=["loan"])
        profile = merge_profile(None, parsed, now=T1)
        parsed.goals.append("grant")

        assert profile.goals == ["loan"]
