"""Read-only program corpus loaded from YAML, with in-memory queries."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from sahulat.models.program import (
    CandidateProgram,
    ProgramCategory,
    ProgramSearchFilters,
    ProgramSearchResult,
)

logger = logging.getLogger(__name__)


def load_programs(filepath: str = "programs.yaml") -> list[CandidateProgram]:
    """Load programs from a YAML file with a top-level ``programs`` list.

    A missing file yields an empty corpus; malformed entries are skipped.
    """
    path = Path(filepath)
    if not path.exists():
        logger.warning("Programs file not found at %s - empty corpus", filepath)
        return []

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    programs = []
    for item in data.get("programs", []):
        try:
            programs.append(CandidateProgram.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping invalid program %r: %s", item.get("id"), e)
    logger.info("Loaded %d programs from %s", len(programs), filepath)
    return programs


class ProgramStore:
    """Queries over a fixed corpus. The store never modifies programs."""

    def __init__(self, programs: list[CandidateProgram]) -> None:
        self._programs = tuple(programs)

    @classmethod
    def from_yaml(cls, filepath: str = "programs.yaml") -> ProgramStore:
        return cls(load_programs(filepath))

    def get_all_programs(self) -> list[CandidateProgram]:
        """All active programs, in stored order."""
        return [p for p in self._programs if p.is_active]

    def get_program_by_id(self, program_id: str) -> CandidateProgram | None:
        for program in self._programs:
            if program.id == program_id:
                return program
        return None

    def get_programs_by_category(self, category: ProgramCategory | str) -> list[CandidateProgram]:
        category = ProgramCategory(category)
        return [p for p in self.get_all_programs() if p.category == category]

    def get_featured_programs(self, limit: int = 5) -> list[CandidateProgram]:
        return self.get_all_programs()[:limit]

    def search_programs(self, filters: ProgramSearchFilters) -> ProgramSearchResult:
        """Active programs passing every filter that is set."""
        matches = [p for p in self.get_all_programs() if _matches(p, filters)]
        return ProgramSearchResult(
            programs=matches, total_count=len(matches), filters_applied=filters
        )


def _overlaps(wanted: list[str], offered: list[str]) -> bool:
    """True when the program sets no restriction or shares a value."""
    if not offered:
        return True
    offered_lower = {o.lower() for o in offered}
    return any(w.lower() in offered_lower for w in wanted)


def _matches(program: CandidateProgram, filters: ProgramSearchFilters) -> bool:
    criteria = program.eligibility_criteria

    if filters.category and program.category not in filters.category:
        return False

    if filters.age is not None:
        if criteria.age_min is not None and filters.age < criteria.age_min:
            return False
        if criteria.age_max is not None and filters.age > criteria.age_max:
            return False

    if filters.education and not _overlaps(filters.education, criteria.education_level):
        return False
    if filters.location and not _overlaps(filters.location, criteria.location):
        return False
    if filters.income_level and not _overlaps(filters.income_level, criteria.income_level):
        return False

    if filters.gender and filters.gender != "all":
        if criteria.gender not in (None, "all", filters.gender):
            return False

    if filters.disability_friendly and not criteria.disability_friendly:
        return False

    if filters.keywords:
        text = f"{program.title} {program.description}".lower()
        if not any(kw.lower() in text for kw in filters.keywords):
            return False

    return True
