"""Merge freshly parsed attributes into a user profile."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sahulat.models.profile import PROFILE_FIELDS, ParsedAttributes, UserProfile

logger = logging.getLogger(__name__)


def merge_profile(
    existing: UserProfile | None,
    parsed: ParsedAttributes,
    now: datetime | None = None,
) -> UserProfile:
    """Overlay the attributes present in ``parsed`` onto ``existing``.

    Sparse, last-write-wins overlay: a field overwrites the profile only when
    the extractor produced a value for it (non-None scalar, non-empty list).
    Fields absent from this message keep their previous value. A new profile
    with a fresh id is created when ``existing`` is None. The input profile is
    not modified; a new instance is returned.
    """
    now = now or datetime.now(timezone.utc)
    updates = overlay_fields(parsed)

    if existing is None:
        profile = UserProfile(created_at=now, updated_at=now, **updates)
        logger.info("Created profile %s with %d fields", profile.id, len(updates))
        return profile

    updates["updated_at"] = now
    profile = existing.model_copy(update=updates, deep=True)
    logger.info(
        "Merged %d fields into profile %s: %s",
        len(updates) - 1, profile.id, ", ".join(k for k in updates if k != "updated_at"),
    )
    return profile


def overlay_fields(parsed: ParsedAttributes) -> dict:
    """Fields of ``parsed`` that carry a value, copied for the profile."""
    updates: dict = {}
    for name in PROFILE_FIELDS:
        value = getattr(parsed, name)
        if value is None or value == []:
            continue
        if isinstance(value, list):
            value = list(value)
        elif hasattr(value, "model_copy"):
            value = value.model_copy()
        updates[name] = value
    return updates
