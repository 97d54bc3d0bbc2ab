from __future__ import annotations

from typing import Protocol

from ats_engine.schemas.scoring import SkillCategory


class TaxonomyProvider(Protocol):
    def normalize_skill(self, raw: str) -> tuple[str, str | None]:
        """Return normalized text and optional canonical skill ID."""

    def category(self, skill_id: str) -> SkillCategory | None:
        """Return the bucket a canonical skill belongs to."""

    def label(self, skill_id: str) -> str:
        """Return the display name of a canonical skill."""
