from __future__ import annotations

import json
from pathlib import Path

from ats_engine.schemas.scoring import SkillCategory

from .provider import TaxonomyProvider

_CATEGORIES: frozenset[str] = frozenset({"hard", "soft", "tool"})


class LocalTaxonomy(TaxonomyProvider):
    def __init__(self, skills_path: str | Path | None = None) -> None:
        path = Path(skills_path) if skills_path else Path(__file__).with_name("skills.json")
        self._labels: dict[str, str] = {}
        self._categories: dict[str, SkillCategory] = {}
        self._aliases: dict[str, str] = {}
        self._load(path)

    def _load(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        for key, entry in raw.items():
            skill_id = str(key).strip().lower()
            category = str(entry.get("category", "")).strip().lower()
            if category not in _CATEGORIES:
                raise ValueError(f"Unknown skill category '{category}' for '{skill_id}' in {path}")
            self._labels[skill_id] = str(entry.get("label") or skill_id)
            self._categories[skill_id] = category  # type: ignore[assignment]
            self._aliases[skill_id] = skill_id
            for alias in entry.get("aliases", []):
                self._aliases[str(alias).strip().lower()] = skill_id

    def normalize_skill(self, raw: str) -> tuple[str, str | None]:
        normalized = " ".join(raw.strip().lower().split())
        return normalized, self._aliases.get(normalized)

    def category(self, skill_id: str) -> SkillCategory | None:
        return self._categories.get(skill_id)

    def label(self, skill_id: str) -> str:
        return self._labels.get(skill_id, skill_id)
