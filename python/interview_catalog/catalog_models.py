"""Question catalog models: prompt pools, scoring keywords and time limits."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator


DIFFICULTY_LEVELS: tuple[str, ...] = ("easy", "medium", "hard")


class QuestionCatalog(BaseModel):
    """Canonical question catalog for one interview track."""

    catalog_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    pools: dict[str, tuple[str, ...]]
    keywords: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    time_limits: dict[str, int]

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, value: dict[str, tuple[str, ...]]) -> dict[str, tuple[str, ...]]:
        normalized: dict[str, tuple[str, ...]] = {}
        for difficulty, words in value.items():
            seen: list[str] = []
            for word in words:
                lowered = word.strip().lower()
                if lowered and lowered not in seen:
                    seen.append(lowered)
            normalized[difficulty] = tuple(seen)
        return normalized

    @model_validator(mode="after")
    def validate_difficulties(self) -> "QuestionCatalog":
        for section, mapping in (
            ("pools", self.pools),
            ("keywords", self.keywords),
            ("time_limits", self.time_limits),
        ):
            unknown = sorted(set(mapping) - set(DIFFICULTY_LEVELS))
            if unknown:
                raise ValueError(f"{section} has unknown difficulties: {', '.join(unknown)}")

        for difficulty in DIFFICULTY_LEVELS:
            prompts = [p for p in self.pools.get(difficulty, ()) if p.strip()]
            if not prompts:
                raise ValueError(f"pools.{difficulty} must contain at least one prompt")
            limit = self.time_limits.get(difficulty)
            if limit is None or limit <= 0:
                raise ValueError(f"time_limits.{difficulty} must be a positive integer")
        return self

    model_config = {"extra": "forbid"}

    def pool(self, difficulty: str) -> tuple[str, ...]:
        return tuple(p for p in self.pools[difficulty] if p.strip())

    def keywords_for(self, difficulty: str) -> tuple[str, ...]:
        return self.keywords.get(difficulty, ())

    def time_limit(self, difficulty: str) -> int:
        return self.time_limits[difficulty]
