from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


DEFAULT_CATEGORY_WEIGHT = 1.0
DEFAULT_DIFFICULTY_SCALAR = 0.5

FULL_CASTER_CLASS_WEIGHTS = {
    "wizard": 1.2,
    "sorcerer": 1.1,
    "cleric": 1.0,
    "bard": 1.0,
    "druid": 0.9,
    "warlock": 0.8,
}
HALF_CASTER_CLASSES = {
    "paladin",
    "ranger",
    "artificer",
}
MARTIAL_CLASSES = {
    "barbarian",
    "fighter",
    "monk",
    "rogue",
}
HALF_CASTER_WEIGHT = 0.85
MARTIAL_WEIGHT = 0.7

ENVIRONMENT_WEIGHTS = {
    "dungeon": 1.2,
    "wilderness": 1.1,
    "urban": 1.0,
    "planar": 0.9,
    "underwater": 0.8,
}

COMBAT_DIFFICULTY_SCALARS = {
    "easy": 0.25,
    "moderate": 0.5,
    "challenging": 0.75,
    "extreme": 1.0,
}


def _default_class_weights() -> dict[str, float]:
    weights = dict(FULL_CASTER_CLASS_WEIGHTS)
    weights.update({slug: HALF_CASTER_WEIGHT for slug in HALF_CASTER_CLASSES})
    weights.update({slug: MARTIAL_WEIGHT for slug in MARTIAL_CLASSES})
    return weights


def _normalize_table(table: Mapping[str, float]) -> Mapping[str, float]:
    return MappingProxyType({str(key).strip().lower(): float(value) for key, value in table.items()})


def _slug(value: str | None) -> str:
    return str(value or "").strip().lower()


@dataclass(frozen=True)
class InteractionTables:
    """Category weights shared by the weight model and the predictor.

    Unknown categories fall back to ``default_weight`` instead of failing.
    """

    class_weights: Mapping[str, float] = field(default_factory=_default_class_weights)
    environment_weights: Mapping[str, float] = field(default_factory=lambda: dict(ENVIRONMENT_WEIGHTS))
    difficulty_scalars: Mapping[str, float] = field(default_factory=lambda: dict(COMBAT_DIFFICULTY_SCALARS))
    default_weight: float = DEFAULT_CATEGORY_WEIGHT
    default_difficulty: float = DEFAULT_DIFFICULTY_SCALAR

    def __post_init__(self) -> None:
        object.__setattr__(self, "class_weights", _normalize_table(self.class_weights))
        object.__setattr__(self, "environment_weights", _normalize_table(self.environment_weights))
        object.__setattr__(self, "difficulty_scalars", _normalize_table(self.difficulty_scalars))

    def class_weight(self, class_name: str | None) -> float:
        return float(self.class_weights.get(_slug(class_name), self.default_weight))

    def environment_weight(self, environment: str | None) -> float:
        return float(self.environment_weights.get(_slug(environment), self.default_weight))

    def difficulty_scalar(self, difficulty: str | float | None) -> float:
        if isinstance(difficulty, (int, float)) and not isinstance(difficulty, bool):
            return max(0.0, min(1.0, float(difficulty)))
        return float(self.difficulty_scalars.get(_slug(difficulty), self.default_difficulty))


DEFAULT_TABLES = InteractionTables()
