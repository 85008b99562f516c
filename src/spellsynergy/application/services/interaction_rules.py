from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Protocol, Sequence

from spellsynergy.domain.models.spell import Spell


@dataclass(frozen=True)
class CombinationProfile:
    interaction_types: FrozenSet[str]
    schools: FrozenSet[str]
    tags: FrozenSet[str]
    levels: tuple[int, ...]

    @classmethod
    def from_spells(cls, spells: Sequence[Spell]) -> "CombinationProfile":
        return cls(
            interaction_types=frozenset(spell.interaction_type_key for spell in spells if spell.interaction_type_key),
            schools=frozenset(spell.school_key for spell in spells),
            tags=frozenset(tag for spell in spells for tag in spell.tags),
            levels=tuple(spell.level for spell in spells),
        )

    @property
    def unique_school_count(self) -> int:
        return len(self.schools)

    @property
    def level_spread(self) -> int:
        if not self.levels:
            return 0
        return max(self.levels) - min(self.levels)


class InteractionRule(Protocol):
    label: str

    def matches(self, profile: CombinationProfile) -> bool:
        ...


def _lowered(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(str(value).strip().lower() for value in values if str(value or "").strip())


@dataclass(frozen=True)
class InteractionTypeRule:
    label: str
    required_types: FrozenSet[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_types", _lowered(self.required_types))

    def matches(self, profile: CombinationProfile) -> bool:
        return bool(self.required_types) and self.required_types <= profile.interaction_types


@dataclass(frozen=True)
class TagRule:
    label: str
    required_tags: FrozenSet[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_tags", _lowered(self.required_tags))

    def matches(self, profile: CombinationProfile) -> bool:
        return bool(self.required_tags) and self.required_tags <= profile.tags


@dataclass(frozen=True)
class SchoolDiversityRule:
    label: str
    min_unique_schools: int

    def matches(self, profile: CombinationProfile) -> bool:
        return profile.unique_school_count >= self.min_unique_schools


@dataclass(frozen=True)
class LevelSpreadRule:
    label: str
    min_spread: int

    def matches(self, profile: CombinationProfile) -> bool:
        return profile.level_spread >= self.min_spread


class InteractionRuleBook:
    def __init__(self) -> None:
        self._synergy_rules: List[InteractionRule] = []
        self._risk_rules: List[InteractionRule] = []

    def register_synergy(self, rule: InteractionRule) -> None:
        self._synergy_rules.append(rule)

    def register_risk(self, rule: InteractionRule) -> None:
        self._risk_rules.append(rule)

    def synergy_effects(self, profile: CombinationProfile) -> tuple[str, ...]:
        return _matching_labels(self._synergy_rules, profile)

    def risk_factors(self, profile: CombinationProfile) -> tuple[str, ...]:
        return _matching_labels(self._risk_rules, profile)


def _matching_labels(rules: Sequence[InteractionRule], profile: CombinationProfile) -> tuple[str, ...]:
    labels: List[str] = []
    for rule in rules:
        if rule.label not in labels and rule.matches(profile):
            labels.append(rule.label)
    return tuple(labels)


def default_interaction_rule_book() -> InteractionRuleBook:
    book = InteractionRuleBook()
    book.register_synergy(InteractionTypeRule("Amplified Damage Output", frozenset({"damage", "buff"})))
    book.register_synergy(InteractionTypeRule("Enhanced Defensive Capabilities", frozenset({"protection", "healing"})))
    # more than two schools
    book.register_risk(SchoolDiversityRule("High Magical Complexity", min_unique_schools=3))
    return book
