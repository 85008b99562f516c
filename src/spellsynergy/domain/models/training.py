from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class InteractionOutcome:
    effectiveness: float
    synergy_score: float
    unexpected_effects: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "effectiveness", float(self.effectiveness))
        object.__setattr__(self, "synergy_score", float(self.synergy_score))
        object.__setattr__(self, "unexpected_effects", tuple(str(item) for item in self.unexpected_effects))


@dataclass(frozen=True)
class ContextualFactors:
    character_class: str
    environment_type: str
    combat_difficulty: float = 0.5


@dataclass(frozen=True)
class TrainingExample:
    spell_combination: tuple[str, ...]
    outcome: InteractionOutcome
    factors: ContextualFactors

    def __post_init__(self) -> None:
        object.__setattr__(self, "spell_combination", tuple(str(name) for name in self.spell_combination))

    @property
    def combination_signature(self) -> tuple[str, ...]:
        """Order-independent identity of the spell combination."""
        return tuple(sorted(self.spell_combination))


@dataclass(frozen=True)
class ModelWeights:
    synergy_score_weight: float
    unexpected_effects_penalty_weight: float
    character_class_weight: float
    environment_type_weight: float
