from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence

from spellsynergy.application.services.seed_policy import derive_rng
from spellsynergy.domain.errors import InsufficientSpellCombination
from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.models.training import ContextualFactors, InteractionOutcome, TrainingExample


SYNTHESIS_SEED_NAMESPACE = "training.synthesize"

DEFAULT_EXAMPLE_COUNT = 100
DEFAULT_ENVIRONMENT_TYPES = (
    "Urban",
    "Wilderness",
    "Dungeon",
    "Planar",
    "Underwater",
)
DEFAULT_UNEXPECTED_EFFECTS = (
    "Magical Energy Surge",
    "Dimensional Interference",
)


@dataclass(frozen=True)
class SynthesisPolicy:
    min_combination_size: int = 2
    max_combination_size: int = 4
    environment_types: tuple[str, ...] = DEFAULT_ENVIRONMENT_TYPES
    multi_school_synergy_multiplier: float = 1.5
    unexpected_effect_threshold: float = 0.7
    unexpected_effect_catalog: tuple[str, ...] = DEFAULT_UNEXPECTED_EFFECTS
    unexpected_effects_per_event: int = 2

    def __post_init__(self) -> None:
        if self.min_combination_size < 2:
            raise ValueError("min_combination_size must be at least 2")
        if self.max_combination_size < self.min_combination_size:
            raise ValueError("max_combination_size must be >= min_combination_size")
        if not self.environment_types:
            raise ValueError("environment_types must not be empty")


class TrainingExampleSynthesizer:
    """Draws synthetic interaction outcomes from a spell library.

    Every random draw goes through ``rng`` so a seeded ``random.Random`` makes the
    generated dataset reproducible.
    """

    def __init__(self, rng: random.Random | None = None, policy: SynthesisPolicy | None = None) -> None:
        self._rng = rng or random.Random()
        self.policy = policy or SynthesisPolicy()

    @classmethod
    def from_seed(
        cls,
        seed: int | str,
        *,
        context: Mapping[str, Any] | None = None,
        policy: SynthesisPolicy | None = None,
    ) -> "TrainingExampleSynthesizer":
        seed_context = {"seed": seed, **dict(context or {})}
        return cls(rng=derive_rng(SYNTHESIS_SEED_NAMESPACE, seed_context), policy=policy)

    def generate(
        self,
        spell_library: Sequence[Spell],
        character_classes: Sequence[str],
        count: int = DEFAULT_EXAMPLE_COUNT,
    ) -> List[TrainingExample]:
        library = list(spell_library)
        classes = [str(name) for name in character_classes if str(name or "").strip()]
        if len(library) < self.policy.min_combination_size:
            raise InsufficientSpellCombination(len(library), minimum=self.policy.min_combination_size)
        if not classes:
            raise ValueError("At least one character class is required to synthesize training data")
        if int(count) < 0:
            raise ValueError("count must be non-negative")

        examples: List[TrainingExample] = []
        for _ in range(int(count)):
            combination = self._draw_combination(library)
            examples.append(
                TrainingExample(
                    spell_combination=tuple(spell.name for spell in combination),
                    outcome=self._simulate_outcome(combination),
                    factors=ContextualFactors(
                        character_class=self._rng.choice(classes),
                        environment_type=self._rng.choice(self.policy.environment_types),
                        combat_difficulty=self._rng.random(),
                    ),
                )
            )
        return examples

    def _draw_combination(self, library: List[Spell]) -> List[Spell]:
        upper = min(self.policy.max_combination_size, len(library))
        size = self._rng.randint(self.policy.min_combination_size, upper)
        return self._rng.sample(library, size)

    def _simulate_outcome(self, spells: Sequence[Spell]) -> InteractionOutcome:
        effectiveness = self._rng.random()
        unique_schools = {spell.school_key for spell in spells}
        if len(unique_schools) > 1:
            synergy_score = effectiveness * self.policy.multi_school_synergy_multiplier
        else:
            synergy_score = effectiveness

        unexpected: tuple[str, ...] = ()
        if self._rng.random() > self.policy.unexpected_effect_threshold and self.policy.unexpected_effect_catalog:
            catalog = list(self.policy.unexpected_effect_catalog)
            picks = max(1, min(self.policy.unexpected_effects_per_event, len(catalog)))
            unexpected = tuple(self._rng.sample(catalog, picks))

        return InteractionOutcome(
            effectiveness=effectiveness,
            synergy_score=synergy_score,
            unexpected_effects=unexpected,
        )
