from __future__ import annotations

from typing import Optional, Sequence

from spellsynergy.application.services.interaction_rules import (
    CombinationProfile,
    InteractionRuleBook,
    default_interaction_rule_book,
)
from spellsynergy.application.services.interaction_tables import DEFAULT_TABLES, InteractionTables
from spellsynergy.application.services.weight_model import WeightModel
from spellsynergy.domain.errors import InsufficientSpellCombination, OversizedSpellCombination
from spellsynergy.domain.models.character import Character
from spellsynergy.domain.models.environment import EnvironmentalContext
from spellsynergy.domain.models.prediction import Prediction
from spellsynergy.domain.models.spell import Spell


MIN_COMBINATION_SIZE = 2
MAX_COMBINATION_SIZE = 4

COHESIVE_SCHOOL_LIMIT = 2
SCHOOL_DIVERSITY_PENALTY = 0.8
LEVEL_SPREAD_TOLERANCE = 2
LEVEL_SPREAD_STEP_PENALTY = 0.1
SCHOOL_FACTOR_WEIGHT = 0.6
LEVEL_FACTOR_WEIGHT = 0.4
MENTAL_SCORE_DIVISOR = 40.0
CONFIDENCE_SCALE = 10.0


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def validate_combination(spells: Sequence[Spell]) -> None:
    if len(spells) < MIN_COMBINATION_SIZE:
        raise InsufficientSpellCombination(len(spells), minimum=MIN_COMBINATION_SIZE)
    if len(spells) > MAX_COMBINATION_SIZE:
        raise OversizedSpellCombination(len(spells), maximum=MAX_COMBINATION_SIZE)


def school_compatibility(profile: CombinationProfile) -> float:
    return 1.0 if profile.unique_school_count <= COHESIVE_SCHOOL_LIMIT else SCHOOL_DIVERSITY_PENALTY


def level_spread_score(profile: CombinationProfile) -> float:
    spread = profile.level_spread
    if spread <= LEVEL_SPREAD_TOLERANCE:
        return 1.0
    return clamp_unit(1.0 - spread * LEVEL_SPREAD_STEP_PENALTY)


def base_compatibility(profile: CombinationProfile) -> float:
    return school_compatibility(profile) * SCHOOL_FACTOR_WEIGHT + level_spread_score(profile) * LEVEL_FACTOR_WEIGHT


class InteractionPredictor:
    def __init__(
        self,
        weight_model: Optional[WeightModel] = None,
        tables: Optional[InteractionTables] = None,
        rule_book: Optional[InteractionRuleBook] = None,
    ) -> None:
        self.tables = tables or (weight_model.tables if weight_model is not None else DEFAULT_TABLES)
        self.weight_model = weight_model or WeightModel(self.tables)
        self.rule_book = rule_book or default_interaction_rule_book()

    def contextual_modifier(self, character: Character, context: EnvironmentalContext) -> float:
        mental_factor = character.mental_score / MENTAL_SCORE_DIVISOR
        return mental_factor * self.tables.environment_weight(context.terrain)

    def predict(
        self,
        spells: Sequence[Spell],
        character: Character,
        context: EnvironmentalContext,
    ) -> Prediction:
        combination = list(spells)
        validate_combination(combination)

        profile = CombinationProfile.from_spells(combination)
        base = base_compatibility(profile)
        modifier = self.contextual_modifier(character, context)

        return Prediction(
            spell_combination=tuple(spell.name for spell in combination),
            predicted_compatibility=clamp_unit(base * modifier),
            potential_synergy_effects=self.rule_book.synergy_effects(profile),
            risk_factors=self.rule_book.risk_factors(profile),
            confidence_score=clamp_unit(min(base * modifier * CONFIDENCE_SCALE, 1.0)),
            model_weights=self.weight_model.weights,
        )
