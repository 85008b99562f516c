from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from spellsynergy.application.dtos import CacheStats, DatasetQualityMetrics, PerformanceReport, QualityReport
from spellsynergy.application.services.dataset_quality import DatasetQualityAnalyzer
from spellsynergy.application.services.event_bus import EventBus
from spellsynergy.application.services.interaction_predictor import InteractionPredictor, validate_combination
from spellsynergy.application.services.training_synthesizer import DEFAULT_EXAMPLE_COUNT, TrainingExampleSynthesizer
from spellsynergy.application.services.weight_model import WeightModel
from spellsynergy.domain.errors import SpellLibraryUnavailable
from spellsynergy.domain.events import (
    ModelRetrained,
    PredictionCacheSwept,
    PredictionComputed,
    TrainingOutcomeRecorded,
)
from spellsynergy.domain.models.character import Character
from spellsynergy.domain.models.environment import EnvironmentalContext
from spellsynergy.domain.models.prediction import Prediction
from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.models.training import (
    ContextualFactors,
    InteractionOutcome,
    ModelWeights,
    TrainingExample,
)
from spellsynergy.domain.repositories import SpellLibraryRepository, TrainingExampleRepository
from spellsynergy.infrastructure.prediction_cache import InMemoryPredictionCache


class SpellInteractionService:
    """Entry point for prediction, training and dataset reporting.

    Callers own the instance; nothing here is process-global.
    """

    def __init__(
        self,
        *,
        predictor: InteractionPredictor,
        cache: InMemoryPredictionCache,
        synthesizer: Optional[TrainingExampleSynthesizer] = None,
        analyzer: Optional[DatasetQualityAnalyzer] = None,
        spell_library: Optional[SpellLibraryRepository] = None,
        training_repo: Optional[TrainingExampleRepository] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.predictor = predictor
        self.cache = cache
        self.synthesizer = synthesizer or TrainingExampleSynthesizer()
        self.analyzer = analyzer or DatasetQualityAnalyzer()
        self.spell_library = spell_library
        self.training_repo = training_repo
        self.event_bus = event_bus or EventBus()
        self._logger = logging.getLogger(__name__)

    @property
    def weight_model(self) -> WeightModel:
        return self.predictor.weight_model

    def predict(
        self,
        spells: Sequence[Spell],
        character: Character,
        context: EnvironmentalContext,
    ) -> Prediction:
        combination = list(spells)
        validate_combination(combination)
        key = self.cache.key(combination, character, context)
        prediction, cache_hit = self.cache.get_or_compute(
            key,
            lambda: self.predictor.predict(combination, character, context),
        )
        serialized_key = key.serialize()
        self._logger.debug(
            "Prediction %s",
            "cache hit" if cache_hit else "computed",
            extra={"cache_key": serialized_key, "cache_hit": cache_hit},
        )
        self.event_bus.publish(PredictionComputed(cache_key=serialized_key, prediction=prediction, cache_hit=cache_hit))
        return prediction

    def train(self, examples: Sequence[TrainingExample]) -> ModelWeights:
        weights = self.weight_model.train(examples)
        self.event_bus.publish(ModelRetrained(dataset_size=len(examples), weights=weights))
        return weights

    def evaluate_performance(self) -> PerformanceReport:
        return self.weight_model.evaluate_performance()

    def generate_synthetic_training_data(
        self,
        spell_library: Sequence[Spell],
        character_classes: Sequence[str],
        count: int = DEFAULT_EXAMPLE_COUNT,
    ) -> List[TrainingExample]:
        return self.synthesizer.generate(spell_library, character_classes, count)

    def train_from_library(
        self,
        character_classes: Sequence[str],
        count: int = DEFAULT_EXAMPLE_COUNT,
    ) -> ModelWeights:
        """Train on synthetic examples from the spell library plus any recorded history."""
        if self.spell_library is None:
            raise SpellLibraryUnavailable("No spell library configured")
        library = self.spell_library.list_spells()
        examples = self.generate_synthetic_training_data(library, character_classes, count)
        if self.training_repo is not None:
            examples.extend(self.training_repo.list_all())
        self._logger.info(
            "Training from spell library",
            extra={"library_size": len(library), "example_count": len(examples)},
        )
        return self.train(examples)

    def record_outcome(
        self,
        spells: Sequence[Spell],
        character: Character,
        context: EnvironmentalContext,
        *,
        effectiveness: float,
        synergy_score: float,
        unexpected_effects: Sequence[str] = (),
    ) -> TrainingExample:
        combination = list(spells)
        validate_combination(combination)
        if self.training_repo is None:
            raise RuntimeError("No training example repository configured")

        example = TrainingExample(
            spell_combination=tuple(spell.name for spell in combination),
            outcome=InteractionOutcome(
                effectiveness=effectiveness,
                synergy_score=synergy_score,
                unexpected_effects=tuple(unexpected_effects),
            ),
            factors=ContextualFactors(
                character_class=character.class_name,
                environment_type=context.terrain,
                combat_difficulty=self.predictor.tables.difficulty_scalar(context.combat_difficulty),
            ),
        )
        self.training_repo.add(example)
        self.event_bus.publish(
            TrainingOutcomeRecorded(
                spell_combination=example.spell_combination,
                character_class=example.factors.character_class,
                environment_type=example.factors.environment_type,
                stored_total=self.training_repo.count(),
            )
        )
        return example

    def recorded_examples(
        self,
        *,
        character_class: Optional[str] = None,
        environment_type: Optional[str] = None,
    ) -> List[TrainingExample]:
        if self.training_repo is None:
            return []
        if character_class is None and environment_type is None:
            return self.training_repo.list_all()
        return self.training_repo.filter(character_class=character_class, environment_type=environment_type)

    def analyze_dataset(self, examples: Sequence[TrainingExample]) -> DatasetQualityMetrics:
        return self.analyzer.analyze(examples)

    def dataset_report(self, examples: Sequence[TrainingExample]) -> QualityReport:
        return self.analyzer.report(examples)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def sweep_cache(self) -> int:
        removed = self.cache.sweep()
        self.event_bus.publish(PredictionCacheSwept(removed=removed, remaining=self.cache.stats().total_entries))
        return removed

    def clear_cache(self) -> None:
        self.cache.clear()
