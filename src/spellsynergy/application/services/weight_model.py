from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

from spellsynergy.application.dtos import PerformanceReport
from spellsynergy.application.services.interaction_tables import DEFAULT_TABLES, InteractionTables
from spellsynergy.domain.errors import EmptyTrainingSet
from spellsynergy.domain.models.training import ModelWeights, TrainingExample


UNEXPECTED_EFFECT_PENALTY = 0.1


@dataclass(frozen=True)
class _TrainedState:
    weights: ModelWeights
    examples: tuple[TrainingExample, ...]


class WeightModel:
    """Aggregates example outcomes into the four model coefficients.

    Each ``train`` call builds a complete new state and swaps it in under a lock,
    so readers see either the previous weights or the new ones. Retraining leaves
    cached predictions alone; they expire on their own TTL.
    """

    def __init__(self, tables: InteractionTables | None = None) -> None:
        self.tables = tables or DEFAULT_TABLES
        self._state: Optional[_TrainedState] = None
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    @property
    def weights(self) -> Optional[ModelWeights]:
        state = self._state
        return state.weights if state is not None else None

    @property
    def is_trained(self) -> bool:
        return self._state is not None

    def train(self, examples: Sequence[TrainingExample]) -> ModelWeights:
        snapshot = tuple(examples)
        if not snapshot:
            raise EmptyTrainingSet()

        synergy_total = 0.0
        penalty_total = 0.0
        class_total = 0.0
        environment_total = 0.0
        for example in snapshot:
            synergy_total += example.outcome.synergy_score
            penalty_total += len(example.outcome.unexpected_effects) * UNEXPECTED_EFFECT_PENALTY
            class_total += self.tables.class_weight(example.factors.character_class)
            environment_total += self.tables.environment_weight(example.factors.environment_type)

        size = len(snapshot)
        weights = ModelWeights(
            synergy_score_weight=synergy_total / size,
            unexpected_effects_penalty_weight=penalty_total / size,
            character_class_weight=class_total / size,
            environment_type_weight=environment_total / size,
        )
        with self._lock:
            self._state = _TrainedState(weights=weights, examples=snapshot)
        self._logger.info("Interaction model retrained", extra={"dataset_size": size})
        return weights

    def evaluate_performance(self) -> PerformanceReport:
        state = self._state
        if state is None or not state.examples:
            return PerformanceReport(training_dataset_size=0, model_weights=None)

        size = len(state.examples)
        average_synergy = sum(example.outcome.synergy_score for example in state.examples) / size
        with_effects = sum(1 for example in state.examples if example.outcome.unexpected_effects)
        return PerformanceReport(
            training_dataset_size=size,
            model_weights=state.weights,
            average_compatibility_prediction=average_synergy,
            synergy_effect_accuracy=with_effects / size,
        )
