from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence

from spellsynergy.application.dtos import DatasetQualityMetrics, QualityReport
from spellsynergy.domain.models.training import TrainingExample


REPORT_SCHEMA_NAME = "spellsynergy.dataset_quality"
REPORT_SCHEMA_VERSION = "1.0"


@dataclass(frozen=True)
class QualityThresholds:
    min_dataset_size: int = 100
    min_diversity_score: float = 0.5
    min_training_efficiency: float = 0.5
    min_character_classes: int = 3
    min_environment_types: int = 3


def _signal_key(example: TrainingExample) -> tuple:
    return (
        example.combination_signature,
        str(example.factors.character_class).strip().lower(),
        str(example.factors.environment_type).strip().lower(),
    )


class DatasetQualityAnalyzer:
    def __init__(self, thresholds: QualityThresholds | None = None) -> None:
        self.thresholds = thresholds or QualityThresholds()

    def analyze(self, examples: Sequence[TrainingExample]) -> DatasetQualityMetrics:
        size = len(examples)
        combinations = {example.combination_signature for example in examples}

        seen_signals: set[tuple] = set()
        novel = 0
        for example in examples:
            key = _signal_key(example)
            if key not in seen_signals:
                seen_signals.add(key)
                novel += 1

        class_counts = Counter(str(example.factors.character_class) for example in examples)
        environments = {str(example.factors.environment_type).strip().lower() for example in examples}

        return DatasetQualityMetrics(
            dataset_size=size,
            unique_spell_combinations=len(combinations),
            diversity_score=(len(combinations) / size) if size else 0.0,
            training_efficiency=(novel / size) if size else 0.0,
            unique_character_classes=len(class_counts),
            unique_environment_types=len(environments),
            character_class_distribution=dict(sorted(class_counts.items())),
        )

    def recommendations(self, metrics: DatasetQualityMetrics) -> List[str]:
        limits = self.thresholds
        notes: List[str] = []
        if metrics.dataset_size < limits.min_dataset_size:
            notes.append(
                f"Increase dataset size: {metrics.dataset_size} examples recorded, at least {limits.min_dataset_size} recommended."
            )
        if metrics.diversity_score < limits.min_diversity_score:
            notes.append(
                f"Diversify spell combinations: diversity score {metrics.diversity_score:.2f} is below {limits.min_diversity_score:.2f}."
            )
        if metrics.dataset_size and metrics.training_efficiency < limits.min_training_efficiency:
            notes.append("Remove redundant examples: many examples repeat the same combination, class and environment.")
        if metrics.unique_character_classes < limits.min_character_classes:
            notes.append(
                f"Diversify character classes: only {metrics.unique_character_classes} class(es) represented."
            )
        if metrics.unique_environment_types < limits.min_environment_types:
            notes.append(
                f"Cover more environment types: only {metrics.unique_environment_types} environment(s) represented."
            )
        return notes

    def report(self, examples: Sequence[TrainingExample]) -> QualityReport:
        metrics = self.analyze(examples)
        return QualityReport(
            schema_name=REPORT_SCHEMA_NAME,
            schema_version=REPORT_SCHEMA_VERSION,
            metrics=metrics,
            recommendations=self.recommendations(metrics),
        )

    @staticmethod
    def optimize(examples: Sequence[TrainingExample]) -> List[TrainingExample]:
        """Drop repeated (combination, class, environment) examples, keeping the first."""
        seen: set[tuple] = set()
        unique: List[TrainingExample] = []
        for example in examples:
            key = _signal_key(example)
            if key in seen:
                continue
            seen.add(key)
            unique.append(example)
        return unique
