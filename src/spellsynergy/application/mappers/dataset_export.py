"""Flat exports of training examples for external ML tooling.

Two shapes are produced: raw rows (one per example, list fields joined with ``|``)
and an encoded dataset of numeric feature vectors plus an outcome label.
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from typing import List, Sequence

from spellsynergy.application.services.training_synthesizer import DEFAULT_ENVIRONMENT_TYPES
from spellsynergy.domain.models.training import TrainingExample


EXPORT_FORMATS = ("json", "csv")
LIST_SEPARATOR = "|"

RAW_COLUMNS = (
    "spell_combination",
    "effectiveness",
    "synergy_score",
    "unexpected_effects",
    "character_class",
    "environment_type",
    "combat_difficulty",
)

FEATURE_NAMES = (
    "spell_count",
    "character_class",
    "environment_type",
    "combat_difficulty",
    "effectiveness",
    "unexpected_effect_count",
)
LABEL_NAME = "outcome"

UNKNOWN_CODE = -1
CHARACTER_CLASS_CODES = {
    "wizard": 0,
    "sorcerer": 1,
    "warlock": 2,
    "druid": 3,
    "cleric": 4,
    "paladin": 5,
    "ranger": 6,
    "bard": 7,
    "fighter": 8,
    "rogue": 9,
}
ENVIRONMENT_CODES = {name.lower(): index for index, name in enumerate(DEFAULT_ENVIRONMENT_TYPES)}

OUTCOME_FAILURE = 0
OUTCOME_NEUTRAL = 1
OUTCOME_SUCCESS = 2
SUCCESS_SYNERGY_THRESHOLD = 1.0
NEUTRAL_SYNERGY_THRESHOLD = 0.5


@dataclass(frozen=True)
class MLDataset:
    features: List[List[float]] = field(default_factory=list)
    labels: List[int] = field(default_factory=list)
    feature_names: tuple[str, ...] = FEATURE_NAMES


def _code(table: dict[str, int], value: str) -> int:
    return table.get(str(value or "").strip().lower(), UNKNOWN_CODE)


def outcome_label(example: TrainingExample) -> int:
    synergy = example.outcome.synergy_score
    if synergy >= SUCCESS_SYNERGY_THRESHOLD:
        return OUTCOME_SUCCESS
    if synergy >= NEUTRAL_SYNERGY_THRESHOLD:
        return OUTCOME_NEUTRAL
    return OUTCOME_FAILURE


def encode_features(example: TrainingExample) -> List[float]:
    return [
        float(len(example.spell_combination)),
        float(_code(CHARACTER_CLASS_CODES, example.factors.character_class)),
        float(_code(ENVIRONMENT_CODES, example.factors.environment_type)),
        float(example.factors.combat_difficulty),
        float(example.outcome.effectiveness),
        float(len(example.outcome.unexpected_effects)),
    ]


def to_ml_dataset(examples: Sequence[TrainingExample]) -> MLDataset:
    return MLDataset(
        features=[encode_features(example) for example in examples],
        labels=[outcome_label(example) for example in examples],
    )


def _check_format(fmt: str) -> str:
    normalized = str(fmt or "").strip().lower()
    if normalized not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r} (expected one of {', '.join(EXPORT_FORMATS)})")
    return normalized


def _write_csv(header: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def training_examples_to_csv(examples: Sequence[TrainingExample]) -> str:
    rows = [
        (
            LIST_SEPARATOR.join(example.spell_combination),
            example.outcome.effectiveness,
            example.outcome.synergy_score,
            LIST_SEPARATOR.join(example.outcome.unexpected_effects),
            example.factors.character_class,
            example.factors.environment_type,
            example.factors.combat_difficulty,
        )
        for example in examples
    ]
    return _write_csv(RAW_COLUMNS, rows)


def export_ml_dataset(dataset: MLDataset, fmt: str = "json") -> str:
    if _check_format(fmt) == "json":
        return json.dumps(
            {"featureNames": list(dataset.feature_names), "features": dataset.features, "labels": dataset.labels},
            indent=2,
        )
    rows = [[*features, label] for features, label in zip(dataset.features, dataset.labels)]
    return _write_csv([*dataset.feature_names, LABEL_NAME], rows)
