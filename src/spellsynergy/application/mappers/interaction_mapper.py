from __future__ import annotations

from typing import Any, Mapping, Optional

from spellsynergy.application.dtos import CacheStats, DatasetQualityMetrics, PerformanceReport, QualityReport
from spellsynergy.domain.models.prediction import Prediction
from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.models.training import (
    ContextualFactors,
    InteractionOutcome,
    ModelWeights,
    TrainingExample,
)


def spell_to_payload(spell: Spell) -> dict[str, Any]:
    return {
        "name": spell.name,
        "school": spell.school,
        "level": spell.level,
        "tags": list(spell.tags),
        "interactionType": spell.interaction_type,
    }


def spell_from_payload(payload: Mapping[str, Any]) -> Spell:
    return Spell(
        name=str(payload["name"]),
        school=str(payload.get("school", "")),
        level=int(payload.get("level", 0) or 0),
        tags=tuple(payload.get("tags") or ()),
        interaction_type=str(payload.get("interactionType", "") or ""),
    )


def weights_to_payload(weights: Optional[ModelWeights]) -> Optional[dict[str, float]]:
    if weights is None:
        return None
    return {
        "synergyScoreWeight": weights.synergy_score_weight,
        "unexpectedEffectsPenaltyWeight": weights.unexpected_effects_penalty_weight,
        "characterClassWeight": weights.character_class_weight,
        "environmentTypeWeight": weights.environment_type_weight,
    }


def training_example_to_payload(example: TrainingExample) -> dict[str, Any]:
    return {
        "spellCombination": list(example.spell_combination),
        "interactionOutcome": {
            "effectiveness": example.outcome.effectiveness,
            "synergyScore": example.outcome.synergy_score,
            "unexpectedEffects": list(example.outcome.unexpected_effects),
        },
        "contextualFactors": {
            "characterClass": example.factors.character_class,
            "environmentType": example.factors.environment_type,
            "combatDifficulty": example.factors.combat_difficulty,
        },
    }


def training_example_from_payload(payload: Mapping[str, Any]) -> TrainingExample:
    outcome = payload.get("interactionOutcome") or {}
    factors = payload.get("contextualFactors") or {}
    # older exports spell it "effectivness"
    effectiveness = outcome.get("effectiveness", outcome.get("effectivness", 0.0))
    return TrainingExample(
        spell_combination=tuple(payload.get("spellCombination") or ()),
        outcome=InteractionOutcome(
            effectiveness=float(effectiveness or 0.0),
            synergy_score=float(outcome.get("synergyScore", 0.0) or 0.0),
            unexpected_effects=tuple(outcome.get("unexpectedEffects") or ()),
        ),
        factors=ContextualFactors(
            character_class=str(factors.get("characterClass", "")),
            environment_type=str(factors.get("environmentType", "")),
            combat_difficulty=float(factors.get("combatDifficulty", 0.5) or 0.0),
        ),
    )


def prediction_to_payload(prediction: Prediction) -> dict[str, Any]:
    return {
        "spellCombination": list(prediction.spell_combination),
        "predictedCompatibility": prediction.predicted_compatibility,
        "potentialSynergyEffects": list(prediction.potential_synergy_effects),
        "riskFactors": list(prediction.risk_factors),
        "confidenceScore": prediction.confidence_score,
        "modelWeights": weights_to_payload(prediction.model_weights),
    }


def performance_to_payload(report: PerformanceReport) -> dict[str, Any]:
    return {
        "trainingDatasetSize": report.training_dataset_size,
        "modelWeights": weights_to_payload(report.model_weights),
        "performanceMetrics": {
            "averageCompatibilityPrediction": report.average_compatibility_prediction,
            "synergyEffectAccuracy": report.synergy_effect_accuracy,
        },
    }


def cache_stats_to_payload(stats: CacheStats) -> dict[str, int]:
    return {
        "totalEntries": stats.total_entries,
        "activeEntries": stats.active_entries,
        "oldestEntryAgeMs": stats.oldest_entry_age_ms,
    }


def quality_metrics_to_payload(metrics: DatasetQualityMetrics) -> dict[str, Any]:
    return {
        "datasetSize": metrics.dataset_size,
        "uniqueSpellCombinations": metrics.unique_spell_combinations,
        "diversityScore": round(metrics.diversity_score, 4),
        "trainingEfficiency": round(metrics.training_efficiency, 4),
        "uniqueCharacterClasses": metrics.unique_character_classes,
        "uniqueEnvironmentTypes": metrics.unique_environment_types,
        "characterClassDistribution": dict(metrics.character_class_distribution),
    }


def quality_report_to_payload(report: QualityReport) -> dict[str, Any]:
    return {
        "schema": {"name": report.schema_name, "version": report.schema_version},
        "metrics": quality_metrics_to_payload(report.metrics),
        "recommendations": list(report.recommendations),
    }
