from dataclasses import dataclass, field
from typing import Dict, List, Optional

from spellsynergy.domain.models.training import ModelWeights


@dataclass(frozen=True)
class PerformanceReport:
    training_dataset_size: int
    model_weights: Optional[ModelWeights]
    average_compatibility_prediction: float = 0.0
    synergy_effect_accuracy: float = 0.0


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    active_entries: int
    oldest_entry_age_ms: int


@dataclass(frozen=True)
class DatasetQualityMetrics:
    dataset_size: int
    unique_spell_combinations: int
    diversity_score: float
    training_efficiency: float
    unique_character_classes: int = 0
    unique_environment_types: int = 0
    character_class_distribution: Dict[str, int] = field(default_factory=dict)


@dataclass
class QualityReport:
    schema_name: str
    schema_version: str
    metrics: DatasetQualityMetrics
    recommendations: List[str] = field(default_factory=list)
