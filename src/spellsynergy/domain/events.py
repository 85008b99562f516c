from dataclasses import dataclass
from typing import Optional

from spellsynergy.domain.models.prediction import Prediction
from spellsynergy.domain.models.training import ModelWeights


@dataclass
class ModelRetrained:
    dataset_size: int
    weights: ModelWeights


@dataclass
class PredictionComputed:
    cache_key: str
    prediction: Prediction
    cache_hit: bool


@dataclass
class PredictionCacheSwept:
    removed: int
    remaining: int


@dataclass
class TrainingOutcomeRecorded:
    spell_combination: tuple[str, ...]
    character_class: str
    environment_type: str
    stored_total: Optional[int] = None
