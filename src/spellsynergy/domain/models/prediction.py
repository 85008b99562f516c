from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from spellsynergy.domain.models.training import ModelWeights


@dataclass(frozen=True)
class Prediction:
    spell_combination: tuple[str, ...]
    predicted_compatibility: float
    potential_synergy_effects: tuple[str, ...] = field(default_factory=tuple)
    risk_factors: tuple[str, ...] = field(default_factory=tuple)
    confidence_score: float = 0.0
    model_weights: Optional[ModelWeights] = None
