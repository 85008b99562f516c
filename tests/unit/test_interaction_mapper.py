import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from spellsynergy.application.dtos import DatasetQualityMetrics, QualityReport
from spellsynergy.application.mappers.interaction_mapper import (
    prediction_to_payload,
    quality_report_to_payload,
    spell_from_payload,
    spell_to_payload,
    training_example_from_payload,
)
from spellsynergy.domain.models.prediction import Prediction
from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.models.training import ModelWeights


class InteractionMapperTests(unittest.TestCase):
    def test_spell_payload_uses_camel_case_keys(self) -> None:
        payload = spell_to_payload(Spell("Shield", "Abjuration", 1, ("Defense",), "Protection"))

        self.assertEqual("Protection", payload["interactionType"])
        self.assertEqual(["defense"], payload["tags"])
        self.assertEqual(Spell("Shield", "Abjuration", 1, ("defense",), "Protection"), spell_from_payload(payload))

    def test_training_example_accepts_legacy_effectiveness_spelling(self) -> None:
        example = training_example_from_payload(
            {
                "spellCombination": ["Fireball", "Shield"],
                "interactionOutcome": {"effectivness": 0.4, "synergyScore": 0.6, "unexpectedEffects": []},
                "contextualFactors": {"characterClass": "Wizard", "environmentType": "Urban", "combatDifficulty": 0.3},
            }
        )

        self.assertEqual(0.4, example.outcome.effectiveness)
        self.assertEqual("Urban", example.factors.environment_type)

    def test_prediction_payload_includes_weight_snapshot(self) -> None:
        prediction = Prediction(
            spell_combination=("Fireball", "Haste"),
            predicted_compatibility=0.8,
            potential_synergy_effects=("Amplified Damage Output",),
            confidence_score=1.0,
            model_weights=ModelWeights(0.5, 0.1, 1.0, 1.2),
        )

        payload = prediction_to_payload(prediction)

        self.assertEqual(["Amplified Damage Output"], payload["potentialSynergyEffects"])
        self.assertEqual(1.2, payload["modelWeights"]["environmentTypeWeight"])
        self.assertIsNone(prediction_to_payload(Prediction(("A", "B"), 0.5))["modelWeights"])

    def test_quality_report_payload_rounds_scores(self) -> None:
        report = QualityReport(
            schema_name="spellsynergy.dataset_quality",
            schema_version="1.0",
            metrics=DatasetQualityMetrics(
                dataset_size=3,
                unique_spell_combinations=2,
                diversity_score=2 / 3,
                training_efficiency=1.0,
            ),
            recommendations=["Increase dataset size"],
        )

        payload = quality_report_to_payload(report)

        self.assertEqual({"name": "spellsynergy.dataset_quality", "version": "1.0"}, payload["schema"])
        self.assertEqual(0.6667, payload["metrics"]["diversityScore"])


if __name__ == "__main__":
    unittest.main()
