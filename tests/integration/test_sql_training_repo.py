import sys
from pathlib import Path
import unittest

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from spellsynergy.application.services.dataset_quality import DatasetQualityAnalyzer
from spellsynergy.application.services.interaction_predictor import InteractionPredictor
from spellsynergy.application.services.interaction_service import SpellInteractionService
from spellsynergy.domain.models.character import Character
from spellsynergy.domain.models.environment import EnvironmentalContext
from spellsynergy.domain.models.training import ContextualFactors, InteractionOutcome, TrainingExample
from spellsynergy.infrastructure.db.sql_training_repo import SqlTrainingExampleRepository
from spellsynergy.infrastructure.inmemory.inmemory_spell_repo import InMemorySpellLibraryRepository
from spellsynergy.infrastructure.prediction_cache import InMemoryPredictionCache


def _example(combo, effects=(), character_class="Wizard") -> TrainingExample:
    return TrainingExample(
        spell_combination=tuple(combo),
        outcome=InteractionOutcome(effectiveness=0.6, synergy_score=0.9, unexpected_effects=tuple(effects)),
        factors=ContextualFactors(character_class=character_class, environment_type="Planar", combat_difficulty=0.25),
    )


class SqlTrainingExampleRepositoryIntegrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite:///:memory:", future=True)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)
        self.repo = SqlTrainingExampleRepository(self.SessionLocal)

    def test_round_trips_examples_in_insertion_order(self) -> None:
        first = _example(["Fireball", "Shield"], effects=["Dimensional Interference"])
        second = _example(["Haste", "Bless", "Shield"], character_class="Cleric")

        self.repo.add(first)
        self.repo.add_many([second])

        self.assertEqual([first, second], self.repo.list_all())
        self.assertEqual(2, self.repo.count())

    def test_schema_creation_is_idempotent(self) -> None:
        self.repo.add(_example(["Fireball", "Shield"]))
        SqlTrainingExampleRepository(self.SessionLocal).ensure_schema()

        self.assertEqual(1, self.repo.count())

    def test_clear_removes_all_rows(self) -> None:
        self.repo.add_many([_example(["Fireball", "Shield"]), _example(["Haste", "Bless"])])
        self.repo.clear()

        self.assertEqual([], self.repo.list_all())
        with self.engine.connect() as conn:
            self.assertEqual(0, conn.execute(text("SELECT COUNT(*) FROM training_example")).scalar())

    def test_filter_matches_class_and_environment_ignoring_case(self) -> None:
        wizard = _example(["Fireball", "Shield"])
        cleric = _example(["Haste", "Bless"], character_class="Cleric")
        self.repo.add_many([wizard, cleric])

        self.assertEqual([cleric], self.repo.filter(character_class="cleric"))
        self.assertEqual([wizard, cleric], self.repo.filter(environment_type="PLANAR"))
        self.assertEqual([wizard], self.repo.filter(character_class="Wizard", environment_type="planar"))
        self.assertEqual([], self.repo.filter(character_class="Wizard", environment_type="Urban"))

    def test_corrupt_rows_are_skipped_with_warning(self) -> None:
        good = _example(["Fireball", "Shield"])
        self.repo.add(good)
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO training_example (
                        spell_combination_json, effectiveness, synergy_score, unexpected_effects_json,
                        character_class, environment_type, combat_difficulty, recorded_at
                    ) VALUES ('{bad', 0.5, 0.5, '[]', 'Wizard', 'Planar', 0.5, 0)
                    """
                )
            )

        with self.assertLogs("spellsynergy.infrastructure.db.sql_training_repo", level="WARNING") as logs:
            examples = self.repo.list_all()

        self.assertEqual([good], examples)
        self.assertEqual(2, self.repo.count())
        self.assertIn("Skipping corrupt training example row", logs.output[0])

    def test_service_records_outcomes_into_sql_store(self) -> None:
        library = InMemorySpellLibraryRepository()
        service = SpellInteractionService(
            predictor=InteractionPredictor(),
            cache=InMemoryPredictionCache(),
            analyzer=DatasetQualityAnalyzer(),
            spell_library=library,
            training_repo=self.repo,
        )
        wizard = Character(class_name="Wizard", intelligence=14, wisdom=12)
        context = EnvironmentalContext(terrain="wilderness", combat_difficulty="extreme")

        service.record_outcome(
            library.get_many(["Fireball", "Haste"]), wizard, context, effectiveness=0.7, synergy_score=1.05
        )
        weights = service.train(service.recorded_examples())

        stored = self.repo.list_all()
        self.assertEqual(1.0, stored[0].factors.combat_difficulty)
        self.assertEqual("wilderness", stored[0].factors.environment_type)
        self.assertAlmostEqual(1.05, weights.synergy_score_weight)


if __name__ == "__main__":
    unittest.main()
