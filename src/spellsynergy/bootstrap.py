import logging
import os

from spellsynergy.application.services.dataset_quality import DatasetQualityAnalyzer
from spellsynergy.application.services.event_bus import EventBus
from spellsynergy.application.services.interaction_predictor import InteractionPredictor
from spellsynergy.application.services.interaction_service import SpellInteractionService
from spellsynergy.application.services.interaction_tables import InteractionTables
from spellsynergy.application.services.training_synthesizer import TrainingExampleSynthesizer
from spellsynergy.application.services.weight_model import WeightModel
from spellsynergy.domain.repositories import SpellLibraryRepository, TrainingExampleRepository
from spellsynergy.infrastructure.inmemory.inmemory_spell_repo import InMemorySpellLibraryRepository
from spellsynergy.infrastructure.inmemory.inmemory_training_repo import InMemoryTrainingExampleRepository
from spellsynergy.infrastructure.prediction_cache import DEFAULT_TTL_SECONDS, InMemoryPredictionCache
from spellsynergy.infrastructure.spell_library import LocalSpellLibrary, Open5eSpellLibrary


_logger = logging.getLogger(__name__)


def _build_spell_library() -> SpellLibraryRepository:
    source = os.getenv("SPELLSYNERGY_SPELL_SOURCE", "builtin").strip().lower()
    if source == "local":
        return LocalSpellLibrary(os.getenv("SPELLSYNERGY_LOCAL_SPELLS_PATH", "data/srd/spells.json"))
    if source == "open5e":
        timeout = float(os.getenv("SPELLSYNERGY_CONTENT_TIMEOUT_S", "10"))
        retries = int(os.getenv("SPELLSYNERGY_CONTENT_RETRIES", "2"))
        backoff_seconds = float(os.getenv("SPELLSYNERGY_CONTENT_BACKOFF_S", "0.2"))
        return Open5eSpellLibrary(timeout=timeout, retries=retries, backoff_seconds=backoff_seconds)
    if source != "builtin":
        _logger.warning("Unknown spell source; using built-in library", extra={"spell_source": source})
    return InMemorySpellLibraryRepository()


def _build_training_repo() -> TrainingExampleRepository:
    database_url = os.getenv("SPELLSYNERGY_DATABASE_URL", "").strip()
    if not database_url:
        return InMemoryTrainingExampleRepository()

    from spellsynergy.infrastructure.db.connection import create_session_factory
    from spellsynergy.infrastructure.db.sql_training_repo import SqlTrainingExampleRepository

    return SqlTrainingExampleRepository(create_session_factory(database_url))


def _build_synthesizer() -> TrainingExampleSynthesizer:
    seed = os.getenv("SPELLSYNERGY_SYNTH_SEED", "").strip()
    if seed:
        return TrainingExampleSynthesizer.from_seed(seed)
    return TrainingExampleSynthesizer()


def create_interaction_service(*, tables: InteractionTables | None = None) -> SpellInteractionService:
    ttl_seconds = float(os.getenv("SPELLSYNERGY_CACHE_TTL_S", str(DEFAULT_TTL_SECONDS)))
    tables = tables or InteractionTables()
    weight_model = WeightModel(tables)
    return SpellInteractionService(
        predictor=InteractionPredictor(weight_model=weight_model, tables=tables),
        cache=InMemoryPredictionCache(ttl_seconds=ttl_seconds),
        synthesizer=_build_synthesizer(),
        analyzer=DatasetQualityAnalyzer(),
        spell_library=_build_spell_library(),
        training_repo=_build_training_repo(),
        event_bus=EventBus(),
    )
