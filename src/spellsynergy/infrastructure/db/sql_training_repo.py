from __future__ import annotations

import json
import logging
import time
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from spellsynergy.domain.models.training import ContextualFactors, InteractionOutcome, TrainingExample
from spellsynergy.domain.repositories import TrainingExampleRepository


_CREATE_TABLE_SQLITE = """
CREATE TABLE IF NOT EXISTS training_example (
    example_id INTEGER PRIMARY KEY AUTOINCREMENT,
    spell_combination_json TEXT NOT NULL,
    effectiveness REAL NOT NULL,
    synergy_score REAL NOT NULL,
    unexpected_effects_json TEXT NOT NULL,
    character_class VARCHAR(64) NOT NULL,
    environment_type VARCHAR(64) NOT NULL,
    combat_difficulty REAL NOT NULL,
    recorded_at INTEGER NOT NULL
)
"""

_CREATE_TABLE_MYSQL = """
CREATE TABLE IF NOT EXISTS training_example (
    example_id INT AUTO_INCREMENT PRIMARY KEY,
    spell_combination_json TEXT NOT NULL,
    effectiveness DOUBLE NOT NULL,
    synergy_score DOUBLE NOT NULL,
    unexpected_effects_json TEXT NOT NULL,
    character_class VARCHAR(64) NOT NULL,
    environment_type VARCHAR(64) NOT NULL,
    combat_difficulty DOUBLE NOT NULL,
    recorded_at BIGINT NOT NULL
)
"""


def _json_list(raw) -> Optional[list]:
    try:
        value = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, list) else None


def _row_to_example(row) -> Optional[TrainingExample]:
    combination = _json_list(row.spell_combination_json)
    effects = _json_list(row.unexpected_effects_json)
    if not combination or effects is None:
        return None
    return TrainingExample(
        spell_combination=tuple(str(name) for name in combination),
        outcome=InteractionOutcome(
            effectiveness=float(row.effectiveness),
            synergy_score=float(row.synergy_score),
            unexpected_effects=tuple(str(effect) for effect in effects),
        ),
        factors=ContextualFactors(
            character_class=str(row.character_class),
            environment_type=str(row.environment_type),
            combat_difficulty=float(row.combat_difficulty),
        ),
    )


class SqlTrainingExampleRepository(TrainingExampleRepository):
    """Curated training history stored through SQLAlchemy (SQLite or MySQL)."""

    def __init__(self, session_factory: sessionmaker, *, create_schema: bool = True) -> None:
        self._session_factory = session_factory
        self._logger = logging.getLogger(__name__)
        if create_schema:
            self.ensure_schema()

    def ensure_schema(self) -> None:
        with self._session_factory.begin() as session:
            dialect = session.bind.dialect.name if session.bind is not None else "sqlite"
            ddl = _CREATE_TABLE_MYSQL if dialect == "mysql" else _CREATE_TABLE_SQLITE
            session.execute(text(ddl))

    def add(self, example: TrainingExample) -> None:
        self.add_many([example])

    def add_many(self, examples) -> None:
        rows = [
            {
                "combination": json.dumps(list(example.spell_combination), ensure_ascii=False),
                "effectiveness": float(example.outcome.effectiveness),
                "synergy_score": float(example.outcome.synergy_score),
                "effects": json.dumps(list(example.outcome.unexpected_effects), ensure_ascii=False),
                "character_class": str(example.factors.character_class),
                "environment_type": str(example.factors.environment_type),
                "combat_difficulty": float(example.factors.combat_difficulty),
                "recorded_at": int(time.time()),
            }
            for example in examples
        ]
        if not rows:
            return
        with self._session_factory.begin() as session:
            session.execute(
                text(
                    """
                    INSERT INTO training_example (
                        spell_combination_json, effectiveness, synergy_score, unexpected_effects_json,
                        character_class, environment_type, combat_difficulty, recorded_at
                    ) VALUES (
                        :combination, :effectiveness, :synergy_score, :effects,
                        :character_class, :environment_type, :combat_difficulty, :recorded_at
                    )
                    """
                ),
                rows,
            )
        self._logger.debug("Stored training examples", extra={"count": len(rows)})

    def _select(self, where: str = "", params: Optional[dict] = None) -> List[TrainingExample]:
        with self._session_factory() as session:
            rows = session.execute(
                text(
                    f"""
                    SELECT example_id, spell_combination_json, effectiveness, synergy_score, unexpected_effects_json,
                           character_class, environment_type, combat_difficulty
                    FROM training_example
                    {where}
                    ORDER BY example_id
                    """
                ),
                params or {},
            ).all()
        examples: List[TrainingExample] = []
        for row in rows:
            example = _row_to_example(row)
            if example is None:
                self._logger.warning("Skipping corrupt training example row", extra={"example_id": row.example_id})
                continue
            examples.append(example)
        return examples

    def list_all(self) -> List[TrainingExample]:
        return self._select()

    def filter(
        self,
        *,
        character_class: Optional[str] = None,
        environment_type: Optional[str] = None,
    ) -> List[TrainingExample]:
        clauses: List[str] = []
        params: dict = {}
        if character_class is not None:
            clauses.append("LOWER(character_class) = :character_class")
            params["character_class"] = str(character_class).strip().lower()
        if environment_type is not None:
            clauses.append("LOWER(environment_type) = :environment_type")
            params["environment_type"] = str(environment_type).strip().lower()
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return self._select(where, params)

    def count(self) -> int:
        with self._session_factory() as session:
            return int(session.execute(text("SELECT COUNT(*) FROM training_example")).scalar() or 0)

    def clear(self) -> None:
        with self._session_factory.begin() as session:
            session.execute(text("DELETE FROM training_example"))
