from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence

from spellsynergy.application.dtos import CacheStats
from spellsynergy.application.services.seed_policy import canonical_json
from spellsynergy.domain.models.character import Character
from spellsynergy.domain.models.environment import EnvironmentalContext
from spellsynergy.domain.models.prediction import Prediction
from spellsynergy.domain.models.spell import Spell, SpellIdentity


DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class PredictionCacheKey:
    spells: tuple[SpellIdentity, ...]
    character_class: str
    intelligence: int
    wisdom: int
    terrain: str
    combat_difficulty: str

    def serialize(self) -> str:
        return canonical_json(
            {
                "spells": [list(identity) for identity in self.spells],
                "characterClass": self.character_class,
                "intelligence": self.intelligence,
                "wisdom": self.wisdom,
                "terrain": self.terrain,
                "combatDifficulty": self.combat_difficulty,
            }
        )


@dataclass(frozen=True)
class CacheEntry:
    key: PredictionCacheKey
    prediction: Prediction
    created_at: float


@dataclass
class _PendingComputation:
    done: threading.Event = field(default_factory=threading.Event)
    result: Optional[Prediction] = None
    error: Optional[BaseException] = None


class InMemoryPredictionCache:
    """Time-bounded prediction store keyed on the canonical request.

    ``get_or_compute`` runs at most one computation per key at a time; concurrent
    callers for the same key wait for the first one and share its result.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if float(ttl_seconds) <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[PredictionCacheKey, CacheEntry] = {}
        self._pending: Dict[PredictionCacheKey, _PendingComputation] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def key(
        spells: Sequence[Spell],
        character: Character,
        context: EnvironmentalContext,
    ) -> PredictionCacheKey:
        return PredictionCacheKey(
            spells=tuple(sorted(spell.identity for spell in spells)),
            character_class=str(character.class_name or "").strip().lower(),
            intelligence=int(character.intelligence),
            wisdom=int(character.wisdom),
            terrain=context.terrain_key,
            combat_difficulty=context.difficulty_key,
        )

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at < self.ttl_seconds

    def _lookup_locked(self, key: PredictionCacheKey) -> Optional[Prediction]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_fresh(entry, self._clock()):
            return entry.prediction
        del self._entries[key]
        return None

    def get(self, key: PredictionCacheKey) -> Optional[Prediction]:
        with self._lock:
            return self._lookup_locked(key)

    def put(self, key: PredictionCacheKey, prediction: Prediction) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(key=key, prediction=prediction, created_at=self._clock())

    def get_or_compute(
        self,
        key: PredictionCacheKey,
        compute: Callable[[], Prediction],
    ) -> tuple[Prediction, bool]:
        """Return ``(prediction, cache_hit)``."""
        with self._lock:
            cached = self._lookup_locked(key)
            if cached is not None:
                return cached, True
            pending = self._pending.get(key)
            owner = pending is None
            if owner:
                pending = _PendingComputation()
                self._pending[key] = pending

        if not owner:
            pending.done.wait()
            if pending.error is not None:
                raise pending.error
            return pending.result, True

        try:
            result = compute()
            pending.result = result
            with self._lock:
                self._entries[key] = CacheEntry(key=key, prediction=result, created_at=self._clock())
            return result, False
        except BaseException as exc:
            pending.error = exc
            raise
        finally:
            with self._lock:
                self._pending.pop(key, None)
            pending.done.set()

    def remove(self, key: PredictionCacheKey) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            entries = list(self._entries.values())
        active = sum(1 for entry in entries if self._is_fresh(entry, now))
        oldest = min((entry.created_at for entry in entries), default=now)
        return CacheStats(
            total_entries=len(entries),
            active_entries=active,
            oldest_entry_age_ms=int(round((now - oldest) * 1000)),
        )

    def sweep(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
            for key in expired:
                del self._entries[key]
        if expired:
            self._logger.info("Swept expired predictions", extra={"removed": len(expired)})
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
