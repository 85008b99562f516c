"""Spell libraries backed by SRD-shaped JSON: the Open5e API or a local file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional

import httpx

from spellsynergy.domain.errors import SpellLibraryUnavailable
from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.repositories import SpellLibraryRepository
from spellsynergy.infrastructure.resilient_http import CircuitOpenError, get_json_with_retry


_TAG_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("restoration", ("regains", "regain", "restore", "heal")),
    ("damage", ("damage",)),
    ("defense", ("armor class", "resistance to", "ward", "+5 bonus to ac")),
    ("enhancement", ("advantage on", "bonus to", "add a d4", "speed is doubled")),
    ("control", ("paralyzed", "restrained", "charmed", "frightened", "incapacitated")),
    ("area-of-effect", ("radius", "-foot cone", "-foot line", "-foot cube")),
)

# first matching tag wins
_INTERACTION_TYPE_BY_TAG: tuple[tuple[str, str], ...] = (
    ("restoration", "Healing"),
    ("damage", "Damage"),
    ("defense", "Protection"),
    ("enhancement", "Buff"),
    ("control", "Control"),
)


def infer_tags(description: str) -> tuple[str, ...]:
    lowered = str(description or "").lower()
    return tuple(tag for tag, keywords in _TAG_KEYWORDS if any(keyword in lowered for keyword in keywords))


def infer_interaction_type(tags: Iterable[str]) -> str:
    present = set(tags)
    for tag, interaction_type in _INTERACTION_TYPE_BY_TAG:
        if tag in present:
            return interaction_type
    return "Utility"


def _parse_level(row: dict[str, Any]) -> int:
    for key in ("level_int", "spell_level", "level"):
        value = row.get(key)
        if isinstance(value, int):
            return value
        text_value = str(value or "").strip().lower()
        if text_value.startswith("cantrip"):
            return 0
        digits = "".join(ch for ch in text_value if ch.isdigit())
        if digits:
            return int(digits)
    return 0


def _parse_school(row: dict[str, Any]) -> str:
    school = row.get("school")
    if isinstance(school, dict):
        school = school.get("name") or school.get("index")
    return str(school or "Unknown").strip().title()


def spell_from_payload(row: dict[str, Any]) -> Optional[Spell]:
    name = str(row.get("name") or "").strip()
    if not name:
        return None
    description = row.get("desc") or ""
    if isinstance(description, list):
        description = " ".join(str(part) for part in description)
    tags = list(row.get("tags") or ()) or list(infer_tags(description))
    interaction_type = str(row.get("interaction_type") or "").strip() or infer_interaction_type(tags)
    return Spell(
        name=name,
        school=_parse_school(row),
        level=_parse_level(row),
        tags=tuple(tags),
        interaction_type=interaction_type,
        slug=str(row.get("slug") or row.get("index") or "").strip() or None,
    )


def _spells_from_rows(rows: Iterable[Any]) -> List[Spell]:
    spells: List[Spell] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        spell = spell_from_payload(row)
        if spell is not None:
            spells.append(spell)
    return spells


class Open5eSpellLibrary(SpellLibraryRepository):
    BASE_URL = "https://api.open5e.com"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        retries: int = 2,
        backoff_seconds: float = 0.2,
        max_pages: int = 20,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self._max_pages = max(1, int(max_pages))
        self._spells: Optional[List[Spell]] = None
        self._logger = logging.getLogger(__name__)
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def _fetch_page(self, page: int) -> dict:
        try:
            return get_json_with_retry(
                self.client,
                "/spells/",
                params={"page": page},
                retries=self._retries,
                backoff_seconds=self._backoff_seconds,
                resource=f"Open5e spells page {page}",
            )
        except (httpx.HTTPError, CircuitOpenError) as exc:
            raise SpellLibraryUnavailable(f"Open5e spell listing failed on page {page}: {exc}") from exc

    def list_spells(self) -> List[Spell]:
        if self._spells is not None:
            return list(self._spells)

        spells: List[Spell] = []
        for page in range(1, self._max_pages + 1):
            payload = self._fetch_page(page)
            spells.extend(_spells_from_rows(payload.get("results") or ()))
            if not payload.get("next"):
                break
        if not spells:
            raise SpellLibraryUnavailable("Open5e returned no spells")
        self._logger.info("Loaded Open5e spell library", extra={"spell_count": len(spells)})
        self._spells = spells
        return list(spells)

    def close(self) -> None:
        self.client.close()


class LocalSpellLibrary(SpellLibraryRepository):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._spells: Optional[List[Spell]] = None

    def list_spells(self) -> List[Spell]:
        if self._spells is not None:
            return list(self._spells)
        if not self.path.exists():
            raise SpellLibraryUnavailable(f"Local spell dataset not found: {self.path}")
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SpellLibraryUnavailable(f"Local spell dataset is not valid JSON: {self.path}") from exc
        if isinstance(raw, dict):
            rows = raw.get("results") or raw.get("items") or []
        elif isinstance(raw, list):
            rows = raw
        else:
            rows = []
        self._spells = _spells_from_rows(rows)
        return list(self._spells)
