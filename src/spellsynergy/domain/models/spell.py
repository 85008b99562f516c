from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple


SpellIdentity = Tuple[str, str, int]


def _normalize_tags(tags: Iterable[str] | None) -> tuple[str, ...]:
    if not tags:
        return ()
    if isinstance(tags, str):
        tags = [tags]
    cleaned = {str(tag).strip().lower() for tag in tags if str(tag or "").strip()}
    return tuple(sorted(cleaned))


@dataclass(frozen=True)
class Spell:
    name: str
    school: str
    level: int = 0
    tags: tuple[str, ...] = field(default_factory=tuple)
    interaction_type: str = ""
    slug: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name or "").strip())
        object.__setattr__(self, "school", str(self.school or "").strip())
        try:
            level = max(0, int(self.level or 0))
        except (TypeError, ValueError):
            level = 0
        object.__setattr__(self, "level", level)
        object.__setattr__(self, "tags", _normalize_tags(self.tags))
        object.__setattr__(self, "interaction_type", str(self.interaction_type or "").strip())

    @property
    def identity(self) -> SpellIdentity:
        return (self.name, self.school, self.level)

    @property
    def school_key(self) -> str:
        return self.school.lower()

    @property
    def interaction_type_key(self) -> str:
        return self.interaction_type.lower()
