from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.repositories import SpellLibraryRepository


BUILTIN_SPELLS: tuple[Spell, ...] = (
    Spell("Fireball", "Evocation", 3, ("damage", "area-of-effect", "offensive"), "Damage", slug="fireball"),
    Spell("Magic Missile", "Evocation", 1, ("damage", "offensive"), "Damage", slug="magic-missile"),
    Spell("Lightning Bolt", "Evocation", 3, ("damage", "area-of-effect"), "Damage", slug="lightning-bolt"),
    Spell("Shield", "Abjuration", 1, ("defense", "self-buff"), "Protection", slug="shield"),
    Spell("Mage Armor", "Abjuration", 1, ("defense",), "Protection", slug="mage-armor"),
    Spell("Haste", "Transmutation", 3, ("enhancement", "movement"), "Buff", slug="haste"),
    Spell("Bless", "Enchantment", 1, ("enhancement", "support"), "Buff", slug="bless"),
    Spell("Healing Word", "Evocation", 1, ("restoration", "support"), "Healing", slug="healing-word"),
    Spell("Cure Wounds", "Evocation", 1, ("restoration",), "Healing", slug="cure-wounds"),
    Spell("Hold Person", "Enchantment", 2, ("control",), "Control", slug="hold-person"),
    Spell("Invisibility", "Illusion", 2, ("stealth", "utility"), "Utility", slug="invisibility"),
    Spell("Cone of Cold", "Evocation", 5, ("damage", "area-of-effect"), "Damage", slug="cone-of-cold"),
    Spell("Greater Invisibility", "Illusion", 4, ("stealth", "defense"), "Protection", slug="greater-invisibility"),
    Spell("Mass Cure Wounds", "Evocation", 5, ("restoration", "area-of-effect"), "Healing", slug="mass-cure-wounds"),
)

DEFAULT_CHARACTER_CLASSES = ("Wizard", "Sorcerer", "Cleric", "Druid", "Warlock")


class InMemorySpellLibraryRepository(SpellLibraryRepository):
    def __init__(self, spells: Optional[Iterable[Spell]] = None) -> None:
        source = BUILTIN_SPELLS if spells is None else tuple(spells)
        self._spells: Dict[str, Spell] = {spell.name.lower(): spell for spell in source}

    def list_spells(self) -> List[Spell]:
        return list(self._spells.values())

    def get_by_name(self, name: str) -> Optional[Spell]:
        return self._spells.get(str(name or "").strip().lower())

    def add(self, spell: Spell) -> None:
        self._spells[spell.name.lower()] = spell
