from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from spellsynergy.domain.models.spell import Spell
from spellsynergy.domain.models.training import TrainingExample


class SpellLibraryRepository(ABC):
    @abstractmethod
    def list_spells(self) -> List[Spell]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Spell]:
        """Case-insensitive lookup; default scans list_spells."""
        wanted = str(name or "").strip().lower()
        for spell in self.list_spells():
            if spell.name.lower() == wanted:
                return spell
        return None

    def get_many(self, names: Sequence[str]) -> List[Spell]:
        found: List[Spell] = []
        for name in names:
            spell = self.get_by_name(name)
            if spell is None:
                raise KeyError(f"Unknown spell: {name}")
            found.append(spell)
        return found


class TrainingExampleRepository(ABC):
    @abstractmethod
    def add(self, example: TrainingExample) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[TrainingExample]:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    def add_many(self, examples: Sequence[TrainingExample]) -> None:
        for example in examples:
            self.add(example)

    def count(self) -> int:
        return len(self.list_all())

    def filter(
        self,
        *,
        character_class: Optional[str] = None,
        environment_type: Optional[str] = None,
    ) -> List[TrainingExample]:
        """Stored examples matching every given field (case-insensitive); ``None`` matches anything."""
        wanted_class = _folded(character_class)
        wanted_environment = _folded(environment_type)
        return [
            example
            for example in self.list_all()
            if (wanted_class is None or _folded(example.factors.character_class) == wanted_class)
            and (wanted_environment is None or _folded(example.factors.environment_type) == wanted_environment)
        ]


def _folded(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip().lower()
