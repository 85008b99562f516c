from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Character:
    """The slice of a character sheet the interaction engine reads."""

    class_name: str
    level: int = 1
    intelligence: int = 10
    wisdom: int = 10
    id: Optional[int] = None
    name: str = ""

    @property
    def mental_score(self) -> int:
        return int(self.intelligence) + int(self.wisdom)
