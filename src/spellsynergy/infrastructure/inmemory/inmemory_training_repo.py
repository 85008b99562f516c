from __future__ import annotations

from typing import List

from spellsynergy.domain.models.training import TrainingExample
from spellsynergy.domain.repositories import TrainingExampleRepository


class InMemoryTrainingExampleRepository(TrainingExampleRepository):
    DEFAULT_MAX_EXAMPLES = 10_000

    def __init__(self, max_examples: int = DEFAULT_MAX_EXAMPLES) -> None:
        self.max_examples = max(1, int(max_examples))
        self._examples: List[TrainingExample] = []

    def add(self, example: TrainingExample) -> None:
        self._examples.append(example)
        overflow = len(self._examples) - self.max_examples
        if overflow > 0:
            # oldest first
            del self._examples[:overflow]

    def list_all(self) -> List[TrainingExample]:
        return list(self._examples)

    def count(self) -> int:
        return len(self._examples)

    def clear(self) -> None:
        self._examples.clear()
