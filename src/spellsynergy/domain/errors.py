class SpellInteractionError(Exception):
    pass


class EmptyTrainingSet(SpellInteractionError, ValueError):
    def __init__(self, message: str = "Cannot train the interaction model on an empty example set.") -> None:
        super().__init__(message)


class InvalidSpellCombination(SpellInteractionError, ValueError):
    pass


class InsufficientSpellCombination(InvalidSpellCombination):
    def __init__(self, spell_count: int, minimum: int = 2) -> None:
        self.spell_count = int(spell_count)
        self.minimum = int(minimum)
        super().__init__(f"A spell combination needs at least {self.minimum} spells (got {self.spell_count}).")


class OversizedSpellCombination(InvalidSpellCombination):
    def __init__(self, spell_count: int, maximum: int = 4) -> None:
        self.spell_count = int(spell_count)
        self.maximum = int(maximum)
        super().__init__(f"A spell combination holds at most {self.maximum} spells (got {self.spell_count}).")


class SpellLibraryUnavailable(SpellInteractionError, RuntimeError):
    pass
