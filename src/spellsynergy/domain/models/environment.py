from dataclasses import dataclass


COMBAT_DIFFICULTIES = ("easy", "moderate", "challenging", "extreme")


@dataclass(frozen=True)
class EnvironmentalContext:
    terrain: str = "urban"
    combat_difficulty: str = "moderate"

    @property
    def terrain_key(self) -> str:
        return str(self.terrain or "").strip().lower()

    @property
    def difficulty_key(self) -> str:
        return str(self.combat_difficulty or "").strip().lower()
