import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from spellsynergy.application.services.interaction_rules import (
    CombinationProfile,
    InteractionRuleBook,
    InteractionTypeRule,
    LevelSpreadRule,
    SchoolDiversityRule,
    TagRule,
    default_interaction_rule_book,
)
from spellsynergy.domain.models.spell import Spell


FIREBALL = Spell("Fireball", "Evocation", 3, ("damage", "area-of-effect"), "Damage")
HASTE = Spell("Haste", "Transmutation", 3, ("enhancement",), "Buff")
SHIELD = Spell("Shield", "Abjuration", 1, ("defense",), "Protection")
HEALING_WORD = Spell("Healing Word", "Evocation", 1, ("restoration",), "Healing")
HOLD_PERSON = Spell("Hold Person", "Enchantment", 2, ("control",), "Control")


class CombinationProfileTests(unittest.TestCase):
    def test_profile_collects_normalized_traits(self) -> None:
        profile = CombinationProfile.from_spells([FIREBALL, HASTE])

        self.assertEqual(frozenset({"damage", "buff"}), profile.interaction_types)
        self.assertEqual(2, profile.unique_school_count)
        self.assertIn("area-of-effect", profile.tags)
        self.assertEqual(0, profile.level_spread)


class InteractionRuleBookTests(unittest.TestCase):
    def test_default_rules_label_damage_and_buff_pairs(self) -> None:
        book = default_interaction_rule_book()
        profile = CombinationProfile.from_spells([FIREBALL, HASTE])

        self.assertEqual(("Amplified Damage Output",), book.synergy_effects(profile))
        self.assertEqual((), book.risk_factors(profile))

    def test_default_rules_flag_three_schools_as_complex(self) -> None:
        book = default_interaction_rule_book()
        profile = CombinationProfile.from_spells([FIREBALL, HASTE, SHIELD, HEALING_WORD])

        self.assertEqual(
            ("Amplified Damage Output", "Enhanced Defensive Capabilities"),
            book.synergy_effects(profile),
        )
        self.assertEqual(("High Magical Complexity",), book.risk_factors(profile))

    def test_partial_match_does_not_fire(self) -> None:
        book = default_interaction_rule_book()
        self.assertEqual((), book.synergy_effects(CombinationProfile.from_spells([FIREBALL, HOLD_PERSON])))

    def test_registered_rules_extend_the_book_in_order(self) -> None:
        book = InteractionRuleBook()
        book.register_synergy(TagRule("Battlefield Lockdown", frozenset({"Control", "AREA-OF-EFFECT"})))
        book.register_synergy(InteractionTypeRule("Amplified Damage Output", frozenset({"damage"})))
        book.register_synergy(InteractionTypeRule("Amplified Damage Output", frozenset({"damage", "control"})))
        book.register_risk(LevelSpreadRule("Slot Strain", min_spread=1))
        book.register_risk(SchoolDiversityRule("Never", min_unique_schools=5))

        profile = CombinationProfile.from_spells([FIREBALL, HOLD_PERSON])

        self.assertEqual(("Battlefield Lockdown", "Amplified Damage Output"), book.synergy_effects(profile))
        self.assertEqual(("Slot Strain",), book.risk_factors(profile))

    def test_empty_requirement_never_matches(self) -> None:
        rule = InteractionTypeRule("Vacuous", frozenset())
        self.assertFalse(rule.matches(CombinationProfile.from_spells([FIREBALL, HASTE])))


if __name__ == "__main__":
    unittest.main()
