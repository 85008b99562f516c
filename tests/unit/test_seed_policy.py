import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from spellsynergy.application.services.seed_policy import canonical_json, derive_rng, derive_seed


class SeedPolicyTests(unittest.TestCase):
    def test_same_context_same_seed(self) -> None:
        context = {"seed": 7, "classes": ["Wizard", "Cleric"], "count": 100}
        self.assertEqual(derive_seed("training.synthesize", context), derive_seed("training.synthesize", context))

    def test_context_key_order_does_not_change_seed(self) -> None:
        context_a = {"a": 1, "b": {"x": 2, "y": 3}}
        context_b = {"b": {"y": 3, "x": 2}, "a": 1}
        self.assertEqual(derive_seed("training.synthesize", context_a), derive_seed("training.synthesize", context_b))

    def test_namespace_changes_seed(self) -> None:
        context = {"seed": 10}
        self.assertNotEqual(derive_seed("training.synthesize", context), derive_seed("training.evaluate", context))

    def test_unordered_set_values_produce_stable_seed(self) -> None:
        context_a = {"schools": {"evocation", "abjuration", "illusion"}}
        context_b = {"schools": {"illusion", "evocation", "abjuration"}}
        self.assertEqual(derive_seed("training.synthesize", context_a), derive_seed("training.synthesize", context_b))

    def test_non_finite_float_in_context_raises(self) -> None:
        with self.assertRaises(ValueError):
            derive_seed("training.synthesize", {"difficulty": float("nan")})

    def test_canonical_json_is_compact_and_sorted(self) -> None:
        self.assertEqual('{"a":[1,2],"b":"x"}', canonical_json({"b": "x", "a": (1, 2)}))

    def test_derive_rng_is_deterministic_for_same_context(self) -> None:
        rng_a = derive_rng("training.synthesize", {"seed": 12})
        rng_b = derive_rng("training.synthesize", {"seed": 12})
        self.assertEqual(rng_a.randint(1, 1000), rng_b.randint(1, 1000))


if __name__ == "__main__":
    unittest.main()
