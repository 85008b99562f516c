import json
import sys
import tempfile
from pathlib import Path
import unittest

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from spellsynergy.domain.errors import SpellLibraryUnavailable
from spellsynergy.infrastructure.resilient_http import reset_circuit_breakers
from spellsynergy.infrastructure.spell_library import (
    LocalSpellLibrary,
    Open5eSpellLibrary,
    infer_interaction_type,
    infer_tags,
    spell_from_payload,
)


_PAGES = {
    "1": {
        "next": "https://open5e.test/spells/?page=2",
        "results": [
            {
                "slug": "fireball",
                "name": "Fireball",
                "level_int": 3,
                "school": "evocation",
                "desc": "Each creature in a 20-foot-radius sphere takes 8d6 fire damage.",
            }
        ],
    },
    "2": {
        "next": None,
        "results": [
            {
                "slug": "cure-wounds",
                "name": "Cure Wounds",
                "level": "1st-level",
                "school": {"name": "Evocation"},
                "desc": "A creature you touch regains a number of hit points.",
            },
            {"name": ""},
        ],
    },
}


def _paged_handler(request: httpx.Request) -> httpx.Response:
    page = request.url.params.get("page", "1")
    return httpx.Response(200, json=_PAGES[page])


class Open5eSpellLibraryTests(unittest.TestCase):
    def tearDown(self) -> None:
        reset_circuit_breakers()

    def _library(self, handler) -> Open5eSpellLibrary:
        client = httpx.Client(base_url="https://open5e.test", transport=httpx.MockTransport(handler))
        return Open5eSpellLibrary(http_client=client, retries=0, backoff_seconds=0)

    def test_lists_spells_across_pages(self) -> None:
        library = self._library(_paged_handler)

        spells = library.list_spells()

        self.assertEqual(["Fireball", "Cure Wounds"], [spell.name for spell in spells])
        fireball, cure = spells
        self.assertEqual(("Evocation", 3, "Damage"), (fireball.school, fireball.level, fireball.interaction_type))
        self.assertIn("area-of-effect", fireball.tags)
        self.assertEqual(("Evocation", 1, "Healing"), (cure.school, cure.level, cure.interaction_type))
        self.assertEqual(cure, library.get_by_name("cure wounds"))
        library.close()

    def test_results_are_fetched_once(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url)
            return _paged_handler(request)

        library = self._library(handler)
        library.list_spells()
        library.list_spells()

        self.assertEqual(2, len(calls))

    def test_http_error_surfaces_as_library_unavailable(self) -> None:
        library = self._library(lambda request: httpx.Response(404, json={"detail": "Not found."}))

        with self.assertRaises(SpellLibraryUnavailable):
            library.list_spells()

    def test_empty_listing_is_unavailable(self) -> None:
        library = self._library(lambda request: httpx.Response(200, json={"next": None, "results": []}))

        with self.assertRaises(SpellLibraryUnavailable):
            library.list_spells()


class LocalSpellLibraryTests(unittest.TestCase):
    def test_reads_results_from_local_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "spells.json"
            path.write_text(
                json.dumps(
                    {
                        "results": [
                            {"name": "Shield", "level": 1, "school": "abjuration", "desc": "+5 bonus to AC"},
                            {"name": "Hold Person", "level": 2, "school": "enchantment", "interaction_type": "Control"},
                        ]
                    }
                ),
                encoding="utf-8",
            )

            spells = LocalSpellLibrary(path).list_spells()

        self.assertEqual(["Shield", "Hold Person"], [spell.name for spell in spells])
        self.assertEqual("Protection", spells[0].interaction_type)
        self.assertEqual("Control", spells[1].interaction_type)

    def test_missing_or_invalid_file_is_unavailable(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing.json"
            broken = Path(tmp) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")

            with self.assertRaises(SpellLibraryUnavailable):
                LocalSpellLibrary(missing).list_spells()
            with self.assertRaises(SpellLibraryUnavailable):
                LocalSpellLibrary(broken).list_spells()


class PayloadParsingTests(unittest.TestCase):
    def test_cantrip_level_and_utility_fallback(self) -> None:
        spell = spell_from_payload({"name": "Light", "level": "Cantrip", "school": "evocation", "desc": "An object sheds light."})

        self.assertEqual(0, spell.level)
        self.assertEqual("Utility", spell.interaction_type)

    def test_tag_inference_priority(self) -> None:
        tags = infer_tags("The target regains hit points and takes no damage.")
        self.assertEqual(("restoration", "damage"), tags)
        self.assertEqual("Healing", infer_interaction_type(tags))


if __name__ == "__main__":
    unittest.main()
