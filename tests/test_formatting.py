import unittest

from ptcg_meta.formatting import deck_slug, format_deck_name, resolve_deck_name


class TestFormatting(unittest.TestCase):
    def test_format_deck_name(self):
        self.assertEqual(format_deck_name("charizard-ex-arcanine"), "Charizard ex Arcanine")
        self.assertEqual(format_deck_name("greninja"), "Greninja")
        self.assertEqual(format_deck_name("Mewtwo-EX"), "Mewtwo ex")
        self.assertEqual(format_deck_name(""), "")

    def test_deck_slug(self):
        self.assertEqual(deck_slug("Charizard ex Arcanine"), "charizard-ex-arcanine")
        self.assertEqual(deck_slug("Mewtwo-EX!"), "mewtwo-ex")

    def test_resolve_prefers_exact_match(self):
        names = ["Mewtwo-ex", "mewtwo-ex-gardevoir"]
        self.assertEqual(resolve_deck_name(names, "Mewtwo-ex"), "Mewtwo-ex")
        self.assertEqual(resolve_deck_name(names, "mewtwo-ex"), "Mewtwo-ex")
        self.assertIsNone(resolve_deck_name(names, "pikachu-ex"))

    def test_resolve_refuses_ambiguous_slug(self):
        names = ["Mewtwo-ex", "mewtwo-EX"]
        self.assertEqual(resolve_deck_name(names, "mewtwo-EX"), "mewtwo-EX")
        self.assertIsNone(resolve_deck_name(names, "mewtwo-ex"))


if __name__ == "__main__":
    unittest.main()
