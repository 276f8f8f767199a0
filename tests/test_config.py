import unittest
from unittest.mock import patch

from ptcg_meta.config import (
    DEFAULT_DATA_SOURCE,
    AggregatorConfig,
    data_source,
    load_config,
)
from ptcg_meta.errors import ConfigurationError


class TestValidate(unittest.TestCase):
    def test_defaults_are_valid(self):
        config = AggregatorConfig().validate()
        self.assertEqual(config.min_matchup_games, 10)
        self.assertEqual(config.min_deck_games, 50)
        self.assertEqual((config.favorable_above, config.unfavorable_below), (52.0, 48.0))
        self.assertEqual(
            (config.weight_win_rate, config.weight_meta_share, config.weight_favorable),
            (0.5, 0.3, 2.0),
        )

    def test_rejects_bad_values(self):
        bad = [
            {"min_matchup_games": -1},
            {"min_deck_games": -5},
            {"min_deck_games": 2.5},
            {"weight_win_rate": -0.1},
            {"weight_favorable": -2},
            {"favorable_above": 101},
            {"unfavorable_below": -1},
            {"favorable_above": 45, "unfavorable_below": 55},
            {"insight_size": 0},
        ]
        for values in bad:
            with self.subTest(values=values):
                with self.assertRaises(ConfigurationError):
                    AggregatorConfig(**values).validate()

    def test_equal_band_edges_are_allowed(self):
        AggregatorConfig(favorable_above=50, unfavorable_below=50).validate()


class TestLoadConfig(unittest.TestCase):
    def test_empty_environment_gives_defaults(self):
        self.assertEqual(load_config({}), AggregatorConfig())

    def test_environment_overrides(self):
        config = load_config({
            "PTCG_META_MIN_MATCHUP_GAMES": "20",
            "PTCG_META_MIN_DECK_GAMES": " 100 ",
            "PTCG_META_WEIGHT_WIN_RATE": "0.4",
            "PTCG_META_STRICT": "yes",
        })
        self.assertEqual(config.min_matchup_games, 20)
        self.assertEqual(config.min_deck_games, 100)
        self.assertEqual(config.weight_win_rate, 0.4)
        self.assertTrue(config.strict)

    def test_explicit_overrides_win(self):
        config = load_config({"PTCG_META_MIN_DECK_GAMES": "100"}, min_deck_games=30, strict=None)
        self.assertEqual(config.min_deck_games, 30)
        self.assertFalse(config.strict)

    def test_unparseable_value(self):
        with self.assertRaises(ConfigurationError):
            load_config({"PTCG_META_MIN_DECK_GAMES": "lots"})
        with self.assertRaises(ConfigurationError):
            load_config({"PTCG_META_STRICT": "maybe"})

    def test_invalid_value_fails_validation(self):
        with self.assertRaises(ConfigurationError):
            load_config({"PTCG_META_MIN_MATCHUP_GAMES": "-3"})

    def test_process_environment_loads_dotenv(self):
        with patch("ptcg_meta.config.load_dotenv") as mock_load, \
                patch.dict("os.environ", {"PTCG_META_INSIGHT_SIZE": "3"}):
            config = load_config()
        mock_load.assert_called_once()
        self.assertEqual(config.insight_size, 3)


class TestDataSource(unittest.TestCase):
    def test_default(self):
        self.assertEqual(data_source({}), DEFAULT_DATA_SOURCE)

    def test_from_environment(self):
        url = "https://example.com/matchups.csv"
        self.assertEqual(data_source({"PTCG_META_DATA": url}), url)


if __name__ == "__main__":
    unittest.main()
