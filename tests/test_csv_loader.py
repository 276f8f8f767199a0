import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

from ptcg_meta.errors import DataSourceError, InvalidInput, MalformedRecord
from ptcg_meta.loader.csv_loader import MatchupLoader


CSV_TEXT = """deck1,deck2,wins,losses,ties,total,win_rate
mewtwo-ex,pikachu-ex,60,40,0,100,60.0
pikachu-ex,mewtwo-ex,40,60,0,100,40.0
mewtwo-ex,mewtwo-ex,25,25,2,52,50.0
"""


class TestParseText(unittest.TestCase):
    def test_parses_rows(self):
        parsed = MatchupLoader.parse_text(CSV_TEXT)
        self.assertEqual(len(parsed.records), 3)
        self.assertEqual(parsed.skipped, 0)

        first = parsed.records[0]
        self.assertEqual((first.deck_a, first.deck_b), ("mewtwo-ex", "pikachu-ex"))
        self.assertEqual((first.wins, first.losses, first.ties, first.total), (60, 40, 0, 100))
        self.assertEqual(first.win_rate, 60.0)
        self.assertTrue(parsed.records[2].is_mirror)

    def test_header_is_normalized(self):
        text = "\ufeffDeck1, Deck2 ,WINS,losses,ties,total,Win_Rate\nA,B,1,2,0,3,33.3\n"
        parsed = MatchupLoader.parse_text(text)
        self.assertEqual(parsed.records[0].deck_b, "B")

    def test_header_aliases(self):
        text = "deck_a,deck_b,wins,losses,ties,total,winRate\nA,B,60,40,0,100,60\n"
        parsed = MatchupLoader.parse_text(text)
        record = parsed.records[0]
        self.assertEqual((record.deck_a, record.deck_b), ("A", "B"))
        self.assertEqual(record.win_rate, 60.0)
        self.assertEqual(parsed.skipped, 0)

    def test_blank_lines_are_ignored(self):
        parsed = MatchupLoader.parse_text(CSV_TEXT + "\n\n")
        self.assertEqual(len(parsed.records), 3)
        self.assertEqual(parsed.skipped, 0)

    def test_bad_rows_are_skipped_and_counted(self):
        text = CSV_TEXT + (
            "gardevoir-ex,mewtwo-ex,abc,40,0,100,60.0\n"
            "gardevoir-ex,mewtwo-ex,10\n"
            "gardevoir-ex,mewtwo-ex,1,2,3,6,16.7,extra\n"
        )
        parsed = MatchupLoader.parse_text(text)
        self.assertEqual(len(parsed.records), 3)
        self.assertEqual(parsed.skipped, 3)

    def test_missing_win_rate_is_recomputed(self):
        parsed = MatchupLoader.parse_text(
            "deck1,deck2,wins,losses,ties,total,win_rate\nA,B,3,1,0,4,\n"
        )
        self.assertEqual(parsed.records[0].win_rate, 75.0)

    def test_strict_mode_raises(self):
        text = CSV_TEXT + "gardevoir-ex,mewtwo-ex,abc,40,0,100,60.0\n"
        with self.assertRaises(MalformedRecord) as ctx:
            MatchupLoader.parse_text(text, strict=True)
        self.assertEqual(ctx.exception.row, 4)

    def test_missing_columns(self):
        with self.assertRaises(InvalidInput):
            MatchupLoader.parse_text("deck1,deck2,wins\nA,B,1\n")

    def test_empty_text(self):
        with self.assertRaises(InvalidInput):
            MatchupLoader.parse_text("")

    def test_header_only(self):
        parsed = MatchupLoader.parse_text("deck1,deck2,wins,losses,ties,total,win_rate\n")
        self.assertEqual(parsed.records, [])


class TestLoad(unittest.TestCase):
    def test_load_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "matchups.csv")
            with open(path, "w", encoding="utf-8") as f:
                f.write(CSV_TEXT)
            parsed = MatchupLoader(path).load()
        self.assertEqual(len(parsed.records), 3)

    def test_missing_file(self):
        with self.assertRaises(DataSourceError):
            MatchupLoader("/nonexistent/matchups.csv").load()

    def test_load_from_url(self):
        loader = MatchupLoader("https://example.com/matchups.csv", timeout=3)
        response = MagicMock()
        response.text = CSV_TEXT
        response.encoding = "utf-8"
        with patch.object(loader.session, "get", return_value=response) as mock_get:
            parsed = loader.load()

        mock_get.assert_called_once_with("https://example.com/matchups.csv", timeout=3)
        response.raise_for_status.assert_called_once()
        self.assertEqual(len(parsed.records), 3)

    def test_http_failure(self):
        loader = MatchupLoader("http://example.com/matchups.csv")
        with patch.object(loader.session, "get", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(DataSourceError):
                loader.load()


if __name__ == "__main__":
    unittest.main()
