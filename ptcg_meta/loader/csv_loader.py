"""
Loader for head-to-head matchup exports (deck1,deck2,wins,losses,ties,total,win_rate).
"""
import io
from pathlib import Path

import pandas as pd
import requests

from ..errors import DataSourceError, InvalidInput, MalformedRecord
from .models import MatchRecord, ParsedMatchups


class MatchupLoader:
    """Reads matchup CSV data from a local file or an http(s) URL."""

    COLUMNS = ("deck1", "deck2", "wins", "losses", "ties", "total", "win_rate")
    COLUMN_ALIASES = {"deck_a": "deck1", "deck_b": "deck2", "winrate": "win_rate"}

    def __init__(self, source: str, timeout: float = 10.0):
        """
        Initialize the loader.

        Args:
            source: File path or http(s) URL of the CSV export
            timeout: Request timeout in seconds for URL sources
        """
        self.source = str(source)
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "PTCG-Meta/1.0 (Meta Statistics)"
        })

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def _get(self, url: str) -> str:
        """Fetch a URL and return its body as text."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DataSourceError(f"could not fetch {url}: {exc}") from exc
        response.encoding = response.encoding or "utf-8"
        return response.text

    def read_text(self) -> str:
        """Return the raw CSV text of the source."""
        if self.is_remote:
            return self._get(self.source)

        path = Path(self.source)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise DataSourceError(f"matchup file not found: {path}") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise DataSourceError(f"could not read {path}: {exc}") from exc

    def load(self, strict: bool = False) -> ParsedMatchups:
        """Read and parse the source."""
        return self.parse_text(self.read_text(), strict=strict)

    @classmethod
    def parse_text(cls, text: str, strict: bool = False) -> ParsedMatchups:
        """
        Parse CSV text into validated MatchRecords.

        Rows with the wrong number of fields or unparseable values are
        skipped and counted, unless *strict* is set.

        Raises:
            InvalidInput: if the text is empty or lacks a required column
            MalformedRecord: for the first bad row when *strict* is set
        """
        result = ParsedMatchups()

        def _bad_line(fields: list) -> None:
            if strict:
                raise MalformedRecord(f"expected {len(cls.COLUMNS)} fields, got {len(fields)}")
            result.skipped += 1
            return None

        try:
            frame = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                skipinitialspace=True,
                engine="python",
                on_bad_lines=_bad_line,
            )
        except pd.errors.EmptyDataError:
            raise InvalidInput("matchup data is empty") from None
        except pd.errors.ParserError as exc:
            raise InvalidInput(f"matchup data is not valid CSV: {exc}") from exc

        headers = [str(c).strip().lstrip("\ufeff").lower() for c in frame.columns]
        frame.columns = [cls.COLUMN_ALIASES.get(h, h) for h in headers]
        missing = [c for c in cls.COLUMNS if c not in frame.columns]
        if missing:
            raise InvalidInput(f"matchup data is missing columns: {', '.join(missing)}")

        rows = frame[list(cls.COLUMNS)].fillna("").to_dict(orient="records")
        for number, row in enumerate(rows, 1):
            try:
                result.records.append(MatchRecord.from_row(row, row_number=number))
            except MalformedRecord:
                if strict:
                    raise
                result.skipped += 1

        return result
