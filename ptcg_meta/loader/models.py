"""
Data models for PTCG meta aggregation.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..errors import MalformedRecord


TIERS = ("S", "A", "B", "C", "D", "F")


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-blank value found under any of *keys*."""
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _parse_count(value: Any, field_name: str) -> int:
    """Coerce a game count to a non-negative int ("12", "12.0" and 12 are all fine)."""
    if isinstance(value, bool):
        raise MalformedRecord(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, int):
        count = value
    else:
        text = str(value).strip()
        try:
            count = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise MalformedRecord(f"{field_name} is not numeric: {value!r}") from None
            if not math.isfinite(number) or not number.is_integer():
                raise MalformedRecord(f"{field_name} is not a whole number: {value!r}")
            count = int(number)
    if count < 0:
        raise MalformedRecord(f"{field_name} must not be negative: {value!r}")
    return count


def _parse_rate(value: Any) -> float:
    if isinstance(value, bool):
        raise MalformedRecord(f"win_rate must be a number, got {value!r}")
    try:
        rate = float(str(value).strip())
    except ValueError:
        raise MalformedRecord(f"win_rate is not numeric: {value!r}") from None
    if not math.isfinite(rate):
        raise MalformedRecord(f"win_rate is not finite: {value!r}")
    return rate


@dataclass(frozen=True)
class MatchRecord:
    """
    One head-to-head sample between two decks.

    Counts are from deck_a's perspective; ``win_rate`` is deck_a's win
    percentage (0-100). ``total`` is trusted for share math and the
    win/loss/tie counts for rate math, so the two may disagree.
    """
    deck_a: str
    deck_b: str
    wins: int
    losses: int
    ties: int
    total: int
    win_rate: float

    def __post_init__(self):
        for name in ("deck_a", "deck_b"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise MalformedRecord(f"{name} must be a non-empty deck name")
        for name in ("wins", "losses", "ties", "total"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise MalformedRecord(f"{name} must be a non-negative integer, got {value!r}")
        rate = self.win_rate
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise MalformedRecord(f"win_rate must be a number, got {rate!r}")
        if not math.isfinite(rate) or not 0 <= rate <= 100:
            raise MalformedRecord(f"win_rate must be between 0 and 100, got {rate!r}")

    @property
    def is_mirror(self) -> bool:
        return self.deck_a == self.deck_b

    @classmethod
    def from_row(cls, row: Mapping[str, Any], row_number: Optional[int] = None) -> "MatchRecord":
        """
        Build a record from a loosely typed row.

        Args:
            row: Mapping with the CSV columns ``deck1, deck2, wins, losses,
                ties, total, win_rate`` (``deck_a``/``deck_b`` also accepted)
            row_number: Position of the row in its source, for error messages

        Raises:
            MalformedRecord: if a field is missing or not parseable
        """
        try:
            deck_a = _first(row, "deck1", "deck_a")
            deck_b = _first(row, "deck2", "deck_b")
            if deck_a is None or deck_b is None:
                raise MalformedRecord("both deck names are required")

            counts = {}
            for name in ("wins", "losses", "total"):
                value = _first(row, name)
                if value is None:
                    raise MalformedRecord(f"{name} is required")
                counts[name] = _parse_count(value, name)

            ties_value = _first(row, "ties")
            ties = 0 if ties_value is None else _parse_count(ties_value, "ties")

            rate_value = _first(row, "win_rate", "winRate")
            if rate_value is None:
                decided = counts["wins"] + counts["losses"]
                win_rate = counts["wins"] * 100 / decided if decided else 0.0
            else:
                win_rate = _parse_rate(rate_value)

            return cls(
                deck_a=str(deck_a).strip(),
                deck_b=str(deck_b).strip(),
                wins=counts["wins"],
                losses=counts["losses"],
                ties=ties,
                total=counts["total"],
                win_rate=win_rate,
            )
        except MalformedRecord as exc:
            if row_number is None or exc.row is not None:
                raise
            raise MalformedRecord(str(exc), row=row_number) from None


@dataclass(frozen=True)
class DeckAggregate:
    """Accumulated statistics for one deck."""
    name: str
    total_games: int
    wins: int
    losses: int
    ties: int
    favorable_matchup_count: int
    win_rate: float
    meta_share: float
    performance_score: float

    def to_dict(self) -> dict:
        return {
            "deck": self.name,
            "total_games": self.total_games,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "favorable_matchups": self.favorable_matchup_count,
            "win_rate": round(self.win_rate, 1),
            "meta_share": round(self.meta_share, 1),
            "performance_score": round(self.performance_score, 1),
        }


@dataclass(frozen=True)
class MatchupEntry:
    """A deck's result against one opponent."""
    opponent: str
    win_rate: float
    games: int

    def to_dict(self) -> dict:
        return {
            "opponent": self.opponent,
            "win_rate": round(self.win_rate, 1),
            "games": self.games,
        }


@dataclass(frozen=True)
class RankPosition:
    rank: int        # 1-indexed
    percentile: float  # (index / count) * 100, one decimal

    def to_dict(self) -> dict:
        return {"rank": self.rank, "percentile": f"{self.percentile:.1f}"}


@dataclass(frozen=True)
class MatchupInsight:
    """Best/worst opponents and standing of a single deck."""
    best_matchups: tuple[MatchupEntry, ...]
    worst_matchups: tuple[MatchupEntry, ...]
    tier: str
    meta_position: int
    total_decks: int
    popularity: RankPosition
    performance: RankPosition

    def to_dict(self) -> dict:
        return {
            "best_matchups": [m.to_dict() for m in self.best_matchups],
            "worst_matchups": [m.to_dict() for m in self.worst_matchups],
            "tier": self.tier,
            "meta_position": self.meta_position,
            "total_decks": self.total_decks,
            "popularity": self.popularity.to_dict(),
            "performance": self.performance.to_dict(),
        }


@dataclass(frozen=True)
class AggregationResult:
    """Everything a presentation layer needs from one aggregation run."""
    tiers: dict[str, dict[str, DeckAggregate]]
    deck_details: dict[str, DeckAggregate]
    matchups: dict[str, tuple[MatchupEntry, ...]]
    insights: dict[str, MatchupInsight]
    ranking: tuple[str, ...]
    known_decks: tuple[str, ...] = ()
    excluded_decks: tuple[str, ...] = ()
    skipped_records: int = 0

    def tier_of(self, deck: str) -> Optional[str]:
        insight = self.insights.get(deck)
        return insight.tier if insight else None

    def to_dict(self) -> dict:
        return {
            "tiers": {
                tier: {name: agg.to_dict() for name, agg in decks.items()}
                for tier, decks in self.tiers.items()
            },
            "deck_details": {name: agg.to_dict() for name, agg in self.deck_details.items()},
            "matchups": {
                name: [m.to_dict() for m in entries]
                for name, entries in self.matchups.items()
            },
            "insights": {name: i.to_dict() for name, i in self.insights.items()},
            "ranking": list(self.ranking),
            "known_decks": list(self.known_decks),
            "excluded_decks": list(self.excluded_decks),
            "skipped_records": self.skipped_records,
        }


@dataclass
class ParsedMatchups:
    """Records read from a delimited source, plus how many rows were dropped."""
    records: list[MatchRecord] = field(default_factory=list)
    skipped: int = 0
