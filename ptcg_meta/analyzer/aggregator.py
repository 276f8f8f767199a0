"""
Meta aggregation: head-to-head match records to ranked, tiered deck statistics.
"""
from collections import defaultdict
from typing import Iterable, Mapping, Optional, Union

from ..config import AggregatorConfig
from ..errors import InvalidInput, MalformedRecord
from ..loader.models import (
    TIERS,
    AggregationResult,
    DeckAggregate,
    MatchRecord,
    MatchupEntry,
    MatchupInsight,
    RankPosition,
)


RecordLike = Union[MatchRecord, Mapping]


class MetaAggregator:
    """
    Turns pairwise match records into per-deck statistics, a ranking,
    S-F tiers and matchup insights.

    Instances hold only their configuration, so one aggregator can be
    shared between callers and threads.
    """

    # Upper bound of the percentile position (index / count) for each tier;
    # anything beyond the last bound is F.
    TIER_CUTOFFS = (
        (0.10, "S"),
        (0.25, "A"),
        (0.50, "B"),
        (0.75, "C"),
        (0.90, "D"),
    )

    def __init__(self, config: Optional[AggregatorConfig] = None):
        """
        Args:
            config: Thresholds and weights; defaults to AggregatorConfig()

        Raises:
            ConfigurationError: if the configuration is invalid
        """
        self.config = (config or AggregatorConfig()).validate()

    def aggregate(
        self, records: Iterable[RecordLike], skipped_upstream: int = 0
    ) -> AggregationResult:
        """
        Aggregate match records into an AggregationResult.

        Args:
            records: MatchRecord values, or raw rows that MatchRecord.from_row accepts
            skipped_upstream: Rows a parser already dropped, added to skipped_records

        Raises:
            InvalidInput: if there are no usable records or no deck reaches
                the minimum number of games
            MalformedRecord: for an unparseable row when config.strict is set
        """
        records = list(records)
        if not records:
            raise InvalidInput("no match records to aggregate")

        valid, skipped = self._validate(records)
        if not valid:
            raise InvalidInput(f"all {len(records)} match records were malformed")

        # Every valid record names known decks; only large enough samples
        # feed the statistics.
        known = set()
        qualifying = []
        for record in valid:
            known.add(record.deck_a)
            known.add(record.deck_b)
            if record.total >= self.config.min_matchup_games:
                qualifying.append(record)

        tallies = self._accumulate(qualifying)
        directions = self._merge_directions(qualifying)
        favorable = self._favorable_opponents(directions)
        aggregates = self._derive(tallies, favorable)
        if not aggregates:
            raise InvalidInput(
                f"no deck has at least {self.config.min_deck_games} games "
                f"(matchups need {self.config.min_matchup_games}+ games to count)"
            )

        # Both orders are computed once; every rank below is read from them.
        ranked = sorted(aggregates, key=lambda a: (-a.performance_score, -a.total_games, a.name))
        popular = sorted(aggregates, key=lambda a: (-a.meta_share, -a.total_games, a.name))
        popularity_index = {a.name: i for i, a in enumerate(popular)}

        count = len(ranked)
        tiers: dict[str, dict[str, DeckAggregate]] = {tier: {} for tier in TIERS}
        deck_tiers = {}
        for index, agg in enumerate(ranked):
            tier = self.tier_for(index, count)
            tiers[tier][agg.name] = agg
            deck_tiers[agg.name] = tier

        matchups = self._build_matchups(directions)

        insights = {}
        size = self.config.insight_size
        for index, agg in enumerate(ranked):
            opponents = [m for m in matchups.get(agg.name, ()) if m.opponent != agg.name]
            pop_index = popularity_index[agg.name]
            insights[agg.name] = MatchupInsight(
                best_matchups=tuple(opponents[:size]),
                worst_matchups=tuple(reversed(opponents[-size:])),
                tier=deck_tiers[agg.name],
                meta_position=index + 1,
                total_decks=count,
                popularity=RankPosition(pop_index + 1, round(pop_index / count * 100, 1)),
                performance=RankPosition(index + 1, round(index / count * 100, 1)),
            )

        deck_details = {agg.name: agg for agg in ranked}
        return AggregationResult(
            tiers=tiers,
            deck_details=deck_details,
            matchups=matchups,
            insights=insights,
            ranking=tuple(deck_details),
            known_decks=tuple(sorted(known)),
            excluded_decks=tuple(sorted(known - deck_details.keys())),
            skipped_records=skipped + skipped_upstream,
        )

    @classmethod
    def tier_for(cls, index: int, count: int) -> str:
        """Tier of the deck at 0-based *index* in a ranking of *count* decks."""
        position = index / count
        for cutoff, tier in cls.TIER_CUTOFFS:
            if position <= cutoff:
                return tier
        return "F"

    # ------------------------------------------------------------------ #
    #  Steps
    # ------------------------------------------------------------------ #

    def _validate(self, records: list) -> tuple[list[MatchRecord], int]:
        valid = []
        skipped = 0
        for number, item in enumerate(records, 1):
            if isinstance(item, MatchRecord):
                valid.append(item)
                continue
            try:
                if not isinstance(item, Mapping):
                    raise MalformedRecord(f"unsupported record type {type(item).__name__}", row=number)
                valid.append(MatchRecord.from_row(item, row_number=number))
            except MalformedRecord:
                if self.config.strict:
                    raise
                skipped += 1
        return valid, skipped

    @staticmethod
    def _accumulate(records: list[MatchRecord]) -> dict[str, dict]:
        """
        Sum games, wins, losses and ties per deck.

        A mirror record is credited once in full. Otherwise each side gets
        half of every count (floor), with deck_b's wins and losses swapped.
        """
        tallies: dict[str, dict] = defaultdict(lambda: {
            "games": 0,
            "wins": 0,
            "losses": 0,
            "ties": 0,
        })

        for record in records:
            side_a = tallies[record.deck_a]
            if record.is_mirror:
                side_a["games"] += record.total
                side_a["wins"] += record.wins
                side_a["losses"] += record.losses
                side_a["ties"] += record.ties
                continue

            side_b = tallies[record.deck_b]
            half_games = record.total // 2
            half_wins = record.wins // 2
            half_losses = record.losses // 2
            half_ties = record.ties // 2

            side_a["games"] += half_games
            side_a["wins"] += half_wins
            side_a["losses"] += half_losses
            side_a["ties"] += half_ties

            side_b["games"] += half_games
            side_b["wins"] += half_losses
            side_b["losses"] += half_wins
            side_b["ties"] += half_ties

        return tallies

    @staticmethod
    def _merge_directions(records: list[MatchRecord]) -> dict[tuple[str, str], tuple[float, int]]:
        """
        One (win_rate, games) per recorded (deck, opponent) direction.

        Duplicate records for the same direction are merged: games summed,
        win rate weighted by games.
        """
        samples: dict[tuple[str, str], list] = defaultdict(list)
        for record in records:
            samples[(record.deck_a, record.deck_b)].append((record.win_rate, record.total))

        merged = {}
        for key, values in samples.items():
            games = sum(total for _, total in values)
            if games:
                win_rate = sum(rate * total for rate, total in values) / games
            else:
                win_rate = sum(rate for rate, _ in values) / len(values)
            merged[key] = (win_rate, games)
        return merged

    def _favorable_opponents(self, directions: dict) -> dict[str, set]:
        """Distinct opponents each deck is favored against, judged once per direction."""
        favorable: dict[str, set] = defaultdict(set)
        for (deck, opponent), (win_rate, _) in directions.items():
            if deck == opponent:
                continue
            if win_rate > self.config.favorable_above:
                favorable[deck].add(opponent)
            elif win_rate < self.config.unfavorable_below:
                favorable[opponent].add(deck)
        return favorable

    def _derive(self, tallies: dict[str, dict], favorable: dict[str, set]) -> list[DeckAggregate]:
        cfg = self.config
        eligible = {
            name: t for name, t in tallies.items()
            if t["games"] >= cfg.min_deck_games
        }
        total_games = sum(t["games"] for t in eligible.values())

        aggregates = []
        for name, t in eligible.items():
            decided = t["wins"] + t["losses"]
            win_rate = t["wins"] * 100 / decided if decided else 0.0
            meta_share = t["games"] * 100 / total_games if total_games else 0.0
            favorable_count = len(favorable.get(name, ()))
            aggregates.append(DeckAggregate(
                name=name,
                total_games=t["games"],
                wins=t["wins"],
                losses=t["losses"],
                ties=t["ties"],
                favorable_matchup_count=favorable_count,
                win_rate=win_rate,
                meta_share=meta_share,
                performance_score=(
                    win_rate * cfg.weight_win_rate
                    + meta_share * cfg.weight_meta_share
                    + favorable_count * cfg.weight_favorable
                ),
            ))
        return aggregates

    @staticmethod
    def _build_matchups(directions: dict) -> dict[str, tuple[MatchupEntry, ...]]:
        """
        Opponent list per deck, best win rate first.

        A direction with no record of its own is mirrored from the other
        one with a complemented win rate.
        """
        merged = dict(directions)
        for (deck, opponent), (win_rate, games) in directions.items():
            if deck != opponent and (opponent, deck) not in merged:
                merged[(opponent, deck)] = (100 - win_rate, games)

        by_deck: dict[str, list[MatchupEntry]] = defaultdict(list)
        for (deck, opponent), (win_rate, games) in merged.items():
            by_deck[deck].append(MatchupEntry(opponent=opponent, win_rate=win_rate, games=games))

        return {
            deck: tuple(sorted(entries, key=lambda m: (-m.win_rate, -m.games, m.opponent)))
            for deck, entries in sorted(by_deck.items())
        }
