"""
Matchup views over an aggregation result.
"""
from typing import Optional

from ..config import AggregatorConfig
from ..errors import InvalidInput
from ..loader.models import AggregationResult, MatchupEntry


class MatchupAnalyzer:
    """Analyzes matchups between ranked decks."""

    def __init__(self, result: AggregationResult, config: Optional[AggregatorConfig] = None):
        """
        Initialize with an aggregation result.

        Args:
            result: Output of MetaAggregator.aggregate
            config: Supplies the favorable/unfavorable thresholds
        """
        self.result = result
        self.config = config or AggregatorConfig()
        self._matrices: dict[int, dict] = {}

    def _lookup(self, deck: str) -> dict[str, MatchupEntry]:
        return {m.opponent: m for m in self.result.matchups.get(deck, ())}

    def get_top_decks(self, top_n: int = 8) -> list[str]:
        """Ranked decks with the most games, most played first."""
        decks = sorted(
            self.result.deck_details.values(),
            key=lambda d: (-d.total_games, d.name)
        )
        return [d.name for d in decks[:top_n]]

    def get_matchup_matrix(self, top_n: int = 8) -> dict:
        """
        Get matchup matrix for the top N decks by games played.

        Args:
            top_n: Number of decks to include

        Returns:
            Matrix data for visualization
        """
        if top_n in self._matrices:
            return self._matrices[top_n]

        top_decks = self.get_top_decks(top_n)

        matrix = {}
        for deck in top_decks:
            row = self._lookup(deck)
            matrix[deck] = {}
            for opponent in top_decks:
                entry = row.get(opponent)
                if entry and entry.games > 0:
                    matrix[deck][opponent] = {
                        "win_rate": round(entry.win_rate, 1),
                        "games": entry.games
                    }
                else:
                    matrix[deck][opponent] = {"win_rate": 50.0, "games": 0}

        self._matrices[top_n] = {
            "decks": top_decks,
            "matrix": matrix
        }
        return self._matrices[top_n]

    def get_heatmap_data(self, top_n: int = 8) -> dict:
        """Get data formatted for heatmap visualization."""
        matrix_data = self.get_matchup_matrix(top_n)
        decks = matrix_data["decks"]
        matrix = matrix_data["matrix"]

        values = []
        for deck in decks:
            values.append([matrix[deck][opponent]["win_rate"] for opponent in decks])

        return {
            "labels": decks,
            "values": values
        }

    def get_deck_matchups(self, deck: str) -> dict:
        """
        Get matchup data for a specific deck.

        Args:
            deck: Deck name as it appears in the result

        Returns:
            Dictionary with favorable, unfavorable, and even matchups

        Raises:
            InvalidInput: if the deck has no matchups in the result
        """
        if deck not in self.result.matchups:
            raise InvalidInput(f"no matchups recorded for {deck!r}")

        favorable = []
        unfavorable = []
        even = []

        for entry in self.result.matchups[deck]:
            if entry.opponent == deck:
                continue

            info = entry.to_dict()
            if entry.win_rate > self.config.favorable_above:
                favorable.append(info)
            elif entry.win_rate < self.config.unfavorable_below:
                unfavorable.append(info)
            else:
                even.append(info)

        # Result lists are already best-first; unfavorable reads worst-first
        unfavorable.reverse()

        return {
            "deck": deck,
            "favorable": favorable,
            "unfavorable": unfavorable,
            "even": even
        }
