"""
Meta overview built on top of an aggregation result.

Provides:
- Overview numbers (games, decks, top performer, average win rate)
- Meta Health Score (Simpson's Diversity Index)
- Tier list rows ready for display
"""
from typing import Any, Dict, List, Optional

from ..config import AggregatorConfig
from ..formatting import format_deck_name
from ..loader.models import AggregationResult
from .aggregator import MetaAggregator


class MetaInsightAnalyzer:
    """Summaries of the whole meta for dashboards and reports."""

    def __init__(self, result: AggregationResult, config: Optional[AggregatorConfig] = None):
        self.result = result
        self.config = config or AggregatorConfig()

    # ------------------------------------------------------------------ #
    #  Overview
    # ------------------------------------------------------------------ #

    def get_overview(self) -> Dict[str, Any]:
        """Headline numbers for the ranked decks."""
        decks = list(self.result.deck_details.values())
        total_games = sum(d.total_games for d in decks)
        average_win_rate = sum(d.win_rate for d in decks) / len(decks) if decks else 0

        top = decks[0] if decks else None
        top_performer = None
        if top:
            top_performer = {
                "deck": top.name,
                "display_name": format_deck_name(top.name),
                "performance_score": round(top.performance_score, 1),
                "meta_share": round(top.meta_share, 1),
                "favorable_matchups": top.favorable_matchup_count,
            }

        return {
            "total_games": total_games,
            "total_decks": len(decks),
            "known_decks": len(self.result.known_decks),
            "excluded_decks": len(self.result.excluded_decks),
            "top_performer": top_performer,
            "average_win_rate": round(average_win_rate, 1),
            "skipped_records": self.result.skipped_records,
        }

    # ------------------------------------------------------------------ #
    #  Meta Health
    # ------------------------------------------------------------------ #

    def calculate_meta_health(self) -> Dict[str, Any]:
        """
        Calculate meta health using Simpson's Diversity Index.

        Returns:
            Dictionary with diversity_index, dominance_pct, top3_concentration,
            ranked_decks, and a qualitative label.
        """
        shares = sorted(
            (d.meta_share / 100 for d in self.result.deck_details.values()),
            reverse=True,
        )
        if not shares:
            return {
                "diversity_index": 0,
                "dominance_pct": 0,
                "top3_concentration": 0,
                "ranked_decks": 0,
                "label": "no data",
            }

        # Simpson's Diversity Index: 1 - Σ(pi²)
        simpson = 1.0 - sum(p * p for p in shares)

        if simpson >= 0.85:
            label = "very healthy"
        elif simpson >= 0.70:
            label = "healthy"
        elif simpson >= 0.50:
            label = "somewhat concentrated"
        else:
            label = "highly concentrated"

        return {
            "diversity_index": round(simpson, 3),
            "dominance_pct": round(shares[0] * 100, 1),
            "top3_concentration": round(sum(shares[:3]) * 100, 1),
            "ranked_decks": len(shares),
            "label": label,
        }

    # ------------------------------------------------------------------ #
    #  Tier List
    # ------------------------------------------------------------------ #

    def get_tier_list(self) -> Dict[str, List[Dict]]:
        """Return ranked decks grouped by tier, best first within each tier."""
        tiers: Dict[str, List[Dict]] = {}
        for tier, decks in self.result.tiers.items():
            tiers[tier] = [
                {
                    "name": d.name,
                    "display_name": format_deck_name(d.name),
                    "performance_score": round(d.performance_score, 1),
                    "win_rate": round(d.win_rate, 1),
                    "meta_share": round(d.meta_share, 1),
                    "total_games": d.total_games,
                    "favorable_matchups": d.favorable_matchup_count,
                }
                for d in decks.values()
            ]
        return tiers

    # ------------------------------------------------------------------ #
    #  Combined API response
    # ------------------------------------------------------------------ #

    def get_full_insight(self) -> Dict[str, Any]:
        """Return combined insight data for the /api/meta-insight endpoint."""
        cutoffs = ", ".join(
            f"{tier}=top {int(cutoff * 100)}%" for cutoff, tier in MetaAggregator.TIER_CUTOFFS
        )
        return {
            "scoring_method": {
                "description": "weighted win rate, meta share and favorable matchups",
                "weights": {
                    "win_rate": self.config.weight_win_rate,
                    "meta_share": self.config.weight_meta_share,
                    "favorable_matchup": self.config.weight_favorable,
                },
                "favorable_band": {
                    "above": self.config.favorable_above,
                    "below": self.config.unfavorable_below,
                },
                "tier_rules": f"{cutoffs}, F=rest",
            },
            "overview": self.get_overview(),
            "tier_list": self.get_tier_list(),
            "meta_health": self.calculate_meta_health(),
        }
