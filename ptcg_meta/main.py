"""
CLI entry point for PTCG Meta statistics.
"""
import argparse
import json
import sys

from .errors import MetaError


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="ptcg-meta",
        description="PTCG Meta Statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ptcg_meta.main analyze --source data/matchups.csv   # Tier list summary
  python -m ptcg_meta.main analyze --deck mewtwo-ex              # One deck in detail
  python -m ptcg_meta.main matchups --top 8                      # Matchup matrix
  python -m ptcg_meta.main web                                   # Start JSON API
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Show tier list and deck statistics")
    _add_source_arguments(analyze_parser)
    analyze_parser.add_argument(
        "--deck", "-d",
        type=str,
        help="Show detail for a specific deck (name or slug)"
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON"
    )
    analyze_parser.add_argument(
        "--min-matchup-games",
        type=int,
        help="Minimum games for a matchup record to count (default: 10)"
    )
    analyze_parser.add_argument(
        "--min-deck-games",
        type=int,
        help="Minimum games for a deck to be ranked (default: 50)"
    )

    # Matchups command
    matchups_parser = subparsers.add_parser("matchups", help="Show matchup matrix")
    _add_source_arguments(matchups_parser)
    matchups_parser.add_argument(
        "--top", "-t",
        type=int,
        default=8,
        help="Number of most played decks to include (default: 8)"
    )

    # Web command
    web_parser = subparsers.add_parser("web", help="Start web API")
    web_parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    web_parser.add_argument(
        "--port", "-p",
        type=int,
        default=5000,
        help="Port to bind to (default: 5000)"
    )
    web_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    args = parser.parse_args(argv)

    try:
        if args.command == "analyze":
            if run_analyze(args):
                return 1
        elif args.command == "matchups":
            run_matchups(args)
        elif args.command == "web":
            run_web(args)
        else:
            parser.print_help()
    except MetaError as e:
        print(f"❌ {e}")
        return 1
    return 0


def _add_source_arguments(subparser):
    subparser.add_argument(
        "--source", "-s",
        type=str,
        help="CSV file path or URL (default: $PTCG_META_DATA or data/matchups.csv)"
    )
    subparser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first malformed row instead of skipping it"
    )


def _load_result(args, **overrides):
    """Load the dataset and aggregate it with the configured settings."""
    from .analyzer.aggregator import MetaAggregator
    from .config import data_source, load_config
    from .loader.csv_loader import MatchupLoader

    config = load_config(strict=args.strict or None, **overrides)
    source = args.source or data_source()

    parsed = MatchupLoader(source).load(strict=config.strict)
    result = MetaAggregator(config).aggregate(parsed.records, skipped_upstream=parsed.skipped)
    return config, result


def run_analyze(args):
    """Run aggregation and print summary. Returns 1 if --deck names no ranked deck."""
    from .analyzer.matchups import MatchupAnalyzer
    from .analyzer.meta_insight import MetaInsightAnalyzer
    from .formatting import format_deck_name, resolve_deck_name

    config, result = _load_result(
        args,
        min_matchup_games=args.min_matchup_games,
        min_deck_games=args.min_deck_games,
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if args.deck:
        deck = resolve_deck_name(result.deck_details, args.deck)
        if deck is None:
            print(f"❌ Deck not found among ranked decks: {args.deck}")
            return 1

        stats = result.deck_details[deck]
        insight = result.insights[deck]
        print(f"\n📊 {format_deck_name(deck)} Analysis")
        print("=" * 50)
        print(f"   Tier: {insight.tier} (#{insight.meta_position} of {insight.total_decks})")
        print(f"   Games: {stats.total_games}")
        print(f"   Win Rate: {stats.win_rate:.1f}%")
        print(f"   Meta Share: {stats.meta_share:.1f}%")
        print(f"   Favorable Matchups: {stats.favorable_matchup_count}")
        print(f"   Performance Score: {stats.performance_score:.1f}")
        print(f"   Popularity: #{insight.popularity.rank} ({insight.popularity.percentile:.1f} pct)")

        if insight.best_matchups:
            print(f"\n✅ Best Matchups:")
            for m in insight.best_matchups:
                print(f"   vs {m.opponent}: {m.win_rate:.1f}% ({m.games} games)")

        if insight.worst_matchups:
            print(f"\n❌ Worst Matchups:")
            for m in insight.worst_matchups:
                print(f"   vs {m.opponent}: {m.win_rate:.1f}% ({m.games} games)")

        matchups = MatchupAnalyzer(result, config).get_deck_matchups(deck)
        print(f"\n   Favorable {len(matchups['favorable'])} | "
              f"Even {len(matchups['even'])} | Unfavorable {len(matchups['unfavorable'])}")
        return

    insight = MetaInsightAnalyzer(result, config)
    overview = insight.get_overview()
    health = insight.calculate_meta_health()

    print(f"\n📊 PTCG Meta Summary")
    print("=" * 50)
    print(f"Ranked Decks: {overview['total_decks']} (of {overview['known_decks']} seen)")
    print(f"Total Games: {overview['total_games']}")
    print(f"Average Win Rate: {overview['average_win_rate']}%")
    print(f"Meta Health: {health['label']} (Simpson {health['diversity_index']})")
    if overview["skipped_records"]:
        print(f"⚠️ Skipped {overview['skipped_records']} malformed records")

    for tier, decks in insight.get_tier_list().items():
        if not decks:
            continue
        print(f"\n🏆 Tier {tier}:")
        for d in decks:
            print(f"   {d['display_name']}")
            print(f"       Score: {d['performance_score']} | Win: {d['win_rate']}% | "
                  f"Share: {d['meta_share']}% | Favorable: {d['favorable_matchups']}")


def run_matchups(args):
    """Print the matchup matrix for the most played decks."""
    from .analyzer.matchups import MatchupAnalyzer

    config, result = _load_result(args)
    matrix = MatchupAnalyzer(result, config).get_matchup_matrix(args.top)
    decks = matrix["decks"]

    width = max([len(d) for d in decks] + [4])
    print(" " * width + " | " + " | ".join(f"{i + 1:>5}" for i in range(len(decks))))
    for i, deck in enumerate(decks):
        cells = []
        for opponent in decks:
            cell = matrix["matrix"][deck][opponent]
            cells.append(f"{cell['win_rate']:>5.1f}" if cell["games"] else "    -")
        print(f"{deck:<{width}} | " + " | ".join(cells) + f"   ({i + 1})")


def run_web(args):
    """Run the web API."""
    from .web.app import run

    print(f"🌐 Starting web API at http://{args.host}:{args.port}")
    run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    sys.exit(main())
