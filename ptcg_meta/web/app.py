"""
Flask web application serving PTCG meta statistics as JSON.
"""
from flask import Flask, jsonify, request

from ..analyzer.matchups import MatchupAnalyzer
from ..analyzer.meta_insight import MetaInsightAnalyzer
from ..errors import InvalidInput, MalformedRecord, MetaError
from ..formatting import deck_slug, format_deck_name, resolve_deck_name
from .data_manager import DataManager


app = Flask(__name__)

data_manager = DataManager()


@app.errorhandler(MetaError)
def handle_meta_error(error: MetaError):
    """Report pipeline failures as JSON."""
    if isinstance(error, (InvalidInput, MalformedRecord)):
        return jsonify({"error": str(error)}), 422
    print(f"Error processing meta data: {error}")
    return jsonify({"error": "Failed to process meta data"}), 500


@app.route("/api/meta-data")
def api_meta_data():
    """Full aggregation: tiers, deck details, matchups and insights."""
    result = data_manager.get_result()
    return jsonify(result.to_dict())


@app.route("/api/overview")
def api_overview():
    """Get overview statistics."""
    result = data_manager.get_result()
    analyzer = MetaInsightAnalyzer(result, data_manager.config)

    return jsonify({
        **analyzer.get_overview(),
        "meta_health": analyzer.calculate_meta_health()
    })


@app.route("/api/meta-insight")
def api_meta_insight():
    """Get scoring method, tier list, and meta health data."""
    result = data_manager.get_result()
    analyzer = MetaInsightAnalyzer(result, data_manager.config)
    return jsonify(analyzer.get_full_insight())


@app.route("/api/matchups")
def api_matchups():
    """Get matchup matrix data."""
    result = data_manager.get_result()
    analyzer = MatchupAnalyzer(result, data_manager.config)

    top_n = request.args.get("top", 8, type=int)
    if top_n < 1:
        return jsonify({"error": "top must be a positive integer"}), 400

    return jsonify({
        "heatmap": analyzer.get_heatmap_data(top_n),
        "matrix": analyzer.get_matchup_matrix(top_n)
    })


@app.route("/api/deck/<path:name>")
def api_deck_detail(name: str):
    """Get detailed statistics for a single deck (by exact name or slug)."""
    result = data_manager.get_result()

    deck = resolve_deck_name(result.deck_details, name)
    if deck is None:
        return jsonify({"error": f"Deck not found: {name}"}), 404

    analyzer = MatchupAnalyzer(result, data_manager.config)
    matchups = analyzer.get_deck_matchups(deck) if deck in result.matchups else None

    return jsonify({
        "deck": deck,
        "slug": deck_slug(deck),
        "display_name": format_deck_name(deck),
        "stats": result.deck_details[deck].to_dict(),
        "insight": result.insights[deck].to_dict(),
        "matchups": matchups
    })


@app.route("/api/refresh", methods=["POST"])
def api_refresh():
    """Reload the matchup data and recompute the statistics."""
    parsed = data_manager.get_records(force_refresh=True)
    result = data_manager.get_result()

    return jsonify({
        "status": "success",
        "records": len(parsed.records),
        "skipped_records": result.skipped_records,
        "ranked_decks": len(result.ranking)
    })


def run(host: str = "127.0.0.1", port: int = 5000, debug: bool = True):
    """Run the Flask application."""
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run()
