"""Shared matchup export used by the analyzer, web and CLI tests."""

SAMPLE_CSV = """deck1,deck2,wins,losses,ties,total,win_rate
mewtwo-ex,pikachu-ex,60,40,0,100,60.0
pikachu-ex,mewtwo-ex,40,60,0,100,40.0
mewtwo-ex,charizard-ex-arcanine,45,55,0,100,45.0
charizard-ex-arcanine,mewtwo-ex,55,45,0,100,55.0
pikachu-ex,charizard-ex-arcanine,70,30,0,100,70.0
charizard-ex-arcanine,pikachu-ex,30,70,0,100,30.0
gardevoir-ex,mewtwo-ex,30,20,0,50,60.0
gardevoir-ex,pikachu-ex,50,50,0,100,50.0
mewtwo-ex,mewtwo-ex,20,20,2,42,50.0
small-deck,mewtwo-ex,3,2,0,5,60.0
"""

# Games credited to each ranked deck by SAMPLE_CSV
SAMPLE_GAMES = {
    "mewtwo-ex": 267,
    "pikachu-ex": 250,
    "charizard-ex-arcanine": 200,
    "gardevoir-ex": 75,
}
