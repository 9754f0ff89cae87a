# tests/core/test_openings.py
from typing import Optional

from chess_scout.core.openings import analyze_openings, opening_family
from chess_scout.types import Color, GameRecord, GameResult, OpeningInfo


def _game(name: Optional[str], eco: str, result: GameResult, color: Color = Color.WHITE) -> GameRecord:
    opening = OpeningInfo(eco=eco, name=name, family=opening_family(name)) if name else None
    return GameRecord(moves=("e4",), player_color=color, result=result, opening=opening)


def test_opening_family():
    assert opening_family("Italian Game: Giuoco Piano") == "Italian Game"
    assert opening_family("Sicilian Defense") == "Sicilian Defense"
    assert opening_family("  French Defense: Winawer Variation, Poisoned Pawn ") == "French Defense"


def test_analyze_openings_groups_by_family_and_color():
    # Arrange
    games = [
        _game("Italian Game: Giuoco Piano", "C50", GameResult.WIN),
        _game("Italian Game", "C50", GameResult.LOSS),
        _game("Italian Game: Two Knights Defense", "C55", GameResult.DRAW),
        _game("Queen's Gambit Declined", "D30", GameResult.WIN),
        _game("Sicilian Defense: Najdorf Variation", "B90", GameResult.LOSS, Color.BLACK),
        _game(None, "", GameResult.WIN),
    ]

    # Act
    openings = analyze_openings(games)

    # Assert
    italian = openings[Color.WHITE][0]
    assert italian.name == "Italian Game"
    assert italian.eco == "C50"
    assert italian.games == 3
    assert italian.pct == 75
    assert (italian.win_rate, italian.draw_rate, italian.loss_rate) == (33, 33, 33)
    assert [op.name for op in openings[Color.WHITE]] == ["Italian Game", "Queen's Gambit Declined"]
    assert openings[Color.BLACK][0].loss_rate == 100


def test_analyze_openings_min_games_filter():
    games = [
        _game("Italian Game", "C50", GameResult.WIN),
        _game("Italian Game", "C50", GameResult.WIN),
        _game("Queen's Gambit Declined", "D30", GameResult.WIN),
    ]

    openings = analyze_openings(games, min_games=2)

    assert [op.name for op in openings[Color.WHITE]] == ["Italian Game"]
    assert openings[Color.BLACK] == []
