# tests/output/test_wire_format.py
import json

import pytest

from chess_scout.core.opening_trie import build_trie
from chess_scout.exceptions import ReportGenerationError
from chess_scout.orchestration.profile_builder import build_profile
from chess_scout.output.wire_format import ProfileReportWriter, to_camel, to_wire
from chess_scout.types import (Color, ConfidenceLabel, ErrorProfile, GamePhase, GameRecord, GameResult,
                               PhaseErrors, PrepTip, Severity, Weakness)


@pytest.fixture
def profile():
    game = {
        "id": "g1",
        "variant": "standard",
        "speed": "blitz",
        "status": "mate",
        "winner": "white",
        "players": {"white": {"user": {"id": "alice"}}, "black": {"user": {"id": "bob"}}},
        "moves": "e4 e5 Qh5 Nc6 Bc4 Nf6 Qxf7#",
    }
    return build_profile("alice", [game], perfs={"rapid": {"rating": 1700}})


def test_to_camel():
    assert to_camel("sample_moves") == "sampleMoves"
    assert to_camel("avg_cpl") == "avgCpl"
    assert to_camel("games") == "games"
    assert to_camel("outcome_tally") == "outcomeTally"


def test_phase_errors_keep_exact_rates():
    # Act
    wire = to_wire(PhaseErrors(sample_moves=3, inaccuracies=2, mistakes=1, blunders=0, total_cpl=100))

    # Assert
    assert wire == {
        "sampleMoves": 3, "inaccuracies": 2, "mistakes": 1, "blunders": 0, "totalCpl": 100,
        "errorRate": 2 / 3, "mistakeRate": 1 / 3, "blunderRate": 0.0, "avgCpl": 100 / 3,
    }


def test_error_profile_has_phase_keys_and_overall():
    profile = ErrorProfile(phases={GamePhase.OPENING: PhaseErrors(sample_moves=2, mistakes=1)}, games_analyzed=1)

    wire = to_wire(profile)

    assert set(wire["phases"]) == {"opening"}
    assert wire["overall"]["sampleMoves"] == 2
    assert wire["gamesAnalyzed"] == 1


def test_enums_become_values():
    weakness = Weakness(
        area="Weak in Sicilian Defense", severity=Severity.CRITICAL, description="...", stat="80% loss rate",
        confidence=ConfidenceLabel.LOW, eco="B20", opening_name="Sicilian Defense", player_color=Color.BLACK,
    )

    wire = to_wire(weakness)

    assert wire["severity"] == "critical"
    assert wire["playerColor"] == "black"
    assert wire["openingName"] == "Sicilian Defense"


def test_prep_tips_are_plain_objects():
    wire = to_wire([PrepTip(title="Steer into endgames", description="Trade pieces.")])

    assert wire == [{"title": "Steer into endgames", "description": "Trade pieces."}]


def test_trie_children_are_keyed_by_move():
    # Arrange
    games = [GameRecord(moves=("e4", "e5"), player_color=Color.WHITE, result=GameResult.WIN)]

    # Act
    wire = to_wire(build_trie(games, Color.WHITE))

    # Assert
    assert wire["color"] == "white"
    e4 = wire["root"]["children"]["e4"]
    assert e4["visitCount"] == 1
    assert e4["outcomeTally"] == {"wins": 1, "losses": 0, "draws": 0}
    assert e4["children"]["e5"]["terminalCount"] == 1


def test_deep_trie_serializes():
    moves = ("Nf3", "Nf6", "Ng1", "Ng8") * 500
    trie = build_trie([GameRecord(moves=moves, player_color=Color.WHITE, result=GameResult.DRAW)], Color.WHITE)

    node = to_wire(trie)["root"]
    depth = 0
    while node["children"]:
        node = next(iter(node["children"].values()))
        depth += 1

    assert depth == len(moves)


def test_unsupported_objects_are_rejected():
    with pytest.raises(TypeError):
        to_wire(object())


def test_report_writer_writes_json(profile, tmp_path):
    # Arrange
    output_path = tmp_path / "reports" / "alice.json"

    # Act
    ProfileReportWriter().write(profile, output_path)

    # Assert
    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert data["username"] == "alice"
    assert data["analyzedGames"] == 1
    assert data["knownRatings"] == {"rapid": 1700}
    assert data["fideEstimate"]["rating"] > 0
    assert "blitz" in data["bySpeed"]
    assert data["tries"]["white"]["root"]["visitCount"] == 1
    assert isinstance(data["prepTips"], list)


def test_report_writer_raises_on_unwritable_path(profile, tmp_path):
    with pytest.raises(ReportGenerationError):
        ProfileReportWriter().write(profile, tmp_path)
