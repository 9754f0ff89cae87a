# tests/core/test_opening_trie.py
import random

import pytest

from chess_scout.core.opening_trie import (
    build_trie,
    is_player_depth,
    lookup,
    most_played_reply,
    ranked_replies,
    sample_reply,
)
from chess_scout.types import Color, GameRecord, GameResult, OutcomeTally, TrieNode


def _game(moves: str, result: GameResult, color: Color = Color.WHITE) -> GameRecord:
    return GameRecord(moves=tuple(moves.split()), player_color=color, result=result)


def _three_game_batch():
    return [
        _game("e4 e5 Nf3", GameResult.DRAW),
        _game("e4 e5 Nf3", GameResult.WIN),
        _game("d4 d5", GameResult.LOSS),
    ]


def test_trie_scenario_counts_and_outcomes():
    # Act
    trie = build_trie(_three_game_batch(), Color.WHITE)

    # Assert
    root = trie.root
    assert root.visit_count == 3
    assert list(root.children) == ["e4", "d4"]
    assert root.children["e4"].visit_count == 2
    assert root.children["e4"].outcome_tally == OutcomeTally(wins=1, losses=0, draws=1)
    assert root.children["d4"].visit_count == 1
    assert root.children["d4"].outcome_tally == OutcomeTally(wins=0, losses=1, draws=0)


def test_node_win_rate():
    trie = build_trie(_three_game_batch(), Color.WHITE)

    assert trie.root.children["e4"].win_rate == 0.5
    assert trie.root.children["d4"].win_rate == 0.0
    assert build_trie([], Color.WHITE).root.win_rate == 0.0


def test_root_count_only_includes_requested_color():
    # Arrange
    games = _three_game_batch() + [_game("e4 c5", GameResult.WIN, Color.BLACK)]

    # Act
    white = build_trie(games, Color.WHITE)
    black = build_trie(games, Color.BLACK)

    # Assert
    assert white.game_count == 3
    assert black.game_count == 1
    assert black.color is Color.BLACK
    assert "c5" in black.root.children["e4"].children


def test_visit_counts_are_conserved_down_the_tree():
    # Arrange
    games = _three_game_batch() + [_game("e4", GameResult.WIN), _game("e4 c5 Nf3 d6", GameResult.LOSS)]

    # Act
    trie = build_trie(games, Color.WHITE)

    # Assert
    for _, node in trie.root.walk():
        children_visits = sum(child.visit_count for child in node.children.values())
        assert node.visit_count == children_visits + node.terminal_count


def test_built_trie_is_read_only():
    # Arrange
    trie = build_trie(_three_game_batch(), Color.WHITE)
    e4 = trie.root.children["e4"]

    # Act & Assert
    with pytest.raises(TypeError):
        trie.root.children["c4"] = TrieNode(move="c4")
    with pytest.raises(TypeError):
        e4.children["d5"] = TrieNode(move="d5")
    assert list(trie.root.children) == ["e4", "d4"]
    assert lookup(trie, ["e4", "e5", "Nf3"]).children == {}


def test_build_is_deterministic():
    games = _three_game_batch()

    assert build_trie(games, Color.WHITE) == build_trie(games, Color.WHITE)


def test_max_ply_cuts_games_at_the_cap():
    # Act
    trie = build_trie(_three_game_batch(), Color.WHITE, max_ply=1)

    # Assert
    e4 = trie.root.children["e4"]
    assert e4.children == {}
    assert e4.terminal_count == 2


def test_empty_batch_gives_empty_root():
    trie = build_trie([], Color.WHITE)

    assert trie.game_count == 0
    assert trie.root.children == {}


def test_lookup_follows_a_line():
    trie = build_trie(_three_game_batch(), Color.WHITE)

    assert lookup(trie, ["e4", "e5"]).visit_count == 2
    assert lookup(trie, []) is trie.root
    assert lookup(trie, ["c4"]) is None


def test_most_played_reply_prefers_visits_then_first_inserted():
    # Arrange
    trie = build_trie(_three_game_batch(), Color.WHITE)
    tied = build_trie([_game("d4", GameResult.WIN), _game("e4", GameResult.WIN)], Color.WHITE)

    # Act & Assert
    assert most_played_reply(trie.root).move == "e4"
    assert most_played_reply(tied.root).move == "d4"
    assert [node.move for node in ranked_replies(tied.root)] == ["d4", "e4"]
    assert most_played_reply(lookup(trie, ["d4", "d5"])) is None


class _RecordingRng:
    def __init__(self):
        self.weights = None

    def choices(self, population, weights, k):
        self.weights = list(weights)
        return [population[-1]]


def test_sample_reply_weights_by_visit_count():
    # Arrange
    trie = build_trie(_three_game_batch(), Color.WHITE)
    rng = _RecordingRng()

    # Act
    reply = sample_reply(trie.root, rng=rng, min_games=3)

    # Assert
    assert rng.weights == [2, 1]
    assert reply.move == "d4"


def test_sample_reply_returns_none_out_of_book():
    trie = build_trie(_three_game_batch(), Color.WHITE)

    assert sample_reply(trie.root, min_games=4) is None
    assert sample_reply(lookup(trie, ["d4", "d5"]), min_games=0) is None


def test_sample_reply_with_seeded_rng_stays_in_book():
    trie = build_trie(_three_game_batch(), Color.WHITE)

    reply = sample_reply(trie.root, rng=random.Random(7), min_games=1)

    assert reply.move in trie.root.children


def test_is_player_depth():
    assert is_player_depth(1, Color.WHITE)
    assert not is_player_depth(2, Color.WHITE)
    assert is_player_depth(2, Color.BLACK)
    assert not is_player_depth(0, Color.BLACK)
