# tests/core/test_error_profile.py
from chess_scout.config.settings import ModelingSettings, PhaseBoundarySettingsModel
from chess_scout.core.error_profile import build_error_profile
from chess_scout.types import Color, GamePhase, GameRecord, GameResult


def _game(deltas, color: Color = Color.WHITE, moves: str = "e4 e5 Nf3 Nc6") -> GameRecord:
    return GameRecord(
        moves=tuple(moves.split()), player_color=color,
        result=GameResult.DRAW, eval_deltas=deltas,
    )


def test_games_without_evals_add_zero_samples():
    # Arrange
    games = [_game(None), _game(None, Color.BLACK)]

    # Act
    profile = build_error_profile(games)

    # Assert
    for phase in GamePhase:
        errors = profile.phase(phase)
        assert errors.sample_moves == 0
        assert errors.mistake_rate == 0.0
        assert errors.blunder_rate == 0.0
        assert errors.avg_cpl == 0.0
    assert profile.games_analyzed == 0
    assert profile.total_sample_moves == 0


def test_blunders_are_also_mistakes_and_opponent_plies_are_ignored():
    # Arrange: white plies lose 350 and 150, black plies lose 0 and 999.
    game = _game((350, 0, 150, 999))

    # Act
    opening = build_error_profile([game]).phase(GamePhase.OPENING)

    # Assert
    assert opening.sample_moves == 2
    assert opening.mistakes == 2
    assert opening.blunders == 1
    assert opening.total_cpl == 500
    assert opening.mistake_rate == 1.0
    assert opening.blunder_rate == 0.5


def test_thresholds_are_strict():
    # Arrange
    game = _game((100, 0, 300, 0))

    # Act
    opening = build_error_profile([game]).phase(GamePhase.OPENING)

    # Assert
    assert opening.inaccuracies == 2
    assert opening.mistakes == 1
    assert opening.blunders == 0


def test_inaccuracies_nest_mistakes_and_blunders():
    # Arrange
    game = _game((60, 0, 150, 0, 400, 0, 50, 0), moves="e4 e5 Nf3 Nc6 Bc4 Bc5 O-O Nf6")

    # Act
    opening = build_error_profile([game]).phase(GamePhase.OPENING)

    # Assert
    assert opening.sample_moves == 4
    assert opening.inaccuracies == 3
    assert opening.mistakes == 2
    assert opening.blunders == 1
    assert opening.error_rate == 0.75


def test_black_player_uses_odd_plies():
    profile = build_error_profile([_game((999, 120, 999, 0), Color.BLACK)])

    opening = profile.phase(GamePhase.OPENING)
    assert opening.sample_moves == 2
    assert opening.mistakes == 1
    assert opening.blunders == 0


def test_unevaluated_plies_are_skipped():
    profile = build_error_profile([_game((None, 0, 50, 0))])

    assert profile.phase(GamePhase.OPENING).sample_moves == 1
    assert profile.games_analyzed == 1


def test_moves_are_bucketed_by_phase():
    # Arrange
    settings = ModelingSettings(phaser=PhaseBoundarySettingsModel(opening_max_fullmoves=1, middlegame_max_fullmoves=2))
    game = _game((10, 0, 200, 0, 400, 0), moves="e4 e5 Nf3 Nc6 Bc4 Bc5")

    # Act
    profile = build_error_profile([game], settings)

    # Assert
    assert profile.phase(GamePhase.OPENING).sample_moves == 1
    assert profile.phase(GamePhase.MIDDLEGAME).mistakes == 1
    assert profile.phase(GamePhase.ENDGAME).blunders == 1
    assert profile.overall.sample_moves == 3
    assert profile.overall.total_cpl == 610


def test_games_analyzed_counts_contributing_games_only():
    games = [_game((0, 0, 0, 0)), _game(()), _game(None)]

    profile = build_error_profile(games)

    assert profile.games_analyzed == 1
