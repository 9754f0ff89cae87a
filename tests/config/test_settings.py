# tests/config/test_settings.py
import pytest

from chess_scout.config.settings import ErrorThresholdsModel, RatingSettingsModel, ScoreRangeModel, Settings


def test_defaults():
    settings = Settings()

    assert settings.modeling.error_thresholds.mistake == 100
    assert settings.modeling.error_thresholds.blunder == 300
    assert settings.modeling.rating.time_controls["classical"].weight == 3.0


def test_nested_values_can_be_set_from_the_environment(monkeypatch):
    # Arrange
    monkeypatch.setenv("CHESS_SCOUT_MODELING__ERROR_THRESHOLDS__BLUNDER", "250")
    monkeypatch.setenv("CHESS_SCOUT_DEFAULT_LOG_LEVEL", "DEBUG")

    # Act
    settings = Settings()

    # Assert
    assert settings.modeling.error_thresholds.blunder == 250
    assert settings.default_log_level == "DEBUG"


def test_error_thresholds_must_be_ordered():
    with pytest.raises(ValueError):
        ErrorThresholdsModel(mistake=300, blunder=100)
    with pytest.raises(ValueError):
        ErrorThresholdsModel(inaccuracy=150, mistake=100, blunder=300)

    assert ErrorThresholdsModel().inaccuracy == 50


def test_score_range_must_not_be_empty():
    with pytest.raises(ValueError):
        ScoreRangeModel(low=1.0, high=1.0)


def test_style_dampening_is_off_by_default(monkeypatch):
    assert Settings().modeling.style.dampening_games is None

    monkeypatch.setenv("CHESS_SCOUT_MODELING__STYLE__DAMPENING_GAMES", "10")

    assert Settings().modeling.style.dampening_games == 10


def test_conversion_table_must_ascend():
    with pytest.raises(ValueError):
        RatingSettingsModel(conversion_table=[(1000, 1100), (800, 900)])
