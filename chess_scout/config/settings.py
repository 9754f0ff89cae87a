# chess_scout/config/settings.py
"""
Configuration settings for the Chess Scout modeling pipeline, powered by Pydantic.

Every threshold the pipeline relies on lives here: phase boundaries, error
thresholds, the min/max ranges used to scale style scores, and the tables used
to convert online ratings into an over-the-board estimate. Values can be
overridden through environment variables with the `CHESS_SCOUT_` prefix.
"""
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PhaseBoundarySettingsModel(BaseModel):
    """Move-count boundaries between game phases (board state is not retained)."""
    opening_max_fullmoves: int = Field(12, description="Fullmoves at or before this number are 'Opening'.")
    middlegame_max_fullmoves: int = Field(30, description="Fullmoves after the opening and at or before this number are 'Middlegame'.")

    @model_validator(mode='after')
    def validate_boundaries_are_sorted(self) -> 'PhaseBoundarySettingsModel':
        if not 0 < self.opening_max_fullmoves < self.middlegame_max_fullmoves:
            raise ValueError("Configuration error: phase boundaries must satisfy 0 < opening < middlegame.")
        return self


class ErrorThresholdsModel(BaseModel):
    """
    Centipawn-loss thresholds for inaccuracies, mistakes and blunders.

    A move is an inaccuracy when its CPL exceeds `inaccuracy`, a mistake when
    it exceeds `mistake` and a blunder when it exceeds `blunder`. The tiers are
    nested: every blunder is also a mistake and every mistake an inaccuracy.
    """
    inaccuracy: int = Field(50, description="CPL above which a move is an inaccuracy.")
    mistake: int = Field(100, description="CPL above which a move is a mistake.")
    blunder: int = Field(300, description="CPL above which a move is a blunder.")

    @model_validator(mode='after')
    def validate_thresholds_are_sorted(self) -> 'ErrorThresholdsModel':
        if not 0 <= self.inaccuracy < self.mistake < self.blunder:
            raise ValueError("Configuration error: thresholds must satisfy 0 <= inaccuracy < mistake < blunder.")
        return self


class ScoreRangeModel(BaseModel):
    """A fixed raw-value range mapped linearly onto 0-100."""
    low: float
    high: float

    @model_validator(mode='after')
    def validate_range(self) -> 'ScoreRangeModel':
        if self.high <= self.low:
            raise ValueError("Configuration error: score range high must exceed low.")
        return self


class StyleSettingsModel(BaseModel):
    """Raw-signal ranges and weights for the four style scores."""
    capture_rate: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=0.08, high=0.30))
    sacrifices_per_game: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=0.0, high=0.5))
    opening_forcing_share: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=0.05, high=0.35))
    forcing_rate: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=0.10, high=0.40))
    avg_player_moves: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=20.0, high=50.0))
    exchanges_per_game: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=0.0, high=4.0))

    aggression_capture_weight: float = 0.5
    aggression_sacrifice_weight: float = 0.3
    aggression_opening_weight: float = 0.2
    positional_exchange_weight: float = 0.2

    sacrifice_min_material: int = Field(2, description="Minimum pawn-unit deficit of a recaptured capture to count as a sacrifice.")
    endgame_error_weight: float = Field(0.3, description="Share of the endgame score taken from the endgame error rate.")
    endgame_error_range: ScoreRangeModel = Field(default_factory=lambda: ScoreRangeModel(low=0.0, high=0.25))
    min_phase_moves: int = Field(10, description="Evaluated endgame moves required before the error profile informs the endgame score.")

    confidence_saturation: int = Field(30, description="Sample size at which style confidence reaches 100.")
    medium_confidence_games: int = 30
    high_confidence_games: int = 100
    dampening_games: Optional[int] = Field(
        None, gt=0, description="Pseudo-games pulling small-sample scores toward 50; None disables dampening.",
    )


class TimeControlModel(BaseModel):
    """Offset and blend weight for one online time control."""
    offset: int
    weight: float


def _default_conversion_table() -> List[Tuple[int, int]]:
    # (online rating, FIDE-equivalent) anchor points, interpolated linearly.
    return [
        (600, 750), (800, 1000), (1000, 1250), (1200, 1420), (1500, 1575),
        (1800, 1750), (2000, 1900), (2200, 2100), (2500, 2400),
    ]


def _default_time_controls() -> Dict[str, TimeControlModel]:
    return {
        "bullet": TimeControlModel(offset=-50, weight=0.5),
        "blitz": TimeControlModel(offset=0, weight=1.5),
        "rapid": TimeControlModel(offset=30, weight=2.5),
        "classical": TimeControlModel(offset=50, weight=3.0),
    }


class RatingSettingsModel(BaseModel):
    """Tables and constants for the over-the-board rating estimate."""
    conversion_table: List[Tuple[int, int]] = Field(default_factory=_default_conversion_table)
    time_controls: Dict[str, TimeControlModel] = Field(default_factory=_default_time_controls)
    blunder_penalty: float = Field(1000.0, description="Rating points subtracted per unit of overall blunder rate.")

    acpl_intercept: float = 4034.0
    acpl_slope: float = 667.0
    min_rating: int = 300
    max_rating: int = 3000

    full_confidence_moves: int = Field(500, description="Evaluated moves at which the engine component saturates.")
    full_confidence_games: int = Field(30, description="Style sample size at which the games component saturates.")
    engine_confidence_points: int = 40
    games_confidence_points: int = 30
    rating_confidence_points: int = 30
    max_confidence: int = 95
    engine_only_max_confidence: int = 60

    @model_validator(mode='after')
    def validate_conversion_table(self) -> 'RatingSettingsModel':
        online = [point[0] for point in self.conversion_table]
        if len(online) < 2 or online != sorted(online):
            raise ValueError("Configuration error: the conversion table needs at least two ascending anchor points.")
        return self


class TrieSettingsModel(BaseModel):
    """Limits applied when building and sampling the repertoire trie."""
    max_ply: Optional[int] = Field(None, description="Plies kept per game; None keeps the whole game.")
    min_games: int = Field(3, description="Minimum node visits before a bot samples from it.")


class ModelingSettings(BaseModel):
    """Groups all settings related to the opponent-modeling pipeline."""
    phaser: PhaseBoundarySettingsModel = Field(default_factory=PhaseBoundarySettingsModel)
    error_thresholds: ErrorThresholdsModel = Field(default_factory=ErrorThresholdsModel)
    style: StyleSettingsModel = Field(default_factory=StyleSettingsModel)
    rating: RatingSettingsModel = Field(default_factory=RatingSettingsModel)
    trie: TrieSettingsModel = Field(default_factory=TrieSettingsModel)

    mate_score_equivalent_cp: int = Field(10000, description="Centipawn value assigned to a forced mate.")
    initial_eval_cp: int = Field(15, description="Assumed evaluation of the starting position.")


# --- Main Application Settings Class ---

class Settings(BaseSettings):
    """
    Main configuration class for the application.

    It loads settings from environment variables with the prefix 'CHESS_SCOUT_'.
    Nested models can be configured using a double underscore delimiter, e.g.,
    `CHESS_SCOUT_MODELING__ERROR_THRESHOLDS__BLUNDER=250`.
    """
    model_config = SettingsConfigDict(env_prefix='CHESS_SCOUT_', env_nested_delimiter='__')

    modeling: ModelingSettings = Field(default_factory=ModelingSettings)
    default_log_level: str = "INFO"
    log_json: bool = False


# A singleton instance of the settings, accessible throughout the application.
settings = Settings()
