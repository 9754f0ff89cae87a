# chess_scout/core/rating_estimator.py
"""
Estimates an over-the-board (FIDE-equivalent) rating from weak signals.

Known online ratings are converted with a piecewise-linear anchor table plus a
per-time-control offset and blended, longer time controls weighted higher.
Without any known rating the estimate falls back to the average centipawn loss
of the evaluated moves. Either base is then pulled down by the overall blunder
rate.
"""
import math
from typing import List, Mapping, Optional, Sequence, Tuple

import structlog

from chess_scout.config.settings import ModelingSettings, RatingSettingsModel, settings as app_settings
from chess_scout.core.chess_utils import clamp
from chess_scout.exceptions import InsufficientData
from chess_scout.types import ErrorProfile, FideEstimate

logger = structlog.get_logger(__name__)


def online_to_otb(rating: float, conversion_table: Sequence[Tuple[int, int]]) -> float:
    """
    Interpolates an online rating onto the over-the-board scale.

    Outside the table the nearest anchor's offset is kept, so the mapping
    stays monotonic.
    """
    first_online, first_otb = conversion_table[0]
    if rating <= first_online:
        return rating + (first_otb - first_online)

    for (lo_online, lo_otb), (hi_online, hi_otb) in zip(conversion_table, conversion_table[1:]):
        if rating <= hi_online:
            fraction = (rating - lo_online) / (hi_online - lo_online)
            return lo_otb + fraction * (hi_otb - lo_otb)

    last_online, last_otb = conversion_table[-1]
    return rating + (last_otb - last_online)


def _blend_ratings(known_ratings: Mapping[str, Optional[int]], rating: RatingSettingsModel) -> Optional[float]:
    weighted: List[Tuple[float, float]] = []
    for time_control, value in known_ratings.items():
        control = rating.time_controls.get(time_control)
        if value is None or control is None or control.weight <= 0:
            continue
        weighted.append((online_to_otb(value, rating.conversion_table) + control.offset, control.weight))

    if not weighted:
        return None
    total_weight = sum(weight for _, weight in weighted)
    return sum(value * weight for value, weight in weighted) / total_weight


def _acpl_to_rating(acpl: float, rating: RatingSettingsModel) -> float:
    if acpl <= 0:
        return float(rating.max_rating)
    return clamp(rating.acpl_intercept - rating.acpl_slope * math.log(acpl), rating.min_rating, rating.max_rating)


def _confidence(evaluated_moves: int, style_sample_size: int, has_ratings: bool, rating: RatingSettingsModel) -> int:
    engine = min(evaluated_moves / rating.full_confidence_moves, 1.0) * rating.engine_confidence_points
    games = min(max(style_sample_size, 0) / rating.full_confidence_games, 1.0) * rating.games_confidence_points
    total = engine + games

    if has_ratings:
        total += rating.rating_confidence_points
        cap = rating.max_confidence
    else:
        cap = rating.engine_only_max_confidence
    return int(round(min(total, cap)))


def estimate_fide(
    known_ratings: Optional[Mapping[str, Optional[int]]],
    error_profile: ErrorProfile,
    style_sample_size: int,
    settings: ModelingSettings = app_settings.modeling,
) -> FideEstimate:
    """
    Combines known ratings, the error profile and the sample size into one estimate.

    Args:
        known_ratings: Online rating per time control; `None` marks a control
                       without a usable rating. Unknown controls are ignored.
        error_profile: The player's error profile. Its overall blunder rate
                       lowers the estimate; its average CPL is the fallback base.
        style_sample_size: Number of games behind the style scores.
        settings: Modeling settings holding the rating tables.

    Returns:
        A `FideEstimate` with the rating clamped to the configured bounds.

    Raises:
        InsufficientData: If there is neither a known rating nor a single
                          evaluated move.
    """
    rating = settings.rating
    overall = error_profile.overall
    base = _blend_ratings(known_ratings or {}, rating)
    has_ratings = base is not None

    if base is None:
        if overall.sample_moves == 0:
            raise InsufficientData("No known rating and no evaluated moves to estimate a rating from.")
        base = _acpl_to_rating(overall.avg_cpl, rating)

    adjusted = base
    if overall.sample_moves:
        adjusted -= rating.blunder_penalty * overall.blunder_rate

    estimate = FideEstimate(
        rating=int(round(clamp(adjusted, rating.min_rating, rating.max_rating))),
        confidence=_confidence(overall.sample_moves, style_sample_size, has_ratings, rating),
    )
    logger.debug(
        "Estimated rating.", base=round(base), blunder_rate=overall.blunder_rate,
        rating=estimate.rating, confidence=estimate.confidence, from_ratings=has_ratings,
    )
    return estimate
