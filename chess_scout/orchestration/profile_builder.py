# chess_scout/orchestration/profile_builder.py
"""
Assembles a full `PlayerProfile` from a raw provider game batch.

The stages run in the order the data flows: normalize, then the per-color
tries and the error profile (independent of each other), then the style
scores that read both, and finally the rating estimate. Each stage is a thin
traced wrapper around a pure core function.

Only standard-variant games are modeled. A missing rating estimate is not an
error here: the profile is still returned, with `fide_estimate=None` and the
reason recorded.
"""
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from chess_scout.config.settings import ModelingSettings, settings as app_settings
from chess_scout.core import error_profile as error_profile_builder
from chess_scout.core import normalizer, opening_trie, rating_estimator, style_scorer
from chess_scout.core.openings import analyze_openings
from chess_scout.core.prep_tips import generate_prep_tips
from chess_scout.core.weaknesses import detect_weaknesses, detect_weaknesses_from_error_profile
from chess_scout.exceptions import InsufficientData
from chess_scout.tracing import trace_stage
from chess_scout.types import (Color, ErrorProfile, FideEstimate, GameRecord, NormalizedBatch,
                               OpeningTrie, PlayerProfile, SpeedProfile, StyleProfile)

logger = structlog.get_logger(__name__)


@trace_stage("normalize")
def _normalize_stage(
    username: str, provider_games: Iterable[Any], settings: ModelingSettings
) -> Tuple[NormalizedBatch, List[GameRecord]]:
    batch = normalizer.normalize_batch(provider_games, username, settings)
    standard = [game for game in batch.games if game.variant == "standard"]
    if len(standard) < len(batch.games):
        logger.info("Excluding non-standard variants.", excluded=len(batch.games) - len(standard))
    return batch, standard


@trace_stage("opening_tries")
def _trie_stage(games: List[GameRecord], settings: ModelingSettings) -> Dict[Color, OpeningTrie]:
    return {color: opening_trie.build_trie(games, color, settings) for color in Color}


@trace_stage("error_profile")
def _error_profile_stage(games: List[GameRecord], settings: ModelingSettings) -> ErrorProfile:
    return error_profile_builder.build_error_profile(games, settings)


@trace_stage("style")
def _style_stage(
    games: List[GameRecord],
    tries: Mapping[Color, OpeningTrie],
    error_profile: ErrorProfile,
    settings: ModelingSettings,
) -> StyleProfile:
    return style_scorer.score_style(games, tries, error_profile, settings)


@trace_stage("rating")
def _rating_stage(
    known_ratings: Mapping[str, int],
    error_profile: ErrorProfile,
    style_sample_size: int,
    settings: ModelingSettings,
) -> Tuple[Optional[FideEstimate], Optional[str]]:
    try:
        return rating_estimator.estimate_fide(known_ratings, error_profile, style_sample_size, settings), None
    except InsufficientData as e:
        logger.info("Rating estimate unavailable.", reason=e.reason)
        return None, e.reason


def _speed_profiles(games: List[GameRecord], settings: ModelingSettings) -> Dict[str, SpeedProfile]:
    by_speed: Dict[str, List[GameRecord]] = defaultdict(list)
    for game in games:
        if game.speed:
            by_speed[game.speed].append(game)

    profiles = {}
    for speed, speed_games in by_speed.items():
        tries = {color: opening_trie.build_trie(speed_games, color, settings) for color in Color}
        errors = error_profile_builder.build_error_profile(speed_games, settings)
        profiles[speed] = SpeedProfile(
            games=len(speed_games),
            style=style_scorer.score_style(speed_games, tries, errors, settings),
            error_profile=errors,
        )
    return profiles


def build_profile(
    username: str,
    provider_games: Iterable[Any],
    perfs: Optional[Mapping[str, Any]] = None,
    settings: ModelingSettings = app_settings.modeling,
) -> PlayerProfile:
    """
    Runs the whole modeling pipeline for one player.

    Args:
        username: The modeled player, as known to the provider.
        provider_games: Raw provider game records.
        perfs: Optional provider per-time-control performance records, the
               source of the known online ratings.
        settings: Modeling settings shared by every stage.

    Returns:
        The assembled `PlayerProfile`.

    Raises:
        InsufficientData: If the batch is empty or holds no game of the player.
    """
    log = logger.bind(username=username)
    batch, games = _normalize_stage(username, provider_games, settings)

    tries = _trie_stage(games, settings)
    errors = _error_profile_stage(games, settings)
    style = _style_stage(games, tries, errors, settings)

    known_ratings = normalizer.extract_known_ratings(perfs)
    fide_estimate, unavailable_reason = _rating_stage(known_ratings, errors, style.sample_size, settings)

    openings = analyze_openings(games)
    weaknesses = detect_weaknesses(games, style, openings, style.sample_size, settings)
    weaknesses = detect_weaknesses_from_error_profile(errors, weaknesses)

    profile = PlayerProfile(
        username=username,
        analyzed_games=len(games),
        known_ratings=known_ratings,
        fide_estimate=fide_estimate,
        style=style,
        style_confidence=style_scorer.confidence(style.sample_size, settings),
        error_profile=errors,
        tries=tries,
        openings=openings,
        weaknesses=weaknesses,
        prep_tips=generate_prep_tips(weaknesses, openings, style),
        by_speed=_speed_profiles(games, settings),
        batch_stats=batch.stats,
        unavailable_reason=unavailable_reason,
    )
    log.info(
        "Built player profile.", games=profile.analyzed_games,
        evaluated_moves=errors.total_sample_moves, weaknesses=len(weaknesses),
        rating=fide_estimate.rating if fide_estimate else None,
    )
    return profile
