# chess_scout/core/style_scorer.py
"""
Derives four 0-100 playing-style scores from the player's move choices.

The scorer reads move tokens only. Captures and checks come straight off the
SAN suffixes; sacrifices and exchanges come from a capture that the opponent
immediately answers by recapturing on the same square, valued with the
notation-level `MaterialLedger`. That valuation is an approximation, not exact
material accounting.

Each raw signal is mapped onto 0-100 with a fixed min/max range from the
settings, so scores are comparable across players.
"""
from typing import Iterable, List, Mapping, Optional, Tuple, Union

import structlog

from chess_scout.config.settings import ModelingSettings, ScoreRangeModel, settings as app_settings
from chess_scout.core.chess_utils import clamp, piece_value, scale_to_percent
from chess_scout.core.game_phaser import reaches_endgame
from chess_scout.core.move_tokens import MaterialLedger, ParsedMove, parse_move_token
from chess_scout.core.opening_trie import is_player_depth
from chess_scout.exceptions import MalformedMove
from chess_scout.types import (Color, ConfidenceLabel, ErrorProfile, GamePhase, GameRecord,
                               GameResult, OpeningTrie, StyleProfile, StyleSignals)

logger = structlog.get_logger(__name__)

NEUTRAL_SCORE = 50

TrieInput = Union[Mapping[Color, OpeningTrie], Iterable[OpeningTrie]]


def _scaled(value: float, score_range: ScoreRangeModel) -> float:
    return scale_to_percent(value, score_range.low, score_range.high)


def _parse_game(game: GameRecord) -> List[ParsedMove]:
    parsed: List[ParsedMove] = []
    for ply, san in enumerate(game.moves):
        try:
            parsed.append(parse_move_token(san, ply))
        except MalformedMove as e:
            logger.debug("Stopping style scan at malformed move.", game_id=game.game_id, token=e.token, ply=ply)
            break
    return parsed


def _count_game(game: GameRecord, min_deficit: int) -> Tuple[int, int, int, int, int]:
    """Returns (player moves, captures, checks, sacrifices, exchanges) for one game."""
    ledger = MaterialLedger()
    player_moves = captures = checks = sacrifices = exchanges = 0
    pending: Optional[Tuple[ParsedMove, int]] = None  # player's capture and its net deficit

    for ply, move in enumerate(_parse_game(game)):
        mover = Color.WHITE if ply % 2 == 0 else Color.BLACK
        captured = ledger.apply(move, mover)

        if game.is_player_ply(ply):
            player_moves += 1
            captures += move.is_capture
            checks += move.is_check
            pending = None
            if move.is_capture:
                deficit = piece_value(move.promotion or move.piece_type) - piece_value(captured)
                pending = (move, deficit)
            continue

        if pending and move.is_capture and move.to_square == pending[0].to_square:
            if pending[1] >= min_deficit:
                sacrifices += 1
            else:
                exchanges += 1
        pending = None

    return player_moves, captures, checks, sacrifices, exchanges


def _iter_tries(tries: Optional[TrieInput]) -> List[OpeningTrie]:
    if tries is None:
        return []
    if isinstance(tries, Mapping):
        return list(tries.values())
    return list(tries)


def _opening_forcing_share(tries: Optional[TrieInput], settings: ModelingSettings) -> Optional[float]:
    """
    The visit-weighted share of the player's repertoire moves, within the
    opening phase, that are captures or checks.
    """
    max_depth = settings.phaser.opening_max_fullmoves * 2
    forcing = total = 0
    for trie in _iter_tries(tries):
        for depth, node in trie.root.walk():
            if depth > max_depth or not is_player_depth(depth, trie.color):
                continue
            try:
                is_forcing = parse_move_token(node.move, depth - 1).is_forcing
            except MalformedMove:
                continue
            total += node.visit_count
            if is_forcing:
                forcing += node.visit_count
    return forcing / total if total else None


def collect_style_signals(
    games: Iterable[GameRecord],
    tries: Optional[TrieInput] = None,
    settings: ModelingSettings = app_settings.modeling,
) -> StyleSignals:
    """Counts the raw move-choice statistics behind the style scores."""
    totals = [0, 0, 0, 0, 0]
    scanned = endgame_games = endgame_holds = 0

    for game in games:
        if not game.moves:
            continue
        scanned += 1
        for i, count in enumerate(_count_game(game, settings.style.sacrifice_min_material)):
            totals[i] += count
        if reaches_endgame(game, settings):
            endgame_games += 1
            endgame_holds += game.result is not GameResult.LOSS

    player_moves, captures, checks, sacrifices, exchanges = totals
    return StyleSignals(
        games=scanned, player_moves=player_moves, captures=captures, checks=checks,
        sacrifices=sacrifices, exchanges=exchanges,
        endgame_games=endgame_games, endgame_holds=endgame_holds,
        opening_forcing_share=_opening_forcing_share(tries, settings),
    )


def _aggression(signals: StyleSignals, settings: ModelingSettings) -> float:
    s = settings.style
    parts = [
        (_scaled(signals.capture_rate, s.capture_rate), s.aggression_capture_weight),
        (_scaled(signals.sacrifices_per_game, s.sacrifices_per_game), s.aggression_sacrifice_weight),
    ]
    if signals.opening_forcing_share is not None:
        parts.append((_scaled(signals.opening_forcing_share, s.opening_forcing_share), s.aggression_opening_weight))
    total_weight = sum(weight for _, weight in parts)
    return sum(score * weight for score, weight in parts) / total_weight


def _positional(tactical: float, signals: StyleSignals, settings: ModelingSettings) -> float:
    s = settings.style
    length = _scaled(signals.avg_player_moves, s.avg_player_moves) / 100.0
    quietness = (100.0 - tactical) * (0.5 + 0.5 * length)
    exchanges = _scaled(signals.exchanges_per_game, s.exchanges_per_game)
    return (1 - s.positional_exchange_weight) * quietness + s.positional_exchange_weight * exchanges


def _endgame(signals: StyleSignals, error_profile: Optional[ErrorProfile], settings: ModelingSettings) -> float:
    s = settings.style
    if signals.endgame_games:
        score = signals.endgame_holds / signals.endgame_games * 100.0
    else:
        score = float(NEUTRAL_SCORE)

    if error_profile is not None:
        endgame_errors = error_profile.phase(GamePhase.ENDGAME)
        if endgame_errors.sample_moves >= s.min_phase_moves:
            accuracy = 100.0 - _scaled(endgame_errors.error_rate, s.endgame_error_range)
            score = (1 - s.endgame_error_weight) * score + s.endgame_error_weight * accuracy
    return score


def _to_score(raw: float) -> int:
    return int(clamp(round(raw), 0, 100))


def _dampen(raw: float, sample_size: int, settings: ModelingSettings) -> float:
    """Shrinks a raw score toward neutral as `raw*n/(n+k) + 50*k/(n+k)`."""
    k = settings.style.dampening_games
    if k is None:
        return raw
    n = max(sample_size, 0)
    return raw * (n / (n + k)) + NEUTRAL_SCORE * (k / (n + k))


def _sample_size(games: List[GameRecord], signals: StyleSignals) -> int:
    # Games with moves are already in `signals.games`.
    eval_only = sum(
        1 for g in games
        if not g.moves and g.eval_deltas is not None and any(d is not None for d in g.eval_deltas)
    )
    return signals.games + eval_only


def score_style(
    games: Iterable[GameRecord],
    tries: Optional[TrieInput] = None,
    error_profile: Optional[ErrorProfile] = None,
    settings: ModelingSettings = app_settings.modeling,
) -> StyleProfile:
    """
    Scores aggression, tactical, positional and endgame play on 0-100.

    Args:
        games: Normalized game records of the player (both colors).
        tries: The player's repertoire tries, as a color mapping or iterable;
               their opening-phase forcing share feeds the aggression score.
        error_profile: Optional error profile; a well-sampled endgame phase
                       refines the endgame score.
        settings: Modeling settings with the score ranges and weights.

    Returns:
        A `StyleProfile`. `sample_size` counts the games that contributed to
        any score: games with moves, plus move-less games carrying at least
        one evaluated ply. With `style.dampening_games` set, every score is
        pulled toward 50 in proportion to how small that sample is.
    """
    games = list(games)
    signals = collect_style_signals(games, tries, settings)
    sample_size = _sample_size(games, signals)

    def to_score(raw: float) -> int:
        return _to_score(_dampen(raw, sample_size, settings))

    endgame = _endgame(signals, error_profile, settings)
    if signals.games == 0:
        return StyleProfile(NEUTRAL_SCORE, NEUTRAL_SCORE, NEUTRAL_SCORE, to_score(endgame), sample_size)

    tactical = _scaled(signals.forcing_rate, settings.style.forcing_rate)
    profile = StyleProfile(
        aggression=to_score(_aggression(signals, settings)),
        tactical=to_score(tactical),
        positional=to_score(_positional(tactical, signals, settings)),
        endgame=to_score(endgame),
        sample_size=sample_size,
    )
    logger.debug("Scored playing style.", sample_size=sample_size, sacrifices=signals.sacrifices)
    return profile


def confidence(sample_size: int, settings: ModelingSettings = app_settings.modeling) -> int:
    """
    Style confidence on 0-100, growing with the sample and saturating at
    `style.confidence_saturation` games.
    """
    saturation = settings.style.confidence_saturation
    return round(100 * min(max(sample_size, 0), saturation) / saturation)


def confidence_label(sample_size: int, settings: ModelingSettings = app_settings.modeling) -> ConfidenceLabel:
    """Display bucket for a sample size; below the medium threshold is "still settling"."""
    if sample_size < settings.style.medium_confidence_games:
        return ConfidenceLabel.LOW
    if sample_size < settings.style.high_confidence_games:
        return ConfidenceLabel.MEDIUM
    return ConfidenceLabel.HIGH
