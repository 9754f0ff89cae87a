# chess_scout/core/normalizer.py
"""
Maps provider game records into the pipeline's `GameRecord` contract.

This module is the anti-corruption layer between the external chess server's
duck-typed JSON and the rest of the pipeline: nothing downstream ever looks at
a provider field. A malformed move truncates the game at the last good move and
an unreadable move string yields a zero-move record. Only an unresolvable
player color rejects a game.

The provider record shape consumed here::

    {
        "id": "abcd1234", "variant": "standard", "speed": "blitz",
        "createdAt": 1700000000000, "status": "mate", "winner": "white",
        "players": {"white": {"user": {"id": "alice", "name": "Alice"}},
                    "black": {"user": {"id": "bob", "name": "Bob"}}},
        "moves": "e4 e5 Nf3 ...",
        "analysis": [{"eval": 18}, {"eval": 25}, {"mate": -3}, ...],
        "opening": {"eco": "C20", "name": "King's Pawn Game"},
        "clock": {"initial": 300, "increment": 3}
    }
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import chess
import structlog

from chess_scout.config.settings import ModelingSettings, settings as app_settings
from chess_scout.core.chess_utils import calculate_cpl, categorize_time_control, eval_annotation_to_cp
from chess_scout.core.move_tokens import parse_move_text
from chess_scout.core.openings import opening_family
from chess_scout.exceptions import AmbiguousColor, InsufficientData, MalformedMove, NormalizationError
from chess_scout.statistics import StatisticsTracker, StatKey
from chess_scout.types import SAN, Color, GameRecord, GameResult, NormalizedBatch, OpeningInfo

logger = structlog.get_logger(__name__)

_DRAW_STATUSES = frozenset({"draw", "stalemate"})
_RATED_TIME_CONTROLS = ("bullet", "blitz", "rapid", "classical")


def _identities(side: Any) -> List[str]:
    """Returns the lower-cased user id and display name recorded for one side."""
    if not isinstance(side, Mapping):
        return []
    user = side.get("user")
    if not isinstance(user, Mapping):
        return []
    return [str(value).lower() for value in (user.get("id"), user.get("name")) if value]


def _determine_color(provider_game: Mapping[str, Any], username: str) -> Color:
    players = provider_game.get("players")
    if not isinstance(players, Mapping):
        players = {}
    wanted = username.lower()
    is_white = wanted in _identities(players.get("white"))
    is_black = wanted in _identities(players.get("black"))

    if is_white == is_black:
        raise AmbiguousColor(
            f"Cannot tell which side {username!r} played.",
            game_id=provider_game.get("id"),
        )
    return Color.WHITE if is_white else Color.BLACK


def _determine_result(provider_game: Mapping[str, Any], color: Color) -> GameResult:
    winner = provider_game.get("winner")
    if winner in (Color.WHITE.value, Color.BLACK.value):
        return GameResult.WIN if winner == color.value else GameResult.LOSS
    status = provider_game.get("status")
    if not (isinstance(status, str) and status in _DRAW_STATUSES):
        logger.debug(
            "Game has no winner and no draw status; recording it as a draw.",
            game_id=provider_game.get("id"), status=provider_game.get("status"),
        )
    return GameResult.DRAW


def _replay_legal_prefix(moves: List[SAN]) -> Tuple[List[SAN], Optional[MalformedMove]]:
    """
    Replays a standard-variant game and returns its canonical SAN prefix.

    The prefix stops at the first move python-chess rejects.
    """
    board = chess.Board()
    canonical: List[SAN] = []
    for ply, san in enumerate(moves):
        try:
            move = board.parse_san(san)
        except (chess.InvalidMoveError, chess.IllegalMoveError, chess.AmbiguousMoveError) as e:
            return canonical, MalformedMove(san, ply, reason=str(e) or "illegal in position")
        canonical.append(board.san(move))
        board.push(move)
    return canonical, None


def _eval_deltas(
    analysis: Any, move_count: int, settings: ModelingSettings
) -> Optional[Tuple[Optional[int], ...]]:
    """Converts per-ply evaluations into per-ply centipawn loss of the mover."""
    if move_count == 0 or not isinstance(analysis, list) or not analysis:
        return None

    evals = [
        eval_annotation_to_cp(a if isinstance(a, Mapping) else None, settings.mate_score_equivalent_cp)
        for a in analysis[:move_count]
    ]
    deltas: List[Optional[int]] = []
    for ply, eval_after in enumerate(evals):
        eval_before = settings.initial_eval_cp if ply == 0 else evals[ply - 1]
        mover = Color.WHITE if ply % 2 == 0 else Color.BLACK
        deltas.append(calculate_cpl(eval_before, eval_after, mover))
    return tuple(deltas)


def _speed(provider_game: Mapping[str, Any]) -> Optional[str]:
    if provider_game.get("speed"):
        return str(provider_game["speed"])
    clock = provider_game.get("clock")
    if isinstance(clock, Mapping) and "initial" in clock:
        return categorize_time_control(f"{clock['initial']}+{clock.get('increment', 0)}")
    return None


def _opening(provider_game: Mapping[str, Any]) -> Optional[OpeningInfo]:
    raw = provider_game.get("opening")
    if not isinstance(raw, Mapping) or not raw.get("name"):
        return None
    name = str(raw["name"])
    return OpeningInfo(eco=str(raw.get("eco") or ""), name=name, family=opening_family(name))


def _normalize(
    provider_game: Mapping[str, Any], username: str, settings: ModelingSettings
) -> Tuple[GameRecord, Optional[MalformedMove]]:
    color = _determine_color(provider_game, username)
    variant = str(provider_game.get("variant") or "standard")

    raw_moves = provider_game.get("moves")
    moves, malformed = parse_move_text(raw_moves if isinstance(raw_moves, str) else None)
    if variant == "standard" and moves:
        moves, illegal = _replay_legal_prefix(moves)
        malformed = malformed or illegal

    if malformed:
        logger.info(
            "Truncating game at malformed move.",
            game_id=provider_game.get("id"), token=malformed.token,
            ply=malformed.ply, kept_moves=len(moves),
        )

    record = GameRecord(
        moves=tuple(moves),
        player_color=color,
        result=_determine_result(provider_game, color),
        eval_deltas=_eval_deltas(provider_game.get("analysis"), len(moves), settings),
        game_id=provider_game.get("id"),
        speed=_speed(provider_game),
        variant=variant,
        created_at=provider_game.get("createdAt"),
        opening=_opening(provider_game),
    )
    return record, malformed


def normalize(
    provider_game: Mapping[str, Any],
    perspective_username: str,
    settings: ModelingSettings = app_settings.modeling,
) -> GameRecord:
    """
    Maps one provider game into a `GameRecord` from the player's perspective.

    Args:
        provider_game: The raw provider record.
        perspective_username: The modeled player, matched case-insensitively
                              against each side's user id and name.
        settings: Modeling settings (mate clamp, starting evaluation).

    Returns:
        The normalized `GameRecord`. Malformed move text never raises; the
        record keeps the valid prefix, possibly empty.

    Raises:
        AmbiguousColor: If neither side, or both sides, match the username.
    """
    record, _ = _normalize(provider_game, perspective_username, settings)
    return record


def normalize_batch(
    provider_games: Iterable[Any],
    perspective_username: str,
    settings: ModelingSettings = app_settings.modeling,
) -> NormalizedBatch:
    """
    Normalizes a batch, absorbing every per-game failure.

    Raises:
        InsufficientData: If the batch is empty or no game could be attributed
                          to the player.
    """
    tracker = StatisticsTracker()
    games: List[GameRecord] = []

    for provider_game in provider_games:
        tracker.add_stat(StatKey.GAMES_READ)
        if not isinstance(provider_game, Mapping):
            tracker.add_stat(StatKey.SKIPPED_UNREADABLE)
            logger.warning("Skipping unreadable provider record.", record_type=type(provider_game).__name__)
            continue
        try:
            record, malformed = _normalize(provider_game, perspective_username, settings)
        except AmbiguousColor as e:
            tracker.add_stat(StatKey.SKIPPED_AMBIGUOUS_COLOR)
            logger.warning("Dropping game with ambiguous player color.", game_id=e.game_id)
            continue
        except (NormalizationError, ValueError, TypeError) as e:
            tracker.add_stat(StatKey.SKIPPED_UNREADABLE)
            logger.warning(
                "Skipping provider record that could not be normalized.",
                game_id=provider_game.get("id"), error=str(e),
            )
            continue

        tracker.add_stat(StatKey.GAMES_NORMALIZED)
        if malformed:
            tracker.add_stat(StatKey.GAMES_TRUNCATED)
        if not record.moves:
            tracker.add_stat(StatKey.GAMES_WITHOUT_MOVES)
        if record.eval_deltas is not None:
            tracker.add_stat(StatKey.GAMES_WITH_EVALS)
        games.append(record)

    tracker.log_summary(perspective_username)

    if tracker.get(StatKey.GAMES_READ) == 0:
        raise InsufficientData("The game batch is empty.")
    if not games:
        raise InsufficientData(f"No game in the batch could be attributed to {perspective_username!r}.")

    return NormalizedBatch(games=games, stats=tracker.as_dict())


def extract_known_ratings(perfs: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Returns the non-provisional online rating for each rated time control.

    Args:
        perfs: The provider user's per-time-control performance records, e.g.
               `{"blitz": {"rating": 1850, "games": 420, "prov": False}}`.
    """
    ratings: Dict[str, int] = {}
    for time_control in _RATED_TIME_CONTROLS:
        perf = (perfs or {}).get(time_control)
        if isinstance(perf, Mapping) and perf.get("rating") is not None and not perf.get("prov"):
            ratings[time_control] = int(perf["rating"])
    return ratings
