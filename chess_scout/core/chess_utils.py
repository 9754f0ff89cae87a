# chess_scout/core/chess_utils.py
"""
Provides a collection of pure, stateless functions for chess-related calculations.

This module is the "math library" of the modeling pipeline: evaluation
conversion, centipawn loss, time-control categorisation and the fixed
min/max scaling used by every 0-100 score.
"""

import math
from typing import Any, Dict, Final, Mapping, Optional

import chess

from chess_scout.types import Color

# Standard pawn-unit values, used for notation-level material accounting.
PIECE_VALUES: Final[Dict[chess.PieceType, int]] = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}


def piece_value(piece_type: Optional[chess.PieceType]) -> int:
    return PIECE_VALUES.get(piece_type, 0) if piece_type is not None else 0


def eval_annotation_to_cp(annotation: Optional[Mapping[str, Any]], mate_score_cp: int) -> Optional[int]:
    """
    Converts a provider evaluation annotation to centipawns from white's view.

    Mate scores are clamped to +/- `mate_score_cp` so that they cannot dominate
    averages. Returns None for a missing, empty or non-numeric annotation.
    """
    if not isinstance(annotation, Mapping):
        return None
    cp, mate = annotation.get("eval"), annotation.get("mate")
    if _is_number(cp):
        return int(cp)
    if _is_number(mate):
        return mate_score_cp if mate > 0 else -mate_score_cp
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def calculate_cpl(eval_before: Optional[int], eval_after: Optional[int], mover: Color) -> Optional[int]:
    """
    Calculates Centipawn Loss (CPL) from the perspective of the side that moved.

    Both evaluations are from white's perspective. A move never has negative
    loss.
    """
    if eval_before is None or eval_after is None:
        return None

    if mover is Color.WHITE:
        cpl = eval_before - eval_after
    else:
        cpl = eval_after - eval_before

    return max(0, int(cpl))


def categorize_time_control(time_control_tag: Optional[str]) -> str:
    """
    Categorizes a "base+increment" time-control tag (seconds) into a speed.

    - bullet: < 3 minutes
    - blitz: >= 3 minutes and < 10 minutes
    - rapid: >= 10 minutes and < 60 minutes
    - classical: >= 60 minutes

    Returns "unknown" for missing or malformed tags.
    """
    if not time_control_tag or time_control_tag == "-":
        return "unknown"

    try:
        base_minutes = int(time_control_tag.split('+')[0]) / 60.0
    except (ValueError, IndexError):
        return "unknown"

    if base_minutes < 3:
        return "bullet"
    elif base_minutes < 10:
        return "blitz"
    elif base_minutes < 60:
        return "rapid"
    return "classical"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def scale_to_percent(value: float, low: float, high: float) -> float:
    """Maps `value` linearly from [low, high] onto [0, 100], clamping outside."""
    return clamp((value - low) / (high - low), 0.0, 1.0) * 100.0
