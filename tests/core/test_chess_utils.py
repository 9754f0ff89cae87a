# tests/core/test_chess_utils.py
import chess

from chess_scout.core.chess_utils import (
    calculate_cpl,
    categorize_time_control,
    eval_annotation_to_cp,
    piece_value,
    scale_to_percent,
)
from chess_scout.types import Color


def test_calculate_cpl():
    assert calculate_cpl(100, 50, Color.WHITE) == 50
    assert calculate_cpl(100, 150, Color.BLACK) == 50
    assert calculate_cpl(100, 150, Color.WHITE) == 0  # No negative CPL
    assert calculate_cpl(None, 150, Color.WHITE) is None


def test_eval_annotation_to_cp():
    assert eval_annotation_to_cp({"eval": 35}, 10000) == 35
    assert eval_annotation_to_cp({"mate": 2}, 10000) == 10000
    assert eval_annotation_to_cp({"mate": -1}, 10000) == -10000
    assert eval_annotation_to_cp({}, 10000) is None
    assert eval_annotation_to_cp(None, 10000) is None


def test_eval_annotation_to_cp_ignores_non_numeric_values():
    assert eval_annotation_to_cp({"eval": "n/a"}, 10000) is None
    assert eval_annotation_to_cp({"mate": "3"}, 10000) is None
    assert eval_annotation_to_cp({"eval": True}, 10000) is None
    assert eval_annotation_to_cp({"eval": float("nan")}, 10000) is None
    assert eval_annotation_to_cp(["eval", 35], 10000) is None
    assert eval_annotation_to_cp({"eval": "x", "mate": -2}, 10000) == -10000


def test_categorize_time_control():
    assert categorize_time_control("60+0") == "bullet"
    assert categorize_time_control("180+2") == "blitz"
    assert categorize_time_control("600+0") == "rapid"
    assert categorize_time_control("3600+30") == "classical"
    assert categorize_time_control("-") == "unknown"
    assert categorize_time_control("abc") == "unknown"
    assert categorize_time_control(None) == "unknown"


def test_scale_to_percent_clamps_outside_range():
    assert scale_to_percent(0.5, 0.0, 1.0) == 50.0
    assert scale_to_percent(-3.0, 0.0, 1.0) == 0.0
    assert scale_to_percent(7.0, 0.0, 1.0) == 100.0


def test_piece_value():
    assert piece_value(chess.QUEEN) == 9
    assert piece_value(chess.KING) == 0
    assert piece_value(None) == 0
