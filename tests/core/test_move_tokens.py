# tests/core/test_move_tokens.py
import chess
import pytest

from chess_scout.core.move_tokens import MaterialLedger, parse_move_text, parse_move_token, tokenize_moves
from chess_scout.exceptions import MalformedMove
from chess_scout.types import Color


def test_tokenize_moves_drops_numbers_results_and_glyphs():
    assert tokenize_moves("1.e4 e5 2. Nf3 Nc6!? 3...Bc5 1-0") == ["e4", "e5", "Nf3", "Nc6", "Bc5"]
    assert tokenize_moves("") == []
    assert tokenize_moves(None) == []


def test_parse_piece_capture_with_check():
    # Act
    move = parse_move_token("Nxf7+", 4)

    # Assert
    assert move.piece_type == chess.KNIGHT
    assert move.to_square == chess.F7
    assert move.is_capture and move.is_check
    assert move.is_forcing


def test_parse_pawn_capture_with_promotion():
    # Act
    move = parse_move_token("exd8=Q#", 40)

    # Assert
    assert move.piece_type == chess.PAWN
    assert move.to_square == chess.D8
    assert move.is_capture
    assert move.promotion == chess.QUEEN
    assert move.is_check


def test_parse_castling_with_zeros():
    # Act
    move = parse_move_token("0-0-0", 9)

    # Assert
    assert move.san == "O-O-O"
    assert move.castle == "O-O-O"
    assert not move.is_forcing


def test_parse_move_token_rejects_garbage():
    with pytest.raises(MalformedMove) as excinfo:
        parse_move_token("e9", 3)

    assert excinfo.value.token == "e9"
    assert excinfo.value.ply == 3


def test_parse_move_text_stops_at_first_bad_token():
    # Act
    moves, malformed = parse_move_text("e4 e5 Zz9 Nf3")

    # Assert
    assert moves == ["e4", "e5"]
    assert malformed is not None
    assert malformed.ply == 2


def test_parse_move_text_without_errors():
    moves, malformed = parse_move_text("d4 d5 c4")

    assert moves == ["d4", "d5", "c4"]
    assert malformed is None


def test_material_ledger_values_captures_from_notation():
    # Arrange
    ledger = MaterialLedger()

    # Act
    ledger.apply(parse_move_token("e4", 0), Color.WHITE)
    ledger.apply(parse_move_token("d5", 1), Color.BLACK)
    first = ledger.apply(parse_move_token("exd5", 2), Color.WHITE)
    second = ledger.apply(parse_move_token("Qxd5", 3), Color.BLACK)

    # Assert
    assert first == chess.PAWN
    assert second == chess.PAWN


def test_material_ledger_tracks_castled_rook():
    # Arrange
    ledger = MaterialLedger()
    ledger.apply(parse_move_token("O-O", 0), Color.WHITE)

    # Act
    captured = ledger.apply(parse_move_token("Bxf1", 1), Color.BLACK)

    # Assert
    assert captured == chess.ROOK


def test_material_ledger_treats_pawn_capture_on_empty_square_as_en_passant():
    ledger = MaterialLedger()

    captured = ledger.apply(parse_move_token("exd6", 0), Color.WHITE)

    assert captured == chess.PAWN


def _replay(ledger: MaterialLedger, sans):
    captured = []
    for ply, san in enumerate(sans):
        mover = Color.WHITE if ply % 2 == 0 else Color.BLACK
        captured.append(ledger.apply(parse_move_token(san, ply), mover))
    return captured


def test_material_ledger_en_passant_onto_a_square_a_knight_once_visited():
    # Arrange: the black knight passes through d6 before ...d5 allows exd6.
    sans = ["e4", "Nh6", "e5", "Nf5", "a3", "Nd6", "a4", "Nf5", "h3", "d5", "exd6"]

    # Act
    captured = _replay(MaterialLedger(), sans)

    # Assert
    assert captured[-1] == chess.PAWN


def test_material_ledger_pawn_capture_of_a_piece_is_not_en_passant():
    # Arrange: the knight is still standing on d6.
    sans = ["e4", "Nh6", "e5", "Nf5", "a3", "Nd6", "exd6"]

    # Act
    captured = _replay(MaterialLedger(), sans)

    # Assert
    assert captured[-1] == chess.KNIGHT


def test_material_ledger_en_passant_is_only_available_on_the_next_ply():
    # Arrange: black plays ...d5 and white waits a move before capturing on d6.
    sans = ["e4", "Nh6", "e5", "Nf5", "a3", "Nd6", "a4", "Nf5", "h3", "d5", "h4", "a6", "exd6"]

    # Act
    captured = _replay(MaterialLedger(), sans)

    # Assert
    assert captured[-1] == chess.KNIGHT


def test_material_ledger_black_en_passant():
    # Arrange: white's c2-c4 skips c3, which the white knight once visited.
    sans = ["Nc3", "d5", "Nb1", "d4", "c4", "dxc3"]

    # Act
    captured = _replay(MaterialLedger(), sans)

    # Assert
    assert captured[-1] == chess.PAWN
