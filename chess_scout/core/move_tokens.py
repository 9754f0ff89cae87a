# chess_scout/core/move_tokens.py
"""
Splits provider move text into SAN tokens and reads facts off the notation.

Nothing here simulates legality. `parse_move_token` validates the shape of a
single SAN token, and `MaterialLedger` keeps track of which piece type last
arrived on each square, which is enough to value captures from notation alone.
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import chess

from chess_scout.exceptions import MalformedMove
from chess_scout.types import SAN, Color

_SAN_PATTERN = re.compile(
    r"^(?:"
    r"(?P<castle>O-O(?:-O)?)"
    r"|(?P<piece>[KQRBN])(?P<disambig>[a-h]?[1-8]?)(?P<pcapture>x?)(?P<pdest>[a-h][1-8])"
    r"|(?P<file>[a-h])(?:(?P<xcapture>x)(?P<xfile>[a-h]))?(?P<rank>[1-8])(?:=?(?P<promotion>[QRBN]))?"
    r")(?P<suffix>[+#]?)$"
)
_MOVE_NUMBER = re.compile(r"^\d+\.+")
_ZERO_CASTLE = re.compile(r"^0-0(?:-0)?")
_RESULT_TOKENS = frozenset({"1-0", "0-1", "1/2-1/2", "½-½", "*"})
_ANNOTATION_GLYPHS = "!?"


@dataclass(frozen=True, slots=True)
class ParsedMove:
    san: SAN
    piece_type: chess.PieceType
    to_square: Optional[chess.Square]
    is_capture: bool
    is_check: bool
    castle: Optional[str] = None
    promotion: Optional[chess.PieceType] = None

    @property
    def is_forcing(self) -> bool:
        return self.is_capture or self.is_check


def tokenize_moves(move_text: Optional[str]) -> List[str]:
    """
    Splits a move string into raw move tokens.

    Move-number markers ("1.", "12...", or "1.e4" glued to the move), result
    markers and trailing annotation glyphs are dropped.
    """
    if not move_text:
        return []

    tokens: List[str] = []
    for raw in move_text.split():
        token = _MOVE_NUMBER.sub("", raw).rstrip(_ANNOTATION_GLYPHS)
        if not token or token in _RESULT_TOKENS:
            continue
        tokens.append(token)
    return tokens


def parse_move_token(token: str, ply: int) -> ParsedMove:
    """
    Parses one SAN token.

    Raises:
        MalformedMove: If the token is not well-formed SAN.
    """
    normalized = _ZERO_CASTLE.sub(lambda m: m.group(0).replace("0", "O"), token)
    match = _SAN_PATTERN.match(normalized)
    if not match:
        raise MalformedMove(token, ply)

    groups = match.groupdict()
    is_check = bool(groups["suffix"])

    if groups["castle"]:
        return ParsedMove(
            san=normalized, piece_type=chess.KING, to_square=None,
            is_capture=False, is_check=is_check, castle=groups["castle"],
        )

    if groups["piece"]:
        return ParsedMove(
            san=normalized,
            piece_type=chess.PIECE_SYMBOLS.index(groups["piece"].lower()),
            to_square=chess.parse_square(groups["pdest"]),
            is_capture=bool(groups["pcapture"]),
            is_check=is_check,
        )

    dest_file = groups["xfile"] or groups["file"]
    promotion = groups["promotion"]
    return ParsedMove(
        san=normalized,
        piece_type=chess.PAWN,
        to_square=chess.parse_square(f"{dest_file}{groups['rank']}"),
        is_capture=bool(groups["xcapture"]),
        is_check=is_check,
        promotion=chess.PIECE_SYMBOLS.index(promotion.lower()) if promotion else None,
    )


def parse_move_text(move_text: Optional[str]) -> Tuple[List[SAN], Optional[MalformedMove]]:
    """
    Parses a whole move string, stopping at the first malformed token.

    Returns:
        The normalized SAN tokens of the valid prefix, and the `MalformedMove`
        that stopped parsing (or None when every token parsed).
    """
    moves: List[SAN] = []
    for ply, token in enumerate(tokenize_moves(move_text)):
        try:
            moves.append(parse_move_token(token, ply).san)
        except MalformedMove as e:
            return moves, e
    return moves, None


_CASTLING_SQUARES: Dict[Tuple[Color, str], Tuple[chess.Square, chess.Square]] = {
    # (king destination, rook destination)
    (Color.WHITE, "O-O"): (chess.G1, chess.F1),
    (Color.WHITE, "O-O-O"): (chess.C1, chess.D1),
    (Color.BLACK, "O-O"): (chess.G8, chess.F8),
    (Color.BLACK, "O-O-O"): (chess.C8, chess.D8),
}


class MaterialLedger:
    """
    Remembers the piece type that last arrived on each square.

    Seeded with the standard starting position. A capture always lands on an
    occupied square, and the occupant is the last piece that arrived there, so
    the captured piece can be read without knowing where pieces came from.

    Squares are never cleared, so a recorded occupant may have left. En passant
    is therefore read off the previous ply: a pawn that just advanced two ranks
    leaves the square it skipped as the only square a pawn capture can take it
    on. A pawn capturing onto an unrecorded square is also taken as en passant.
    """

    def __init__(self):
        self._occupants: Dict[chess.Square, chess.PieceType] = {
            square: piece.piece_type for square, piece in chess.Board().piece_map().items()
        }
        self._en_passant: Optional[chess.Square] = None

    def _skipped_square(self, to_square: chess.Square, mover: Color) -> Optional[chess.Square]:
        """The square a pawn arriving on `to_square` passed over, if it moved two ranks."""
        double_step_rank, skipped_rank = (3, 2) if mover is Color.WHITE else (4, 5)
        if chess.square_rank(to_square) != double_step_rank:
            return None
        skipped = chess.square(chess.square_file(to_square), skipped_rank)
        # a pawn recorded on the skipped square most likely made a single step
        if self._occupants.get(skipped) == chess.PAWN:
            return None
        return skipped

    def apply(self, move: ParsedMove, mover: Color) -> Optional[chess.PieceType]:
        """Records `move` and returns the type of the piece it captured, if any."""
        en_passant, self._en_passant = self._en_passant, None
        if move.castle:
            king_square, rook_square = _CASTLING_SQUARES[(mover, move.castle)]
            self._occupants[king_square] = chess.KING
            self._occupants[rook_square] = chess.ROOK
            return None

        captured: Optional[chess.PieceType] = None
        if move.is_capture:
            if move.piece_type == chess.PAWN and move.to_square == en_passant:
                captured = chess.PAWN
            else:
                captured = self._occupants.get(move.to_square, chess.PAWN)
        elif move.piece_type == chess.PAWN:
            self._en_passant = self._skipped_square(move.to_square, mover)

        self._occupants[move.to_square] = move.promotion or move.piece_type
        return captured
