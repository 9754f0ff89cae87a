# chess_scout/core/game_phaser.py
"""
Provides pure functions for mapping a ply to a phase of the game.

Normalized game records keep only move tokens, not board state, so phases are
assigned by move count: fullmoves up to `opening_max_fullmoves` are the
opening, fullmoves up to `middlegame_max_fullmoves` the middlegame, and
everything later the endgame. The boundaries are configuration constants and
are never derived per game.
"""

from typing import TYPE_CHECKING

from chess_scout.types import GamePhase, GameRecord

if TYPE_CHECKING:
    from chess_scout.config.settings import ModelingSettings


def fullmove_number(ply: int) -> int:
    """Calculates the 1-indexed move number from a 0-indexed ply."""
    return ply // 2 + 1


def determine_game_phase(ply: int, settings: "ModelingSettings") -> GamePhase:
    """
    Classifies the phase a 0-indexed ply belongs to.

    Args:
        ply: The half-move index, 0 being white's first move.
        settings: The modeling settings containing the phase boundaries.

    Returns:
        The determined `GamePhase` enum member.
    """
    move_number = fullmove_number(ply)
    if move_number <= settings.phaser.opening_max_fullmoves:
        return GamePhase.OPENING
    if move_number <= settings.phaser.middlegame_max_fullmoves:
        return GamePhase.MIDDLEGAME
    return GamePhase.ENDGAME


def endgame_start_ply(settings: "ModelingSettings") -> int:
    """The first 0-indexed ply that falls in the endgame."""
    return settings.phaser.middlegame_max_fullmoves * 2


def reaches_endgame(game: GameRecord, settings: "ModelingSettings") -> bool:
    """True when at least one recorded move lies past the endgame boundary."""
    return len(game.moves) > endgame_start_ply(settings)
