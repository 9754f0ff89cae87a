# chess_scout/exceptions.py
"""
Defines custom exceptions for the Chess Scout modeling pipeline.

All errors share the `ChessScoutError` base so callers can catch the whole
family at the boundary. Per-game errors (`AmbiguousColor`, `MalformedMove`)
are absorbed inside the pipeline; only `InsufficientData` is expected to reach
the caller, as an explicit "unavailable" state.
"""

from typing import Optional


class ChessScoutError(Exception):
    """Base class for all application-specific, catchable errors."""
    pass


class NormalizationError(ChessScoutError):
    """Base class for errors raised while mapping a provider game record."""
    pass


class AmbiguousColor(NormalizationError):
    """
    Raised when the modeled player cannot be matched to exactly one side.

    Attributes:
        game_id: The provider identifier of the offending game, when known.
    """
    def __init__(self, message: str, game_id: Optional[str] = None):
        super().__init__(message)
        self.game_id = game_id


class MalformedMove(NormalizationError):
    """
    Raised when a move token cannot be parsed or played.

    Attributes:
        token: The raw token that failed.
        ply: The 0-indexed ply at which the token appeared.
    """
    def __init__(self, token: str, ply: int, reason: str = "unparseable SAN"):
        super().__init__(f"Malformed move {token!r} at ply {ply}: {reason}")
        self.token = token
        self.ply = ply
        self.reason = reason


class InsufficientData(ChessScoutError):
    """
    Raised when a batch-level computation has no usable signal.

    The caller must surface this as an "unavailable" result rather than
    substituting a default value.
    """
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ReportGenerationError(ChessScoutError):
    """Raised when a profile report cannot be written to disk."""
    pass
