# chess_scout/core/weaknesses.py
"""
Rule-based detection of exploitable weaknesses for the profile card.

Two passes are run: one over results and style scores, and one over the
engine error profile that adds phase-specific weaknesses and can sharpen the
severity of an endgame weakness found by the first pass.
"""
from dataclasses import replace
from typing import Final, Iterable, List, Mapping

from chess_scout.config.settings import ModelingSettings, settings as app_settings
from chess_scout.core.style_scorer import confidence_label
from chess_scout.types import (Color, ConfidenceLabel, ErrorProfile, GamePhase, GameRecord,
                               GameResult, OpeningStats, Severity, StyleProfile, Weakness)

MAX_WEAKNESSES: Final[int] = 8

ENDGAME_AREA: Final[str] = "Endgame Conversion"
OPENING_INACCURACY_AREA: Final[str] = "Opening Inaccuracy"
MIDDLEGAME_BLUNDERS_AREA: Final[str] = "Middlegame Blunders"
TACTICAL_AREA: Final[str] = "Tactical Vulnerability"
WEAK_OPENING_PREFIX: Final[str] = "Weak in "

QUICK_LOSS_FULLMOVES: Final[int] = 25
WEAK_OPENING_MIN_GAMES: Final[int] = 5


def _quick_loss_rate(games: Iterable[GameRecord]) -> float:
    total = quick_losses = 0
    for game in games:
        if game.variant != "standard" or not game.moves:
            continue
        total += 1
        if game.result is GameResult.LOSS and game.full_moves < QUICK_LOSS_FULLMOVES:
            quick_losses += 1
    return quick_losses / total if total else 0.0


def _opening_weaknesses(
    openings: Mapping[Color, List[OpeningStats]], label: ConfidenceLabel
) -> List[Weakness]:
    found = []
    for color in (Color.WHITE, Color.BLACK):
        for op in openings.get(color, []):
            if op.games < WEAK_OPENING_MIN_GAMES or op.loss_rate <= 55:
                continue
            found.append(Weakness(
                area=f"{WEAK_OPENING_PREFIX}{op.name}",
                severity=Severity.CRITICAL if op.loss_rate > 70 else Severity.MODERATE,
                description=f"Poor results playing {op.name} as {color.value.capitalize()} ({op.eco}).",
                stat=f"{op.loss_rate}% loss rate in {op.games} games",
                confidence=label,
                eco=op.eco,
                opening_name=op.name,
                player_color=color,
            ))
    return found


def detect_weaknesses(
    games: List[GameRecord],
    style: StyleProfile,
    openings: Mapping[Color, List[OpeningStats]],
    analyzed_games: int,
    settings: ModelingSettings = app_settings.modeling,
) -> List[Weakness]:
    """
    Flags weaknesses visible from results and style scores alone.

    Checks endgame conversion, quick losses, per-opening loss rates and
    positional play. The confidence label follows `analyzed_games`.
    """
    label = confidence_label(analyzed_games, settings)
    weaknesses: List[Weakness] = []

    if style.endgame < 40:
        weaknesses.append(Weakness(
            area=ENDGAME_AREA,
            severity=Severity.CRITICAL if style.endgame < 25 else Severity.MODERATE,
            description="Struggles to convert advantages in long games. Many drawn or lost positions from winning middlegames.",
            stat=f"{style.endgame}% endgame rating",
            confidence=label,
        ))

    quick_loss_rate = _quick_loss_rate(games)
    if quick_loss_rate > 0.15:
        weaknesses.append(Weakness(
            area=TACTICAL_AREA,
            severity=Severity.CRITICAL if quick_loss_rate > 0.25 else Severity.MODERATE,
            description=f"Frequently loses games in under {QUICK_LOSS_FULLMOVES} moves, suggesting vulnerability to tactical combinations.",
            stat=f"{round(quick_loss_rate * 100)}% quick loss rate",
            confidence=label,
        ))

    weaknesses.extend(_opening_weaknesses(openings, label))

    if style.positional < 35:
        weaknesses.append(Weakness(
            area="Positional Understanding",
            severity=Severity.MODERATE,
            description="Tends to lose slowly in strategic positions. May struggle with pawn structures and piece placement.",
            stat=f"{style.positional}% positional rating",
            confidence=label,
        ))

    return weaknesses[:MAX_WEAKNESSES]


def _error_confidence(games_analyzed: int) -> ConfidenceLabel:
    if games_analyzed < 10:
        return ConfidenceLabel.LOW
    if games_analyzed < 30:
        return ConfidenceLabel.MEDIUM
    return ConfidenceLabel.HIGH


def detect_weaknesses_from_error_profile(
    error_profile: ErrorProfile, existing: List[Weakness]
) -> List[Weakness]:
    """
    Adds phase-specific weaknesses from engine evaluations to `existing`.

    Returns a new list; `existing` is left untouched. An area already present
    is never added twice.
    """
    updated = list(existing)
    areas = {w.area for w in updated}
    label = _error_confidence(error_profile.games_analyzed)
    overall = error_profile.overall
    opening = error_profile.phase(GamePhase.OPENING)
    middlegame = error_profile.phase(GamePhase.MIDDLEGAME)
    endgame = error_profile.phase(GamePhase.ENDGAME)

    if (opening.sample_moves >= 10 and overall.error_rate > 0
            and opening.error_rate > overall.error_rate * 1.5
            and OPENING_INACCURACY_AREA not in areas):
        updated.append(Weakness(
            area=OPENING_INACCURACY_AREA,
            severity=Severity.CRITICAL if opening.error_rate > 0.15 else Severity.MODERATE,
            description=(
                f"Makes {opening.error_rate * 100:.1f}% errors in the opening phase, "
                f"significantly above their overall {overall.error_rate * 100:.1f}% rate."
            ),
            stat=f"{opening.error_rate * 100:.1f}% opening error rate",
            confidence=label,
        ))

    if (middlegame.sample_moves >= 20 and middlegame.blunder_rate > 0.05
            and MIDDLEGAME_BLUNDERS_AREA not in areas):
        updated.append(Weakness(
            area=MIDDLEGAME_BLUNDERS_AREA,
            severity=Severity.CRITICAL if middlegame.blunder_rate > 0.08 else Severity.MODERATE,
            description=(
                f"Blunders {middlegame.blunder_rate * 100:.1f}% of middlegame moves, "
                "suggesting vulnerability in complex positions."
            ),
            stat=f"{middlegame.blunder_rate * 100:.1f}% middlegame blunder rate",
            confidence=label,
        ))

    if (endgame.sample_moves >= 10 and overall.error_rate > 0
            and endgame.error_rate > overall.error_rate * 1.3):
        for i, weakness in enumerate(updated):
            if weakness.area == ENDGAME_AREA:
                updated[i] = replace(
                    weakness,
                    severity=Severity.CRITICAL if endgame.error_rate > 0.15 else Severity.MODERATE,
                    stat=f"{endgame.error_rate * 100:.1f}% endgame error rate",
                )

    return updated[:MAX_WEAKNESSES]
