# chess_scout/core/error_profile.py
"""
Aggregates the player's centipawn-loss events into per-phase error statistics.

Only games that carry engine evaluations contribute; a game without them adds
zero samples rather than zero error. Within a game only the modeled player's
plies are counted, and individual unevaluated plies are skipped.

The three tiers are nested: a move over the blunder threshold is also over the
mistake and inaccuracy thresholds and is counted in every numerator. The
phase error rate is therefore `inaccuracies / sample_moves`.
"""
from typing import Dict, Iterable

import structlog

from chess_scout.config.settings import ErrorThresholdsModel, ModelingSettings, settings as app_settings
from chess_scout.core.game_phaser import determine_game_phase
from chess_scout.types import ErrorProfile, GamePhase, GameRecord, PhaseErrors

logger = structlog.get_logger(__name__)


class _PhaseAccumulator:
    __slots__ = ("sample_moves", "inaccuracies", "mistakes", "blunders", "total_cpl")

    def __init__(self):
        self.sample_moves = 0
        self.inaccuracies = 0
        self.mistakes = 0
        self.blunders = 0
        self.total_cpl = 0

    def add(self, cpl: int, thresholds: ErrorThresholdsModel) -> None:
        self.sample_moves += 1
        self.total_cpl += cpl
        if cpl > thresholds.inaccuracy:
            self.inaccuracies += 1
        if cpl > thresholds.mistake:
            self.mistakes += 1
        if cpl > thresholds.blunder:
            self.blunders += 1

    def finalize(self) -> PhaseErrors:
        return PhaseErrors(
            sample_moves=self.sample_moves, inaccuracies=self.inaccuracies, mistakes=self.mistakes,
            blunders=self.blunders, total_cpl=self.total_cpl,
        )


def build_error_profile(
    games: Iterable[GameRecord],
    settings: ModelingSettings = app_settings.modeling,
) -> ErrorProfile:
    """
    Buckets each evaluated player move into its phase and counts errors.

    Args:
        games: Normalized game records, with or without evaluations.
        settings: Modeling settings holding phase boundaries and thresholds.

    Returns:
        An `ErrorProfile` covering all three phases. Phases without samples
        report zero rates.
    """
    thresholds = settings.error_thresholds
    accumulators: Dict[GamePhase, _PhaseAccumulator] = {phase: _PhaseAccumulator() for phase in GamePhase}
    games_analyzed = 0
    skipped = 0

    for game in games:
        if game.eval_deltas is None:
            skipped += 1
            continue

        contributed = False
        for ply, cpl in enumerate(game.eval_deltas):
            if cpl is None or not game.is_player_ply(ply):
                continue
            phase = determine_game_phase(ply, settings)
            accumulators[phase].add(cpl, thresholds)
            contributed = True

        if contributed:
            games_analyzed += 1

    logger.debug("Built error profile.", games_analyzed=games_analyzed, games_without_evals=skipped)
    return ErrorProfile(
        phases={phase: acc.finalize() for phase, acc in accumulators.items()},
        games_analyzed=games_analyzed,
    )
