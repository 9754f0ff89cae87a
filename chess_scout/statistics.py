# chess_scout/statistics.py
"""
Tracks what happened to each provider record while a batch was normalized.

A `StatisticsTracker` is created per batch and travels with the batch result,
so concurrent pipelines never share counters.
"""
from collections import Counter
from enum import Enum, auto
from typing import Dict, Mapping

import structlog

logger = structlog.get_logger(__name__)


class StatKey(Enum):
    """Enumeration for keys used in the StatisticsTracker for type safety."""
    GAMES_READ = auto()
    GAMES_NORMALIZED = auto()
    SKIPPED_AMBIGUOUS_COLOR = auto()
    SKIPPED_UNREADABLE = auto()
    GAMES_TRUNCATED = auto()
    GAMES_WITHOUT_MOVES = auto()
    GAMES_WITH_EVALS = auto()


STAT_DISPLAY_NAMES: Dict[StatKey, str] = {
    StatKey.GAMES_READ: "Provider Records Read",
    StatKey.GAMES_NORMALIZED: "Games Normalized",
    StatKey.SKIPPED_AMBIGUOUS_COLOR: "  - Skipped (Player Color Ambiguous)",
    StatKey.SKIPPED_UNREADABLE: "  - Skipped (Unreadable Record)",
    StatKey.GAMES_TRUNCATED: "Games Truncated at a Malformed Move",
    StatKey.GAMES_WITHOUT_MOVES: "Games With No Usable Moves",
    StatKey.GAMES_WITH_EVALS: "Games Carrying Engine Evaluations",
}


class StatisticsTracker:
    """A per-batch counter of normalization outcomes."""

    def __init__(self):
        self.stats: Counter[StatKey] = Counter()

    @classmethod
    def from_dict(cls, stats: Mapping[str, int]) -> "StatisticsTracker":
        """Rebuilds a tracker from `as_dict` output; unknown keys and zero counts are dropped."""
        tracker = cls()
        for key in StatKey:
            count = stats.get(key.name.lower(), 0)
            if count:
                tracker.add_stat(key, count)
        return tracker

    def add_stat(self, key: StatKey, count: int = 1) -> None:
        """Increments a statistic by a given amount."""
        self.stats[key] += count

    def get(self, key: StatKey) -> int:
        return self.stats.get(key, 0)

    def as_dict(self) -> Dict[str, int]:
        """Returns every counter, zeros included, keyed by lower-case name."""
        return {key.name.lower(): self.stats.get(key, 0) for key in StatKey}

    def log_summary(self, username: str) -> None:
        """Logs one structured event with the batch counters."""
        logger.info("Batch normalization summary.", username=username, **self.as_dict())

    def render(self) -> str:
        """Formats the counters as an aligned, human-readable table."""
        lines = []
        for key in StatKey:
            if key in self.stats:
                lines.append(f"{STAT_DISPLAY_NAMES[key]:<40}: {self.stats[key]:>6}")
        return "\n".join(lines)
