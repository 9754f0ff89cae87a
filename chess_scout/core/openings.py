# chess_scout/core/openings.py
"""
Per-color opening statistics grouped by opening family.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from chess_scout.types import Color, GameRecord, GameResult, OpeningStats


def opening_family(name: str) -> str:
    """
    Extracts the opening family, the part of the name before the first colon.

    "Italian Game: Giuoco Piano" -> "Italian Game"
    """
    head, sep, _ = name.partition(":")
    return head.strip() if sep and head.strip() else name.strip()


@dataclass
class _FamilyAccumulator:
    name: str
    wins: int = 0
    draws: int = 0
    losses: int = 0
    eco_codes: Counter = field(default_factory=Counter)

    @property
    def total(self) -> int:
        return self.wins + self.draws + self.losses


def _to_stats(families: Dict[str, _FamilyAccumulator], min_games: int) -> List[OpeningStats]:
    color_total = sum(acc.total for acc in families.values())
    ranked = sorted(
        (acc for acc in families.values() if acc.total >= min_games),
        key=lambda acc: acc.total, reverse=True,
    )
    stats = []
    for acc in ranked:
        # most_common keeps first-seen order among equal counts
        eco = acc.eco_codes.most_common(1)[0][0] if acc.eco_codes else ""
        stats.append(OpeningStats(
            eco=eco,
            name=acc.name,
            games=acc.total,
            pct=round(acc.total / color_total * 100) if color_total else 0,
            win_rate=round(acc.wins / acc.total * 100),
            draw_rate=round(acc.draws / acc.total * 100),
            loss_rate=round(acc.losses / acc.total * 100),
        ))
    return stats


def analyze_openings(games: Iterable[GameRecord], min_games: int = 1) -> Dict[Color, List[OpeningStats]]:
    """
    Aggregates results per opening family for each color the player used.

    Games without opening information are ignored. Unknown results were
    normalized to draws upstream and are counted as such here.
    """
    by_color: Dict[Color, Dict[str, _FamilyAccumulator]] = {Color.WHITE: {}, Color.BLACK: {}}

    for game in games:
        if game.opening is None or game.opening.name == "Unknown":
            continue
        families = by_color[game.player_color]
        acc = families.setdefault(game.opening.family, _FamilyAccumulator(name=game.opening.family))
        if game.opening.eco:
            acc.eco_codes[game.opening.eco] += 1
        if game.result is GameResult.WIN:
            acc.wins += 1
        elif game.result is GameResult.LOSS:
            acc.losses += 1
        else:
            acc.draws += 1

    return {color: _to_stats(families, min_games) for color, families in by_color.items()}
