# chess_scout/core/prep_tips.py
"""
Turns a finished profile card into short preparation advice for an opponent.

Tips come in a fixed order: the player's main opening with each color, a
counter to their aggression score, and then up to two critical weaknesses.
At most `MAX_TIPS` are returned.
"""
from typing import Final, List, Mapping

from chess_scout.core.weaknesses import ENDGAME_AREA, TACTICAL_AREA, WEAK_OPENING_PREFIX
from chess_scout.types import Color, OpeningStats, PrepTip, Severity, StyleProfile, Weakness

MAX_TIPS: Final[int] = 5
MAX_WEAKNESS_TIPS: Final[int] = 2

HIGH_AGGRESSION: Final[int] = 70
LOW_AGGRESSION: Final[int] = 30


def _opening_tips(openings: Mapping[Color, List[OpeningStats]]) -> List[PrepTip]:
    tips = []
    white = openings.get(Color.WHITE) or []
    black = openings.get(Color.BLACK) or []
    if white:
        top = white[0]
        tips.append(PrepTip(
            title=f"Prepare against {top.name}",
            description=(
                f"They play {top.name} ({top.eco}) in {top.pct}% of their White games. "
                "Study the main lines and have a solid response ready."
            ),
        ))
    if black:
        top = black[0]
        tips.append(PrepTip(
            title=f"Expect {top.name} as Black",
            description=(
                f"Their usual defense is {top.name} ({top.eco}), played in {top.pct}% of their Black games. "
                "Prepare your attacking repertoire against it."
            ),
        ))
    return tips


def _style_tip(style: StyleProfile) -> List[PrepTip]:
    if style.aggression > HIGH_AGGRESSION:
        return [PrepTip(
            title="Play solidly against their aggression",
            description=(
                "This player is highly aggressive. Avoid sharp tactical lines where they feel at home; "
                "aim for solid positional play and let them overextend."
            ),
        )]
    if style.aggression < LOW_AGGRESSION:
        return [PrepTip(
            title="Take the initiative early",
            description=(
                "This player prefers quiet positions. Seize the initiative with active piece play "
                "and create complications they may not handle well."
            ),
        )]
    return []


def _weakness_tip(weakness: Weakness) -> List[PrepTip]:
    if weakness.area == ENDGAME_AREA:
        return [PrepTip(
            title="Steer into endgames",
            description="Their endgame is weak. Trade pieces when ahead and aim for technical endgames.",
        )]
    if weakness.area == TACTICAL_AREA:
        return [PrepTip(
            title="Create tactical complications",
            description="They are prone to tactical oversights. Keep the position complex with many pieces on the board.",
        )]
    if weakness.area.startswith(WEAK_OPENING_PREFIX):
        return [PrepTip(
            title=f"Exploit their {weakness.area[len(WEAK_OPENING_PREFIX):]} weakness",
            description=weakness.description,
        )]
    return []


def generate_prep_tips(
    weaknesses: List[Weakness],
    openings: Mapping[Color, List[OpeningStats]],
    style: StyleProfile,
) -> List[PrepTip]:
    """
    Builds preparation tips from the weaknesses, openings and style scores.

    Only the first `MAX_WEAKNESS_TIPS` critical weaknesses are considered, and
    a critical weakness in an area without advice still uses up one of them.
    """
    tips = _opening_tips(openings) + _style_tip(style)
    critical = [w for w in weaknesses if w.severity is Severity.CRITICAL][:MAX_WEAKNESS_TIPS]
    for weakness in critical:
        tips.extend(_weakness_tip(weakness))
    return tips[:MAX_TIPS]
