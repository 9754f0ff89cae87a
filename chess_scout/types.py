# chess_scout/types.py
"""
A central module for the shared data contracts of the modeling pipeline.

Every entity here is a value object: produced by a pure function and never
mutated after it is returned. The only exception is `TrieNode`, which the trie
builder fills in while walking a batch and then hands over inside a frozen
`OpeningTrie`. The builder seals each node's children before returning.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, TypeAlias

SAN: TypeAlias = str


class Color(str, Enum):
    WHITE = "white"; BLACK = "black"


class GameResult(str, Enum):
    WIN = "win"; LOSS = "loss"; DRAW = "draw"


class GamePhase(str, Enum):
    OPENING = "opening"; MIDDLEGAME = "middlegame"; ENDGAME = "endgame"


class Severity(str, Enum):
    CRITICAL = "critical"; MODERATE = "moderate"; MINOR = "minor"


class ConfidenceLabel(str, Enum):
    LOW = "low"; MEDIUM = "medium"; HIGH = "high"


# --- GAME RECORDS ---

@dataclass(frozen=True, slots=True)
class OpeningInfo:
    eco: str; name: str; family: str


@dataclass(frozen=True, slots=True)
class GameRecord:
    """
    One played game, normalized to the modeled player's perspective.

    `eval_deltas` holds the centipawn loss of the side that moved at each ply.
    `None` for the whole field means the game was never analyzed; a `None`
    entry means that single ply was not evaluated.
    """
    moves: Tuple[SAN, ...]
    player_color: Color
    result: GameResult
    eval_deltas: Optional[Tuple[Optional[int], ...]] = None
    game_id: Optional[str] = None
    speed: Optional[str] = None
    variant: str = "standard"
    created_at: Optional[int] = None
    opening: Optional[OpeningInfo] = None

    def __post_init__(self) -> None:
        if self.eval_deltas is not None and len(self.eval_deltas) > len(self.moves):
            raise ValueError(
                f"eval_deltas has {len(self.eval_deltas)} entries for {len(self.moves)} moves."
            )

    @property
    def full_moves(self) -> int:
        return len(self.moves) // 2

    def is_player_ply(self, ply: int) -> bool:
        """True when the 0-indexed `ply` was played by the modeled player."""
        return (ply % 2 == 0) == (self.player_color is Color.WHITE)


@dataclass
class NormalizedBatch:
    """The records that survived normalization plus per-reason skip counts."""
    games: List[GameRecord]
    stats: Dict[str, int] = field(default_factory=dict)


# --- OPENING TRIE ---

@dataclass(frozen=True, slots=True)
class OutcomeTally:
    wins: int = 0; losses: int = 0; draws: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.draws

    def add(self, result: GameResult) -> "OutcomeTally":
        if result is GameResult.WIN:
            return OutcomeTally(self.wins + 1, self.losses, self.draws)
        if result is GameResult.LOSS:
            return OutcomeTally(self.wins, self.losses + 1, self.draws)
        return OutcomeTally(self.wins, self.losses, self.draws + 1)


@dataclass(slots=True)
class TrieNode:
    """
    A node of the repertoire trie.

    `visit_count` counts every game passing through the node and
    `outcome_tally` holds those games' results. `terminal_count` counts the
    games whose last recorded move is this node, so that
    `visit_count == sum(child.visit_count) + terminal_count`.
    """
    move: Optional[SAN] = None
    visit_count: int = 0
    terminal_count: int = 0
    outcome_tally: OutcomeTally = field(default_factory=OutcomeTally)
    children: Mapping[SAN, "TrieNode"] = field(default_factory=dict)

    @property
    def win_rate(self) -> float:
        return self.outcome_tally.wins / self.visit_count if self.visit_count else 0.0

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, "TrieNode"]]:
        """Yields `(depth, node)` pairs in pre-order, starting with this node."""
        stack = [(depth, self)]
        while stack:
            node_depth, node = stack.pop()
            yield node_depth, node
            for child in reversed(list(node.children.values())):
                stack.append((node_depth + 1, child))


@dataclass(frozen=True)
class OpeningTrie:
    """
    A finished repertoire trie for one color.

    The trie is read-only once built: each node's `children` is a
    `MappingProxyType` view, and callers must not reassign node counts.
    """
    color: Color
    root: TrieNode

    @property
    def game_count(self) -> int:
        return self.root.visit_count


# --- ERROR PROFILE ---

@dataclass(frozen=True, slots=True)
class PhaseErrors:
    """
    Error counts for one phase. The tiers are nested, so `inaccuracies`
    already includes every mistake and blunder.
    """
    sample_moves: int = 0; inaccuracies: int = 0; mistakes: int = 0; blunders: int = 0; total_cpl: int = 0

    @property
    def error_rate(self) -> float:
        """Share of moves that were at least inaccurate."""
        return self.inaccuracies / self.sample_moves if self.sample_moves else 0.0

    @property
    def mistake_rate(self) -> float:
        return self.mistakes / self.sample_moves if self.sample_moves else 0.0

    @property
    def blunder_rate(self) -> float:
        return self.blunders / self.sample_moves if self.sample_moves else 0.0

    @property
    def avg_cpl(self) -> float:
        return self.total_cpl / self.sample_moves if self.sample_moves else 0.0

    def __add__(self, other: "PhaseErrors") -> "PhaseErrors":
        return PhaseErrors(
            sample_moves=self.sample_moves + other.sample_moves,
            inaccuracies=self.inaccuracies + other.inaccuracies,
            mistakes=self.mistakes + other.mistakes,
            blunders=self.blunders + other.blunders,
            total_cpl=self.total_cpl + other.total_cpl,
        )


@dataclass(frozen=True)
class ErrorProfile:
    phases: Mapping[GamePhase, PhaseErrors]
    games_analyzed: int = 0

    def phase(self, phase: GamePhase) -> PhaseErrors:
        return self.phases.get(phase, PhaseErrors())

    @property
    def overall(self) -> PhaseErrors:
        total = PhaseErrors()
        for phase in GamePhase:
            total = total + self.phase(phase)
        return total

    @property
    def total_sample_moves(self) -> int:
        return self.overall.sample_moves


# --- STYLE & RATING ---

@dataclass(frozen=True, slots=True)
class StyleSignals:
    """Raw move-choice statistics the style scores are normalized from."""
    games: int; player_moves: int; captures: int; checks: int
    sacrifices: int; exchanges: int; endgame_games: int; endgame_holds: int
    opening_forcing_share: Optional[float] = None

    @property
    def capture_rate(self) -> float:
        return self.captures / self.player_moves if self.player_moves else 0.0

    @property
    def forcing_rate(self) -> float:
        return (self.captures + self.checks) / self.player_moves if self.player_moves else 0.0

    @property
    def sacrifices_per_game(self) -> float:
        return self.sacrifices / self.games if self.games else 0.0

    @property
    def exchanges_per_game(self) -> float:
        return self.exchanges / self.games if self.games else 0.0

    @property
    def avg_player_moves(self) -> float:
        return self.player_moves / self.games if self.games else 0.0


@dataclass(frozen=True, slots=True)
class StyleProfile:
    aggression: int; tactical: int; positional: int; endgame: int; sample_size: int


@dataclass(frozen=True, slots=True)
class FideEstimate:
    rating: int; confidence: int


# --- PROFILE CARD ---

@dataclass(frozen=True, slots=True)
class OpeningStats:
    eco: str; name: str; games: int; pct: int
    win_rate: int; draw_rate: int; loss_rate: int


@dataclass(frozen=True, slots=True)
class Weakness:
    area: str; severity: Severity; description: str; stat: str
    confidence: ConfidenceLabel
    eco: Optional[str] = None
    opening_name: Optional[str] = None
    player_color: Optional[Color] = None


@dataclass(frozen=True, slots=True)
class PrepTip:
    title: str; description: str


@dataclass(frozen=True)
class SpeedProfile:
    games: int; style: StyleProfile; error_profile: ErrorProfile


@dataclass(frozen=True)
class PlayerProfile:
    username: str
    analyzed_games: int
    known_ratings: Mapping[str, int]
    fide_estimate: Optional[FideEstimate]
    style: StyleProfile
    style_confidence: int
    error_profile: ErrorProfile
    tries: Mapping[Color, OpeningTrie]
    openings: Mapping[Color, List[OpeningStats]]
    weaknesses: List[Weakness]
    prep_tips: List[PrepTip] = field(default_factory=list)
    by_speed: Mapping[str, SpeedProfile] = field(default_factory=dict)
    batch_stats: Mapping[str, int] = field(default_factory=dict)
    unavailable_reason: Optional[str] = None
