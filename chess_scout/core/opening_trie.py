# chess_scout/core/opening_trie.py
"""
Builds the per-color repertoire trie and answers the bot's lookups against it.

Each path from the root spells a move sequence the player has reached, with
both sides' moves in order. Every node counts the games that passed through it
and tallies their results; `terminal_count` records the games that stopped
exactly there, so the counts are conserved down the tree. The builder is a pure
function of its inputs: the same batch and color always produce the same tree.
"""
import random
from types import MappingProxyType
from typing import Iterable, List, Optional, Sequence

import structlog

from chess_scout.config.settings import ModelingSettings, settings as app_settings
from chess_scout.types import SAN, Color, GameRecord, OpeningTrie, TrieNode

logger = structlog.get_logger(__name__)


def build_trie(
    games: Iterable[GameRecord],
    color: Color,
    settings: ModelingSettings = app_settings.modeling,
    max_ply: Optional[int] = None,
) -> OpeningTrie:
    """
    Builds the repertoire trie of every game the player played as `color`.

    Args:
        games: Normalized game records; games of the other color are ignored.
        color: The color whose repertoire is built.
        settings: Modeling settings; `trie.max_ply` is used when `max_ply`
                  is not given.
        max_ply: Optional depth cap. A game cut by the cap terminates at the
                 cap node.

    Returns:
        An `OpeningTrie` whose root `visit_count` equals the number of games
        of `color` in the batch.
    """
    cap = max_ply if max_ply is not None else settings.trie.max_ply
    root = TrieNode()
    contributing = 0

    for game in games:
        if game.player_color is not color:
            continue
        contributing += 1

        moves = game.moves if cap is None else game.moves[:cap]
        node = root
        node.visit_count += 1
        node.outcome_tally = node.outcome_tally.add(game.result)
        for san in moves:
            child = node.children.get(san)
            if child is None:
                child = node.children[san] = TrieNode(move=san)
            child.visit_count += 1
            child.outcome_tally = child.outcome_tally.add(game.result)
            node = child
        node.terminal_count += 1

    _freeze(root)
    logger.debug(
        "Built opening trie.", color=color.value, games=contributing,
        nodes=sum(1 for _ in root.walk()),
    )
    return OpeningTrie(color=color, root=root)


def _freeze(root: TrieNode) -> None:
    """Swaps every node's child dict for a read-only view."""
    for _, node in root.walk():
        node.children = MappingProxyType(node.children)


def lookup(trie: OpeningTrie, moves: Sequence[SAN]) -> Optional[TrieNode]:
    """Follows `moves` from the root; returns None once the path leaves the book."""
    node = trie.root
    for san in moves:
        node = node.children.get(san)
        if node is None:
            return None
    return node


def ranked_replies(node: TrieNode) -> List[TrieNode]:
    """Children by descending `visit_count`; equal counts keep insertion order."""
    return sorted(node.children.values(), key=lambda child: child.visit_count, reverse=True)


def most_played_reply(node: TrieNode) -> Optional[TrieNode]:
    """The most visited child, ties broken in favour of the first inserted."""
    best: Optional[TrieNode] = None
    for child in node.children.values():
        if best is None or child.visit_count > best.visit_count:
            best = child
    return best


def sample_reply(
    node: TrieNode,
    rng: Optional[random.Random] = None,
    min_games: Optional[int] = None,
    settings: ModelingSettings = app_settings.modeling,
) -> Optional[TrieNode]:
    """
    Draws a child with probability proportional to its `visit_count`.

    Returns None when the node has no children or fewer than `min_games`
    visits (defaulting to `trie.min_games`), i.e. the position is out of book
    for the bot.
    """
    threshold = settings.trie.min_games if min_games is None else min_games
    if not node.children or node.visit_count < threshold:
        return None
    children = list(node.children.values())
    weights = [child.visit_count for child in children]
    return (rng or random.Random()).choices(children, weights=weights, k=1)[0]


def is_player_depth(depth: int, color: Color) -> bool:
    """True when a node at `depth` (root = 0) holds a move made by `color`."""
    return depth > 0 and (depth % 2 == 1) == (color is Color.WHITE)
