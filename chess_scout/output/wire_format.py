# chess_scout/output/wire_format.py
"""
Converts pipeline outputs into JSON-ready structures and writes profile reports.

`to_wire` is the only place that knows the external key convention: field
names become camelCase, enums become their string values, and numbers pass
through untouched. Mapping keys that are data (SAN moves, time controls) are
kept as they are.
"""

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Tuple, Type

import structlog
from pydantic.alias_generators import to_camel

from chess_scout.exceptions import ReportGenerationError
from chess_scout.types import ErrorProfile, PhaseErrors, PlayerProfile, TrieNode

logger = structlog.get_logger(__name__)

# Derived values exported next to the stored fields.
_DERIVED: Dict[Type[Any], Tuple[Tuple[str, Callable[[Any], Any]], ...]] = {
    PhaseErrors: (
        ("error_rate", lambda p: p.error_rate),
        ("mistake_rate", lambda p: p.mistake_rate),
        ("blunder_rate", lambda p: p.blunder_rate),
        ("avg_cpl", lambda p: p.avg_cpl),
    ),
    ErrorProfile: (("overall", lambda e: e.overall),),
}


def _key(key: Any) -> Any:
    return key.value if isinstance(key, Enum) else key


def _trie_to_wire(root: TrieNode) -> Dict[str, Any]:
    """Serializes a trie without recursion; game lines can be hundreds of plies deep."""
    def shell(node: TrieNode) -> Dict[str, Any]:
        return {
            "move": node.move,
            "visitCount": node.visit_count,
            "terminalCount": node.terminal_count,
            "outcomeTally": to_wire(node.outcome_tally),
            "children": {},
        }

    wire_root = shell(root)
    stack: List[Tuple[TrieNode, Dict[str, Any]]] = [(root, wire_root)]
    while stack:
        node, wire_node = stack.pop()
        for san, child in node.children.items():
            wire_child = wire_node["children"][san] = shell(child)
            stack.append((child, wire_child))
    return wire_root


def to_wire(obj: Any) -> Any:
    """
    Recursively converts `obj` into dicts, lists and JSON scalars.

    Dataclasses become dicts with camelCase keys, plus the derived rates of
    types such as `PhaseErrors`. Floats are never rounded.
    """
    if obj is None or isinstance(obj, (bool, int, float)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, str):
        return obj
    if isinstance(obj, TrieNode):
        return _trie_to_wire(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        wire = {to_camel(f.name): to_wire(getattr(obj, f.name)) for f in fields(obj)}
        for name, getter in _DERIVED.get(type(obj), ()):
            wire[to_camel(name)] = to_wire(getter(obj))
        return wire
    if isinstance(obj, Mapping):
        return {_key(k): to_wire(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_wire(item) for item in obj]
    raise TypeError(f"Cannot convert {type(obj).__name__} to the wire format.")


class ProfileReportWriter:
    """A stateless service that writes a player profile to a JSON report file."""

    def __init__(self, indent: int = 2):
        self._indent = indent

    def render(self, profile: PlayerProfile) -> str:
        return json.dumps(to_wire(profile), indent=self._indent, ensure_ascii=False)

    def write(self, profile: PlayerProfile, output_path: Path) -> None:
        """
        Writes the wire form of `profile` to `output_path`.

        Raises:
            ReportGenerationError: If the file cannot be written.
        """
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(self.render(profile), encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write profile report.", path=str(output_path), error=str(e))
            raise ReportGenerationError(f"Could not write profile report to {output_path}: {e}") from e

        logger.info("Profile report written.", path=str(output_path), username=profile.username)
