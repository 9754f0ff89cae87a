# main.py
"""
Command-line entry point: builds a player profile from a file of provider games.

The games file is either a JSON array or newline-delimited JSON (one game per
line, as the provider's export endpoint streams them).
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from chess_scout.config.settings import settings
from chess_scout.exceptions import ChessScoutError
from chess_scout.orchestration.profile_builder import build_profile
from chess_scout.output.wire_format import ProfileReportWriter
from chess_scout.statistics import StatisticsTracker
from chess_scout.utils.logging_config import setup_logging

logger = structlog.get_logger(__name__)


def load_games(path: Path) -> List[Any]:
    text = path.read_text(encoding="utf-8")
    if text.lstrip().startswith("["):
        return json.loads(text)
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def load_perfs(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    """Accepts either a provider user record or its bare `perfs` object."""
    if path is None:
        return None
    data = json.loads(path.read_text(encoding="utf-8"))
    return data.get("perfs", data) if isinstance(data, dict) else None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Build an opponent profile from a player's game history.")
    parser.add_argument("username", help="The player to model.")
    parser.add_argument("games", type=Path, help="JSON or NDJSON file of provider games.")
    parser.add_argument("--perfs", type=Path, default=None, help="JSON file with the player's rating records.")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Write the report here instead of stdout.")
    parser.add_argument("--log-level", default=settings.default_log_level)
    parser.add_argument("--log-json", action="store_true", default=settings.log_json)
    parser.add_argument("--stats", action="store_true", help="Print the batch normalization counters to stderr.")
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level, json_console=args.log_json)

    try:
        profile = build_profile(args.username, load_games(args.games), load_perfs(args.perfs), settings.modeling)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Could not read input.", error=str(e))
        return 2
    except ChessScoutError as e:
        logger.error("Profile could not be built.", error=str(e))
        return 1

    if args.stats:
        sys.stderr.write(StatisticsTracker.from_dict(profile.batch_stats).render() + "\n")

    writer = ProfileReportWriter()
    if args.output is None:
        sys.stdout.write(writer.render(profile) + "\n")
        return 0
    try:
        writer.write(profile, args.output)
    except ChessScoutError:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
