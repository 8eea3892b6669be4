"""Console entry point for typescore: type a passage, get scored, keep history."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from typescore.core.config import Settings, load_settings
from typescore.core.errors import StoreUnavailableError, ValidationError
from typescore.core.results import ResultStoreService
from typescore.core.session import TypingTracker
from typescore.core.storage import JsonLinesStorage

DEFAULT_PASSAGE = "The quick brown fox jumps over the lazy dog."

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="typescore", description="Typing speed and accuracy test.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    type_cmd = sub.add_parser("type", help="Take a typing test and store the result")
    type_cmd.add_argument("--user", required=True)
    type_cmd.add_argument("--passage", default=DEFAULT_PASSAGE)

    history_cmd = sub.add_parser("history", help="Show stored results for a user")
    history_cmd.add_argument("--user", required=True)
    return parser


def build_service(settings: Settings) -> ResultStoreService:
    return ResultStoreService(JsonLinesStorage(settings.data_file))


def take_test(service: ResultStoreService, user_id: str, passage: str) -> int:
    tracker = TypingTracker()
    print(passage)
    tracker.start_attempt(passage)
    try:
        typed = input("> ")
    except EOFError:
        print("No input received, attempt abandoned.", file=sys.stderr)
        return 1
    tracker.record_input(typed)
    score = tracker.finish_attempt()
    print(f"WPM: {score.wpm}  Accuracy: {score.accuracy:.1f}%")

    try:
        service.submit(user_id, score.wpm, score.accuracy)
    except ValidationError as e:
        print(f"Result not saved: {e}", file=sys.stderr)
        return 1
    except StoreUnavailableError as e:
        logger.error("Submission failed: %s", e)
        print("Result not saved: storage unavailable, please try again.", file=sys.stderr)
        return 1
    print("Result saved.")
    return 0


def show_history(service: ResultStoreService, user_id: str) -> int:
    try:
        results = service.get_results(user_id)
    except StoreUnavailableError as e:
        logger.error("Could not load history: %s", e)
        print("History unavailable: storage unavailable.", file=sys.stderr)
        return 1
    if not results:
        print(f"No results for {user_id}.")
        return 0
    for r in results:
        print(f"{r.timestamp}  {r.wpm} wpm  {r.accuracy:.1f}%")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(settings.log_level_value)
    service = build_service(settings)

    if args.command == "type":
        return take_test(service, args.user, args.passage)
    return show_history(service, args.user)


def run() -> None:
    """Run the console app and exit with its status code."""
    sys.exit(main())
