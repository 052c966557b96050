"""Play the guessing game in a terminal, or print dataset statistics."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from legend_guesser.config import get_settings
from legend_guesser.dataset import load_dataset
from legend_guesser.errors import DatasetError
from legend_guesser.logging_utils import setup_logging
from legend_guesser.models import Conference, Player
from legend_guesser.session import GameOutcome, GameSession, GameState
from legend_guesser.simulation import build_stats

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Guess the NBA player you are thinking of")
    parser.add_argument("--data", type=Path, default=None, help="Path to the players CSV/JSON")
    parser.add_argument("--log-level", default=None, help="Logging level (e.g., DEBUG, INFO)")
    subparsers = parser.add_subparsers(dest="command")

    play = subparsers.add_parser("play", help="Play an interactive game")
    play.add_argument(
        "--conference",
        choices=[conference.value for conference in Conference],
        default=None,
        help="Skip the conference prompt",
    )

    stats = subparsers.add_parser("stats", help="Simulate games and print statistics")
    stats.add_argument("--sample-size", type=_positive_int, default=None, help="Players to simulate")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on")
    return parser.parse_args(argv)


def ask_yes_no(question: str, input_fn: InputFn = input) -> bool:
    while True:
        ans = input_fn(question + " (yes/no): ").strip().lower()
        if ans in ["yes", "y"]:
            return True
        elif ans in ["no", "n"]:
            return False
        else:
            print("Please answer yes or no.")


def ask_choice(options: Sequence[str], input_fn: InputFn = input) -> str:
    print("\nWhich one is it?")
    for index, option in enumerate(options, start=1):
        print(f"{index}: {option}")
    while True:
        raw = input_fn("Enter number: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1]
        print("Invalid number.")


def ask_conference(input_fn: InputFn = input) -> Conference:
    while True:
        raw = input_fn("East or West? ").strip().lower()
        if raw in {"east", "e"}:
            return Conference.EAST
        if raw in {"west", "w"}:
            return Conference.WEST
        print("Please answer east or west.")


def play_game(
    players: Sequence[Player],
    conference: Optional[Conference] = None,
    input_fn: InputFn = input,
) -> GameSession:
    """Run one interactive game and return the finished session."""

    session = GameSession(players=tuple(players))
    print("\n🏀 Think of an active NBA player and I'll try to guess who it is!")
    session.start(conference or ask_conference(input_fn))

    while session.state is GameState.PLAYING:
        if session.awaiting_choice:
            session.choose(ask_choice(session.choices, input_fn))
            continue
        print(f"Players remaining: {session.remaining}")
        session.answer(ask_yes_no(session.active_question.text, input_fn))
        print()

    if session.outcome is GameOutcome.FOUND:
        print(f"🎉 Your player is: {session.guess}")
        print(f"It took me {session.questions_asked} questions.")
    else:
        print("No players match these answers. Could not identify your player.")
    return session


def print_stats(players: Sequence[Player], sample_size: int) -> None:
    stats = build_stats(players, sample_size=sample_size)
    print("\nGame Statistics:")
    print("Total Players:", stats.total_players)
    for conference, count in stats.players_by_conference.items():
        print(f"  {conference.title()}: {count}")
    print("Theoretical Minimum Questions:", stats.theoretical_min)
    print("Average Questions:", stats.actual_average)
    print("\nAttribute Importance (bits):")
    for attribute, gain in stats.attribute_importance.items():
        print(f"  {attribute}: {gain}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level)

    if args.command == "serve":
        import uvicorn

        # the app is imported by uvicorn and reads its settings from the environment
        if args.data is not None:
            os.environ["LEGEND_DATA_PATH"] = str(args.data.resolve())
        if args.log_level:
            os.environ["LOG_LEVEL"] = args.log_level
        get_settings.cache_clear()
        uvicorn.run("legend_guesser.main:app", host=args.host, port=args.port)
        return 0

    try:
        players = load_dataset(args.data or settings.data_path)
    except DatasetError as exc:
        logger.error("%s", exc)
        return 1

    if args.command == "stats":
        print_stats(players, args.sample_size or settings.stats_sample_size)
        return 0

    conference = Conference(args.conference) if getattr(args, "conference", None) else None
    session = play_game(players, conference=conference)
    return 0 if session.outcome is GameOutcome.FOUND else 2


if __name__ == "__main__":
    sys.exit(main())
