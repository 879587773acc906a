"""Command-line interface for steamachievements."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import requests

from steamachievements import report
from steamachievements.achievements import DEFAULT_TOP_N, analyze
from steamachievements.config import (
    DEFAULT_KEY_FILE,
    ConfigError,
    read_api_key,
    resolve_api_key,
    write_api_key,
)
from steamachievements.library import (
    PLAYTIME_UNITS,
    PrivateLibraryError,
    ensure_public,
    library_stats,
    player_status,
    random_game,
    total_playtime,
)
from steamachievements.menu import Menu
from steamachievements.models import OwnedGame, PlayerSummary
from steamachievements.steam import SteamAPIError, SteamClient, resolve_steam_id


def _key_file(args: argparse.Namespace) -> Path:
    return Path(getattr(args, "key_file", None) or DEFAULT_KEY_FILE)


def _get_client(args: argparse.Namespace) -> SteamClient:
    api_key = resolve_api_key(getattr(args, "api_key", None), _key_file(args))
    return SteamClient(api_key)


def _load_user(
    args: argparse.Namespace,
) -> tuple[SteamClient, PlayerSummary, list[OwnedGame]]:
    client = _get_client(args)
    steam_id = resolve_steam_id(client, args.user)
    summary = client.get_player_summary(steam_id)
    games = client.get_owned_games(steam_id)
    return client, summary, games


# ------------------------------------------------------------------
# Sub-command handlers
# ------------------------------------------------------------------


def cmd_apikey(args: argparse.Namespace) -> None:
    path = _key_file(args)
    if args.key:
        previous = write_api_key(args.key, path)
        if previous:
            print(f"API key successfully changed from {previous} to {args.key.strip()}")
        else:
            print("API key successfully added and the software is ready to use.")
        return
    key = read_api_key(path)
    if key is None:
        raise ConfigError(
            "API key file not found. Run 'apikey KEY' to set your API key."
        )
    print(f"Current API key is {key}.")


def cmd_status(args: argparse.Namespace) -> None:
    client = _get_client(args)
    summary = client.get_player_summary(resolve_steam_id(client, args.user))
    print(player_status(summary))


def cmd_games(args: argparse.Namespace) -> None:
    _, summary, games = _load_user(args)
    for line in report.library_lines(summary.persona_name, library_stats(games)):
        print(line)


def cmd_playtime(args: argparse.Namespace) -> None:
    _, summary, games = _load_user(args)
    ensure_public(games)
    amount, label = total_playtime(games, args.unit)
    print(f"{summary.persona_name} has a total playtime of {amount} {label}.")


def cmd_random(args: argparse.Namespace) -> None:
    _, summary, games = _load_user(args)
    game = random_game(games)
    print(f"{summary.persona_name} should play {game.name}")


def cmd_achievements(args: argparse.Namespace) -> None:
    client, summary, games = _load_user(args)
    ensure_public(games)
    result = analyze(
        client, games, summary.steam_id, top_n=args.top_n, workers=args.workers
    )

    print(f"\n=== Achievements for {summary.persona_name} ===")
    for line in report.stats_lines(result.stats):
        print(line)
    print(f"\n  Top {args.top_n} games closest to completion:")
    for line in report.closest_lines(result.closest):
        print(line)
    print(f"\n  Top {args.top_n} easiest games to complete:")
    for line in report.easiest_lines(result.easiest):
        print(line)


def cmd_menu(args: argparse.Namespace) -> None:
    client, summary, games = _load_user(args)
    ensure_public(games)
    print(player_status(summary))
    Menu(client, summary, games, top_n=args.top_n, workers=args.workers).run()
    print("\nThank you for using the Steam Achievement Tracker.")


# ------------------------------------------------------------------
# Argument parser
# ------------------------------------------------------------------


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="steamachievements",
        description="Steam library statistics and achievement recommendations.",
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        metavar="KEY",
        default=None,
        help="Steam Web API key (overrides STEAM_API_KEY and the key file)",
    )
    parser.add_argument(
        "--key-file",
        dest="key_file",
        metavar="PATH",
        default=None,
        help="Path to the API key file (default: ~/.steamachievements/apikey)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-game fetch details",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    key_p = subparsers.add_parser("apikey", help="Show or store the API key")
    key_p.add_argument("key", nargs="?", help="New API key to store")
    key_p.set_defaults(func=cmd_apikey)

    user_help = "Steam ID, profile link or custom URL name"

    status_p = subparsers.add_parser("status", help="Show a user's online status")
    status_p.add_argument("user", help=user_help)
    status_p.set_defaults(func=cmd_status)

    games_p = subparsers.add_parser("games", help="Count owned and unplayed games")
    games_p.add_argument("user", help=user_help)
    games_p.set_defaults(func=cmd_games)

    playtime_p = subparsers.add_parser("playtime", help="Show total playtime")
    playtime_p.add_argument("user", help=user_help)
    playtime_p.add_argument(
        "--unit",
        choices=sorted(PLAYTIME_UNITS),
        default="h",
        help="(y)ears, (d)ays, (h)ours or (m)inutes (default: h)",
    )
    playtime_p.set_defaults(func=cmd_playtime)

    random_p = subparsers.add_parser("random", help="Pick a random owned game")
    random_p.add_argument("user", help=user_help)
    random_p.set_defaults(func=cmd_random)

    for name, func, help_text in (
        ("achievements", cmd_achievements, "Achievement stats and recommendations"),
        ("menu", cmd_menu, "Interactive menu"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("user", help=user_help)
        sub.add_argument(
            "--top-n",
            dest="top_n",
            type=_positive_int,
            default=DEFAULT_TOP_N,
            help=f"Number of recommendations to show (default: {DEFAULT_TOP_N})",
        )
        sub.add_argument(
            "--workers",
            type=_positive_int,
            default=1,
            help="Games fetched in parallel (default: 1)",
        )
        sub.set_defaults(func=func)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    try:
        func(args)
    except (ConfigError, PrivateLibraryError, SteamAPIError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except requests.RequestException as exc:
        print(
            f"Error: unable to reach Steam ({exc}). Check your connection "
            "and API key.",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
