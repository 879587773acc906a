"""Interactive menu driven by one command token per prompt."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

import requests

from steamachievements import report
from steamachievements.achievements import DEFAULT_TOP_N, analyze
from steamachievements.library import (
    PLAYTIME_UNITS,
    library_stats,
    random_game,
    total_playtime,
)
from steamachievements.models import AchievementReport, OwnedGame, PlayerSummary
from steamachievements.steam import SteamAPIError, SteamClient

logger = logging.getLogger(__name__)

MAIN_HELP = (
    'Valid options are "games", "playtime", "random game", "achievements" '
    'and "quit".'
)
ACHIEVEMENT_HELP = (
    'Valid options are "stats", "closest", "easiest" and "back".'
)


class Menu:
    """Prompt loop over one user's library.

    Parameters
    ----------
    input_fn / output:
        Replaceable ``input`` and ``print`` for testing.
    """

    def __init__(
        self,
        client: SteamClient,
        summary: PlayerSummary,
        games: Sequence[OwnedGame],
        top_n: int = DEFAULT_TOP_N,
        workers: int = 1,
        input_fn: Optional[Callable[[str], str]] = None,
        output: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._client = client
        self._summary = summary
        self._games = games
        self._top_n = top_n
        self._workers = workers
        self._input = input_fn or input
        self._output = output or print
        self._report: Optional[AchievementReport] = None

    def prompt(self, message: str) -> Optional[str]:
        """Ask *message*; ``None`` means the input stream ended."""
        try:
            return self._input(f"\n{message}\n> ").strip().lower()
        except EOFError:
            return None

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        name = self._summary.persona_name
        while True:
            choice = self.prompt("What information would you like?")
            if choice is None or choice in ("quit", "exit"):
                break
            if choice == "games":
                self._show_games()
            elif choice == "playtime":
                self._show_playtime()
            elif choice == "random game":
                game = random_game(self._games)
                self._output(f"{name} should play {game.name}")
            elif choice == "achievements":
                self._achievements()
            elif choice == "help":
                self._output(MAIN_HELP)
            else:
                self._output(
                    'Invalid selection. Please type "help" for a list of valid selections.'
                )

    def _show_games(self) -> None:
        stats = library_stats(self._games)
        for line in report.library_lines(self._summary.persona_name, stats):
            self._output(line)

    def _show_playtime(self) -> None:
        while True:
            unit = self.prompt(
                "What unit would you like the playtime to be in?\n"
                " (y)ears, (d)ays, (h)ours, (m)inutes."
            )
            if unit is None:
                return
            if unit in PLAYTIME_UNITS:
                break
            self._output("Invalid input. Please try again.")
        amount, label = total_playtime(self._games, unit)
        self._output(
            f"{self._summary.persona_name} has a total playtime of {amount} {label}."
        )

    # ------------------------------------------------------------------
    # Achievements sub-menu
    # ------------------------------------------------------------------

    def _achievements(self) -> None:
        if self._report is None:
            self._output("Fetching achievement data, this may take a while...")
            try:
                self._report = analyze(
                    self._client,
                    self._games,
                    self._summary.steam_id,
                    top_n=self._top_n,
                    workers=self._workers,
                )
            except (SteamAPIError, requests.RequestException) as exc:
                logger.debug("Achievement analysis failed", exc_info=True)
                self._output(f"Achievement analysis failed: {exc}")
                return

        while True:
            choice = self.prompt("What would you like to know about your achievements?")
            if choice is None or choice == "back":
                return
            if choice == "stats":
                lines = report.stats_lines(self._report.stats)
            elif choice == "closest":
                lines = report.closest_lines(self._report.closest)
            elif choice == "easiest":
                lines = report.easiest_lines(self._report.easiest)
            elif choice == "help":
                lines = [ACHIEVEMENT_HELP]
            else:
                lines = [f"Option not found. {ACHIEVEMENT_HELP}"]
            for line in lines:
                self._output(line)
