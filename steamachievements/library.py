"""Library reports: player status, game counts, playtime and random picks."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from steamachievements.achievements import round_half_up
from steamachievements.models import OwnedGame, PlayerSummary

PERSONA_STATES = {
    0: "Offline",
    1: "Online",
    2: "Busy",
    3: "Away",
    4: "Snooze",
    5: "Looking to trade",
    6: "Looking to play",
}

# unit key -> (label, minutes per unit)
PLAYTIME_UNITS = {
    "y": ("years", 60 * 24 * 365.25),
    "d": ("days", 60 * 24),
    "h": ("hours", 60),
    "m": ("minutes", 1),
}


class PrivateLibraryError(Exception):
    """Raised when a user owns no games or their library is private."""


@dataclass
class LibraryStats:
    """Counts of owned and unplayed games."""

    game_count: int
    unplayed_count: int
    unplayed_percentage: float  # 0 – 100


def persona_state_name(state: int) -> str:
    return PERSONA_STATES.get(state, "Unknown")


def player_status(summary: PlayerSummary) -> str:
    """Return a one-line description of what *summary*'s user is doing."""
    state = persona_state_name(summary.persona_state)
    if summary.playing_game_name:
        return (
            f"Steam user {summary.persona_name} is currently {state} "
            f"and is playing {summary.playing_game_name}"
        )
    return (
        f"Steam user {summary.persona_name} is currently {state} "
        "and is currently not playing a game."
    )


def ensure_public(games: Sequence[OwnedGame]) -> None:
    """Raise ``PrivateLibraryError`` if *games* is empty."""
    if not games:
        raise PrivateLibraryError(
            "User either does not own any games or has their library private"
        )


def library_stats(games: Sequence[OwnedGame]) -> LibraryStats:
    """Return how many of *games* have never been played."""
    ensure_public(games)
    unplayed = sum(1 for g in games if not g.played)
    return LibraryStats(
        game_count=len(games),
        unplayed_count=unplayed,
        unplayed_percentage=round_half_up(unplayed / len(games) * 100, 2),
    )


def total_playtime(games: Sequence[OwnedGame], unit: str = "h") -> tuple[float, str]:
    """Return the combined playtime of *games* in *unit* and the unit's label.

    *unit* is one of ``y``, ``d``, ``h`` or ``m``.
    """
    try:
        label, minutes_per_unit = PLAYTIME_UNITS[unit.lower()]
    except KeyError:
        raise ValueError(f"Unknown playtime unit: {unit!r}") from None
    minutes = sum(g.playtime_minutes for g in games)
    return round_half_up(minutes / minutes_per_unit, 2), label


def random_game(
    games: Sequence[OwnedGame], rng: Optional[random.Random] = None
) -> OwnedGame:
    """Pick one of *games* at random."""
    ensure_public(games)
    return (rng or random).choice(list(games))
