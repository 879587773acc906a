"""Text rendering of achievement results, shared by the CLI and the menu."""

from __future__ import annotations

from steamachievements.achievements import round_half_up
from steamachievements.library import LibraryStats
from steamachievements.models import AccountStats, Recommendation


def stats_lines(stats: AccountStats) -> list[str]:
    lines = [
        f"  Achievements earned : {stats.earned_total} / {stats.possible_total}",
        f"  Games with progress : {stats.eligible_game_count}",
    ]
    if stats.average_completion_percentage is None:
        lines.append("  Average completion  : no statistics available")
    else:
        lines.append(
            f"  Average completion  : {stats.average_completion_percentage:.2f}%"
        )
    return lines


def closest_lines(entries: list[Recommendation]) -> list[str]:
    if not entries:
        return ["  No unfinished games with achievements."]
    return [
        f"  {i}. {e.name} ({e.value} achievement{'s' if e.value != 1 else ''} left)"
        for i, e in enumerate(entries, start=1)
    ]


def easiest_lines(entries: list[Recommendation]) -> list[str]:
    if not entries:
        return ["  No unfinished games with rarity data."]
    return [
        f"  {i}. {e.name} (rarest achievement unlocked by "
        f"{int(round_half_up(e.value))}% of players)"
        for i, e in enumerate(entries, start=1)
    ]


def library_lines(persona_name: str, stats: LibraryStats) -> list[str]:
    lines = [
        f"User {persona_name} currently owns {stats.game_count} games. "
        f"{stats.unplayed_count} of which are unplayed."
    ]
    if stats.unplayed_count:
        lines.append(
            f"This means that {persona_name} has never played "
            f"{stats.unplayed_percentage:.2f}% of their library."
        )
    else:
        lines.append(f"{persona_name} has no unplayed games. What a gamer!")
    return lines
