"""Data models for steamachievements."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

#: Rarest-achievement value for a game with no rarity data. It lies outside
#: the valid 0-100 range so it never wins a min/max comparison by accident.
NO_RARITY_DATA = 101.0


@dataclass
class PlayerSummary:
    """Public profile information for a Steam user."""

    steam_id: str
    persona_name: str
    profile_url: str = ""
    persona_state: int = 0
    playing_game_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.steam_id or not self.steam_id.isdigit():
            raise ValueError(f"Invalid steam_id: {self.steam_id!r}")


@dataclass
class OwnedGame:
    """A game in a user's library."""

    app_id: int
    name: str
    playtime_minutes: int = 0
    last_played: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.app_id <= 0:
            raise ValueError(f"Invalid app_id: {self.app_id}")
        if self.playtime_minutes < 0:
            raise ValueError("playtime_minutes cannot be negative")

    @property
    def played(self) -> bool:
        return self.playtime_minutes > 0


@dataclass
class GlobalAchievement:
    """One row of a game's global achievement-rarity table."""

    name: str
    percent: float


@dataclass
class PlayerAchievement:
    """A user's unlock status for a single achievement."""

    api_name: str
    achieved: bool = False
    unlock_time: Optional[datetime] = None


@dataclass(frozen=True)
class GameAchievementRecord:
    """Achievement progress of one owned game.

    Built once by the fetcher with every field populated; the derived values
    are read through properties rather than stored.
    """

    app_id: int
    name: str
    total_achievements: int
    owned_achievement_count: int
    rarest_achievement_percent: float = NO_RARITY_DATA

    def __post_init__(self) -> None:
        if self.total_achievements < 0:
            raise ValueError("total_achievements cannot be negative")
        if self.owned_achievement_count < 0:
            raise ValueError("owned_achievement_count cannot be negative")
        if self.owned_achievement_count > self.total_achievements:
            raise ValueError(
                f"owned_achievement_count ({self.owned_achievement_count}) "
                f"exceeds total_achievements ({self.total_achievements})"
            )

    @property
    def completion_percentage(self) -> float:
        """Percentage of achievements unlocked; ``0.0`` for a game with none."""
        if self.total_achievements == 0:
            return 0.0
        return self.owned_achievement_count / self.total_achievements * 100

    @property
    def unowned_count(self) -> int:
        return self.total_achievements - self.owned_achievement_count

    @property
    def is_complete(self) -> bool:
        return self.owned_achievement_count == self.total_achievements

    @property
    def has_rarity_data(self) -> bool:
        return self.rarest_achievement_percent != NO_RARITY_DATA


@dataclass
class AccountStats:
    """Account-wide achievement totals.

    ``average_completion_percentage`` is the mean of per-game completion over
    eligible games (at least one achievement unlocked), or ``None`` when no
    game is eligible.
    """

    earned_total: int
    possible_total: int
    eligible_game_count: int
    average_completion_percentage: Optional[float]

    @property
    def has_eligible_games(self) -> bool:
        return self.eligible_game_count > 0

    @property
    def overall_ratio_percentage(self) -> float:
        """``earned_total / possible_total`` as a percentage (0.0 when empty)."""
        if self.possible_total == 0:
            return 0.0
        return self.earned_total / self.possible_total * 100


@dataclass
class Recommendation:
    """One entry of a recommendation ranking."""

    app_id: int
    name: str
    value: int | float  # missing achievements (int) or rarest percent


@dataclass
class AchievementReport:
    """Everything ``analyze`` produces for one account."""

    stats: AccountStats
    closest: list[Recommendation] = field(default_factory=list)
    easiest: list[Recommendation] = field(default_factory=list)
    records: list[GameAchievementRecord] = field(default_factory=list)
