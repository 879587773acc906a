"""Achievement analysis: fetch per-game progress, aggregate it, recommend games."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

import requests

from steamachievements.models import (
    NO_RARITY_DATA,
    AccountStats,
    AchievementReport,
    GameAchievementRecord,
    GlobalAchievement,
    OwnedGame,
    Recommendation,
)
from steamachievements.steam import NotFoundError, SteamClient

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5

# Per-game failures that mean "skip this game" rather than abort the run.
_SKIPPABLE_ERRORS = (NotFoundError, requests.HTTPError, requests.Timeout)


def round_half_up(value: float, places: int = 0) -> float:
    """Round *value* to *places* decimals, halves away from zero."""
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def rarest_percent(table: Sequence[GlobalAchievement]) -> float:
    """Return the lowest global unlock percentage, or ``NO_RARITY_DATA``."""
    if not table:
        return NO_RARITY_DATA
    return min(row.percent for row in table)


class AchievementFetcher:
    """Builds ``GameAchievementRecord`` objects from the Steam API.

    Parameters
    ----------
    client:
        An authenticated ``SteamClient`` instance.
    workers:
        Maximum number of games fetched at once. ``1`` fetches sequentially.
    """

    def __init__(self, client: SteamClient, workers: int = 1) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._client = client
        self._workers = workers

    # ------------------------------------------------------------------
    # Single game
    # ------------------------------------------------------------------

    def fetch_game(
        self, game: OwnedGame, steam_id: str
    ) -> Optional[GameAchievementRecord]:
        """Return the achievement record for *game*, or ``None`` to skip it.

        Games without achievements and games whose data cannot be fetched are
        skipped. Other errors propagate.
        """
        try:
            table = self._client.get_global_achievement_percentages(game.app_id)
        except _SKIPPABLE_ERRORS as exc:
            logger.info("Skipping %s (app_id=%d): %s", game.name, game.app_id, exc)
            return None

        if not table:
            logger.info("%s does not have any achievements", game.name)
            return None

        try:
            personal = self._client.get_player_achievements(steam_id, game.app_id)
        except _SKIPPABLE_ERRORS as exc:
            logger.warning(
                "No personal achievements for %s (app_id=%d): %s",
                game.name,
                game.app_id,
                exc,
            )
            return None

        record = GameAchievementRecord(
            app_id=game.app_id,
            name=game.name,
            total_achievements=len(personal),
            owned_achievement_count=sum(1 for a in personal if a.achieved),
            rarest_achievement_percent=rarest_percent(table),
        )
        logger.debug(
            "%s: %d/%d achievements, rarest %.1f%%",
            record.name,
            record.owned_achievement_count,
            record.total_achievements,
            record.rarest_achievement_percent,
        )
        return record

    # ------------------------------------------------------------------
    # Whole library
    # ------------------------------------------------------------------

    def fetch_all(
        self, games: Sequence[OwnedGame], steam_id: str
    ) -> list[GameAchievementRecord]:
        """Return records for every game in *games* that has achievements.

        The result keeps library order regardless of the number of workers.
        """
        if self._workers == 1 or len(games) <= 1:
            results = [self.fetch_game(game, steam_id) for game in games]
        else:
            results = self._fetch_concurrently(games, steam_id)
        return [r for r in results if r is not None]

    def _fetch_concurrently(
        self, games: Sequence[OwnedGame], steam_id: str
    ) -> list[Optional[GameAchievementRecord]]:
        results: list[Optional[GameAchievementRecord]] = [None] * len(games)
        executor = ThreadPoolExecutor(max_workers=self._workers)
        try:
            futures = {
                executor.submit(self.fetch_game, game, steam_id): index
                for index, game in enumerate(games)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except BaseException:
            # Stop issuing new fetches; in-flight ones finish in the background.
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown()
        return results


# ----------------------------------------------------------------------
# Aggregation
# ----------------------------------------------------------------------


def aggregate(records: Iterable[GameAchievementRecord]) -> AccountStats:
    """Fold *records* into account-wide ``AccountStats``.

    The average is the mean of per-game completion over eligible games, not
    ``earned_total / possible_total``.
    """
    earned = 0
    possible = 0
    eligible = 0
    completion_sum = 0.0
    for record in records:
        earned += record.owned_achievement_count
        possible += record.total_achievements
        completion_sum += record.completion_percentage
        if record.owned_achievement_count != 0 and record.total_achievements != 0:
            eligible += 1

    average = round_half_up(completion_sum / eligible, 2) if eligible else None
    return AccountStats(
        earned_total=earned,
        possible_total=possible,
        eligible_game_count=eligible,
        average_completion_percentage=average,
    )


# ----------------------------------------------------------------------
# Recommendations
# ----------------------------------------------------------------------


def closest_to_completion(
    records: Iterable[GameAchievementRecord], top_n: int = DEFAULT_TOP_N
) -> list[Recommendation]:
    """Return up to *top_n* unfinished games with the fewest missing achievements.

    Ties keep the order of *records*.
    """
    candidates = [r for r in records if r.unowned_count > 0]
    ranked = sorted(candidates, key=lambda r: r.unowned_count)[:top_n]
    return [Recommendation(r.app_id, r.name, r.unowned_count) for r in ranked]


def easiest_to_complete(
    records: Iterable[GameAchievementRecord], top_n: int = DEFAULT_TOP_N
) -> list[Recommendation]:
    """Return up to *top_n* unfinished games whose rarest achievement is most common."""
    candidates = [
        r for r in records if not r.is_complete and r.has_rarity_data
    ]
    ranked = sorted(
        candidates, key=lambda r: r.rarest_achievement_percent, reverse=True
    )[:top_n]
    return [
        Recommendation(r.app_id, r.name, r.rarest_achievement_percent)
        for r in ranked
    ]


def analyze(
    client: SteamClient,
    owned_games: Sequence[OwnedGame],
    steam_id: str,
    top_n: int = DEFAULT_TOP_N,
    workers: int = 1,
) -> AchievementReport:
    """Fetch, aggregate and rank the achievements of *steam_id*'s library."""
    records = AchievementFetcher(client, workers=workers).fetch_all(
        owned_games, steam_id
    )
    logger.info(
        "Analysed %d of %d owned games with achievements",
        len(records),
        len(owned_games),
    )
    stats = aggregate(records)
    return AchievementReport(
        stats=stats,
        closest=closest_to_completion(records, top_n),
        easiest=easiest_to_complete(records, top_n),
        records=records,
    )
