"""Steam Web API client."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from steamachievements.models import (
    GlobalAchievement,
    OwnedGame,
    PlayerAchievement,
    PlayerSummary,
)

_BASE = "https://api.steampowered.com"
_TIMEOUT = 10  # seconds

# Status codes the achievement endpoints use for "this app/user has no data".
_NOT_FOUND_STATUSES = frozenset({400, 403, 404})

# Raised while walking a payload whose shape is not what Steam documents.
_SHAPE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)

_PROFILE_LINK = re.compile(
    r"(?:https?://)?(?:www\.)?steamcommunity\.com/(profiles|id)/([^/?#]+)/?",
    re.IGNORECASE,
)


class SteamAPIError(Exception):
    """Raised when the Steam API returns an unexpected response."""


class NotFoundError(SteamAPIError):
    """Raised when Steam has no data for the requested user or app."""


class SteamClient:
    """Thin wrapper around the Steam Web API.

    Parameters
    ----------
    api_key:
        Your Steam Web API key (https://steamcommunity.com/dev/apikey).
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(self, api_key: str, timeout: float = _TIMEOUT) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self._key = api_key
        self._timeout = timeout
        self._session = requests.Session()
        self._session.params = {"key": self._key, "format": "json"}  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, not_found: bool = False, **params: Any) -> Any:
        url = f"{_BASE}/{path}"
        resp = self._session.get(url, params=params, timeout=self._timeout)
        if not_found and resp.status_code in _NOT_FOUND_STATUSES:
            raise NotFoundError(f"No data at {path} (HTTP {resp.status_code})")
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as exc:
            raise SteamAPIError(f"Malformed JSON from {path}") from exc
        if not isinstance(data, dict):
            raise SteamAPIError(f"Expected a JSON object from {path}")
        return data

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    def get_player_summary(self, steam_id: str) -> PlayerSummary:
        """Return the profile summary for *steam_id*.

        Raises ``NotFoundError`` if the player is not found.
        """
        data = self._get(
            "ISteamUser/GetPlayerSummaries/v2/", steamids=steam_id
        )
        try:
            players = data.get("response", {}).get("players", [])
            if not players:
                raise NotFoundError(f"Player not found for steam_id={steam_id!r}")
            raw = players[0]
            return PlayerSummary(
                steam_id=str(raw["steamid"]),
                persona_name=raw.get("personaname", ""),
                profile_url=raw.get("profileurl", ""),
                persona_state=int(raw.get("personastate", 0)),
                playing_game_name=raw.get("gameextrainfo"),
            )
        except _SHAPE_ERRORS as exc:
            raise SteamAPIError(
                f"Unexpected player summary payload for steam_id={steam_id!r}"
            ) from exc

    def get_owned_games(
        self, steam_id: str, include_free_games: bool = True
    ) -> list[OwnedGame]:
        """Return the games owned by *steam_id*, in library order.

        An empty list means the library is empty or private.
        """
        data = self._get(
            "IPlayerService/GetOwnedGames/v1/",
            steamid=steam_id,
            include_appinfo=1,
            include_played_free_games=int(include_free_games),
        )
        games: list[OwnedGame] = []
        try:
            for raw in data.get("response", {}).get("games", []):
                app_id = raw.get("appid")
                if not app_id:
                    continue
                games.append(
                    OwnedGame(
                        app_id=app_id,
                        name=raw.get("name", f"App {app_id}"),
                        playtime_minutes=raw.get("playtime_forever", 0),
                        last_played=self.parse_last_played(
                            raw.get("rtime_last_played")
                        ),
                    )
                )
        except _SHAPE_ERRORS as exc:
            raise SteamAPIError(
                f"Unexpected owned games payload for steam_id={steam_id!r}"
            ) from exc
        return games

    def resolve_vanity_url(self, vanity_name: str) -> str:
        """Return the 64-bit Steam ID behind a custom profile name.

        Raises ``NotFoundError`` when the name does not resolve.
        """
        data = self._get("ISteamUser/ResolveVanityURL/v1/", vanityurl=vanity_name)
        response = data.get("response")
        if not isinstance(response, dict):
            raise SteamAPIError("Unexpected ResolveVanityURL payload")
        if response.get("success") != 1 or not response.get("steamid"):
            raise NotFoundError(f"Vanity URL not resolved: {vanity_name!r}")
        return str(response["steamid"])

    def get_global_achievement_percentages(
        self, app_id: int
    ) -> list[GlobalAchievement]:
        """Return the global unlock percentage of every achievement in *app_id*.

        Raises ``NotFoundError`` when Steam has no achievement data for the app.
        """
        data = self._get(
            "ISteamUserStats/GetGlobalAchievementPercentagesForApp/v2/",
            not_found=True,
            gameid=app_id,
        )
        table = data.get("achievementpercentages")
        if table is None:
            raise NotFoundError(f"No global achievement data for app_id={app_id}")
        try:
            rows = table.get("achievements", [])
            return [
                GlobalAchievement(name=row["name"], percent=float(row["percent"]))
                for row in rows
            ]
        except _SHAPE_ERRORS as exc:
            raise SteamAPIError(
                f"Unexpected global achievement payload for app_id={app_id}"
            ) from exc

    def get_player_achievements(
        self, steam_id: str, app_id: int
    ) -> list[PlayerAchievement]:
        """Return the unlock status of each achievement in *app_id* for *steam_id*.

        Raises ``NotFoundError`` when the game has no stats or the profile is
        private.
        """
        data = self._get(
            "ISteamUserStats/GetPlayerAchievements/v1/",
            not_found=True,
            steamid=steam_id,
            appid=app_id,
        )
        try:
            playerstats = data.get("playerstats", {})
            if not playerstats.get("success", False):
                raise NotFoundError(
                    f"No achievements for steam_id={steam_id!r} app_id={app_id}: "
                    f"{playerstats.get('error', 'unknown error')}"
                )
            achievements: list[PlayerAchievement] = []
            for raw in playerstats.get("achievements", []):
                achievements.append(
                    PlayerAchievement(
                        api_name=raw.get("apiname", ""),
                        achieved=bool(raw.get("achieved", 0)),
                        unlock_time=self.parse_last_played(raw.get("unlocktime")),
                    )
                )
        except _SHAPE_ERRORS as exc:
            raise SteamAPIError(
                f"Unexpected player achievement payload for app_id={app_id}"
            ) from exc
        return achievements

    # ------------------------------------------------------------------
    # Convenience parsers
    # ------------------------------------------------------------------

    @staticmethod
    def parse_last_played(unix_ts: Optional[int]) -> Optional[datetime]:
        """Convert a Unix timestamp to a UTC-aware *datetime*, or ``None``."""
        if not unix_ts:
            return None
        return datetime.fromtimestamp(unix_ts, tz=timezone.utc)


def resolve_steam_id(client: SteamClient, user: str) -> str:
    """Turn a Steam ID, profile link or vanity name into a 64-bit Steam ID.

    Raises ``NotFoundError`` if *user* cannot be resolved.
    """
    text = user.strip()
    if not text:
        raise NotFoundError("Empty Steam user")
    if text.isdigit():
        return text
    match = _PROFILE_LINK.search(text)
    if match:
        kind, value = match.groups()
        if kind.lower() == "profiles":
            if not value.isdigit():
                raise NotFoundError(f"Invalid profile link: {user!r}")
            return value
        text = value
    return client.resolve_vanity_url(text)
