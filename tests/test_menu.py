"""Tests for steamachievements.menu (Menu)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from steamachievements.menu import ACHIEVEMENT_HELP, MAIN_HELP, Menu
from steamachievements.models import (
    GlobalAchievement,
    OwnedGame,
    PlayerAchievement,
    PlayerSummary,
)
from steamachievements.steam import SteamAPIError, SteamClient

STEAM_ID = "76561198000000001"


@pytest.fixture()
def client():
    mock = MagicMock(spec=SteamClient)
    mock.get_global_achievement_percentages.return_value = [
        GlobalAchievement("ACH1", 70.0),
        GlobalAchievement("ACH2", 35.4),
    ]
    mock.get_player_achievements.return_value = [
        PlayerAchievement("ACH1", achieved=True),
        PlayerAchievement("ACH2", achieved=False),
    ]
    return mock


def _run(client, answers, games=None):
    output: list[str] = []
    replies = iter(answers)

    def fake_input(_prompt):
        try:
            return next(replies)
        except StopIteration:
            raise EOFError from None

    menu = Menu(
        client,
        PlayerSummary(STEAM_ID, "Alice"),
        games or [
            OwnedGame(1, "Portal", playtime_minutes=120),
            OwnedGame(2, "Unplayed Game"),
        ],
        input_fn=fake_input,
        output=output.append,
    )
    menu.run()
    return output


class TestMainMenu:
    def test_help_and_invalid_repeat_prompt(self, client):
        output = _run(client, ["help", "nonsense", "quit"])
        assert output[0] == MAIN_HELP
        assert output[1].startswith("Invalid selection")
        assert len(output) == 2

    def test_end_of_input_exits(self, client):
        assert _run(client, []) == []

    def test_games(self, client):
        output = _run(client, ["games", "quit"])
        assert "owns 2 games. 1 of which are unplayed" in output[0]
        assert "50.00% of their library" in output[1]

    def test_playtime_retries_bad_unit(self, client):
        output = _run(client, ["playtime", "weeks", "M", "quit"])
        assert output == [
            "Invalid input. Please try again.",
            "Alice has a total playtime of 120.0 minutes.",
        ]

    def test_random_game(self, client):
        output = _run(client, ["Random Game", "quit"])
        assert output[0].startswith("Alice should play ")


class TestAchievementMenu:
    def test_stats_closest_easiest(self, client):
        output = _run(
            client, ["achievements", "stats", "closest", "easiest", "back", "quit"]
        )
        text = "\n".join(output)
        assert "2 / 4" in text
        assert "50.00%" in text
        assert "1. Portal (1 achievement left)" in text
        assert "unlocked by 35% of players" in text

    def test_unknown_option_lists_choices(self, client):
        output = _run(client, ["achievements", "advice", "help", "back"])
        assert output[-2] == f"Option not found. {ACHIEVEMENT_HELP}"
        assert output[-1] == ACHIEVEMENT_HELP

    def test_report_is_fetched_once_per_session(self, client):
        _run(client, ["achievements", "back", "achievements", "back", "quit"])
        assert client.get_global_achievement_percentages.call_count == 2

    @pytest.mark.parametrize(
        "error", [SteamAPIError("garbage"), requests.ConnectionError("offline")]
    )
    def test_hard_failure_returns_to_main_menu(self, client, error):
        with patch("steamachievements.menu.analyze", side_effect=error):
            output = _run(client, ["achievements", "help", "quit"])
        assert output[-2].startswith("Achievement analysis failed")
        assert output[-1] == MAIN_HELP


class TestMalformedSteamResponses:
    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"achievementpercentages": []},
            {"playerstats": {"success": True, "achievements": ["X"]}},
        ],
    )
    def test_menu_survives_bad_payload(self, payload):
        steam = SteamClient("fake_key")
        good_global = {"achievementpercentages": {"achievements": [{"name": "A", "percent": 5.0}]}}

        def fake_get(url, **kwargs):
            resp = MagicMock()
            resp.status_code = 200
            resp.raise_for_status = MagicMock()
            # The player-achievement case needs a valid global table first.
            if "GetGlobalAchievementPercentages" in url and "playerstats" in payload:
                resp.json.return_value = good_global
            else:
                resp.json.return_value = payload
            return resp

        with patch.object(steam._session, "get", side_effect=fake_get):
            output = _run(steam, ["achievements", "help", "quit"])
        assert output[-2].startswith("Achievement analysis failed")
        assert output[-1] == MAIN_HELP
