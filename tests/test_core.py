"""
Core test suite for the power rankings engine.

All tests are module-level functions with inline test data.
No classes, no mocking.
"""

import json
from pathlib import Path

import pandas as pd
import pytest

# =============================================================================
# SMOKE TESTS - Verify imports work
# =============================================================================


def test_import_package():
    """Top-level exports are importable."""
    from powerscore import (
        DEFAULT_CONFIG,
        build_snapshot,
        compute_power_rankings,
        find_league_trades,
        is_fair_trade,
        optimize_lineup,
    )

    assert callable(build_snapshot)
    assert callable(compute_power_rankings)
    assert callable(find_league_trades)
    assert callable(is_fair_trade)
    assert callable(optimize_lineup)
    assert DEFAULT_CONFIG is not None


def test_position_constants():
    from powerscore.config import (
        FLEX_POSITIONS,
        SKILL_POSITIONS,
        STARTING_POSITIONS,
        SUPER_FLEX_POSITIONS,
    )

    assert STARTING_POSITIONS == ("QB", "RB", "WR", "TE", "K", "DEF")
    assert set(FLEX_POSITIONS) == {"RB", "WR", "TE"}
    assert set(SUPER_FLEX_POSITIONS) == {"QB", "RB", "WR", "TE"}
    assert set(SKILL_POSITIONS) == {"QB", "RB", "WR", "TE"}


# =============================================================================
# CONFIG
# =============================================================================


def _raw_config() -> dict:
    import powerscore

    with open(Path(powerscore.__file__).parent / "config.json") as f:
        return json.load(f)


def test_power_weights_sum_to_one():
    """Both league types' four weights sum to 1.0."""
    from powerscore.config import DEFAULT_CONFIG, LEAGUE_TYPES

    for league_type in LEAGUE_TYPES:
        assert DEFAULT_CONFIG.power_weights(league_type).total() == pytest.approx(1.0)


def test_default_power_weights():
    from powerscore.config import DEFAULT_CONFIG

    dynasty = DEFAULT_CONFIG.power_weights("dynasty")
    redraft = DEFAULT_CONFIG.power_weights("redraft")

    assert (dynasty.lineup, dynasty.performance, dynasty.positional, dynasty.depth) == (
        0.50, 0.30, 0.15, 0.05,
    )
    assert (redraft.lineup, redraft.performance, redraft.positional, redraft.depth) == (
        0.35, 0.45, 0.15, 0.05,
    )
    assert DEFAULT_CONFIG.lineup_weight("dynasty") == 0.50
    assert DEFAULT_CONFIG.lineup_weight("redraft") == 0.35


def test_config_rejects_bad_weights():
    """Weights that don't sum to 1.0 fail validation."""
    from powerscore.config import config_from_dict

    raw = _raw_config()
    raw["power_weights"]["dynasty"]["lineup"] = 0.9

    with pytest.raises(AssertionError, match="must sum to 1.0"):
        config_from_dict(raw)


def test_config_rejects_missing_section():
    from powerscore.config import config_from_dict

    raw = _raw_config()
    del raw["trade_engine"]

    with pytest.raises(AssertionError, match="trade_engine"):
        config_from_dict(raw)


def test_config_is_immutable():
    """Config mappings are read-only and dataclasses are frozen."""
    from dataclasses import FrozenInstanceError

    from powerscore.config import DEFAULT_CONFIG

    with pytest.raises(TypeError):
        DEFAULT_CONFIG.slot_weights["RB"] = 5.0
    with pytest.raises(FrozenInstanceError):
        DEFAULT_CONFIG.trade.fairness_tolerance = 0.9


def test_load_config_custom_path(tmp_path):
    """A custom config file is loaded independently of the default."""
    from powerscore.config import DEFAULT_CONFIG, load_config

    raw = _raw_config()
    raw["trade_engine"]["fairness_tolerance"] = 0.2
    path = tmp_path / "config.json"
    path.write_text(json.dumps(raw))

    config = load_config(path)

    assert config.trade.fairness_tolerance == 0.2
    assert DEFAULT_CONFIG.trade.fairness_tolerance == 0.30


def test_blend_projections_auto():
    """'auto' blends projections in redraft leagues only."""
    from powerscore.config import DEFAULT_CONFIG

    assert DEFAULT_CONFIG.value.should_blend("redraft")
    assert not DEFAULT_CONFIG.value.should_blend("dynasty")


# =============================================================================
# MODELS
# =============================================================================


def test_roster_drops_duplicate_players():
    from powerscore.models import Roster

    roster = Roster(roster_id=1, team_name="A", player_ids=("1", "2", "1", "3", "2"))

    assert roster.player_ids == ("1", "2", "3")


def test_player_value_must_be_non_negative():
    from powerscore.models import Player

    player = Player(player_id="1", name="Test", position="RB")

    assert player.with_value(1500, "market").value == 1500.0
    with pytest.raises(AssertionError):
        player.with_value(-1, "market")


def test_team_record_win_pct_ignores_ties():
    from powerscore.models import TeamRecord

    record = TeamRecord(wins=3, losses=1, ties=2)

    assert record.win_pct == pytest.approx(0.75)


def test_team_record_no_games():
    """Zero games played gives 0%, not a division error."""
    from powerscore.models import TeamRecord

    record = TeamRecord()

    assert record.win_pct == 0.0
    assert record.all_play_win_pct == 0.0


def test_invalid_league_type_rejected():
    from powerscore.models import LeagueSettings

    with pytest.raises(AssertionError, match="league_type"):
        LeagueSettings(slots={}, league_type="keeper")


# =============================================================================
# DATA LOADER
# =============================================================================


def test_league_settings_counts_slots():
    from powerscore.data_loader import league_settings_from_positions

    settings = league_settings_from_positions(
        ["QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "K", "DEF", "BN", "BN", "IR", "TAXI"],
        num_teams=12,
    )

    assert settings.slots == {"QB": 1, "RB": 2, "WR": 2, "TE": 1, "K": 1, "DEF": 1}
    assert settings.flex == 1
    assert settings.super_flex == 0
    assert not settings.is_superflex


def test_league_settings_empty_positions():
    """Empty slot list: all zeros and not superflex."""
    from powerscore.data_loader import league_settings_from_positions

    settings = league_settings_from_positions([])

    assert all(count == 0 for count in settings.slots.values())
    assert settings.flex == 0
    assert not settings.is_superflex


def test_superflex_detection():
    """SUPER_FLEX slot or two dedicated QB slots make a superflex league."""
    from powerscore.data_loader import league_settings_from_positions

    assert league_settings_from_positions(["QB", "SUPER_FLEX"]).is_superflex
    assert league_settings_from_positions(["QB", "QB", "RB"]).is_superflex
    assert not league_settings_from_positions(["QB", "RB", "FLEX"]).is_superflex


def test_detect_league_type():
    from powerscore.data_loader import detect_league_type

    assert detect_league_type({"league_type": "redraft"}) == "redraft"
    assert detect_league_type({"settings": {"type": 2}}) == "dynasty"
    assert detect_league_type({"settings": {"type": 0}}) == "redraft"
    assert detect_league_type({}) == "dynasty"


def test_normalize_name():
    from powerscore.data_loader import normalize_name

    assert normalize_name("Amon-Ra St. Brown") == "amonra st brown"
    assert normalize_name("Odell Beckham Jr.") == "odell beckham"
    assert normalize_name("Kenneth Walker III") == "kenneth walker"
    assert normalize_name("José Ramírez") == "jose ramirez"
    assert normalize_name(None) == ""


def test_match_market_values_by_name():
    """Rows without a player_id are matched on normalized name + position."""
    from powerscore.data_loader import match_market_values
    from powerscore.models import Player

    players = {
        "100": Player(player_id="100", name="Kenneth Walker", position="RB"),
        "200": Player(player_id="200", name="Amon-Ra St. Brown", position="WR"),
    }
    market = pd.DataFrame({
        "player_id": ["200", None, None],
        "name": ["Amon-Ra St. Brown", "Kenneth Walker III", "Nobody Real"],
        "pos": ["WR", "RB", "TE"],
        "value_1qb": [8000, 4000, 100],
        "value_2qb": [8000, 4000, 100],
    })

    matched = match_market_values(players, market)

    assert sorted(matched["player_id"]) == ["100", "200"]


def test_numeric_market_ids_mixed_with_name_rows():
    """A float id column (100 -> 100.0) still matches directory id '100'."""
    from powerscore.data_loader import build_snapshot
    from powerscore.power_rankings import compute_power_rankings

    snapshot = build_snapshot(
        league={"roster_positions": ["RB", "WR"]},
        rosters=[{"roster_id": 1, "players": ["100", "200"]}],
        players={
            "100": {"full_name": "A B", "position": "RB"},
            "200": {"full_name": "C D", "position": "WR"},
        },
        market_values=[
            {"player_id": 100, "value_1qb": 5000, "pos": "RB"},
            {"name": "C D", "value_1qb": 3000, "pos": "WR"},
        ],
    )

    assert sorted(snapshot.market_values["player_id"]) == ["100", "200"]

    players = compute_power_rankings(snapshot).players
    assert (players["100"].value, players["100"].value_source) == (5000.0, "market")
    assert (players["200"].value, players["200"].value_source) == (3000.0, "market")


def test_numeric_feed_ids_are_canonical():
    from powerscore.data_loader import normalize_projections, normalize_weekly_stats

    projections = normalize_projections(pd.DataFrame({
        "player_id": [100.0, None, 7],
        "ros_points": [150.0, 90.0, 40.0],
    }))
    weekly = normalize_weekly_stats([
        {"player_id": 100, "ppg": 12.0, "games_played": 4, "games_started": 4},
        {"player_id": None, "ppg": 8.0, "games_played": 4, "games_started": 0},
    ])

    assert list(projections["player_id"]) == ["100", "7"]
    assert list(weekly["player_id"]) == ["100"]


def test_all_play_record():
    """Team compared against every other team every week."""
    from powerscore.data_loader import compute_all_play_record

    matchups = [
        {"week": 1, "matchups": [
            {"roster_id": 1, "points": 120},
            {"roster_id": 2, "points": 100},
            {"roster_id": 3, "points": 130},
        ]},
        {"week": 2, "matchups": [
            {"roster_id": 1, "points": 90},
            {"roster_id": 2, "points": 90},
            {"roster_id": 3, "points": 80},
        ]},
    ]

    assert compute_all_play_record(1, matchups) == (2, 1, 1)
    assert compute_all_play_record(3, matchups) == (2, 2, 0)
    assert compute_all_play_record(9, matchups) == (0, 0, 0)


def test_build_snapshot_requires_league():
    from powerscore.data_loader import build_snapshot

    with pytest.raises(AssertionError, match="roster_positions"):
        build_snapshot(league={"name": "x"}, rosters=[{"roster_id": 1}], players={})


def test_build_snapshot_requires_rosters():
    from powerscore.data_loader import build_snapshot

    with pytest.raises(AssertionError, match="Roster list"):
        build_snapshot(league={"roster_positions": ["QB"]}, rosters=[], players={})


def test_build_snapshot():
    from powerscore.data_loader import build_snapshot

    snapshot = build_snapshot(
        league={"name": "L", "season": "2024", "roster_positions": ["QB", "RB", "BN"],
                "settings": {"type": 2, "leg": 6}},
        rosters=[
            {"roster_id": 1, "owner_id": "u1", "players": ["1", "2"],
             "settings": {"wins": 4, "losses": 1, "fpts": 600, "fpts_decimal": 50}},
            {"roster_id": 2, "owner_id": "u9", "players": ["3"]},
        ],
        players={
            "1": {"full_name": "Josh Allen", "position": "QB", "team": "BUF", "age": 28},
            "2": {"first_name": "Bijan", "last_name": "Robinson", "position": "RB"},
            "3": {"position": "DEF", "team": "SF"},
            "4": {"full_name": "No Position"},
        },
        users=[{"user_id": "u1", "display_name": "Alpha"}],
    )

    assert snapshot.settings.league_type == "dynasty"
    assert snapshot.settings.week == 6
    assert snapshot.settings.num_teams == 2
    assert [r.team_name for r in snapshot.rosters] == ["Alpha", "Team 2"]
    assert snapshot.players["2"].name == "Bijan Robinson"
    assert snapshot.players["3"].name == "SF"
    assert "4" not in snapshot.players
    assert snapshot.records[1].points_for == pytest.approx(600.5)
    assert snapshot.records[2].wins == 0
    assert snapshot.market_values is None


def test_weekly_projection_rows_are_summed():
    from powerscore.data_loader import normalize_projections

    df = normalize_projections([
        {"player_id": "1", "week": 10, "pts": 12.5},
        {"player_id": "1", "week": 11, "pts": 7.5},
        {"player_id": "2", "week": 10, "pts": 3.0},
    ])

    lookup = dict(zip(df["player_id"], df["ros_points"]))
    assert lookup == {"1": pytest.approx(20.0), "2": pytest.approx(3.0)}


def test_load_snapshot(tmp_path):
    from powerscore.data_loader import load_snapshot

    raw = {
        "league": {"roster_positions": ["QB", "WR"]},
        "rosters": [{"roster_id": 1, "players": ["1"]}],
        "players": {"1": {"full_name": "A Player", "position": "WR"}},
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(raw))

    snapshot = load_snapshot(path)

    assert len(snapshot.rosters) == 1
    assert snapshot.players["1"].position == "WR"
