"""Tests for value resolution, scarcity, lineups and power rankings."""

import json
from dataclasses import replace

import pandas as pd
import pytest

from powerscore.config import DEFAULT_CONFIG
from powerscore.data_loader import build_snapshot, league_settings_from_positions
from powerscore.lineup_optimizer import optimize_lineup, slot_capacities
from powerscore.models import Lineup, LineupSlot, Player, ScarcityMap, TeamRecord
from powerscore.power_rankings import (
    compute_power_rankings,
    depth_score,
    lineup_value_score,
    performance_score,
    positional_advantage_score,
    slot_averages,
)
from powerscore.scarcity import (
    compute_scarcity,
    find_scarcity_snapshot,
    season_phase_scarcity,
    starters_needed,
)
from powerscore.value_resolver import (
    player_values_frame,
    resolve_player_values,
    summarize_value_sources,
)

STANDARD_POSITIONS = ["QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "K", "DEF", "BN", "BN", "BN"]


def _player(pid: str, pos: str, value: float) -> Player:
    return Player(player_id=pid, name=f"{pos} {pid}", position=pos, value=value)


def _raw_league(league_type: str = "dynasty") -> dict:
    """Three-team league with market values for every skill player."""
    positions = ["QB", "QB", "RB", "RB", "RB", "WR", "WR", "WR", "WR", "TE", "TE", "K", "DEF"]
    base_values = [6000, 1500, 5000, 3000, 1200, 4500, 3500, 2000, 900, 2500, 700, 0, 0]
    factors = {1: 1.0, 2: 0.8, 3: 1.2}

    players = {}
    rosters = []
    market = []
    for roster_id, factor in factors.items():
        ids = []
        for i, (pos, base) in enumerate(zip(positions, base_values)):
            pid = f"{roster_id}{i:02d}"
            ids.append(pid)
            players[pid] = {"full_name": f"Player {pid}", "position": pos, "team": "FA"}
            if base > 0:
                market.append({
                    "player_id": pid, "pos": pos, "age": 25,
                    "value_1qb": base * factor, "value_2qb": base * factor * 1.1,
                })
        rosters.append({
            "roster_id": roster_id,
            "owner_id": f"u{roster_id}",
            "players": ids,
            "settings": {"wins": roster_id, "losses": 3 - roster_id, "fpts": 300},
        })

    matchups = [
        {"week": 1, "matchups": [
            {"roster_id": 1, "points": 110}, {"roster_id": 2, "points": 95}, {"roster_id": 3, "points": 120},
        ]},
        {"week": 2, "matchups": [
            {"roster_id": 1, "points": 100}, {"roster_id": 2, "points": 105}, {"roster_id": 3, "points": 99},
        ]},
    ]

    return {
        "league": {"name": "Test League", "season": "2024", "league_type": league_type,
                   "roster_positions": STANDARD_POSITIONS, "settings": {"leg": 3}},
        "rosters": rosters,
        "users": [{"user_id": f"u{i}", "display_name": name} for i, name in [(1, "Alpha"), (2, "Bravo"), (3, "Charlie")]],
        "players": players,
        "matchups": matchups,
        "market_values": market,
    }


def _snapshot(league_type: str = "dynasty"):
    return build_snapshot(**_raw_league(league_type))


class TestLineupOptimizer:
    """Tests for optimize_lineup."""

    def test_reference_lineup_scenario(self):
        """12-team 1-QB league: best remaining WR takes FLEX, total 17,000."""
        settings = league_settings_from_positions(STANDARD_POSITIONS, num_teams=12)
        players = [
            _player("rb1", "RB", 5000), _player("rb2", "RB", 1200),
            _player("wr1", "WR", 4000), _player("wr2", "WR", 2000), _player("wr3", "WR", 800),
            _player("te1", "TE", 1000), _player("qb1", "QB", 3000),
        ]

        lineup = optimize_lineup(players, settings)

        assert lineup.total_value == 17000
        slots = {s.player_id: s.slot for s in lineup.starters}
        assert slots == {
            "qb1": "QB", "rb1": "RB", "rb2": "RB", "wr1": "WR", "wr2": "WR",
            "te1": "TE", "wr3": "FLEX",
        }

    def test_underfilled_positions_leave_slots_empty(self):
        """Missing K/DEF and a single RB just leave slots open."""
        settings = league_settings_from_positions(STANDARD_POSITIONS, num_teams=12)
        lineup = optimize_lineup([_player("rb1", "RB", 3000)], settings)

        assert lineup.slot_counts() == {"RB": 1}
        assert lineup.total_value == 3000

    def test_capacity_and_uniqueness(self):
        """No slot over capacity and no player used twice, for a deep roster."""
        settings = league_settings_from_positions(
            ["QB", "RB", "RB", "WR", "WR", "WR", "TE", "FLEX", "FLEX", "SUPER_FLEX", "K", "DEF"],
            num_teams=10,
        )
        players = [
            _player(f"p{i}", pos, 100 * ((i * 37) % 50))
            for i, pos in enumerate(["QB", "RB", "WR", "TE", "K", "DEF"] * 4)
        ]

        lineup = optimize_lineup(players, settings)
        capacities = slot_capacities(settings)

        for slot, count in lineup.slot_counts().items():
            assert count <= capacities[slot]
        ids = [s.player_id for s in lineup.starters]
        assert len(ids) == len(set(ids))

    def test_superflex_takes_best_remaining_qb(self):
        settings = league_settings_from_positions(["QB", "RB", "SUPER_FLEX"])
        players = [_player("qb1", "QB", 6000), _player("qb2", "QB", 5000), _player("rb1", "RB", 4000), _player("rb2", "RB", 3000)]

        lineup = optimize_lineup(players, settings)

        sf = [s for s in lineup.starters if s.slot == "SUPER_FLEX"]
        assert [s.player_id for s in sf] == ["qb2"]

    def test_zero_value_players_fill_empty_slots(self):
        settings = league_settings_from_positions(["QB", "K"])
        lineup = optimize_lineup([_player("k1", "K", 0.0)], settings)

        assert [s.player_id for s in lineup.starters] == ["k1"]

    def test_ties_keep_roster_order(self):
        settings = league_settings_from_positions(["WR"])
        lineup = optimize_lineup([_player("a", "WR", 1000), _player("b", "WR", 1000)], settings)

        assert lineup.starters[0].player_id == "a"

    def test_milp_at_least_greedy(self):
        """Optimal solver never does worse than greedy."""
        settings = league_settings_from_positions(["RB", "FLEX", "SUPER_FLEX"])
        players = [_player("qb", "QB", 2000), _player("rb1", "RB", 5000), _player("rb2", "RB", 4000), _player("wr", "WR", 3000)]

        greedy = optimize_lineup(players, settings, method="greedy")
        milp = optimize_lineup(players, settings, method="milp")

        assert milp.total_value >= greedy.total_value
        assert milp.total_value == pytest.approx(12000)

    def test_unknown_method_rejected(self):
        settings = league_settings_from_positions(["QB"])
        with pytest.raises(AssertionError):
            optimize_lineup([], settings, method="random")


class TestScarcity:
    """Tests for the VOR scarcity model and its fallbacks."""

    def test_static_fallback_without_market(self):
        """No market feed in a 1-QB league gives the static table exactly."""
        settings = league_settings_from_positions(STANDARD_POSITIONS, num_teams=12)
        scarcity = compute_scarcity(None, settings, DEFAULT_CONFIG)

        assert scarcity.multipliers == {"QB": 80, "RB": 150, "WR": 100, "TE": 120, "K": 20, "DEF": 25}
        assert scarcity.method == "static"

    def test_superflex_fallback(self):
        settings = league_settings_from_positions(["QB", "SUPER_FLEX", "RB", "WR"], num_teams=12)
        scarcity = compute_scarcity(None, settings, DEFAULT_CONFIG)

        assert scarcity.multipliers["QB"] == 140

    def test_vor_normalization_and_clamp(self):
        """WR is exactly 100; others are clamped to [20, 200]; missing positions fall back."""
        settings = league_settings_from_positions(["QB", "RB", "WR", "TE"], num_teams=2)
        rows = (
            [("WR", v) for v in [9000, 7000, 5000, 3000]]
            + [("RB", v) for v in [9000, 6000, 1000]]
            + [("TE", v) for v in [5000, 4500, 4000]]
            + [("QB", v) for v in [3000, 2950, 2900]]
        )
        market = pd.DataFrame({
            "player_id": [str(i) for i in range(len(rows))],
            "pos": [pos for pos, _ in rows],
            "value_1qb": [v for _, v in rows],
            "value_2qb": [v for _, v in rows],
        })

        scarcity = compute_scarcity(market, settings, DEFAULT_CONFIG)

        assert scarcity.multipliers["WR"] == 100
        assert scarcity.multipliers["RB"] == 200
        assert scarcity.multipliers["TE"] == 25
        assert scarcity.multipliers["QB"] == 20
        assert scarcity.multipliers["K"] == 20
        assert scarcity.multipliers["DEF"] == 25
        assert scarcity.method == "mixed"
        assert set(scarcity.fallback_positions) == {"K", "DEF"}
        assert scarcity.elite_values["WR"] == 9000
        assert scarcity.replacement_values["WR"] == 5000
        for pos, mult in scarcity.multipliers.items():
            assert 20 <= mult <= 200

    def test_zero_wr_vor_uses_static_table(self):
        settings = league_settings_from_positions(["WR", "RB"], num_teams=2)
        market = pd.DataFrame({
            "player_id": ["1", "2", "3", "4"],
            "pos": ["WR", "WR", "WR", "RB"],
            "value_1qb": [1000, 1000, 1000, 5000],
            "value_2qb": [1000, 1000, 1000, 5000],
        })

        scarcity = compute_scarcity(market, settings, DEFAULT_CONFIG)

        assert scarcity.method == "static"
        assert scarcity.multipliers["RB"] == 150

    def test_starters_needed_shares(self):
        settings = league_settings_from_positions(["QB", "RB", "RB", "FLEX", "SUPER_FLEX"], num_teams=10)

        assert starters_needed("RB", settings, DEFAULT_CONFIG) == pytest.approx(20 + 3.3 + 2.0)
        assert starters_needed("QB", settings, DEFAULT_CONFIG) == pytest.approx(10 + 4.0)
        assert starters_needed("K", settings, DEFAULT_CONFIG) == 0

    def test_season_phase_adjustment(self):
        early = season_phase_scarcity(2, False, DEFAULT_CONFIG)
        playoffs = season_phase_scarcity(15, False, DEFAULT_CONFIG)
        mid = season_phase_scarcity(7, False, DEFAULT_CONFIG)

        assert early["RB"] == 165
        assert playoffs["QB"] == 88
        assert mid == {"QB": 80, "RB": 150, "WR": 100, "TE": 120, "K": 20, "DEF": 25}

    def test_snapshot_lookup_order(self):
        snapshots = [
            {"season": "2024", "week": 3, "scarcity_multipliers": {"RB": 140}},
            {"season": "2024", "week": 8, "scarcity_multipliers": {"RB": 160}},
        ]

        exact = find_scarcity_snapshot(snapshots, "2024", 8, False, DEFAULT_CONFIG)
        closest = find_scarcity_snapshot(snapshots, "2024", 5, False, DEFAULT_CONFIG)
        far = find_scarcity_snapshot(snapshots, "2024", 14, False, DEFAULT_CONFIG)
        other_season = find_scarcity_snapshot(
            snapshots, "2023", 5, False, DEFAULT_CONFIG, current={"scarcity_multipliers": {"RB": 1}}
        )
        none = find_scarcity_snapshot([], "2024", 1, False, DEFAULT_CONFIG)

        assert exact["source"] == "exact-snapshot"
        assert closest["multipliers"] == {"RB": 140}
        assert closest["accuracy"] == "high"
        assert far["accuracy"] == "moderate"
        assert other_season["source"] == "current-snapshot"
        assert none["source"] == "season-phase-fallback"


class TestValueResolver:
    """Tests for resolve_player_values tier order."""

    def _snapshot(self, league_type: str):
        return build_snapshot(
            league={"roster_positions": ["QB", "RB", "WR", "TE", "K"], "league_type": league_type},
            rosters=[{"roster_id": 1, "players": ["1", "2", "3", "4", "5"]}],
            players={
                "1": {"full_name": "Q", "position": "QB"},
                "2": {"full_name": "R", "position": "RB"},
                "3": {"full_name": "W", "position": "WR"},
                "4": {"full_name": "K", "position": "K"},
                "5": {"full_name": "T", "position": "TE"},
            },
            market_values=[{"player_id": "1", "pos": "QB", "value_1qb": 4000, "value_2qb": 6000}],
            projections=[{"player_id": "1", "ros_points": 100}, {"player_id": "2", "ros_points": 200}],
            weekly_stats=[{"player_id": "3", "ppg": 15, "games_played": 10, "games_started": 8}],
        )

    def _scarcity(self):
        return ScarcityMap(multipliers=dict(DEFAULT_CONFIG.scarcity.fallback))

    def test_fallback_chain_dynasty(self):
        players = resolve_player_values(self._snapshot("dynasty"), self._scarcity(), DEFAULT_CONFIG)

        assert (players["1"].value, players["1"].value_source) == (4000, "market")
        # Scale factor = max market / max projection = 4000 / 200
        assert (players["2"].value, players["2"].value_source) == (4000, "projection")
        # 15 ppg x WR 100 x 1.1 starter bonus
        assert players["3"].value == pytest.approx(1650)
        assert players["3"].value_source == "ppg"
        assert (players["4"].value, players["4"].value_source) == (50, "floor")
        assert (players["5"].value, players["5"].value_source) == (200, "floor")

    def test_redraft_blends_market_and_projection(self):
        players = resolve_player_values(self._snapshot("redraft"), self._scarcity(), DEFAULT_CONFIG)

        assert players["1"].value == pytest.approx(0.7 * 4000 + 0.3 * 100 * 20)
        assert players["1"].value_source == "market+projection"

    def test_provenance_recorded(self):
        players = resolve_player_values(self._snapshot("dynasty"), self._scarcity(), DEFAULT_CONFIG)

        assert players["1"].ros_projection == 100
        assert players["3"].games_started == 8
        assert summarize_value_sources(players) == {
            "market": 1, "market+projection": 0, "projection": 1, "ppg": 1, "floor": 2,
        }

    def test_no_feeds_never_drops_players(self):
        snapshot = build_snapshot(
            league={"roster_positions": ["QB"]},
            rosters=[{"roster_id": 1, "players": ["1", "2"]}],
            players={"1": {"full_name": "A", "position": "DEF"}, "2": {"full_name": "B", "position": "WR"}},
        )
        players = resolve_player_values(snapshot, self._scarcity(), DEFAULT_CONFIG)

        assert players["1"].value == 100
        assert players["2"].value == 200

    def test_player_values_frame(self):
        snapshot = self._snapshot("dynasty")
        players = resolve_player_values(snapshot, self._scarcity(), DEFAULT_CONFIG)

        df = player_values_frame(players, snapshot.rosters)

        assert len(df) == 5
        assert df["value"].is_monotonic_decreasing
        assert set(df["team_name"]) == {"Team 1"}


class TestComponentScores:
    """Tests for the four component scorers."""

    def test_depth_excludes_positions_without_bench(self):
        """No TE on the bench: TE is left out of the denominator."""
        players = [
            _player("qb1", "QB", 5000),
            _player("te1", "TE", 3000),
            _player("rb1", "RB", 2000),
            _player("wr1", "WR", 1000),
        ]
        lineup = Lineup(roster_id=1, starters=(
            LineupSlot("qb1", "QB qb1", "QB", "QB", 5000),
            LineupSlot("te1", "TE te1", "TE", "TE", 3000),
        ))

        # (2000 + 1000) / (2 x 2000)
        assert depth_score(players, lineup) == pytest.approx(75.0)

    def test_depth_counts_only_best_backup(self):
        players = [_player("rb1", "RB", 1500), _player("rb2", "RB", 1400)]
        assert depth_score(players, Lineup(roster_id=1)) == pytest.approx(75.0)

    def test_depth_no_bench(self):
        assert depth_score([], Lineup(roster_id=1)) == 0.0

    def test_depth_clamped(self):
        players = [_player("qb1", "QB", 9000)]
        assert depth_score(players, Lineup(roster_id=1)) == 100.0

    def test_positional_average_team_scores_50(self):
        lineup = Lineup(roster_id=1, starters=(LineupSlot("a", "A", "RB", "RB", 2000),))
        averages = slot_averages([lineup])

        assert positional_advantage_score(lineup, averages, DEFAULT_CONFIG.slot_weights) == pytest.approx(50.0)

    def test_positional_empty_lineup_scores_0(self):
        assert positional_advantage_score(Lineup(roster_id=1), {}, DEFAULT_CONFIG.slot_weights) == 0.0

    def test_empty_roster_ranks_below_filled_roster(self):
        """A team with no players gets no positional credit; the other team stays at average."""
        snapshot = build_snapshot(
            league={"roster_positions": ["QB", "RB"]},
            rosters=[{"roster_id": 1, "players": ["1", "2"]}, {"roster_id": 2, "players": []}],
            players={
                "1": {"full_name": "Q B", "position": "QB"},
                "2": {"full_name": "R B", "position": "RB"},
            },
        )

        rankings = compute_power_rankings(snapshot)

        assert rankings.get(2).positional_score == 0.0
        assert rankings.get(1).positional_score == pytest.approx(50.0)
        assert [r.roster_id for r in rankings.records] == [1, 2]

    def test_positional_clamped(self):
        strong = Lineup(roster_id=1, starters=(LineupSlot("a", "A", "RB", "RB", 9000),))
        weak = Lineup(roster_id=2, starters=(LineupSlot("b", "B", "RB", "RB", 100),))
        averages = slot_averages([strong, weak])

        assert 50 < positional_advantage_score(strong, averages, DEFAULT_CONFIG.slot_weights) <= 100
        assert 0 <= positional_advantage_score(weak, averages, DEFAULT_CONFIG.slot_weights) < 50

    def test_performance_score(self):
        record = TeamRecord(wins=3, losses=1, ties=1, all_play_wins=6, all_play_losses=4)
        assert performance_score(record, DEFAULT_CONFIG.scoring) == pytest.approx(0.6 * 60 + 0.75 * 40)

    def test_performance_no_games(self):
        assert performance_score(TeamRecord(), DEFAULT_CONFIG.scoring) == 0.0

    def test_lineup_value_zero_max(self):
        assert lineup_value_score(0, 0) == 0.0
        assert lineup_value_score(500, 1000) == pytest.approx(50.0)


class TestComputePowerRankings:
    """Tests for the full rankings pipeline."""

    def test_scores_within_bounds(self):
        rankings = compute_power_rankings(_snapshot())

        for r in rankings.records:
            for score in [r.lineup_value_score, r.performance_score, r.positional_score, r.depth_score, r.power_score]:
                assert 0 <= score <= 100

    def test_ranks_follow_score(self):
        rankings = compute_power_rankings(_snapshot())

        assert [r.rank for r in rankings.records] == [1, 2, 3]
        scores = [r.power_score for r in rankings.records]
        assert scores == sorted(scores, reverse=True)
        # Strongest roster (factor 1.2) owns the max lineup
        assert rankings.records[0].team_name == "Charlie"
        assert rankings.get(3).lineup_value_score == 100.0

    def test_market_scarcity_used(self):
        rankings = compute_power_rankings(_snapshot())

        assert rankings.scarcity.method == "mixed"
        assert rankings.scarcity.multipliers["WR"] == 100

    def test_idempotent_output(self):
        """Two runs over the same input serialize byte-identically."""
        first = json.dumps(compute_power_rankings(_snapshot()).to_dict(), sort_keys=True)
        second = json.dumps(compute_power_rankings(_snapshot()).to_dict(), sort_keys=True)

        assert first == second

    def test_redraft_weights(self):
        dynasty = compute_power_rankings(_snapshot("dynasty"))
        redraft = compute_power_rankings(_snapshot("redraft"))

        team = dynasty.get(1)
        expected = (
            team.lineup_value_score * 0.50 + team.performance_score * 0.30
            + team.positional_score * 0.15 + team.depth_score * 0.05
        )
        assert team.power_score == pytest.approx(expected, abs=0.15)
        assert redraft.settings.league_type == "redraft"

    def test_custom_config(self):
        weights = dict(DEFAULT_CONFIG.power_weights_by_type)
        weights["dynasty"] = replace(weights["dynasty"], lineup=0.0, performance=0.80)
        config = replace(DEFAULT_CONFIG, power_weights_by_type=weights)

        rankings = compute_power_rankings(_snapshot(), config)
        team = rankings.get(1)

        expected = team.performance_score * 0.80 + team.positional_score * 0.15 + team.depth_score * 0.05
        assert team.power_score == pytest.approx(expected, abs=0.15)

    def test_to_frame(self):
        df = compute_power_rankings(_snapshot()).to_frame()

        assert list(df["rank"]) == [1, 2, 3]
        assert {"power_score", "depth_score", "all_play_wins"} <= set(df.columns)

    def test_player_values_cover_rostered_players(self):
        output = compute_power_rankings(_snapshot()).to_dict()

        assert len(output["player_values"]) == 39
        assert output["value_sources"]["floor"] == 6
