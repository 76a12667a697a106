"""
Power rankings: four component scores aggregated into one 0-100 team score.

Components:
    lineup       Optimal lineup value / best lineup value in the league x 100
    performance  All-play win % x 60 + actual win % x 40
    positional   Starters vs league slot averages, weighted by slot scarcity
    depth        Best bench player at QB/RB/WR/TE vs a 2000-per-position reference

Weights depend on league type (dynasty favors lineup value, redraft favors
performance) and come from EngineConfig.
"""

from dataclasses import dataclass, replace

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG, SKILL_POSITIONS, EngineConfig, PowerWeights, ScoringConfig
from .lineup_optimizer import optimize_lineup
from .models import (
    LeagueSettings,
    LeagueSnapshot,
    Lineup,
    Player,
    PowerScoreRecord,
    Roster,
    ScarcityMap,
    TeamRecord,
)
from .scarcity import compute_scarcity, make_scarcity_snapshot
from .value_resolver import resolve_player_values, summarize_value_sources


# === COMPONENT SCORES ===


def lineup_value_score(total_value: float, max_lineup_value: float) -> float:
    if max_lineup_value <= 0:
        return 0.0
    return float(np.clip(total_value / max_lineup_value * 100, 0, 100))


def performance_score(record: TeamRecord, scoring: ScoringConfig) -> float:
    """All-play win % x 60 + actual win % x 40 (ties ignored, 0 with no games)."""
    score = record.all_play_win_pct * scoring.all_play_weight + record.win_pct * scoring.win_pct_weight
    return float(np.clip(score, 0, 100))


def slot_averages(lineups: list[Lineup]) -> dict[str, float]:
    """Average starter value per slot class over every filled slot in the league."""
    totals: dict[str, float] = {}
    counts: dict[str, int] = {}
    for lineup in lineups:
        for starter in lineup.starters:
            totals[starter.slot] = totals.get(starter.slot, 0.0) + starter.value
            counts[starter.slot] = counts.get(starter.slot, 0) + 1
    return {slot: totals[slot] / counts[slot] for slot in totals}


def positional_advantage_score(
    lineup: Lineup,
    averages: dict[str, float],
    slot_weights: dict[str, float],
    default_average: float = 1000.0,
) -> float:
    """
    Weighted relative advantage of a lineup's starters over league slot averages.

    Each filled slot contributes (value - avg) / avg times its slot weight.
    The weighted mean is mapped to 50 + mean x 50 and clamped to [0, 100].
    A lineup with no filled slots has no advantage anywhere and scores 0.
    """
    total_advantage = 0.0
    total_weight = 0.0

    for starter in lineup.starters:
        avg = averages.get(starter.slot) or default_average
        weight = slot_weights.get(starter.slot, 1.0)
        total_advantage += (starter.value - avg) / avg * weight
        total_weight += weight

    if total_weight == 0:
        return 0.0

    return float(np.clip(50 + total_advantage / total_weight * 50, 0, 100))


def depth_score(
    players: list[Player],
    lineup: Lineup,
    reference_value: float = 2000.0,
) -> float:
    """
    Score bench strength from the single best backup per skill position.

    Positions without bench players are left out of the denominator.
    Returns 0 when no position has a backup.
    """
    starter_ids = lineup.starter_ids
    best_backup: dict[str, float] = {}

    for player in players:
        if player.player_id in starter_ids or player.position not in SKILL_POSITIONS:
            continue
        best_backup[player.position] = max(best_backup.get(player.position, 0.0), player.value or 0.0)

    if not best_backup:
        return 0.0

    target = reference_value * len(best_backup)
    return float(np.clip(sum(best_backup.values()) / target * 100, 0, 100))


def combine_power_score(
    lineup: float,
    performance: float,
    positional: float,
    depth: float,
    weights: PowerWeights,
) -> float:
    score = (
        lineup * weights.lineup
        + performance * weights.performance
        + positional * weights.positional
        + depth * weights.depth
    )
    return float(np.clip(score, 0, 100))


# === RANKINGS ===


@dataclass(frozen=True, eq=False)
class PowerRankings:
    """Result of one power rankings run."""

    settings: LeagueSettings
    records: tuple[PowerScoreRecord, ...]
    scarcity: ScarcityMap
    players: dict[str, Player]
    rosters: tuple[Roster, ...]
    max_lineup_value: float

    def get(self, roster_id: int) -> PowerScoreRecord | None:
        return next((r for r in self.records if r.roster_id == roster_id), None)

    def to_frame(self) -> pd.DataFrame:
        """One row per team, in rank order."""
        rows = []
        for r in self.records:
            rows.append({
                "rank": r.rank,
                "team_name": r.team_name,
                "roster_id": r.roster_id,
                "power_score": r.power_score,
                "lineup_value_score": r.lineup_value_score,
                "performance_score": r.performance_score,
                "positional_score": r.positional_score,
                "depth_score": r.depth_score,
                "total_lineup_value": r.total_lineup_value,
                "wins": r.record.wins,
                "losses": r.record.losses,
                "ties": r.record.ties,
                "all_play_wins": r.record.all_play_wins,
                "all_play_losses": r.record.all_play_losses,
            })
        return pd.DataFrame(rows)

    def to_dict(self) -> dict:
        rostered = dict.fromkeys(pid for r in self.rosters for pid in r.player_ids)
        player_values = {
            pid: {
                "name": self.players[pid].name,
                "position": self.players[pid].position,
                "team": self.players[pid].team,
                "age": self.players[pid].age,
                "value": self.players[pid].value,
                "value_source": self.players[pid].value_source,
                "position_rank": self.players[pid].position_rank,
            }
            for pid in rostered
            if pid in self.players
        }
        return {
            "league": self.settings.to_dict(),
            "rankings": [r.to_dict() for r in self.records],
            "scarcity": self.scarcity.to_dict(),
            "scarcity_snapshot": make_scarcity_snapshot(self.scarcity, self.settings),
            "player_values": player_values,
            "value_sources": summarize_value_sources([self.players[pid] for pid in player_values]),
            "max_lineup_value": self.max_lineup_value,
        }


def rank_power_scores(records: list[PowerScoreRecord]) -> tuple[PowerScoreRecord, ...]:
    """Sort by power score descending (stable on ties) and assign ranks from 1."""
    ordered = sorted(records, key=lambda r: -r.power_score)
    return tuple(
        replace(r, rank=i + 1) for i, r in enumerate(ordered)
    )


def compute_power_rankings(
    snapshot: LeagueSnapshot,
    config: EngineConfig = DEFAULT_CONFIG,
    lineup_method: str = "greedy",
) -> PowerRankings:
    """
    Run the full rankings pipeline: scarcity, values, lineups, components, ranks.

    Args:
        snapshot: Validated league snapshot
        config: Engine configuration
        lineup_method: "greedy" (default) or "milp"

    Returns:
        PowerRankings with one record per roster, rank 1 first
    """
    settings = snapshot.settings
    weights = config.power_weights(settings.league_type)

    scarcity = compute_scarcity(snapshot.market_values, settings, config)
    print(f"Scarcity method: {scarcity.method}")

    resolved = resolve_player_values(snapshot, scarcity, config)
    resolved_snapshot = replace(snapshot, players=resolved)

    roster_players = {r.roster_id: resolved_snapshot.roster_players(r) for r in snapshot.rosters}
    lineups = {
        r.roster_id: optimize_lineup(roster_players[r.roster_id], settings, r.roster_id, lineup_method)
        for r in snapshot.rosters
    }

    max_lineup_value = max((l.total_value for l in lineups.values()), default=0.0)
    averages = slot_averages(list(lineups.values()))

    records = []
    for roster in snapshot.rosters:
        lineup = lineups[roster.roster_id]
        record = snapshot.records.get(roster.roster_id, TeamRecord())

        lineup_score = lineup_value_score(lineup.total_value, max_lineup_value)
        perf_score = performance_score(record, config.scoring)
        pos_score = positional_advantage_score(
            lineup, averages, config.slot_weights, config.scoring.default_slot_average
        )
        dep_score = depth_score(
            roster_players[roster.roster_id], lineup, config.scoring.depth_reference_value
        )
        power = combine_power_score(lineup_score, perf_score, pos_score, dep_score, weights)

        records.append(
            PowerScoreRecord(
                roster_id=roster.roster_id,
                team_name=roster.team_name,
                owner_id=roster.owner_id,
                lineup_value_score=round(lineup_score, 1),
                performance_score=round(perf_score, 1),
                positional_score=round(pos_score, 1),
                depth_score=round(dep_score, 1),
                power_score=round(power, 1),
                rank=0,
                total_lineup_value=lineup.total_value,
                record=record,
                lineup=lineup,
            )
        )

    print(f"Ranked {len(records)} teams ({settings.league_type}, max lineup value {max_lineup_value:,.0f})")

    return PowerRankings(
        settings=settings,
        records=rank_power_scores(records),
        scarcity=scarcity,
        players=resolved,
        rosters=snapshot.rosters,
        max_lineup_value=max_lineup_value,
    )


# === OUTPUT ===


def print_power_rankings(rankings: PowerRankings) -> None:
    """Print the rankings table to stdout."""
    settings = rankings.settings
    print("\n" + "=" * 78)
    title = settings.name or "League"
    print(f"POWER RANKINGS: {title} ({settings.league_type}{', superflex' if settings.is_superflex else ''})")
    print("=" * 78)
    print(
        f"{'Rk':<4} {'Team':<22} {'Power':>6} {'Lineup':>7} {'Perf':>6} "
        f"{'Pos':>6} {'Depth':>6} {'Record':>9} {'All-Play':>9}"
    )
    print("-" * 78)
    for r in rankings.records:
        record = f"{r.record.wins}-{r.record.losses}"
        if r.record.ties:
            record += f"-{r.record.ties}"
        all_play = f"{r.record.all_play_wins}-{r.record.all_play_losses}"
        print(
            f"{r.rank:<4} {r.team_name[:22]:<22} {r.power_score:>6.1f} {r.lineup_value_score:>7.1f} "
            f"{r.performance_score:>6.1f} {r.positional_score:>6.1f} {r.depth_score:>6.1f} "
            f"{record:>9} {all_play:>9}"
        )

    scarcity = ", ".join(f"{pos} {m}" for pos, m in rankings.scarcity.multipliers.items())
    print("-" * 78)
    print(f"Scarcity ({rankings.scarcity.method}): {scarcity}")
    print("=" * 78 + "\n")
