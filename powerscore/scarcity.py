"""
Positional scarcity from market value spread (Value Over Replacement).

A position is scarce when the gap between its elite player and its
replacement-level player is large. Multipliers are normalized so the
baseline position (WR) is exactly 100 and clamped to [20, 200].

When market data is missing for a position, that position falls back to a
static table (separate tables for 1-QB and superflex leagues).
"""

import numpy as np
import pandas as pd

from .config import FLEX_POSITIONS, STARTING_POSITIONS, EngineConfig
from .models import LeagueSettings, ScarcityMap


# === REPLACEMENT LEVEL ===


def starters_needed(
    position: str,
    settings: LeagueSettings,
    config: EngineConfig,
) -> float:
    """
    League-wide number of starters drawn from a position.

    Dedicated slots count fully. FLEX slots add a 33% share to each
    flex-eligible position. In superflex leagues QB takes 40% of the
    SUPER_FLEX pool and each other flex-eligible position 20%.
    """
    sc = config.scarcity
    teams = settings.num_teams
    needed = settings.required(position) * teams

    if position in FLEX_POSITIONS:
        needed += sc.flex_share * settings.flex * teams

    if settings.is_superflex:
        if position == "QB":
            needed += sc.superflex_qb_share * settings.super_flex * teams
        elif position in FLEX_POSITIONS:
            needed += sc.superflex_other_share * settings.super_flex * teams

    return needed


def compute_position_vor(
    ranked_values: list[float],
    needed: float,
) -> tuple[float, float, float] | None:
    """
    Elite value, replacement value and VOR for one position.

    Args:
        ranked_values: Market values sorted best first
        needed: League-wide starters needed at the position

    Returns:
        (elite, replacement, vor), or None when no ranked players exist.
    """
    if len(ranked_values) == 0:
        return None

    replacement_index = min(int(round(needed)), len(ranked_values) - 1)
    elite = float(ranked_values[0])
    replacement = float(ranked_values[replacement_index])
    return elite, replacement, max(0.0, elite - replacement)


def rank_market_by_position(
    market_values: pd.DataFrame | None,
    settings: LeagueSettings,
) -> dict[str, list[float]]:
    """Market values per position, best first. Positions absent from the feed are omitted."""
    if market_values is None or len(market_values) == 0:
        return {}

    value_col = "value_2qb" if settings.is_superflex else "value_1qb"
    available = market_values[market_values[value_col] > 0]

    ranked = {}
    for pos, group in available.groupby("pos", sort=True):
        if pos in STARTING_POSITIONS:
            ranked[pos] = group[value_col].sort_values(ascending=False, kind="mergesort").tolist()
    return ranked


# === FALLBACK TABLES ===


def season_phase_scarcity(
    week: int | None,
    superflex: bool,
    config: EngineConfig,
) -> dict[str, float]:
    """
    Fallback table adjusted for the phase of the season.

    Early season (weeks 1-3) boosts RB for injury uncertainty, the playoff
    push (weeks 10-13) boosts TE and RB, playoffs (week 14+) boost QB.
    """
    base = dict(config.scarcity.fallback_table(superflex))
    if week is None:
        return base

    if week <= 3:
        base["RB"] = round(base["RB"] * 1.1)
    elif 10 <= week <= 13:
        base["TE"] = round(base["TE"] * 1.1)
        base["RB"] = round(base["RB"] * 1.05)
    elif week >= 14:
        base["QB"] = round(base["QB"] * 1.1)

    return base


def fallback_scarcity(settings: LeagueSettings, config: EngineConfig) -> dict[str, float]:
    if config.scarcity.season_phase_adjustment:
        return season_phase_scarcity(settings.week, settings.is_superflex, config)
    return dict(config.scarcity.fallback_table(settings.is_superflex))


# === SCARCITY MAP ===


def compute_scarcity(
    market_values: pd.DataFrame | None,
    settings: LeagueSettings,
    config: EngineConfig,
) -> ScarcityMap:
    """
    Compute per-position scarcity multipliers.

    Never raises: a missing position uses its fallback value, and a missing
    or zero baseline VOR switches the whole map to the fallback table.
    """
    sc = config.scarcity
    fallback = fallback_scarcity(settings, config)
    ranked = rank_market_by_position(market_values, settings)

    vor_by_pos = {}
    for pos in STARTING_POSITIONS:
        result = compute_position_vor(
            ranked.get(pos, []), starters_needed(pos, settings, config)
        )
        if result is not None:
            vor_by_pos[pos] = result

    baseline = vor_by_pos.get(sc.baseline_position)
    if baseline is None or baseline[2] <= 0:
        return ScarcityMap(
            multipliers=fallback,
            method="static",
            fallback_positions=tuple(STARTING_POSITIONS),
        )

    baseline_vor = baseline[2]
    multipliers = {}
    fallback_positions = []
    # Ordered strategies: market VOR first, static table second
    for pos in STARTING_POSITIONS:
        if pos == sc.baseline_position:
            multipliers[pos] = 100
        elif pos in vor_by_pos:
            raw = vor_by_pos[pos][2] / baseline_vor * 100
            multipliers[pos] = int(round(np.clip(raw, sc.min_multiplier, sc.max_multiplier)))
        else:
            multipliers[pos] = fallback[pos]
            fallback_positions.append(pos)

    return ScarcityMap(
        multipliers=multipliers,
        method="mixed" if fallback_positions else "vor",
        elite_values={pos: v[0] for pos, v in vor_by_pos.items()},
        replacement_values={pos: v[1] for pos, v in vor_by_pos.items()},
        fallback_positions=tuple(fallback_positions),
    )


# === HISTORICAL SNAPSHOTS ===


def make_scarcity_snapshot(scarcity: ScarcityMap, settings: LeagueSettings) -> dict:
    """Serializable weekly record of the scarcity map, for later trade-week lookups."""
    return {
        "season": settings.season,
        "week": settings.week,
        "is_superflex": settings.is_superflex,
        "scarcity_method": scarcity.method,
        "scarcity_multipliers": dict(scarcity.multipliers),
    }


def find_scarcity_snapshot(
    snapshots: list[dict],
    season: str,
    week: int,
    superflex: bool,
    config: EngineConfig,
    current: dict | None = None,
) -> dict:
    """
    Pick the scarcity multipliers that best describe a past week.

    Lookup order: exact season/week snapshot, closest week in the same
    season, the current snapshot, then the season-phase fallback table.

    Returns:
        Dict with 'multipliers', 'source', 'accuracy' and, for closest
        matches, 'week_difference' and 'snapshot_week'.
    """
    snapshots = snapshots or []

    if len(snapshots) == 0:
        return {
            "multipliers": season_phase_scarcity(week, superflex, config),
            "source": "season-phase-fallback",
            "accuracy": "estimated",
        }

    for snap in snapshots:
        if snap.get("season") == season and snap.get("week") == week:
            return {
                "multipliers": snap["scarcity_multipliers"],
                "source": "exact-snapshot",
                "accuracy": "high",
            }

    same_season = [s for s in snapshots if s.get("season") == season and s.get("week") is not None]
    if same_season:
        closest = min(same_season, key=lambda s: abs(s["week"] - week))
        diff = abs(closest["week"] - week)
        return {
            "multipliers": closest["scarcity_multipliers"],
            "source": "closest-snapshot",
            "accuracy": "high" if diff <= 2 else "moderate",
            "week_difference": diff,
            "snapshot_week": closest["week"],
        }

    if current and current.get("scarcity_multipliers"):
        return {
            "multipliers": current["scarcity_multipliers"],
            "source": "current-snapshot",
            "accuracy": "low",
        }

    return {
        "multipliers": dict(config.scarcity.fallback_table(superflex)),
        "source": "static-fallback",
        "accuracy": "estimated",
    }
