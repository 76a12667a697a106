"""
Player value resolution.

Every player gets exactly one scalar value from the first strategy in
RESOLVER_CHAIN that can produce one:

    market      Market trade value (optionally blended 70/30 with projections)
    projection  Rest-of-season projection scaled to the market range
    ppg         Points-per-game x positional scarcity (+10% for regular starters)
    floor       Fixed minimum by position (K 50, DEF 100, others 200)

The tier that produced the value is recorded on the player as value_source.
"""

from collections import Counter
from dataclasses import dataclass, replace
from typing import Callable

import pandas as pd

from .config import VALUE_SOURCES, EngineConfig, ValueConfig
from .models import LeagueSettings, LeagueSnapshot, Player, Roster, ScarcityMap


@dataclass(frozen=True)
class ValueInputs:
    """Feed lookups shared by all resolver strategies for one run."""

    market: dict[str, float]
    position_ranks: dict[str, int]
    projections: dict[str, float]
    weekly: dict[str, dict]
    scale_factor: float
    blend: bool
    scarcity: ScarcityMap
    config: ValueConfig


# A strategy returns (value, source) or None to pass to the next one
ValueStrategy = Callable[[Player, ValueInputs], "tuple[float, str] | None"]


# === FEED LOOKUPS ===


def market_value_column(settings: LeagueSettings) -> str:
    return "value_2qb" if settings.is_superflex else "value_1qb"


def _market_lookup(market_values: pd.DataFrame | None, value_col: str) -> dict[str, float]:
    if market_values is None or len(market_values) == 0:
        return {}
    df = market_values.drop_duplicates("player_id", keep="first")
    return {
        pid: float(v)
        for pid, v in zip(df["player_id"], df[value_col])
        if pd.notna(v) and v > 0
    }


def _position_rank_lookup(market_values: pd.DataFrame | None, value_col: str) -> dict[str, int]:
    """Rank within position by market value (1 = best). Uses the feed's pos_rank when present."""
    if market_values is None or len(market_values) == 0:
        return {}
    df = market_values.drop_duplicates("player_id", keep="first")
    if "pos_rank" in df.columns:
        ranks = pd.to_numeric(df["pos_rank"], errors="coerce")
    else:
        ranks = df.groupby("pos")[value_col].rank(method="first", ascending=False)
    return {pid: int(r) for pid, r in zip(df["player_id"], ranks) if pd.notna(r)}


def _projection_lookup(projections: pd.DataFrame | None) -> dict[str, float]:
    if projections is None or len(projections) == 0:
        return {}
    df = projections.drop_duplicates("player_id", keep="first")
    return {pid: float(p) for pid, p in zip(df["player_id"], df["ros_points"]) if p > 0}


def _weekly_lookup(weekly_stats: pd.DataFrame | None) -> dict[str, dict]:
    if weekly_stats is None or len(weekly_stats) == 0:
        return {}
    df = weekly_stats.drop_duplicates("player_id", keep="first")
    return {
        row["player_id"]: {
            "ppg": float(row["ppg"]),
            "games_played": int(row["games_played"]),
            "games_started": int(row["games_started"]),
        }
        for row in df.to_dict("records")
    }


def projection_scale_factor(
    market: dict[str, float],
    projections: dict[str, float],
    default: float,
) -> float:
    """
    Factor that maps projected points onto the market value range.

    max(market value) / max(projected points); the configured default when
    either feed is empty.
    """
    if not market or not projections:
        return default
    max_projection = max(projections.values())
    if max_projection <= 0:
        return default
    return max(market.values()) / max_projection


# === RESOLVER STRATEGIES ===


def market_value(player: Player, inputs: ValueInputs) -> tuple[float, str] | None:
    market = inputs.market.get(player.player_id)
    if market is None:
        return None

    projection = inputs.projections.get(player.player_id)
    if inputs.blend and projection is not None:
        cfg = inputs.config
        blended = cfg.market_weight * market + cfg.projection_weight * projection * inputs.scale_factor
        return blended, "market+projection"

    return market, "market"


def projection_value(player: Player, inputs: ValueInputs) -> tuple[float, str] | None:
    projection = inputs.projections.get(player.player_id)
    if projection is None:
        return None
    return projection * inputs.scale_factor, "projection"


def ppg_value(player: Player, inputs: ValueInputs) -> tuple[float, str] | None:
    stats = inputs.weekly.get(player.player_id)
    if stats is None or stats["ppg"] <= 0:
        return None

    value = stats["ppg"] * inputs.scarcity.get(player.position)
    if stats["games_started"] > stats["games_played"] / 2:
        value *= 1 + inputs.config.starter_bonus
    return value, "ppg"


def floor_value(player: Player, inputs: ValueInputs) -> tuple[float, str]:
    return inputs.config.floor_value(player.position), "floor"


RESOLVER_CHAIN: tuple[ValueStrategy, ...] = (
    market_value,
    projection_value,
    ppg_value,
    floor_value,
)


def resolve_value(
    player: Player,
    inputs: ValueInputs,
    chain: tuple[ValueStrategy, ...] = RESOLVER_CHAIN,
) -> Player:
    """Return a copy of player with value, value_source and provenance fields set."""
    for strategy in chain:
        result = strategy(player, inputs)
        if result is not None:
            value, source = result
            break
    else:
        value, source = floor_value(player, inputs)

    stats = inputs.weekly.get(player.player_id, {})
    resolved = replace(
        player,
        position_rank=inputs.position_ranks.get(player.player_id, player.position_rank),
        ros_projection=inputs.projections.get(player.player_id, player.ros_projection),
        ppg=stats.get("ppg", player.ppg),
        games_played=stats.get("games_played", player.games_played),
        games_started=stats.get("games_started", player.games_started),
    )
    return resolved.with_value(round(value, 1), source)


# === PUBLIC API ===


def build_value_inputs(
    snapshot: LeagueSnapshot,
    scarcity: ScarcityMap,
    config: EngineConfig,
) -> ValueInputs:
    value_col = market_value_column(snapshot.settings)
    market = _market_lookup(snapshot.market_values, value_col)
    projections = _projection_lookup(snapshot.projections)
    return ValueInputs(
        market=market,
        position_ranks=_position_rank_lookup(snapshot.market_values, value_col),
        projections=projections,
        weekly=_weekly_lookup(snapshot.weekly_stats),
        scale_factor=projection_scale_factor(
            market, projections, config.value.default_projection_scale
        ),
        blend=config.value.should_blend(snapshot.settings.league_type),
        scarcity=scarcity,
        config=config.value,
    )


def resolve_player_values(
    snapshot: LeagueSnapshot,
    scarcity: ScarcityMap,
    config: EngineConfig,
) -> dict[str, Player]:
    """
    Resolve a value for every player in the snapshot's directory.

    Never fails and never drops a player: anyone absent from every feed gets
    the positional floor value.

    Args:
        snapshot: League snapshot with optional market/projection/weekly feeds
        scarcity: Scarcity map (used by the ppg tier)
        config: Engine configuration

    Returns:
        New player directory (player_id -> Player with value set)
    """
    inputs = build_value_inputs(snapshot, scarcity, config)
    resolved = {pid: resolve_value(player, inputs) for pid, player in snapshot.players.items()}

    rostered = [resolved[pid] for pid in snapshot.rostered_ids() if pid in resolved]
    counts = summarize_value_sources(rostered)
    summary = ", ".join(f"{n} {source}" for source, n in counts.items() if n > 0)
    print(f"Resolved values for {len(rostered)} rostered players ({summary or 'none'})")

    return resolved


def summarize_value_sources(players) -> dict[str, int]:
    """Count players per value tier, in tier order."""
    if isinstance(players, dict):
        players = players.values()
    counts = Counter(p.value_source for p in players)
    return {source: counts.get(source, 0) for source in VALUE_SOURCES}


def player_values_frame(
    players: dict[str, Player],
    rosters: tuple[Roster, ...],
) -> pd.DataFrame:
    """
    Player value lookup table for rostered players, most valuable first.

    Columns: player_id, name, position, team, age, value, value_source,
    position_rank, roster_id, team_name.
    """
    columns = [
        "player_id", "name", "position", "team", "age", "value", "value_source",
        "position_rank", "roster_id", "team_name",
    ]
    rows = []
    for roster in rosters:
        for pid in roster.player_ids:
            player = players.get(pid)
            if player is None:
                continue
            rows.append({
                "player_id": player.player_id,
                "name": player.name,
                "position": player.position,
                "team": player.team,
                "age": player.age,
                "value": player.value,
                "value_source": player.value_source,
                "position_rank": player.position_rank,
                "roster_id": roster.roster_id,
                "team_name": roster.team_name,
            })

    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values("value", ascending=False, kind="mergesort").reset_index(drop=True)
