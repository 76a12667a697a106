"""
Snapshot loading for the power rankings engine.

This module handles:
- League slot configuration and superflex detection
- Player directory, roster and team-record parsing
- All-play (schedule-independent) record computation
- Valuation feed normalization and name-based matching

Raw inputs follow the league platform's JSON shapes (league, rosters, users,
players, weekly matchups). Fallback rules are applied here, once, so the rest
of the pipeline works on validated records.
"""

import json
import re
import unicodedata
from pathlib import Path

import numpy as np
import pandas as pd

from .config import STARTING_POSITIONS
from .models import LeagueSettings, LeagueSnapshot, Player, Roster, TeamRecord

# Roster markers that never count as starting slots
NON_STARTING_SLOTS = {"BN", "IR", "TAXI"}

# Sleeper settings.type values
SLEEPER_DYNASTY_TYPE = 2

MARKET_COLUMNS = ["player_id", "value_1qb", "value_2qb", "pos", "age"]
PROJECTION_COLUMNS = ["player_id", "ros_points"]
WEEKLY_STATS_COLUMNS = ["player_id", "ppg", "games_played", "games_started"]


# === NAME MATCHING ===


def normalize_name(name: str | None) -> str:
    """
    Normalize player name for matching across sources.

    Handles:
        - Accented characters (Amon-Ra St. Brown → amonra st brown)
        - Generational suffixes (Jr, Sr, II, III, IV, V) removed
        - Punctuation removed, whitespace collapsed
    """
    if not name:
        return ""

    name = unicodedata.normalize("NFD", name)
    name = "".join(c for c in name if unicodedata.category(c) != "Mn")
    name = name.lower()
    name = re.sub(r"[^a-z\s]", "", name)
    name = re.sub(r"\s+", " ", name)
    name = re.sub(r"\b(jr|sr|ii|iii|iv|v)\b", "", name)

    return re.sub(r"\s+", " ", name).strip()


def _canonical_id(value) -> str | None:
    """String player id; integral floats lose their '.0', blanks become None."""
    if value is None or pd.isna(value):
        return None
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def canonical_player_ids(ids: pd.Series) -> pd.Series:
    """
    Player ids as strings that match the player directory's keys.

    A feed mixing numeric ids with rows that have none is read as float
    (100 -> 100.0), so ids go through _canonical_id instead of astype(str).
    """
    return pd.Series([_canonical_id(v) for v in ids], index=ids.index, dtype=object)


def match_market_values(
    players: dict[str, Player],
    market_values: pd.DataFrame,
) -> pd.DataFrame:
    """
    Attach platform player ids to market rows that lack one.

    Rows with a player_id are kept as-is. Rows without one are matched on
    normalized name + position against the player directory. Unmatched rows
    are dropped.

    Returns:
        Market DataFrame with a player_id on every row.
    """
    market = market_values.copy()
    if "player_id" not in market.columns:
        market["player_id"] = None
    market["player_id"] = canonical_player_ids(market["player_id"])

    has_id = market["player_id"].notna()
    if has_id.all() or "name" not in market.columns:
        return market[has_id].reset_index(drop=True)

    name_lookup = {}
    for player_id, player in players.items():
        key = (normalize_name(player.name), player.position)
        name_lookup.setdefault(key, player_id)

    unmatched = market[~has_id].copy()
    unmatched["player_id"] = [
        name_lookup.get((normalize_name(name), pos))
        for name, pos in zip(unmatched["name"], unmatched["pos"])
    ]
    n_by_id = int(has_id.sum())
    n_by_name = int(unmatched["player_id"].notna().sum())
    n_missing = len(unmatched) - n_by_name
    print(
        f"Player matching: {n_by_id} by ID, {n_by_name} by name, {n_missing} unmatched"
    )

    matched = pd.concat([market[has_id], unmatched[unmatched["player_id"].notna()]])
    return matched.reset_index(drop=True)


# === LEAGUE CONFIGURATION ===


def league_settings_from_positions(
    roster_positions: list[str] | None,
    num_teams: int = 0,
    league_type: str = "dynasty",
    name: str | None = None,
    season: str | None = None,
    week: int | None = None,
) -> LeagueSettings:
    """
    Count starting slots from a roster-position list.

    Bench/IR/taxi markers and unknown positions are ignored. An empty or
    missing list yields zero slots and a non-superflex league.
    """
    slots = {pos: 0 for pos in STARTING_POSITIONS}
    flex = 0
    super_flex = 0

    for pos in roster_positions or []:
        if not pos or pos in NON_STARTING_SLOTS:
            continue
        if pos in slots:
            slots[pos] += 1
        elif pos == "FLEX":
            flex += 1
        elif pos == "SUPER_FLEX":
            super_flex += 1

    return LeagueSettings(
        slots=slots,
        flex=flex,
        super_flex=super_flex,
        num_teams=num_teams,
        league_type=league_type,
        name=name,
        season=season,
        week=week,
    )


def detect_league_type(league: dict) -> str:
    """Explicit league_type wins; otherwise Sleeper settings.type 2 means dynasty."""
    explicit = league.get("league_type")
    if explicit in ("dynasty", "redraft"):
        return explicit

    settings = league.get("settings") or {}
    if "type" in settings:
        return "dynasty" if settings["type"] == SLEEPER_DYNASTY_TYPE else "redraft"

    return "dynasty"


def build_league_settings(league: dict, num_teams: int) -> LeagueSettings:
    settings = league.get("settings") or {}
    week = settings.get("leg") or settings.get("last_scored_leg")
    return league_settings_from_positions(
        league.get("roster_positions"),
        num_teams=num_teams,
        league_type=detect_league_type(league),
        name=league.get("name"),
        season=league.get("season"),
        week=int(week) if week else None,
    )


# === PLAYERS, ROSTERS, RECORDS ===


def _player_name(player_id: str, record: dict) -> str:
    if record.get("full_name"):
        return record["full_name"]
    first = record.get("first_name") or ""
    last = record.get("last_name") or ""
    full = f"{first} {last}".strip()
    if full:
        return full
    # Team defenses are keyed by team code
    return record.get("team") or player_id


def build_player_directory(players: dict[str, dict]) -> dict[str, Player]:
    """
    Convert the raw player directory into Player records (value 0, unresolved).

    Entries without a position are skipped; they cannot be slotted or valued.
    """
    directory = {}
    for player_id, record in (players or {}).items():
        if not record or not record.get("position"):
            continue
        age = record.get("age")
        directory[str(player_id)] = Player(
            player_id=str(player_id),
            name=_player_name(str(player_id), record),
            position=record["position"],
            team=record.get("team"),
            age=float(age) if age is not None else None,
        )
    return directory


def build_rosters(rosters: list[dict], users: list[dict] | None = None) -> tuple[Roster, ...]:
    user_names = {
        u.get("user_id"): u.get("display_name") for u in (users or []) if u.get("user_id")
    }
    parsed = []
    for roster in rosters:
        roster_id = roster["roster_id"]
        owner_id = roster.get("owner_id")
        team_name = user_names.get(owner_id) or f"Team {roster_id}"
        player_ids = tuple(str(pid) for pid in (roster.get("players") or []))
        parsed.append(
            Roster(
                roster_id=roster_id,
                team_name=team_name,
                owner_id=owner_id,
                player_ids=player_ids,
            )
        )
    return tuple(parsed)


def compute_all_play_record(
    roster_id: int,
    matchups: list[dict],
) -> tuple[int, int, int]:
    """
    Compute a team's record had it played every other team every week.

    Args:
        roster_id: Team to compute for
        matchups: List of {"week": int, "matchups": [{"roster_id", "points"}, ...]}

    Returns:
        (wins, losses, ties)
    """
    wins = losses = ties = 0

    for week_data in matchups or []:
        week_matchups = week_data.get("matchups") or []
        team = next((m for m in week_matchups if m.get("roster_id") == roster_id), None)
        if team is None:
            continue

        team_score = team.get("points") or 0
        for opponent in week_matchups:
            if opponent.get("roster_id") == roster_id:
                continue
            opp_score = opponent.get("points") or 0
            if team_score > opp_score:
                wins += 1
            elif team_score < opp_score:
                losses += 1
            else:
                ties += 1

    return wins, losses, ties


def build_team_records(
    rosters: list[dict],
    matchups: list[dict] | None = None,
) -> dict[int, TeamRecord]:
    records = {}
    for roster in rosters:
        settings = roster.get("settings") or {}
        ap_wins, ap_losses, ap_ties = compute_all_play_record(roster["roster_id"], matchups)
        points_for = (settings.get("fpts") or 0) + (settings.get("fpts_decimal") or 0) / 100
        records[roster["roster_id"]] = TeamRecord(
            wins=settings.get("wins") or 0,
            losses=settings.get("losses") or 0,
            ties=settings.get("ties") or 0,
            points_for=round(points_for, 2),
            all_play_wins=ap_wins,
            all_play_losses=ap_losses,
            all_play_ties=ap_ties,
        )
    return records


# === VALUATION FEEDS ===


def _feed_frame(records, columns: list[str]) -> pd.DataFrame | None:
    if records is None:
        return None
    df = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    if len(df) == 0:
        return None
    for col in columns:
        if col not in df.columns:
            df[col] = np.nan
    return df


def normalize_market_values(records) -> pd.DataFrame | None:
    """Market feed with numeric value columns; missing values become 0."""
    df = _feed_frame(records, MARKET_COLUMNS)
    if df is None:
        return None
    for col in ["value_1qb", "value_2qb"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).clip(lower=0)
    df["age"] = pd.to_numeric(df["age"], errors="coerce")
    return df


def normalize_projections(records) -> pd.DataFrame | None:
    """
    Rest-of-season projections, one row per player.

    Accepts either per-player totals (player_id, ros_points) or weekly rows
    (player_id, week, pts) which are summed over the remaining weeks.
    """
    if records is None:
        return None
    df = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    if len(df) == 0:
        return None

    if "player_id" in df.columns:
        df["player_id"] = canonical_player_ids(df["player_id"])

    if "ros_points" not in df.columns and "pts" in df.columns:
        df["pts"] = pd.to_numeric(df["pts"], errors="coerce").fillna(0)
        df = df.groupby("player_id", as_index=False, sort=True)["pts"].sum()
        df = df.rename(columns={"pts": "ros_points"})

    df = _feed_frame(df, PROJECTION_COLUMNS)
    df["ros_points"] = pd.to_numeric(df["ros_points"], errors="coerce").fillna(0)
    df["player_id"] = canonical_player_ids(df["player_id"])
    return df[df["player_id"].notna()].reset_index(drop=True)


def normalize_weekly_stats(records) -> pd.DataFrame | None:
    df = _feed_frame(records, WEEKLY_STATS_COLUMNS)
    if df is None:
        return None
    for col in ["ppg", "games_played", "games_started"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    df["player_id"] = canonical_player_ids(df["player_id"])
    return df[df["player_id"].notna()].reset_index(drop=True)


# === SNAPSHOT ===


def build_snapshot(
    league: dict,
    rosters: list[dict],
    players: dict[str, dict],
    users: list[dict] | None = None,
    matchups: list[dict] | None = None,
    market_values=None,
    projections=None,
    weekly_stats=None,
) -> LeagueSnapshot:
    """
    Validate raw inputs and build a LeagueSnapshot.

    Raises:
        AssertionError: If the league configuration or roster list is missing
    """
    assert league is not None, "League configuration is required"
    assert isinstance(league.get("roster_positions"), list), (
        "League configuration must include a 'roster_positions' list"
    )
    assert rosters, "Roster list is required and must not be empty"

    parsed_rosters = build_rosters(rosters, users)
    settings = build_league_settings(league, num_teams=len(parsed_rosters))
    directory = build_player_directory(players)

    market = normalize_market_values(market_values)
    if market is not None:
        market = match_market_values(directory, market)

    return LeagueSnapshot(
        settings=settings,
        players=directory,
        rosters=parsed_rosters,
        records=build_team_records(rosters, matchups),
        market_values=market,
        projections=normalize_projections(projections),
        weekly_stats=normalize_weekly_stats(weekly_stats),
    )


def load_snapshot(path: Path | str) -> LeagueSnapshot:
    """
    Load a cached snapshot JSON file.

    Expected keys: league, rosters, players, and optionally users, matchups,
    market_values, projections, weekly_stats.
    """
    path = Path(path)
    assert path.exists(), f"Snapshot file not found: {path}"

    with open(path) as f:
        raw = json.load(f)

    snapshot = build_snapshot(
        league=raw.get("league"),
        rosters=raw.get("rosters"),
        players=raw.get("players") or {},
        users=raw.get("users"),
        matchups=raw.get("matchups"),
        market_values=raw.get("market_values"),
        projections=raw.get("projections"),
        weekly_stats=raw.get("weekly_stats"),
    )

    print(
        f"Loaded snapshot: {len(snapshot.rosters)} teams, "
        f"{len(snapshot.players)} players in directory"
    )
    return snapshot
