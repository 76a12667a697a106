"""
Record types shared by every stage of the pipeline.

All records are frozen snapshots for the duration of one run. Constructors
that parse raw platform data live in data_loader; these classes only hold
values and derive simple properties.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace

import pandas as pd

from .config import LEAGUE_TYPES, STARTING_POSITIONS


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    position: str
    team: str | None = None
    age: float | None = None
    value: float = 0.0
    value_source: str | None = None
    position_rank: int | None = None
    ros_projection: float | None = None
    ppg: float | None = None
    games_played: int | None = None
    games_started: int | None = None

    def with_value(self, value: float, source: str) -> Player:
        assert value >= 0, f"Player value must be non-negative, got {value}"
        return replace(self, value=float(value), value_source=source)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LeagueSettings:
    """Starting-slot configuration plus league metadata."""

    slots: dict[str, int]
    flex: int = 0
    super_flex: int = 0
    num_teams: int = 0
    league_type: str = "dynasty"
    name: str | None = None
    season: str | None = None
    week: int | None = None

    def __post_init__(self):
        assert self.league_type in LEAGUE_TYPES, (
            f"league_type must be one of {LEAGUE_TYPES}, got '{self.league_type}'"
        )

    @property
    def is_superflex(self) -> bool:
        return self.super_flex > 0 or self.slots.get("QB", 0) >= 2

    def required(self, position: str) -> int:
        return self.slots.get(position, 0)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "season": self.season,
            "week": self.week,
            "league_type": self.league_type,
            "num_teams": self.num_teams,
            "is_superflex": self.is_superflex,
            "roster_slots": {
                **{pos: self.required(pos) for pos in STARTING_POSITIONS},
                "FLEX": self.flex,
                "SUPER_FLEX": self.super_flex,
            },
        }


@dataclass(frozen=True)
class Roster:
    roster_id: int
    team_name: str
    owner_id: str | None = None
    player_ids: tuple[str, ...] = ()

    def __post_init__(self):
        # Drop duplicate ids, keep first occurrence
        object.__setattr__(self, "player_ids", tuple(dict.fromkeys(self.player_ids)))


@dataclass(frozen=True)
class LineupSlot:
    player_id: str
    name: str
    position: str
    slot: str
    value: float


@dataclass(frozen=True)
class Lineup:
    roster_id: int
    starters: tuple[LineupSlot, ...] = ()

    @property
    def total_value(self) -> float:
        return sum(s.value for s in self.starters)

    @property
    def starter_ids(self) -> frozenset[str]:
        return frozenset(s.player_id for s in self.starters)

    def slot_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for s in self.starters:
            counts[s.slot] = counts.get(s.slot, 0) + 1
        return counts

    def to_dict(self) -> dict:
        return {
            "roster_id": self.roster_id,
            "total_value": self.total_value,
            "starters": [asdict(s) for s in self.starters],
        }


@dataclass(frozen=True)
class TeamRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    all_play_wins: int = 0
    all_play_losses: int = 0
    all_play_ties: int = 0

    @property
    def win_pct(self) -> float:
        games = self.wins + self.losses
        return self.wins / games if games > 0 else 0.0

    @property
    def all_play_win_pct(self) -> float:
        games = self.all_play_wins + self.all_play_losses + self.all_play_ties
        return self.all_play_wins / games if games > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            **asdict(self),
            "win_pct": round(self.win_pct * 100, 1),
            "all_play_win_pct": round(self.all_play_win_pct * 100, 1),
        }


@dataclass(frozen=True)
class ScarcityMap:
    multipliers: dict[str, float]
    method: str = "static"
    elite_values: dict[str, float] = field(default_factory=dict)
    replacement_values: dict[str, float] = field(default_factory=dict)
    fallback_positions: tuple[str, ...] = ()

    def get(self, position: str, default: float = 100.0) -> float:
        return self.multipliers.get(position, default)

    def to_dict(self) -> dict:
        return {
            "scarcity_method": self.method,
            "scarcity_multipliers": dict(self.multipliers),
            "elite_values": dict(self.elite_values),
            "replacement_values": dict(self.replacement_values),
            "fallback_positions": list(self.fallback_positions),
        }


@dataclass(frozen=True)
class PowerScoreRecord:
    roster_id: int
    team_name: str
    lineup_value_score: float
    performance_score: float
    positional_score: float
    depth_score: float
    power_score: float
    rank: int
    total_lineup_value: float
    record: TeamRecord
    lineup: Lineup
    owner_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "roster_id": self.roster_id,
            "owner_id": self.owner_id,
            "team_name": self.team_name,
            "power_rank": self.rank,
            "power_score": self.power_score,
            "lineup_value_score": self.lineup_value_score,
            "performance_score": self.performance_score,
            "positional_score": self.positional_score,
            "depth_score": self.depth_score,
            "total_lineup_value": self.total_lineup_value,
            "record": self.record.to_dict(),
            "starters": [asdict(s) for s in self.lineup.starters],
        }


@dataclass(frozen=True)
class StarterUpgrade:
    new_player: str
    replaces: str | None
    improvement: float


@dataclass(frozen=True)
class TradeImpact:
    value_given: float
    value_received: float
    net_value: float
    lineup_improvement: float
    starter_loss: float
    net_lineup_impact: float
    starter_upgrades: tuple[StarterUpgrade, ...]
    estimated_power_change: float
    would_improve_lineup: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TradePiece:
    """A rostered player as seen by the trade search."""

    player_id: str
    name: str
    position: str
    value: float
    team: str | None = None
    is_starter: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PositionNeed:
    position: str
    players: tuple[TradePiece, ...]
    starters: tuple[TradePiece, ...]
    bench: tuple[TradePiece, ...]
    required_starters: int
    starter_value: float
    bench_value: float
    league_avg: float
    need_score: float
    status: str  # "need", "surplus" or "neutral"

    @property
    def is_need(self) -> bool:
        return self.status == "need"

    @property
    def is_surplus(self) -> bool:
        return self.status == "surplus"

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "status": self.status,
            "need_score": self.need_score,
            "required_starters": self.required_starters,
            "starter_value": self.starter_value,
            "bench_value": self.bench_value,
            "league_avg": self.league_avg,
            "starters": [p.to_dict() for p in self.starters],
            "bench": [p.to_dict() for p in self.bench],
        }


@dataclass(frozen=True)
class TradeCandidate:
    team1_id: int
    team2_id: int
    team1_gives: tuple[TradePiece, ...]
    team2_gives: tuple[TradePiece, ...]
    trade_type: str
    position_swap: str
    team1_name: str | None = None
    team2_name: str | None = None
    team1_impact: TradeImpact | None = None
    team2_impact: TradeImpact | None = None
    both_improve: bool = False
    both_have_upgrades: bool = False
    fair_exchange: bool = False
    score: float = 0.0
    combined_power_gain: float = 0.0

    def dedupe_key(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        return (
            tuple(sorted(p.player_id for p in self.team1_gives)),
            tuple(sorted(p.player_id for p in self.team2_gives)),
        )

    @property
    def team1_value(self) -> float:
        return sum(p.value for p in self.team1_gives)

    @property
    def team2_value(self) -> float:
        return sum(p.value for p in self.team2_gives)

    def to_dict(self) -> dict:
        return {
            "team1_id": self.team1_id,
            "team2_id": self.team2_id,
            "team1": self.team1_name,
            "team2": self.team2_name,
            "team1_gives": [p.to_dict() for p in self.team1_gives],
            "team2_gives": [p.to_dict() for p in self.team2_gives],
            "type": self.trade_type,
            "position_swap": self.position_swap,
            "team1_impact": self.team1_impact.to_dict() if self.team1_impact else None,
            "team2_impact": self.team2_impact.to_dict() if self.team2_impact else None,
            "both_improve": self.both_improve,
            "both_have_upgrades": self.both_have_upgrades,
            "fair_exchange": self.fair_exchange,
            "score": self.score,
            "combined_power_gain": self.combined_power_gain,
        }


@dataclass(frozen=True, eq=False)
class LeagueSnapshot:
    """Everything one run needs, parsed and validated at the boundary."""

    settings: LeagueSettings
    players: dict[str, Player]
    rosters: tuple[Roster, ...]
    records: dict[int, TeamRecord] = field(default_factory=dict)
    market_values: pd.DataFrame | None = None
    projections: pd.DataFrame | None = None
    weekly_stats: pd.DataFrame | None = None

    def roster_players(self, roster: Roster) -> list[Player]:
        """Players on a roster that exist in the player directory, in roster order."""
        return [self.players[pid] for pid in roster.player_ids if pid in self.players]

    def rostered_ids(self) -> list[str]:
        return list(dict.fromkeys(pid for r in self.rosters for pid in r.player_ids))
