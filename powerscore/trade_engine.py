"""
Trade recommendation engine.

This module answers the question: "Which player exchanges between two teams
are fair on value AND improve both starting lineups?"

Per team pair:
    Need Analysis -> Candidate Generation -> Fairness Filter -> Impact Scoring -> Ranking

Candidate generation is a bounded heuristic search, not an exhaustive
market-clearing solver. The bounds (consolidation pool size, candidates per
pair, recommendations kept) live in config.json.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from itertools import chain, combinations
from typing import Iterator

from tqdm.auto import tqdm

from .config import (
    DEFAULT_CONFIG,
    FLEX_POSITIONS,
    SKILL_POSITIONS,
    SUPER_FLEX_POSITIONS,
    EngineConfig,
    TradeConfig,
)
from .models import (
    LeagueSettings,
    PositionNeed,
    StarterUpgrade,
    TradeCandidate,
    TradeImpact,
    TradePiece,
)
from .power_rankings import PowerRankings

TRADE_TYPES = (
    "1-for-1 (complementary)",
    "1-for-1 (need)",
    "1-for-1 (value)",
    "1-for-2",
    "2-for-1",
)


@dataclass(frozen=True)
class TradeTeam:
    """A roster as seen by the trade search: valued players with starter flags."""

    roster_id: int
    team_name: str
    pieces: tuple[TradePiece, ...]
    power_score: float = 0.0
    power_rank: int = 0


@dataclass(frozen=True, eq=False)
class TradeContext:
    """Shared, read-only inputs for every team-pair search in one run."""

    settings: LeagueSettings
    config: EngineConfig
    teams: tuple[TradeTeam, ...]
    max_lineup_value: float
    league_averages: dict[str, float]
    needs: dict[int, dict[str, PositionNeed]]

    @property
    def lineup_weight(self) -> float:
        return self.config.lineup_weight(self.settings.league_type)

    def find_team(self, name: str) -> TradeTeam | None:
        """First team whose name contains the query (case-insensitive)."""
        query = name.lower()
        return next((t for t in self.teams if query in t.team_name.lower()), None)


# === NEED ANALYSIS ===


def required_starters(position: str, settings: LeagueSettings, trade: TradeConfig) -> int:
    """
    Starters a team should carry at a position.

    ceil(dedicated slots + 33% of FLEX for RB/WR/TE + 25% of SUPER_FLEX for
    QB/RB/WR/TE).
    """
    needed = settings.required(position)
    if position in FLEX_POSITIONS:
        needed += settings.flex * trade.flex_starter_share
    if position in SUPER_FLEX_POSITIONS:
        needed += settings.super_flex * trade.superflex_starter_share
    # Round away float noise before ceil (1 + 0.33*0 must stay 1)
    return math.ceil(round(needed, 6))


def league_position_averages(
    teams: tuple[TradeTeam, ...],
    default: float = 1000.0,
) -> dict[str, float]:
    """Mean value of every rostered player per skill position (default when none)."""
    averages = {}
    for pos in SKILL_POSITIONS:
        values = [p.value for t in teams for p in t.pieces if p.position == pos]
        averages[pos] = sum(values) / len(values) if values else default
    return averages


def analyze_team_needs(
    team: TradeTeam,
    league_averages: dict[str, float],
    settings: LeagueSettings,
    trade: TradeConfig,
) -> dict[str, PositionNeed]:
    """
    Classify each skill position as need, surplus or neutral.

    strength = starter avg / (league avg x 1.5) - 1
    depth    = (players - required) / max(1, required)
    need     = 70 x strength + 30 x depth

    Returns:
        Dict mapping position to PositionNeed
    """
    analysis = {}

    for pos in SKILL_POSITIONS:
        players = sorted(
            (p for p in team.pieces if p.position == pos), key=lambda p: -p.value
        )
        required = required_starters(pos, settings, trade)
        starters = players[:required]
        bench = players[required:]

        starter_value = sum(p.value for p in starters)
        bench_value = sum(p.value for p in bench)
        starter_avg = starter_value / required if required > 0 else 0.0
        league_avg = league_averages.get(pos) or trade.default_position_average

        strength = starter_avg / (league_avg * trade.starter_strength_multiplier) - 1
        depth = (len(players) - required) / max(1, required)
        need_score = trade.strength_weight * strength + trade.depth_weight * depth

        if need_score < trade.need_threshold:
            status = "need"
        elif need_score > trade.surplus_threshold:
            status = "surplus"
        else:
            status = "neutral"

        analysis[pos] = PositionNeed(
            position=pos,
            players=tuple(players),
            starters=tuple(starters),
            bench=tuple(bench),
            required_starters=required,
            starter_value=starter_value,
            bench_value=bench_value,
            league_avg=league_avg,
            need_score=round(need_score, 1),
            status=status,
        )

    return analysis


# === TRADE IMPACT ===


def calculate_trade_impact(
    given: tuple[TradePiece, ...],
    received: tuple[TradePiece, ...],
    needs: dict[str, PositionNeed],
    max_lineup_value: float,
    lineup_weight: float,
    starter_loss_penalty: float = 0.5,
) -> TradeImpact:
    """
    Estimate how a trade changes one team's lineup and power score.

    Each received player is compared to the team's current worst starter at
    that position; an unfilled starting spot counts as a starter worth 0.
    Each starter given away costs starter_loss_penalty x its value.

    Args:
        given: Players leaving the roster
        received: Players joining the roster
        needs: The team's current need analysis
        max_lineup_value: Best lineup value in the league
        lineup_weight: Share of the power score driven by lineup value

    Returns:
        TradeImpact with estimated_power_change rounded to 0.1
    """
    value_given = sum(p.value for p in given)
    value_received = sum(p.value for p in received)

    lineup_improvement = 0.0
    upgrades = []
    for player in received:
        analysis = needs.get(player.position)
        if analysis is None or analysis.required_starters == 0:
            continue

        if len(analysis.starters) < analysis.required_starters:
            worst_value, worst_name = 0.0, None
        else:
            worst = analysis.starters[-1]
            worst_value, worst_name = worst.value, worst.name

        if player.value > worst_value:
            improvement = player.value - worst_value
            lineup_improvement += improvement
            upgrades.append(
                StarterUpgrade(new_player=player.name, replaces=worst_name, improvement=improvement)
            )

    starter_loss = sum(p.value * starter_loss_penalty for p in given if p.is_starter)
    net_lineup_impact = lineup_improvement - starter_loss

    if max_lineup_value > 0:
        power_change = net_lineup_impact / max_lineup_value * 100 * lineup_weight
    else:
        power_change = 0.0

    return TradeImpact(
        value_given=value_given,
        value_received=value_received,
        net_value=value_received - value_given,
        lineup_improvement=lineup_improvement,
        starter_loss=starter_loss,
        net_lineup_impact=net_lineup_impact,
        starter_upgrades=tuple(upgrades),
        estimated_power_change=round(power_change, 1),
        would_improve_lineup=lineup_improvement > 0,
    )


def is_fair_trade(side1_value: float, side2_value: float, tolerance: float = 0.30) -> bool:
    """True when the relative value gap is within tolerance. Two empty sides are never fair."""
    if side1_value == 0 and side2_value == 0:
        return False
    high = max(side1_value, side2_value)
    low = min(side1_value, side2_value)
    return (high - low) / high <= tolerance


# === CANDIDATE GENERATION ===


def _candidate(
    team1: TradeTeam,
    team2: TradeTeam,
    team1_gives: tuple[TradePiece, ...],
    team2_gives: tuple[TradePiece, ...],
    trade_type: str,
    position_swap: str,
) -> TradeCandidate:
    assert trade_type in TRADE_TYPES, f"Unknown trade type: {trade_type}"
    return TradeCandidate(
        team1_id=team1.roster_id,
        team2_id=team2.roster_id,
        team1_name=team1.team_name,
        team2_name=team2.team_name,
        team1_gives=team1_gives,
        team2_gives=team2_gives,
        trade_type=trade_type,
        position_swap=position_swap,
    )


def _tradeable(pieces, min_value: float) -> list[TradePiece]:
    return [p for p in pieces if p.value >= min_value]


def _complementary_swaps(team1, needs1, team2, needs2, trade: TradeConfig) -> Iterator[TradeCandidate]:
    """Team 1 surplus fills a team 2 need at X, and team 2 surplus fills a team 1 need at Y."""
    for pos1 in SKILL_POSITIONS:
        for pos2 in SKILL_POSITIONS:
            if pos1 == pos2:
                continue
            if not (needs1[pos1].is_surplus and needs2[pos1].is_need):
                continue
            if not (needs2[pos2].is_surplus and needs1[pos2].is_need):
                continue

            for p1 in _tradeable(needs1[pos1].bench, trade.min_trade_value):
                for p2 in _tradeable(needs2[pos2].bench, trade.min_trade_value):
                    if is_fair_trade(p1.value, p2.value, trade.fairness_tolerance):
                        yield _candidate(
                            team1, team2, (p1,), (p2,),
                            "1-for-1 (complementary)", f"{pos1} ↔ {pos2}",
                        )


def _need_swaps(team1, needs1, team2, needs2, trade: TradeConfig) -> Iterator[TradeCandidate]:
    """One side's need position filled from the other's bench, funded by any bench player."""
    for need_pos in SKILL_POSITIONS:
        for give_pos in SKILL_POSITIONS:
            # Team 1 needs need_pos
            if needs1[need_pos].is_need and needs2[need_pos].bench and needs1[give_pos].bench:
                for p2 in _tradeable(needs2[need_pos].bench, trade.min_trade_value):
                    for p1 in _tradeable(needs1[give_pos].bench, trade.min_trade_value):
                        if is_fair_trade(p1.value, p2.value, trade.fairness_tolerance):
                            yield _candidate(
                                team1, team2, (p1,), (p2,),
                                "1-for-1 (need)", f"{give_pos} → {need_pos}",
                            )

            # Team 2 needs need_pos
            if needs2[need_pos].is_need and needs1[need_pos].bench and needs2[give_pos].bench:
                for p1 in _tradeable(needs1[need_pos].bench, trade.min_trade_value):
                    for p2 in _tradeable(needs2[give_pos].bench, trade.min_trade_value):
                        if is_fair_trade(p1.value, p2.value, trade.fairness_tolerance):
                            yield _candidate(
                                team1, team2, (p1,), (p2,),
                                "1-for-1 (need)", f"{need_pos} → {give_pos}",
                            )


def _value_swaps(team1, needs1, team2, needs2, trade: TradeConfig) -> Iterator[TradeCandidate]:
    """Bench-for-bench swaps across different positions in a tight value band."""
    bench1 = [p for pos in SKILL_POSITIONS for p in _tradeable(needs1[pos].bench, trade.value_swap_min_value)]
    bench2 = [p for pos in SKILL_POSITIONS for p in _tradeable(needs2[pos].bench, trade.value_swap_min_value)]

    for p1 in bench1:
        for p2 in bench2:
            if p1.position != p2.position and is_fair_trade(p1.value, p2.value, trade.value_swap_tolerance):
                yield _candidate(
                    team1, team2, (p1,), (p2,),
                    "1-for-1 (value)", f"{p1.position} ↔ {p2.position}",
                )


def _depth_pool(needs: dict[str, PositionNeed], trade: TradeConfig) -> list[TradePiece]:
    """Mid-value non-starters, capped at the max_consolidation_pool most valuable."""
    pool = [
        p
        for pos in SKILL_POSITIONS
        for p in needs[pos].players
        if not p.is_starter and trade.depth_min_value <= p.value < trade.star_min_value
    ]
    pool = sorted(pool, key=lambda p: -p.value)
    return pool[: trade.max_consolidation_pool]


def _consolidations(team1, needs1, team2, needs2, trade: TradeConfig) -> Iterator[TradeCandidate]:
    """A high-value non-starter for every pair of mid-value non-starters on the other side."""
    depth1 = _depth_pool(needs1, trade)
    depth2 = _depth_pool(needs2, trade)

    for pos in SKILL_POSITIONS:
        stars1 = [p for p in needs1[pos].players if p.value >= trade.star_min_value and not p.is_starter]
        for star in stars1:
            for combo in combinations(depth2, 2):
                if is_fair_trade(star.value, combo[0].value + combo[1].value, trade.consolidation_tolerance):
                    yield _candidate(team1, team2, (star,), combo, "1-for-2", f"{pos} consolidation")

        stars2 = [p for p in needs2[pos].players if p.value >= trade.star_min_value and not p.is_starter]
        for star in stars2:
            for combo in combinations(depth1, 2):
                if is_fair_trade(star.value, combo[0].value + combo[1].value, trade.consolidation_tolerance):
                    yield _candidate(team1, team2, combo, (star,), "2-for-1", f"{pos} consolidation")


CANDIDATE_STRATEGIES = (
    _complementary_swaps,
    _need_swaps,
    _value_swaps,
    _consolidations,
)


def generate_trade_candidates(
    team1: TradeTeam,
    needs1: dict[str, PositionNeed],
    team2: TradeTeam,
    needs2: dict[str, PositionNeed],
    trade: TradeConfig,
) -> list[TradeCandidate]:
    """
    Generate fair, deduplicated candidate trades between two teams.

    Strategies run in order (complementary, need, value, consolidation) and
    generation stops once max_candidates_per_pair unique candidates exist.
    """
    streams = (strategy(team1, needs1, team2, needs2, trade) for strategy in CANDIDATE_STRATEGIES)

    candidates = []
    seen = set()
    for candidate in chain.from_iterable(streams):
        key = candidate.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        candidates.append(candidate)
        if len(candidates) >= trade.max_candidates_per_pair:
            break

    return candidates


# === SCORING AND RANKING ===


def positional_fit_bonus(
    candidate: TradeCandidate,
    needs1: dict[str, PositionNeed],
    needs2: dict[str, PositionNeed],
    trade: TradeConfig,
) -> float:
    """10 per asset given from a surplus position, 15 per asset received into a need."""
    bonuses = trade.bonuses
    score = 0.0

    for gives, giver_needs, receiver_needs in [
        (candidate.team1_gives, needs1, needs2),
        (candidate.team2_gives, needs2, needs1),
    ]:
        for p in gives:
            if p.position in giver_needs and giver_needs[p.position].is_surplus:
                score += bonuses.surplus_fit
            if p.position in receiver_needs and receiver_needs[p.position].is_need:
                score += bonuses.need_fit

    return score


def score_trade(
    candidate: TradeCandidate,
    needs1: dict[str, PositionNeed],
    needs2: dict[str, PositionNeed],
    context: TradeContext,
) -> TradeCandidate:
    """
    Attach both sides' impacts, flags and the combined score to a candidate.

    score = 10 x (power change A + power change B) + positional fit
            + 20 fair exchange + 40 both improve + 50 both get starter upgrades
            + 25 per improving side + 20 per starter upgrade
    """
    trade = context.config.trade
    bonuses = trade.bonuses

    impact1 = calculate_trade_impact(
        candidate.team1_gives, candidate.team2_gives, needs1,
        context.max_lineup_value, context.lineup_weight, trade.starter_loss_penalty,
    )
    impact2 = calculate_trade_impact(
        candidate.team2_gives, candidate.team1_gives, needs2,
        context.max_lineup_value, context.lineup_weight, trade.starter_loss_penalty,
    )

    both_improve = impact1.would_improve_lineup and impact2.would_improve_lineup
    both_have_upgrades = bool(impact1.starter_upgrades) and bool(impact2.starter_upgrades)
    fair_exchange = abs(candidate.team1_value - candidate.team2_value) < trade.fair_exchange_margin
    combined_power_gain = impact1.estimated_power_change + impact2.estimated_power_change

    score = (
        combined_power_gain * bonuses.power_gain_multiplier
        + positional_fit_bonus(candidate, needs1, needs2, trade)
        + (bonuses.fair_exchange if fair_exchange else 0)
        + (bonuses.both_improve if both_improve else 0)
        + (bonuses.both_upgrade if both_have_upgrades else 0)
        + (bonuses.lineup_improve if impact1.would_improve_lineup else 0)
        + (bonuses.lineup_improve if impact2.would_improve_lineup else 0)
        + bonuses.per_upgrade * (len(impact1.starter_upgrades) + len(impact2.starter_upgrades))
    )

    return replace(
        candidate,
        team1_impact=impact1,
        team2_impact=impact2,
        both_improve=both_improve,
        both_have_upgrades=both_have_upgrades,
        fair_exchange=fair_exchange,
        score=round(score, 1),
        combined_power_gain=round(combined_power_gain, 1),
    )


def rank_trades(candidates: list[TradeCandidate], limit: int | None = None) -> list[TradeCandidate]:
    """
    Keep positive-score trades, both-get-upgrades first, then by score.

    Sorting is stable, so equal trades keep generation order. Duplicates (same
    players on each side) are dropped after sorting.
    """
    ordered = sorted(
        (c for c in candidates if c.score > 0),
        key=lambda c: (not c.both_have_upgrades, -c.score),
    )

    ranked = []
    seen = set()
    for candidate in ordered:
        key = (candidate.team1_id, candidate.team2_id, candidate.dedupe_key())
        if key in seen:
            continue
        seen.add(key)
        ranked.append(candidate)

    return ranked[:limit] if limit is not None else ranked


# === SEARCH ===


@dataclass(frozen=True)
class PairAnalysis:
    team1: TradeTeam
    team2: TradeTeam
    team1_needs: dict[str, PositionNeed]
    team2_needs: dict[str, PositionNeed]
    recommendations: tuple[TradeCandidate, ...]
    n_candidates: int = 0

    def to_dict(self) -> dict:
        return {
            "team1": {
                "name": self.team1.team_name,
                "roster_id": self.team1.roster_id,
                "needs": {pos: n.to_dict() for pos, n in self.team1_needs.items()},
            },
            "team2": {
                "name": self.team2.team_name,
                "roster_id": self.team2.roster_id,
                "needs": {pos: n.to_dict() for pos, n in self.team2_needs.items()},
            },
            "n_candidates": self.n_candidates,
            "recommendations": [t.to_dict() for t in self.recommendations],
        }


def find_mutually_beneficial_trades(
    team1: TradeTeam,
    team2: TradeTeam,
    context: TradeContext,
) -> PairAnalysis:
    """
    Full pipeline for one team pair.

    A pair with no passing candidates yields an empty recommendation list.
    """
    trade = context.config.trade
    needs1 = context.needs[team1.roster_id]
    needs2 = context.needs[team2.roster_id]

    candidates = generate_trade_candidates(team1, needs1, team2, needs2, trade)
    scored = [score_trade(c, needs1, needs2, context) for c in candidates]

    return PairAnalysis(
        team1=team1,
        team2=team2,
        team1_needs=needs1,
        team2_needs=needs2,
        recommendations=tuple(rank_trades(scored, trade.max_recommendations_per_pair)),
        n_candidates=len(candidates),
    )


@dataclass(frozen=True, eq=False)
class LeagueTrades:
    settings: LeagueSettings
    teams: tuple[TradeTeam, ...]
    needs: dict[int, dict[str, PositionNeed]]
    recommendations: tuple[TradeCandidate, ...]
    n_pairs: int
    n_candidates: int

    def to_dict(self) -> dict:
        return {
            "league": self.settings.to_dict(),
            "n_pairs": self.n_pairs,
            "n_candidates": self.n_candidates,
            "recommendations": [t.to_dict() for t in self.recommendations],
            "team_needs": {
                str(team.roster_id): {
                    "team_name": team.team_name,
                    "needs": {pos: n.to_dict() for pos, n in self.needs[team.roster_id].items()},
                }
                for team in self.teams
            },
        }


def find_league_trades(context: TradeContext, n_workers: int = 1) -> LeagueTrades:
    """
    Search every unordered team pair and merge the results.

    Each pair's search is independent. With n_workers > 1 pairs run on a
    thread pool; results come back in pair order, so output does not depend
    on n_workers.

    Args:
        context: Shared trade context
        n_workers: Worker threads (1 = serial)

    Returns:
        LeagueTrades with the top max_league_recommendations trades
    """
    assert n_workers >= 1, f"n_workers must be at least 1, got {n_workers}"

    pairs = list(combinations(context.teams, 2))

    def search(pair):
        return find_mutually_beneficial_trades(pair[0], pair[1], context)

    if n_workers > 1 and len(pairs) > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            analyses = list(
                tqdm(executor.map(search, pairs), total=len(pairs), desc="Scanning team pairs")
            )
    else:
        analyses = [search(pair) for pair in tqdm(pairs, desc="Scanning team pairs")]

    all_trades = [t for a in analyses for t in a.recommendations]
    n_candidates = sum(a.n_candidates for a in analyses)
    ranked = rank_trades(all_trades, context.config.trade.max_league_recommendations)

    print(
        f"Found {len(all_trades)} recommended trades from {n_candidates} candidates "
        f"across {len(pairs)} team pairs (keeping {len(ranked)})"
    )

    return LeagueTrades(
        settings=context.settings,
        teams=context.teams,
        needs=context.needs,
        recommendations=tuple(ranked),
        n_pairs=len(pairs),
        n_candidates=n_candidates,
    )


def find_best_trade_partners(team: TradeTeam, context: TradeContext) -> list[dict]:
    """
    Best trade with every other team, best partner first.

    Returns:
        List of dicts with 'partner', 'partner_id', 'top_trade', 'total_options'
    """
    results = []
    for other in context.teams:
        if other.roster_id == team.roster_id:
            continue
        analysis = find_mutually_beneficial_trades(team, other, context)
        if analysis.recommendations:
            results.append({
                "partner": other.team_name,
                "partner_id": other.roster_id,
                "top_trade": analysis.recommendations[0],
                "total_options": len(analysis.recommendations),
            })

    results.sort(key=lambda r: -r["top_trade"].score)
    return results


# === CONTEXT ===


def make_trade_context(
    teams: tuple[TradeTeam, ...],
    settings: LeagueSettings,
    max_lineup_value: float,
    config: EngineConfig = DEFAULT_CONFIG,
) -> TradeContext:
    """Precompute league averages and every team's need analysis."""
    teams = tuple(teams)
    averages = league_position_averages(teams, config.trade.default_position_average)
    needs = {
        team.roster_id: analyze_team_needs(team, averages, settings, config.trade)
        for team in teams
    }
    return TradeContext(
        settings=settings,
        config=config,
        teams=teams,
        max_lineup_value=max_lineup_value,
        league_averages=averages,
        needs=needs,
    )


def build_trade_context(
    rankings: PowerRankings,
    config: EngineConfig = DEFAULT_CONFIG,
) -> TradeContext:
    """Build the trade search inputs from a power rankings result."""
    teams = []
    for roster in rankings.rosters:
        record = rankings.get(roster.roster_id)
        starter_ids = record.lineup.starter_ids if record else frozenset()
        pieces = tuple(
            TradePiece(
                player_id=p.player_id,
                name=p.name,
                position=p.position,
                value=p.value,
                team=p.team,
                is_starter=p.player_id in starter_ids,
            )
            for p in (rankings.players.get(pid) for pid in roster.player_ids)
            if p is not None
        )
        teams.append(
            TradeTeam(
                roster_id=roster.roster_id,
                team_name=roster.team_name,
                pieces=pieces,
                power_score=record.power_score if record else 0.0,
                power_rank=record.rank if record else 0,
            )
        )

    return make_trade_context(tuple(teams), rankings.settings, rankings.max_lineup_value, config)


# === REPORTING ===


def _format_piece(p: TradePiece, show_starter: bool = False) -> str:
    tag = " *STARTER" if show_starter and p.is_starter else ""
    return f"   - {p.name} ({p.position}, {p.team or 'FA'}) - Value: {p.value:,.0f}{tag}"


def format_trade_recommendation(trade: TradeCandidate) -> str:
    """Multi-line text description of one scored trade."""
    lines = ["\n" + "-" * 60, f"TRADE RECOMMENDATION (Score: {trade.score})", "-" * 60]
    lines.append(f"Type: {trade.trade_type} | {trade.position_swap}")

    sides = [
        (trade.team1_name, trade.team1_gives, trade.team2_gives, trade.team1_impact),
        (trade.team2_name, trade.team2_gives, trade.team1_gives, trade.team2_impact),
    ]
    for name, gives, receives, impact in sides:
        lines.append("")
        lines.append(f"{name} gives:")
        lines.extend(_format_piece(p, show_starter=True) for p in gives)
        lines.append(f"{name} receives:")
        lines.extend(_format_piece(p) for p in receives)
        if impact and impact.starter_upgrades:
            lines.append("   Lineup upgrades:")
            for u in impact.starter_upgrades:
                lines.append(
                    f"      {u.new_player} replaces {u.replaces or 'empty slot'} (+{u.improvement:,.0f} value)"
                )

    lines.append("")
    if trade.both_have_upgrades:
        lines.append("WIN-WIN: Both teams get starter upgrades")
    elif trade.both_improve:
        lines.append("MUTUAL BENEFIT: Both teams improve their lineup")
    if trade.fair_exchange:
        lines.append("FAIR: Value exchange is balanced")

    return "\n".join(lines)


def format_team_needs(team_name: str, needs: dict[str, PositionNeed]) -> str:
    labels = {"need": "NEED", "surplus": "SURPLUS", "neutral": "OK"}
    lines = [f"\n{team_name} Position Analysis:"]
    for pos in SKILL_POSITIONS:
        analysis = needs[pos]
        lines.append(f"   {pos}: {labels[analysis.status]} (Score: {analysis.need_score})")
        starters = ", ".join(f"{p.name} ({p.value:,.0f})" for p in analysis.starters)
        lines.append(f"      Starters: {starters or 'None'}")
        if analysis.bench:
            bench = ", ".join(f"{p.name} ({p.value:,.0f})" for p in analysis.bench)
            lines.append(f"      Bench: {bench}")
    return "\n".join(lines)


def print_trade_report(result: LeagueTrades, top_n: int = 10) -> None:
    """Print the league-wide trade recommendations."""
    print("\n" + "=" * 70)
    print("TOP TRADE RECOMMENDATIONS")
    print("=" * 70)

    if not result.recommendations:
        print("\nNo mutually beneficial trades found in the league.")
        print("This could mean:")
        print("  - Teams have similar positional needs")
        print("  - Tradeable assets don't match in value")
        print("  - No team has a clear surplus position")
        return

    for i, trade in enumerate(result.recommendations[:top_n]):
        print(f"\n#{i + 1}")
        print(format_trade_recommendation(trade))

    print("\n" + "=" * 70 + "\n")
