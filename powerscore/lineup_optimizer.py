"""
Starting lineup construction.

Greedy (default) fills slots in a fixed pass order:
    1. Dedicated QB/RB/WR/TE/K/DEF slots, best value first
    2. FLEX from unused RB/WR/TE
    3. SUPER_FLEX from unused QB/RB/WR/TE
Ties are broken by roster order. This is not globally optimal when a player
at a congested position would be worth more in a later slot class, but it
reproduces the published rankings exactly.

method="milp" solves the same assignment as a binary program with pulp and
returns the true optimum.
"""

import pulp
from pulp import LpVariable, lpSum, value

from .config import FLEX_POSITIONS, STARTING_POSITIONS, SUPER_FLEX_POSITIONS
from .models import LeagueSettings, Lineup, LineupSlot, Player

LINEUP_METHODS = ("greedy", "milp")

# Positions each slot class accepts
SLOT_ELIGIBILITY = {
    **{pos: (pos,) for pos in STARTING_POSITIONS},
    "FLEX": FLEX_POSITIONS,
    "SUPER_FLEX": SUPER_FLEX_POSITIONS,
}

SLOT_ORDER = list(STARTING_POSITIONS) + ["FLEX", "SUPER_FLEX"]


def slot_capacities(settings: LeagueSettings) -> dict[str, int]:
    """Number of starters allowed per slot class."""
    capacities = {pos: settings.required(pos) for pos in STARTING_POSITIONS}
    capacities["FLEX"] = settings.flex
    capacities["SUPER_FLEX"] = settings.super_flex
    return capacities


def _slot(player: Player, slot: str) -> LineupSlot:
    return LineupSlot(
        player_id=player.player_id,
        name=player.name,
        position=player.position,
        slot=slot,
        value=player.value or 0.0,
    )


# === GREEDY ===


def greedy_lineup(players: list[Player], settings: LeagueSettings) -> list[LineupSlot]:
    # Stable sort keeps roster order among equal values
    ranked = sorted(players, key=lambda p: -(p.value or 0.0))
    capacities = slot_capacities(settings)

    starters = []
    used = set()

    def fill(slot: str, eligible: tuple[str, ...]) -> None:
        open_spots = capacities[slot]
        for player in ranked:
            if open_spots == 0:
                break
            if player.player_id in used or player.position not in eligible:
                continue
            starters.append(_slot(player, slot))
            used.add(player.player_id)
            open_spots -= 1

    for slot in SLOT_ORDER:
        fill(slot, SLOT_ELIGIBILITY[slot])

    return starters


# === MILP ===


def milp_lineup(players: list[Player], settings: LeagueSettings) -> list[LineupSlot]:
    """
    Value-maximizing assignment of players to slot classes.

    Variables x[i, s] = 1 if player i starts in slot class s (eligible pairs
    only). Each player starts at most once and each slot class holds at most
    its capacity.
    """
    capacities = slot_capacities(settings)
    pairs = [
        (i, slot)
        for i, player in enumerate(players)
        for slot in SLOT_ORDER
        if capacities[slot] > 0 and player.position in SLOT_ELIGIBILITY[slot]
    ]
    if not pairs:
        return []

    prob = pulp.LpProblem("LineupOptimization", pulp.LpMaximize)
    x = {(i, s): LpVariable(f"x_{i}_{s}", cat="Binary") for i, s in pairs}

    # Tiny per-starter bonus fills slots with zero-value players, as greedy does
    prob += lpSum((players[i].value or 0.0) * x[i, s] + 1e-6 * x[i, s] for i, s in pairs)

    for i in {i for i, _ in pairs}:
        prob += lpSum(x[i, s] for j, s in pairs if j == i) <= 1, f"OnePlayerOneSlot_{i}"
    for slot in SLOT_ORDER:
        slot_vars = [x[i, s] for i, s in pairs if s == slot]
        if slot_vars:
            prob += lpSum(slot_vars) <= capacities[slot], f"Capacity_{slot}"

    # Try HiGHS first, fall back to CBC
    available_solvers = pulp.listSolvers(onlyAvailable=True)
    if "HiGHS_CMD" in available_solvers:
        solver = pulp.HiGHS_CMD(msg=False, timeLimit=60)
    elif "PULP_CBC_CMD" in available_solvers:
        solver = pulp.PULP_CBC_CMD(msg=False, timeLimit=60)
    else:
        solver = None

    status = prob.solve(solver)
    assert status == pulp.LpStatusOptimal, f"Lineup solver failed: {pulp.LpStatus[status]}"

    chosen = {
        (i, s) for (i, s), var in x.items() if value(var) is not None and value(var) > 0.5
    }

    starters = []
    for slot in SLOT_ORDER:
        in_slot = sorted((i for i, s in chosen if s == slot), key=lambda i: (-(players[i].value or 0.0), i))
        starters.extend(_slot(players[i], slot) for i in in_slot)
    return starters


# === PUBLIC API ===


def validate_lineup(lineup: Lineup, settings: LeagueSettings) -> None:
    """
    Check slot capacity, eligibility and uniqueness.

    Raises:
        AssertionError: If the lineup breaks any slot rule
    """
    capacities = slot_capacities(settings)
    for slot, count in lineup.slot_counts().items():
        assert count <= capacities.get(slot, 0), (
            f"Slot {slot} holds {count} players, capacity {capacities.get(slot, 0)}"
        )
    for starter in lineup.starters:
        assert starter.position in SLOT_ELIGIBILITY[starter.slot], (
            f"{starter.name} ({starter.position}) is not eligible for {starter.slot}"
        )
    ids = [s.player_id for s in lineup.starters]
    assert len(ids) == len(set(ids)), "Lineup assigns a player more than once"


def optimize_lineup(
    players: list[Player],
    settings: LeagueSettings,
    roster_id: int = 0,
    method: str = "greedy",
) -> Lineup:
    """
    Build the starting lineup for one roster.

    Positions with fewer players than slots leave those slots empty.

    Args:
        players: Roster players with resolved values, in roster order
        settings: League slot configuration
        roster_id: Roster the lineup belongs to
        method: "greedy" (default) or "milp"

    Returns:
        Lineup with starters in slot order
    """
    assert method in LINEUP_METHODS, f"method must be one of {LINEUP_METHODS}, got '{method}'"

    if method == "milp":
        starters = milp_lineup(players, settings)
    else:
        starters = greedy_lineup(players, settings)

    lineup = Lineup(roster_id=roster_id, starters=tuple(starters))
    validate_lineup(lineup, settings)
    return lineup
