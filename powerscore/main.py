"""CLI entry point for power rankings and trade recommendations."""

import argparse
import json
from pathlib import Path

from .config import load_config
from .data_loader import load_snapshot
from .lineup_optimizer import LINEUP_METHODS
from .power_rankings import compute_power_rankings, print_power_rankings
from .trade_engine import (
    build_trade_context,
    find_best_trade_partners,
    find_league_trades,
    find_mutually_beneficial_trades,
    format_team_needs,
    format_trade_recommendation,
    print_trade_report,
)


def _write_json(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, sort_keys=True)
    print(f"\nWrote {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fantasy football power rankings and trade recommendations"
    )
    parser.add_argument(
        "command",
        choices=["rankings", "trades"],
        help="What to compute",
    )
    parser.add_argument(
        "snapshot",
        type=Path,
        help="League snapshot JSON (league, rosters, users, players, matchups, feeds)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.json (default: packaged config)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the result as JSON to this path",
    )
    parser.add_argument(
        "--lineup-method",
        choices=LINEUP_METHODS,
        default="greedy",
        help="Lineup optimizer (default: greedy)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker threads for the league-wide trade scan (default: 1)",
    )
    parser.add_argument(
        "--team",
        default=None,
        help="Find the best trade partners for one team",
    )
    parser.add_argument(
        "--teams",
        nargs=2,
        metavar=("TEAM1", "TEAM2"),
        default=None,
        help="Analyze trades between two specific teams",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of trades to print (default: 10)",
    )
    return parser


def main(argv: list[str] | None = None):
    """
    Compute power rankings or trade recommendations from a league snapshot.

    Usage:
        python -m powerscore.main rankings snapshot.json
        python -m powerscore.main rankings snapshot.json --output rankings.json
        python -m powerscore.main trades snapshot.json --workers 4
        python -m powerscore.main trades snapshot.json --team "Team A"
        python -m powerscore.main trades snapshot.json --teams "Team A" "Team B"
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    print("=== Power Rankings ===\n")
    snapshot = load_snapshot(args.snapshot)
    rankings = compute_power_rankings(snapshot, config, lineup_method=args.lineup_method)

    if args.command == "rankings":
        print_power_rankings(rankings)
        if args.output:
            _write_json(rankings.to_dict(), args.output)
        return

    print("\n=== Trade Recommendations ===\n")
    context = build_trade_context(rankings, config)

    if args.teams:
        team1 = context.find_team(args.teams[0])
        team2 = context.find_team(args.teams[1])
        if team1 is None or team2 is None:
            missing = args.teams[0] if team1 is None else args.teams[1]
            parser.error(f"Team not found: {missing}")

        print(f"Analyzing trades between {team1.team_name} and {team2.team_name}...")
        analysis = find_mutually_beneficial_trades(team1, team2, context)
        print(format_team_needs(team1.team_name, analysis.team1_needs))
        print(format_team_needs(team2.team_name, analysis.team2_needs))

        if not analysis.recommendations:
            print("\nNo mutually beneficial trades found between these teams.")
        else:
            print(f"\nFound {len(analysis.recommendations)} potential trades:")
            for trade in analysis.recommendations[: args.top]:
                print(format_trade_recommendation(trade))

        if args.output:
            _write_json(analysis.to_dict(), args.output)
        return

    if args.team:
        team = context.find_team(args.team)
        if team is None:
            available = ", ".join(t.team_name for t in context.teams)
            parser.error(f"Team not found: {args.team}. Available teams: {available}")

        print(f"Finding best trade partners for {team.team_name}...")
        print(format_team_needs(team.team_name, context.needs[team.roster_id]))
        partners = find_best_trade_partners(team, context)

        if not partners:
            print("\nNo mutually beneficial trades found with any team.")
        else:
            print("\nBest Trade Partners:")
            for i, partner in enumerate(partners[: args.top]):
                print(f"\n{i + 1}. {partner['partner']} ({partner['total_options']} options)")
                print(format_trade_recommendation(partner["top_trade"]))

        if args.output:
            _write_json(
                {
                    "team": team.team_name,
                    "roster_id": team.roster_id,
                    "partners": [
                        {**p, "top_trade": p["top_trade"].to_dict()} for p in partners
                    ],
                },
                args.output,
            )
        return

    result = find_league_trades(context, n_workers=args.workers)
    print_trade_report(result, top_n=args.top)
    if args.output:
        _write_json(result.to_dict(), args.output)


if __name__ == "__main__":
    main()
