# Fantasy Football Power Rankings
#
# This package ranks fantasy football teams and recommends trades:
# - config: Tunables loaded from config.json into a frozen EngineConfig
# - data_loader: Build a validated LeagueSnapshot from league platform data
# - value_resolver: One value per player from market, projection, ppg or floor
# - scarcity: Positional scarcity multipliers from market value spread (VOR)
# - lineup_optimizer: Greedy (or MILP) starting lineup construction
# - power_rankings: Four-component power score and ranks
# - trade_engine: Need analysis, trade search, scoring and ranking

from .config import DEFAULT_CONFIG, EngineConfig, config_from_dict, load_config
from .data_loader import (
    build_snapshot,
    compute_all_play_record,
    league_settings_from_positions,
    load_snapshot,
    match_market_values,
    normalize_name,
)
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
    TradeCandidate,
    TradeImpact,
)
from .power_rankings import (
    PowerRankings,
    compute_power_rankings,
    depth_score,
    performance_score,
    positional_advantage_score,
    print_power_rankings,
)
from .scarcity import compute_scarcity, find_scarcity_snapshot, season_phase_scarcity
from .trade_engine import (
    LeagueTrades,
    PairAnalysis,
    TradeContext,
    analyze_team_needs,
    build_trade_context,
    calculate_trade_impact,
    find_best_trade_partners,
    find_league_trades,
    find_mutually_beneficial_trades,
    generate_trade_candidates,
    is_fair_trade,
    print_trade_report,
    rank_trades,
    score_trade,
)
from .value_resolver import player_values_frame, resolve_player_values, summarize_value_sources
