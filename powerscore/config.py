"""
Configuration loading and validation.

Loads all tunables from config.json into a frozen EngineConfig that is passed
explicitly into every component. Nothing reads module-level tunables at call
time, so two configs can be used side by side (e.g. in tests).
"""

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

_CONFIG_PATH = Path(__file__).parent / "config.json"

# Positions that can occupy a dedicated starting slot, in fill order
STARTING_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")
FLEX_POSITIONS = ("RB", "WR", "TE")
SUPER_FLEX_POSITIONS = ("QB", "RB", "WR", "TE")
# Positions considered by depth scoring and trade search
SKILL_POSITIONS = ("QB", "RB", "WR", "TE")
LEAGUE_TYPES = ("dynasty", "redraft")
VALUE_SOURCES = ("market", "market+projection", "projection", "ppg", "floor")


@dataclass(frozen=True)
class PowerWeights:
    lineup: float
    performance: float
    positional: float
    depth: float

    def total(self) -> float:
        return self.lineup + self.performance + self.positional + self.depth


@dataclass(frozen=True)
class ScoringConfig:
    default_slot_average: float
    depth_reference_value: float
    all_play_weight: float
    win_pct_weight: float


@dataclass(frozen=True)
class ScarcityConfig:
    fallback: Mapping[str, float]
    superflex_fallback: Mapping[str, float]
    baseline_position: str
    min_multiplier: float
    max_multiplier: float
    flex_share: float
    superflex_qb_share: float
    superflex_other_share: float
    season_phase_adjustment: bool

    def fallback_table(self, superflex: bool) -> Mapping[str, float]:
        return self.superflex_fallback if superflex else self.fallback


@dataclass(frozen=True)
class ValueConfig:
    market_weight: float
    projection_weight: float
    blend_projections: str  # "auto", "true" or "false"
    default_projection_scale: float
    starter_bonus: float
    floor_values: Mapping[str, float]

    def floor_value(self, position: str) -> float:
        return self.floor_values.get(position, self.floor_values["default"])

    def should_blend(self, league_type: str) -> bool:
        """Blend market values with projections (auto: redraft leagues only)."""
        if self.blend_projections == "auto":
            return league_type == "redraft"
        return self.blend_projections == "true"


@dataclass(frozen=True)
class TradeBonuses:
    power_gain_multiplier: float
    surplus_fit: float
    need_fit: float
    fair_exchange: float
    both_improve: float
    both_upgrade: float
    lineup_improve: float
    per_upgrade: float


@dataclass(frozen=True)
class TradeConfig:
    fairness_tolerance: float
    consolidation_tolerance: float
    value_swap_tolerance: float
    min_trade_value: float
    value_swap_min_value: float
    star_min_value: float
    depth_min_value: float
    need_threshold: float
    surplus_threshold: float
    starter_strength_multiplier: float
    strength_weight: float
    depth_weight: float
    default_position_average: float
    flex_starter_share: float
    superflex_starter_share: float
    starter_loss_penalty: float
    fair_exchange_margin: float
    max_candidates_per_pair: int
    max_consolidation_pool: int
    max_recommendations_per_pair: int
    max_league_recommendations: int
    bonuses: TradeBonuses


@dataclass(frozen=True)
class EngineConfig:
    power_weights_by_type: Mapping[str, PowerWeights]
    slot_weights: Mapping[str, float]
    scoring: ScoringConfig
    scarcity: ScarcityConfig
    value: ValueConfig
    trade: TradeConfig

    def power_weights(self, league_type: str) -> PowerWeights:
        assert league_type in self.power_weights_by_type, (
            f"Unknown league type '{league_type}', expected one of {LEAGUE_TYPES}"
        )
        return self.power_weights_by_type[league_type]

    def lineup_weight(self, league_type: str) -> float:
        """Share of the power score driven by lineup value."""
        return self.power_weights(league_type).lineup


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


def config_from_dict(config: dict) -> EngineConfig:
    """
    Build and validate an EngineConfig from a raw config dict.

    Raises:
        AssertionError: If a section is missing or values are out of range
    """
    for section in ["power_weights", "slot_weights", "scoring", "scarcity", "value", "trade_engine"]:
        assert section in config, f"Config must have '{section}' section"

    weights = {
        league_type: PowerWeights(**config["power_weights"][league_type])
        for league_type in LEAGUE_TYPES
        if league_type in config["power_weights"]
    }
    assert set(weights) == set(LEAGUE_TYPES), (
        f"power_weights must define {LEAGUE_TYPES}, got {sorted(weights)}"
    )
    for league_type, w in weights.items():
        assert abs(w.total() - 1.0) < 1e-9, (
            f"power_weights.{league_type} must sum to 1.0, got {w.total():.4f}"
        )

    scarcity_raw = dict(config["scarcity"])
    for table in ["fallback", "superflex_fallback"]:
        missing = set(STARTING_POSITIONS) - set(scarcity_raw[table])
        assert not missing, f"scarcity.{table} missing positions: {sorted(missing)}"
        scarcity_raw[table] = _frozen(scarcity_raw[table])
    scarcity = ScarcityConfig(**scarcity_raw)
    assert scarcity.min_multiplier < scarcity.max_multiplier, (
        "scarcity.min_multiplier must be below scarcity.max_multiplier"
    )

    value_raw = dict(config["value"])
    value_raw["blend_projections"] = str(value_raw["blend_projections"]).lower()
    assert value_raw["blend_projections"] in ["auto", "true", "false"], (
        "value.blend_projections must be 'auto', true or false"
    )
    assert "default" in value_raw["floor_values"], "value.floor_values needs a 'default'"
    value_raw["floor_values"] = _frozen(value_raw["floor_values"])
    value = ValueConfig(**value_raw)
    assert abs(value.market_weight + value.projection_weight - 1.0) < 1e-9, (
        "value.market_weight + value.projection_weight must sum to 1.0"
    )

    trade_raw = dict(config["trade_engine"])
    trade_raw["bonuses"] = TradeBonuses(**trade_raw["bonuses"])
    trade = TradeConfig(**trade_raw)
    for name in ["fairness_tolerance", "consolidation_tolerance", "value_swap_tolerance"]:
        tolerance = getattr(trade, name)
        assert 0 < tolerance <= 1, f"trade_engine.{name} must be in (0, 1], got {tolerance}"
    assert trade.max_candidates_per_pair > 0, "max_candidates_per_pair must be positive"
    assert trade.max_consolidation_pool >= 2, "max_consolidation_pool must be at least 2"

    slot_weights = config["slot_weights"]
    for slot in list(STARTING_POSITIONS) + ["FLEX", "SUPER_FLEX"]:
        assert slot in slot_weights, f"slot_weights missing slot '{slot}'"

    return EngineConfig(
        power_weights_by_type=_frozen(weights),
        slot_weights=_frozen(slot_weights),
        scoring=ScoringConfig(**config["scoring"]),
        scarcity=scarcity,
        value=value,
        trade=trade,
    )


def load_config(config_path: Path | str | None = None) -> EngineConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to a config.json file (defaults to the packaged one)

    Returns:
        Frozen EngineConfig

    Raises:
        AssertionError: If config file doesn't exist or is invalid
    """
    if config_path is None:
        config_path = _CONFIG_PATH
    else:
        config_path = Path(config_path)

    assert config_path.exists(), f"Config file not found: {config_path}"

    with open(config_path) as f:
        config = json.load(f)

    return config_from_dict(config)


DEFAULT_CONFIG = load_config()
