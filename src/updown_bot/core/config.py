from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .types import Phase, sha256_hex, stable_json

logger = logging.getLogger(__name__)

DEFAULT_CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts"
PIPELINE_CONTRACT = "pipeline.yaml"


@dataclass(frozen=True)
class RegimeConfig:
    cross_threshold: int = 3
    low_volume_ratio: float = 0.6
    flat_vwap_distance: float = 0.001  # |price - vwap| / vwap


@dataclass(frozen=True)
class ScoringConfig:
    """Weights of the additive up/down scorer."""
    vwap_gain: float = 4.0
    vwap_cap: float = 2.0
    rsi_bull_level: float = 55.0
    rsi_bear_level: float = 45.0
    momentum_weight: float = 2.0
    macd_gain: float = 0.5
    macd_cap: float = 2.0
    failed_reclaim_weight: float = 3.0
    heiken_min_streak: int = 3
    heiken_weight: float = 1.0


@dataclass(frozen=True)
class PolicyConfig:
    """
    Phase boundaries and gates of the decision policy.

    LATE: remaining <= late_max_minutes
    MID:  late_max_minutes < remaining <= mid_max_minutes
    EARLY: remaining > mid_max_minutes
    """
    late_max_minutes: float = 5.0
    mid_max_minutes: float = 10.0
    early_edge_threshold: float = 0.05
    mid_edge_threshold: float = 0.10
    late_edge_threshold: float = 0.20
    min_model_prob: float = 0.55
    strong_edge: float = 0.20
    moderate_edge: float = 0.10

    def edge_threshold(self, phase: Phase) -> float:
        if phase is Phase.LATE:
            return self.late_edge_threshold
        if phase is Phase.MID:
            return self.mid_edge_threshold
        return self.early_edge_threshold


@dataclass(frozen=True)
class FeatureConfig:
    """Lookbacks used when assembling features from candles."""
    vwap_slope_lookback: int = 5
    vwap_cross_lookback: int = 20
    volume_recent_bars: int = 20
    volume_avg_bars: int = 120
    rsi_period: int = 14
    rsi_slope_points: int = 3
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9


@dataclass(frozen=True)
class PipelineConfig:
    window_minutes: float = 15.0
    regime: RegimeConfig = field(default_factory=RegimeConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def config_hash(self) -> str:
        return sha256_hex(stable_json(self.to_payload()))


DEFAULT_CONFIG = PipelineConfig()


def load_yaml_contract(contracts_dir: str, filename: str) -> Dict[str, Any]:
    """Load a single YAML contract file.

    Args:
        contracts_dir: Directory containing contract YAML files
        filename: Name of the YAML file to load (e.g., "pipeline.yaml")

    Returns:
        Parsed YAML contract as a dictionary
    """
    root = Path(contracts_dir)
    contract_path = root / filename
    with contract_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _require(condition: bool, msg: str) -> None:
    """Fail-closed helper for contract validation."""
    if not condition:
        raise ValueError(msg)


def _number(section: Dict[str, Any], key: str, default: float, where: str, positive: bool = False) -> float:
    raw = section.get(key, default)
    _require(isinstance(raw, (int, float)) and not isinstance(raw, bool),
             f"{where}.{key} must be a number")
    value = float(raw)
    _require(math.isfinite(value), f"{where}.{key} must be finite")
    _require(value >= 0.0, f"{where}.{key} must be non-negative")
    if positive:
        _require(value > 0.0, f"{where}.{key} must be positive")
    return value


def _integer(section: Dict[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key, default)
    _require(isinstance(raw, int) and not isinstance(raw, bool), f"{where}.{key} must be an integer")
    _require(raw >= 1, f"{where}.{key} must be >= 1")
    return raw


def _section(doc: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = doc.get(key, {}) or {}
    _require(isinstance(section, dict), f"pipeline.{key} must be a mapping")
    return section


def normalize_regime(section: Dict[str, Any]) -> RegimeConfig:
    d = RegimeConfig()
    return RegimeConfig(
        cross_threshold=_integer(section, "cross_threshold", d.cross_threshold, "regime"),
        low_volume_ratio=_number(section, "low_volume_ratio", d.low_volume_ratio, "regime"),
        flat_vwap_distance=_number(section, "flat_vwap_distance", d.flat_vwap_distance, "regime"),
    )


def normalize_scoring(section: Dict[str, Any]) -> ScoringConfig:
    d = ScoringConfig()
    vwap = section.get("vwap", {}) or {}
    momentum = section.get("momentum", {}) or {}
    macd = section.get("macd", {}) or {}
    reclaim = section.get("failed_vwap_reclaim", {}) or {}
    heiken = section.get("heiken_ashi", {}) or {}
    for name, sub in (("vwap", vwap), ("momentum", momentum), ("macd", macd),
                      ("failed_vwap_reclaim", reclaim), ("heiken_ashi", heiken)):
        _require(isinstance(sub, dict), f"scoring.{name} must be a mapping")

    cfg = ScoringConfig(
        vwap_gain=_number(vwap, "gain", d.vwap_gain, "scoring.vwap", positive=True),
        vwap_cap=_number(vwap, "cap", d.vwap_cap, "scoring.vwap", positive=True),
        rsi_bull_level=_number(momentum, "rsi_bull_level", d.rsi_bull_level, "scoring.momentum"),
        rsi_bear_level=_number(momentum, "rsi_bear_level", d.rsi_bear_level, "scoring.momentum"),
        momentum_weight=_number(momentum, "weight", d.momentum_weight, "scoring.momentum", positive=True),
        macd_gain=_number(macd, "gain", d.macd_gain, "scoring.macd", positive=True),
        macd_cap=_number(macd, "cap", d.macd_cap, "scoring.macd", positive=True),
        failed_reclaim_weight=_number(reclaim, "weight", d.failed_reclaim_weight,
                                      "scoring.failed_vwap_reclaim", positive=True),
        heiken_min_streak=_integer(heiken, "min_streak", d.heiken_min_streak, "scoring.heiken_ashi"),
        heiken_weight=_number(heiken, "weight", d.heiken_weight, "scoring.heiken_ashi", positive=True),
    )
    _require(cfg.rsi_bear_level <= cfg.rsi_bull_level,
             "scoring.momentum.rsi_bear_level must not exceed rsi_bull_level")
    return cfg


def normalize_policy(section: Dict[str, Any]) -> PolicyConfig:
    d = PolicyConfig()
    phases = section.get("phases", {}) or {}
    thresholds = section.get("edge_thresholds", {}) or {}
    strength = section.get("strength", {}) or {}
    for name, sub in (("phases", phases), ("edge_thresholds", thresholds), ("strength", strength)):
        _require(isinstance(sub, dict), f"policy.{name} must be a mapping")

    cfg = PolicyConfig(
        late_max_minutes=_number(phases, "late_max_minutes", d.late_max_minutes, "policy.phases"),
        mid_max_minutes=_number(phases, "mid_max_minutes", d.mid_max_minutes, "policy.phases"),
        early_edge_threshold=_number(thresholds, "EARLY", d.early_edge_threshold, "policy.edge_thresholds"),
        mid_edge_threshold=_number(thresholds, "MID", d.mid_edge_threshold, "policy.edge_thresholds"),
        late_edge_threshold=_number(thresholds, "LATE", d.late_edge_threshold, "policy.edge_thresholds"),
        min_model_prob=_number(section, "min_model_prob", d.min_model_prob, "policy"),
        strong_edge=_number(strength, "strong", d.strong_edge, "policy.strength"),
        moderate_edge=_number(strength, "moderate", d.moderate_edge, "policy.strength"),
    )
    _require(cfg.late_max_minutes < cfg.mid_max_minutes,
             "policy.phases.late_max_minutes must be below mid_max_minutes")
    _require(cfg.early_edge_threshold <= cfg.mid_edge_threshold <= cfg.late_edge_threshold,
             "policy.edge_thresholds must be non-decreasing EARLY <= MID <= LATE")
    _require(cfg.min_model_prob <= 1.0, "policy.min_model_prob must be within [0, 1]")
    _require(cfg.moderate_edge <= cfg.strong_edge,
             "policy.strength.moderate must not exceed strong")
    return cfg


def normalize_features(section: Dict[str, Any]) -> FeatureConfig:
    d = FeatureConfig()
    cfg = FeatureConfig(**{
        f.name: _integer(section, f.name, getattr(d, f.name), "features")
        for f in fields(d)
    })
    _require(cfg.vwap_slope_lookback >= 2, "features.vwap_slope_lookback must be >= 2")
    _require(cfg.rsi_slope_points >= 2, "features.rsi_slope_points must be >= 2")
    _require(cfg.macd_fast < cfg.macd_slow, "features.macd_fast must be below macd_slow")
    return cfg


def normalize_pipeline_contract(doc: Dict[str, Any]) -> PipelineConfig:
    """
    Validate a parsed pipeline contract and build the typed configuration.

    Missing sections and keys fall back to the defaults; present values
    must be well-formed or a ValueError is raised.
    """
    _require(isinstance(doc, dict), "pipeline contract must be a mapping")

    window = _section(doc, "window")
    window_minutes = _number(window, "minutes", DEFAULT_CONFIG.window_minutes, "window")
    _require(window_minutes > 0.0, "window.minutes must be positive")

    return PipelineConfig(
        window_minutes=window_minutes,
        regime=normalize_regime(_section(doc, "regime")),
        scoring=normalize_scoring(_section(doc, "scoring")),
        policy=normalize_policy(_section(doc, "policy")),
        features=normalize_features(_section(doc, "features")),
    )


def load_pipeline_config(
    contracts_dir: Optional[str] = None,
    filename: str = PIPELINE_CONTRACT,
) -> PipelineConfig:
    root = Path(contracts_dir) if contracts_dir else DEFAULT_CONTRACTS_DIR
    doc = load_yaml_contract(str(root), filename)
    cfg = normalize_pipeline_contract(doc)
    logger.info(f"Loaded pipeline contract {root / filename} (hash={cfg.config_hash[:12]})")
    return cfg
