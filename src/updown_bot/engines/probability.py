"""
Directional scoring and time decay.

score_direction is an additive-weight model: both sides start at 1.0 and
each named signal adds its weight to exactly one side. The raw probability
is the normalized ratio up / (up + down).

apply_time_awareness pulls that probability linearly toward 0.5 as the
market window runs out.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from ..core.config import DEFAULT_CONFIG, ScoringConfig
from ..core.timing import clamp
from ..core.types import MarketFeatureSet, ProbabilityScore, Side, TimeAdjustedProbability

logger = logging.getLogger(__name__)

BASE_SCORE = 1.0


def _scaled(value: float, gain: float, cap: float) -> float:
    # zero at zero, monotonic in |value|, capped
    return min(cap, gain * abs(value))


def _vwap_bias(f: MarketFeatureSet, cfg: ScoringConfig) -> Optional[Tuple[Side, float]]:
    if f.price is None or f.vwap is None or f.vwap_slope is None:
        return None
    if f.price > f.vwap and f.vwap_slope > 0:
        return Side.UP, _scaled(f.vwap_slope, cfg.vwap_gain, cfg.vwap_cap)
    if f.price < f.vwap and f.vwap_slope < 0:
        return Side.DOWN, _scaled(f.vwap_slope, cfg.vwap_gain, cfg.vwap_cap)
    return None


def _momentum_bias(f: MarketFeatureSet, cfg: ScoringConfig) -> Optional[Tuple[Side, float]]:
    if f.rsi is None or f.rsi_slope is None:
        return None
    if f.rsi > cfg.rsi_bull_level and f.rsi_slope > 0:
        return Side.UP, cfg.momentum_weight
    if f.rsi < cfg.rsi_bear_level and f.rsi_slope < 0:
        return Side.DOWN, cfg.momentum_weight
    return None


def _macd_bias(f: MarketFeatureSet, cfg: ScoringConfig) -> Optional[Tuple[Side, float]]:
    if f.macd is None or f.macd == 0:
        return None
    side = Side.UP if f.macd > 0 else Side.DOWN
    return side, _scaled(f.macd, cfg.macd_gain, cfg.macd_cap)


def _failed_reclaim(f: MarketFeatureSet, cfg: ScoringConfig) -> Optional[Tuple[Side, float]]:
    if f.failed_vwap_reclaim is True:
        return Side.DOWN, cfg.failed_reclaim_weight
    return None


def _heiken_streak(f: MarketFeatureSet, cfg: ScoringConfig) -> Optional[Tuple[Side, float]]:
    if f.heiken_color is None or (f.heiken_count or 0) < cfg.heiken_min_streak:
        return None
    if f.heiken_color == "green":
        return Side.UP, cfg.heiken_weight
    if f.heiken_color == "red":
        return Side.DOWN, cfg.heiken_weight
    return None


# Named signal -> rule. Each rule contributes to at most one side.
SIGNAL_RULES = {
    "vwap_bias": _vwap_bias,
    "momentum": _momentum_bias,
    "macd": _macd_bias,
    "failed_vwap_reclaim": _failed_reclaim,
    "heiken_streak": _heiken_streak,
}


def score_direction(features: MarketFeatureSet, config: Optional[ScoringConfig] = None) -> ProbabilityScore:
    cfg = config or DEFAULT_CONFIG.scoring

    up_signals: Dict[str, float] = {}
    down_signals: Dict[str, float] = {}
    for name, rule in SIGNAL_RULES.items():
        hit = rule(features, cfg)
        if hit is None:
            continue
        side, weight = hit
        if weight <= 0:
            continue
        if side is Side.UP:
            up_signals[name] = weight
        else:
            down_signals[name] = weight

    up_score = BASE_SCORE + sum(up_signals.values())
    down_score = BASE_SCORE + sum(down_signals.values())
    raw_up = up_score / (up_score + down_score)
    raw_down = 1.0 - raw_up

    logger.debug(
        f"Direction scores up={up_score:.3f} down={down_score:.3f} raw_up={raw_up:.4f} "
        f"signals up={sorted(up_signals)} down={sorted(down_signals)}"
    )
    return ProbabilityScore(
        up_score=up_score,
        down_score=down_score,
        raw_up=raw_up,
        raw_down=raw_down,
        up_signals=up_signals,
        down_signals=down_signals,
    )


def apply_time_awareness(raw_up: float, remaining_minutes: float, window_minutes: float) -> TimeAdjustedProbability:
    """
    Decay raw_up toward 0.5 in proportion to the remaining share of the window.

    remaining_minutes outside [0, window_minutes] is clamped. A full window
    returns raw_up unchanged; zero remaining returns exactly 0.5.
    """
    if window_minutes <= 0:
        ratio = 0.0
    else:
        ratio = clamp(remaining_minutes / window_minutes, 0.0, 1.0)

    raw_up = clamp(raw_up, 0.0, 1.0)
    if ratio == 1.0:
        adjusted_up = raw_up
    else:
        adjusted_up = 0.5 + (raw_up - 0.5) * ratio
    adjusted_down = 1.0 - adjusted_up

    return TimeAdjustedProbability(adjusted_up=adjusted_up, adjusted_down=adjusted_down, time_ratio=ratio)
