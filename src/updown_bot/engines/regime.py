"""
Regime Classifier.

Labels current market structure from price/VWAP features. Rules are
evaluated in priority order, first match wins:

1. any required input missing        -> CHOP
2. price > vwap and vwap_slope > 0   -> TREND_UP
3. price < vwap and vwap_slope < 0   -> TREND_DOWN
4. vwap_cross_count >= threshold     -> RANGE
5. otherwise                         -> CHOP

Low relative volume only shapes the CHOP reason; it never overrides a
trend or range match.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.config import DEFAULT_CONFIG, RegimeConfig
from ..core.types import MarketFeatureSet, RegimeLabel, RegimeResult

logger = logging.getLogger(__name__)

REQUIRED_INPUTS = (
    "price",
    "vwap",
    "vwap_slope",
    "vwap_cross_count",
    "volume_recent",
    "volume_avg",
)


def detect_regime(features: MarketFeatureSet, config: Optional[RegimeConfig] = None) -> RegimeResult:
    cfg = config or DEFAULT_CONFIG.regime

    missing = [name for name in REQUIRED_INPUTS if getattr(features, name) is None]
    if missing:
        logger.debug(f"Regime CHOP: missing inputs {missing}")
        return RegimeResult(RegimeLabel.CHOP, "missing_inputs", {"missing": tuple(missing)})

    price = features.price
    vwap = features.vwap
    slope = features.vwap_slope
    volume_ratio = features.volume_recent / features.volume_avg if features.volume_avg > 0 else None
    metadata = {
        "vwap_distance": (price - vwap) / vwap if vwap != 0 else None,
        "volume_ratio": volume_ratio,
        "vwap_cross_count": features.vwap_cross_count,
    }

    if price > vwap and slope > 0:
        result = RegimeResult(RegimeLabel.TREND_UP, "price_above_rising_vwap", metadata)
    elif price < vwap and slope < 0:
        result = RegimeResult(RegimeLabel.TREND_DOWN, "price_below_falling_vwap", metadata)
    elif features.vwap_cross_count >= cfg.cross_threshold:
        result = RegimeResult(RegimeLabel.RANGE, "vwap_whipsaw", metadata)
    else:
        low_volume = volume_ratio is not None and volume_ratio < cfg.low_volume_ratio
        flat = metadata["vwap_distance"] is not None and abs(metadata["vwap_distance"]) < cfg.flat_vwap_distance
        if low_volume and flat:
            reason = "low_volume_flat"
        elif low_volume:
            reason = "low_volume"
        else:
            reason = "no_directional_signal"
        result = RegimeResult(RegimeLabel.CHOP, reason, metadata)

    logger.debug(f"Regime {result.regime.value} ({result.reason})")
    return result
