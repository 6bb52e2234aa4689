"""Assemble a MarketFeatureSet from a 1-minute candle history."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..core.config import DEFAULT_CONFIG, FeatureConfig
from ..core.types import MarketFeatureSet
from .indicators import (
    compute_heiken_ashi,
    compute_macd,
    compute_rsi,
    compute_rsi_series,
    compute_vwap_series,
    count_consecutive,
    count_vwap_crosses,
    slope_last,
    volume_profile,
)

logger = logging.getLogger(__name__)


def detect_failed_vwap_reclaim(
    closes: Sequence[float],
    vwap_series: Sequence[Optional[float]],
    vwap_slope: Optional[float],
) -> bool:
    """Previous close reclaimed VWAP, latest close lost it again, VWAP falling."""
    if len(closes) < 2 or len(vwap_series) < 2 or vwap_slope is None:
        return False
    vwap_prev, vwap_now = vwap_series[-2], vwap_series[-1]
    if vwap_prev is None or vwap_now is None:
        return False
    return closes[-2] > vwap_prev and closes[-1] < vwap_now and vwap_slope < 0


def build_feature_set(
    candles: Sequence[Mapping[str, Any]],
    config: Optional[FeatureConfig] = None,
    price: Optional[float] = None,
) -> MarketFeatureSet:
    """
    Derive indicator readings from candles (oldest first).

    `price` overrides the last close when a fresher spot price is known.
    """
    cfg = config or DEFAULT_CONFIG.features
    if not candles:
        return MarketFeatureSet(price=price)

    closes = [float(c["close"]) for c in candles]
    volumes = [float(c["volume"]) for c in candles]
    last_price = price if price is not None else closes[-1]

    vwap_series = compute_vwap_series(candles)
    vwap = vwap_series[-1]
    vwap_slope = slope_last(vwap_series, cfg.vwap_slope_lookback)
    cross_count = count_vwap_crosses(closes, vwap_series, cfg.vwap_cross_lookback)
    volume = volume_profile(volumes, cfg.volume_recent_bars, cfg.volume_avg_bars)

    rsi = compute_rsi(closes, cfg.rsi_period)
    rsi_slope = None
    if rsi is not None:
        tail = closes[-(cfg.rsi_period + cfg.rsi_slope_points):]
        rsi_slope = slope_last(compute_rsi_series(tail, cfg.rsi_period), cfg.rsi_slope_points)

    macd = compute_macd(closes, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
    heiken_color, heiken_count = count_consecutive(compute_heiken_ashi(candles))

    features = MarketFeatureSet(
        price=last_price,
        vwap=vwap,
        vwap_slope=vwap_slope,
        vwap_cross_count=cross_count,
        volume_recent=volume["volume_recent"],
        volume_avg=volume["volume_avg"],
        rsi=rsi,
        rsi_slope=rsi_slope,
        macd=macd.hist if macd is not None else None,
        heiken_color=heiken_color,
        heiken_count=heiken_count,
        failed_vwap_reclaim=detect_failed_vwap_reclaim(closes, vwap_series, vwap_slope),
    )
    logger.debug(f"Features from {len(candles)} candles: {features}")
    return features
