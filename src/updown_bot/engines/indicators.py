"""
Indicator primitives.

Pure functions over candle/close sequences. Candles are mappings with
open/high/low/close/volume keys. Insufficient history returns None rather
than raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class MacdResult:
    macd: float
    signal: float
    hist: float
    hist_delta: Optional[float]


@dataclass(frozen=True)
class HeikenAshiCandle:
    open: float
    high: float
    low: float
    close: float
    is_green: bool


def _typical_price(candle: Mapping[str, Any]) -> float:
    return (float(candle["high"]) + float(candle["low"]) + float(candle["close"])) / 3.0


def compute_session_vwap(candles: Optional[Sequence[Mapping[str, Any]]]) -> Optional[float]:
    if not isinstance(candles, (list, tuple)) or len(candles) == 0:
        return None
    sum_pv = 0.0
    sum_v = 0.0
    for c in candles:
        v = float(c["volume"])
        sum_pv += _typical_price(c) * v
        sum_v += v
    if sum_v == 0:
        return None
    return sum_pv / sum_v


def compute_vwap_series(candles: Sequence[Mapping[str, Any]]) -> List[Optional[float]]:
    """Cumulative VWAP at each candle; element i equals the VWAP of candles[:i+1]."""
    series: List[Optional[float]] = []
    sum_pv = 0.0
    sum_v = 0.0
    for c in candles:
        v = float(c["volume"])
        sum_pv += _typical_price(c) * v
        sum_v += v
        series.append(sum_pv / sum_v if sum_v > 0 else None)
    return series


def count_vwap_crosses(
    closes: Sequence[float],
    vwap_series: Sequence[Optional[float]],
    lookback: int,
) -> Optional[int]:
    """Sign changes of (close - vwap) over the last `lookback` points."""
    n = min(len(closes), len(vwap_series))
    if n < lookback:
        return None
    crosses = 0
    prev_sign = 0
    for i in range(n - lookback, n):
        vwap = vwap_series[i]
        if vwap is None:
            continue
        diff = closes[i] - vwap
        sign = 1 if diff > 0 else -1 if diff < 0 else 0
        if sign == 0:
            continue
        if prev_sign != 0 and sign != prev_sign:
            crosses += 1
        prev_sign = sign
    return crosses


def sma(values: Sequence[float], period: int) -> Optional[float]:
    if period <= 0 or len(values) < period:
        return None
    window = values[-period:]
    return sum(window) / period


def slope_last(values: Sequence[Optional[float]], points: int) -> Optional[float]:
    if points < 2 or len(values) < points:
        return None
    first = values[-points]
    last = values[-1]
    if first is None or last is None:
        return None
    return (last - first) / (points - 1)


def compute_rsi(closes: Sequence[float], period: int = 14) -> Optional[float]:
    """RSI from simple average gains/losses over the last `period` changes."""
    if len(closes) < period + 1:
        return None
    gains = 0.0
    losses = 0.0
    for i in range(len(closes) - period, len(closes)):
        change = closes[i] - closes[i - 1]
        if change > 0:
            gains += change
        else:
            losses -= change
    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    if avg_gain == 0:
        return 0.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def compute_rsi_series(closes: Sequence[float], period: int = 14) -> List[Optional[float]]:
    return [compute_rsi(closes[: i + 1], period) for i in range(len(closes))]


def _ema_series(values: Sequence[float], period: int) -> List[float]:
    k = 2.0 / (period + 1)
    out: List[float] = []
    for v in values:
        out.append(v if not out else v * k + out[-1] * (1.0 - k))
    return out


def compute_macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> Optional[MacdResult]:
    if len(closes) < slow + signal:
        return None
    fast_ema = _ema_series(closes, fast)
    slow_ema = _ema_series(closes, slow)
    # MACD line is only meaningful once the slow EMA has warmed up
    macd_line = [f - s for f, s in zip(fast_ema[slow - 1:], slow_ema[slow - 1:])]
    signal_line = _ema_series(macd_line, signal)

    hist = macd_line[-1] - signal_line[-1]
    prev_hist = macd_line[-2] - signal_line[-2] if len(macd_line) >= 2 else None
    return MacdResult(
        macd=macd_line[-1],
        signal=signal_line[-1],
        hist=hist,
        hist_delta=hist - prev_hist if prev_hist is not None else None,
    )


def compute_heiken_ashi(candles: Sequence[Mapping[str, Any]]) -> List[HeikenAshiCandle]:
    out: List[HeikenAshiCandle] = []
    for c in candles:
        o, h, l, cl = float(c["open"]), float(c["high"]), float(c["low"]), float(c["close"])
        ha_close = (o + h + l + cl) / 4.0
        ha_open = (o + cl) / 2.0 if not out else (out[-1].open + out[-1].close) / 2.0
        out.append(HeikenAshiCandle(
            open=ha_open,
            high=max(h, ha_open, ha_close),
            low=min(l, ha_open, ha_close),
            close=ha_close,
            is_green=ha_close >= ha_open,
        ))
    return out


def count_consecutive(ha_candles: Sequence[Any]) -> Tuple[Optional[str], int]:
    """Colour and length of the trailing same-colour streak."""
    if not ha_candles:
        return None, 0

    def green(c: Any) -> bool:
        return c["is_green"] if isinstance(c, Mapping) else c.is_green

    last_green = green(ha_candles[-1])
    count = 0
    for c in reversed(ha_candles):
        if green(c) != last_green:
            break
        count += 1
    return ("green" if last_green else "red"), count


def volume_profile(volumes: Sequence[float], recent_bars: int, avg_bars: int) -> Dict[str, Optional[float]]:
    """
    Recent volume (sum of the last recent_bars) against the average
    recent_bars-sized block over the last avg_bars.
    """
    if len(volumes) < recent_bars:
        return {"volume_recent": None, "volume_avg": None}
    recent = sum(volumes[-recent_bars:])
    history = volumes[-avg_bars:]
    avg = sum(history) / len(history) * recent_bars
    return {"volume_recent": recent, "volume_avg": avg}
