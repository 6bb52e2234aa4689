"""Tests for indicator primitives (VWAP, RSI, MACD, Heiken-Ashi)."""
import math

import pytest

from updown_bot.engines.indicators import (
    compute_heiken_ashi,
    compute_macd,
    compute_rsi,
    compute_session_vwap,
    compute_vwap_series,
    count_consecutive,
    count_vwap_crosses,
    slope_last,
    sma,
    volume_profile,
)


# ==========================================
# VWAP TESTS
# ==========================================

def test_vwap_empty_and_invalid():
    assert compute_session_vwap([]) is None
    assert compute_session_vwap(None) is None


def test_vwap_single_candle():
    candles = [{"high": 100, "low": 90, "close": 95, "volume": 10}]
    assert compute_session_vwap(candles) == pytest.approx((100 + 90 + 95) / 3)


def test_vwap_multiple_candles():
    candles = [
        {"high": 100, "low": 90, "close": 95, "volume": 10},
        {"high": 110, "low": 100, "close": 105, "volume": 20},
    ]
    tp1 = (100 + 90 + 95) / 3
    tp2 = (110 + 100 + 105) / 3
    assert compute_session_vwap(candles) == pytest.approx((tp1 * 10 + tp2 * 20) / 30)


def test_vwap_zero_volume():
    assert compute_session_vwap([{"high": 100, "low": 90, "close": 95, "volume": 0}]) is None


def test_vwap_series_matches_prefix_vwap():
    candles = [
        {"high": 100, "low": 90, "close": 95, "volume": 10},
        {"high": 110, "low": 100, "close": 105, "volume": 20},
        {"high": 105, "low": 95, "close": 100, "volume": 15},
    ]
    series = compute_vwap_series(candles)
    assert len(series) == 3
    for i in range(3):
        assert series[i] == pytest.approx(compute_session_vwap(candles[: i + 1]))


def test_vwap_crosses():
    closes = [1.0, 3.0, 1.0, 3.0]
    vwaps = [2.0, 2.0, 2.0, 2.0]
    assert count_vwap_crosses(closes, vwaps, 4) == 3
    assert count_vwap_crosses(closes, vwaps, 2) == 1
    assert count_vwap_crosses(closes, vwaps, 5) is None


def test_vwap_crosses_ignore_touches():
    closes = [1.0, 2.0, 1.0]
    vwaps = [2.0, 2.0, 2.0]
    assert count_vwap_crosses(closes, vwaps, 3) == 0


# ==========================================
# RSI / SMA / SLOPE TESTS
# ==========================================

def test_rsi_not_enough_data():
    assert compute_rsi([1, 2, 3], 14) is None


def test_rsi_all_gains():
    closes = [100 + i for i in range(16)]
    assert compute_rsi(closes, 14) == 100


def test_rsi_all_losses():
    closes = [200 - i for i in range(16)]
    assert compute_rsi(closes, 14) == 0


def test_rsi_mixed_in_range():
    closes = [44, 44.34, 44.09, 43.61, 44.33, 44.83, 45.10, 45.42, 45.84,
              46.08, 45.89, 46.03, 45.61, 46.28, 46.28, 46.00]
    rsi = compute_rsi(closes, 14)
    assert rsi is not None
    assert 0 <= rsi <= 100


def test_sma():
    assert sma([1, 2], 3) is None
    assert sma([1, 2, 3, 4, 5], 3) == 4
    assert sma([10, 20, 30], 2) == 25


def test_slope_last():
    assert slope_last([1], 3) is None
    assert slope_last([1, 2, 3], 3) == 1
    assert slope_last([3, 2, 1], 3) == -1
    assert slope_last([5, 5, 5], 3) == 0
    assert slope_last([None, 2, 3], 3) is None


# ==========================================
# MACD TESTS
# ==========================================

def test_macd_not_enough_data():
    closes = [100 + i for i in range(30)]
    assert compute_macd(closes, 12, 26, 9) is None


def test_macd_hist_is_macd_minus_signal():
    closes = [100 + math.sin(i / 5) * 10 for i in range(60)]
    result = compute_macd(closes, 12, 26, 9)
    assert result is not None
    assert isinstance(result.macd, float)
    assert isinstance(result.signal, float)
    assert result.hist == pytest.approx(result.macd - result.signal)
    assert result.hist_delta is not None


def test_macd_positive_on_uptrend():
    closes = [100 + i for i in range(60)]
    assert compute_macd(closes).macd > 0


# ==========================================
# HEIKEN-ASHI TESTS
# ==========================================

def test_heiken_ashi_empty():
    assert compute_heiken_ashi([]) == []


def test_heiken_ashi_close_is_ohlc_average():
    ha = compute_heiken_ashi([{"open": 100, "high": 110, "low": 90, "close": 105}])
    assert len(ha) == 1
    assert ha[0].close == pytest.approx((100 + 110 + 90 + 105) / 4)


def test_heiken_ashi_colors():
    green = compute_heiken_ashi([{"open": 90, "high": 110, "low": 85, "close": 105}])
    red = compute_heiken_ashi([{"open": 110, "high": 112, "low": 80, "close": 85}])
    assert green[0].is_green is True
    assert red[0].is_green is False


def test_count_consecutive():
    assert count_consecutive([]) == (None, 0)
    assert count_consecutive([{"is_green": False}, {"is_green": True}, {"is_green": True}, {"is_green": True}]) == ("green", 3)
    assert count_consecutive([{"is_green": True}, {"is_green": False}, {"is_green": False}]) == ("red", 2)
    assert count_consecutive([{"is_green": True}, {"is_green": True}, {"is_green": False}]) == ("red", 1)


# ==========================================
# VOLUME TESTS
# ==========================================

def test_volume_profile():
    volumes = [10.0] * 100 + [20.0] * 20
    profile = volume_profile(volumes, recent_bars=20, avg_bars=120)
    assert profile["volume_recent"] == 400
    assert profile["volume_avg"] == pytest.approx(1400 / 120 * 20)


def test_volume_profile_short_history():
    assert volume_profile([1.0] * 5, 20, 120) == {"volume_recent": None, "volume_avg": None}
