"""
Up/Down Bot Engines - Signal-to-Decision Pipeline

Core Engines:
- detect_regime: TREND_UP / TREND_DOWN / RANGE / CHOP labelling
- score_direction: additive up/down scorer
- apply_time_awareness: decay toward 0.5 as the window closes
- compute_edge: model minus market-implied probability
- decide: phase-gated ENTER / NO_TRADE policy

Supporting Engines:
- indicators / features: candle history to MarketFeatureSet
- market_data: market selection and order book summaries
"""

from .regime import detect_regime
from .probability import score_direction, apply_time_awareness, SIGNAL_RULES
from .edge import compute_edge, normalize_market_price
from .decision import decide, phase_for, strength_for
from .features import build_feature_set
from .market_data import (
    OrderBookSummary,
    flatten_event_markets,
    filter_updown_markets,
    pick_latest_live_market,
    summarize_order_book,
    quote_from_books,
)

__all__ = [
    # Core
    "detect_regime",
    "score_direction",
    "apply_time_awareness",
    "SIGNAL_RULES",
    "compute_edge",
    "normalize_market_price",
    "decide",
    "phase_for",
    "strength_for",
    # Supporting
    "build_feature_set",
    "OrderBookSummary",
    "flatten_event_markets",
    "filter_updown_markets",
    "pick_latest_live_market",
    "summarize_order_book",
    "quote_from_books",
]
