"""
Edge Calculator.

edge = model probability - market-implied probability, per side. Venue
prices above 1 are percentages and are divided by 100 first. The edge is
never clamped; a negative edge means the market is more confident than the
model.
"""
from __future__ import annotations

from typing import Optional

from ..core.types import Edge


def normalize_market_price(value: float) -> float:
    return value / 100.0 if value > 1 else value


def compute_edge(
    model_up: float,
    model_down: float,
    market_yes: Optional[float],
    market_no: Optional[float],
) -> Edge:
    if market_yes is None or market_no is None:
        return Edge(edge_up=None, edge_down=None, market_up=None, market_down=None)

    market_up = normalize_market_price(market_yes)
    market_down = normalize_market_price(market_no)
    return Edge(
        edge_up=model_up - market_up,
        edge_down=model_down - market_down,
        market_up=market_up,
        market_down=market_down,
    )
