"""
Venue market selection and order book summaries.

Pure functions over already-fetched venue payloads (Gamma events/markets
and CLOB books). Prices and sizes arrive as strings or numbers.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from ..core.types import MarketQuote


@dataclass(frozen=True)
class OrderBookSummary:
    best_bid: Optional[float]
    best_ask: Optional[float]
    spread: Optional[float]
    bid_liquidity: float
    ask_liquidity: float

    @property
    def mid(self) -> Optional[float]:
        if self.best_bid is not None and self.best_ask is not None:
            return (self.best_bid + self.best_ask) / 2.0
        return self.best_ask if self.best_ask is not None else self.best_bid


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_time(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def flatten_event_markets(events: Any) -> List[Dict[str, Any]]:
    if not isinstance(events, list):
        return []
    markets: List[Dict[str, Any]] = []
    for event in events:
        event_markets = event.get("markets") if isinstance(event, Mapping) else None
        if isinstance(event_markets, list):
            markets.extend(event_markets)
    return markets


def filter_updown_markets(
    markets: List[Dict[str, Any]],
    slug_prefix: Optional[str] = None,
    series_slug: Optional[str] = None,
) -> List[Dict[str, Any]]:
    out = []
    for m in markets or []:
        if slug_prefix and str(m.get("slug", "")).startswith(slug_prefix):
            out.append(m)
        elif series_slug and m.get("seriesSlug") == series_slug:
            out.append(m)
    return out


def pick_latest_live_market(
    markets: Optional[List[Dict[str, Any]]],
    now: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """
    Live market (started, not ended) that ends soonest; otherwise the
    upcoming market that ends soonest. Markets without an end are ignored.
    """
    if not markets:
        return None
    now = now or datetime.now(timezone.utc)

    live = []
    upcoming = []
    for m in markets:
        end = _parse_time(m.get("endDate"))
        if end is None or end <= now:
            continue
        start = _parse_time(m.get("eventStartTime") or m.get("startTime"))
        if start is None or start <= now:
            live.append((end, m))
        else:
            upcoming.append((end, m))

    for bucket in (live, upcoming):
        if bucket:
            return min(bucket, key=lambda item: item[0])[1]
    return None


def summarize_order_book(book: Optional[Mapping[str, Any]], depth_levels: int = 5) -> OrderBookSummary:
    book = book or {}
    bids = [(p, s) for p, s in ((_to_float(l.get("price")), _to_float(l.get("size")))
                                for l in book.get("bids") or []) if p is not None]
    asks = [(p, s) for p, s in ((_to_float(l.get("price")), _to_float(l.get("size")))
                                for l in book.get("asks") or []) if p is not None]

    bids.sort(key=lambda level: level[0], reverse=True)
    asks.sort(key=lambda level: level[0])

    best_bid = bids[0][0] if bids else None
    best_ask = asks[0][0] if asks else None
    spread = best_ask - best_bid if best_bid is not None and best_ask is not None else None

    return OrderBookSummary(
        best_bid=best_bid,
        best_ask=best_ask,
        spread=spread,
        bid_liquidity=sum(s or 0.0 for _, s in bids[:depth_levels]),
        ask_liquidity=sum(s or 0.0 for _, s in asks[:depth_levels]),
    )


def quote_from_books(
    up_book: Optional[Mapping[str, Any]],
    down_book: Optional[Mapping[str, Any]],
    depth_levels: int = 5,
) -> MarketQuote:
    up = summarize_order_book(up_book, depth_levels) if up_book else None
    down = summarize_order_book(down_book, depth_levels) if down_book else None
    return MarketQuote(
        market_yes=up.mid if up else None,
        market_no=down.mid if down else None,
    )
