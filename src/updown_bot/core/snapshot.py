"""Input models for evaluation snapshots read by the CLI."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .types import MarketFeatureSet, MarketQuote


class _Input(BaseModel):
    # Accept both snake_case and the venue's camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class FeatureInput(_Input):
    """Precomputed indicator readings."""
    price: Optional[float] = None
    vwap: Optional[float] = None
    vwap_slope: Optional[float] = None
    vwap_cross_count: Optional[int] = Field(default=None, ge=0)
    volume_recent: Optional[float] = Field(default=None, ge=0)
    volume_avg: Optional[float] = Field(default=None, ge=0)
    rsi: Optional[float] = Field(default=None, ge=0, le=100)
    rsi_slope: Optional[float] = None
    macd: Optional[float] = None
    heiken_color: Optional[Literal["green", "red"]] = None
    heiken_count: int = Field(default=0, ge=0)
    failed_vwap_reclaim: bool = False

    def to_features(self) -> MarketFeatureSet:
        return MarketFeatureSet(**self.model_dump())


class CandleInput(_Input):
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(ge=0)


class QuoteInput(_Input):
    market_yes: Optional[float] = Field(default=None, ge=0, le=100)
    market_no: Optional[float] = Field(default=None, ge=0, le=100)

    def to_quote(self) -> MarketQuote:
        return MarketQuote(market_yes=self.market_yes, market_no=self.market_no)


class SnapshotInput(_Input):
    """One evaluation tick: features or candles, a quote or books, and timing."""
    features: Optional[FeatureInput] = None
    candles: Optional[List[CandleInput]] = None
    price: Optional[float] = None
    quote: Optional[QuoteInput] = None
    up_book: Optional[Dict[str, Any]] = None
    down_book: Optional[Dict[str, Any]] = None
    remaining_minutes: Optional[float] = None
    now: Optional[datetime] = None

    @model_validator(mode="after")
    def _require_market_view(self) -> "SnapshotInput":
        if self.features is None and not self.candles:
            raise ValueError("snapshot needs either 'features' or 'candles'")
        return self
