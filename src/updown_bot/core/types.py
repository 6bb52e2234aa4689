from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
import json
import hashlib


def stable_json(obj: Any) -> str:
    # Deterministic JSON serialization
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _freeze(record: Any, *names: str) -> None:
    # Read-only views; records never change after construction
    for name in names:
        object.__setattr__(record, name, MappingProxyType(dict(getattr(record, name))))


class RegimeLabel(str, Enum):
    TREND_UP = "TREND_UP"
    TREND_DOWN = "TREND_DOWN"
    RANGE = "RANGE"
    CHOP = "CHOP"


class Action(str, Enum):
    ENTER = "ENTER"
    NO_TRADE = "NO_TRADE"


class Side(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class Phase(str, Enum):
    EARLY = "EARLY"
    MID = "MID"
    LATE = "LATE"


class Strength(str, Enum):
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"


@dataclass(frozen=True)
class MarketFeatureSet:
    """
    Indicator readings for one evaluation tick.

    Every field may be None; missing readings lower confidence instead of
    raising.
    """
    price: Optional[float] = None
    vwap: Optional[float] = None
    vwap_slope: Optional[float] = None
    vwap_cross_count: Optional[int] = None
    volume_recent: Optional[float] = None
    volume_avg: Optional[float] = None
    rsi: Optional[float] = None
    rsi_slope: Optional[float] = None
    macd: Optional[float] = None  # histogram value
    heiken_color: Optional[str] = None  # "green" | "red" | None
    heiken_count: int = 0
    failed_vwap_reclaim: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RegimeResult:
    regime: RegimeLabel
    reason: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze(self, "metadata")

    def to_payload(self) -> Dict[str, Any]:
        return {"regime": self.regime.value, "reason": self.reason, "metadata": dict(self.metadata)}


@dataclass(frozen=True)
class ProbabilityScore:
    """Additive up/down accumulators and their normalized ratio."""
    up_score: float
    down_score: float
    raw_up: float
    raw_down: float
    up_signals: Mapping[str, float] = field(default_factory=dict)
    down_signals: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze(self, "up_signals", "down_signals")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "up_score": self.up_score,
            "down_score": self.down_score,
            "raw_up": self.raw_up,
            "raw_down": self.raw_down,
            "up_signals": dict(self.up_signals),
            "down_signals": dict(self.down_signals),
        }


@dataclass(frozen=True)
class TimeAdjustedProbability:
    adjusted_up: float
    adjusted_down: float
    time_ratio: float


@dataclass(frozen=True)
class MarketQuote:
    """Raw venue prices; probabilities in [0, 1] or percentages in (1, 100]."""
    market_yes: Optional[float] = None
    market_no: Optional[float] = None


@dataclass(frozen=True)
class Edge:
    edge_up: Optional[float]
    edge_down: Optional[float]
    market_up: Optional[float]
    market_down: Optional[float]

    @property
    def available(self) -> bool:
        return self.edge_up is not None and self.edge_down is not None


@dataclass(frozen=True)
class Decision:
    """
    Output of the decision policy.

    phase is None only when market data was missing; side and strength are
    set only on ENTER; reason is set only on NO_TRADE.
    """
    action: Action
    side: Optional[Side] = None
    phase: Optional[Phase] = None
    strength: Optional[Strength] = None
    reason: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze(self, "metadata")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "side": self.side.value if self.side else None,
            "phase": self.phase.value if self.phase else None,
            "strength": self.strength.value if self.strength else None,
            "reason": self.reason,
            "metadata": dict(self.metadata),
        }
