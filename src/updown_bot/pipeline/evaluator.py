"""
Stateless pipeline evaluation.

  features -> Regime (informational)
  features -> Direction -> TimeDecay -> Edge(quote) -> Decision

Each call builds fresh value objects; nothing is retained between calls.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional, Sequence

from updown_bot.core.config import DEFAULT_CONFIG, PipelineConfig
from updown_bot.core.timing import WindowTiming
from updown_bot.core.types import (
    Decision,
    Edge,
    MarketFeatureSet,
    MarketQuote,
    ProbabilityScore,
    RegimeResult,
    TimeAdjustedProbability,
)
from updown_bot.engines.decision import decide
from updown_bot.engines.edge import compute_edge
from updown_bot.engines.features import build_feature_set
from updown_bot.engines.probability import apply_time_awareness, score_direction
from updown_bot.engines.regime import detect_regime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    features: MarketFeatureSet
    regime: RegimeResult
    score: ProbabilityScore
    adjusted: TimeAdjustedProbability
    edge: Edge
    decision: Decision
    remaining_minutes: float
    config_hash: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "features": self.features.to_payload(),
            "regime": self.regime.to_payload(),
            "score": self.score.to_payload(),
            "adjusted": asdict(self.adjusted),
            "edge": asdict(self.edge),
            "decision": self.decision.to_payload(),
            "remaining_minutes": self.remaining_minutes,
            "config_hash": self.config_hash,
        }


def evaluate(
    features: MarketFeatureSet,
    quote: MarketQuote,
    remaining_minutes: float,
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    cfg = config or DEFAULT_CONFIG

    regime = detect_regime(features, cfg.regime)
    score = score_direction(features, cfg.scoring)
    adjusted = apply_time_awareness(score.raw_up, remaining_minutes, cfg.window_minutes)
    edge = compute_edge(
        model_up=adjusted.adjusted_up,
        model_down=adjusted.adjusted_down,
        market_yes=quote.market_yes,
        market_no=quote.market_no,
    )
    decision = decide(
        remaining_minutes=remaining_minutes,
        edge_up=edge.edge_up,
        edge_down=edge.edge_down,
        model_up=adjusted.adjusted_up,
        model_down=adjusted.adjusted_down,
        config=cfg.policy,
    )

    logger.debug(
        f"Pipeline: regime={regime.regime.value} raw_up={score.raw_up:.4f} "
        f"adj_up={adjusted.adjusted_up:.4f} decision={decision.action.value} reason={decision.reason}"
    )
    return PipelineResult(
        features=features,
        regime=regime,
        score=score,
        adjusted=adjusted,
        edge=edge,
        decision=decision,
        remaining_minutes=remaining_minutes,
        config_hash=cfg.config_hash,
    )


def evaluate_candles(
    candles: Sequence[Mapping[str, Any]],
    quote: MarketQuote,
    timing: WindowTiming,
    config: Optional[PipelineConfig] = None,
    price: Optional[float] = None,
) -> PipelineResult:
    cfg = config or DEFAULT_CONFIG
    features = build_feature_set(candles, cfg.features, price=price)
    return evaluate(features, quote, timing.remaining_minutes, cfg)
