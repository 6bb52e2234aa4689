"""
Decision Policy.

Turns per-side edge and model confidence into ENTER / NO_TRADE.

Evaluation order:
1. missing edge            -> NO_TRADE (missing_market_data), no phase
2. phase from remaining minutes (LATE <= 5 < MID <= 10 < EARLY)
3. candidate side = larger edge; ties go to UP
4. edge < phase threshold  -> NO_TRADE (edge_below_threshold), 1e-9 tolerance
5. model prob < floor      -> NO_TRADE (prob_below_min)
6. ENTER with strength from the edge magnitude

Thresholds rise as time runs out. Every call is independent.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.config import DEFAULT_CONFIG, PolicyConfig
from ..core.reason_codes import NoTradeReason
from ..core.types import Action, Decision, Phase, Side, Strength

logger = logging.getLogger(__name__)

# Edge and probability within this distance of a threshold count as meeting it
THRESHOLD_TOLERANCE = 1e-9


def phase_for(remaining_minutes: float, config: Optional[PolicyConfig] = None) -> Phase:
    cfg = config or DEFAULT_CONFIG.policy
    remaining = max(0.0, remaining_minutes)
    if remaining <= cfg.late_max_minutes:
        return Phase.LATE
    if remaining <= cfg.mid_max_minutes:
        return Phase.MID
    return Phase.EARLY


def strength_for(edge: float, config: Optional[PolicyConfig] = None) -> Strength:
    cfg = config or DEFAULT_CONFIG.policy
    magnitude = abs(edge)
    if magnitude >= cfg.strong_edge:
        return Strength.STRONG
    if magnitude >= cfg.moderate_edge:
        return Strength.MODERATE
    return Strength.WEAK


def decide(
    remaining_minutes: float,
    edge_up: Optional[float],
    edge_down: Optional[float],
    model_up: Optional[float] = None,
    model_down: Optional[float] = None,
    config: Optional[PolicyConfig] = None,
) -> Decision:
    cfg = config or DEFAULT_CONFIG.policy

    # 1. Hard precondition
    if edge_up is None or edge_down is None:
        logger.debug("NO_TRADE: missing market data")
        return Decision(action=Action.NO_TRADE, reason=NoTradeReason.MISSING_MARKET_DATA)

    # 2. Phase
    phase = phase_for(remaining_minutes, cfg)

    # 3. Candidate side
    if edge_up >= edge_down:
        side, edge, model_prob = Side.UP, edge_up, model_up
    else:
        side, edge, model_prob = Side.DOWN, edge_down, model_down

    threshold = cfg.edge_threshold(phase)
    metadata = {
        "candidate_side": side.value,
        "edge": edge,
        "threshold": threshold,
        "model_prob": model_prob,
        "min_model_prob": cfg.min_model_prob,
        "remaining_minutes": remaining_minutes,
    }

    # 4. Phase threshold
    if edge < threshold - THRESHOLD_TOLERANCE:
        logger.debug(f"NO_TRADE {phase.value}: {side.value} edge {edge:.4f} < {threshold:.2f}")
        return Decision(
            action=Action.NO_TRADE,
            phase=phase,
            reason=NoTradeReason.EDGE_BELOW_THRESHOLD,
            metadata=metadata,
        )

    # 5. Minimum model confidence
    if model_prob is None or model_prob < cfg.min_model_prob - THRESHOLD_TOLERANCE:
        logger.debug(f"NO_TRADE {phase.value}: {side.value} model prob {model_prob} < {cfg.min_model_prob}")
        return Decision(
            action=Action.NO_TRADE,
            phase=phase,
            reason=NoTradeReason.PROB_BELOW_MIN,
            metadata=metadata,
        )

    # 6. Enter
    strength = strength_for(edge, cfg)
    logger.debug(f"ENTER {side.value} {phase.value} {strength.value} (edge={edge:.4f})")
    return Decision(
        action=Action.ENTER,
        side=side,
        phase=phase,
        strength=strength,
        metadata=metadata,
    )
