"""Machine-readable NO_TRADE reason codes."""


class NoTradeReason:
    MISSING_MARKET_DATA = "missing_market_data"
    EDGE_BELOW_THRESHOLD = "edge_below_threshold"
    PROB_BELOW_MIN = "prob_below_min"

    ALL = (MISSING_MARKET_DATA, EDGE_BELOW_THRESHOLD, PROB_BELOW_MIN)
