from __future__ import annotations
import argparse
import json
import sys
import logging
from dataclasses import asdict
from pathlib import Path

from pydantic import ValidationError

from updown_bot.core.config import load_pipeline_config
from updown_bot.core.snapshot import SnapshotInput
from updown_bot.core.timing import get_candle_window_timing
from updown_bot.core.types import MarketQuote
from updown_bot.engines.market_data import quote_from_books
from updown_bot.pipeline.evaluator import evaluate
from updown_bot.engines.features import build_feature_set


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def main(argv=None):
    p = argparse.ArgumentParser("updown-bot")
    p.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # evaluate one snapshot
    s_eval = sub.add_parser("evaluate", help="Run the pipeline on a JSON snapshot")
    s_eval.add_argument("--snapshot", required=True, help="Path to JSON snapshot {features|candles, quote|up_book+down_book, remaining_minutes|now}")
    s_eval.add_argument("--contracts", default=None, help="Directory holding pipeline.yaml")

    # show normalized configuration
    s_cfg = sub.add_parser("show-config", help="Print the normalized pipeline configuration")
    s_cfg.add_argument("--contracts", default=None)

    # current window timing
    s_timing = sub.add_parser("timing", help="Print the current market window timing")
    s_timing.add_argument("--window", type=float, default=15, help="Window length in minutes")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    if args.cmd == "evaluate":
        cfg = load_pipeline_config(args.contracts)
        snapshot_path = Path(args.snapshot)
        if not snapshot_path.exists():
            print(f"Error: snapshot not found: {snapshot_path}", file=sys.stderr)
            sys.exit(1)
        with snapshot_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        try:
            snap = SnapshotInput.model_validate(raw)
        except ValidationError as e:
            print(f"Error: invalid snapshot:\n{e}", file=sys.stderr)
            sys.exit(2)

        if snap.features is not None:
            features = snap.features.to_features()
        else:
            features = build_feature_set([c.model_dump() for c in snap.candles], cfg.features, price=snap.price)

        if snap.quote is not None:
            quote = snap.quote.to_quote()
        elif snap.up_book is not None or snap.down_book is not None:
            quote = quote_from_books(snap.up_book, snap.down_book)
        else:
            quote = MarketQuote()

        if snap.remaining_minutes is not None:
            remaining = snap.remaining_minutes
        else:
            remaining = get_candle_window_timing(cfg.window_minutes, snap.now).remaining_minutes

        result = evaluate(features, quote, remaining, cfg)
        _print_json(result.to_payload())
        return

    if args.cmd == "show-config":
        cfg = load_pipeline_config(args.contracts)
        _print_json({"config": cfg.to_payload(), "config_hash": cfg.config_hash})
        return

    if args.cmd == "timing":
        _print_json(asdict(get_candle_window_timing(args.window)))
        return


if __name__ == "__main__":
    main()
