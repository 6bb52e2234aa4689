"""Tests for the updown-bot command line."""
import json

import pytest

from updown_bot.cli import main
from updown_bot.core.config import DEFAULT_CONFIG


def write_snapshot(tmp_path, payload):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def run(capsys, argv):
    main(argv)
    return json.loads(capsys.readouterr().out)


def test_evaluate_features_snapshot(tmp_path, capsys):
    snap = write_snapshot(tmp_path, {
        "features": {
            "price": 100, "vwap": 95, "vwap_slope": 0.5, "vwap_cross_count": 1,
            "volume_recent": 100, "volume_avg": 100, "rsi": 60, "rsi_slope": 1.0,
            "macd": 1.0, "heiken_color": "green", "heiken_count": 3,
        },
        "quote": {"market_yes": 50, "market_no": 50},
        "remaining_minutes": 12,
    })
    out = run(capsys, ["evaluate", "--snapshot", snap])
    assert out["regime"]["regime"] == "TREND_UP"
    assert out["decision"]["action"] == "ENTER"
    assert out["decision"]["side"] == "UP"
    assert out["edge"]["market_up"] == pytest.approx(0.5)
    assert out["config_hash"] == DEFAULT_CONFIG.config_hash


def test_evaluate_accepts_camel_case(tmp_path, capsys):
    snap = write_snapshot(tmp_path, {
        "features": {"price": 90, "vwap": 95, "vwapSlope": -0.5, "failedVwapReclaim": True},
        "quote": {"marketYes": 0.3, "marketNo": 0.7},
        "remainingMinutes": 3,
    })
    out = run(capsys, ["evaluate", "--snapshot", snap])
    assert out["features"]["failed_vwap_reclaim"] is True
    assert out["score"]["down_score"] == pytest.approx(6.0)
    assert out["decision"]["phase"] == "LATE"


def test_evaluate_without_quote_is_no_trade(tmp_path, capsys):
    snap = write_snapshot(tmp_path, {"features": {}, "remaining_minutes": 12})
    out = run(capsys, ["evaluate", "--snapshot", snap])
    assert out["decision"]["action"] == "NO_TRADE"
    assert out["decision"]["reason"] == "missing_market_data"
    assert out["regime"]["regime"] == "CHOP"


def test_evaluate_candles_and_books(tmp_path, capsys):
    candles = [
        {"open": 100 + i - 0.25, "high": 101 + i, "low": 99 + i, "close": 100 + i, "volume": 10}
        for i in range(150)
    ]
    snap = write_snapshot(tmp_path, {
        "candles": candles,
        "up_book": {"bids": [{"price": "0.49", "size": "10"}], "asks": [{"price": "0.51", "size": "10"}]},
        "down_book": {"bids": [{"price": "0.49", "size": "10"}], "asks": [{"price": "0.51", "size": "10"}]},
        "now": "2025-01-15T10:03:00Z",
    })
    out = run(capsys, ["evaluate", "--snapshot", snap])
    assert out["remaining_minutes"] == pytest.approx(12.0)
    assert out["edge"]["market_up"] == pytest.approx(0.5)
    assert out["decision"]["phase"] == "EARLY"


def test_invalid_snapshot_exits(tmp_path, capsys):
    snap = write_snapshot(tmp_path, {"features": {"rsi": 250}, "remaining_minutes": 12})
    with pytest.raises(SystemExit) as exc:
        main(["evaluate", "--snapshot", snap])
    assert exc.value.code == 2
    assert "invalid snapshot" in capsys.readouterr().err


def test_snapshot_without_market_view_exits(tmp_path):
    snap = write_snapshot(tmp_path, {"quote": {"market_yes": 0.5, "market_no": 0.5}})
    with pytest.raises(SystemExit) as exc:
        main(["evaluate", "--snapshot", snap])
    assert exc.value.code == 2


def test_missing_snapshot_file_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["evaluate", "--snapshot", str(tmp_path / "nope.json")])
    assert exc.value.code == 1


def test_show_config(capsys):
    out = run(capsys, ["show-config"])
    assert out["config_hash"] == DEFAULT_CONFIG.config_hash
    assert out["config"]["policy"]["min_model_prob"] == 0.55


def test_timing(capsys):
    out = run(capsys, ["timing", "--window", "15"])
    assert out["elapsed_ms"] + out["remaining_ms"] == 15 * 60_000


def test_evaluate_fractional_window_from_contract(tmp_path, capsys):
    contracts = tmp_path / "contracts"
    contracts.mkdir()
    (contracts / "pipeline.yaml").write_text("window:\n  minutes: 0.5\n", encoding="utf-8")
    snap = write_snapshot(tmp_path, {
        "features": {},
        "quote": {"market_yes": 50, "market_no": 50},
        "now": "2025-01-15T10:00:10Z",
    })
    out = run(capsys, ["evaluate", "--snapshot", snap, "--contracts", str(contracts)])
    assert out["remaining_minutes"] == pytest.approx(20 / 60)
    assert out["adjusted"]["time_ratio"] == pytest.approx((20 / 60) / 0.5)
