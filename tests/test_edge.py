"""Tests for edge computation against market quotes."""
import pytest

from updown_bot.engines.edge import compute_edge, normalize_market_price


def test_missing_market_data_returns_nulls():
    result = compute_edge(model_up=0.6, model_down=0.4, market_yes=None, market_no=None)
    assert result.edge_up is None
    assert result.edge_down is None
    assert result.market_up is None
    assert result.market_down is None
    assert not result.available


@pytest.mark.parametrize("yes,no", [(None, 0.5), (0.5, None)])
def test_one_missing_side_returns_nulls(yes, no):
    result = compute_edge(model_up=0.6, model_down=0.4, market_yes=yes, market_no=no)
    assert result.edge_up is None and result.edge_down is None
    assert result.market_up is None and result.market_down is None


def test_edge_is_model_minus_market():
    result = compute_edge(model_up=0.7, model_down=0.3, market_yes=0.5, market_no=0.5)
    assert result.edge_up == pytest.approx(0.2)
    assert result.edge_down == pytest.approx(-0.2)
    assert result.available


def test_percentage_prices_are_normalized():
    result = compute_edge(model_up=0.6, model_down=0.4, market_yes=60, market_no=40)
    assert result.market_up == pytest.approx(0.6)
    assert result.market_down == pytest.approx(0.4)
    assert result.edge_up == pytest.approx(0.0)


def test_mixed_price_formats():
    result = compute_edge(model_up=0.6, model_down=0.4, market_yes=55, market_no=0.45)
    assert result.market_up == pytest.approx(0.55)
    assert result.market_down == pytest.approx(0.45)


def test_negative_edge_is_not_clamped():
    result = compute_edge(model_up=0.2, model_down=0.8, market_yes=0.9, market_no=0.1)
    assert result.edge_up == pytest.approx(-0.7)
    assert result.edge_down == pytest.approx(0.7)


def test_exactly_one_is_a_probability():
    assert normalize_market_price(1) == 1
    assert normalize_market_price(1.5) == pytest.approx(0.015)
    assert normalize_market_price(100) == 1.0
