"""Property-based tests for data models.

**Feature: coinwatch**
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from coinwatch.models import Alert, ChatId, PortfolioHolding


prices = st.floats(min_value=0.01, max_value=10_000_000.0, allow_nan=False, allow_infinity=False)


class TestChatId:
    """Chat ids are opaque values with normalized equality."""

    def test_int_and_str_compare_equal(self):
        assert ChatId(42) == ChatId("42")
        assert hash(ChatId(42)) == hash(ChatId("42"))

    def test_whitespace_is_stripped(self):
        assert ChatId("  123 ") == ChatId("123")
        assert str(ChatId(" 123 ")) == "123"

    def test_case_is_preserved(self):
        assert ChatId("Alice") != ChatId("alice")

    @pytest.mark.parametrize("value", ["", "   ", None, 1.5, True])
    def test_invalid_values_rejected(self, value):
        with pytest.raises(ValidationError):
            ChatId(value)

    @given(st.integers(min_value=-(10**15), max_value=10**15))
    @settings(max_examples=50)
    def test_integer_round_trip(self, value: int):
        """*For any* integer chat id, its string form compares equal."""
        assert ChatId(value) == ChatId(str(value))
        assert str(ChatId(value)) == str(value)


class TestAlertModel:
    """Alert construction and validation."""

    def test_defaults(self):
        alert = Alert(owner=7, symbol="btc", target_price=50000, condition="ABOVE")
        assert alert.symbol == "BTC"
        assert alert.condition == "above"
        assert alert.triggered is False
        assert alert.active is True
        assert alert.owner == ChatId("7")
        assert alert.id

    def test_ids_are_unique(self):
        ids = {Alert(owner=1, symbol="BTC", target_price=1, condition="above").id for _ in range(50)}
        assert len(ids) == 50

    @pytest.mark.parametrize("target", [0, -1, -0.5])
    def test_target_price_must_be_positive(self, target):
        with pytest.raises(ValidationError):
            Alert(owner=1, symbol="BTC", target_price=target, condition="above")

    def test_condition_must_be_above_or_below(self):
        with pytest.raises(ValidationError):
            Alert(owner=1, symbol="BTC", target_price=1, condition="crosses")

    def test_alert_is_immutable(self):
        alert = Alert(owner=1, symbol="BTC", target_price=1, condition="above")
        with pytest.raises(ValidationError):
            alert.target_price = 2

    def test_describe(self):
        alert = Alert(owner=1, symbol="eth", target_price=2000, condition="below")
        assert alert.describe() == "ETH below 2000"


class TestTriggerPredicate:
    """
    **Feature: coinwatch, Property 2: Inclusive Threshold Crossing**
    
    *For any* target T, an ``above`` alert fires iff price >= T and a
    ``below`` alert fires iff price <= T.
    """

    @given(target=prices, price=prices)
    @settings(max_examples=200)
    def test_above_is_inclusive(self, target: float, price: float):
        alert = Alert(owner=1, symbol="BTC", target_price=target, condition="above")
        assert alert.is_crossed(price) == (price >= target)

    @given(target=prices, price=prices)
    @settings(max_examples=200)
    def test_below_is_inclusive(self, target: float, price: float):
        alert = Alert(owner=1, symbol="BTC", target_price=target, condition="below")
        assert alert.is_crossed(price) == (price <= target)

    @given(target=prices)
    @settings(max_examples=50)
    def test_exact_target_crosses_both_directions(self, target: float):
        for condition in ("above", "below"):
            alert = Alert(owner=1, symbol="BTC", target_price=target, condition=condition)
            assert alert.is_crossed(target)


class TestPortfolioHolding:

    def test_symbol_uppercased(self):
        holding = PortfolioHolding(owner="me", symbol=" sol ", amount=3)
        assert holding.symbol == "SOL"

    @pytest.mark.parametrize("amount", [0, -1])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValidationError):
            PortfolioHolding(owner="me", symbol="SOL", amount=amount)


class TestNonFiniteNumbers:
    """Infinite and NaN amounts never reach the store."""

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_alert_target_must_be_finite(self, value):
        with pytest.raises(ValidationError):
            Alert(owner=1, symbol="BTC", target_price=value, condition="above")

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_holding_amount_must_be_finite(self, value):
        with pytest.raises(ValidationError):
            PortfolioHolding(owner=1, symbol="BTC", amount=value)
