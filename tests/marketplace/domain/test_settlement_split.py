"""Tests for splitting an order total between platform fee and seller earnings."""

from decimal import Decimal

import pytest
from marketplace.config import MARKETPLACE_FEE_RATE, fee_rate_percent
from marketplace.settlement.settlement import split_total


class TestSplitTotal:
    def test_default_rate_is_eight_percent(self):
        assert MARKETPLACE_FEE_RATE == Decimal("0.08")
        assert fee_rate_percent() == 8.0

    def test_end_to_end_amounts(self):
        split = split_total(25.0)
        assert split.marketplace_fee == Decimal("2.00")
        assert split.seller_earnings == Decimal("23.00")

    def test_fee_is_rounded_to_the_cent(self):
        split = split_total(10.01)
        assert split.marketplace_fee == Decimal("0.80")
        assert split.seller_earnings == Decimal("9.21")

    def test_fee_rounds_half_up(self):
        split = split_total(Decimal("10.00"), fee_rate=Decimal("0.0125"))
        assert split.marketplace_fee == Decimal("0.13")
        assert split.seller_earnings == Decimal("9.87")

    @pytest.mark.parametrize("total", ["0.01", "0.99", "5.55", "19.99", "25.00", "133.33", "999.99", "1234.57"])
    def test_fee_plus_earnings_is_the_total(self, total):
        split = split_total(Decimal(total))
        assert split.marketplace_fee + split.seller_earnings == Decimal(total)
        assert split.seller_earnings >= 0

    def test_float_totals_are_taken_at_cent_precision(self):
        split = split_total(0.1 + 0.2)
        assert split.total_amount == Decimal("0.30")
