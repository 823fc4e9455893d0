"""Tests for exact coin <-> satoshi conversion."""

from decimal import Decimal

import pytest

from walletcore.domain.amounts import coin_to_sat, parse_sat, sat_to_coin_string


class TestCoinToSat:
    def test_decimal_string(self):
        assert coin_to_sat("1.50000000") == 150000000

    def test_short_fraction_is_padded(self):
        assert coin_to_sat("0.1") == 10000000

    def test_long_fraction_is_truncated(self):
        assert coin_to_sat("0.123456789") == 12345678

    def test_integer(self):
        assert coin_to_sat(21) == 2100000000

    def test_float_without_binary_drift(self):
        # 0.1 + 0.2 is 0.30000000000000004 as a float
        assert coin_to_sat(0.1 + 0.2) == 30000000
        assert coin_to_sat(5.00105) == 500105000

    def test_decimal(self):
        assert coin_to_sat(Decimal("0.00000001")) == 1

    def test_none_and_empty(self):
        assert coin_to_sat(None) == 0
        assert coin_to_sat("") == 0
        assert coin_to_sat("  ") == 0

    def test_negative(self):
        assert coin_to_sat("-0.5") == -50000000

    def test_leading_dot(self):
        assert coin_to_sat(".5") == 50000000

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            coin_to_sat("1.2.3")
        with pytest.raises(ValueError):
            coin_to_sat("abc")
        with pytest.raises(ValueError):
            coin_to_sat(".")


class TestSatToCoinString:
    def test_trims_trailing_zeros(self):
        assert sat_to_coin_string(150000000) == "1.5"

    def test_whole_coins(self):
        assert sat_to_coin_string(200000000) == "2"

    def test_zero(self):
        assert sat_to_coin_string(0) == "0"

    def test_one_sat(self):
        assert sat_to_coin_string(1) == "0.00000001"

    def test_negative(self):
        assert sat_to_coin_string(-150000000) == "-1.5"

    def test_round_trip(self):
        assert sat_to_coin_string(coin_to_sat("1.50000000")) == "1.5"


class TestParseSat:
    def test_string(self):
        assert parse_sat("1000", "amount_sat") == 1000

    def test_int(self):
        assert parse_sat(42, "fee_sat") == 42

    def test_missing(self):
        with pytest.raises(ValueError, match="amount_sat is required"):
            parse_sat(None, "amount_sat")
        with pytest.raises(ValueError, match="amount_sat is required"):
            parse_sat("  ", "amount_sat")

    def test_non_integer(self):
        with pytest.raises(ValueError, match="must be integer sat"):
            parse_sat("1.5", "amount_sat")
        with pytest.raises(ValueError, match="must be integer sat"):
            parse_sat("-5", "fee_sat")
