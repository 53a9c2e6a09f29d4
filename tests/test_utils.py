"""
Tests for unit conversion, timestamp formatting and address helpers.
"""

from __future__ import annotations

import pytest

from eth_fund_flow.errors import InvalidAmountError
from eth_fund_flow.utils import (
    addresses_match,
    format_number,
    format_timestamp,
    is_valid_ethereum_address,
    to_display_amount,
)


def test_one_ether():
    assert to_display_amount("1000000000000000000") == 1.0


def test_half_ether():
    assert to_display_amount("500000000000000000") == 0.5


def test_zero_and_small_values():
    assert to_display_amount("0") == 0.0
    assert to_display_amount("1") == 1e-18


def test_amount_beyond_64_bits():
    # 10**30 wei does not fit in an int64
    assert to_display_amount("1" + "0" * 30) == 1e12


def test_amount_beyond_uint256():
    assert to_display_amount(str(2 ** 256)) == pytest.approx(2 ** 256 / 10 ** 18)
    assert to_display_amount(str(2 ** 256 - 1)) == pytest.approx(2 ** 256 / 10 ** 18)


@pytest.mark.parametrize("value", ["", "abc", "-1", "1.5", "0x10", None])
def test_malformed_amount_raises(value):
    with pytest.raises(InvalidAmountError):
        to_display_amount(value)


def test_format_timestamp_utc():
    assert format_timestamp("1690000000") == "2023-07-22 04:26:40"
    assert format_timestamp("0") == "1970-01-01 00:00:00"


def test_format_timestamp_named_zone():
    assert format_timestamp("1690000000", "Asia/Tokyo") == "2023-07-22 13:26:40"


def test_format_timestamp_is_deterministic():
    assert format_timestamp("1690000000") == format_timestamp("1690000000")


@pytest.mark.parametrize("raw", ["not-a-number", "", "12.5", "99999999999999999999999",
                                 "1_690_000_000", " 1690000000", "1690000000\n", "\u0661\u0662"])
def test_format_timestamp_falls_back_to_raw(raw):
    assert format_timestamp(raw) == raw


def test_addresses_match_ignores_case():
    assert addresses_match("0xABCdef0123", "0xabcDEF0123")
    assert not addresses_match("0xabc", "0xabd")


def test_is_valid_ethereum_address():
    assert is_valid_ethereum_address("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")
    assert not is_valid_ethereum_address("0x123")
    assert not is_valid_ethereum_address("")


def test_format_number():
    assert format_number(0) == "0"
    assert format_number(1.5) == "1.5000"
    assert format_number(2500, decimals=1) == "2.5K"


def test_format_timestamp_accepts_sign():
    assert format_timestamp("+1690000000") == "2023-07-22 04:26:40"
    assert format_timestamp("-1") == "1969-12-31 23:59:59"
