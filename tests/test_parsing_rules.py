"""
Tests for the parsing rules library
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from parsing_rules import (
    DATE_PATTERNS,
    PAYMENT_KEYWORDS,
    PRICE_PATTERNS,
    TIME_PATTERNS,
    TOTAL_KEYWORDS,
    contains_keyword,
    extract_all_prices,
    extract_item_name,
    extract_largest_price,
    extract_last_price,
    first_keyword,
    has_digits_and_letters,
    is_likely_item_line,
    parse_price,
)


def test_pattern_tables_are_ordered():
    """Test that every pattern family is present"""
    assert len(DATE_PATTERNS) == 4
    assert len(TIME_PATTERNS) == 2
    assert len(PRICE_PATTERNS) == 5


@pytest.mark.parametrize("line, expected", [
    ("$12.34", [12.34]),
    ("12,34 €", [12.34]),
    ("(12.34)", [12.34]),
    ("1,234.56", [1234.56]),
    ("1.234,56", [1234.56]),
    ("Milk 3.99", [3.99]),
    ("Soda 4.00 Coupon 1.25", [4.0, 1.25]),
    ("Eggs 0.00", []),
    ("no price here", []),
])
def test_extract_all_prices(line, expected):
    """Test price extraction across currency and separator styles"""
    assert extract_all_prices(line) == expected


@pytest.mark.parametrize("token, expected", [
    ("1.234,56", 1234.56),
    ("1,234.56", 1234.56),
    ("12,34", 12.34),
    ("1,234", 1234.0),
    ("$ 5.00", 5.0),
    ("(7.50)", 7.5),
    ("€3.20", 3.2),
])
def test_parse_price_separators(token, expected):
    """Test decimal / thousands separator disambiguation"""
    assert parse_price(token) == pytest.approx(expected)


def test_parse_price_garbage():
    """Test that unparsable tokens give None"""
    assert parse_price("abc") is None
    assert parse_price("") is None


def test_last_and_largest_price():
    """Test last/largest helpers"""
    line = "Soda 4.00 Coupon 1.25"
    assert extract_last_price(line) == 1.25
    assert extract_largest_price(line) == 4.0
    assert extract_last_price("hello") is None
    assert extract_largest_price("hello") is None


@pytest.mark.parametrize("line, expected", [
    ("Milk 3.99", "Milk"),
    ("Coffee $4.50", "Coffee"),
    ("Tea 12,34 €", "Tea"),
    ("2 x Yogurt 5.98", "2 x Yogurt"),
    ("A 1.00", None),
    ("No price here", None),
])
def test_extract_item_name(line, expected):
    """Test the text before the last price becomes the name"""
    assert extract_item_name(line) == expected


@pytest.mark.parametrize("line, expected", [
    ("Milk 3.99", True),
    ("Bananas", True),
    ("12.50", True),
    ("TOTAL 7.01", False),
    ("SALES TAX 0.52", False),
    ("Subtotal", False),
    ("x", False),
    ("---", False),
])
def test_is_likely_item_line(line, expected):
    """Test the permissive item pre-filter"""
    assert is_likely_item_line(line) is expected


def test_keyword_helpers():
    """Test keyword lookups are case-insensitive and table ordered"""
    assert contains_keyword("Grand TOTAL", TOTAL_KEYWORDS) is True
    assert contains_keyword("Milk", TOTAL_KEYWORDS) is False
    assert first_keyword("Paid by VISA card", PAYMENT_KEYWORDS) == "card"
    assert first_keyword("nothing", PAYMENT_KEYWORDS) is None


def test_has_digits_and_letters():
    """Test the address heuristic needs a letter after a digit"""
    assert has_digits_and_letters("123 Main St") is True
    assert has_digits_and_letters("Milk 3.99") is False
    assert has_digits_and_letters("") is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
