"""
Tests for the Confidence Scorer
"""

import datetime as dt

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from confidence_scorer import WEIGHTS, confidence_level, score
from receipt_models import ReceiptLineItem, ReceiptRecord


def make_items(count):
    return tuple(ReceiptLineItem(name=f"Item {i}", price=1.0 + i) for i in range(count))


def test_empty_record_scores_zero():
    assert score(ReceiptRecord()) == 0.0


def test_complete_record_scores_one():
    """Test every component at once is clamped to 1.0"""
    record = ReceiptRecord(
        store_name="FRESH MART",
        date=dt.date(2024, 3, 14),
        items=make_items(3),
        subtotal=6.0,
        tax=0.5,
        taxes={"Tax": 0.5},
        total=6.5,
    )
    assert score(record) == 1.0


@pytest.mark.parametrize("fields, expected", [
    ({'store_name': "FRESH MART"}, WEIGHTS['store_name']),
    ({'store_name': "AB"}, 0.0),
    ({'date': dt.date(2024, 3, 14)}, WEIGHTS['date']),
    ({'total': 7.01}, WEIGHTS['total']),
    ({'total': 0.0}, 0.0),
    ({'items': make_items(2)}, WEIGHTS['items_some']),
    ({'items': make_items(5)}, WEIGHTS['items_many']),
    ({'tax': 0.52}, WEIGHTS['tax']),
])
def test_single_component_weights(fields, expected):
    """Test each field contributes its own weight"""
    assert score(ReceiptRecord(**fields)) == pytest.approx(expected)


def test_reconciliation_bonus():
    """Test subtotal + tax ≈ total adds the reconciliation weight"""
    matching = ReceiptRecord(subtotal=6.49, tax=0.52, total=7.01)
    off = ReceiptRecord(subtotal=6.49, tax=0.52, total=9.01)

    assert score(matching) == pytest.approx(0.35 + 0.10 + 0.05)
    assert score(off) == pytest.approx(0.35 + 0.10)


def test_zero_tax_still_reconciles():
    """Test an untaxed receipt: no tax weight, but subtotal == total reconciles"""
    untaxed = ReceiptRecord(subtotal=6.49, tax=0.0, total=6.49)
    unknown_tax = ReceiptRecord(subtotal=6.49, total=6.49)

    assert score(untaxed) == pytest.approx(0.35 + 0.05)
    assert score(unknown_tax) == pytest.approx(0.35)


@pytest.mark.parametrize("count", [0, 1, 2, 3, 10])
def test_score_is_bounded(count):
    record = ReceiptRecord(store_name="FRESH MART", total=5.0, items=make_items(count))
    assert 0.0 <= score(record) <= 1.0


def test_score_is_deterministic():
    record = ReceiptRecord(store_name="FRESH MART", total=5.0)
    assert score(record) == score(record)


@pytest.mark.parametrize("value, level", [
    (1.0, 'high'),
    (0.8, 'high'),
    (0.79, 'medium'),
    (0.5, 'medium'),
    (0.49, 'low'),
    (0.0, 'low'),
])
def test_confidence_level(value, level):
    assert confidence_level(value) == level


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
