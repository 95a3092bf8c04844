"""
Confidence Scorer
=================
Additive trust score over an assembled receipt record.

The score is a heuristic in [0, 1], not a probability: the caller uses it to
decide whether to accept the record or ask for a re-scan / manual fix.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from receipt_models import ReceiptRecord


# Weight of each extracted field
WEIGHTS = {
    'store_name':     0.15,
    'date':           0.10,
    'total':          0.35,   # most important
    'items_many':     0.25,   # 3+ items
    'items_some':     0.15,   # 1-2 items
    'tax':            0.10,
    'reconciliation': 0.05,   # subtotal + tax ≈ total
}

MIN_STORE_NAME_LENGTH = 3
MANY_ITEMS = 3
RECONCILIATION_TOLERANCE = 0.50

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5


def score(record: "ReceiptRecord") -> float:
    """Produce a 0–1 confidence score based on what was extracted."""
    total_score = 0.0

    if record.store_name is not None and len(record.store_name) >= MIN_STORE_NAME_LENGTH:
        total_score += WEIGHTS['store_name']

    if record.date is not None:
        total_score += WEIGHTS['date']

    if record.total is not None and record.total > 0:
        total_score += WEIGHTS['total']

    if len(record.items) >= MANY_ITEMS:
        total_score += WEIGHTS['items_many']
    elif len(record.items) >= 1:
        total_score += WEIGHTS['items_some']

    if record.tax is not None and record.tax > 0:
        total_score += WEIGHTS['tax']

    if record.subtotal is not None and record.tax is not None and record.total is not None:
        if abs(record.subtotal + record.tax - record.total) < RECONCILIATION_TOLERANCE:
            total_score += WEIGHTS['reconciliation']

    return round(min(1.0, max(0.0, total_score)), 2)


def confidence_level(value: float) -> str:
    """'high' | 'medium' | 'low'"""
    if value >= HIGH_CONFIDENCE:
        return 'high'
    if value >= MEDIUM_CONFIDENCE:
        return 'medium'
    return 'low'
