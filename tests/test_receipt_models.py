"""
Tests for the receipt record and parse outcome models
"""

import datetime as dt

import pytest
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from receipt_models import (
    ClassifiedLineRegion,
    Failure,
    ParseOutcome,
    PartialSuccess,
    ReceiptLineItem,
    ReceiptRecord,
    RegionType,
    Success,
    outcome_record,
)


@pytest.fixture
def record():
    return ReceiptRecord(
        store_name="FRESH MART",
        date=dt.date(2024, 3, 14),
        items=(ReceiptLineItem(name="Milk", price=3.99),),
        total=3.99,
        raw_text="FRESH MART\nMilk 3.99\nTOTAL 3.99",
    )


def test_empty_record_is_not_valid():
    """Test the minimum bar for downstream use"""
    record = ReceiptRecord()
    assert record.is_valid is False
    assert record.items == ()
    assert record.taxes == {}
    assert record.tax is None


@pytest.mark.parametrize("fields", [
    {'store_name': "FRESH MART"},
    {'total': 7.01},
    {'items': (ReceiptLineItem(name="Milk", price=3.99),)},
])
def test_any_key_field_makes_record_valid(fields):
    assert ReceiptRecord(**fields).is_valid is True


def test_record_is_frozen(record):
    """Test that a built record cannot be mutated"""
    with pytest.raises(ValidationError):
        record.total = 100.0


def test_record_taxes_are_read_only():
    """Test that the tax mapping cannot be changed after the record is built"""
    source = {"Tax": 1.0}
    record = ReceiptRecord(taxes=source)

    with pytest.raises(TypeError):
        record.taxes["VAT"] = 5.0
    with pytest.raises(TypeError):
        ReceiptRecord().taxes["VAT"] = 5.0

    source["VAT"] = 5.0
    assert record.taxes == {"Tax": 1.0}


def test_record_taxes_serialize_as_dict():
    record = ReceiptRecord(taxes={"Sales Tax": 0.52})

    assert record.model_dump()['taxes'] == {"Sales Tax": 0.52}
    assert '"taxes":{"Sales Tax":0.52}' in record.model_dump_json()
    assert ReceiptRecord.model_validate_json(record.model_dump_json()) == record


def test_record_confidence(record):
    """Test the confidence property delegates to the scorer"""
    # store 0.15 + date 0.10 + total 0.35 + 1 item 0.15
    assert record.confidence == pytest.approx(0.75)


def test_line_item_validation():
    """Test item constraints"""
    with pytest.raises(ValidationError):
        ReceiptLineItem(name="", price=1.0)
    with pytest.raises(ValidationError):
        ReceiptLineItem(name="Milk", quantity=0, price=1.0)

    item = ReceiptLineItem(name="Milk", price=3.99)
    assert item.taxable is True
    assert item.quantity is None


def test_region_confidence_bounds():
    with pytest.raises(ValidationError):
        ClassifiedLineRegion(region_type=RegionType.ITEMS, confidence=1.5)

    region = ClassifiedLineRegion(region_type="totals")
    assert region.region_type is RegionType.TOTALS


def test_partial_success_needs_warnings(record):
    """Test that a PartialSuccess always carries at least one warning"""
    with pytest.raises(ValidationError):
        PartialSuccess(record=record, warnings=())

    partial = PartialSuccess(record=record, warnings=("Could not parse date",))
    assert partial.status == "partial_success"


def test_outcome_discriminator():
    """Test that serialized outcomes validate back to the right case"""
    adapter = TypeAdapter(ParseOutcome)

    failure = adapter.validate_python({'status': 'failure', 'reason': 'Empty text provided'})
    assert isinstance(failure, Failure)
    assert failure.reason == 'Empty text provided'

    success = adapter.validate_python({'status': 'success', 'record': {'total': 7.01}})
    assert isinstance(success, Success)
    assert success.record.total == 7.01

    with pytest.raises(ValidationError):
        adapter.validate_python({'status': 'maybe'})


def test_outcome_record(record):
    assert outcome_record(Success(record=record)) == record
    assert outcome_record(PartialSuccess(record=record, warnings=("x",))) == record
    assert outcome_record(Failure(reason="Empty text provided")) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
