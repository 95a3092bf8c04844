"""
Receipt Parsing Pipeline
Combines normalization, partitioning and field extraction into one call

    raw OCR text → TextNormalizer → clean lines → LinePartitioner
                 → LineItemExtractor → ReceiptRecord → ParseOutcome
"""

from typing import Dict, List, Optional, Sequence

from loguru import logger

from confidence_scorer import confidence_level
from field_extractor import LineItemExtractor
from line_partitioner import LinePartitioner
from receipt_models import (
    ClassifiedLineRegion,
    Failure,
    ParseOutcome,
    PartialSuccess,
    ReceiptRecord,
    Success,
)
from receipt_utils import load_config, setup_logging
from text_normalizer import TextNormalizer


EMPTY_TEXT = "Empty text provided"
NO_LINES = "No readable lines found"
INSUFFICIENT_DATA = "Insufficient data extracted"


class ReceiptParser:
    """
    End-to-end receipt text parser

    Workflow:
    1. Reject blank input
    2. Normalize OCR text and split it into lines
    3. Partition lines by region tags (when any are given)
    4. Extract every field
    5. Assemble the record, collect warnings, pick the outcome

    Instances only hold read-only configuration and can be shared.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize all parsing components

        Args:
            config: Configuration dict (default: config/parser_config.yaml
                    merged over the built-in defaults)
        """
        self.config = config if config is not None else load_config()

        self.normalizer = TextNormalizer(self.config)
        self.partitioner = LinePartitioner()
        self.extractor = LineItemExtractor(self.config)

    def parse(
        self,
        raw_text: str,
        regions: Sequence[ClassifiedLineRegion] = (),
    ) -> ParseOutcome:
        """
        Parse one receipt.

        Args:
            raw_text: OCR output, untouched
            regions:  Zone tags from the image-region classifier (optional)

        Returns:
            Success, PartialSuccess or Failure
        """
        # ── Step 1: Empty ─────────────────────────────────────────────────────
        if not raw_text or not raw_text.strip():
            logger.info(f"[ReceiptParser] rejected: {EMPTY_TEXT}")
            return Failure(reason=EMPTY_TEXT)

        # ── Step 2: Cleaned ───────────────────────────────────────────────────
        clean_text = self.normalizer.normalize(raw_text)
        lines = self.normalizer.split_lines(clean_text)
        if not lines:
            logger.info(f"[ReceiptParser] rejected: {NO_LINES}")
            return Failure(reason=NO_LINES)

        # ── Step 3: Partitioned ───────────────────────────────────────────────
        parts = self.partitioner.partition_all(lines, regions)

        # ── Step 4: Extracted ─────────────────────────────────────────────────
        fields = self.extractor.extract(lines, parts, clean_text)

        # ── Step 5: Assembled ─────────────────────────────────────────────────
        taxes = fields['taxes']
        record = ReceiptRecord(
            store_name=fields['store_name'],
            store_address=fields['store_address'],
            store_phone=fields['store_phone'],
            date=fields['date'],
            time=fields['time'],
            items=fields['items'],
            subtotal=fields['subtotal'],
            tax=sum(taxes.values(), 0.0),
            taxes=taxes,
            total=fields['total'],
            payment_method=fields['payment_method'],
            transaction_id=fields['transaction_id'],
            cashier=fields['cashier'],
            raw_text=raw_text,
        )
        warnings = self._warnings(record)

        confidence = record.confidence
        logger.info(
            f"[ReceiptParser] store={record.store_name!r} "
            f"date={record.date!r} total={record.total!r} "
            f"items={len(record.items)} warnings={len(warnings)} "
            f"confidence={confidence:.2f} ({confidence_level(confidence)})"
        )

        # ── Step 6: Outcome ───────────────────────────────────────────────────
        if not record.is_valid:
            return Failure(reason=INSUFFICIENT_DATA)
        if warnings:
            return PartialSuccess(record=record, warnings=tuple(warnings))
        return Success(record=record)

    @staticmethod
    def _warnings(record: ReceiptRecord) -> List[str]:
        """One advisory string per expected field that is missing"""
        warnings = []
        if record.store_name is None:
            warnings.append("Could not detect store name")
        if record.store_address is None:
            warnings.append("Could not detect store address")
        if record.date is None:
            warnings.append("Could not parse date")
        if record.total is None:
            warnings.append("Could not find total amount")
        if not record.items:
            warnings.append("No items detected")
        if not record.taxes:
            warnings.append("No tax information found")
        return warnings


_default_parser: Optional[ReceiptParser] = None


def parse_receipt(
    raw_text: str,
    regions: Sequence[ClassifiedLineRegion] = (),
) -> ParseOutcome:
    """Parse with a shared ReceiptParser built from the bundled config file."""
    global _default_parser
    if _default_parser is None:
        _default_parser = ReceiptParser()
    return _default_parser.parse(raw_text, regions)


def main():
    """Demo the parsing pipeline"""
    setup_logging(level="INFO")

    sample = (
        "FRESH MART\n"
        "123 Main St\n"
        "03/14/2024 14:35\n"
        "Milk 3.99\n"
        "Bread 2.50\n"
        "SUBTOTAL 6.49\n"
        "SALES TAX 0.52\n"
        "TOTAL 7.01\n"
        "CASH"
    )

    print("\n" + "=" * 60)
    print("Receipt Parsing Pipeline - Demo")
    print("=" * 60 + "\n")

    outcome = parse_receipt(sample)
    print(f"Outcome: {outcome.status}")
    if isinstance(outcome, Failure):
        print(f"Reason: {outcome.reason}")
        return

    print(outcome.record.model_dump_json(indent=2, exclude={'raw_text'}))
    if isinstance(outcome, PartialSuccess):
        print("\nWarnings:")
        for warning in outcome.warnings:
            print(f"  - {warning}")


if __name__ == "__main__":
    main()
