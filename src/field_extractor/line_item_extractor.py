"""
Line Item Extractor
===================
Item extraction for inline receipts, where each purchased item sits on one
line with its price last:

    Milk 3.99
    2 x Yogurt 5.98
    Bananas 2.5 lb @ 0.59 1.48

Lines are accepted permissively (is_likely_item_line) and then filtered:
no price, a totals/tax keyword, or a name shorter than two characters all
drop the line.
"""

from typing import List, Optional, Sequence, Tuple

from loguru import logger

from field_extractor.base_extractor import BaseExtractor
from parsing_rules import (
    QUANTITY_PATTERN,
    SUBTOTAL_KEYWORDS,
    TAX_KEYWORDS,
    TOTAL_KEYWORDS,
    UNIT_LABELS,
    UNIT_PRICE_PATTERN,
    contains_keyword,
    extract_all_prices,
    extract_item_name,
    is_likely_item_line,
    parse_price,
)
from receipt_models import ReceiptLineItem


class LineItemExtractor(BaseExtractor):
    """One item per qualifying line, in line order."""

    def items(self, lines: Sequence[str]) -> List[ReceiptLineItem]:
        items: List[ReceiptLineItem] = []

        for line in lines:
            if not is_likely_item_line(line):
                continue

            prices = extract_all_prices(line)
            if not prices:
                continue

            if (contains_keyword(line, TOTAL_KEYWORDS)
                    or contains_keyword(line, TAX_KEYWORDS)
                    or contains_keyword(line, SUBTOTAL_KEYWORDS)):
                continue

            price = prices[-1]
            name = extract_item_name(line)
            if name is None or len(name) < 2:
                continue

            quantity, unit = self._quantity(name)
            items.append(ReceiptLineItem(
                name=name,
                quantity=quantity,
                unit=unit,
                unit_price=self._unit_price(name),
                price=price,
            ))

        logger.debug(f"[LineItemExtractor] {len(items)} items found")
        return items

    @staticmethod
    def _quantity(name: str) -> Tuple[Optional[float], Optional[str]]:
        """'2 x', '1.5 lb', '3 @' → (quantity, unit label or None)"""
        m = QUANTITY_PATTERN.search(name)
        if not m:
            return None, None
        try:
            quantity = float(m.group(1))
        except ValueError:
            return None, None
        if quantity <= 0:
            return None, None
        token = m.group(2).lower()
        return quantity, (token if token in UNIT_LABELS else None)

    @staticmethod
    def _unit_price(name: str) -> Optional[float]:
        m = UNIT_PRICE_PATTERN.search(name)
        if not m:
            return None
        return parse_price(m.group(1))
