"""
Field extractor package — turns cleaned, partitioned receipt lines into
typed receipt fields.

All shared fields (store name, address, phone, date, time, totals, taxes,
payment, transaction id, cashier) live in BaseExtractor. Item extraction is
layout specific and lives in the subclasses.

Usage
-----
from field_extractor import LineItemExtractor
extractor = LineItemExtractor(config)
fields    = extractor.extract(lines, parts, clean_text)
"""

from field_extractor.base_extractor import BaseExtractor
from field_extractor.line_item_extractor import LineItemExtractor

__all__ = ["BaseExtractor", "LineItemExtractor"]
