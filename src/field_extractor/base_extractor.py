"""
Base Extractor
==============
Contains ALL shared field extraction logic:
  - store_name / address / phone
  - date / time
  - total / subtotal / taxes
  - payment_method / transaction_id / cashier

Subclasses override ONLY items() to handle their specific item layout.

Every extractor is fault tolerant: a field that cannot be found or parsed
comes back as None (or empty), never as an exception.
"""

import datetime as dt
from typing import Dict, List, Optional, Sequence

from loguru import logger

from line_partitioner import PartitionedLines
from parsing_rules import (
    ADDRESS_INDICATORS,
    CASHIER_PATTERNS,
    DATE_PATTERNS,
    DEFAULT_TAX_LABEL,
    PAYMENT_KEYWORDS,
    PHONE_PATTERNS,
    STORE_NAME_EXCLUSIONS,
    SUBTOTAL_KEYWORDS,
    TAX_KEYWORDS,
    TAX_TYPE_LABELS,
    TIME_PATTERNS,
    TOTAL_KEYWORDS,
    TRANSACTION_ID_PATTERNS,
    contains_keyword,
    extract_all_prices,
    first_keyword,
    has_digits_and_letters,
)
from receipt_models import ReceiptLineItem
from text_normalizer import extract_price_tokens, fuzzy_match


STORE_NAME_CANDIDATES = 5
ADDRESS_CANDIDATES = 10
MAX_ADDRESS_LINES = 2

# Tried in order after '.' and '-' are turned into '/'
_NUMERIC_DATE_LAYOUTS = (
    '%m/%d/%Y',
    '%d/%m/%Y',
    '%Y/%m/%d',
    '%m/%d/%y',
    '%d/%m/%y',
)


class BaseExtractor:
    """
    Abstract base class.  Subclasses implement items().

    Call extract(lines, parts, clean_text) → returns the field dict.
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}
        store_cfg = self.config.get('store_names', {}) or {}
        self.known_stores: List[str] = list(store_cfg.get('known') or [])
        self.fuzzy_threshold: float = store_cfg.get('fuzzy_threshold', 0.7)

    # ── Public entry point ────────────────────────────────────────────────────

    def extract(self, lines: List[str], parts: PartitionedLines, clean_text: str) -> Dict:
        """
        Extract every receipt field from cleaned lines.

        Parameters
        ----------
        lines : all cleaned lines
        parts : region views from the LinePartitioner (may all be empty)
        clean_text : normalized full text

        Returns
        -------
        Dict with keys: store_name, store_address, store_phone, date, time,
        items, total, subtotal, taxes, payment_method, transaction_id, cashier
        """
        header_lines = parts.header
        item_lines = parts.items or lines
        totals_lines = parts.totals or lines

        fields = {
            "store_name":     self.store_name(header_lines or lines[:STORE_NAME_CANDIDATES]),
            "store_address":  self.address(header_lines or lines[:ADDRESS_CANDIDATES]),
            "store_phone":    self.phone(clean_text),
            "date":           self.date(clean_text),
            "time":           self.time(clean_text),
            "items":          self.items(item_lines),       # ← subclass implements this
            "total":          self.total(totals_lines, clean_text),
            "subtotal":       self.subtotal(totals_lines),
            "taxes":          self.taxes(totals_lines),
            "payment_method": self.payment_method(clean_text),
            "transaction_id": self.transaction_id(clean_text),
            "cashier":        self.cashier(clean_text),
        }

        logger.debug(
            f"[{self.__class__.__name__}] store={fields['store_name']!r} "
            f"date={fields['date']!r} total={fields['total']!r} "
            f"items={len(fields['items'])} taxes={fields['taxes']!r}"
        )
        return fields

    # ── Header fields ─────────────────────────────────────────────────────────

    def store_name(self, lines: Sequence[str]) -> Optional[str]:
        """First mostly-alphabetic line that is not an address or a banner."""
        for line in lines[:STORE_NAME_CANDIDATES]:
            if contains_keyword(line, ADDRESS_INDICATORS):
                continue
            if contains_keyword(line, STORE_NAME_EXCLUSIONS):
                continue
            if len(line) < 3 or len(line) > 50:
                continue

            letter_ratio = sum(1 for ch in line if ch.isalpha()) / len(line)
            if letter_ratio > 0.5:
                return self._canonical_store_name(line.strip())
        return None

    def _canonical_store_name(self, name: str) -> str:
        for known in self.known_stores:
            if fuzzy_match(name, known, self.fuzzy_threshold):
                logger.debug(f"[{self.__class__.__name__}] store {name!r} matched {known!r}")
                return known
        return name

    def address(self, lines: Sequence[str]) -> Optional[str]:
        """Up to two address-looking lines, joined with ', '."""
        address_lines: List[str] = []
        for line in lines:
            is_address = contains_keyword(line, ADDRESS_INDICATORS) or has_digits_and_letters(line)
            if is_address and len(line) > 5:
                address_lines.append(line.strip())
                if len(address_lines) >= MAX_ADDRESS_LINES:
                    break
        return ', '.join(address_lines) if address_lines else None

    def phone(self, text: str) -> Optional[str]:
        for pat in PHONE_PATTERNS:
            m = pat.search(text)
            if m:
                return m.group(0)
        return None

    # ── Date & time ───────────────────────────────────────────────────────────

    def date(self, text: str) -> Optional[dt.date]:
        """
        First date pattern (library order) that matches decides.

        Numeric dates are tried against month-first, then day-first, then
        year-first layouts; a match that fits none of them yields None.
        """
        for idx, pat in enumerate(DATE_PATTERNS):
            m = pat.search(text)
            if not m:
                continue
            if idx == len(DATE_PATTERNS) - 1:
                return self._month_name_date(m.group(1), m.group(2), m.group(3))
            return self._numeric_date(m.group(0))
        return None

    def _numeric_date(self, value: str) -> Optional[dt.date]:
        normalized = value.replace('.', '/').replace('-', '/')
        for layout in _NUMERIC_DATE_LAYOUTS:
            try:
                return dt.datetime.strptime(normalized, layout).date()
            except ValueError:
                continue
        logger.debug(f"[{self.__class__.__name__}] unparsable date {value!r}")
        return None

    def _month_name_date(self, month: str, day: str, year: str) -> Optional[dt.date]:
        try:
            return dt.datetime.strptime(f"{month[:3].title()} {day} {year}", '%b %d %Y').date()
        except ValueError:
            logger.debug(f"[{self.__class__.__name__}] unparsable date {month} {day} {year}")
            return None

    def time(self, text: str) -> Optional[dt.time]:
        """
        H:MM[:SS][ AM/PM] only.

        Broader than a strict 24-hour HH:MM read: a seconds field and a
        12-hour AM/PM suffix are also accepted ("2:05 PM" → 14:05,
        "10:30:15" → 10:30:15). Without a suffix the hour is 24-hour.

        The bare 4-digit pattern is never consulted; it would also match
        years, store numbers and prices.
        """
        m = TIME_PATTERNS[0].search(text)
        if not m:
            return None

        hour, minute = int(m.group(1)), int(m.group(2))
        second = int(m.group(3)) if m.group(3) else 0
        meridiem = (m.group(4) or '').upper()
        if meridiem:
            if not 1 <= hour <= 12:
                return None
            hour = hour % 12 + (12 if meridiem == 'PM' else 0)

        try:
            return dt.time(hour, minute, second)
        except ValueError:
            logger.debug(f"[{self.__class__.__name__}] unparsable time {m.group(0)!r}")
            return None

    # ── Amounts ───────────────────────────────────────────────────────────────

    def total(self, lines: Sequence[str], text: str) -> Optional[float]:
        """Largest price on any total line, else the largest price anywhere."""
        prices: List[float] = []
        for line in lines:
            if contains_keyword(line, TOTAL_KEYWORDS):
                prices.extend(extract_all_prices(line))
        if prices:
            return max(prices)

        fallback = extract_price_tokens(text)
        return max(fallback) if fallback else None

    def subtotal(self, lines: Sequence[str]) -> Optional[float]:
        prices: List[float] = []
        for line in lines:
            if contains_keyword(line, SUBTOTAL_KEYWORDS):
                prices.extend(extract_all_prices(line))
        return max(prices) if prices else None

    def taxes(self, lines: Sequence[str]) -> Dict[str, float]:
        """
        Tax type → amount.

        The first price on a tax line is its amount. A later line with the
        same inferred type replaces an earlier one.
        """
        taxes: Dict[str, float] = {}
        for line in lines:
            if not contains_keyword(line, TAX_KEYWORDS):
                continue
            prices = extract_all_prices(line)
            if not prices:
                continue
            taxes[self._tax_label(line)] = prices[0]
        return taxes

    @staticmethod
    def _tax_label(line: str) -> str:
        lowered = line.lower()
        for keyword, label in TAX_TYPE_LABELS:
            if keyword in lowered:
                return label
        return DEFAULT_TAX_LABEL

    # ── Transaction metadata ──────────────────────────────────────────────────

    def payment_method(self, text: str) -> Optional[str]:
        keyword = first_keyword(text, PAYMENT_KEYWORDS)
        if keyword is None:
            return None
        return keyword[0].upper() + keyword[1:]

    def transaction_id(self, text: str) -> Optional[str]:
        for pat in TRANSACTION_ID_PATTERNS:
            m = pat.search(text)
            if m:
                return m.group(1)
        return None

    def cashier(self, text: str) -> Optional[str]:
        for pat in CASHIER_PATTERNS:
            m = pat.search(text)
            if m:
                return m.group(1).strip()
        return None

    # ── Must be overridden ────────────────────────────────────────────────────

    def items(self, lines: Sequence[str]) -> List[ReceiptLineItem]:
        """Subclasses implement layout-specific item extraction."""
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement items()"
        )
