"""
Parsing Rules
=============
Pattern library shared by the normalizer, the partitioner and every field
extractor.

Everything here is constant data compiled once at import time plus a few
pure helpers that only read it:

  - DATE_PATTERNS / TIME_PATTERNS
  - PRICE_PATTERNS             (symbol-prefixed, symbol-suffixed, bare,
                                grouped-thousands, parenthesized)
  - keyword tables             (store, address, total, subtotal, tax,
                                payment, store-name exclusions)
  - PHONE / TRANSACTION_ID / CASHIER patterns

Pattern order encodes precedence: when several patterns match the same
span, the earlier one wins.
"""

import re
from typing import List, Optional, Sequence, Tuple


# ─── Currency ────────────────────────────────────────────────────────────────

CURRENCY_SYMBOLS = '$€£¥₹'
CANONICAL_CURRENCY = '$'

_SYM = '[' + re.escape(CURRENCY_SYMBOLS) + ']'

# "1,234.56" / "1.234,56" / "1234.56" / "12,34"
_AMOUNT = r'(?:\d{1,3}(?:[.,]\d{3})+|\d+)[.,]\d{2}(?!\d)'


# ─── Date & time ─────────────────────────────────────────────────────────────

_MONTH_NAMES = r'(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*'

DATE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})\b'),      # 02/28/2026  28.02.2026
    re.compile(r'\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2})\b'),      # 02/28/26
    re.compile(r'\b(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})\b'),      # 2026-02-28
    re.compile(r'\b(' + _MONTH_NAMES + r')\.?\s+(\d{1,2}),?\s+(\d{4})\b', re.IGNORECASE),  # Feb 28, 2026
)

TIME_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'\b(\d{1,2}):(\d{2})(?::(\d{2}))?\s*(AM|PM)?\b', re.IGNORECASE),
    re.compile(r'\b(\d{4})\b'),     # 1435, not consulted by the time extractor
)


# ─── Prices ──────────────────────────────────────────────────────────────────

PRICE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(_SYM + r'\s*' + _AMOUNT),                            # $12.34
    re.compile(r'(?<![\d.,])' + _AMOUNT + r'\s*' + _SYM),           # 12,34 €
    re.compile(r'(?<![\d.,])\d+[.,]\d{2}(?![\d])'),                 # 12.34
    re.compile(r'(?<![\d.,])\d{1,3}(?:[.,]\d{3})+[.,]\d{2}(?!\d)'), # 1,234.56
    re.compile(r'\(\s*' + _SYM + r'?\s*' + _AMOUNT + r'\s*\)?'),    # (12.34)
)


# ─── Keywords ────────────────────────────────────────────────────────────────

STORE_NAME_INDICATORS: Tuple[str, ...] = (
    'store', 'market', 'shop', 'mart', 'supermarket',
    'grocery', 'pharmacy', 'restaurant', 'cafe', 'coffee',
)

ADDRESS_INDICATORS: Tuple[str, ...] = (
    'street', 'st', 'avenue', 'ave', 'road', 'rd', 'drive', 'dr',
    'blvd', 'boulevard', 'lane', 'ln', 'plaza', 'suite', 'unit',
)

TOTAL_KEYWORDS: Tuple[str, ...] = (
    'total', 'grand total', 'amount due', 'balance due',
    'amount', 'net total', 'final total', 'gtotal', 'g.total',
)

SUBTOTAL_KEYWORDS: Tuple[str, ...] = (
    'subtotal', 'sub-total', 'sub total', 'sub',
    'merchandise total', 'item total',
)

TAX_KEYWORDS: Tuple[str, ...] = (
    'tax', 'sales tax', 'gst', 'vat', 'hst',
    'state tax', 'local tax', 'sales', 'levy',
)

PAYMENT_KEYWORDS: Tuple[str, ...] = (
    'cash', 'credit', 'debit', 'card', 'visa', 'mastercard',
    'amex', 'discover', 'payment', 'paid', 'tender',
)

STORE_NAME_EXCLUSIONS: Tuple[str, ...] = (
    'receipt', 'invoice', 'bill', 'ticket', 'order',
    'thank you', 'thanks', 'welcome', 'goodbye',
)

# First keyword found on a tax line decides its label.
TAX_TYPE_LABELS: Tuple[Tuple[str, str], ...] = (
    ('sales', 'Sales Tax'),
    ('state', 'State Tax'),
    ('local', 'Local Tax'),
    ('gst',   'GST'),
    ('vat',   'VAT'),
    ('hst',   'HST'),
)
DEFAULT_TAX_LABEL = 'Tax'


# ─── Contact / transaction metadata ──────────────────────────────────────────

PHONE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'\(?\d{3}\)?[\s.\-]?\d{3}[\s.\-]?\d{4}'),                   # (555) 123-4567
    re.compile(r'\+?\d{1,3}[\s.\-]?\d{3}[\s.\-]?\d{3}[\s.\-]?\d{4}'),       # +1 555 123 4567
)

TRANSACTION_ID_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'(?:trans|transaction|trans#|ref|reference)[:\s#]*(\d+)', re.IGNORECASE),
    re.compile(r'(?:invoice|inv)[:\s#]*(\d+)', re.IGNORECASE),
)

CASHIER_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'(?:cashier|served by|server|clerk)[:\t ]+(.+?)(?:\n|$)', re.IGNORECASE),
    re.compile(r'(?:your cashier was|cashier:)[\t ]+(.+?)(?:\n|$)', re.IGNORECASE),
)

# "2 x", "1.5 lb", "3 @" inside an item name
QUANTITY_PATTERN = re.compile(r'(\d+\.?\d*)\s*(x|@|lb|kg|oz|ea)', re.IGNORECASE)
UNIT_LABELS = ('lb', 'kg', 'oz', 'ea')

UNIT_PRICE_PATTERN = re.compile(r'@\s*' + _SYM + r'?\s*(' + _AMOUNT + r')')

_HAS_DIGIT_AND_LETTER = re.compile(r'.*\d+.*[A-Za-z].*')


# ─── Helpers ─────────────────────────────────────────────────────────────────

def contains_keyword(line: str, keywords: Sequence[str]) -> bool:
    """Case-insensitive substring test against a keyword table."""
    lowered = line.lower()
    return any(keyword in lowered for keyword in keywords)


def first_keyword(text: str, keywords: Sequence[str]) -> Optional[str]:
    """First keyword of the table (in table order) found in text."""
    lowered = text.lower()
    for keyword in keywords:
        if keyword in lowered:
            return keyword
    return None


def has_digits_and_letters(line: str) -> bool:
    """True when a letter follows a digit somewhere in the line."""
    return _HAS_DIGIT_AND_LETTER.fullmatch(line) is not None


def is_likely_item_line(line: str) -> bool:
    """
    Permissive pre-filter for item lines.

    Text OR a price is enough; totals/subtotal/tax lines are rejected.
    False positives are filtered again by the item extractor.
    """
    s = line.strip()
    if len(s) < 2:
        return False

    has_text = any(ch.isalpha() for ch in s)
    has_price = any(pat.search(s) for pat in PRICE_PATTERNS)

    excluded = (
        contains_keyword(s, TOTAL_KEYWORDS)
        or contains_keyword(s, TAX_KEYWORDS)
        or contains_keyword(s, SUBTOTAL_KEYWORDS)
    )
    return (has_text or has_price) and not excluded


def parse_price(token: str) -> Optional[float]:
    """
    Parse one matched price token into a float.

    Currency symbols, spaces and parentheses are dropped. When both ',' and
    '.' occur, the one occurring last is the decimal point. A lone ',' is a
    decimal point only for "d,dd"; otherwise it groups thousands.
    """
    s = token
    for sym in CURRENCY_SYMBOLS:
        s = s.replace(sym, '')
    s = re.sub(r'\s+', '', s).replace('(', '').replace(')', '')

    if ',' in s and '.' in s:
        if s.rfind('.') > s.rfind(','):
            s = s.replace(',', '')
        else:
            s = s.replace('.', '').replace(',', '.')
    elif ',' in s:
        parts = s.split(',')
        if len(parts) == 2 and len(parts[1]) == 2:
            s = s.replace(',', '.')
        else:
            s = s.replace(',', '')

    try:
        return float(s)
    except ValueError:
        return None


def extract_all_prices(line: str) -> List[float]:
    """Distinct positive prices in pattern-then-match order."""
    prices: List[float] = []
    for pat in PRICE_PATTERNS:
        for m in pat.finditer(line):
            value = parse_price(m.group(0))
            if value is not None and value > 0 and value not in prices:
                prices.append(value)
    return prices


def extract_last_price(line: str) -> Optional[float]:
    prices = extract_all_prices(line)
    return prices[-1] if prices else None


def extract_largest_price(line: str) -> Optional[float]:
    prices = extract_all_prices(line)
    return max(prices) if prices else None


def _last_price_match(line: str) -> Optional[re.Match]:
    # Rightmost end wins; on equal ends the wider match ("$3.99" over "3.99").
    best = None
    for pat in PRICE_PATTERNS:
        for m in pat.finditer(line):
            if best is None or (m.end(), -m.start()) > (best.end(), -best.start()):
                best = m
    return best


def extract_item_name(line: str) -> Optional[str]:
    """Text before the last price on the line, or None when too short."""
    m = _last_price_match(line)
    if m is None:
        return None
    name = line[:m.start()].strip()
    return name if len(name) >= 2 else None
