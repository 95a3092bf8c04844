"""
Text Normalization Module
Cleans raw OCR text before any field extraction happens

Purpose: undo the systematic damage OCR does to receipt text
Examples:
- T0TAL 7.01    → TOTAL 7.01
- O.99 / 1O.50  → 0.99 / 10.50
- CA5H          → CASH
- 12,34 €       → 12,34$
- "\\r\\n\\n\\n\\n"  → "\\n\\n"

normalize() is deterministic, never fails and is idempotent:
normalize(normalize(x)) == normalize(x).
"""

import re
from typing import Dict, List, Optional

from loguru import logger

from parsing_rules import CANONICAL_CURRENCY, CURRENCY_SYMBOLS


class TextNormalizer:
    """
    Normalize OCR receipt text

    Handles, in order:
    - OCR character confusions (O/0, l/1, S/5, B/8) at token boundaries
    - Known keyword misreads (T0TAL, TOTA L, CA5H, CRED1T, Sa les)
    - Currency symbol unification and spacing
    - Newline / tab / space normalization
    - Excess blank-line collapsing and outer trim
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize text normalizer

        Args:
            config: Optional configuration dict (see config/parser_config.yaml)
        """
        self.config = config or {}
        settings = self.config.get('normalizer', {}) or {}
        self.ocr_corrections = settings.get('ocr_corrections', True)
        self.currency_normalization = settings.get('currency_normalization', True)

        self.patterns = self._build_patterns()

        logger.debug(
            f"Text Normalizer initialized (ocr_corrections: {self.ocr_corrections}, "
            f"currency_normalization: {self.currency_normalization})"
        )

    def _build_patterns(self) -> Dict:
        """Build regex patterns for OCR correction"""
        return {
            # ========== LETTER / DIGIT CONFUSIONS ==========

            # O5.99 → 05.99
            'o_before_digit': {
                'pattern': re.compile(r'\bO(?=\d)'),
                'replacement': '0',
                'description': 'Letter O read for zero before a digit'
            },

            # 1O → 10
            'o_after_digit': {
                'pattern': re.compile(r'(?<=\d)O\b'),
                'replacement': '0',
                'description': 'Letter O read for zero after a digit'
            },

            # l2.50 → 12.50
            'l_before_digit': {
                'pattern': re.compile(r'\bl(?=\d)'),
                'replacement': '1',
                'description': 'Lowercase l read for one before a digit'
            },

            # 2l → 21
            'l_after_digit': {
                'pattern': re.compile(r'(?<=\d)l\b'),
                'replacement': '1',
                'description': 'Lowercase l read for one after a digit'
            },

            # S5.00 → 55.00
            's_before_digit': {
                'pattern': re.compile(r'\bS(?=\d)'),
                'replacement': '5',
                'description': 'Letter S read for five before a digit'
            },

            # B9.99 → 89.99
            'b_before_digit': {
                'pattern': re.compile(r'\bB(?=\d)'),
                'replacement': '8',
                'description': 'Letter B read for eight before a digit'
            },

            # ========== KEYWORD MISREADS ==========

            'sales_split': {
                'pattern': re.compile(r'\bSa[ \t]+les\b', re.IGNORECASE),
                'replacement': 'Sales',
                'description': 'Fix Sales word split'
            },

            'total_zero_upper': {
                'pattern': re.compile(r'\bT0TAL\b'),
                'replacement': 'TOTAL',
                'description': 'Fix TOTAL with zero for O'
            },

            'total_zero_title': {
                'pattern': re.compile(r'\bT0tal\b', re.IGNORECASE),
                'replacement': 'Total',
                'description': 'Fix Total with zero for o'
            },

            'total_split': {
                'pattern': re.compile(r'\bTOTA[ \t]+L\b', re.IGNORECASE),
                'replacement': 'TOTAL',
                'description': 'Fix TOTAL word split'
            },

            'cash_five': {
                'pattern': re.compile(r'\bCA5H\b', re.IGNORECASE),
                'replacement': 'CASH',
                'description': 'Fix CASH with 5 for S'
            },

            'credit_one': {
                'pattern': re.compile(r'\bCRED1T\b', re.IGNORECASE),
                'replacement': 'CREDIT',
                'description': 'Fix CREDIT with 1 for I'
            },

            # ========== PRICE PUNCTUATION ==========
            # Decimal repairs first: dollar_as_s needs the repaired d.dd

            # l-99 → 1.99
            'dash_decimal_after_one': {
                'pattern': re.compile(r'\b[lI]-(?=\d{2}\b)'),
                'replacement': '1.',
                'description': 'l- / I- read for 1.'
            },

            # 3 - 99 → 3.99
            'spaced_dash_decimal': {
                'pattern': re.compile(r'(?<=\d)[ \t]+-[ \t]+(?=\d{2}\b)'),
                'replacement': '.',
                'description': 'Spaced dash read for a decimal point'
            },

            # TOTAL S 7.01 → TOTAL $ 7.01
            'dollar_as_s': {
                'pattern': re.compile(r'(?<!\S)S(?=[ \t]+\d+[.,]\d{2}\b)'),
                'replacement': '$',
                'description': 'Standalone S read for a dollar sign'
            },
        }

    def normalize(self, raw_text: str) -> str:
        """
        Clean raw OCR text

        Args:
            raw_text: Text exactly as the OCR engine produced it

        Returns:
            Cleaned text (never raises)
        """
        if not raw_text:
            return ''

        text = raw_text
        if self.ocr_corrections:
            text = self.fix_ocr_errors(text)
        if self.currency_normalization:
            text = self.normalize_currency(text)
        text = self.normalize_whitespace(text)
        text = self.collapse_blank_lines(text)
        return text.strip()

    def fix_ocr_errors(self, text: str) -> str:
        """Apply every OCR correction pattern in order"""
        fixed = text
        for pattern_info in self.patterns.values():
            fixed = pattern_info['pattern'].sub(pattern_info['replacement'], fixed)
        return fixed

    @staticmethod
    def normalize_currency(text: str) -> str:
        """Unify currency symbols on '$' and remove spacing around it"""
        for sym in CURRENCY_SYMBOLS:
            if sym != CANONICAL_CURRENCY:
                text = text.replace(sym, CANONICAL_CURRENCY)
        text = re.sub(r'\${2,}', '$', text)
        text = re.sub(r'\$[ \t]+(\d)', r'$\1', text)     # $ 5.00 → $5.00
        text = re.sub(r'(\d)[ \t]+\$', r'\1$', text)     # 5.00 $ → 5.00$
        return text

    @staticmethod
    def normalize_whitespace(text: str) -> str:
        """Single newline convention, tabs to spaces, collapse space runs"""
        text = text.replace('\r\n', '\n').replace('\r', '\n')
        text = text.replace('\t', ' ')
        return re.sub(r' +', ' ', text)

    @staticmethod
    def collapse_blank_lines(text: str) -> str:
        return re.sub(r'\n{3,}', '\n\n', text)

    @staticmethod
    def split_lines(clean_text: str) -> List[str]:
        """
        Split cleaned text into trimmed, non-empty lines

        Args:
            clean_text: Output of normalize()

        Returns:
            Lines in their original order
        """
        return [line.strip() for line in clean_text.split('\n') if line.strip()]

    def get_normalization_report(self, raw_text: str) -> Dict:
        """
        Report which lines the normalizer changed

        Args:
            raw_text: Raw OCR text

        Returns:
            Dict with per-line changes
        """
        changes = []
        for i, line in enumerate(raw_text.splitlines()):
            cleaned = self.normalize(line)
            if cleaned != line.strip():
                changes.append({
                    'line_number': i + 1,
                    'original': line,
                    'normalized': cleaned,
                })
        return {
            'changed': len(changes) > 0,
            'changes': changes,
        }


# ─── Module-level helpers ────────────────────────────────────────────────────

_default_normalizer = TextNormalizer()

_NUMBER = re.compile(r'\d+[.,]\d+|\d+')
_PRICE_TOKEN = re.compile(r'\$?\s*(\d+[.,]\d{2})\b')


def normalize(raw_text: str) -> str:
    """Normalize with the default configuration."""
    return _default_normalizer.normalize(raw_text)


def split_lines(clean_text: str) -> List[str]:
    return TextNormalizer.split_lines(clean_text)


def extract_numeric_tokens(text: str) -> List[float]:
    """Every integer or decimal token, with ',' read as a decimal point."""
    numbers = []
    for m in _NUMBER.finditer(text):
        try:
            numbers.append(float(m.group(0).replace(',', '.')))
        except ValueError:
            continue
    return numbers


def extract_price_tokens(text: str) -> List[float]:
    """Price-shaped tokens ("d.dd" / "d,dd") in the open range (0, 1 000 000)."""
    prices = []
    for m in _PRICE_TOKEN.finditer(text):
        value = float(m.group(1).replace(',', '.'))
        if 0.0 < value < 1_000_000.0:
            prices.append(value)
    return prices


def levenshtein_distance(s1: str, s2: str) -> int:
    """Classic edit distance, single rolling row."""
    costs = list(range(len(s2) + 1))
    for i in range(1, len(s1) + 1):
        last_value = i
        for j in range(1, len(s2) + 1):
            if s1[i - 1] == s2[j - 1]:
                new_value = costs[j - 1]
            else:
                new_value = min(costs[j - 1], last_value, costs[j]) + 1
            costs[j - 1] = last_value
            last_value = new_value
        costs[len(s2)] = last_value
    return costs[len(s2)]


def similarity(s1: str, s2: str) -> float:
    """1 - distance / len(longer); 1.0 for two empty strings."""
    longer, shorter = (s1, s2) if len(s1) >= len(s2) else (s2, s1)
    if not longer:
        return 1.0
    return (len(longer) - levenshtein_distance(longer, shorter)) / len(longer)


def fuzzy_match(a: str, b: str, threshold: float = 0.7) -> bool:
    """
    Tolerant store-name comparison.

    "Wal-Mart" vs "Walmart" → True, "Target" vs "Costco" → False.
    """
    a_clean = re.sub(r'[^a-z0-9]', '', a.lower())
    b_clean = re.sub(r'[^a-z0-9]', '', b.lower())
    if a_clean == b_clean:
        return True
    return similarity(a_clean, b_clean) >= threshold
