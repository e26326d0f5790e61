import re
import math
import logging
from datetime import date
from typing import Callable, List, NamedTuple, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)

# A month name matches when it is a prefix (3+ letters) of one of these.
MONTHS = {
    'january': 1, 'february': 2, 'march': 3, 'april': 4,
    'may': 5, 'june': 6, 'july': 7, 'august': 8,
    'september': 9, 'october': 10, 'november': 11, 'december': 12,
}

# How many leading tokens of a line may hold the transaction date.
DATE_SCAN_TOKENS = 6

# Widest token window a single date form spans ("Jan 31, 2024").
DATE_WINDOW_TOKENS = 3

CURRENCY_SYMBOLS = '$€£¥'
_CURRENCY = '[' + re.escape(CURRENCY_SYMBOLS) + ']'

AMOUNT_PATTERN = re.compile(
    r'(?<![\d.,])'
    r'(-?(?:' + _CURRENCY + r'\s?)?(?:\d{1,3}(?:,\d{3})*|\d+)\.\d{2})'
    r'(?!\.?\d)'
)


class DateMatch(NamedTuple):
    iso: str
    surface: str


def _iso(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _from_iso(match: re.Match) -> Optional[str]:
    year, month, day = match.groups()
    return _iso(int(year), int(month), int(day))


def _from_month_first(match: re.Match) -> Optional[str]:
    month, day, year = match.groups()
    return _iso(int(year), int(month), int(day))


def _from_month_name(match: re.Match) -> Optional[str]:
    name, day, year = match.groups()
    name = name.lower()
    for full_name, month in MONTHS.items():
        if full_name.startswith(name):
            return _iso(int(year), month, int(day))
    return None


DATE_RULES: List[Tuple[Pattern, Callable[[re.Match], Optional[str]]]] = [
    (re.compile(r'(\d{4})-(\d{2})-(\d{2})'), _from_iso),
    (re.compile(r'(\d{2})/(\d{2})/(\d{4})'), _from_month_first),
    (re.compile(r'(\d{2})-(\d{2})-(\d{4})'), _from_month_first),
    (re.compile(r'([A-Za-z]{3,})\.? (\d{1,2}),\s?(\d{4})'), _from_month_name),
]


class DateRecognizer:
    """Turns date tokens into canonical YYYY-MM-DD strings.

    Numeric dates with separators are always read month first
    (MM/DD/YYYY, MM-DD-YYYY). Day-first statements are not distinguishable
    from the digits alone, so no per-document guessing is attempted.
    """

    def __init__(self, rules=None, scan_tokens: int = DATE_SCAN_TOKENS):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.rules = list(rules) if rules is not None else DATE_RULES
        self.scan_tokens = scan_tokens

    def recognize(self, candidate: str) -> Optional[str]:
        """
        Recognize a whole candidate string as a date.

        Args:
            candidate: Token or short token window

        Returns:
            Canonical date string, or None when no rule matches
        """
        if not candidate:
            return None

        candidate = candidate.strip()
        for pattern, normalize in self.rules:
            match = pattern.fullmatch(candidate)
            if match:
                iso = normalize(match)
                if iso:
                    return iso
        return None

    def find_in_line(self, text: str) -> Optional[DateMatch]:
        """
        Find the first date among the leading tokens of a line.

        Each of the first tokens is tried on its own, then as the start of a
        window wide enough for the month-name form.

        Returns:
            DateMatch with the canonical date and the surface text it came from
        """
        tokens = text.split()
        for start in range(min(self.scan_tokens, len(tokens))):
            for width in range(1, DATE_WINDOW_TOKENS + 1):
                if start + width > len(tokens):
                    break
                surface = ' '.join(tokens[start:start + width])
                iso = self.recognize(surface)
                if iso:
                    return DateMatch(iso, surface)
        return None


class AmountRecognizer:
    """Finds monetary values (1,234.56, -45.67, $12.00, $ 12.00, -€4.75) in text."""

    def __init__(self, pattern: Pattern = AMOUNT_PATTERN):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.pattern = pattern

    def find_matches(self, text: str) -> List[re.Match]:
        """Return regex matches of well-formed amounts, left to right."""
        return [m for m in self.pattern.finditer(text) if self.parse(m.group(1)) is not None]

    def find_all(self, text: str) -> List[float]:
        """Return every amount in the text, in order of appearance."""
        return [self.parse(m.group(1)) for m in self.find_matches(text)]

    def parse(self, token: str) -> Optional[float]:
        """
        Normalize a single monetary token.

        Args:
            token: Amount with optional sign, currency symbol and grouping commas

        Returns:
            Signed float, or None if the token is not a finite number
        """
        cleaned = re.sub(_CURRENCY + r'|[,\s]', '', token)
        try:
            value = float(cleaned)
        except ValueError:
            self.logger.debug(f"Could not parse amount: {token}")
            return None
        if not math.isfinite(value):
            return None
        return value
