import re
from typing import List, Iterable, Optional
import logging

from preprocess import collapse_whitespace
from recognizers import AmountRecognizer, DateRecognizer
from schema import Line, Transaction

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "Transaction"

CREDIT_CUE = re.compile(r'\b(?:cr|credit)\b', re.IGNORECASE)
DEBIT_CUE = re.compile(r'\b(?:dr|debit)\b', re.IGNORECASE)

# Between the trailing amount columns only whitespace or a CR/DR marker may appear.
_AMOUNT_GAP = re.compile(r'\s*(?:(?:cr|dr)\b\s*)?', re.IGNORECASE)


class TransactionExtractor:
    """Assembles transaction records from reconstructed statement lines."""

    def __init__(self, date_recognizer: DateRecognizer = None, amount_recognizer: AmountRecognizer = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.date_recognizer = date_recognizer or DateRecognizer()
        self.amount_recognizer = amount_recognizer or AmountRecognizer()

    def extract_from_lines(self, lines: Iterable[Line]) -> List[Transaction]:
        """
        Extract transactions from filtered lines.

        Args:
            lines: Candidate lines in reading order

        Returns:
            Transactions in the same order, numbered from 1
        """
        transactions = []
        skipped = 0
        for line in lines:
            transaction = self.extract_from_line(line, len(transactions) + 1)
            if transaction is None:
                skipped += 1
                continue
            transactions.append(transaction)

        self.logger.info(f"Extracted {len(transactions)} transactions, skipped {skipped} lines")
        return transactions

    def extract_from_line(self, line: Line, sequence: int) -> Optional[Transaction]:
        """Build a transaction from one line, or None if it is not a transaction row."""
        text = line.text

        date_match = self.date_recognizer.find_in_line(text)
        if not date_match:
            self.logger.debug(f"No date in line: {text}")
            return None

        amount_matches = self.amount_recognizer.find_matches(text)
        if not amount_matches:
            self.logger.debug(f"No amount in line: {text}")
            return None

        values = [self.amount_recognizer.parse(m.group(1)) for m in amount_matches]
        if len(values) >= 2:
            amount, balance = values[-2], values[-1]
        else:
            amount, balance = values[0], None

        description = self._derive_description(text, date_match.surface, amount_matches)

        return Transaction(
            id=f"{date_match.iso}-{sequence}",
            date=date_match.iso,
            description=description,
            amount=amount,
            type=self.resolve_type(text, amount),
            balance=balance,
        )

    def resolve_type(self, text: str, amount: float) -> str:
        """
        Classify a row as credit or debit.

        A CR/credit cue reads the sign as credit-positive; a DR/debit cue reads it
        as debit-negative; without a cue the sign alone decides.
        """
        if CREDIT_CUE.search(text):
            return 'credit' if amount >= 0 else 'debit'
        if DEBIT_CUE.search(text):
            return 'debit' if amount < 0 else 'credit'
        return 'credit' if amount >= 0 else 'debit'

    def _derive_description(self, text: str, date_surface: str, amount_matches: List[re.Match]) -> str:
        end = len(text.rstrip())
        for match in reversed(amount_matches):
            if not _AMOUNT_GAP.fullmatch(text, match.end(), end):
                break
            end = match.start()

        description = text[:end].replace(date_surface, ' ', 1)
        description = collapse_whitespace(description)
        return description or FALLBACK_DESCRIPTION
