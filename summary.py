import logging
from typing import List, Sequence

import pandas as pd

from schema import LedgerSummary, Transaction

logger = logging.getLogger(__name__)

COLUMNS = ['id', 'date', 'description', 'amount', 'type', 'balance']
TYPE_FILTERS = {'all', 'credit', 'debit'}
SORT_KEYS = {'date', 'amount', 'none'}


def to_dataframe(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """One row per transaction, in ledger order."""
    return pd.DataFrame([t.model_dump() for t in transactions], columns=COLUMNS)


def summarize_ledger(transactions: Sequence[Transaction]) -> LedgerSummary:
    """
    Compute the headline statistics of a ledger.

    Args:
        transactions: Extracted transactions in reading order

    Returns:
        LedgerSummary with totals, net flow, current balance and mean amount
    """
    if not transactions:
        return LedgerSummary()

    df = to_dataframe(transactions)
    credits = df.loc[df['type'] == 'credit', 'amount']
    debits = df.loc[df['type'] == 'debit', 'amount']

    total_credit = float(credits.sum())
    total_debit = float(debits.abs().sum())
    net_flow = total_credit - total_debit

    # A missing or zero closing balance falls back to the net flow.
    last_balance = df['balance'].iloc[-1]
    current_balance = float(last_balance) if pd.notna(last_balance) and last_balance != 0 else net_flow

    return LedgerSummary(
        total_credit=round(total_credit, 2),
        total_debit=round(total_debit, 2),
        net_flow=round(net_flow, 2),
        current_balance=round(current_balance, 2),
        average_amount=round(float(df['amount'].abs().mean()), 2),
        transaction_count=len(df),
    )


def filter_ledger(
    transactions: Sequence[Transaction],
    search: str = "",
    transaction_type: str = "all",
    sort_by: str = "date",
) -> List[Transaction]:
    """
    Search, filter and sort a ledger for display.

    Args:
        transactions: Extracted transactions
        search: Case-insensitive substring of the description
        transaction_type: 'all', 'credit' or 'debit'
        sort_by: 'date' (newest first), 'amount' (largest first) or 'none'

    Returns:
        Matching transactions in the requested order
    """
    if transaction_type not in TYPE_FILTERS:
        raise ValueError(f"Unknown type filter: {transaction_type}")
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")
    if not transactions:
        return []

    df = to_dataframe(transactions)
    mask = df['description'].str.lower().str.contains(search.lower(), regex=False)
    if transaction_type != 'all':
        mask &= df['type'] == transaction_type
    df = df[mask]

    if sort_by == 'date':
        df = df.assign(_key=pd.to_datetime(df['date'])).sort_values('_key', ascending=False, kind='stable')
    elif sort_by == 'amount':
        df = df.assign(_key=df['amount'].abs()).sort_values('_key', ascending=False, kind='stable')

    return [transactions[i] for i in df.index]
