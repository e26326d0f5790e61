from typing import List, Literal, Optional
from pydantic import BaseModel, Field, validator
from datetime import datetime
import math


class TextFragment(BaseModel):
    """One positioned run of text from a page's text layer."""
    text: str = Field(..., description="Text content of the fragment")
    x: float = Field(..., description="Horizontal position, increasing to the right")
    y: float = Field(..., description="Vertical position, increasing towards the top of the page")

    class Config:
        frozen = True


class Line(BaseModel):
    """A reconstructed visual row of a page."""
    text: str = Field(..., description="Whitespace-collapsed text of the row")
    fragments: List[TextFragment] = Field(default_factory=list, description="Fragments, left to right")

    class Config:
        frozen = True


class Transaction(BaseModel):
    """Individual transaction record with validation."""
    id: str = Field(..., description="Run-local identifier, <date>-<sequence>")
    date: str = Field(..., description="Transaction date in YYYY-MM-DD format")
    description: str = Field(..., min_length=1, description="Residual line text")
    amount: float = Field(..., description="Signed transaction amount")
    type: Literal["credit", "debit"] = Field(..., description="Credit/debit class")
    balance: Optional[float] = Field(None, description="Running balance, when the row shows one")

    @validator('date')
    def validate_date_format(cls, v):
        """Ensure date is in YYYY-MM-DD format."""
        try:
            datetime.strptime(v, '%Y-%m-%d')
            return v
        except ValueError:
            raise ValueError('Date must be in YYYY-MM-DD format')

    @validator('amount', 'balance')
    def validate_finite(cls, v):
        if v is not None and not math.isfinite(v):
            raise ValueError('Monetary values must be finite')
        return v

    class Config:
        frozen = True


class TransactionList(BaseModel):
    """Ordered ledger produced by one extraction run."""
    transactions: List[Transaction]
    total_count: int = Field(..., description="Total number of transactions")
    processing_metadata: Optional[dict] = Field(None, description="Processing information")

    @validator('total_count')
    def validate_count(cls, v, values):
        """Ensure count matches actual transaction list length."""
        if 'transactions' in values:
            actual_count = len(values['transactions'])
            if v != actual_count:
                return actual_count
        return v

    class Config:
        frozen = True


class LedgerSummary(BaseModel):
    """Aggregate statistics over a ledger."""
    total_credit: float = 0.0
    total_debit: float = 0.0
    net_flow: float = 0.0
    current_balance: float = 0.0
    average_amount: float = 0.0
    transaction_count: int = 0

    class Config:
        frozen = True
