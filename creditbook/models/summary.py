"""
Derived, non-persisted aggregation results.

A CustomerLedgerSummary only exists for a customer with a positive
outstanding total; it is rebuilt on every aggregation pass.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from creditbook.models.ledger import LedgerKind


class CustomerLedgerSummary(BaseModel):
    customer_id: str
    name: str = ""
    outstanding_total: float
    active_record_count: int


class LedgerAggregate(BaseModel):
    """Ranked result of one aggregation pass over a single ledger kind."""
    ledger: LedgerKind
    summaries: List[CustomerLedgerSummary] = Field(default_factory=list)
    grand_total: float = 0.0
    customer_count: int = 0
    failed_customer_ids: List[str] = Field(default_factory=list)

    # False when the pass could not run at all (roster fetch failed)
    available: bool = True
    error: Optional[str] = None

    @classmethod
    def unavailable(cls, ledger: LedgerKind, error: str) -> "LedgerAggregate":
        return cls(ledger=ledger, available=False, error=error)
