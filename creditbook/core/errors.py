"""
Ledger error taxonomy.

- ValidationError: construction-time invariant violation, never sent to the store
- RosterFetchError: the customer roster could not be read; fatal to a pass
- StoreReadError: a ledger listing or lookup could not be read or decoded
- RecordFetchError: one customer's ledger could not be read; recovered by exclusion
- WriteError: a create or repayment call failed at the store boundary
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors."""
    pass


class ValidationError(LedgerError):
    """A ledger record failed its arithmetic or shape invariants."""
    pass


class RosterFetchError(LedgerError):
    """The customer roster could not be obtained."""
    pass


class StoreReadError(LedgerError):
    """A ledger read failed at the store or its document could not be decoded."""
    pass


class RecordFetchError(StoreReadError):
    """A per-customer ledger query failed."""

    def __init__(self, customer_id: str, cause: Optional[BaseException] = None):
        self.customer_id = customer_id
        self.cause = cause
        message = f"Ledger query failed for customer {customer_id}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class WriteError(LedgerError):
    """A create or repayment call failed at the store."""
    pass


class RecordNotFoundError(WriteError):
    """The addressed ledger record does not exist."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found")


class AlreadyRepaidError(LedgerError):
    """markRepaid was called on a record that is already repaid."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record {record_id} is already repaid")


class CustomerNotFoundError(LedgerError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} not found")


class AggregationCancelledError(LedgerError):
    """The aggregation pass was cancelled before its merge step."""
    pass
