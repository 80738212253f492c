"""
Balance computation: one customer's records → outstanding stats.

Pure and synchronous; never suspends.
"""

from typing import Optional, Sequence

from creditbook.models.ledger import LedgerRecord
from creditbook.models.summary import CustomerLedgerSummary


def compute_summary(
    customer_id: str,
    records: Sequence[LedgerRecord],
    name: str = "",
) -> Optional[CustomerLedgerSummary]:
    """
    Reduce a customer's ledger records to a summary.

    Only unpaid records count. Debts contribute total_cost, advances
    contribute pending_amount.

    Returns None ("no balance") when no unpaid record is left.
    """
    active = [record for record in records if record.is_active()]
    if not active:
        return None

    return CustomerLedgerSummary(
        customer_id=str(customer_id),
        name=name,
        outstanding_total=sum(record.outstanding_amount() for record in active),
        active_record_count=len(active),
    )
