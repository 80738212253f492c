"""
Ledger record models - debts and advances owed by customers.

Design principles:
- One collection per ledger kind (debts, advances)
- Derived fields (total_cost, pending_amount) are recomputed at creation
  and a mismatching caller value is rejected
- Derived fields are NOT re-validated on reads
- Status: pending → repaid (one-way, at most once)
"""

from abc import abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from creditbook.core.errors import ValidationError
from creditbook.models.base import MongoModel, PyObjectId
from creditbook.utils.record_validation import (
    calculate_pending_amount,
    calculate_total_cost,
    reconcile_derived,
    validate_advance_amounts,
    validate_customer_id,
    validate_line_items,
)


class LedgerKind(str, Enum):
    DEBTS = "debts"
    ADVANCES = "advances"


class RecordStatus(str, Enum):
    PENDING = "pending"
    REPAID = "repaid"


# Embedded document, no separate _id
class LineItem(BaseModel):
    name: str
    cost: float


class LedgerRecordBase(MongoModel):
    customer_id: PyObjectId
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    repaid: bool = False
    repaid_at: Optional[datetime] = None

    @property
    def status(self) -> RecordStatus:
        return RecordStatus.REPAID if self.repaid else RecordStatus.PENDING

    def is_active(self) -> bool:
        return not self.repaid

    @abstractmethod
    def outstanding_amount(self) -> float:
        """Amount this record contributes to its customer's balance while active."""


class DebtRecord(LedgerRecordBase):
    """
    Itemized purchase on credit.
    
    Invariants (checked at creation only):
    - at least one line item, each with a non-empty name and cost >= 0
    - total_cost == sum(line_items[i].cost)
    """
    kind: Literal["debt"] = "debt"
    line_items: List[LineItem]
    total_cost: float

    def outstanding_amount(self) -> float:
        return self.total_cost


class AdvanceRecord(LedgerRecordBase):
    """
    Cash given against future use.
    
    Invariants (checked at creation only):
    - amount >= 0, used_amount >= 0
    - pending_amount == amount - used_amount (may be negative)
    """
    kind: Literal["advance"] = "advance"
    amount: float
    used_amount: float = 0.0
    pending_amount: float

    def outstanding_amount(self) -> float:
        return self.pending_amount


LedgerRecord = Union[DebtRecord, AdvanceRecord]


def build_debt_record(
    customer_id: str,
    line_items: Sequence[LineItem],
    total_cost: Optional[float] = None,
    date: Optional[datetime] = None,
) -> DebtRecord:
    """Construct a new, pending DebtRecord or raise ValidationError."""
    validate_customer_id(customer_id)
    validate_line_items(line_items)
    computed = reconcile_derived("total_cost", calculate_total_cost(line_items), total_cost)

    fields = {
        "customer_id": customer_id,
        "line_items": [LineItem(name=item.name.strip(), cost=item.cost) for item in line_items],
        "total_cost": computed,
    }
    if date is not None:
        fields["date"] = date
    try:
        return DebtRecord(**fields)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


def build_advance_record(
    customer_id: str,
    amount: float,
    used_amount: float = 0.0,
    pending_amount: Optional[float] = None,
    date: Optional[datetime] = None,
) -> AdvanceRecord:
    """Construct a new, pending AdvanceRecord or raise ValidationError."""
    validate_customer_id(customer_id)
    validate_advance_amounts(amount, used_amount)
    computed = reconcile_derived(
        "pending_amount", calculate_pending_amount(amount, used_amount), pending_amount
    )

    fields = {
        "customer_id": customer_id,
        "amount": amount,
        "used_amount": used_amount,
        "pending_amount": computed,
    }
    if date is not None:
        fields["date"] = date
    try:
        return AdvanceRecord(**fields)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e
