from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, model_validator

from creditbook.models.ledger import AdvanceRecord, DebtRecord, LineItem, RecordStatus


class LineItemBase(BaseModel):
    name: str
    cost: float

    model_config = {"from_attributes": True}


class DebtCreate(BaseModel):
    """
    New debt. total_cost is optional; when given it must equal the sum of costs.

    Line items may also be sent as parallel ``item`` (names) and ``cost``
    arrays, the shape the web form posts.
    """
    customer_id: str
    line_items: List[LineItemBase]
    total_cost: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def zip_parallel_arrays(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "line_items" in data:
            return data
        if "item" not in data and "cost" not in data:
            return data

        names = data.get("item") or []
        costs = data.get("cost") or []
        if not isinstance(names, list) or not isinstance(costs, list):
            raise ValueError("item and cost must be arrays")
        if len(names) != len(costs):
            raise ValueError(f"item and cost lengths differ ({len(names)} != {len(costs)})")

        data = {k: v for k, v in data.items() if k not in ("item", "cost")}
        data["line_items"] = [{"name": name, "cost": cost} for name, cost in zip(names, costs)]
        return data

    def to_line_items(self) -> List[LineItem]:
        return [LineItem(name=item.name, cost=item.cost) for item in self.line_items]


class AdvanceCreate(BaseModel):
    """New advance. pending_amount is optional; when given it must equal amount - used_amount."""
    customer_id: str
    amount: float
    used_amount: float = 0.0
    pending_amount: Optional[float] = None


class DebtResponse(BaseModel):
    id: str
    customer_id: str
    line_items: List[LineItemBase]
    total_cost: float
    date: datetime
    repaid: bool
    repaid_at: Optional[datetime] = None
    status: RecordStatus

    @classmethod
    def from_record(cls, record: DebtRecord) -> "DebtResponse":
        return cls(
            id=str(record.id),
            customer_id=str(record.customer_id),
            line_items=[LineItemBase.model_validate(item) for item in record.line_items],
            total_cost=record.total_cost,
            date=record.date,
            repaid=record.repaid,
            repaid_at=record.repaid_at,
            status=record.status,
        )


class AdvanceResponse(BaseModel):
    id: str
    customer_id: str
    amount: float
    used_amount: float
    pending_amount: float
    date: datetime
    repaid: bool
    repaid_at: Optional[datetime] = None
    status: RecordStatus

    @classmethod
    def from_record(cls, record: AdvanceRecord) -> "AdvanceResponse":
        return cls(
            id=str(record.id),
            customer_id=str(record.customer_id),
            amount=record.amount,
            used_amount=record.used_amount,
            pending_amount=record.pending_amount,
            date=record.date,
            repaid=record.repaid,
            repaid_at=record.repaid_at,
            status=record.status,
        )
