"""Ledger record validation utilities."""
import math
from typing import Iterable, Optional, Protocol

from bson import ObjectId

from creditbook.core.errors import ValidationError

# Tolerance for comparing caller-submitted derived fields against recomputed ones
DERIVED_FIELD_TOLERANCE = 1e-9


class LineItemLike(Protocol):
    name: str
    cost: float


def validate_customer_id(customer_id: str) -> None:
    if not isinstance(customer_id, (str, ObjectId)) or not ObjectId.is_valid(customer_id):
        raise ValidationError(f"Invalid customer id: {customer_id!r}")


def validate_amount(label: str, value: float) -> None:
    """Amounts must be finite and non-negative."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(f"{label} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be finite, got {value!r}")
    if value < 0:
        raise ValidationError(f"{label} must be non-negative, got {value}")


def validate_line_items(line_items: Iterable[LineItemLike]) -> None:
    """
    Validate debt line items.
    
    Rules:
    - at least one line item
    - every name is non-empty after stripping whitespace
    - every cost is a finite number >= 0
    """
    items = list(line_items)
    if not items:
        raise ValidationError("A debt must contain at least one line item")

    for index, item in enumerate(items):
        if not item.name or not item.name.strip():
            raise ValidationError(f"Line item {index} has an empty name")
        validate_amount(f"Line item '{item.name}' cost", item.cost)


def validate_advance_amounts(amount: float, used_amount: float) -> None:
    """
    Validate advance amounts.
    Note: used_amount > amount is allowed and yields a negative pending amount.
    """
    validate_amount("Advance amount", amount)
    validate_amount("Advance used amount", used_amount)


def calculate_total_cost(line_items: Iterable[LineItemLike]) -> float:
    """Sum of line item costs."""
    return sum(item.cost for item in line_items)


def calculate_pending_amount(amount: float, used_amount: float) -> float:
    return amount - used_amount


def reconcile_derived(label: str, computed: float, submitted: Optional[float]) -> float:
    """
    Return the computed value for a derived field.

    A submitted value is accepted only when it matches the recomputed one;
    otherwise the record is rejected.
    """
    if submitted is None:
        return computed
    if not isinstance(submitted, (int, float)) or isinstance(submitted, bool):
        raise ValidationError(f"{label} must be a number, got {submitted!r}")
    if not math.isclose(computed, submitted, rel_tol=DERIVED_FIELD_TOLERANCE, abs_tol=DERIVED_FIELD_TOLERANCE):
        raise ValidationError(
            f"{label} mismatch: submitted {submitted}, computed {computed}"
        )
    return computed
