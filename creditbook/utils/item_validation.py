"""Item catalogue validation utilities."""
from creditbook.core.errors import ValidationError
from creditbook.utils.record_validation import validate_amount


def validate_item(name: str, min_price: float, max_price: float) -> None:
    """
    Validate a catalogue item before it is written.

    Rules:
    - name is non-empty after stripping whitespace
    - both prices are finite numbers >= 0
    - min_price <= max_price
    """
    if not name or not name.strip():
        raise ValidationError("Item name must not be empty")
    validate_amount("Item min_price", min_price)
    validate_amount("Item max_price", max_price)
    if min_price > max_price:
        raise ValidationError(
            f"Item min_price ({min_price}) must not exceed max_price ({max_price})"
        )
