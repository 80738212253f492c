from pydantic import field_validator

from creditbook.models.base import MongoModel


class Item(MongoModel):
    """
    Catalogue entry: a product and the price range it usually sells for.

    Price bounds are checked when an item is written, not when it is read.
    """
    name: str
    min_price: float
    max_price: float

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Item name must not be empty")
        return value
