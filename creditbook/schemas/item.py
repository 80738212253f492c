from datetime import datetime
from pydantic import BaseModel, Field

from creditbook.models.item import Item


class ItemCreate(BaseModel):
    name: str = Field(..., max_length=100)
    min_price: float
    max_price: float


class ItemUpdate(ItemCreate):
    pass


class ItemResponse(BaseModel):
    id: str
    name: str
    min_price: float
    max_price: float
    created_at: datetime

    @classmethod
    def from_model(cls, item: Item) -> "ItemResponse":
        return cls(
            id=str(item.id),
            name=item.name,
            min_price=item.min_price,
            max_price=item.max_price,
            created_at=item.created_at,
        )
