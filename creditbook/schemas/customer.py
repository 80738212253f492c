from datetime import datetime
from pydantic import BaseModel, Field

from creditbook.models.customer import Customer


class CustomerCreate(BaseModel):
    name: str = Field(..., max_length=100)


class CustomerUpdate(BaseModel):
    name: str = Field(..., max_length=100)


class CustomerResponse(BaseModel):
    id: str
    name: str
    created_at: datetime

    @classmethod
    def from_model(cls, customer: Customer) -> "CustomerResponse":
        return cls(id=str(customer.id), name=customer.name, created_at=customer.created_at)
