from pydantic import field_validator

from creditbook.models.base import MongoModel


class Customer(MongoModel):
    """Roster entry. The id is immutable once assigned."""
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Customer name must not be empty")
        return value
