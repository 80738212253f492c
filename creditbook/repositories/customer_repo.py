"""CustomerRepository - the customer directory (roster)."""

from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from creditbook.core.errors import RosterFetchError, ValidationError, WriteError
from creditbook.models.customer import Customer


class CustomerRepository:
    """Customer database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["customers"]

    async def list_customers(self) -> List[Customer]:
        """
        Return the full roster in a stable order (oldest first).

        Raises RosterFetchError if the roster cannot be read.
        """
        try:
            docs = await self.collection.find({}).sort(
                [("created_at", 1), ("_id", 1)]
            ).to_list(None)
            return [Customer(**doc) for doc in docs]
        except (PyMongoError, PydanticValidationError) as e:
            raise RosterFetchError(f"Could not load customer roster: {e}") from e

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by ID."""
        if not ObjectId.is_valid(customer_id):
            return None
        doc = await self.collection.find_one({"_id": ObjectId(customer_id)})
        if doc:
            return Customer(**doc)
        return None

    async def create_customer(self, name: str) -> Customer:
        """Create a new customer."""
        if not name or not name.strip():
            raise ValidationError("Customer name must not be empty")

        customer = Customer(name=name)
        try:
            await self.collection.insert_one(customer.model_dump(by_alias=True))
        except PyMongoError as e:
            raise WriteError(f"Could not create customer: {e}") from e
        return customer

    async def update_customer(self, customer_id: str, name: str) -> Optional[Customer]:
        """Rename a customer. Returns None if the customer does not exist."""
        if not name or not name.strip():
            raise ValidationError("Customer name must not be empty")
        if not ObjectId.is_valid(customer_id):
            return None

        try:
            doc = await self.collection.find_one_and_update(
                {"_id": ObjectId(customer_id)},
                {"$set": {"name": name.strip()}},
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise WriteError(f"Could not update customer {customer_id}: {e}") from e
        if doc:
            return Customer(**doc)
        return None
