"""
Ledger stores - per-kind access to debt and advance records.

DebtRepository and AdvanceRepository are structurally identical and only
differ in their collection and record model.
"""

from datetime import datetime, timezone
from typing import Generic, List, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from creditbook.core.errors import (
    AlreadyRepaidError,
    RecordFetchError,
    RecordNotFoundError,
    StoreReadError,
    WriteError,
)
from creditbook.models.ledger import AdvanceRecord, DebtRecord, LedgerKind

RecordT = TypeVar("RecordT", DebtRecord, AdvanceRecord)


class LedgerRepository(Generic[RecordT]):
    """Repository for one ledger kind."""

    kind: LedgerKind
    collection_name: str
    record_model: Type[RecordT]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.collection_name]

    async def list_for_customer(self, customer_id: str) -> List[RecordT]:
        """
        All records (pending and repaid) for one customer, oldest first.

        Raises RecordFetchError on any read or decode failure.
        """
        try:
            oid = ObjectId(customer_id)
            docs = await self.collection.find({"customer_id": oid}).sort("date", 1).to_list(None)
            return [self.record_model(**doc) for doc in docs]
        except (PyMongoError, PydanticValidationError, InvalidId, TypeError) as e:
            raise RecordFetchError(str(customer_id), e) from e

    async def list_all(self) -> List[RecordT]:
        """All records across customers, newest first."""
        try:
            docs = await self.collection.find({}).sort("date", -1).to_list(None)
            return [self.record_model(**doc) for doc in docs]
        except (PyMongoError, PydanticValidationError) as e:
            raise StoreReadError(f"Could not list {self.kind.value}: {e}") from e

    async def get(self, record_id: str) -> Optional[RecordT]:
        """
        Look up one record. Returns None for unknown or malformed ids.

        Raises StoreReadError on a read or decode failure.
        """
        if not ObjectId.is_valid(record_id):
            return None
        try:
            doc = await self.collection.find_one({"_id": ObjectId(record_id)})
            if doc:
                return self.record_model(**doc)
        except (PyMongoError, PydanticValidationError) as e:
            raise StoreReadError(f"Could not load {self.kind.value} record {record_id}: {e}") from e
        return None

    async def create(self, record: RecordT) -> RecordT:
        """Insert an already validated record."""
        try:
            await self.collection.insert_one(record.model_dump(by_alias=True))
        except PyMongoError as e:
            raise WriteError(f"Could not create {self.kind.value} record: {e}") from e
        return record

    async def mark_repaid(self, record_id: str) -> RecordT:
        """
        Transition a record pending → repaid.

        The update only matches pending records, so a repaid record can
        never be flipped again. Raises RecordNotFoundError, AlreadyRepaidError
        or WriteError.
        """
        if not ObjectId.is_valid(record_id):
            raise RecordNotFoundError(record_id)
        oid = ObjectId(record_id)

        try:
            result = await self.collection.find_one_and_update(
                {"_id": oid, "repaid": {"$ne": True}},
                {
                    "$set": {
                        "repaid": True,
                        "repaid_at": datetime.now(timezone.utc)
                    }
                },
                return_document=ReturnDocument.AFTER
            )
            if result:
                return self.record_model(**result)

            existing = await self.collection.find_one({"_id": oid}, {"repaid": 1})
        except (PyMongoError, PydanticValidationError) as e:
            raise WriteError(f"Could not mark {record_id} repaid: {e}") from e

        if existing is None:
            raise RecordNotFoundError(record_id)
        raise AlreadyRepaidError(record_id)


class DebtRepository(LedgerRepository[DebtRecord]):
    kind = LedgerKind.DEBTS
    collection_name = "debts"
    record_model = DebtRecord


class AdvanceRepository(LedgerRepository[AdvanceRecord]):
    kind = LedgerKind.ADVANCES
    collection_name = "advances"
    record_model = AdvanceRecord
