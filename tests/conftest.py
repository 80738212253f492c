import copy
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument

from creditbook.models.customer import Customer
from creditbook.models.ledger import LineItem, build_advance_record, build_debt_record


# ===== In-memory stand-in for a Motor database =====

def _matches(doc, query):
    for key, expected in query.items():
        actual = doc.get(key)
        if isinstance(expected, dict) and "$ne" in expected:
            if actual == expected["$ne"]:
                return False
        elif actual != expected:
            return False
    return True


class InMemoryCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        keys = key if isinstance(key, list) else [(key, direction)]
        for field, dirn in reversed(keys):
            self._docs.sort(key=lambda d: d.get(field), reverse=dirn < 0)
        return self

    async def to_list(self, length):
        return [copy.deepcopy(d) for d in self._docs]


class InMemoryCollection:
    """Implements the subset of AsyncIOMotorCollection the repositories use."""

    def __init__(self):
        self.docs = []

    async def insert_one(self, doc):
        self.docs.append(copy.deepcopy(doc))
        return MagicMock(inserted_id=doc["_id"])

    def find(self, query):
        return InMemoryCursor([d for d in self.docs if _matches(d, query)])

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def find_one_and_update(self, query, update, return_document=ReturnDocument.BEFORE):
        for doc in self.docs:
            if _matches(doc, query):
                before = copy.deepcopy(doc)
                doc.update(update.get("$set", {}))
                return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before
        return None


class InMemoryDatabase:
    def __init__(self):
        self.customers = InMemoryCollection()
        self.debts = InMemoryCollection()
        self.advances = InMemoryCollection()
        self.items = InMemoryCollection()

    def __getitem__(self, name):
        return getattr(self, name)


@pytest.fixture
def memory_db():
    return InMemoryDatabase()


# ===== MagicMock database for call-level assertions =====

def _mock_collection():
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


@pytest.fixture
def mock_db():
    """MagicMock database whose collections have async methods."""
    collections = {name: _mock_collection() for name in ("customers", "debts", "advances", "items")}
    db = MagicMock()
    db.__getitem__.side_effect = collections.__getitem__
    for name, collection in collections.items():
        setattr(db, name, collection)
    return db


# ===== Sample data =====

@pytest.fixture
def customers():
    """Roster of five customers in creation order."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    names = ["Alice", "Bob", "Charlie", "Dana", "Eve"]
    return [
        Customer(name=name, created_at=base + timedelta(minutes=i))
        for i, name in enumerate(names)
    ]


def make_debt(customer, costs, repaid=False):
    debt = build_debt_record(
        str(customer.id),
        [LineItem(name=f"item-{i}", cost=cost) for i, cost in enumerate(costs)],
    )
    return debt.model_copy(update={"repaid": repaid})


def make_advance(customer, amount, used_amount=0.0, repaid=False):
    advance = build_advance_record(str(customer.id), amount, used_amount=used_amount)
    return advance.model_copy(update={"repaid": repaid})
