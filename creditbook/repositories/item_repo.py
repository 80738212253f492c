"""ItemRepository - the item catalogue."""

from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from creditbook.core.errors import StoreReadError, WriteError
from creditbook.models.item import Item
from creditbook.utils.item_validation import validate_item


class ItemRepository:
    """Item catalogue database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["items"]

    async def list_items(self) -> List[Item]:
        """Whole catalogue, by name."""
        try:
            docs = await self.collection.find({}).sort([("name", 1), ("_id", 1)]).to_list(None)
            return [Item(**doc) for doc in docs]
        except (PyMongoError, PydanticValidationError) as e:
            raise StoreReadError(f"Could not list items: {e}") from e

    async def get_item(self, item_id: str) -> Optional[Item]:
        """Get item by ID."""
        if not ObjectId.is_valid(item_id):
            return None
        try:
            doc = await self.collection.find_one({"_id": ObjectId(item_id)})
            if doc:
                return Item(**doc)
        except (PyMongoError, PydanticValidationError) as e:
            raise StoreReadError(f"Could not load item {item_id}: {e}") from e
        return None

    async def create_item(self, name: str, min_price: float, max_price: float) -> Item:
        """Create a catalogue item. Raises ValidationError on a bad name or price range."""
        validate_item(name, min_price, max_price)

        item = Item(name=name, min_price=min_price, max_price=max_price)
        try:
            await self.collection.insert_one(item.model_dump(by_alias=True))
        except PyMongoError as e:
            raise WriteError(f"Could not create item: {e}") from e
        return item

    async def update_item(
        self,
        item_id: str,
        name: str,
        min_price: float,
        max_price: float
    ) -> Optional[Item]:
        """Replace an item's name and price range. Returns None if it does not exist."""
        validate_item(name, min_price, max_price)
        if not ObjectId.is_valid(item_id):
            return None

        try:
            doc = await self.collection.find_one_and_update(
                {"_id": ObjectId(item_id)},
                {
                    "$set": {
                        "name": name.strip(),
                        "min_price": min_price,
                        "max_price": max_price
                    }
                },
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise WriteError(f"Could not update item {item_id}: {e}") from e
        if doc:
            return Item(**doc)
        return None
