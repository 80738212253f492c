import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from creditbook.api.v1.errors import to_http_exception
from creditbook.core.errors import LedgerError
from creditbook.db.mongo import get_db
from creditbook.repositories.item_repo import ItemRepository
from creditbook.schemas.item import ItemCreate, ItemResponse, ItemUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[ItemResponse])
async def list_items(db = Depends(get_db)):
    """List the item catalogue"""
    try:
        items = await ItemRepository(db).list_items()
    except LedgerError as e:
        logger.error(f"Error listing items: {str(e)}")
        raise to_http_exception(e) from e
    return [ItemResponse.from_model(i) for i in items]

@router.post("/", response_model=ItemResponse, status_code=201)
async def create_item(item_in: ItemCreate, db = Depends(get_db)):
    """Add an item to the catalogue"""
    try:
        item = await ItemRepository(db).create_item(item_in.name, item_in.min_price, item_in.max_price)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return ItemResponse.from_model(item)

@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: str, db = Depends(get_db)):
    """Get an item by ID"""
    try:
        item = await ItemRepository(db).get_item(item_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemResponse.from_model(item)

@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(item_id: str, item_in: ItemUpdate, db = Depends(get_db)):
    """Change an item's name or price range"""
    try:
        item = await ItemRepository(db).update_item(
            item_id, item_in.name, item_in.min_price, item_in.max_price
        )
    except LedgerError as e:
        logger.error(f"Error updating item {item_id}: {str(e)}")
        raise to_http_exception(e) from e
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemResponse.from_model(item)
