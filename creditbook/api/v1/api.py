from fastapi import APIRouter
from creditbook.api.v1.endpoints import customers, debts, advances, items

api_router = APIRouter()

api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(debts.router, prefix="/debts", tags=["debts"])
api_router.include_router(advances.router, prefix="/advances", tags=["advances"])
api_router.include_router(items.router, prefix="/items", tags=["items"])
