import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from creditbook.api.v1.errors import to_http_exception
from creditbook.core.errors import LedgerError
from creditbook.db.mongo import get_db
from creditbook.repositories.customer_repo import CustomerRepository
from creditbook.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[CustomerResponse])
async def list_customers(db = Depends(get_db)):
    """List the customer roster"""
    try:
        customers = await CustomerRepository(db).list_customers()
    except LedgerError as e:
        logger.error(f"Error listing customers: {str(e)}")
        raise to_http_exception(e) from e
    return [CustomerResponse.from_model(c) for c in customers]

@router.post("/", response_model=CustomerResponse, status_code=201)
async def create_customer(customer_in: CustomerCreate, db = Depends(get_db)):
    """Create a new customer"""
    try:
        customer = await CustomerRepository(db).create_customer(customer_in.name)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return CustomerResponse.from_model(customer)

@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str, db = Depends(get_db)):
    """Get a customer by ID"""
    customer = await CustomerRepository(db).get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerResponse.from_model(customer)

@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(customer_id: str, customer_in: CustomerUpdate, db = Depends(get_db)):
    """Rename a customer"""
    try:
        customer = await CustomerRepository(db).update_customer(customer_id, customer_in.name)
    except LedgerError as e:
        logger.error(f"Error updating customer {customer_id}: {str(e)}")
        raise to_http_exception(e) from e
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerResponse.from_model(customer)
