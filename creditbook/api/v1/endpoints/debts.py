import logging
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from creditbook.api.v1.errors import to_http_exception
from creditbook.core.errors import LedgerError, RosterFetchError
from creditbook.db.mongo import get_db
from creditbook.models.ledger import LedgerKind
from creditbook.models.summary import LedgerAggregate
from creditbook.repositories.ledger_repo import DebtRepository
from creditbook.schemas.ledger import DebtCreate, DebtResponse
from creditbook.services.aggregation import filter_summaries
from creditbook.services.aggregation_service import AggregationService
from creditbook.services.ledger_service import LedgerService
from creditbook.services.repayment_service import RepaymentService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[DebtResponse])
async def list_debts(db = Depends(get_db)):
    """List every debt, newest first"""
    try:
        debts = await DebtRepository(db).list_all()
    except LedgerError as e:
        logger.error(f"Error listing debts: {str(e)}")
        raise to_http_exception(e) from e
    return [DebtResponse.from_record(d) for d in debts]

@router.post("/", response_model=DebtResponse, status_code=201)
async def create_debt(debt_in: DebtCreate):
    """Record a purchase on credit"""
    try:
        debt = await LedgerService.create_debt(
            debt_in.customer_id,
            debt_in.to_line_items(),
            total_cost=debt_in.total_cost,
        )
    except LedgerError as e:
        logger.error(f"Error creating debt: {str(e)}")
        raise to_http_exception(e) from e
    return DebtResponse.from_record(debt)

@router.get("/summary", response_model=LedgerAggregate)
async def debt_summary(search: Optional[str] = None, customer_id: Optional[str] = None):
    """Customers with outstanding debt, largest first"""
    try:
        aggregate = await AggregationService.aggregate_debts()
    except RosterFetchError as e:
        unavailable = LedgerAggregate.unavailable(LedgerKind.DEBTS, str(e))
        return JSONResponse(status_code=503, content=unavailable.model_dump(mode="json"))

    return aggregate.model_copy(
        update={"summaries": filter_summaries(aggregate.summaries, search, customer_id)}
    )

@router.get("/customer/{customer_id}", response_model=List[DebtResponse])
async def list_customer_debts(customer_id: str, db = Depends(get_db)):
    """All debts of one customer, paid and unpaid"""
    if not ObjectId.is_valid(customer_id):
        raise HTTPException(status_code=422, detail=f"Invalid customer id: {customer_id}")
    try:
        debts = await DebtRepository(db).list_for_customer(customer_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return [DebtResponse.from_record(d) for d in debts]

@router.put("/repaid/{debt_id}", response_model=DebtResponse)
async def mark_debt_repaid(debt_id: str):
    """Mark a pending debt as repaid"""
    try:
        debt = await RepaymentService.mark_debt_repaid(debt_id)
    except LedgerError as e:
        logger.error(f"Error marking debt {debt_id} repaid: {str(e)}")
        raise to_http_exception(e) from e
    return DebtResponse.from_record(debt)

@router.get("/{debt_id}", response_model=DebtResponse)
async def get_debt(debt_id: str, db = Depends(get_db)):
    """Get a debt by ID"""
    try:
        debt = await DebtRepository(db).get(debt_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if not debt:
        raise HTTPException(status_code=404, detail="Debt not found")
    return DebtResponse.from_record(debt)
