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
from creditbook.repositories.ledger_repo import AdvanceRepository
from creditbook.schemas.ledger import AdvanceCreate, AdvanceResponse
from creditbook.services.aggregation import filter_summaries
from creditbook.services.aggregation_service import AggregationService
from creditbook.services.ledger_service import LedgerService
from creditbook.services.repayment_service import RepaymentService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[AdvanceResponse])
async def list_advances(db = Depends(get_db)):
    """List every advance, newest first"""
    try:
        advances = await AdvanceRepository(db).list_all()
    except LedgerError as e:
        logger.error(f"Error listing advances: {str(e)}")
        raise to_http_exception(e) from e
    return [AdvanceResponse.from_record(a) for a in advances]

@router.post("/", response_model=AdvanceResponse, status_code=201)
async def create_advance(advance_in: AdvanceCreate):
    """Record cash given against future use"""
    try:
        advance = await LedgerService.create_advance(
            advance_in.customer_id,
            advance_in.amount,
            used_amount=advance_in.used_amount,
            pending_amount=advance_in.pending_amount,
        )
    except LedgerError as e:
        logger.error(f"Error creating advance: {str(e)}")
        raise to_http_exception(e) from e
    return AdvanceResponse.from_record(advance)

@router.get("/summary", response_model=LedgerAggregate)
async def advance_summary(search: Optional[str] = None, customer_id: Optional[str] = None):
    """Customers with pending advance float, largest first"""
    try:
        aggregate = await AggregationService.aggregate_advances()
    except RosterFetchError as e:
        unavailable = LedgerAggregate.unavailable(LedgerKind.ADVANCES, str(e))
        return JSONResponse(status_code=503, content=unavailable.model_dump(mode="json"))

    return aggregate.model_copy(
        update={"summaries": filter_summaries(aggregate.summaries, search, customer_id)}
    )

@router.get("/customer/{customer_id}", response_model=List[AdvanceResponse])
async def list_customer_advances(customer_id: str, db = Depends(get_db)):
    """All advances of one customer, paid and unpaid"""
    if not ObjectId.is_valid(customer_id):
        raise HTTPException(status_code=422, detail=f"Invalid customer id: {customer_id}")
    try:
        advances = await AdvanceRepository(db).list_for_customer(customer_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    return [AdvanceResponse.from_record(a) for a in advances]

@router.put("/repaid/{advance_id}", response_model=AdvanceResponse)
async def mark_advance_repaid(advance_id: str):
    """Mark a pending advance as repaid"""
    try:
        advance = await RepaymentService.mark_advance_repaid(advance_id)
    except LedgerError as e:
        logger.error(f"Error marking advance {advance_id} repaid: {str(e)}")
        raise to_http_exception(e) from e
    return AdvanceResponse.from_record(advance)

@router.get("/{advance_id}", response_model=AdvanceResponse)
async def get_advance(advance_id: str, db = Depends(get_db)):
    """Get an advance by ID"""
    try:
        advance = await AdvanceRepository(db).get(advance_id)
    except LedgerError as e:
        raise to_http_exception(e) from e
    if not advance:
        raise HTTPException(status_code=404, detail="Advance not found")
    return AdvanceResponse.from_record(advance)
