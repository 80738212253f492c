from fastapi import HTTPException, status

from creditbook.core.errors import (
    AlreadyRepaidError,
    CustomerNotFoundError,
    LedgerError,
    RecordNotFoundError,
    RosterFetchError,
    StoreReadError,
    ValidationError,
    WriteError,
)


def to_http_exception(error: LedgerError) -> HTTPException:
    """Map a ledger error onto the HTTP status the API reports for it."""
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, (CustomerNotFoundError, RecordNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, AlreadyRepaidError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, RosterFetchError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, (WriteError, StoreReadError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
