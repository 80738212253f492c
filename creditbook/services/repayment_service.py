"""
Repayment state machine.

    pending ──mark_repaid──▶ repaid   (terminal)

There is no way back to pending. Marking an already repaid record raises
AlreadyRepaidError instead of succeeding silently. Nothing is cached here;
the effect shows up on the next aggregation pass.
"""

import logging
from typing import Dict, FrozenSet

from creditbook.core.errors import (
    AlreadyRepaidError,
    RecordNotFoundError,
    StoreReadError,
    WriteError,
)
from creditbook.db.session import get_database
from creditbook.models.ledger import AdvanceRecord, DebtRecord, LedgerRecord, RecordStatus
from creditbook.repositories.ledger_repo import AdvanceRepository, DebtRepository, LedgerRepository

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[RecordStatus, FrozenSet[RecordStatus]] = {
    RecordStatus.PENDING: frozenset({RecordStatus.REPAID}),
    RecordStatus.REPAID: frozenset(),
}


def can_transition(current: RecordStatus, target: RecordStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_repayable(record: LedgerRecord) -> None:
    """Raise AlreadyRepaidError unless `record` may move to repaid."""
    if not can_transition(record.status, RecordStatus.REPAID):
        raise AlreadyRepaidError(str(record.id))


class RepaymentService:
    @staticmethod
    async def mark_debt_repaid(debt_id: str) -> DebtRecord:
        db = await get_database()
        return await RepaymentService._mark_repaid(DebtRepository(db), debt_id)

    @staticmethod
    async def mark_advance_repaid(advance_id: str) -> AdvanceRecord:
        db = await get_database()
        return await RepaymentService._mark_repaid(AdvanceRepository(db), advance_id)

    @staticmethod
    async def _mark_repaid(repo: LedgerRepository, record_id: str) -> LedgerRecord:
        try:
            record = await repo.get(record_id)
        except StoreReadError as e:
            raise WriteError(f"Could not load {record_id}: {e}") from e
        if record is None:
            raise RecordNotFoundError(record_id)

        ensure_repayable(record)

        # The store update is conditional on repaid != true, so a
        # concurrent repayment still ends in AlreadyRepaidError.
        updated = await repo.mark_repaid(record_id)
        logger.info("Marked %s record %s repaid", repo.kind.value, record_id)
        return updated
