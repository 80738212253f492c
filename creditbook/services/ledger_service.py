"""Creation pass-through: validate locally, then write to the ledger store."""

import logging
from typing import Optional, Sequence

from pymongo.errors import PyMongoError

from creditbook.core.errors import CustomerNotFoundError, WriteError
from creditbook.db.session import get_database
from creditbook.models.ledger import (
    AdvanceRecord,
    DebtRecord,
    LineItem,
    build_advance_record,
    build_debt_record,
)
from creditbook.repositories.customer_repo import CustomerRepository
from creditbook.repositories.ledger_repo import AdvanceRepository, DebtRepository

logger = logging.getLogger(__name__)


class LedgerService:
    @staticmethod
    async def create_debt(
        customer_id: str,
        line_items: Sequence[LineItem],
        total_cost: Optional[float] = None,
    ) -> DebtRecord:
        """
        Record a purchase on credit.

        Raises ValidationError before touching the database when the
        line items or the submitted total are invalid.
        """
        debt = build_debt_record(customer_id, line_items, total_cost=total_cost)

        db = await get_database()
        await LedgerService._ensure_customer(db, customer_id)
        created = await DebtRepository(db).create(debt)

        logger.info("Created debt %s for customer %s (%.2f)", created.id, customer_id, created.total_cost)
        return created

    @staticmethod
    async def create_advance(
        customer_id: str,
        amount: float,
        used_amount: float = 0.0,
        pending_amount: Optional[float] = None,
    ) -> AdvanceRecord:
        """Record cash handed to a customer against future use."""
        advance = build_advance_record(
            customer_id, amount, used_amount=used_amount, pending_amount=pending_amount
        )

        db = await get_database()
        await LedgerService._ensure_customer(db, customer_id)
        created = await AdvanceRepository(db).create(advance)

        logger.info("Created advance %s for customer %s (%.2f pending)", created.id, customer_id, created.pending_amount)
        return created

    @staticmethod
    async def _ensure_customer(db, customer_id: str) -> None:
        try:
            customer = await CustomerRepository(db).get_customer(customer_id)
        except PyMongoError as e:
            raise WriteError(f"Could not verify customer {customer_id}: {e}") from e
        if customer is None:
            raise CustomerNotFoundError(customer_id)
