import logging
from typing import Optional, Sequence

from creditbook.core.errors import RosterFetchError
from creditbook.db.session import get_database
from creditbook.models.customer import Customer
from creditbook.models.summary import LedgerAggregate
from creditbook.repositories.customer_repo import CustomerRepository
from creditbook.repositories.ledger_repo import AdvanceRepository, DebtRepository, LedgerRepository
from creditbook.services.aggregation import CancellationToken, LedgerAggregator

logger = logging.getLogger(__name__)


class AggregationService:
    @staticmethod
    async def aggregate_debts(
        customers: Optional[Sequence[Customer]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> LedgerAggregate:
        """Who owes what: customers ranked by unpaid debt."""
        db = await get_database()
        return await AggregationService._aggregate(DebtRepository(db), db, customers, cancel_token)

    @staticmethod
    async def aggregate_advances(
        customers: Optional[Sequence[Customer]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> LedgerAggregate:
        """Who has pending float: customers ranked by pending advance amount."""
        db = await get_database()
        return await AggregationService._aggregate(AdvanceRepository(db), db, customers, cancel_token)

    @staticmethod
    async def _aggregate(
        ledger_repo: LedgerRepository,
        db,
        customers: Optional[Sequence[Customer]],
        cancel_token: Optional[CancellationToken],
    ) -> LedgerAggregate:
        if customers is None:
            try:
                customers = await CustomerRepository(db).list_customers()
            except RosterFetchError as e:
                logger.error("Aggregation of %s aborted: %s", ledger_repo.kind.value, e)
                raise

        aggregator = LedgerAggregator(ledger_repo.kind, ledger_repo.list_for_customer)
        return await aggregator.aggregate(customers, cancel_token=cancel_token)
