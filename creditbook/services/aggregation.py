"""
Ledger fetch orchestration.

Core algorithm:
1. Snapshot the roster
2. Issue one ledger query per customer, at most `concurrency` in flight
3. Wait for every query to settle (success or failure)
4. Reduce each customer with compute_summary, drop "no balance" results
5. Rank descending by outstanding total (stable on ties)

A failed per-customer query only excludes that customer. A cancelled
pass never reaches the merge step.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from creditbook.core.config import settings
from creditbook.core.errors import AggregationCancelledError, RecordFetchError
from creditbook.models.customer import Customer
from creditbook.models.ledger import LedgerKind, LedgerRecord
from creditbook.models.summary import CustomerLedgerSummary, LedgerAggregate
from creditbook.services.balance import compute_summary

logger = logging.getLogger(__name__)

FetchRecords = Callable[[str], Awaitable[Sequence[LedgerRecord]]]
QueryOutcome = Union[Sequence[LedgerRecord], RecordFetchError]


class CancellationToken:
    """Signals an aggregation pass that its caller lost interest."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class LedgerAggregator:
    """Fans out per-customer ledger queries for one ledger kind and merges them."""

    def __init__(
        self,
        kind: LedgerKind,
        fetch_records: FetchRecords,
        concurrency: Optional[int] = None,
    ):
        if concurrency is None:
            concurrency = settings.AGGREGATION_CONCURRENCY
        if concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {concurrency}")

        self.kind = kind
        self.fetch_records = fetch_records
        self.concurrency = concurrency

    async def aggregate(
        self,
        customers: Sequence[Customer],
        cancel_token: Optional[CancellationToken] = None,
    ) -> LedgerAggregate:
        """
        Run one aggregation pass over `customers`.

        Raises AggregationCancelledError if `cancel_token` fires before
        every query has settled.
        """
        roster = list(customers)
        if cancel_token is not None and cancel_token.cancelled:
            raise AggregationCancelledError(f"{self.kind.value} aggregation cancelled before start")

        semaphore = asyncio.Semaphore(self.concurrency)
        tasks = [
            asyncio.ensure_future(self._fetch_one(customer, semaphore))
            for customer in roster
        ]
        outcomes = await self._join(tasks, cancel_token)

        return self._merge(roster, outcomes)

    async def _fetch_one(self, customer: Customer, semaphore: asyncio.Semaphore) -> QueryOutcome:
        customer_id = str(customer.id)
        async with semaphore:
            try:
                return await self.fetch_records(customer_id)
            except Exception as e:
                error = e if isinstance(e, RecordFetchError) else RecordFetchError(customer_id, e)
                logger.warning(
                    "Error fetching %s for customer %s: %s",
                    self.kind.value, customer_id, error,
                    extra={"customer_id": customer_id, "ledger": self.kind.value},
                )
                return error

    async def _join(
        self,
        tasks: List["asyncio.Future[QueryOutcome]"],
        cancel_token: Optional[CancellationToken],
    ) -> List[QueryOutcome]:
        """Barrier: returns only once every query has settled."""
        if not tasks:
            return []

        gathered = asyncio.gather(*tasks)
        waiter = asyncio.ensure_future(cancel_token.wait()) if cancel_token is not None else None
        try:
            if waiter is None:
                return await gathered

            await asyncio.wait({gathered, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if cancel_token.cancelled:
                raise AggregationCancelledError(f"{self.kind.value} aggregation cancelled")
            return gathered.result()
        except (asyncio.CancelledError, AggregationCancelledError):
            gathered.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(
                "Aggregation of %s cancelled with %d queries issued",
                self.kind.value, len(tasks),
                extra={"ledger": self.kind.value},
            )
            raise
        finally:
            if waiter is not None:
                waiter.cancel()

    def _merge(self, roster: List[Customer], outcomes: List[QueryOutcome]) -> LedgerAggregate:
        summaries: List[CustomerLedgerSummary] = []
        failed: List[str] = []

        for customer, outcome in zip(roster, outcomes):
            if isinstance(outcome, RecordFetchError):
                failed.append(str(customer.id))
                continue

            summary = compute_summary(str(customer.id), outcome, name=customer.name)
            if summary is None or summary.outstanding_total <= 0:
                continue
            summaries.append(summary)

        # list.sort is stable, also with reverse=True
        summaries.sort(key=lambda s: s.outstanding_total, reverse=True)
        grand_total = sum(s.outstanding_total for s in summaries)

        logger.info(
            "Aggregated %s: %d customers, %d included, %d failed, total %.2f",
            self.kind.value, len(roster), len(summaries), len(failed), grand_total,
            extra={"ledger": self.kind.value},
        )

        return LedgerAggregate(
            ledger=self.kind,
            summaries=summaries,
            grand_total=grand_total,
            customer_count=len(summaries),
            failed_customer_ids=failed,
        )


def filter_summaries(
    summaries: Sequence[CustomerLedgerSummary],
    search: Optional[str] = None,
    customer_id: Optional[str] = None,
) -> List[CustomerLedgerSummary]:
    """Narrow a ranked list by case-insensitive name search and/or exact customer id."""
    needle = search.strip().lower() if search else ""
    return [
        s for s in summaries
        if needle in s.name.lower()
        and (not customer_id or s.customer_id == customer_id)
    ]
