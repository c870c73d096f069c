"""
Customer statistics maintenance.

Counters move only on two lifecycle transitions driven by local commands:
  - booking created            -> total_bookings += 1
  - active slot cancelled      -> total_bookings -= 1 (floored at 0),
                                  total_cancellations += 1
Completion leaves both counters alone.

The remote store has no atomic increment, so every adjustment is a
read-modify-write: fetch the row, compute the new values, write them back.
Concurrent writers can lose an increment; that is accepted. Adjustments are
best-effort: a failure is logged and swallowed so the booking command that
triggered it still succeeds.

Realtime echoes never reach this module, otherwise a local write would be
counted twice.
"""

from typing import Any, Mapping, Optional

from slotsync.core.config import get_settings
from slotsync.core.errors import classify_error
from slotsync.core.logging import get_logger
from slotsync.core.metrics import statistics_failures
from slotsync.models.adapters import customer_from_row
from slotsync.models.customer import Customer
from slotsync.services.interfaces.remote import RemoteSyncClient

logger = get_logger(__name__)


def adjust_counters(
    current: Mapping[str, Any],
    bookings_delta: int = 0,
    cancellations_delta: int = 0,
) -> dict[str, int]:
    """New counter values for a customer row, never below zero."""
    total_bookings = current.get("total_bookings") or 0
    total_cancellations = current.get("total_cancellations") or 0
    return {
        "total_bookings": max(0, total_bookings + bookings_delta),
        "total_cancellations": max(0, total_cancellations + cancellations_delta),
    }


class StatisticsMaintainer:
    def __init__(self, remote: RemoteSyncClient, customers_table: Optional[str] = None):
        self.remote = remote
        self.customers_table = customers_table or get_settings().CUSTOMERS_TABLE

    async def record_booking_created(self, customer_id: str) -> Optional[Customer]:
        return await self._adjust(customer_id, "booking_created", bookings_delta=1)

    async def record_slots_cancelled(self, customer_id: str, count: int = 1) -> Optional[Customer]:
        if count <= 0:
            return None
        return await self._adjust(
            customer_id,
            "slots_cancelled",
            bookings_delta=-count,
            cancellations_delta=count,
        )

    async def _adjust(
        self,
        customer_id: str,
        reason: str,
        bookings_delta: int = 0,
        cancellations_delta: int = 0,
    ) -> Optional[Customer]:
        """Returns the updated customer, or None when the adjustment failed."""
        try:
            row = await self.remote.fetch_one(self.customers_table, customer_id)
            values = adjust_counters(row, bookings_delta, cancellations_delta)
            updated = await self.remote.update(self.customers_table, customer_id, values)
            customer = customer_from_row(updated)
        except Exception as e:
            statistics_failures.inc()
            logger.error(
                "customer_statistics_failed",
                customer_id=customer_id,
                reason=reason,
                error_kind=classify_error(e).value,
                error=str(e),
            )
            return None

        logger.info(
            "customer_statistics_updated",
            customer_id=customer_id,
            reason=reason,
            total_bookings=customer.total_bookings,
            total_cancellations=customer.total_cancellations,
        )
        return customer
