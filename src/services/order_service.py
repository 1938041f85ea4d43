"""Order lookups for the storefront."""

import logging
from collections.abc import Callable

from src.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

PENDING = "pending"


class OrderService:
    """Read-only order queries."""

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork] | None = None) -> None:
        self._unit_of_work = unit_of_work_factory or UnitOfWork

    async def get_payment_status(self, payment_link_id: str) -> tuple[str, int | None]:
        """Get the status of the order paid through a payment link.

        Args:
            payment_link_id: Provider payment-link code.

        Returns:
            tuple: (status, order_id). Status is ``pending`` and order_id None
            until the payment webhook has been fulfilled.
        """
        async with self._unit_of_work() as uow:
            order = await uow.find_order_by_payment_link(payment_link_id)

        if order is None:
            logger.debug("No order recorded yet for payment link %s", payment_link_id)
            return PENDING, None
        return order.status, order.id
