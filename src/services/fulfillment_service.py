"""Payment-confirmation order fulfillment."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from src.models import (
    CartLine,
    Order,
    OrderLine,
    OrderStatus,
    PaymentTransaction,
    ShippingQuote,
)
from src.schemas.webhook import OrderPaidData
from src.services.item_matcher import match_items, merge_lines
from src.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

TRANSACTION_STATUS_PAID = "paid"


class FulfillmentOutcome(str, Enum):
    """What happened to one ``order.paid`` notification."""

    FULFILLED = "fulfilled"
    RECONCILIATION_REQUIRED = "reconciliation_required"
    DUPLICATE = "duplicate"
    CUSTOMER_NOT_FOUND = "customer_not_found"
    IGNORED = "ignored"
    FAILED = "failed"


@dataclass
class FulfillmentResult:
    """Outcome of a fulfillment attempt, for logging and tests."""

    outcome: FulfillmentOutcome
    order_id: int | None = None
    line_item_count: int = 0


class FulfillmentService:
    """Turns a paid notification into order, stock, transaction and cart changes.

    Every write for one notification happens inside a single ``UnitOfWork``:
    the order and its items, the stock decrements, the payment transaction
    and the cart clearing are committed together or not at all.
    """

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork] | None = None) -> None:
        """Initialize fulfillment service.

        Args:
            unit_of_work_factory: Callable returning a fresh UnitOfWork. Defaults
                to one bound to the application's connection pool.
        """
        self._unit_of_work = unit_of_work_factory or UnitOfWork

    async def fulfill_order_paid(self, data: OrderPaidData) -> FulfillmentResult:
        """Process the ``data`` object of an ``order.paid`` event.

        Failures inside the transaction are rolled back, logged and reported
        as ``FAILED``; they never propagate. Errors raised by the idempotency
        check, which runs before the transaction, do propagate.

        Args:
            data: Validated notification data.

        Returns:
            FulfillmentResult: What was done with the notification.
        """
        if data.status and data.status != TRANSACTION_STATUS_PAID:
            logger.info("Order %s reported as paid with status %r, skipping", data.id, data.status)
            return FulfillmentResult(outcome=FulfillmentOutcome.IGNORED)

        async with self._unit_of_work() as uow:
            if await uow.transaction_exists(data.id):
                logger.info("Transaction %s already recorded, skipping duplicate delivery", data.id)
                return FulfillmentResult(outcome=FulfillmentOutcome.DUPLICATE)

        try:
            return await self._fulfill(data)
        except Exception:
            logger.exception("Fulfillment of provider order %s rolled back", data.id)
            return FulfillmentResult(outcome=FulfillmentOutcome.FAILED)

    async def _fulfill(self, data: OrderPaidData) -> FulfillmentResult:
        async with self._unit_of_work() as uow:
            customer_id = await self.resolve_customer(uow, data)
            if customer_id is None:
                logger.warning("No customer for provider order %s, nothing recorded", data.id)
                return FulfillmentResult(outcome=FulfillmentOutcome.CUSTOMER_NOT_FOUND)

            cart = await uow.read_cart(customer_id)
            if cart:
                logger.info("Customer %s: materializing %d cart line(s)", customer_id, len(cart))
                lines = self.lines_from_cart(cart)
            else:
                logger.info("Customer %s has an empty cart, matching provider items", customer_id)
                catalog = await uow.load_catalog()
                lines = match_items(catalog, data.items)

            status = OrderStatus.PAID if lines else OrderStatus.RECONCILIATION_REQUIRED
            order = await self.materialize_order(
                uow,
                customer_id=customer_id,
                shipping=self.shipping_quote(data),
                delivery_address=data.delivery_address,
                lines=lines,
                status=status,
            )
            order_id = order.id
            await self.record_transaction(uow, order_id, data)
            await self.clear_cart(uow, customer_id)
            await uow.commit()

        if status is OrderStatus.RECONCILIATION_REQUIRED:
            logger.error(
                "Order %s for provider order %s has no matched items and needs manual reconciliation",
                order_id,
                data.id,
            )
            return FulfillmentResult(
                outcome=FulfillmentOutcome.RECONCILIATION_REQUIRED,
                order_id=order_id,
            )

        line_item_count = len(merge_lines(lines))
        logger.info("Order %s created for customer %s (%d item(s))", order_id, customer_id, line_item_count)
        return FulfillmentResult(
            outcome=FulfillmentOutcome.FULFILLED,
            order_id=order_id,
            line_item_count=line_item_count,
        )

    async def resolve_customer(self, uow: UnitOfWork, data: OrderPaidData) -> int | None:
        """Find the internal customer id for a notification.

        The ``cliente_id`` correlation metadata wins; otherwise the customer
        email must match exactly.
        """
        customer_id = data.correlation.cliente_id
        if customer_id is not None:
            return customer_id

        email = data.customer_email
        if email is None:
            return None
        return await uow.find_customer_id_by_email(email)

    @staticmethod
    def lines_from_cart(cart: Sequence[CartLine]) -> list[OrderLine]:
        return [
            OrderLine(product_id=line.product_id, quantity=line.quantity, unit_price=line.unit_price)
            for line in cart
        ]

    @staticmethod
    def shipping_quote(data: OrderPaidData) -> ShippingQuote | None:
        metadata = data.correlation
        if metadata.frete_nome is None and metadata.frete_valor is None and metadata.frete_prazo_dias is None:
            return None
        return ShippingQuote(
            name=metadata.frete_nome,
            cost=metadata.frete_valor,
            lead_time_days=metadata.frete_prazo_dias,
        )

    async def materialize_order(
        self,
        uow: UnitOfWork,
        customer_id: int,
        shipping: ShippingQuote | None,
        delivery_address: str | None,
        lines: Sequence[OrderLine],
        status: OrderStatus = OrderStatus.PAID,
    ) -> Order:
        """Insert the order, one item per product, and decrement stock for each.

        Stock is decremented unconditionally: the sale has already been charged.
        """
        order = await uow.insert_order(
            Order(
                customer_id=customer_id,
                shipping_name=shipping.name if shipping else None,
                shipping_cost=shipping.cost if shipping else None,
                shipping_days=shipping.lead_time_days if shipping else None,
                status=status.value,
                delivery_address=delivery_address,
            )
        )
        for line in merge_lines(lines):
            await uow.insert_order_item(order.id, line.product_id, line.quantity, line.unit_price)
            await uow.decrement_stock(line.product_id, line.quantity)
        return order

    async def record_transaction(
        self, uow: UnitOfWork, order_id: int, data: OrderPaidData
    ) -> PaymentTransaction:
        charge = data.primary_charge
        return await uow.insert_payment_transaction(
            PaymentTransaction(
                order_id=order_id,
                provider_transaction_id=data.id,
                status=TRANSACTION_STATUS_PAID,
                payment_method=charge.payment_method,
                amount_cents=data.amount,
                installments=charge.installments,
                payment_link_id=data.code,
            )
        )

    async def clear_cart(self, uow: UnitOfWork, customer_id: int) -> None:
        await uow.clear_cart(customer_id)
        logger.debug("Cart of customer %s cleared", customer_id)
