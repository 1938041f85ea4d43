"""Transactional data access for the fulfillment pipeline."""

import logging
from decimal import Decimal
from types import TracebackType

from sqlalchemy import delete, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction, async_sessionmaker

from src.core.config import get_settings
from src.core.database import get_session_factory
from src.models import (
    Cart,
    CartItem,
    CartLine,
    CatalogProduct,
    Customer,
    Order,
    OrderItem,
    PaymentTransaction,
    Product,
)

logger = logging.getLogger(__name__)


class FulfillmentError(Exception):
    """Raised when a write cannot be applied as requested."""


class UnitOfWork:
    """One database transaction on one pooled connection.

    Use as an async context manager. Writes only persist after an explicit
    ``commit()``; leaving the block without committing (or with an
    exception) rolls everything back. The connection is returned to the
    pool on every exit path.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        cart_clear_procedure: str | None = None,
    ) -> None:
        self._session_factory = session_factory or get_session_factory()
        if cart_clear_procedure is None:
            cart_clear_procedure = get_settings().cart_clear_procedure
        self._cart_clear_procedure = cart_clear_procedure
        self._session: AsyncSession | None = None
        self._transaction: AsyncSessionTransaction | None = None
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self._transaction = await self._session.begin()
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if not self._committed:
                await self.rollback()
        finally:
            if self._session is not None:
                await self._session.close()
            self._session = None
            self._transaction = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork used outside of 'async with'")
        return self._session

    async def commit(self) -> None:
        if self._transaction is None:
            raise RuntimeError("No transaction to commit")
        await self._transaction.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._session is not None:
            await self._session.rollback()

    # Reads

    async def transaction_exists(self, provider_transaction_id: str) -> bool:
        result = await self.session.execute(
            select(PaymentTransaction.id)
            .where(PaymentTransaction.provider_transaction_id == provider_transaction_id)
            .limit(1)
        )
        return result.first() is not None

    async def find_customer_id_by_email(self, email: str) -> int | None:
        """Exact-match email lookup, lowest id first."""
        result = await self.session.execute(
            select(Customer.id).where(Customer.email == email).order_by(Customer.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def read_cart(self, customer_id: int) -> list[CartLine]:
        """Read the customer's cart with current product prices and stock."""
        result = await self.session.execute(
            select(
                CartItem.product_id.label("product_id"),
                CartItem.quantity.label("quantity"),
                Product.name.label("name"),
                Product.price.label("price"),
                Product.stock.label("stock"),
                Product.image_url.label("image_url"),
            )
            .join(Cart, CartItem.cart_id == Cart.id)
            .join(Product, CartItem.product_id == Product.id)
            .where(Cart.customer_id == customer_id)
            .order_by(CartItem.id)
        )
        return [
            CartLine(
                customer_id=customer_id,
                product_id=row.product_id,
                product_name=row.name,
                unit_price=row.price,
                quantity=row.quantity,
                stock=row.stock,
                image_url=row.image_url,
            )
            for row in result
        ]

    async def load_catalog(self) -> list[CatalogProduct]:
        result = await self.session.execute(
            select(
                Product.id.label("id"),
                Product.name.label("name"),
                Product.price.label("price"),
            ).order_by(Product.id)
        )
        return [CatalogProduct(id=row.id, name=row.name, price=row.price) for row in result]

    async def find_order_by_payment_link(self, payment_link_id: str) -> Order | None:
        result = await self.session.execute(
            select(Order)
            .join(PaymentTransaction, PaymentTransaction.order_id == Order.id)
            .where(PaymentTransaction.payment_link_id == payment_link_id)
            .order_by(Order.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    # Writes

    async def insert_order(self, order: Order) -> Order:
        self.session.add(order)
        await self.session.flush()  # get order.id
        return order

    async def insert_order_item(
        self, order_id: int, product_id: int, quantity: int, unit_price: Decimal
    ) -> OrderItem:
        item = OrderItem(
            order_id=order_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
        )
        self.session.add(item)
        await self.session.flush()
        return item

    async def decrement_stock(self, product_id: int, quantity: int) -> None:
        """Subtract ``quantity`` from the product's stock. No floor check."""
        result = await self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise FulfillmentError(f"Product {product_id} not found for stock decrement")

    async def insert_payment_transaction(self, transaction: PaymentTransaction) -> PaymentTransaction:
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def clear_cart(self, customer_id: int) -> None:
        """Delete every cart line of the customer."""
        if self._cart_clear_procedure:
            await self.session.execute(
                text(f"CALL {self._cart_clear_procedure}(:customer_id)"),
                {"customer_id": customer_id},
            )
            return

        logger.debug("Clearing cart of customer %s", customer_id)
        cart_ids = select(Cart.id).where(Cart.customer_id == customer_id)
        await self.session.execute(
            delete(CartItem)
            .where(CartItem.cart_id.in_(cart_ids))
            .execution_options(synchronize_session=False)
        )
