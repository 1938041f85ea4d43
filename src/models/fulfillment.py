"""Value types passed between fulfillment steps."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CartLine:
    """One row of a customer's cart as read at notification time."""

    customer_id: int
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    stock: int
    image_url: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CatalogProduct:
    """Catalog entry used by the fallback item matcher."""

    id: int
    name: str
    price: Decimal


@dataclass(frozen=True)
class OrderLine:
    """A (product, quantity, unit price) tuple to materialize as an order item."""

    product_id: int
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class ShippingQuote:
    """Shipping option chosen at checkout, carried in the payment metadata."""

    name: str | None
    cost: Decimal | None
    lead_time_days: int | None
