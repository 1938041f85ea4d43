"""Database model definitions."""

from src.models.cart import Cart, CartItem
from src.models.customer import Customer
from src.models.fulfillment import CartLine, CatalogProduct, OrderLine, ShippingQuote
from src.models.order import Order, OrderItem, OrderStatus
from src.models.payment_transaction import PaymentTransaction
from src.models.product import Product

__all__ = [
    "Customer",
    "Product",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentTransaction",
    "CartLine",
    "CatalogProduct",
    "OrderLine",
    "ShippingQuote",
]
