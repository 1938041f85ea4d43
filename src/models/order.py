"""Order and order line item table mappings."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database import Base


class OrderStatus(str, Enum):
    """Order status values written by the fulfillment pipeline."""

    PAID = "paid"
    RECONCILIATION_REQUIRED = "reconciliation_required"


class Order(Base):
    """Customer order (``Pedido``)."""

    __tablename__ = "Pedido"

    id: Mapped[int] = mapped_column("id_pedido", primary_key=True)
    customer_id: Mapped[int] = mapped_column("id_cliente", ForeignKey("Cliente.id_cliente"), index=True)
    shipping_name: Mapped[str | None] = mapped_column("frete_nome", String(100), nullable=True)
    shipping_cost: Mapped[Decimal | None] = mapped_column("frete_valor", Numeric(10, 2), nullable=True)
    shipping_days: Mapped[int | None] = mapped_column("frete_prazo_dias", Integer, nullable=True)
    status: Mapped[str] = mapped_column("status", String(50), default=OrderStatus.PAID.value)
    delivery_address: Mapped[str | None] = mapped_column("endereco_entrega", String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column("data_pedido", DateTime, server_default=func.now())

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
    )


class OrderItem(Base):
    """Order line with the unit price captured at purchase time (``ItemPedido``)."""

    __tablename__ = "ItemPedido"
    __table_args__ = (UniqueConstraint("id_pedido", "id_produto"),)

    id: Mapped[int] = mapped_column("id_item_pedido", primary_key=True)
    order_id: Mapped[int] = mapped_column("id_pedido", ForeignKey("Pedido.id_pedido"), index=True)
    product_id: Mapped[int] = mapped_column("id_produto", ForeignKey("Produto.id_produto"))
    quantity: Mapped[int] = mapped_column("quantidade", Integer, default=1)
    unit_price: Mapped[Decimal] = mapped_column("preco_unitario", Numeric(10, 2), default=Decimal("0.00"))

    order: Mapped["Order"] = relationship(back_populates="items")
