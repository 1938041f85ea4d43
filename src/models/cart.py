"""Shopping cart table mappings."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database import Base


class Cart(Base):
    """One cart per customer (``Carrinho``)."""

    __tablename__ = "Carrinho"

    id: Mapped[int] = mapped_column("id_carrinho", primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        "id_cliente", ForeignKey("Cliente.id_cliente"), unique=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        "data_criacao", DateTime, server_default=func.now()
    )

    items: Mapped[list["CartItem"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
    )


class CartItem(Base):
    """A product line inside a cart (``ItemCarrinho``)."""

    __tablename__ = "ItemCarrinho"
    __table_args__ = (UniqueConstraint("id_carrinho", "id_produto"),)

    id: Mapped[int] = mapped_column("id_item_carrinho", primary_key=True)
    cart_id: Mapped[int] = mapped_column("id_carrinho", ForeignKey("Carrinho.id_carrinho"), index=True)
    product_id: Mapped[int] = mapped_column("id_produto", ForeignKey("Produto.id_produto"))
    quantity: Mapped[int] = mapped_column("quantidade", Integer, default=1)
    price_when_added: Mapped[Decimal | None] = mapped_column(
        "preco_unitario_no_momento_adicao", Numeric(10, 2), nullable=True
    )

    cart: Mapped["Cart"] = relationship(back_populates="items")
