"""Payment transaction table mapping."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base


class PaymentTransaction(Base):
    """Provider payment recorded against an order (``TransacaoPagamento``).

    ``provider_transaction_id`` is unique: a redelivered webhook cannot
    produce a second financial record.
    """

    __tablename__ = "TransacaoPagamento"

    id: Mapped[int] = mapped_column("id_transacao", primary_key=True)
    order_id: Mapped[int] = mapped_column(
        "id_pedido", ForeignKey("Pedido.id_pedido"), unique=True, index=True
    )
    provider_transaction_id: Mapped[str] = mapped_column(
        "transaction_id_pagarme", String(100), unique=True, index=True
    )
    status: Mapped[str] = mapped_column("status", String(50))
    payment_method: Mapped[str] = mapped_column("metodo_pagamento", String(50))
    amount_cents: Mapped[int] = mapped_column("valor_centavos", Integer)
    installments: Mapped[int] = mapped_column("parcelas", Integer, default=1)
    payment_link_id: Mapped[str | None] = mapped_column("payment_link_id", String(100), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column("data_transacao", DateTime, server_default=func.now())
