"""Customer table mapping."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base


class Customer(Base):
    """Storefront customer (``Cliente``). Only the columns fulfillment reads."""

    __tablename__ = "Cliente"

    id: Mapped[int] = mapped_column("id_cliente", primary_key=True)
    name: Mapped[str | None] = mapped_column("nome", String(255), nullable=True)
    email: Mapped[str] = mapped_column("email", String(255), index=True)
