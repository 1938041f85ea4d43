"""Product catalog table mapping."""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base


class Product(Base):
    """Catalog product (``Produto``).

    ``stock`` is decremented by the fulfillment pipeline without a floor
    check, so it may go negative when a paid sale oversells.
    """

    __tablename__ = "Produto"

    id: Mapped[int] = mapped_column("id_produto", primary_key=True)
    name: Mapped[str] = mapped_column("nome", String(255))

    # money => NUMERIC, not FLOAT
    price: Mapped[Decimal] = mapped_column("preco", Numeric(10, 2), default=Decimal("0.00"))
    stock: Mapped[int] = mapped_column("estoque", Integer, default=0)
    image_url: Mapped[str | None] = mapped_column("imagemUrl", String(500), nullable=True)
