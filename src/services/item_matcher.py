"""Best-effort reconstruction of purchased items from provider free text.

Used only when the customer's cart was already empty when the payment
notification arrived. Matching is a case-insensitive substring test of
the provider's item text against catalog product names; items without a
match are dropped.
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from src.models.fulfillment import CatalogProduct, OrderLine
from src.schemas.webhook import NotificationItem

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def find_product(catalog: Sequence[CatalogProduct], text: str) -> CatalogProduct | None:
    """Return the first catalog product whose name contains ``text``.

    Args:
        catalog: Products in lookup order (ascending id).
        text: Provider-supplied item name or description.

    Returns:
        CatalogProduct | None: The first match, or None for blank text or no match.
    """
    needle = text.strip().casefold()
    if not needle:
        return None
    for product in catalog:
        if needle in product.name.casefold():
            return product
    return None


def unit_price_from_minor_units(amount: int, quantity: int) -> Decimal:
    """Convert a line total in minor units to a per-unit price in currency units."""
    return (Decimal(amount) / 100 / quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def match_items(
    catalog: Sequence[CatalogProduct],
    items: Iterable[NotificationItem],
) -> list[OrderLine]:
    """Build order lines for every provider item that matches a catalog product.

    The unit price is derived from what the provider actually charged, not
    from the catalog price.
    """
    lines: list[OrderLine] = []
    for item in items:
        product = find_product(catalog, item.label)
        if product is None:
            logger.warning("No catalog product matches provider item %r, dropping it", item.label)
            continue
        lines.append(
            OrderLine(
                product_id=product.id,
                quantity=item.quantity,
                unit_price=unit_price_from_minor_units(item.amount, item.quantity),
            )
        )
    return lines


def merge_lines(lines: Iterable[OrderLine]) -> list[OrderLine]:
    """Collapse lines for the same product into one, keeping first-seen order.

    Quantities are summed and the unit price becomes the quantity-weighted
    average, rounded to cents.
    """
    quantities: dict[int, int] = {}
    totals: dict[int, Decimal] = {}
    for line in lines:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity
        totals[line.product_id] = totals.get(line.product_id, Decimal("0")) + line.unit_price * line.quantity

    return [
        OrderLine(
            product_id=product_id,
            quantity=quantity,
            unit_price=(totals[product_id] / quantity).quantize(CENT, rounding=ROUND_HALF_UP),
        )
        for product_id, quantity in quantities.items()
    ]
