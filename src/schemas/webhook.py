"""Pagar.me webhook payload schemas.

The provider sends many event types to the same endpoint. Only
``order.paid`` is validated in depth; every other event is kept as an
``IgnoredNotification`` so it can be acknowledged without further checks.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)

logger = logging.getLogger(__name__)

ORDER_PAID = "order.paid"
IGNORED = "ignored"


class NotificationMetadata(BaseModel):
    """Correlation data attached when the payment link was created.

    Every value arrives as a string; blank or unparseable values mean "not
    provided", so customer resolution falls back to the email.
    """

    model_config = ConfigDict(extra="ignore")

    cliente_id: int | None = Field(default=None, description="Internal customer id")
    frete_nome: str | None = Field(default=None, description="Shipping option name")
    frete_valor: Decimal | None = Field(default=None, description="Shipping cost in currency units")
    frete_prazo_dias: int | None = Field(default=None, description="Shipping lead time in days")
    endereco_entrega: str | None = Field(default=None, description="Delivery address")

    @field_validator("*", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cliente_id", "frete_prazo_dias", mode="before")
    @classmethod
    def unparseable_int_as_none(cls, value: Any, info: ValidationInfo) -> Any:
        # A bad correlation value must not reject a paid order
        if value is None or (isinstance(value, int) and not isinstance(value, bool)):
            return value
        if isinstance(value, str):
            if not value.strip():
                return None
            if value.strip().isdigit():
                return value.strip()
        logger.warning("Ignoring unparseable metadata %s=%r", info.field_name, value)
        return None

    @field_validator("frete_valor", mode="before")
    @classmethod
    def unparseable_amount_as_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, Decimal):
            return value
        if isinstance(value, str) and not value.strip():
            return None
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            logger.warning("Ignoring unparseable metadata frete_valor=%r", value)
            return None
        return amount


class Integration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metadata: NotificationMetadata | None = None


class CustomerAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    street: str | None = None


class NotificationCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    address: CustomerAddress | None = None


class Charge(BaseModel):
    """A charge attempt; the first one describes how the order was paid."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    status: str | None = None
    payment_method: str = Field(default="unknown", description="credit_card, pix, boleto...")
    installments: int = Field(default=1, ge=1)

    @field_validator("payment_method", mode="before")
    @classmethod
    def missing_method(cls, value: Any) -> Any:
        return value or "unknown"

    @field_validator("installments", mode="before")
    @classmethod
    def missing_installments(cls, value: Any) -> Any:
        # pix and boleto charges report no installments
        return value or 1


class NotificationItem(BaseModel):
    """Line item as described by the provider (free text, minor-unit amount)."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    description: str | None = None
    quantity: int = Field(default=1, ge=1)
    amount: int = Field(default=0, ge=0, description="Line total in minor units")

    @field_validator("quantity", mode="before")
    @classmethod
    def missing_quantity(cls, value: Any) -> Any:
        return value or 1

    @property
    def label(self) -> str:
        """Text used to find the matching catalog product."""
        return (self.description or self.name or "").strip()


class OrderPaidData(BaseModel):
    """The ``data`` object of an ``order.paid`` event."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1, description="Provider order id, used as transaction id")
    code: str | None = Field(default=None, description="Payment link id")
    amount: int = Field(ge=0, description="Total paid in minor units")
    currency: str | None = None
    status: str | None = None
    metadata: NotificationMetadata | None = None
    integration: Integration | None = None
    customer: NotificationCustomer | None = None
    charges: list[Charge] = Field(default_factory=list)
    items: list[NotificationItem] = Field(default_factory=list)

    @property
    def correlation(self) -> NotificationMetadata:
        """Metadata merged field by field, ``data.metadata`` winning over ``data.integration.metadata``."""
        merged: dict[str, Any] = {}
        if self.integration is not None and self.integration.metadata is not None:
            merged.update(self.integration.metadata.model_dump(exclude_none=True))
        if self.metadata is not None:
            merged.update(self.metadata.model_dump(exclude_none=True))
        return NotificationMetadata(**merged)

    @property
    def customer_email(self) -> str | None:
        if self.customer is None or not self.customer.email:
            return None
        return self.customer.email.strip() or None

    @property
    def delivery_address(self) -> str | None:
        if self.correlation.endereco_entrega:
            return self.correlation.endereco_entrega
        if self.customer is not None and self.customer.address is not None:
            return self.customer.address.street or None
        return None

    @property
    def primary_charge(self) -> Charge:
        return self.charges[0] if self.charges else Charge()


class OrderPaidNotification(BaseModel):
    """A confirmed payment; the only event that triggers fulfillment."""

    type: Literal["order.paid"]
    data: OrderPaidData


class IgnoredNotification(BaseModel):
    """Any other event type. Acknowledged, never processed."""

    type: str
    data: Any = None


def _notification_tag(value: Any) -> str | None:
    if isinstance(value, dict):
        event_type = value.get("type")
    else:
        event_type = getattr(value, "type", None)
    if not isinstance(event_type, str):
        return None
    return ORDER_PAID if event_type == ORDER_PAID else IGNORED


PaymentNotification = Annotated[
    Union[
        Annotated[OrderPaidNotification, Tag(ORDER_PAID)],
        Annotated[IgnoredNotification, Tag(IGNORED)],
    ],
    Discriminator(_notification_tag),
]

_notification_adapter: TypeAdapter[PaymentNotification] = TypeAdapter(PaymentNotification)


def decode_payload(payload: bytes | str) -> Any:
    """Decode a raw webhook body.

    Raises:
        ValueError: If the body is not valid UTF-8 JSON.
    """
    return json.loads(payload)


def validate_notification(document: Any) -> OrderPaidNotification | IgnoredNotification:
    """Validate a decoded webhook body into one of the notification variants.

    Args:
        document: Output of ``decode_payload``.

    Returns:
        The validated notification variant.

    Raises:
        pydantic.ValidationError: If the document does not have a valid shape.
    """
    return _notification_adapter.validate_python(document)
