"""Order Pydantic schemas for API responses."""

from pydantic import BaseModel, ConfigDict, Field


class PaymentStatusResponse(BaseModel):
    """Schema for GET /orders/payment-status/{payment_link_id}."""

    model_config = ConfigDict(from_attributes=True)

    payment_link_id: str = Field(description="Provider payment link code")
    status: str = Field(description="Order status, or 'pending' when no payment was recorded yet")
    order_id: int | None = Field(default=None, description="Created order id, once fulfilled")
