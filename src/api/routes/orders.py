"""Order API routes."""

from fastapi import APIRouter

from src.api.deps import CurrentUser, OrderServiceDep
from src.schemas.order import PaymentStatusResponse

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get(
    "/payment-status/{payment_link_id}",
    response_model=PaymentStatusResponse,
    summary="Get payment status by payment link",
    description="Returns the order status for a payment link, or 'pending' until the payment webhook is processed.",
)
async def get_payment_status(
    payment_link_id: str,
    user: CurrentUser,
    service: OrderServiceDep,
) -> PaymentStatusResponse:
    """Poll the outcome of a checkout after redirecting to the provider.

    Args:
        payment_link_id: Provider payment link code.
        user: Authenticated customer or employee.
        service: Order service.

    Returns:
        PaymentStatusResponse: Current status and order id if created.
    """
    order_status, order_id = await service.get_payment_status(payment_link_id)
    return PaymentStatusResponse(
        payment_link_id=payment_link_id,
        status=order_status,
        order_id=order_id,
    )
