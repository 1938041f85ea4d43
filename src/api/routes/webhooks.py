"""Webhook API routes for the payment provider."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from src.api.deps import FulfillmentServiceDep
from src.api.middleware.error_handler import InvalidPayloadError, MalformedNotificationError
from src.schemas.webhook import OrderPaidNotification, decode_payload, validate_notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post(
    "/pagarme",
    status_code=status.HTTP_200_OK,
    response_class=PlainTextResponse,
    summary="Handle Pagar.me webhooks",
    description="Receives payment notifications. Only order.paid triggers order fulfillment.",
)
async def pagarme_webhook(request: Request, service: FulfillmentServiceDep) -> PlainTextResponse:
    """Handle Pagar.me webhook events.

    The body is read raw and validated once here. Fulfillment problems are
    logged and still acknowledged with ``200 OK`` so the provider does not
    keep redelivering; only undecodable bodies and unexpected faults
    answer 500.

    Args:
        request: FastAPI request object for reading the raw body.
        service: Fulfillment service.

    Returns:
        PlainTextResponse: ``OK``.

    Raises:
        InvalidPayloadError: 500 if the body is not JSON.
        MalformedNotificationError: 400 if the JSON is not a notification.
    """
    payload = await request.body()
    logger.info("Received Pagar.me webhook (%d bytes)", len(payload))

    try:
        document = decode_payload(payload)
    except ValueError as e:
        raise InvalidPayloadError() from e

    try:
        notification = validate_notification(document)
    except ValidationError as e:
        raise MalformedNotificationError(
            details=e.errors(include_url=False, include_input=False),
        ) from e

    if isinstance(notification, OrderPaidNotification):
        result = await service.fulfill_order_paid(notification.data)
        logger.info(
            "Processed order.paid %s: %s (order=%s)",
            notification.data.id,
            result.outcome.value,
            result.order_id,
        )
    else:
        # Acknowledge everything else so the provider stops retrying
        logger.info("Ignoring webhook event: %s", notification.type)

    return PlainTextResponse("OK")
